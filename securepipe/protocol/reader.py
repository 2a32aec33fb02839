"""
Secure reader: the decrypting half of a secure stream.

Frames are taken off the underlying stream according to the framing mode:
- length-prefixed: read the 4-byte length, then loop until the whole
  frame is buffered
- single-read: one underlying read is one frame, no reassembly

The nonce is the first 24 bytes of the frame, the rest is opened with
(peer public key, own private key). Plaintext is only ever released after
authentication succeeds.
"""

from typing import Optional

from ..crypto.box import FrameCodec
from ..transport.tcp import TransportError, read_exactly
from .frame import (
    DEFAULT_MAX_FRAME_SIZE,
    FRAMING_LENGTH_PREFIXED,
    FRAMING_MODES,
    LENGTH_PREFIX_SIZE,
    Frame,
    decode_length,
)


class SecureReader:
    """
    Decrypts frames from the underlying stream.
    
    A plaintext longer than the caller asked for is kept and returned by
    the following reads.
    """
    
    def __init__(self, stream, private_key: bytes, peer_public_key: bytes,
                 framing: str = FRAMING_LENGTH_PREFIXED,
                 max_frame_size: int = DEFAULT_MAX_FRAME_SIZE):
        """
        Initialize secure reader.
        
        Args:
            stream: Underlying stream with read(n) -> bytes
            private_key: Own 32-byte private key
            peer_public_key: Sender's 32-byte public key
            framing: One of FRAMING_MODES
            max_frame_size: Largest frame accepted from the peer
        """
        if framing not in FRAMING_MODES:
            raise ValueError(f"Unknown framing mode: {framing!r}")
        
        self.stream = stream
        self.framing = framing
        self.max_frame_size = max_frame_size
        self._codec = FrameCodec(private_key, peer_public_key)
        self._pending = b""
        self.frames_read = 0
    
    def read(self, n: int = -1) -> bytes:
        """
        Read decrypted data.
        
        Args:
            n: Maximum bytes to return; negative returns a whole frame
            
        Returns:
            Plaintext bytes; b"" at end of stream
            
        Raises:
            MalformedFrameError: If the frame is too short or too large
            AuthenticationError: If the frame fails authentication
            TransportError: If the stream fails or ends mid-frame
        """
        if n == 0:
            return b""
        
        if not self._pending:
            plaintext = self._read_frame()
            if plaintext is None:
                return b""
            self._pending = plaintext
        
        if n < 0 or n >= len(self._pending):
            data, self._pending = self._pending, b""
        else:
            data, self._pending = self._pending[:n], self._pending[n:]
        return data
    
    def readinto(self, buffer) -> int:
        """
        Read decrypted data into a writable buffer.
        
        Args:
            buffer: bytearray or memoryview to fill
            
        Returns:
            Number of bytes placed in buffer; 0 at end of stream
        """
        view = memoryview(buffer).cast('B')
        data = self.read(len(view))
        view[:len(data)] = data
        return len(data)
    
    def _read_frame(self) -> Optional[bytes]:
        """Read, authenticate and decrypt one frame. None means end of stream."""
        while True:
            if self.framing == FRAMING_LENGTH_PREFIXED:
                raw = self._read_length_prefixed()
            else:
                raw = self.stream.read(self.max_frame_size)
            
            if not raw:
                return None
            
            frame = Frame.from_bytes(raw)
            plaintext = self._codec.open(frame.sealed, frame.nonce)
            self.frames_read += 1
            
            # An empty write still produces a frame; skip it so b"" keeps meaning EOF
            if plaintext:
                return plaintext
    
    def _read_length_prefixed(self) -> bytes:
        prefix = read_exactly(self.stream, LENGTH_PREFIX_SIZE)
        if not prefix:
            return b""
        if len(prefix) < LENGTH_PREFIX_SIZE:
            raise TransportError("Stream ended inside a frame length prefix")
        
        frame_size = decode_length(prefix, self.max_frame_size)
        raw = read_exactly(self.stream, frame_size)
        if len(raw) < frame_size:
            raise TransportError(
                f"Stream ended mid-frame: got {len(raw)} of {frame_size} bytes"
            )
        return raw
