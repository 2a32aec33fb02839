"""
Secure connection: a secure reader and writer over one underlying stream.
"""

import threading

from ..transport.tcp import ConnectionClosedError
from .frame import DEFAULT_MAX_FRAME_SIZE, FRAMING_LENGTH_PREFIXED
from .reader import SecureReader
from .writer import SecureWriter


class SecureConnection:
    """
    Bidirectional secure stream.
    
    read/write delegate to the reader and writer; close() closes the
    underlying stream exactly once. Any operation after close raises
    ConnectionClosedError.
    """
    
    def __init__(self, stream, private_key: bytes, peer_public_key: bytes,
                 local_public_key: bytes = None,
                 framing: str = FRAMING_LENGTH_PREFIXED,
                 max_frame_size: int = DEFAULT_MAX_FRAME_SIZE):
        """
        Initialize secure connection.
        
        Args:
            stream: Underlying stream with read/write/close
            private_key: Own 32-byte private key
            peer_public_key: Peer's 32-byte public key
            local_public_key: Own public key, kept for inspection only
            framing: One of FRAMING_MODES, must match the peer
            max_frame_size: Largest frame sent or accepted
        """
        self.stream = stream
        self.local_public_key = local_public_key
        self.peer_public_key = peer_public_key
        self.reader = SecureReader(stream, private_key, peer_public_key,
                                   framing=framing, max_frame_size=max_frame_size)
        self.writer = SecureWriter(stream, private_key, peer_public_key,
                                   framing=framing, max_frame_size=max_frame_size)
        self._closed = False
        self._close_lock = threading.Lock()
    
    @property
    def closed(self) -> bool:
        return self._closed
    
    def read(self, n: int = -1) -> bytes:
        """Read decrypted data; b"" at end of stream."""
        self._check_open()
        return self.reader.read(n)
    
    def readinto(self, buffer) -> int:
        """Read decrypted data into buffer; returns the byte count."""
        self._check_open()
        return self.reader.readinto(buffer)
    
    def write(self, data: bytes) -> int:
        """Encrypt data and send it as one frame."""
        self._check_open()
        return self.writer.write(data)
    
    def close(self) -> None:
        """
        Close the underlying stream.
        
        Only the first call reaches the stream; its exceptions propagate.
        Later calls do nothing.
        """
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self.stream.close()
    
    def _check_open(self) -> None:
        if self._closed:
            raise ConnectionClosedError("Secure connection is closed")
    
    def __iter__(self):
        """Iterate over received plaintext chunks until end of stream."""
        while True:
            data = self.read()
            if not data:
                return
            yield data
    
    def __repr__(self):
        status = "closed" if self._closed else "open"
        return f"SecureConnection({self.stream!r}, {status})"
    
    def __enter__(self):
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
