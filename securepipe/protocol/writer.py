"""
Secure writer: the encrypting half of a secure stream.

For each write call:
1. Generate a fresh 24-byte nonce from the secure random source
2. Seal the plaintext with (own private key, peer public key)
3. Build the frame nonce || sealed (length-prefixed if configured)
4. Issue exactly one write of the whole frame to the underlying stream
"""

from ..crypto.box import FrameCodec, NONCE_SIZE
from ..crypto.utils import generate_random_bytes
from .frame import (
    DEFAULT_MAX_FRAME_SIZE,
    FRAMING_LENGTH_PREFIXED,
    FRAMING_MODES,
    Frame,
    build_wire_frame,
    max_plaintext_size,
)


class SecureWriter:
    """
    Encrypts each written buffer into one frame on the underlying stream.
    
    Writes are not buffered or batched. A failed underlying write leaves
    the stream's framing in an unknown state; the caller must abort the
    connection rather than retry.
    """
    
    def __init__(self, stream, private_key: bytes, peer_public_key: bytes,
                 framing: str = FRAMING_LENGTH_PREFIXED,
                 max_frame_size: int = DEFAULT_MAX_FRAME_SIZE):
        """
        Initialize secure writer.
        
        Args:
            stream: Underlying stream with write(data) -> int
            private_key: Own 32-byte private key
            peer_public_key: Receiver's 32-byte public key
            framing: One of FRAMING_MODES
            max_frame_size: Largest frame the receiver accepts
        """
        if framing not in FRAMING_MODES:
            raise ValueError(f"Unknown framing mode: {framing!r}")
        
        self.stream = stream
        self.framing = framing
        self.max_frame_size = max_frame_size
        self._codec = FrameCodec(private_key, peer_public_key)
        self.frames_written = 0
    
    def write(self, plaintext: bytes) -> int:
        """
        Encrypt plaintext and send it as one frame.
        
        Args:
            plaintext: Data to send
            
        Returns:
            Number of plaintext bytes written
            
        Raises:
            ValueError: If plaintext does not fit in one frame
            EntropyError: If no nonce can be generated
            TransportError: If the underlying write fails
        """
        limit = max_plaintext_size(self.max_frame_size)
        if len(plaintext) > limit:
            raise ValueError(f"Plaintext too large for one frame: {len(plaintext)} > {limit} bytes")
        
        nonce = generate_random_bytes(NONCE_SIZE)
        frame = Frame(nonce=nonce, sealed=self._codec.seal(plaintext, nonce))
        
        self.stream.write(build_wire_frame(frame, self.framing))
        self.frames_written += 1
        return len(plaintext)
