"""
Frame structure and parsing for securepipe.

A frame carries one sealed plaintext buffer:

frame = nonce (24B) || sealed (ciphertext || tag (16B))

In length-prefixed framing each frame is preceded on the wire by

length = frame size (4B, unsigned big-endian)

Single-read framing sends the bare frame and relies on one underlying
read returning exactly one frame.
"""

import struct
from dataclasses import dataclass

from ..crypto.box import NONCE_SIZE, TAG_SIZE, MalformedFrameError

# Constants
FRAME_OVERHEAD = NONCE_SIZE + TAG_SIZE
MIN_FRAME_SIZE = FRAME_OVERHEAD
LENGTH_PREFIX = struct.Struct('!I')
LENGTH_PREFIX_SIZE = LENGTH_PREFIX.size
DEFAULT_MAX_FRAME_SIZE = 64 * 1024 + FRAME_OVERHEAD

FRAMING_LENGTH_PREFIXED = 'length-prefixed'
FRAMING_SINGLE_READ = 'single-read'
FRAMING_MODES = (FRAMING_LENGTH_PREFIXED, FRAMING_SINGLE_READ)


@dataclass
class Frame:
    """
    One sealed frame.
    
    Fields:
        nonce: 24-byte per-frame nonce
        sealed: Authenticated ciphertext including the tag
    """
    nonce: bytes
    sealed: bytes
    
    def __post_init__(self):
        """Validate frame fields."""
        if len(self.nonce) != NONCE_SIZE:
            raise MalformedFrameError(f"Nonce must be {NONCE_SIZE} bytes, got {len(self.nonce)}")
        if len(self.sealed) < TAG_SIZE:
            raise MalformedFrameError(
                f"Sealed payload must be at least {TAG_SIZE} bytes, got {len(self.sealed)}"
            )
    
    @property
    def size(self) -> int:
        """Get frame size in bytes, excluding any length prefix."""
        return NONCE_SIZE + len(self.sealed)
    
    @property
    def plaintext_size(self) -> int:
        """Size of the plaintext this frame decrypts to."""
        return len(self.sealed) - TAG_SIZE
    
    def to_bytes(self) -> bytes:
        """Serialize frame to bytes."""
        return self.nonce + self.sealed
    
    @classmethod
    def from_bytes(cls, data: bytes) -> 'Frame':
        """
        Deserialize frame from bytes.
        
        Raises:
            MalformedFrameError: If data is shorter than nonce + tag
        """
        if len(data) < MIN_FRAME_SIZE:
            raise MalformedFrameError(
                f"Frame too short: {len(data)} bytes, need at least {MIN_FRAME_SIZE}"
            )
        
        data = bytes(data)
        return cls(nonce=data[:NONCE_SIZE], sealed=data[NONCE_SIZE:])
    
    def __len__(self) -> int:
        """Get frame size."""
        return self.size


def encode_length(frame_size: int) -> bytes:
    """Pack a frame size into its 4-byte wire prefix."""
    return LENGTH_PREFIX.pack(frame_size)


def decode_length(prefix: bytes, max_frame_size: int = DEFAULT_MAX_FRAME_SIZE) -> int:
    """
    Unpack and bound-check a length prefix.
    
    Args:
        prefix: 4 raw bytes read from the wire
        max_frame_size: Largest acceptable frame
        
    Returns:
        Frame size announced by the peer
        
    Raises:
        MalformedFrameError: If the size cannot be a valid frame
    """
    if len(prefix) != LENGTH_PREFIX_SIZE:
        raise MalformedFrameError(f"Length prefix must be {LENGTH_PREFIX_SIZE} bytes")
    
    (frame_size,) = LENGTH_PREFIX.unpack(prefix)
    if frame_size < MIN_FRAME_SIZE:
        raise MalformedFrameError(f"Announced frame too short: {frame_size} bytes")
    if frame_size > max_frame_size:
        raise MalformedFrameError(
            f"Announced frame too large: {frame_size} bytes (max {max_frame_size})"
        )
    return frame_size


def build_wire_frame(frame: Frame, framing: str = FRAMING_LENGTH_PREFIXED) -> bytes:
    """
    Produce the exact bytes to put on the wire for one frame.
    
    Args:
        frame: Frame to send
        framing: One of FRAMING_MODES
        
    Returns:
        Wire bytes, with a length prefix in length-prefixed mode
    """
    if framing == FRAMING_LENGTH_PREFIXED:
        return encode_length(frame.size) + frame.to_bytes()
    if framing == FRAMING_SINGLE_READ:
        return frame.to_bytes()
    raise ValueError(f"Unknown framing mode: {framing!r}")


def max_plaintext_size(max_frame_size: int = DEFAULT_MAX_FRAME_SIZE) -> int:
    """Largest plaintext that fits in one frame."""
    return max_frame_size - FRAME_OVERHEAD

