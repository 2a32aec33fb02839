"""
Key pair generation for securepipe.

Key pairs are Curve25519 (X25519) keys in their raw 32-byte form. They are
generated with the `cryptography` package and consumed by the NaCl box in
`securepipe.crypto.box`, which accepts the same raw encoding.
"""

from dataclasses import dataclass

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from .utils import EntropyError, fingerprint, format_hex, parse_hex

KEY_SIZE = 32


@dataclass(frozen=True)
class KeyPair:
    """
    A raw X25519 key pair.
    
    Fields:
        public: 32-byte public key, sent in the clear during the handshake
        private: 32-byte private key, never leaves the process
    """
    public: bytes
    private: bytes
    
    def __post_init__(self):
        """Validate key sizes."""
        if len(self.public) != KEY_SIZE:
            raise ValueError(f"Public key must be {KEY_SIZE} bytes, got {len(self.public)}")
        if len(self.private) != KEY_SIZE:
            raise ValueError(f"Private key must be {KEY_SIZE} bytes, got {len(self.private)}")
    
    def fingerprint(self) -> str:
        """Short hex fingerprint of the public key."""
        return fingerprint(self.public)
    
    def to_hex(self) -> dict:
        """Hex encoding of both halves, for printing."""
        return {
            'public': format_hex(self.public),
            'private': format_hex(self.private),
        }
    
    @classmethod
    def from_hex(cls, public_hex: str, private_hex: str) -> 'KeyPair':
        """Rebuild a key pair from hex strings."""
        return cls(public=parse_hex(public_hex), private=parse_hex(private_hex))
    
    @classmethod
    def from_private(cls, private: bytes) -> 'KeyPair':
        """Derive the public half from a raw private key."""
        if len(private) != KEY_SIZE:
            raise ValueError(f"Private key must be {KEY_SIZE} bytes, got {len(private)}")
        
        public = X25519PrivateKey.from_private_bytes(private).public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return cls(public=public, private=private)
    
    def __repr__(self):
        return f"KeyPair(public={format_hex(self.public)}, private=<hidden>)"


def generate_key_pair() -> KeyPair:
    """
    Generate a fresh key pair from the secure random source.
    
    Returns:
        New KeyPair
        
    Raises:
        EntropyError: If the random source is unavailable
    """
    try:
        private_key = X25519PrivateKey.generate()
    except Exception as e:
        raise EntropyError(f"Key generation failed: {e}") from e
    
    return KeyPair(
        public=private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        ),
        private=private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        ),
    )
