"""
Frame codec: public-key authenticated encryption (NaCl box).

Uses PyNaCl's Box, i.e. Curve25519 key agreement + XSalsa20-Poly1305:
- seal() is deterministic for identical inputs and returns
  len(plaintext) + TAG_SIZE bytes.
- open_sealed() verifies integrity and sender binding before releasing
  any plaintext.

A nonce must never be reused for the same (sender_private, receiver_public)
pair. This module does not track nonces; callers pick them.
"""

from nacl.bindings.crypto_box import crypto_box_MACBYTES, crypto_box_NONCEBYTES
from nacl.exceptions import CryptoError
from nacl.public import Box, PrivateKey, PublicKey

from .keys import KEY_SIZE

NONCE_SIZE = crypto_box_NONCEBYTES  # 24
TAG_SIZE = crypto_box_MACBYTES  # 16


class BoxError(Exception):
    """Base class for frame codec failures."""
    pass


class MalformedFrameError(BoxError):
    """Raised when input is too short or otherwise cannot be a sealed frame."""
    pass


class AuthenticationError(BoxError):
    """Raised when a sealed frame fails the integrity/sender check."""
    pass


class WeakKeyError(BoxError):
    """Raised when a key pair yields no usable shared key (e.g. an all-zero peer key)."""
    pass


class FrameCodec:
    """
    Seals and opens frames for one (local private key, peer public key) pair.
    
    The shared key is computed once at construction, so one codec per
    connection direction is cheap to reuse for every frame.
    """
    
    def __init__(self, private_key: bytes, peer_public_key: bytes):
        """
        Initialize codec.
        
        Args:
            private_key: 32-byte local private key
            peer_public_key: 32-byte public key of the other side
        """
        if len(private_key) != KEY_SIZE:
            raise ValueError(f"Private key must be {KEY_SIZE} bytes")
        if len(peer_public_key) != KEY_SIZE:
            raise ValueError(f"Peer public key must be {KEY_SIZE} bytes")
        
        try:
            self._box = Box(PrivateKey(private_key), PublicKey(peer_public_key))
        except CryptoError as e:
            raise WeakKeyError("Peer public key produces no usable shared key") from e
    
    def seal(self, plaintext: bytes, nonce: bytes) -> bytes:
        """
        Encrypt and authenticate plaintext.
        
        Args:
            plaintext: Data to encrypt
            nonce: 24-byte nonce, never previously used with this key pair
            
        Returns:
            Ciphertext with the 16-byte tag included
        """
        if len(nonce) != NONCE_SIZE:
            raise ValueError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
        
        return self._box.encrypt(bytes(plaintext), nonce).ciphertext
    
    def open(self, sealed: bytes, nonce: bytes) -> bytes:
        """
        Verify and decrypt a sealed payload.
        
        Args:
            sealed: Ciphertext with tag, as produced by seal()
            nonce: Nonce used for sealing
            
        Returns:
            Decrypted plaintext
            
        Raises:
            MalformedFrameError: If input is shorter than the tag or nonce is bad
            AuthenticationError: If the tag check fails
        """
        if len(nonce) != NONCE_SIZE:
            raise MalformedFrameError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
        if len(sealed) < TAG_SIZE:
            raise MalformedFrameError(
                f"Sealed payload too short: {len(sealed)} bytes, need at least {TAG_SIZE}"
            )
        
        try:
            return self._box.decrypt(bytes(sealed), nonce)
        except CryptoError as e:
            raise AuthenticationError("Frame authentication failed") from e


def seal(plaintext: bytes, nonce: bytes, sender_private: bytes,
         receiver_public: bytes) -> bytes:
    """
    One-shot seal for a single frame.
    
    Args:
        plaintext: Data to encrypt
        nonce: 24-byte unique nonce
        sender_private: Sender's 32-byte private key
        receiver_public: Receiver's 32-byte public key
        
    Returns:
        Ciphertext with tag
    """
    return FrameCodec(sender_private, receiver_public).seal(plaintext, nonce)


def open_sealed(sealed: bytes, nonce: bytes, sender_public: bytes,
                receiver_private: bytes) -> bytes:
    """
    One-shot open for a single frame.
    
    Args:
        sealed: Ciphertext with tag
        nonce: Nonce used for sealing
        sender_public: Sender's 32-byte public key
        receiver_private: Receiver's 32-byte private key
        
    Returns:
        Decrypted plaintext
        
    Raises:
        MalformedFrameError: If input is too short
        AuthenticationError: If the tag check fails
    """
    return FrameCodec(receiver_private, sender_public).open(sealed, nonce)
