"""
Cryptographic primitives for securepipe.

This module provides:
- Key pair generation (X25519)
- Frame sealing and opening (NaCl box)
- Secure random bytes
"""

from .keys import KeyPair, generate_key_pair, KEY_SIZE
from .box import (
    FrameCodec,
    seal,
    open_sealed,
    BoxError,
    MalformedFrameError,
    AuthenticationError,
    WeakKeyError,
    NONCE_SIZE,
    TAG_SIZE,
)
from .utils import generate_random_bytes, EntropyError

__all__ = [
    'KeyPair',
    'generate_key_pair',
    'KEY_SIZE',
    'FrameCodec',
    'seal',
    'open_sealed',
    'BoxError',
    'MalformedFrameError',
    'AuthenticationError',
    'WeakKeyError',
    'NONCE_SIZE',
    'TAG_SIZE',
    'generate_random_bytes',
    'EntropyError',
]
