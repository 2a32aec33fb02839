"""
Protocol layer components for securepipe.

This module provides:
- Frame layout and length-prefix framing
- Secure reader and writer
- Secure connection
"""

from .frame import Frame, FRAMING_LENGTH_PREFIXED, FRAMING_SINGLE_READ
from .reader import SecureReader
from .writer import SecureWriter
from .connection import SecureConnection

__all__ = [
    'Frame',
    'FRAMING_LENGTH_PREFIXED',
    'FRAMING_SINGLE_READ',
    'SecureReader',
    'SecureWriter',
    'SecureConnection',
]
