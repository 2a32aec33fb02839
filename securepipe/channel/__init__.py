"""
Channel layer for securepipe.

This module provides:
- The public key handshake (dial / server side)
- The concurrent secure echo server
"""

from .handshake import HandshakeError, dial, exchange_keys, secure_stream
from .server import SecureServer, echo, serve

__all__ = [
    'HandshakeError',
    'dial',
    'exchange_keys',
    'secure_stream',
    'SecureServer',
    'echo',
    'serve',
]
