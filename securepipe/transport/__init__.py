"""
Transport layer for securepipe: raw TCP byte streams.
"""

from .tcp import (
    SocketStream,
    TransportError,
    ConnectionClosedError,
    connect,
    listen,
    parse_address,
    read_exactly,
)

__all__ = [
    'SocketStream',
    'TransportError',
    'ConnectionClosedError',
    'connect',
    'listen',
    'parse_address',
    'read_exactly',
]
