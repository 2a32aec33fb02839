"""
securepipe: authenticated-encryption streams over TCP.

Each connection starts with a clear-text exchange of raw X25519 public
keys, after which every write becomes one NaCl box frame:

    nonce (24B) || ciphertext || tag (16B)

Basic Usage:
    >>> from securepipe import dial, listen, SecureServer
    >>> import threading
    >>>
    >>> server = SecureServer(listen(0, "127.0.0.1"))
    >>> threading.Thread(target=server.serve_forever, daemon=True).start()
    >>>
    >>> with dial(server.address) as conn:
    ...     conn.write(b"hello world\\n")
    ...     print(conn.read())  # b"hello world\\n"
"""

__version__ = "1.0.0"

# Configuration
from .config import SecurePipeConfig, ConfigError, DEFAULT_CONFIG

# Cryptographic primitives
from .crypto.keys import KeyPair, generate_key_pair
from .crypto.box import FrameCodec, seal, open_sealed, BoxError, MalformedFrameError, AuthenticationError, WeakKeyError
from .crypto.utils import EntropyError

# Protocol components
from .protocol.frame import Frame, FRAMING_LENGTH_PREFIXED, FRAMING_SINGLE_READ
from .protocol.reader import SecureReader
from .protocol.writer import SecureWriter
from .protocol.connection import SecureConnection

# Transport
from .transport.tcp import SocketStream, TransportError, ConnectionClosedError, connect, listen

# Handshake and server
from .channel.handshake import HandshakeError, dial, secure_stream
from .channel.server import SecureServer, echo, serve

__all__ = [
    '__version__',
    
    # Configuration
    'SecurePipeConfig',
    'ConfigError',
    'DEFAULT_CONFIG',
    
    # Cryptographic primitives
    'KeyPair',
    'generate_key_pair',
    'FrameCodec',
    'seal',
    'open_sealed',
    'BoxError',
    'MalformedFrameError',
    'AuthenticationError',
    'WeakKeyError',
    'EntropyError',
    
    # Protocol components
    'Frame',
    'FRAMING_LENGTH_PREFIXED',
    'FRAMING_SINGLE_READ',
    'SecureReader',
    'SecureWriter',
    'SecureConnection',
    
    # Transport
    'SocketStream',
    'TransportError',
    'ConnectionClosedError',
    'connect',
    'listen',
    
    # Handshake and server
    'HandshakeError',
    'dial',
    'secure_stream',
    'SecureServer',
    'echo',
    'serve',
]
