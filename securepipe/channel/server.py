"""
Secure echo server for securepipe.

The server owns one key pair for its whole lifetime; every client
authenticates frames against that same public key. Each accepted
connection is handled on its own thread, and a failure in one connection
only closes that connection.
"""

import logging
import socket
import threading
from typing import Callable, Optional

from ..config import DEFAULT_CONFIG, SecurePipeConfig
from ..crypto.box import BoxError
from ..crypto.keys import KeyPair, generate_key_pair
from ..protocol.connection import SecureConnection
from ..transport.tcp import SocketStream, TransportError
from .handshake import secure_stream

logger = logging.getLogger(__name__)

Handler = Callable[[SecureConnection], None]


def echo(conn: SecureConnection) -> None:
    """Copy decrypted input back out, re-encrypted, until end of stream."""
    for data in conn:
        conn.write(data)


class SecureServer:
    """
    Accept loop plus one handling thread per connection.
    """
    
    def __init__(self, listener: socket.socket, key_pair: Optional[KeyPair] = None,
                 handler: Handler = echo, config: Optional[SecurePipeConfig] = None):
        """
        Initialize server.
        
        Args:
            listener: Bound, listening stream socket
            key_pair: Server key pair (generated if not given)
            handler: Service loop run on each secure connection
            config: Framing settings
        """
        self.listener = listener
        self.key_pair = key_pair or generate_key_pair()
        self.handler = handler
        self.config = config or DEFAULT_CONFIG
        self._stopping = threading.Event()
        self._address = listener.getsockname()
    
    @property
    def public_key(self) -> bytes:
        return self.key_pair.public
    
    @property
    def address(self):
        return self._address
    
    def serve_forever(self) -> None:
        """
        Accept connections until stop() is called.
        
        Raises:
            TransportError: If accept fails for any other reason
        """
        host, port = self.address[:2]
        logger.info(f"Serving on {host}:{port} with key {self.key_pair.fingerprint()}")
        
        while True:
            try:
                sock, addr = self.listener.accept()
            except OSError as e:
                if self._stopping.is_set():
                    break
                raise TransportError(f"Accept failed: {e}") from e
            
            worker = threading.Thread(
                target=self.handle_connection,
                args=(sock, addr),
                name=f"securepipe-conn-{addr[0]}:{addr[1]}",
                daemon=True,
            )
            worker.start()
        
        logger.info(f"Server on {host}:{port} stopped")
    
    def handle_connection(self, sock: socket.socket, addr) -> None:
        """
        Handshake and serve one connection. Never raises.
        
        Args:
            sock: Accepted socket, closed when this returns
            addr: Peer address, for logging
        """
        logger.debug(f"Accepted connection from {addr}")
        with SocketStream(sock) as stream:
            try:
                with secure_stream(stream, self.key_pair, self.config) as conn:
                    try:
                        self.handler(conn)
                    finally:
                        logger.debug(f"Connection from {addr}: {conn.reader.frames_read} frames in, "
                                     f"{conn.writer.frames_written} frames out")
            except (TransportError, BoxError, ValueError) as e:
                logger.warning(f"Connection from {addr} failed: {e}")
            except Exception:
                logger.exception(f"Unexpected error handling connection from {addr}")
        logger.debug(f"Connection from {addr} closed")
    
    def stop(self) -> None:
        """Stop accepting and close the listener. Running connections finish on their own."""
        self._stopping.set()
        try:
            # Wakes up a thread blocked in accept()
            self.listener.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.listener.close()


def serve(listener: socket.socket, key_pair: Optional[KeyPair] = None,
          handler: Handler = echo, config: Optional[SecurePipeConfig] = None) -> None:
    """
    Run a secure server on listener.
    
    Blocks until accept fails, e.g. because the listener was closed, and
    then raises TransportError.
    
    Args:
        listener: Bound, listening stream socket
        key_pair: Server key pair (generated if not given)
        handler: Service loop per connection (default: echo)
        config: Framing settings
    """
    SecureServer(listener, key_pair, handler, config).serve_forever()
