"""
TCP transport for securepipe.

Provides the raw byte-stream contract the secure layer is built on:
read(n) -> bytes (b"" at end of stream), write(data) -> int, close().
"""

import logging
import socket
import threading
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

Address = Union[str, Tuple[str, int]]


class TransportError(Exception):
    """Raised when transport operations fail."""
    pass


class ConnectionClosedError(TransportError):
    """Raised when a closed stream is used."""
    pass


def parse_address(address: Address) -> Tuple[str, int]:
    """
    Normalize an address to a (host, port) tuple.
    
    Args:
        address: "host:port" string or (host, port) tuple
        
    Returns:
        Tuple of (host, port)
    """
    if isinstance(address, tuple):
        host, port = address
        return host, int(port)
    
    host, sep, port = address.rpartition(':')
    if not sep or not port.isdigit():
        raise ValueError(f"Address must be host:port, got {address!r}")
    
    # Bracketed IPv6 literal
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    return host or 'localhost', int(port)


class SocketStream:
    """
    Raw byte stream over a connected stream socket.
    
    Writes use sendall(), so a write either delivers every byte or raises.
    """
    
    def __init__(self, sock: socket.socket):
        """
        Initialize stream.
        
        Args:
            sock: Connected stream socket, owned by this object from now on
        """
        self._socket: Optional[socket.socket] = sock
        self._close_lock = threading.Lock()
        try:
            self.peer_address = sock.getpeername()
        except OSError:
            self.peer_address = None
    
    @property
    def closed(self) -> bool:
        return self._socket is None
    
    def read(self, n: int) -> bytes:
        """
        Read up to n bytes.
        
        Args:
            n: Maximum number of bytes to return
            
        Returns:
            Bytes read; b"" at end of stream
            
        Raises:
            ConnectionClosedError: If the stream was closed locally
            TransportError: If the socket read fails
        """
        sock = self._require_open()
        try:
            return sock.recv(n)
        except OSError as e:
            if self._socket is None:
                raise ConnectionClosedError("Stream closed during read") from e
            raise TransportError(f"Failed to read from {self.peer_address}: {e}") from e
    
    def write(self, data: bytes) -> int:
        """
        Write all of data.
        
        Args:
            data: Bytes to send
            
        Returns:
            Number of bytes written (always len(data))
            
        Raises:
            ConnectionClosedError: If the stream was closed locally
            TransportError: If the socket write fails
        """
        sock = self._require_open()
        try:
            sock.sendall(data)
        except OSError as e:
            if self._socket is None:
                raise ConnectionClosedError("Stream closed during write") from e
            raise TransportError(f"Failed to write to {self.peer_address}: {e}") from e
        return len(data)
    
    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        with self._close_lock:
            sock, self._socket = self._socket, None
        if sock is None:
            return
        
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Peer already gone
            pass
        sock.close()
    
    def _require_open(self) -> socket.socket:
        sock = self._socket
        if sock is None:
            raise ConnectionClosedError("Stream is closed")
        return sock
    
    def __repr__(self):
        status = "closed" if self.closed else "open"
        return f"SocketStream({self.peer_address}, {status})"
    
    def __enter__(self):
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def read_exactly(stream, n: int) -> bytes:
    """
    Read exactly n bytes from any raw stream.
    
    Args:
        stream: Object with read(n) -> bytes
        n: Number of bytes wanted
        
    Returns:
        The bytes read. Shorter than n only when the stream ended early;
        callers decide whether that is an error.
    """
    chunks = []
    received = 0
    while received < n:
        chunk = stream.read(n - received)
        if not chunk:
            break
        chunks.append(chunk)
        received += len(chunk)
    return b"".join(chunks)


def connect(address: Address, timeout: float = 2.0) -> SocketStream:
    """
    Open a TCP connection with a bounded connect timeout.
    
    The timeout applies to connecting only; the returned stream blocks
    without a deadline.
    
    Args:
        address: "host:port" or (host, port)
        timeout: Connect timeout in seconds
        
    Returns:
        Connected SocketStream
        
    Raises:
        TransportError: If the connection cannot be made in time
    """
    host, port = parse_address(address)
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except socket.timeout as e:
        raise TransportError(f"Timed out connecting to {host}:{port} after {timeout}s") from e
    except OSError as e:
        raise TransportError(f"Failed to connect to {host}:{port}: {e}") from e
    
    sock.settimeout(None)
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    logger.debug(f"Connected to {host}:{port}")
    return SocketStream(sock)


def listen(port: int, host: str = "0.0.0.0", backlog: int = 128) -> socket.socket:
    """
    Create a listening TCP socket.
    
    Args:
        port: Port to bind (0 = auto-assign)
        host: Interface to bind
        backlog: Listen backlog
        
    Returns:
        Bound, listening socket
        
    Raises:
        TransportError: If binding fails
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(backlog)
    except OSError as e:
        sock.close()
        raise TransportError(f"Failed to listen on {host}:{port}: {e}") from e
    
    logger.debug(f"Listening on {sock.getsockname()[0]}:{sock.getsockname()[1]}")
    return sock
