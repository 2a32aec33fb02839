"""
Handshake for securepipe connections.

Before any frame, each side sends its raw 32-byte public key in the clear
and reads the peer's. The initiator sends first; the responder does the
same (send, then receive), so neither side waits on the other.

There is no identity check: a peer is whoever answers with a key
(trust on first exchange).
"""

import logging
from typing import Optional

from ..config import DEFAULT_CONFIG, SecurePipeConfig
from ..crypto.box import WeakKeyError
from ..crypto.keys import KEY_SIZE, KeyPair, generate_key_pair
from ..crypto.utils import fingerprint
from ..protocol.connection import SecureConnection
from ..transport.tcp import Address, TransportError, connect, read_exactly

logger = logging.getLogger(__name__)


class HandshakeError(TransportError):
    """Raised when public keys cannot be exchanged."""
    pass


def exchange_keys(stream, key_pair: KeyPair) -> bytes:
    """
    Send own public key, then read the peer's.
    
    Args:
        stream: Raw stream with read/write
        key_pair: Local key pair
        
    Returns:
        Peer's 32-byte public key
        
    Raises:
        HandshakeError: On a short write or short read
    """
    try:
        written = stream.write(key_pair.public)
    except TransportError as e:
        raise HandshakeError(f"Failed to send public key: {e}") from e
    if written != KEY_SIZE:
        raise HandshakeError(f"Short write sending public key: {written} of {KEY_SIZE} bytes")
    
    try:
        peer_public = read_exactly(stream, KEY_SIZE)
    except TransportError as e:
        raise HandshakeError(f"Failed to receive peer public key: {e}") from e
    
    if len(peer_public) != KEY_SIZE:
        raise HandshakeError(
            f"Short read receiving peer public key: {len(peer_public)} of {KEY_SIZE} bytes"
        )
    return peer_public


def secure_stream(stream, key_pair: KeyPair,
                  config: Optional[SecurePipeConfig] = None) -> SecureConnection:
    """
    Run the handshake on an open raw stream and wrap it.
    
    Used by both sides; the stream is not closed on failure, the caller
    owns it until a SecureConnection is returned.
    
    Args:
        stream: Raw stream with read/write/close
        key_pair: Local key pair
        config: Framing settings
        
    Returns:
        SecureConnection keyed with (own private key, peer public key)
    """
    config = config or DEFAULT_CONFIG
    peer_public = exchange_keys(stream, key_pair)
    logger.debug(f"Handshake complete: local {key_pair.fingerprint()}, "
                 f"peer {fingerprint(peer_public)}")
    
    try:
        return SecureConnection(
            stream,
            private_key=key_pair.private,
            peer_public_key=peer_public,
            local_public_key=key_pair.public,
            framing=config.framing,
            max_frame_size=config.max_frame_size,
        )
    except WeakKeyError as e:
        raise HandshakeError(f"Rejected peer public key {fingerprint(peer_public)}") from e


def dial(address: Address, config: Optional[SecurePipeConfig] = None) -> SecureConnection:
    """
    Connect to a securepipe server.
    
    Generates a fresh key pair for this connection, connects within
    config.connect_timeout, and performs the handshake.
    
    Args:
        address: "host:port" or (host, port)
        config: Settings (defaults to DEFAULT_CONFIG)
        
    Returns:
        Open SecureConnection
        
    Raises:
        EntropyError: If no key pair can be generated
        HandshakeError: If connecting or the key exchange fails
    """
    config = config or DEFAULT_CONFIG
    key_pair = generate_key_pair()
    
    try:
        stream = connect(address, timeout=config.connect_timeout)
    except TransportError as e:
        raise HandshakeError(str(e)) from e
    
    try:
        return secure_stream(stream, key_pair, config)
    except Exception:
        stream.close()
        raise
