"""
Cryptographic utilities for random number generation and byte formatting.

Every nonce and private key used by securepipe comes from
generate_random_bytes(); there is no fallback to a weaker source.
"""

import hashlib
import secrets


class EntropyError(Exception):
    """Raised when the secure random source is unavailable."""
    pass


def generate_random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.
    
    Args:
        length: Number of random bytes to generate
        
    Returns:
        Cryptographically secure random bytes
        
    Raises:
        EntropyError: If the operating system random source fails
    """
    if length < 0:
        raise ValueError("Length must be non-negative")
    
    try:
        return secrets.token_bytes(length)
    except (OSError, NotImplementedError) as e:
        raise EntropyError(f"Secure random source unavailable: {e}") from e


def fingerprint(public_key: bytes) -> str:
    """
    Short hex fingerprint of a public key, safe to log.
    
    Args:
        public_key: Raw public key bytes
        
    Returns:
        First 8 bytes of SHA-256(public_key) as hex
    """
    return hashlib.sha256(public_key).digest()[:8].hex()


def format_hex(data: bytes, separator: str = "") -> str:
    """
    Format bytes as hexadecimal string.
    
    Args:
        data: Bytes to format
        separator: Separator between hex bytes
        
    Returns:
        Formatted hex string
    """
    return separator.join(f"{b:02x}" for b in data)


def parse_hex(hex_string: str) -> bytes:
    """
    Parse hexadecimal string to bytes.
    
    Args:
        hex_string: Hex string (with or without separators)
        
    Returns:
        Parsed bytes
    """
    # Remove common separators
    cleaned = hex_string.strip().replace(" ", "").replace(":", "").replace("-", "")
    return bytes.fromhex(cleaned)
