"""
Security property tests for securepipe.

Tests tamper rejection, truncated input handling, per-message nonce
uniqueness and that plaintext never reaches the wire.
"""

import secrets

import pytest

from securepipe.crypto import keys as keys_module
from securepipe.crypto.keys import generate_key_pair
from securepipe.crypto.box import (
    FrameCodec,
    open_sealed,
    seal,
    MalformedFrameError,
    AuthenticationError,
    NONCE_SIZE,
    TAG_SIZE,
)
from securepipe.crypto.utils import EntropyError, generate_random_bytes
from securepipe.protocol.frame import Frame, FRAMING_SINGLE_READ, LENGTH_PREFIX_SIZE
from securepipe.protocol.reader import SecureReader
from securepipe.protocol.writer import SecureWriter


class CaptureStream:
    """Raw stream that records writes and replays fixed data on read."""
    
    def __init__(self, data: bytes = b""):
        self.data = data
        self.writes = []
    
    def read(self, n: int) -> bytes:
        chunk, self.data = self.data[:n], self.data[n:]
        return chunk
    
    def write(self, data: bytes) -> int:
        self.writes.append(bytes(data))
        return len(data)
    
    def close(self) -> None:
        pass


@pytest.fixture
def keys():
    return generate_key_pair(), generate_key_pair()


class TestTamperResistance:
    """Test that modified frames never yield plaintext."""
    
    def test_every_bit_flip_is_rejected(self, keys):
        alice, bob = keys
        nonce = generate_random_bytes(NONCE_SIZE)
        sealed = seal(b"attack at dawn", nonce, alice.private, bob.public)
        codec = FrameCodec(bob.private, alice.public)
        
        for index in range(len(sealed)):
            for bit in range(8):
                tampered = bytearray(sealed)
                tampered[index] ^= 1 << bit
                with pytest.raises(AuthenticationError):
                    codec.open(bytes(tampered), nonce)
    
    def test_nonce_flip_is_rejected(self, keys):
        alice, bob = keys
        nonce = generate_random_bytes(NONCE_SIZE)
        sealed = seal(b"attack at dawn", nonce, alice.private, bob.public)
        
        tampered_nonce = bytes([nonce[0] ^ 0x01]) + nonce[1:]
        with pytest.raises(AuthenticationError):
            open_sealed(sealed, tampered_nonce, alice.public, bob.private)
    
    def test_sender_binding(self, keys):
        """A frame sealed by Eve does not open as if it came from Alice."""
        alice, bob = keys
        eve = generate_key_pair()
        nonce = generate_random_bytes(NONCE_SIZE)
        forged = seal(b"i am alice", nonce, eve.private, bob.public)
        
        with pytest.raises(AuthenticationError):
            open_sealed(forged, nonce, alice.public, bob.private)
    
    def test_tampered_frame_through_reader(self, keys):
        alice, bob = keys
        sink = CaptureStream()
        SecureWriter(sink, alice.private, bob.public).write(b"hello world\n")
        
        wire = bytearray(sink.writes[0])
        wire[-1] ^= 0x80
        reader = SecureReader(CaptureStream(bytes(wire)), bob.private, alice.public)
        with pytest.raises(AuthenticationError):
            reader.read()
    
    def test_truncated_tag_is_malformed(self, keys):
        alice, bob = keys
        codec = FrameCodec(bob.private, alice.public)
        nonce = generate_random_bytes(NONCE_SIZE)
        for size in range(TAG_SIZE):
            with pytest.raises(MalformedFrameError):
                codec.open(b"\x00" * size, nonce)
    
    def test_short_frames_are_malformed(self):
        for size in range(NONCE_SIZE + TAG_SIZE):
            with pytest.raises(MalformedFrameError):
                Frame.from_bytes(b"\x00" * size)


class TestNonceUniqueness:
    """Test per-message uniqueness of frames."""
    
    def test_identical_writes_differ(self, keys):
        alice, bob = keys
        sink = CaptureStream()
        writer = SecureWriter(sink, alice.private, bob.public)
        writer.write(b"hello world\n")
        writer.write(b"hello world\n")
        
        assert sink.writes[0] != sink.writes[1]
    
    def test_nonces_do_not_repeat(self, keys):
        alice, bob = keys
        sink = CaptureStream()
        writer = SecureWriter(sink, alice.private, bob.public, framing=FRAMING_SINGLE_READ)
        for _ in range(1000):
            writer.write(b"same")
        
        nonces = {frame[:NONCE_SIZE] for frame in sink.writes}
        assert len(nonces) == 1000
    
    def test_writers_with_same_keys_differ(self, keys):
        """Two fresh writers with the same keys still produce different frames."""
        alice, bob = keys
        first, second = CaptureStream(), CaptureStream()
        SecureWriter(first, alice.private, bob.public).write(b"hello world\n")
        SecureWriter(second, alice.private, bob.public).write(b"hello world\n")
        
        assert first.writes != second.writes


class TestConfidentiality:
    """Test that plaintext does not appear on the wire."""
    
    def test_plaintext_not_on_wire(self, keys):
        alice, bob = keys
        sink = CaptureStream()
        SecureWriter(sink, alice.private, bob.public).write(b"hello world\n")
        
        wire = sink.writes[0]
        assert wire != b"hello world\n"
        assert b"hello world" not in wire
    
    def test_wire_size(self, keys):
        alice, bob = keys
        sink = CaptureStream()
        SecureWriter(sink, alice.private, bob.public).write(b"hello world\n")
        assert len(sink.writes[0]) == LENGTH_PREFIX_SIZE + NONCE_SIZE + 12 + TAG_SIZE


class TestEntropyFailure:
    """Test that a failing random source aborts instead of degrading."""
    
    def test_writer_aborts_without_nonce(self, keys, monkeypatch):
        alice, bob = keys
        sink = CaptureStream()
        writer = SecureWriter(sink, alice.private, bob.public)
        
        def no_entropy(length):
            raise OSError("random source unavailable")
        
        monkeypatch.setattr(secrets, "token_bytes", no_entropy)
        with pytest.raises(EntropyError):
            writer.write(b"hello world\n")
        assert sink.writes == []
    
    def test_random_bytes_error(self, monkeypatch):
        def no_entropy(length):
            raise OSError("random source unavailable")
        
        monkeypatch.setattr(secrets, "token_bytes", no_entropy)
        with pytest.raises(EntropyError):
            generate_random_bytes(NONCE_SIZE)
    
    def test_key_generation_error(self, monkeypatch):
        class BrokenPrivateKey:
            @classmethod
            def generate(cls):
                raise OSError("random source unavailable")
        
        monkeypatch.setattr(keys_module, "X25519PrivateKey", BrokenPrivateKey)
        with pytest.raises(EntropyError):
            generate_key_pair()
