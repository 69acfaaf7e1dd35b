import gzip
import os

import brotli
import pytest

from servedir.http.model import CompressionError
from servedir.utils.codec import (
	Compression,
	GZipEncoder,
	compress,
	decompress,
	transform,
)

PAYLOADS: list[bytes] = [
	b"",
	b"body{}",
	"Unicode ✓ text, with some accents: éàü".encode("utf8"),
	os.urandom(4096),
	b"a" * 100_000,
]


@pytest.mark.parametrize("mode", list(Compression))
@pytest.mark.parametrize("payload", PAYLOADS)
def test_roundtrip(mode: Compression, payload: bytes) -> None:
	assert decompress(compress(payload, mode), mode) == payload


def test_gzip_is_standard() -> None:
	data = compress(b"hello, world", Compression.GZIP)
	# Gzip magic number
	assert data[:2] == b"\x1f\x8b"
	assert gzip.decompress(data) == b"hello, world"


def test_brotli_is_standard() -> None:
	data = compress(b"hello, world", Compression.BROTLI)
	assert brotli.decompress(data) == b"hello, world"


def test_empty_input_is_a_valid_stream() -> None:
	assert gzip.decompress(compress(b"", Compression.GZIP)) == b""
	assert brotli.decompress(compress(b"", Compression.BROTLI)) == b""


def test_encoder_is_flushed() -> None:
	encoder = GZipEncoder()
	head = encoder.feed(b"x" * 1000)
	# Nothing is guaranteed before the flush, everything is after it
	assert gzip.decompress(head + encoder.flush()) == b"x" * 1000
	assert gzip.decompress(transform(GZipEncoder(), b"y")) == b"y"


def test_decoding_garbage_fails() -> None:
	with pytest.raises(CompressionError):
		decompress(b"definitely not gzip", Compression.GZIP)
	with pytest.raises(CompressionError):
		decompress(b"definitely not brotli", Compression.BROTLI)


def test_compression_error_is_recoverable() -> None:
	error = CompressionError("boom")
	assert error.status == 500
	assert error.message == "boom"


def test_parse() -> None:
	assert Compression.Parse("brotli") is Compression.BROTLI
	assert Compression.Parse("BROTLI") is Compression.BROTLI
	assert Compression.Parse("br") is Compression.BROTLI
	assert Compression.Parse("gzip") is Compression.GZIP
	# Anything unknown defaults to gzip
	assert Compression.Parse("zstd") is Compression.GZIP
	assert Compression.Parse(None) is Compression.GZIP
	assert Compression.GZIP.encoding == "gzip"
	assert Compression.BROTLI.encoding == "br"


# EOF
