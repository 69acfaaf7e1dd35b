import zlib
from abc import ABC, abstractmethod
from enum import Enum

import brotli

from ..http.model import CompressionError


class BytesTransform(ABC):
	"""An abstract bytes transform."""

	@abstractmethod
	def feed(self, chunk: bytes) -> bytes:
		"""Feeds bytes to the transform, returns what could be produced so far."""

	@abstractmethod
	def flush(self) -> bytes:
		"""Finalizes the transform, returning any remaining bytes."""


class GZipEncoder(BytesTransform):
	"""Encode bytes as Gzip"""

	__slots__ = ["compressor"]

	def __init__(self, level: int = zlib.Z_DEFAULT_COMPRESSION) -> None:
		super().__init__()
		self.compressor = zlib.compressobj(level=level, wbits=zlib.MAX_WBITS | 16)

	def feed(self, chunk: bytes) -> bytes:
		return self.compressor.compress(chunk)

	def flush(self) -> bytes:
		return self.compressor.flush()


class GZipDecoder(BytesTransform):
	"""Decodes bytes as Gzip"""

	__slots__ = ["decompressor"]

	def __init__(self) -> None:
		super().__init__()
		self.decompressor = zlib.decompressobj(wbits=zlib.MAX_WBITS | 32)

	def feed(self, chunk: bytes) -> bytes:
		return self.decompressor.decompress(chunk)

	def flush(self) -> bytes:
		return self.decompressor.flush()


class BrotliEncoder(BytesTransform):
	"""Encode bytes as Brotli, using the library's default quality."""

	__slots__ = ["compressor"]

	def __init__(self) -> None:
		super().__init__()
		self.compressor = brotli.Compressor()

	def feed(self, chunk: bytes) -> bytes:
		return self.compressor.process(chunk)

	def flush(self) -> bytes:
		return self.compressor.finish()


class BrotliDecoder(BytesTransform):
	"""Decodes bytes as Brotli"""

	__slots__ = ["decompressor"]

	def __init__(self) -> None:
		super().__init__()
		self.decompressor = brotli.Decompressor()

	def feed(self, chunk: bytes) -> bytes:
		return self.decompressor.process(chunk)

	def flush(self) -> bytes:
		if not self.decompressor.is_finished():
			raise brotli.error("Brotli stream is truncated")
		return b""


class Compression(Enum):
	"""The compression applied to every response of a server, the value
	is the `Content-Encoding` token."""

	GZIP = "gzip"
	BROTLI = "br"

	@staticmethod
	def Parse(name: str | None) -> "Compression":
		"""Anything that is not brotli defaults to gzip."""
		return (
			Compression.BROTLI
			if (name or "").strip().lower() in ("brotli", "br")
			else Compression.GZIP
		)

	@property
	def encoding(self) -> str:
		return self.value

	@property
	def label(self) -> str:
		return "brotli" if self is Compression.BROTLI else "gzip"

	def encoder(self) -> BytesTransform:
		return BrotliEncoder() if self is Compression.BROTLI else GZipEncoder()

	def decoder(self) -> BytesTransform:
		return BrotliDecoder() if self is Compression.BROTLI else GZipDecoder()


def transform(codec: BytesTransform, data: bytes) -> bytes:
	"""Runs the whole of `data` through the codec, always flushing it."""
	return codec.feed(data) + codec.flush()


def compress(data: bytes, mode: Compression = Compression.GZIP) -> bytes:
	"""Compresses the whole payload in memory, any failure while writing
	or finalizing the stream is raised as a `CompressionError`."""
	try:
		return transform(mode.encoder(), data)
	except (zlib.error, brotli.error, ValueError, MemoryError) as e:
		raise CompressionError(f"Could not {mode.label} payload: {e}") from e


def decompress(data: bytes, mode: Compression = Compression.GZIP) -> bytes:
	try:
		return transform(mode.decoder(), data)
	except (zlib.error, brotli.error, ValueError) as e:
		raise CompressionError(f"Could not decode {mode.label} payload: {e}") from e


# EOF
