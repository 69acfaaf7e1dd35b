DEFAULT_ENCODING: str = "utf8"

# Longest request line or header accepted, end of line included
LINE_LIMIT: int = 8_192


class LineTooLong(ValueError):
	pass


class LineParser:
	"""Accumulates chunks until an end of line is found. The buffer never
	grows past `limit`, a longer line raises `LineTooLong` instead."""

	__slots__ = ["buffer", "limit"]

	def __init__(self, limit: int = LINE_LIMIT) -> None:
		self.buffer: bytearray = bytearray()
		self.limit: int = limit

	def reset(self) -> "LineParser":
		self.buffer.clear()
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bytes | None, int]:
		"""Returns the line completed by `chunk[start:]`, without its `CRLF`,
		and how many bytes of the chunk were consumed. The line is `None`
		when the whole rest of the chunk was buffered."""
		end: int = chunk.find(b"\n", start)
		read: int = (len(chunk) if end == -1 else end + 1) - start
		if len(self.buffer) + read > self.limit:
			raise LineTooLong(f"Line exceeds {self.limit} bytes")
		self.buffer += chunk[start : start + read]
		if end == -1:
			return None, read
		# A `CR` left at the end of a previous chunk is stripped here
		line: bytes = bytes(self.buffer).removesuffix(b"\n").removesuffix(b"\r")
		self.buffer.clear()
		return line, read


# EOF
