from typing import Iterator
from urllib.parse import unquote_plus

from ..utils.io import LineParser, LineTooLong
from .model import (
	HTTPAtom,
	HTTPHeaders,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPRequestLine,
	HTTPResponse,
	HTTPResponseLine,
	headername,
)

# Bodies are fully buffered, larger ones are refused
BODY_LIMIT: int = 1_048_576
HEADERS_LIMIT: int = 100


def parseLine(line: bytes) -> HTTPRequestLine | HTTPResponseLine | None:
	"""Parses a request or response line, returning `None` when it is
	neither."""
	text: str = line.decode("latin-1")
	if text.startswith("HTTP/"):
		protocol, _, rest = text.partition(" ")
		status, _, message = rest.partition(" ")
		return (
			HTTPResponseLine(protocol, int(status), message)
			if status.isdigit()
			else None
		)
	parts: list[str] = text.split(" ")
	if len(parts) == 3:
		method, target, protocol = parts
	elif len(parts) == 2:
		# Like `GET /`, we assume HTTP/1.0
		(method, target), protocol = parts, "HTTP/1.0"
	else:
		return None
	path, _, query = target.partition("?")
	return HTTPRequestLine(method.upper(), path or "/", query, protocol)


def parseQuery(text: str) -> dict[str, str]:
	res: dict[str, str] = {}
	for item in text.split("&"):
		if item:
			k, _, v = item.partition("=")
			res[unquote_plus(k)] = unquote_plus(v)
	return res


class HTTPParser:
	"""A stateful parser fed with chunks as they come from the socket. Each
	message produces its line, its headers and then the request (or
	response) itself, several messages may come in the same chunk. Once
	`BadFormat` is produced, the rest of the stream is ignored."""

	def __init__(self) -> None:
		self.lines: LineParser = LineParser()
		self.status: HTTPProcessingStatus = HTTPProcessingStatus.Processing
		self.line: HTTPRequestLine | HTTPResponseLine | None = None
		self.headers: dict[str, str] = {}
		self.contentLength: int = 0
		self.body: bytearray = bytearray()

	def reset(self) -> "HTTPParser":
		self.lines.reset()
		self.status = HTTPProcessingStatus.Processing
		self.line = None
		self.headers = {}
		self.contentLength = 0
		self.body = bytearray()
		return self

	def feed(self, chunk: bytes) -> Iterator[HTTPAtom]:
		offset: int = 0
		size: int = len(chunk)
		while offset < size and self.status is not HTTPProcessingStatus.BadFormat:
			if self.status is HTTPProcessingStatus.Body:
				read = min(size - offset, self.contentLength - len(self.body))
				self.body += chunk[offset : offset + read]
				offset += read
				if len(self.body) >= self.contentLength:
					yield self.complete()
				continue
			try:
				line, read = self.lines.feed(chunk, offset)
			except LineTooLong:
				yield self.fail()
				return
			offset += read
			if line is None:
				continue
			elif self.line is None:
				# Empty lines before a message are skipped
				if line:
					self.line = parseLine(line)
					if self.line is None:
						yield self.fail()
						return
					yield self.line
			elif line:
				if not self.addHeader(line):
					yield self.fail()
					return
			else:
				yield HTTPHeaders(self.headers, self.contentLength)
				if self.contentLength > BODY_LIMIT:
					yield self.fail()
					return
				elif self.contentLength > 0:
					# A body is read whenever a length is given, even for a GET
					self.status = HTTPProcessingStatus.Body
					yield self.status
				else:
					yield self.complete()

	def addHeader(self, line: bytes) -> bool:
		if len(self.headers) >= HEADERS_LIMIT:
			return False
		name, sep, value = line.decode("latin-1").partition(":")
		# Lines without a colon are ignored
		if sep:
			key: str = headername(name)
			self.headers[key] = value.strip()
			if key == "Content-Length":
				self.contentLength = int(value) if value.strip().isdigit() else 0
		return True

	def fail(self) -> HTTPProcessingStatus:
		self.status = HTTPProcessingStatus.BadFormat
		return self.status

	def complete(self) -> HTTPAtom:
		"""Produces the message out of what was parsed and gets ready for
		the next one."""
		line, headers, body = self.line, self.headers, bytes(self.body)
		self.reset()
		if isinstance(line, HTTPRequestLine):
			return HTTPRequest(
				line.method,
				line.path,
				query=parseQuery(line.query),
				headers=headers,
				body=body,
				protocol=line.protocol,
			)
		elif isinstance(line, HTTPResponseLine):
			return HTTPResponse(
				line.status,
				message=line.message,
				headers=headers,
				payload=body,
				protocol=line.protocol,
			)
		else:
			return self.fail()


# EOF
