from abc import ABC, abstractmethod
from enum import Enum
from typing import NamedTuple, TypeAlias, Union

from ..utils.io import DEFAULT_ENCODING
from .status import HTTP_STATUS


def headername(name: str) -> str:
	"""Returns the `Kebab-Case` form of a header name, which is how headers
	are keyed and sent."""
	return "-".join(_.capitalize() for _ in name.strip().lower().split("-"))


# -----------------------------------------------------------------------------
#
# MESSAGE PARTS
#
# -----------------------------------------------------------------------------


class HTTPRequestLine(NamedTuple):
	method: str
	path: str
	query: str
	protocol: str


class HTTPResponseLine(NamedTuple):
	protocol: str
	status: int
	message: str


class HTTPHeaders(NamedTuple):
	"""The headers of a message, keyed by `headername`, along with the
	length of the body that follows them."""

	values: dict[str, str]
	contentLength: int = 0


class HTTPProcessingStatus(Enum):
	Processing = 0
	Body = 1
	Closed = 2
	Timeout = 10
	NoData = 11
	BadFormat = 12


# What the parser produces, in order: line, headers, then the message
HTTPAtom: TypeAlias = Union[
	HTTPRequestLine,
	HTTPResponseLine,
	HTTPHeaders,
	HTTPProcessingStatus,
	"HTTPRequest",
	"HTTPResponse",
]

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPRequestError(Exception):
	"""To be raised by handlers, the routing layer turns it into a
	plain text response with the given status."""

	STATUS: int = 500

	def __init__(
		self,
		message: str,
		status: int | None = None,
		contentType: str = "text/plain",
	):
		super().__init__(message)
		self.message: str = message
		self.status: int = self.STATUS if status is None else status
		self.contentType: str = contentType


class NotFoundError(HTTPRequestError):
	"""Missing path, unreadable file or directory."""

	STATUS = 404


class MethodNotSupportedError(NotFoundError):
	"""A request with a method other than the ones the server routes."""

	def __init__(self, method: str | None = None, status: int | None = None):
		super().__init__("Method is not supported.", status)
		self.method: str | None = method


class CompressionError(HTTPRequestError):
	"""The payload could not be encoded (or decoded)."""

	STATUS = 500


class InternalError(HTTPRequestError):
	"""Any other unexpected failure while producing a response."""

	STATUS = 500


# -----------------------------------------------------------------------------
#
# MESSAGES
#
# -----------------------------------------------------------------------------


class HTTPBodyWriter(ABC):
	"""Sends serialized responses back to the client."""

	@abstractmethod
	async def write(self, data: bytes) -> None: ...


class HTTPRequest:
	"""A fully read request, which also creates the responses to it."""

	__slots__ = ["method", "path", "query", "headers", "body", "protocol"]

	def __init__(
		self,
		method: str,
		path: str,
		*,
		query: dict[str, str] | None = None,
		headers: dict[str, str] | None = None,
		body: bytes = b"",
		protocol: str = "HTTP/1.1",
	):
		self.method: str = method
		self.path: str = path
		self.query: dict[str, str] = query or {}
		self.headers: dict[str, str] = {
			headername(k): v for k, v in (headers or {}).items()
		}
		self.body: bytes = body
		self.protocol: str = protocol

	def header(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	@property
	def keepAlive(self) -> bool:
		"""Tells if the connection stays open once this request is answered,
		which is the HTTP/1.1 default."""
		return (
			self.protocol != "HTTP/1.0"
			and (self.header("Connection") or "").lower() != "close"
		)

	def respond(
		self,
		content: bytes | str = b"",
		contentType: str | None = None,
		*,
		status: int = 200,
		headers: dict[str, str] | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			content,
			contentType,
			status=status,
			headers=headers,
			protocol=self.protocol,
		)

	def respondError(self, error: HTTPRequestError) -> "HTTPResponse":
		return self.respond(error.message, error.contentType, status=error.status)

	def __str__(self) -> str:
		return f"Request({self.method} {self.path} {self.protocol})"


class HTTPResponse:
	"""A fully buffered response, so its length is always known."""

	__slots__ = ["status", "message", "headers", "payload", "protocol"]

	@staticmethod
	def Create(
		content: bytes | str = b"",
		contentType: str | None = None,
		*,
		status: int = 200,
		headers: dict[str, str] | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPResponse":
		payload: bytes = (
			content.encode(DEFAULT_ENCODING) if isinstance(content, str) else content
		)
		values: dict[str, str] = dict(headers or {})
		if contentType:
			values["Content-Type"] = contentType
		values["Content-Length"] = str(len(payload))
		return HTTPResponse(status, headers=values, payload=payload, protocol=protocol)

	def __init__(
		self,
		status: int,
		*,
		message: str | None = None,
		headers: dict[str, str] | None = None,
		payload: bytes = b"",
		protocol: str = "HTTP/1.1",
	):
		self.status: int = status
		self.message: str = message or HTTP_STATUS.get(status, "Unknown Status")
		self.headers: dict[str, str] = {
			headername(k): v for k, v in (headers or {}).items()
		}
		self.payload: bytes = payload
		self.protocol: str = protocol

	def header(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	def head(self) -> bytes:
		"""Serializes the status line and headers, up to the empty line."""
		lines = [f"{self.protocol} {self.status} {self.message}"] + [
			f"{k}: {v}" for k, v in self.headers.items()
		]
		return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.message})"


# EOF
