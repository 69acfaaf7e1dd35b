import asyncio

from .config import ServerConfig
from .http.model import HTTPBodyWriter, HTTPProcessingStatus, HTTPRequest, HTTPResponse
from .http.parser import HTTPParser
from .model import Application
from .server import reject, respond, serve


class BufferWriter(HTTPBodyWriter):
	"""Collects everything written into a byte buffer."""

	def __init__(self) -> None:
		self.data: bytearray = bytearray()

	async def write(self, data: bytes) -> None:
		self.data += data


class PythonBridge:
	"""Runs an application in-process: raw request bytes go in, raw
	response bytes come out, without any socket involved."""

	def __init__(self, app: Application):
		self.app: Application = app

	async def asyncRequest(self, payload: bytes) -> bytes:
		writer = BufferWriter()
		for atom in HTTPParser().feed(payload):
			if atom is HTTPProcessingStatus.BadFormat:
				await reject(writer)
				break
			elif isinstance(atom, HTTPRequest):
				await respond(self.app, atom, writer)
		return bytes(writer.data)

	def request(self, payload: bytes) -> bytes:
		return asyncio.run(self.asyncRequest(payload))

	def get(
		self, path: str, *, method: str = "GET", headers: dict[str, str] | None = None
	) -> HTTPResponse:
		"""Sends a request for `path` and returns the parsed response."""
		lines = [f"{method} {path} HTTP/1.1", "Host: localhost"] + [
			f"{k}: {v}" for k, v in (headers or {}).items()
		]
		raw = self.request(("\r\n".join(lines) + "\r\n\r\n").encode("latin-1"))
		for atom in HTTPParser().feed(raw):
			if isinstance(atom, HTTPResponse):
				return atom
		raise ValueError(f"No response could be parsed from: {raw!r}")


def run(config: ServerConfig) -> PythonBridge:
	"""Creates an in-process bridge serving the configured root."""
	return PythonBridge(serve(config))


# EOF
