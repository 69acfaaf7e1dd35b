import asyncio
from pathlib import Path
from typing import NamedTuple, TypeAlias
from urllib.parse import unquote

from ..config import ServerConfig
from ..decorators import on
from ..http.model import (
	CompressionError,
	HTTPRequest,
	HTTPRequestError,
	HTTPResponse,
	InternalError,
	NotFoundError,
)
from ..model import Service
from ..utils.codec import compress
from ..utils.files import contentType, iterEntries
from ..utils.htmpl import H, Raw, href, html
from ..utils.io import DEFAULT_ENCODING
from ..utils.logging import LogLevel, debug, exception, logged, warning

INDEX_FILE: str = "index.html"

# How many times a directory may be swapped for its index file, so that
# a chain of directories named like the index can't loop.
INDEX_DEPTH: int = 1

NOT_FOUND: str = "invalid path"

FILE_CSS: str = """
:root {
    font-family: sans-serif;
    font-size: 14px;
    line-height: 1.35em;
    padding: 20px;
    background: #F0F0F0;
}
h1 {
    margin: 1.75em 0em;
}
ul {
    padding: 0px 20px;
    margin: 1.25em 0em;
}
li {
    padding: 0px 10px;
    margin: 0.5em 0em;
}
"""

# -----------------------------------------------------------------------------
#
# RESOLUTION
#
# -----------------------------------------------------------------------------


class RequestPath(NamedTuple):
	"""The percent-decoded segments of a URL path, the root being no
	segment at all."""

	segments: tuple[str, ...]

	@staticmethod
	def Parse(path: str) -> "RequestPath":
		# The leading `/` and any empty segment (`//`, trailing `/`) are
		# dropped.
		return RequestPath(
			tuple(unquote(_) for _ in path.split("?", 1)[0].split("/") if _)
		)

	@property
	def sitePath(self) -> str:
		return "/".join(self.segments)


class ResolvedFile(NamedTuple):
	path: Path
	content: bytes
	contentType: str


class ResolvedListing(NamedTuple):
	path: Path
	sitePath: str
	content: bytes
	contentType: str = "text/html"


class NotFound(NamedTuple):
	path: Path | None
	reason: str = NOT_FOUND


TResolved: TypeAlias = ResolvedFile | ResolvedListing | NotFound


def isWithin(root: Path, path: Path) -> bool:
	return path == root or root in path.parents


def listDirectory(directoryPath: Path, sitePath: str) -> bytes:
	"""Renders an HTML page listing the immediate children of the given
	directory, each linking to its own site path. Raises a `NotFoundError`
	when the directory can't be read."""
	try:
		entries = list(iterEntries(directoryPath, sitePath))
	except OSError as e:
		raise NotFoundError(f"Could not list directory: {e.strerror or e}") from e
	title: str = f"/{sitePath}"
	items = [
		H.li(
			H.a(
				f"{_.name}/" if _.isDirectory else _.name,
				href=href(*_.sitePath.split("/")),
			)
		)
		for _ in entries
	]
	page = H.html(
		H.head(
			H.meta(charset="utf-8"),
			H.meta(name="viewport", content="width=device-width, initial-scale=1.0"),
			H.title(f"Listing for {title}"),
			H.style(Raw(FILE_CSS)),
		),
		H.body(
			H.h1("Listing for ", title),
			H.ul(*items),
		),
	)
	return html(page).encode(DEFAULT_ENCODING)


def resolve(root: Path, urlPath: str | RequestPath) -> TResolved:
	"""Resolves the URL path against the root directory, producing either a
	file, a directory listing or a not found. The resolved path must stay
	within the root, which also rules out symlinks pointing outside of it."""
	request = urlPath if isinstance(urlPath, RequestPath) else RequestPath.Parse(urlPath)
	base: Path = root.resolve()
	# The requested name gives the content type, while the resolved path
	# is the one that is checked and read.
	name: Path = base.joinpath(*request.segments)
	try:
		path: Path = name.resolve()
	except (OSError, ValueError, RuntimeError) as e:
		# ValueError is raised for null bytes, RuntimeError for symlink loops
		return NotFound(None, f"{NOT_FOUND}: {e}")
	if not isWithin(base, path):
		return NotFound(path)
	try:
		for depth in range(INDEX_DEPTH + 1):
			if not path.exists():
				return NotFound(path)
			elif not path.is_dir():
				return ResolvedFile(path, path.read_bytes(), contentType(name))
			index: Path = (path / INDEX_FILE).resolve()
			if depth < INDEX_DEPTH and index.is_file() and isWithin(base, index):
				# The site path stays the one of the directory
				name, path = name / INDEX_FILE, index
				continue
			return ResolvedListing(
				path, request.sitePath, listDirectory(path, request.sitePath)
			)
	except OSError as e:
		# Like a name too long or a parent that can't be searched
		return NotFound(path, e.strerror or str(e))
	except RuntimeError as e:
		return NotFound(path, f"{NOT_FOUND}: {e}")
	except NotFoundError as e:
		return NotFound(path, e.message)
	return NotFound(path)


# -----------------------------------------------------------------------------
#
# SERVICE
#
# -----------------------------------------------------------------------------


class FileService(Service):
	"""Serves the files of the configured root directory, every successful
	response being compressed with the configured algorithm. There is no
	negotiation based on `Accept-Encoding`."""

	def __init__(self, config: ServerConfig):
		self.config: ServerConfig = config
		super().__init__()

	@on(GET=("/", "/{path:any}"))
	async def read(self, request: HTTPRequest, path: str = "") -> HTTPResponse:
		# Disk and compression work is kept off the event loop
		try:
			return await asyncio.to_thread(self.render, request)
		except HTTPRequestError:
			raise
		except Exception as e:
			exception(e, f"Could not render {request.path}")
			raise InternalError("Internal error") from e

	def render(self, request: HTTPRequest) -> HTTPResponse:
		target = resolve(self.config.root, request.path)
		if isinstance(target, NotFound):
			warning("Path not found", Path=request.path, Reason=target.reason)
			raise NotFoundError(target.reason)
		compression = self.config.compression
		try:
			payload = compress(target.content, compression)
		except CompressionError as e:
			exception(e, "Compression failed")
			raise InternalError("Internal error") from e
		if logged(LogLevel.Debug):
			debug(
				"Resolved",
				Path=request.path,
				Type=target.contentType,
				Size=len(target.content),
				Compressed=len(payload),
			)
		return request.respond(
			payload,
			contentType=target.contentType,
			headers={"Content-Encoding": compression.encoding},
		)


# EOF
