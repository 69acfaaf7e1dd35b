from pathlib import Path
from typing import Iterator, NamedTuple

DEFAULT_CONTENT_TYPE: str = "text/plain"

# No sniffing is done, anything missing from this table is plain text.
CONTENT_TYPES: dict[str, str] = dict(
	css="text/css",
	js="text/javascript",
	html="text/html",
)


def contentType(path: Path | str) -> str:
	"""Returns the content type for the extension found after the last `.`
	of the given path."""
	parts = str(path).rsplit(".", 1)
	if len(parts) < 2:
		return DEFAULT_CONTENT_TYPE
	else:
		return CONTENT_TYPES.get(parts[1].lower(), DEFAULT_CONTENT_TYPE)


class FileEntry(NamedTuple):
	"""An entry in a directory listing, `parentPath` is the site path of the
	listed directory."""

	name: str
	parentPath: str
	isDirectory: bool = False

	@property
	def sitePath(self) -> str:
		return f"{self.parentPath}/{self.name}" if self.parentPath else self.name

	@staticmethod
	def FromPath(path: Path, parentPath: str) -> "FileEntry":
		return FileEntry(name=path.name, parentPath=parentPath, isDirectory=path.is_dir())


def iterEntries(path: Path, parentPath: str) -> Iterator[FileEntry]:
	"""Iterates on the immediate children of the directory at `path`, raises
	an `OSError` when the directory can't be read."""
	for child in sorted(path.iterdir(), key=lambda _: _.name):
		yield FileEntry.FromPath(child, parentPath)


# EOF
