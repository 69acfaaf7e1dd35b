from os import getenv
from pathlib import Path
from typing import NamedTuple

from .utils.codec import Compression

DEFAULT_DIR: str = "./"

PORT: int = int(getenv("PORT", 8080))

# A development file server is expected to be accessible from everywhere
HOST: str = getenv("HOST", "0.0.0.0")  # nosec: B104

COMPRESSION: Compression = Compression.Parse(getenv("SERVEDIR_COMPRESSION", "gzip"))

LOG_REQUESTS: bool = getenv("SERVEDIR_LOG_REQUESTS", "1") == "1"


class ServerConfig(NamedTuple):
	"""The configuration of a server, fixed at startup and shared read-only
	by every request."""

	root: Path
	compression: Compression = COMPRESSION
	host: str = HOST
	port: int = PORT
	# Status for unsupported methods, 405 when strict
	methodStatus: int = 404
	logRequests: bool = LOG_REQUESTS

	@staticmethod
	def Make(
		root: str | Path | None = None,
		compression: Compression | str = COMPRESSION,
		*,
		host: str = HOST,
		port: int = PORT,
		strictMethods: bool = False,
		logRequests: bool = LOG_REQUESTS,
	) -> "ServerConfig":
		"""Creates a configuration with a canonical root, raising a
		`ValueError` when the root is not an existing directory."""
		path = Path(root or DEFAULT_DIR).resolve()
		if not path.is_dir():
			raise ValueError(f"Root is not a directory: {path}")
		return ServerConfig(
			root=path,
			compression=(
				compression
				if isinstance(compression, Compression)
				else Compression.Parse(compression)
			),
			host=host,
			port=port,
			methodStatus=405 if strictMethods else 404,
			logRequests=logRequests,
		)


# EOF
