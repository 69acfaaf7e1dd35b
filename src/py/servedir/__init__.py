from .http.model import (
	HTTPRequest,
	HTTPResponse,
	HTTPRequestError,
	NotFoundError,
	MethodNotSupportedError,
	CompressionError,
	InternalError,
)  # NOQA: F401
from .decorators import on  # NOQA: F401
from .model import Service, Application, mount  # NOQA: F401
from .config import ServerConfig  # NOQA: F401
from .utils.codec import Compression, compress, decompress  # NOQA: F401
from .services.files import FileService, resolve, listDirectory  # NOQA: F401
from .server import run, serve  # NOQA: F401


# EOF
