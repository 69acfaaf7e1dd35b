import argparse
import sys

from . import config
from .config import ServerConfig
from .server import run
from .utils.logging import error


def main(args: list[str] | None = None) -> int:
	parser = argparse.ArgumentParser(
		prog="servedir",
		description="Serves a local directory over HTTP, compressing every response",
		formatter_class=argparse.ArgumentDefaultsHelpFormatter,
	)
	parser.add_argument(
		"-p",
		"--port",
		action="store",
		dest="port",
		type=int,
		help="Port to start the server on",
		default=config.PORT,
	)
	parser.add_argument(
		"-a",
		"--algorithm",
		action="store",
		dest="algorithm",
		help="Compression algorithm, gzip or brotli (anything else is gzip)",
		default=config.COMPRESSION.label,
	)
	parser.add_argument(
		"-H",
		"--host",
		action="store",
		dest="host",
		help="Interface to listen on",
		default=config.HOST,
	)
	parser.add_argument(
		"--strict-methods",
		action="store_true",
		dest="strictMethods",
		help="Answer unsupported methods with 405 instead of 404",
	)
	parser.add_argument(
		"directory",
		metavar="DIRECTORY",
		nargs="?",
		default=config.DEFAULT_DIR,
		help="The directory to serve",
	)
	options = parser.parse_args(args=args)
	try:
		server_config = ServerConfig.Make(
			options.directory,
			options.algorithm,
			host=options.host,
			port=options.port,
			strictMethods=options.strictMethods,
		)
	except ValueError as e:
		error(str(e), "BADROOT")
		return 1
	run(server_config)
	return 0


if __name__ == "__main__":
	sys.exit(main(sys.argv[1:]))

# EOF
