import asyncio
import errno
import socket
import threading
from signal import SIGINT, SIGTERM
from typing import Callable, NamedTuple

from .config import HOST, PORT, ServerConfig
from .http.model import (
	HTTPBodyWriter,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPResponse,
	InternalError,
)
from .http.parser import HTTPParser
from .model import Application, mount
from .services.files import FileService
from .utils.logging import debug, error, event, exception, info, warning

# How many ports are tried, from the requested one, before giving up
PORT_ATTEMPTS: int = 5


class ServerOptions(NamedTuple):
	host: str = HOST
	port: int = PORT
	backlog: int = 1_024
	# Timeout for accepting connections, a stop is noticed within it
	polling: float = 1.0
	readsize: int = 4_096
	keepalive: float = 60.0
	logRequests: bool = True
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True


BAD_REQUEST: HTTPResponse = HTTPResponse.Create(
	"Bad request", "text/plain", status=400, headers={"Connection": "close"}
)


async def respond(
	app: Application, request: HTTPRequest, writer: HTTPBodyWriter
) -> HTTPResponse:
	"""Processes the request and writes its response. A failure while
	processing is answered with a 500, so that the connection carries on."""
	try:
		res = await app.process(request)
	except Exception as e:
		exception(e, f"Could not process {request.method} {request.path}")
		res = request.respondError(InternalError("Internal error"))
	await writer.write(res.head() + res.payload)
	return res


async def reject(writer: HTTPBodyWriter) -> None:
	await writer.write(BAD_REQUEST.head() + BAD_REQUEST.payload)


class SocketWriter(HTTPBodyWriter):
	def __init__(self, client: socket.socket, loop: asyncio.AbstractEventLoop):
		self.client: socket.socket = client
		self.loop: asyncio.AbstractEventLoop = loop

	async def write(self, data: bytes) -> None:
		await self.loop.sock_sendall(self.client, data)


class SocketServer:
	"""Accepts connections on a non-blocking socket, serving each of them
	in its own task."""

	def __init__(self, app: Application, options: ServerOptions = ServerOptions()):
		self.app: Application = app
		self.options: ServerOptions = options
		self.isRunning: bool = False

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def bind(self) -> tuple[socket.socket, int]:
		"""Binds the server socket, trying the next ports when the requested
		one is not available."""
		host: str = self.options.host
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		failure: OSError | None = None
		for port in range(self.options.port, self.options.port + PORT_ATTEMPTS):
			try:
				server.bind((host, port))
				return server, port
			except OSError as e:
				warning("Port not available", Host=host, Port=port, Reason=e.strerror)
				failure = failure or e
		server.close()
		error(f"Unable to bind to {host}:{self.options.port}, aborting.", "HOSTPORTERR")
		raise failure or OSError(f"Unable to bind to {host}:{self.options.port}")

	async def handle(
		self, client: socket.socket, loop: asyncio.AbstractEventLoop
	) -> None:
		"""Answers the requests of a connection in order, until the client
		closes it, asks for it to be closed or stays idle too long."""
		parser = HTTPParser()
		writer = SocketWriter(client, loop)
		buffer = bytearray(self.options.readsize)
		status: HTTPProcessingStatus = HTTPProcessingStatus.Processing
		count: int = 0
		try:
			while status is HTTPProcessingStatus.Processing:
				try:
					read = await asyncio.wait_for(
						loop.sock_recv_into(client, buffer),
						timeout=self.options.keepalive,
					)
				except TimeoutError:
					status = HTTPProcessingStatus.Timeout
					break
				if not read:
					status = HTTPProcessingStatus.NoData
					break
				# Pipelined requests may share the same chunk
				for atom in parser.feed(bytes(buffer[:read])):
					if atom is HTTPProcessingStatus.BadFormat:
						warning("Malformed request", Client=f"{id(client):x}")
						await reject(writer)
						status = atom
						break
					elif isinstance(atom, HTTPRequest):
						count += 1
						if self.options.logRequests:
							event(atom.method, atom.path)
						await respond(self.app, atom, writer)
						if not atom.keepAlive:
							status = HTTPProcessingStatus.Closed
							break
			debug(
				"Connection done",
				Client=f"{id(client):x}",
				Status=status.name,
				Requests=count,
			)
		except (BrokenPipeError, ConnectionResetError) as e:
			# The client went away, whatever was being sent is discarded
			warning(
				"Connection dropped",
				Client=f"{id(client):x}",
				Reason=e.__class__.__name__,
			)
		except Exception as e:
			exception(e)
		finally:
			client.close()

	async def run(self) -> None:
		"""Accepts connections until stopped, either by a signal or once
		the `condition` option returns false."""
		options = self.options
		server, port = self.bind()
		server.listen(options.backlog)
		server.setblocking(False)
		loop = asyncio.get_running_loop()
		# Signal handlers can only be set from the main thread
		if options.stopSignals and threading.current_thread() is threading.main_thread():
			for signal in (SIGINT, SIGTERM):
				loop.add_signal_handler(signal, self.stop)
		tasks: set[asyncio.Task[None]] = set()
		self.isRunning = True
		info("Server listening", Host=options.host, Port=port)
		try:
			while self.isRunning and (options.condition is None or options.condition()):
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling
					)
				except TimeoutError:
					continue
				except OSError as e:
					# Running out of file descriptors is transient
					if e.errno == errno.EMFILE:
						await asyncio.sleep(0.1)
					else:
						exception(e)
					continue
				client.setblocking(False)
				task = loop.create_task(self.handle(client, loop))
				tasks.add(task)
				task.add_done_callback(tasks.discard)
		finally:
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)


def serve(config: ServerConfig) -> Application:
	"""Creates the application serving the configured root."""
	return mount(FileService(config), methodStatus=config.methodStatus)


def run(
	config: ServerConfig,
	*,
	condition: Callable[[], bool] | None = None,
	stopSignals: bool = True,
) -> None:
	"""Runs the server until it is stopped."""
	options = ServerOptions(
		host=config.host,
		port=config.port,
		logRequests=config.logRequests,
		condition=condition,
		stopSignals=stopSignals,
	)
	info(
		"Starting server",
		Directory=str(config.root),
		Compression=config.compression.label,
	)
	try:
		asyncio.run(SocketServer(serve(config), options).run())
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF
