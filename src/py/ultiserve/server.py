import asyncio
import socket
import threading
import time
from dataclasses import dataclass
from signal import SIGINT, SIGTERM
from typing import Any, Callable, NamedTuple

from .config import HOST, LOG_REQUESTS, PORT
from .http.model import (
	HTTPBodyWriter,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPResponse,
)
from .http.parser import HTTPParser
from .model import Application, Service, mount
from .utils.logging import LogLevel, debug, error, event, exception, info, logged, warning


@dataclass(slots=True)
class ServerState:
	isRunning: bool = True

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		e = context.get("exception")
		if e:
			exception(e)


class ServerOptions(NamedTuple):
	host: str = HOST
	port: int = PORT
	backlog: int = 1_000
	# Polling timeout for accepting new connections, so that a stop is
	# noticed within that time.
	polling: float = 1.0
	readsize: int = 4_096
	# Idle connections are closed after that many seconds
	keepalive: float = 30.0
	logRequests: bool = LOG_REQUESTS
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True


SERVER_BAD_REQUEST: bytes = (
	b"HTTP/1.1 400 Bad Request\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 11\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Bad Request"
)

SERVER_ERROR: bytes = (
	b"HTTP/1.1 500 Internal Server Error\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 21\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Internal Server Error"
)


class AIOSocketBodyWriter(HTTPBodyWriter):
	"""Specialized body writer to work with AIO sockets."""

	def __init__(
		self,
		client: "socket.socket",
		loop: asyncio.AbstractEventLoop,
	) -> None:
		super().__init__()
		self.client: socket.socket = client
		self.loop: asyncio.AbstractEventLoop = loop

	async def _writeBytes(self, chunk: bytes) -> bool:
		if chunk:
			await self.loop.sock_sendall(self.client, chunk)
		return True


class AIOSocketServer:
	"""AsyncIO backend using sockets directly, with one task per
	connection."""

	@classmethod
	async def OnRequest(
		cls,
		app: Application,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
	) -> None:
		"""Processes the requests sent by the client on the connection, until
		it is closed or stays idle for longer than the keep-alive."""
		buffer = bytearray(options.readsize)
		keep_alive: bool = True
		req_count: int = 0
		res_count: int = 0
		try:
			parser: HTTPParser = HTTPParser()
			writer: AIOSocketBodyWriter = AIOSocketBodyWriter(client, loop)
			while keep_alive and not writer.shouldClose:
				try:
					n = await asyncio.wait_for(
						loop.sock_recv_into(client, buffer),
						timeout=options.keepalive,
					)
				except (TimeoutError, asyncio.TimeoutError):
					logged(LogLevel.Debug) and debug(
						"Client timed out", Requests=req_count, Responses=res_count
					)
					break
				if not n:
					# No data means the client closed the connection
					break
				# With HTTP pipelining, the payload may hold more than one
				# request.
				for atom in parser.feed(bytes(buffer[:n])):
					if atom is HTTPProcessingStatus.BadFormat:
						warning("Malformed request", Client=f"{id(client):x}")
						await writer.write(SERVER_BAD_REQUEST)
						keep_alive = False
						break
					elif isinstance(atom, HTTPRequest):
						req_count += 1
						if (
							atom.protocol == "HTTP/1.0"
							or (atom.header("Connection") or "").lower() == "close"
						):
							keep_alive = False
						res = await cls.SendResponse(
							atom, app, writer, logRequests=options.logRequests
						)
						if res:
							res_count += 1
							if res.shouldClose:
								keep_alive = False
			if res_count != req_count:
				warning("Incomplete responses", Requests=req_count, Responses=res_count)
		except (BrokenPipeError, ConnectionResetError):
			# The client went away, whatever was being sent is dropped
			pass
		except Exception as e:
			exception(e)
		finally:
			client.close()

	@staticmethod
	async def SendResponse(
		request: HTTPRequest,
		app: Application,
		writer: HTTPBodyWriter,
		*,
		logRequests: bool = True,
	) -> HTTPResponse | None:
		"""Processes the request within the application and sends a response
		using the given writer. A failing handler results in a 500 error, no
		partial response is ever sent."""
		started: float = time.monotonic()
		res: HTTPResponse | None = None
		try:
			res = await Process(app, request)
		except Exception as e:
			exception(e, f"Could not process {request.method} {request.path}")
		if res is None:
			await writer.write(SERVER_ERROR)
			writer.shouldClose = True
			status: int = 500
		else:
			await writer.write(res.head() + res.payload)
			status = res.status
		if logRequests:
			event(
				request.method,
				request.path,
				Status=status,
				Duration=f"{(time.monotonic() - started) * 1000:0.1f}ms",
			)
		return res

	@classmethod
	async def Serve(
		cls,
		app: Application,
		options: ServerOptions = ServerOptions(),
	) -> None:
		"""Main server coroutine."""
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		server.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
		try:
			server.bind((options.host, options.port))
		except OSError as e:
			server.close()
			error(
				f"Unable to bind to {options.host}:{options.port}, aborting.",
				"HOSTPORTERR",
			)
			raise e from e
		server.listen(options.backlog)
		server.setblocking(False)
		port: int = server.getsockname()[1]

		tasks: set[asyncio.Task[None]] = set()
		loop = asyncio.get_running_loop()

		state = ServerState()
		# Signal handlers can only be set from the main thread
		if (
			options.stopSignals
			and threading.current_thread() is threading.main_thread()
		):
			loop.add_signal_handler(SIGINT, lambda: state.stop())
			loop.add_signal_handler(SIGTERM, lambda: state.stop())
		loop.set_exception_handler(state.onException)

		# The address is always shown as localhost, whatever the bind address
		info(f"Serving files at http://127.0.0.1:{port}", icon="🚀", Host=options.host)

		try:
			while state.isRunning:
				if options.condition and not options.condition():
					break
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling or 1.0
					)
				except (TimeoutError, asyncio.TimeoutError):
					continue
				except OSError as e:
					# This can be: [OSError] [Errno 24] Too many open files
					if e.errno == 24:
						await asyncio.sleep(0.1)
					else:
						exception(e)
					continue
				task = loop.create_task(
					cls.OnRequest(app, client, loop=loop, options=options)
				)
				tasks.add(task)
				task.add_done_callback(tasks.discard)
		finally:
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)


async def Process(app: Application, request: HTTPRequest) -> HTTPResponse:
	"""Processes the request within the application, awaiting the response
	when the handler is asynchronous."""
	r = app.process(request)
	return r if isinstance(r, HTTPResponse) else await r


def run(
	*components: Application | Service,
	host: str = HOST,
	port: int = PORT,
	backlog: int = ServerOptions.backlog,
	condition: Callable[[], bool] | None = None,
	polling: float = ServerOptions.polling,
	logRequests: bool = LOG_REQUESTS,
	keepalive: float = ServerOptions.keepalive,
) -> None:
	"""High level function to run the server."""
	options = ServerOptions(
		host=host,
		port=port,
		backlog=backlog,
		condition=condition,
		polling=polling,
		logRequests=logRequests,
		keepalive=keepalive,
	)
	app = mount(*components)
	try:
		asyncio.run(AIOSocketServer.Serve(app, options))
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF
