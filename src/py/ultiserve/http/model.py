from abc import ABC, abstractmethod
from enum import Enum
from typing import (
	Any,
	Callable,
	NamedTuple,
	TypeAlias,
	TypeVar,
	Union,
)

from ..utils.io import DEFAULT_ENCODING
from .api import ResponseFactory
from .status import HTTP_STATUS

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`, `content-type` giving
	`Content-Type`. Names are memoized by their lowercase form."""
	key: str = name.lower()
	res = headers.get(key)
	if res is None:
		res = headers[key] = "-".join(_.capitalize() for _ in key.split("-"))
	return res


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPRequestLine(NamedTuple):
	method: str
	path: str
	query: str
	protocol: str


class HTTPHeaders(NamedTuple):
	"""Headers by normalized name, with the ones that drive parsing."""

	headers: dict[str, str]
	contentType: str | None = None
	contentLength: int | None = None


class HTTPProcessingStatus(Enum):
	"""Parser states reported alongside the parsed atoms"""

	Body = 1
	BadFormat = 12


class HTTPRequestError(Exception):
	"""Raised by handlers to respond with an error status."""

	def __init__(self, message: str, status: int = 500):
		super().__init__(message)
		self.message: str = message
		self.status: int = status


# -----------------------------------------------------------------------------
#
# BODY
#
# -----------------------------------------------------------------------------


class HTTPBodyBlob(NamedTuple):
	"""A whole body held in memory, as files are always read entirely
	before being sent."""

	payload: bytes = b""
	length: int = 0

	@staticmethod
	def FromBytes(data: bytes) -> "HTTPBodyBlob":
		return HTTPBodyBlob(data, len(data))


class HTTPBodyWriter(ABC):
	"""Writes responses to a transport, which implements `_writeBytes`."""

	__slots__ = ["shouldClose"]

	def __init__(self) -> None:
		self.shouldClose: bool = False

	async def write(self, body: HTTPBodyBlob | bytes | None) -> bool:
		match body:
			case None:
				return True
			case bytes():
				return await self._writeBytes(body)
			case HTTPBodyBlob(payload):
				return await self._writeBytes(payload)
			case _:
				raise ValueError(f"Unsupported body format: {body}")

	@abstractmethod
	async def _writeBytes(self, chunk: bytes) -> bool: ...


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest(ResponseFactory["HTTPResponse"]):
	"""A parsed request, which is also the factory of its responses. The
	path is kept percent-encoded as sent by the client, while the query
	is decoded."""

	__slots__ = ["method", "path", "query", "protocol", "_headers", "_body"]

	def __init__(
		self,
		method: str,
		path: str,
		query: dict[str, str] | None,
		headers: HTTPHeaders,
		body: HTTPBodyBlob | None = None,
		protocol: str = "HTTP/1.1",
	):
		super().__init__()
		self.method: str = method
		self.path: str = path
		self.query: dict[str, str] = query or {}
		self.protocol: str = protocol
		self._headers: HTTPHeaders = headers
		self._body: HTTPBodyBlob | None = body

	@property
	def headers(self) -> dict[str, str]:
		return self._headers.headers

	def header(self, name: str) -> str | None:
		return self._headers.headers.get(headername(name))

	def param(
		self,
		name: str,
		default: T | None = None,
		processor: Callable[[str | T | None], Any] | None = None,
	) -> Any:
		"""Returns the decoded query parameter, optionally converted by
		`processor`. A parameter given without a value is an empty string."""
		value = self.query.get(name, default)
		return processor(value) if processor else value

	@property
	def body(self) -> HTTPBodyBlob:
		return self._body or HTTPBodyBlob()

	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			content,
			contentType,
			headers=headers,
			status=status,
			message=message,
			protocol=self.protocol,
		)

	def __str__(self) -> str:
		return f"Request({self.method} {self.path} {self.query or ''})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""A complete response, which always has a `Content-Length` so that
	connections can be kept alive."""

	@staticmethod
	def Create(
		content: str | bytes | None = None,
		contentType: str | None = None,
		headers: dict[str, str] | None = None,
		status: int = 200,
		message: str | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPResponse":
		if content is None:
			body = HTTPBodyBlob()
		elif isinstance(content, str):
			body = HTTPBodyBlob.FromBytes(content.encode(DEFAULT_ENCODING))
		elif isinstance(content, bytes):
			body = HTTPBodyBlob.FromBytes(content)
		else:
			raise ValueError(f"Unsupported content {type(content)}: {content!r}")
		values: dict[str, str] = {headername(k): v for k, v in (headers or {}).items()}
		if contentType is not None:
			values["Content-Type"] = contentType
		values["Content-Length"] = str(body.length)
		return HTTPResponse(
			protocol=protocol,
			status=status,
			message=message,
			headers=HTTPHeaders(values, contentType, body.length),
			body=body,
		)

	__slots__ = ["protocol", "status", "message", "headers", "body", "shouldClose"]

	def __init__(
		self,
		protocol: str,
		status: int,
		message: str | None,
		headers: HTTPHeaders,
		body: HTTPBodyBlob | None = None,
		shouldClose: bool = False,
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str = message or HTTP_STATUS.get(status, "Unknown Status")
		self.headers: HTTPHeaders = headers
		self.body: HTTPBodyBlob | None = body
		self.shouldClose: bool = shouldClose

	@property
	def contentType(self) -> str | None:
		return self.getHeader("Content-Type")

	@property
	def payload(self) -> bytes:
		return self.body.payload if self.body else b""

	def getHeader(self, name: str) -> str | None:
		return self.headers.headers.get(headername(name))

	def head(self) -> bytes:
		"""The status line and headers, up to and including the empty line
		that precedes the body."""
		lines = [f"{self.protocol} {self.status} {self.message}"] + [
			f"{k}: {v}" for k, v in self.headers.headers.items()
		]
		# Header values we produce are ASCII, file names go percent-encoded
		return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.message})"


HTTPAtom: TypeAlias = Union[
	HTTPRequestLine,
	HTTPHeaders,
	HTTPProcessingStatus,
	HTTPRequest,
]


# EOF
