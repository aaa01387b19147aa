from typing import Iterator, Literal
from urllib.parse import unquote_plus
from ..utils.io import LineParser
from .model import (
	HTTPRequest,
	HTTPRequestLine,
	HTTPHeaders,
	HTTPBodyBlob,
	HTTPAtom,
	HTTPProcessingStatus,
	headername,
)

# --
# # HTTP Parser
#
# Requests are parsed incrementally as chunks are received: the request
# line first, then the headers up to the empty line, and then the body when
# there is a `Content-Length`. Each step has its own parser, which buffers
# what it needs between feeds.


class MessageParser:
	"""Parses the request line, `METHOD PATH[?QUERY] PROTOCOL`."""

	__slots__ = ["line", "value"]

	def __init__(self) -> None:
		self.line: LineParser = LineParser()
		self.value: HTTPRequestLine | Literal[False] | None = None

	def flush(self) -> HTTPRequestLine | Literal[False] | None:
		value = self.value
		self.reset()
		return value

	def reset(self) -> "MessageParser":
		self.line.reset()
		self.value = None
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bool | None, int]:
		line, read = self.line.feed(chunk, start)
		# Empty lines between pipelined requests are skipped
		if not line:
			return None, read
		self.value = self.parseLine(line)
		return True, read

	@staticmethod
	def parseLine(line: bytes) -> HTTPRequestLine | Literal[False]:
		"""Returns the parsed request line, or `False` when malformed."""
		try:
			method, target, protocol = line.decode("ascii").split(" ")
		except (UnicodeDecodeError, ValueError):
			return False
		if not method or not target.startswith("/"):
			return False
		path, _, query = target.partition("?")
		return HTTPRequestLine(method, path, query, protocol)


class HeadersParser:
	"""Parses header lines until the empty line that ends them."""

	__slots__ = ["line", "headers", "contentType", "contentLength"]

	def __init__(self) -> None:
		self.line: LineParser = LineParser()
		self.headers: dict[str, str] = {}
		self.contentType: str | None = None
		self.contentLength: int | None = None

	def flush(self) -> HTTPHeaders:
		headers = HTTPHeaders(self.headers, self.contentType, self.contentLength)
		self.reset()
		return headers

	def reset(self) -> "HeadersParser":
		self.line.reset()
		self.headers = {}
		self.contentType = None
		self.contentLength = None
		return self

	def feed(
		self, chunk: bytes, start: int = 0
	) -> tuple[str | Literal[False] | None, int]:
		"""Returns the name of the parsed header, `False` once the headers
		are complete, or `None` when more data is needed, along with the
		number of bytes read from `start`."""
		line, read = self.line.feed(chunk, start)
		if line is None:
			return None, read
		elif not line:
			return False, read
		# Header values are ASCII, anything else is kept byte for byte
		name, sep, value = line.decode("latin-1").partition(":")
		if not sep:
			return None, read
		name = headername(name.strip())
		value = value.strip()
		if name == "Content-Length":
			self.contentLength = int(value) if value.isdigit() else None
		elif name == "Content-Type":
			self.contentType = value
		self.headers[name] = value
		return name, read


class BodyLengthParser:
	"""Reads a body of a known length."""

	__slots__ = ["expected", "read", "data"]

	def __init__(self) -> None:
		self.expected: int = 0
		self.read: int = 0
		self.data: list[bytes] = []

	def flush(self) -> HTTPBodyBlob:
		body = HTTPBodyBlob.FromBytes(b"".join(self.data))
		self.reset()
		return body

	def reset(self, length: int = 0) -> "BodyLengthParser":
		self.expected = length
		self.read = 0
		self.data = []
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bool | None, int]:
		n: int = min(len(chunk) - start, self.expected - self.read)
		self.data.append(chunk[start : start + n])
		self.read += n
		return (True if self.read >= self.expected else None), n


class HTTPParser:
	"""Yields the atoms parsed from the fed chunks, a complete request being
	yielded as an `HTTPRequest`. Pipelined requests are yielded in order, a
	malformed request line yields `BadFormat` and stops the parsing."""

	def __init__(self) -> None:
		self.message: MessageParser = MessageParser()
		self.headers: HeadersParser = HeadersParser()
		self.bodyLength: BodyLengthParser = BodyLengthParser()
		self.parser: MessageParser | HeadersParser | BodyLengthParser = self.message
		self.requestLine: HTTPRequestLine | None = None
		self.requestHeaders: HTTPHeaders | None = None

	def reset(self) -> "HTTPParser":
		self.parser = self.message.reset()
		self.headers.reset()
		self.bodyLength.reset()
		self.requestLine = None
		self.requestHeaders = None
		return self

	def feed(self, chunk: bytes) -> Iterator[HTTPAtom]:
		offset: int = 0
		while offset < len(chunk):
			value, read = self.parser.feed(chunk, offset)
			offset += read
			if value is None:
				continue
			if self.parser is self.message:
				line = self.message.flush()
				if not line:
					self.reset()
					yield HTTPProcessingStatus.BadFormat
					return
				self.requestLine = line
				self.parser = self.headers
				yield line
			elif self.parser is self.headers:
				# Until the empty line, `value` is the name of a header
				if value is not False:
					continue
				self.requestHeaders = self.headers.flush()
				yield self.requestHeaders
				if self.requestHeaders.contentLength:
					self.parser = self.bodyLength.reset(
						self.requestHeaders.contentLength
					)
					yield HTTPProcessingStatus.Body
				else:
					yield self.request(HTTPBodyBlob())
			else:
				yield self.request(self.bodyLength.flush())

	def request(self, body: HTTPBodyBlob) -> HTTPRequest | HTTPProcessingStatus:
		"""Creates the request from what was parsed so far, and gets ready
		for the next one."""
		line, headers = self.requestLine, self.requestHeaders
		self.reset()
		if line is None or headers is None:
			return HTTPProcessingStatus.BadFormat
		return HTTPRequest(
			method=line.method,
			path=line.path,
			query=parseQuery(line.query),
			headers=headers,
			body=body,
			protocol=line.protocol,
		)


def parseQuery(text: str) -> dict[str, str]:
	"""Decodes a query string, where keys given without a value map to an
	empty string."""
	query: dict[str, str] = {}
	for item in text.split("&"):
		if item:
			key, sep, value = item.partition("=")
			query[unquote_plus(key)] = unquote_plus(value) if sep else ""
	return query


# EOF
