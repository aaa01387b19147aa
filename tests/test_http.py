import pytest

from ultiserve.http.model import HTTPProcessingStatus, HTTPRequest, HTTPResponse
from ultiserve.http.parser import HTTPParser, parseQuery
from ultiserve.routing import Dispatcher, Handler, Route
from ultiserve.decorators import on
from ultiserve.utils.io import LineParser


def requests(*chunks: bytes) -> list:
	parser = HTTPParser()
	return [atom for chunk in chunks for atom in parser.feed(chunk)]


def test_request_split_across_chunks():
	atoms = requests(
		b"GET /docs/a%20b.txt",
		b"?raw=1 HTTP/1.1\r\nHost: ",
		b"127.0.0.1\r",
		b"\nConn",
		b"ection: close\r\n",
		b"\r",
		b"\n",
	)
	reqs = [_ for _ in atoms if isinstance(_, HTTPRequest)]
	assert len(reqs) == 1
	req = reqs[0]
	assert req.method == "GET"
	assert req.path == "/docs/a%20b.txt"
	assert req.param("raw") == "1"
	assert req.header("connection") == "close"
	assert req.header("Host") == "127.0.0.1"


def test_pipelined_requests():
	atoms = requests(
		b"GET /a HTTP/1.1\r\n\r\nPOST /b HTTP/1.1\r\nContent-Length: 3\r\n\r\nabcGET /c HTTP/1.1\r\n\r\n"
	)
	reqs = [_ for _ in atoms if isinstance(_, HTTPRequest)]
	assert [(_.method, _.path) for _ in reqs] == [
		("GET", "/a"),
		("POST", "/b"),
		("GET", "/c"),
	]
	assert reqs[1].body.payload == b"abc"


@pytest.mark.parametrize(
	"line",
	[b"GARBAGE\r\n", b"GET HTTP/1.1\r\n", b"GET docs HTTP/1.1\r\n", b"GET /\xff HTTP/1.1\r\n"],
)
def test_malformed_request_line(line: bytes):
	assert requests(line) == [HTTPProcessingStatus.BadFormat]


def test_line_split_across_chunks():
	parser = LineParser()
	assert parser.feed(b"GET / HTTP/1.1\r") == (None, 15)
	assert parser.feed(b"\nHost: x\r\n") == (b"GET / HTTP/1.1", 1)
	assert parser.feed(b"\nHost: x\r\n", 1) == (b"Host: x", 9)
	assert parser.feed(b"ab\r\ncd", 0) == (b"ab", 4)


def test_query_parsing():
	assert parseQuery("raw&format=json&q=a+b&p=%2Fx") == {
		"raw": "",
		"format": "json",
		"q": "a b",
		"p": "/x",
	}
	assert parseQuery("") == {}


def test_response_head():
	res = HTTPResponse.Create("héllo", "text/plain; charset=utf-8", status=404)
	head = res.head()
	assert head.startswith(b"HTTP/1.1 404 Not Found\r\n")
	assert b"Content-Length: 6\r\n" in head
	assert head.endswith(b"\r\n\r\n")
	assert res.payload == "héllo".encode("utf-8")


def test_empty_response_has_length():
	res = HTTPResponse.Create(status=204)
	assert res.getHeader("Content-Length") == "0"
	assert res.payload == b""


@pytest.mark.parametrize(
	"route, matching, other",
	[
		("/post", ["/post"], ["", "/post/", "/poster"]),
		("/post/{id}", ["/post/a", "/post/ab"], ["/post/", "/post/a/"]),
		("/{path:any}", ["/", "/a", "/a/b/c.txt"], [""]),
		("/a.b", ["/a.b"], ["/aXb"]),
	],
)
def test_route_matching(route: str, matching: list[str], other: list[str]):
	r = Route(route)
	for path in matching:
		assert r.match(path) is not None, path
	for path in other:
		assert r.match(path) is None, path


def test_route_parameters():
	assert Route("/{path:any}").match("/a/b") == {"path": "a/b"}
	assert Route("/items/{n:int}").match("/items/42") == {"n": 42}
	with pytest.raises(ValueError):
		Route("/{x:unknown}")


def test_dispatcher():
	class Resource:
		@on(GET=("/", "/{path:any}"))
		def read(self, request, path=""):
			return path

	handler = Handler.Get(Resource().read)
	assert handler is not None
	dispatcher = Dispatcher().register(handler)
	route, params = dispatcher.match("GET", "/")
	assert route is not None and params == {}
	route, params = dispatcher.match("GET", "/docs/a")
	assert params == {"path": "docs/a"}
	assert dispatcher.match("POST", "/docs") == (None, None)
	assert dispatcher.allowed("/docs") == ["GET"]


# EOF
