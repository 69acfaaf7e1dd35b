import pytest

from servedir.http.model import (
	HTTPHeaders,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPRequestLine,
	HTTPResponse,
)
from servedir.http.parser import BODY_LIMIT, HEADERS_LIMIT, HTTPParser, parseQuery
from servedir.utils.io import LINE_LIMIT, LineParser, LineTooLong


def requests(parser: HTTPParser, *chunks: bytes) -> list[HTTPRequest]:
	return [
		atom
		for chunk in chunks
		for atom in parser.feed(chunk)
		if isinstance(atom, HTTPRequest)
	]


def test_request_split_across_chunks() -> None:
	parser = HTTPParser()
	res = requests(
		parser,
		b"GET /time/5 ",
		b"HTTP/1.1\r\nHost: ",
		b"127.0.0.1\r",
		b"\nConn",
		b"ection: close\r\n",
		b"\r",
		b"\n",
	)
	assert len(res) == 1
	req = res[0]
	assert req.method == "GET"
	assert req.path == "/time/5"
	assert req.protocol == "HTTP/1.1"
	assert req.header("Host") == "127.0.0.1"
	assert req.header("connection") == "close"


def test_atoms_order() -> None:
	atoms = list(HTTPParser().feed(b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n"))
	assert isinstance(atoms[0], HTTPRequestLine)
	assert isinstance(atoms[1], HTTPHeaders)
	assert isinstance(atoms[2], HTTPRequest)


def test_pipelined_requests() -> None:
	parser = HTTPParser()
	res = requests(
		parser,
		b"GET /a HTTP/1.1\r\n\r\nGET /b?x=1&y=a+b HTTP/1.1\r\n\r\n",
	)
	assert [_.path for _ in res] == ["/a", "/b"]
	assert res[1].query == {"x": "1", "y": "a b"}


def test_body_with_length() -> None:
	parser = HTTPParser()
	atoms = list(
		parser.feed(b"POST /form HTTP/1.1\r\nContent-Length: 10\r\n\r\nhello")
	)
	assert HTTPProcessingStatus.Body in atoms
	assert not any(isinstance(_, HTTPRequest) for _ in atoms)
	res = requests(parser, b"world")
	assert len(res) == 1
	assert res[0].method == "POST"
	assert res[0].body == b"helloworld"


def test_get_body_is_consumed() -> None:
	parser = HTTPParser()
	res = requests(
		parser,
		b"GET /a HTTP/1.1\r\nContent-Length: 3\r\n\r\nabcGET /b HTTP/1.1\r\n\r\n",
	)
	assert [_.path for _ in res] == ["/a", "/b"]
	assert res[0].body == b"abc"


def test_lowercase_method() -> None:
	(req,) = requests(HTTPParser(), b"get /x HTTP/1.1\r\n\r\n")
	assert req.method == "GET"


def test_malformed_line_is_http10() -> None:
	(req,) = requests(HTTPParser(), b"GET /\r\n\r\n")
	assert req.method == "GET"
	assert req.path == "/"
	assert req.protocol == "HTTP/1.0"


def test_response() -> None:
	atoms = list(
		HTTPParser().feed(
			b"HTTP/1.1 404 Not Found\r\nContent-Type: text/plain\r\nContent-Length: 12\r\n\r\ninvalid path"
		)
	)
	res = atoms[-1]
	assert isinstance(res, HTTPResponse)
	assert res.status == 404
	assert res.message == "Not Found"
	assert res.header("content-type") == "text/plain"
	assert res.payload == b"invalid path"


def test_parse_query() -> None:
	assert parseQuery("") == {}
	assert parseQuery("a=1&&b") == {"a": "1", "b": ""}
	assert parseQuery("q=%2Fdir%20name") == {"q": "/dir name"}


def test_line_parser() -> None:
	lines = LineParser(limit=16)
	assert lines.feed(b"GET / HTTP/1.1\r") == (None, 15)
	assert lines.feed(b"\nHost") == (b"GET / HTTP/1.1", 1)
	assert lines.feed(b"\nHost", 1) == (None, 4)
	with pytest.raises(LineTooLong):
		lines.feed(b"x" * 16)


def test_overlong_line_is_bad_format() -> None:
	parser = HTTPParser()
	atoms = list(parser.feed(b"GET /" + b"a" * (LINE_LIMIT // 2)))
	assert atoms == []
	atoms = list(parser.feed(b"a" * (LINE_LIMIT // 2)))
	assert atoms == [HTTPProcessingStatus.BadFormat]
	# The buffer did not grow past the limit
	assert len(parser.lines.buffer) <= LINE_LIMIT
	# Anything after is ignored
	assert list(parser.feed(b"\r\n\r\nGET / HTTP/1.1\r\n\r\n")) == []


def test_overlong_header_is_bad_format() -> None:
	atoms = list(
		HTTPParser().feed(b"GET / HTTP/1.1\r\nX-Long: " + b"a" * LINE_LIMIT)
	)
	assert atoms[-1] is HTTPProcessingStatus.BadFormat


def test_too_many_headers() -> None:
	headers = b"".join(b"X-H%d: v\r\n" % i for i in range(HEADERS_LIMIT + 1))
	atoms = list(HTTPParser().feed(b"GET / HTTP/1.1\r\n" + headers + b"\r\n"))
	assert atoms[-1] is HTTPProcessingStatus.BadFormat
	assert not any(isinstance(_, HTTPRequest) for _ in atoms)


def test_body_too_large() -> None:
	atoms = list(
		HTTPParser().feed(
			b"POST / HTTP/1.1\r\nContent-Length: %d\r\n\r\n" % (BODY_LIMIT + 1)
		)
	)
	assert atoms[-1] is HTTPProcessingStatus.BadFormat


def test_bad_status_line() -> None:
	assert list(HTTPParser().feed(b"HTTP/1.1 abc\r\n\r\n")) == [
		HTTPProcessingStatus.BadFormat
	]
	assert list(HTTPParser().feed(b"GET / HTTP/1.1 extra\r\n\r\n")) == [
		HTTPProcessingStatus.BadFormat
	]


# EOF
