import asyncio

import pytest

from servedir.decorators import on
from servedir.http.model import HTTPRequest, HTTPResponse, NotFoundError
from servedir.model import Service, mount
from servedir.routing import Dispatcher, Handler, Route


def test_route_any() -> None:
	route = Route("/{path:any}")
	assert route.match("/") == {"path": ""}
	assert route.match("/a/b/c.css") == {"path": "a/b/c.css"}
	assert route.match("nothing") is None
	# Parameters default to `any`
	assert Route("/files/{rest}").match("/files/a/b") == {"rest": "a/b"}


def test_route_text_is_escaped() -> None:
	route = Route("/file.css")
	assert route.match("/file.css") == {}
	assert route.match("/fileXcss") is None


def test_route_unknown_pattern() -> None:
	with pytest.raises(ValueError):
		Route("/{path:int}")


def test_decorator_and_dispatch() -> None:
	@on(GET="/special")
	def special(request: object) -> str:
		return "special"

	@on(GET=("/", "/{path:any}"), HEAD_POST="/form")
	def read(request: object, path: str = "") -> str:
		return path

	handlers = [Handler.Get(special), Handler.Get(read)]
	dispatcher = Dispatcher()
	for handler in handlers:
		assert handler is not None
		dispatcher.register(handler)

	# Routes are tried in registration order
	assert dispatcher.match("GET", "/special") == (handlers[0], {})
	assert dispatcher.match("GET", "/docs/a.txt") == (
		handlers[1],
		{"path": "docs/a.txt"},
	)
	assert dispatcher.match("POST", "/form") == (handlers[1], {})
	assert dispatcher.handles("HEAD")
	assert dispatcher.match("HEAD", "/other") is None
	assert not dispatcher.handles("DELETE")
	assert dispatcher.match("DELETE", "/special") is None


def test_handler_get_undecorated() -> None:
	def plain() -> None:
		pass

	assert Handler.Get(plain) is None


class Greeter(Service):
	@property
	def broken(self) -> str:
		raise RuntimeError("Properties are not looked up")

	@on(GET="/hello/{name:any}")
	def hello(self, request: HTTPRequest, name: str) -> HTTPResponse:
		if not name:
			raise NotFoundError("Nobody to greet")
		return request.respond(f"Hello, {name}", "text/plain")


def test_application() -> None:
	app = mount(Greeter(), methodStatus=405)
	res = asyncio.run(app.process(HTTPRequest("GET", "/hello/world")))
	assert res.status == 200
	assert res.payload == b"Hello, world"
	res = asyncio.run(app.process(HTTPRequest("GET", "/hello/")))
	assert (res.status, res.payload) == (404, b"Nobody to greet")
	res = asyncio.run(app.process(HTTPRequest("GET", "/other")))
	assert res.status == 404
	res = asyncio.run(app.process(HTTPRequest("PUT", "/hello/world")))
	assert (res.status, res.payload) == (405, b"Method is not supported.")


def test_mount_twice() -> None:
	service = Greeter()
	mount(service)
	with pytest.raises(RuntimeError):
		mount(service)


# EOF
