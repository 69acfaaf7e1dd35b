from typing import Any, Callable, ClassVar, NamedTuple, Optional, Pattern
from inspect import iscoroutine
import re

from .decorators import ON
from .http.model import HTTPRequest, HTTPRequestError, HTTPResponse
from .utils.logging import debug


class Route:
    """A path template where parameters like `{path:any}` capture the rest
    of the path, possibly empty. The rest of the template must match as is."""

    RE_PARAMETER: ClassVar[Pattern[str]] = re.compile(
        r"\{(?P<name>\w+)(:(?P<type>\w+))?\}"
    )

    PATTERNS: ClassVar[dict[str, str]] = {"any": r".*"}

    def __init__(self, text: str):
        self.text: str = text
        chunks: list[str] = []
        offset: int = 0
        for match in self.RE_PARAMETER.finditer(text):
            pattern: str = match.group("type") or "any"
            if pattern not in self.PATTERNS:
                raise ValueError(
                    f"Route pattern '{pattern}' is not supported in: {text}"
                )
            chunks.append(re.escape(text[offset : match.start()]))
            chunks.append(f"(?P<{match.group('name')}>{self.PATTERNS[pattern]})")
            offset = match.end()
        chunks.append(re.escape(text[offset:]))
        self.regexp: Pattern[str] = re.compile("^" + "".join(chunks) + "$")

    def match(self, path: str) -> Optional[dict[str, str]]:
        matched = self.regexp.match(path)
        return matched.groupdict() if matched else None

    def __repr__(self) -> str:
        return f"(Route {self.text!r})"


class Handler(NamedTuple):
    """A service method along with the `(method, route)` pairs it answers."""

    functor: Callable[..., Any]
    routes: list[tuple[str, str]]

    @staticmethod
    def Get(value: Any) -> Optional["Handler"]:
        routes = getattr(value, ON, None)
        return Handler(value, routes) if routes else None

    async def __call__(
        self, request: HTTPRequest, params: dict[str, str]
    ) -> HTTPResponse:
        try:
            res = self.functor(request, **params)
            return await res if iscoroutine(res) else res
        except HTTPRequestError as error:
            return request.respondError(error)


class Dispatcher:
    """Matches requests against the routes registered for their method,
    in registration order."""

    def __init__(self) -> None:
        self.routes: dict[str, list[tuple[Route, Handler]]] = {}

    def register(self, handler: Handler) -> "Dispatcher":
        for method, path in handler.routes:
            debug("Registered route", Method=method, Path=path)
            self.routes.setdefault(method, []).append((Route(path), handler))
        return self

    def handles(self, method: str) -> bool:
        return method in self.routes

    def match(
        self, method: str, path: str
    ) -> Optional[tuple[Handler, dict[str, str]]]:
        for route, handler in self.routes.get(method, ()):
            params = route.match(path)
            if params is not None:
                return handler, params
        return None


# EOF
