from typing import Callable, TypeVar

T = TypeVar("T")

# Attribute holding the `(method, route)` pairs of a decorated handler
ON: str = "_servedir_on"


def on(**methods: str | list[str] | tuple[str, ...]) -> Callable[[T], T]:
    """Marks a service method as the handler of HTTP requests.

    The keyword arguments are HTTP methods (several can be joined with `_`,
    as in `GET_HEAD`) mapped to one or more route expressions (see `Route`):

    >    @on(GET=("/", "/{path:any}"))
    >    def read(self, request, path=""):
    >        ...

    The decorated method takes the request and the route parameters, and
    returns a response (or a coroutine producing it)."""

    def decorator(function: T) -> T:
        routes: list[tuple[str, str]] = list(getattr(function, ON, ()))
        for names, paths in methods.items():
            for method in names.upper().split("_"):
                routes += [
                    (method, _) for _ in ((paths,) if isinstance(paths, str) else paths)
                ]
        setattr(function, ON, routes)
        return function

    return decorator


# EOF
