from typing import Iterable, Iterator, Optional
from inspect import getmembers, isfunction

from .routing import Handler, Dispatcher
from .http.model import (
    HTTPRequest,
    HTTPResponse,
    MethodNotSupportedError,
    NotFoundError,
)
from .utils.logging import warning


class Service:
    """Groups the request handlers of a service, which are its methods
    decorated with `@on`."""

    def __init__(self, name: Optional[str] = None) -> None:
        self.name: str = name or self.__class__.__name__
        self.app: Optional[Application] = None

    def iterHandlers(self) -> Iterator[Handler]:
        # Looked up on the class, so that properties are not evaluated
        for name, _ in getmembers(type(self), isfunction):
            handler = Handler.Get(getattr(self, name))
            if handler:
                yield handler

    def __repr__(self) -> str:
        return f"(Service {self.name}{' :mounted' if self.app else ''})"


class Application:
    """Dispatches requests to the handlers of its services. Requests
    with a method that no service handles get a "method not supported"
    failure with `methodStatus`."""

    def __init__(
        self, services: Iterable[Service] = (), *, methodStatus: int = 404
    ) -> None:
        self.dispatcher: Dispatcher = Dispatcher()
        self.services: list[Service] = []
        self.methodStatus: int = methodStatus
        for service in services:
            self.mount(service)

    def mount(self, service: Service) -> Service:
        if service.app:
            raise RuntimeError(f"Service is already mounted: {service}")
        for handler in service.iterHandlers():
            self.dispatcher.register(handler)
        service.app = self
        self.services.append(service)
        return service

    async def process(self, request: HTTPRequest) -> HTTPResponse:
        if not self.dispatcher.handles(request.method):
            warning("Method not supported", Method=request.method, Path=request.path)
            return request.respondError(
                MethodNotSupportedError(request.method, self.methodStatus)
            )
        matched = self.dispatcher.match(request.method, request.path)
        if matched is None:
            warning("No route found", Method=request.method, Path=request.path)
            return request.respondError(NotFoundError("Not Found"))
        handler, params = matched
        return await handler(request, params)


def mount(*services: Service, methodStatus: int = 404) -> Application:
    """Mounts the given services into a new application."""
    return Application(services, methodStatus=methodStatus)


# EOF
