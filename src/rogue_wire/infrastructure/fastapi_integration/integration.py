import functools
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from rogue_wire.application import Container
from rogue_wire.domain import IContainer

logger = logging.getLogger(__name__)

REQUEST_STATE_ATTRIBUTE = "wire_container"


def create_fastapi_dependency(container: IContainer, interface: Any) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that resolves from the container.

    The resolved instance follows the registration in the container: shared
    services are reused, others are built per call.

    Args:
        container: The container to resolve from.
        interface: The interface to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> container = Container()
        >>> container.singleton(UserRepository).with_parameter("db", Database)
        >>>
        >>> get_user_repo = create_fastapi_dependency(container, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> Any:
        return container.get(interface)

    return dependency


def create_request_dependency(interface: Any) -> Callable[[Request], Any]:
    """Create a FastAPI dependency resolving from the request container.

    Requires the RequestContainerMiddleware to be installed.

    Args:
        interface: The interface to resolve from the request container.

    Returns:
        A callable that resolves from the request container.

    Example:
        >>> app.add_middleware(RequestContainerMiddleware, container=container)
        >>>
        >>> get_request_context = create_request_dependency(RequestContext)
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"request_id": ctx.request_id}
    """

    def request_dependency(request: Request) -> Any:
        if not hasattr(request.state, REQUEST_STATE_ATTRIBUTE):
            raise RuntimeError(
                "Request does not have a request container. Did you forget to add RequestContainerMiddleware?"
            )
        request_container: IContainer = getattr(request.state, REQUEST_STATE_ATTRIBUTE)
        return request_container.get(interface)

    return request_dependency


class RequestContainerMiddleware(BaseHTTPMiddleware):
    """Middleware giving each request its own container connected to the application container.

    Services registered on the request container (e.g. by a configure
    callback) are local to the request; everything else is delegated to the
    application container. The request container is available via
    `request.state.wire_container`.

    Attributes:
        container: The application container.
        configure: Optional callback registering request-local services.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(
        ...     RequestContainerMiddleware,
        ...     container=container,
        ...     configure=lambda c, request: c.add(RequestContext, RequestContext(request)),
        ... )
    """

    def __init__(
        self,
        app: FastAPI,
        container: Container,
        configure: Optional[Callable[[Container, Request], Any]] = None,
    ):
        super().__init__(app)
        self.container = container
        self.configure = configure

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Create the request container and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        request_container = Container(self.container.strategy)
        request_container.connect_with(self.container)
        if self.configure is not None:
            self.configure(request_container, request)
        setattr(request.state, REQUEST_STATE_ATTRIBUTE, request_container)

        try:
            response = await call_next(request)
            return response
        finally:
            request_container.disconnect_from(self.container)
            logger.debug("Released request container for %s", request.url.path)


def inject_dependencies(container: IContainer, **interfaces: Any) -> Callable:
    """Decorator injecting services as keyword arguments into an async endpoint.

    Arguments passed explicitly by the caller are left untouched.

    Args:
        container: The container to resolve from.
        **interfaces: Keyword argument names mapped to the interfaces to resolve.

    Returns:
        A decorator function.

    Example:
        >>> @app.get("/users")
        >>> @inject_dependencies(container, user_service=UserService, logger=Logger)
        >>> async def list_users(user_service: UserService, logger: Logger):
        ...     logger.info("Listing users")
        ...     return await user_service.get_all()
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            for name, interface in interfaces.items():
                if name not in kwargs:
                    kwargs[name] = container.get(interface)

            return await func(*args, **kwargs)

        # Injected parameters are hidden from FastAPI request parsing
        wrapper.__signature__ = signature.replace(
            parameters=[p for p in signature.parameters.values() if p.name not in interfaces]
        )
        return wrapper

    return decorator
