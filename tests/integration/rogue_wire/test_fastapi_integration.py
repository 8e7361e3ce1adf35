"""Integration tests for FastAPI integration across layers."""

import pytest

pytest.importorskip("fastapi")

from unittest.mock import AsyncMock, Mock

from fastapi import Depends, FastAPI, Request
from starlette.responses import Response

from rogue_wire import AutoWiringStrategy, Container
from rogue_wire.infrastructure.fastapi_integration import (
    RequestContainerMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
    inject_dependencies,
)
from rogue_wire.infrastructure.testing import TestContainer


class Database:
    def query(self):
        return ["alice", "bob"]


class UserService:
    def __init__(self, db: Database):
        self.db = db

    def list_users(self):
        return self.db.query()


class RequestContext:
    def __init__(self, request_id):
        self.request_id = request_id


class AuditLog:
    def __init__(self, context: RequestContext):
        self.context = context


class TestFastAPIIntegrationEndToEnd:
    """Test complete FastAPI integration scenarios."""

    def test_app_with_container_dependencies(self):
        """Test wiring endpoints with dependencies resolved from the container."""
        app = FastAPI()
        container = Container(AutoWiringStrategy())
        container.singleton(Database)
        container.add(UserService)

        get_user_service = create_fastapi_dependency(container, UserService)

        @app.get("/users")
        def list_users(service: UserService = Depends(get_user_service)):
            return service.list_users()

        assert any(route.path == "/users" for route in app.routes)
        assert get_user_service().list_users() == ["alice", "bob"]
        assert get_user_service().db is get_user_service().db

    @pytest.mark.asyncio
    async def test_request_scoped_services(self):
        """Test that request services are isolated while application services are shared."""
        container = Container(AutoWiringStrategy())
        container.singleton(Database)
        container.add(AuditLog)

        def configure(request_container, request):
            request_container.add(RequestContext, RequestContext(request.headers["x-request-id"]))
            request_container.add(AuditLog)

        middleware = RequestContainerMiddleware(Mock(), container=container, configure=configure)
        get_audit_log = create_request_dependency(AuditLog)
        get_database = create_request_dependency(Database)
        seen = []

        async def endpoint(request):
            seen.append((get_audit_log(request), get_database(request)))
            return Response("ok")

        for request_id in ("req-1", "req-2"):
            request = Mock(spec=Request)
            request.state = Mock(spec=[])
            request.headers = {"x-request-id": request_id}
            await middleware.dispatch(request, endpoint)

        (first_log, first_db), (second_log, second_db) = seen
        assert first_log.context.request_id == "req-1"
        assert second_log.context.request_id == "req-2"
        assert first_db is second_db is container.get(Database)
        assert not container.has(RequestContext)

    @pytest.mark.asyncio
    async def test_inject_dependencies_with_test_container(self):
        """Test overriding an injected service in tests."""
        container = Container(AutoWiringStrategy())
        container.singleton(Database)

        class FakeDatabase(Database):
            def query(self):
                return ["test-user"]

        test_container = TestContainer(container)
        test_container.mock_singleton(Database, FakeDatabase())

        @inject_dependencies(test_container, service=UserService)
        async def list_users(service: UserService):
            return service.list_users()

        test_container.add(UserService)

        assert await list_users() == ["test-user"]
        assert await list_users(service=UserService(Database())) == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_call_next_mock(self):
        """Test that the middleware hands the request through unchanged."""
        container = Container()
        middleware = RequestContainerMiddleware(Mock(), container=container)
        request = Mock(spec=Request)
        request.state = Mock(spec=[])
        call_next = AsyncMock(return_value=Response("done"))

        response = await middleware.dispatch(request, call_next)

        assert response.body == b"done"
        call_next.assert_awaited_once_with(request)
