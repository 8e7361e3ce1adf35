"""Integration tests for connected containers."""

import pytest

from rogue_wire import AutoWiringStrategy, Container, literal
from rogue_wire.domain import BlockedInterfaceError, IncompatibilityError, InterfaceNotFoundError


class Database:
    def __init__(self, dsn):
        self.dsn = dsn


class Cache:
    pass


class ReportService:
    def __init__(self, db):
        self.db = db


class TestContainerNetwork:
    """Test resolution across a network of containers."""

    def test_module_container_overrides_application_service(self):
        """Test that a module container serves its own database and delegates the rest."""
        application = Container()
        application.singleton(Database).with_parameter("dsn", literal("pg://main"))
        application.singleton(Cache)

        reporting = Container().connect_with(application)
        reporting.singleton(Database).with_parameter("dsn", literal("pg://replica"))
        reporting.add(ReportService).with_parameter("db", Database)

        report = reporting.get(ReportService)

        assert report.db.dsn == "pg://replica"
        assert reporting.get(Cache) is application.get(Cache)
        assert application.get(Database).dsn == "pg://main"

    def test_ignore_forces_application_service(self):
        """Test that ignoring a local service hands it to the connected container."""
        application = Container()
        application.singleton(Database).with_parameter("dsn", literal("pg://main"))

        module = Container().connect_with(application)
        module.singleton(Database).with_parameter("dsn", literal("pg://local"))
        module.ignore(Database)

        assert module.get(Database) is application.get(Database)

        module.unignore(Database)

        assert module.get(Database).dsn == "pg://local"

    def test_ignored_interface_can_not_be_modified(self):
        """Test that a blocked interface rejects registration helpers."""
        module = Container().ignore(Database)

        with pytest.raises(BlockedInterfaceError):
            module.wire({Database: Database})
        with pytest.raises(BlockedInterfaceError):
            module.concrete(Database)

        # plain add is still allowed and stays hidden while ignored
        module.add(Database).with_parameter("dsn", literal("pg://hidden"))
        assert not module.has(Database)

    def test_chain_of_three_containers(self):
        """Test that lookups travel along a chain of connections."""
        root = Container()
        root.singleton(Cache)
        middle = Container().connect_with(root)
        leaf = Container().connect_with(middle)

        assert leaf.has(Cache)
        assert leaf.get(Cache) is root.get(Cache)

    def test_ring_of_containers(self):
        """Test that a ring of connections resolves known services and terminates on unknown ones."""
        first, second, third = Container(), Container(), Container()
        first.connect_with(second)
        second.connect_with(third)
        third.connect_with(first)
        third.singleton(Cache)

        assert first.get(Cache) is third.get(Cache)
        assert second.get(Cache) is third.get(Cache)
        assert not first.has(Database)
        with pytest.raises(InterfaceNotFoundError):
            first.get(Database)

    def test_ring_of_containers_all_ignoring(self):
        """Test that a ring where every container ignores the interface terminates."""
        first, second = Container(), Container()
        first.connect_with(second).ignore(Cache).singleton(Database).with_parameter("dsn", literal("x"))
        second.connect_with(first).ignore(Cache)

        with pytest.raises(InterfaceNotFoundError):
            first.get(Cache)
        assert first.get(Database) is second.get(Database)

    def test_peers_keep_their_own_strategy(self):
        """Test that a delegated service is built by the container owning it."""
        application = Container(AutoWiringStrategy())
        application.singleton(Database).with_parameter("dsn", literal("pg://main"))

        class HintedReport:
            def __init__(self, db: Database):
                self.db = db

        application.add(HintedReport).with_parameter("db")
        manual = Container().connect_with(application)

        with pytest.raises(IncompatibilityError):
            manual.add(HintedReport).with_parameter("db")

        manual.ignore(HintedReport)

        assert manual.get(HintedReport).db is application.get(Database)
