"""Unit tests for LifetimeManager."""

import pytest

from rogue_wire.application.lifetime_manager import LifetimeManager
from rogue_wire.domain import (
    Definition,
    ILifetimeManager,
    IncompatibilityError,
    InterfaceNotFoundError,
    UnresolvableError,
)


class Service:
    pass


class TestLifetimeManager:
    """Test cases for LifetimeManager."""

    def test_implements_interface(self):
        """Test that LifetimeManager implements ILifetimeManager."""
        assert isinstance(LifetimeManager(), ILifetimeManager)

    def test_shared_definition_is_cached(self):
        """Test that a shared definition is built once and cached on the definition."""
        manager = LifetimeManager()
        definition = Definition(interface=Service, shared=True)
        calls = []

        def factory():
            calls.append(1)
            return Service()

        first = manager.get_or_create(definition, factory)
        second = manager.get_or_create(definition, factory)

        assert first is second
        assert definition.get_instance() is first
        assert len(calls) == 1

    def test_unshared_definition_is_built_every_time(self):
        """Test that unshared definitions are never cached."""
        manager = LifetimeManager()
        definition = Definition(interface=Service)

        first = manager.get_or_create(definition, Service)
        second = manager.get_or_create(definition, Service)

        assert first is not second
        assert not definition.has_instance()

    def test_ignore_sharing_bypasses_cache(self):
        """Test that ignoring sharing neither reads nor fills the cache."""
        manager = LifetimeManager()
        definition = Definition(interface=Service, shared=True)
        cached = manager.get_or_create(definition, Service)

        fresh = manager.get_or_create(definition, Service, ignore_sharing=True)

        assert fresh is not cached
        assert definition.get_instance() is cached

    def test_ignore_sharing_does_not_populate_empty_cache(self):
        """Test that an ignored build leaves an empty cache empty."""
        manager = LifetimeManager()
        definition = Definition(interface=Service, shared=True)

        manager.get_or_create(definition, Service, ignore_sharing=True)

        assert not definition.has_instance()

    def test_foreign_errors_are_wrapped(self):
        """Test that factory errors are wrapped in UnresolvableError."""
        manager = LifetimeManager()
        definition = Definition(interface=Service)

        def factory():
            raise ValueError("database unavailable")

        with pytest.raises(UnresolvableError) as exc_info:
            manager.get_or_create(definition, factory)

        assert "database unavailable" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ValueError)

    @pytest.mark.parametrize("error", [IncompatibilityError("bad"), InterfaceNotFoundError("x")])
    def test_container_errors_propagate_unchanged(self, error):
        """Test that container errors are not wrapped."""
        manager = LifetimeManager()
        definition = Definition(interface=Service)

        def factory():
            raise error

        with pytest.raises(type(error)) as exc_info:
            manager.get_or_create(definition, factory)

        assert exc_info.value is error
