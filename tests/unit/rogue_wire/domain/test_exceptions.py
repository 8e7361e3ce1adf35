"""Unit tests for domain exceptions."""

import pytest

from rogue_wire.domain.exceptions import (
    BlockedInterfaceError,
    CircularDependencyError,
    IncompatibilityError,
    InterfaceNotFoundError,
    UnresolvableError,
    WireException,
    describe,
)


class TestDescribe:
    """Test cases for the describe helper."""

    def test_describe_class_uses_name(self):
        """Test that classes are described by their name."""

        class Mailer:
            pass

        assert describe(Mailer) == "Mailer"

    def test_describe_string_is_unchanged(self):
        """Test that string interfaces are described as-is."""
        assert describe("app.mailer") == "app.mailer"


class TestWireException:
    """Test cases for the base WireException class."""

    def test_all_errors_inherit_from_wire_exception(self):
        """Test the exception hierarchy."""
        for error in (
            IncompatibilityError,
            InterfaceNotFoundError,
            BlockedInterfaceError,
            UnresolvableError,
            CircularDependencyError,
        ):
            assert issubclass(error, WireException)

    def test_wire_exception_can_be_raised(self):
        """Test that WireException can be raised with a message."""
        with pytest.raises(WireException, match="Test error"):
            raise WireException("Test error")


class TestIncompatibilityError:
    """Test cases for IncompatibilityError."""

    def test_message_is_kept(self):
        """Test that the message is passed through."""
        error = IncompatibilityError("named parameters are not supported")
        assert str(error) == "named parameters are not supported"


class TestInterfaceNotFoundError:
    """Test cases for InterfaceNotFoundError."""

    def test_is_lookup_error(self):
        """Test that the error can be caught as LookupError."""
        with pytest.raises(LookupError):
            raise InterfaceNotFoundError("mailer")

    def test_message_without_reason(self):
        """Test the message for a bare interface."""
        error = InterfaceNotFoundError("mailer")
        assert error.interface == "mailer"
        assert error.reason is None
        assert str(error) == "Unable to resolve interface `mailer`"

    def test_message_with_reason(self):
        """Test that the reason is appended."""

        class Mailer:
            pass

        error = InterfaceNotFoundError(Mailer, "interface is not known to this container")
        assert error.interface is Mailer
        assert str(error) == "Unable to resolve interface `Mailer`: interface is not known to this container"


class TestBlockedInterfaceError:
    """Test cases for BlockedInterfaceError."""

    def test_attributes_and_message(self):
        """Test that interface and operation are kept and described."""
        error = BlockedInterfaceError("mailer", "add singleton")
        assert error.interface == "mailer"
        assert error.operation == "add singleton"
        assert str(error) == "Can not add singleton `mailer`, interface is blocked by this container"


class TestUnresolvableError:
    """Test cases for UnresolvableError."""

    def test_message_with_reason(self):
        """Test that the reason is appended."""
        error = UnresolvableError("mailer", "Factory returned None")
        assert error.reason == "Factory returned None"
        assert "Cannot build service for interface: mailer" in str(error)
        assert "Reason: Factory returned None" in str(error)

    def test_message_without_reason(self):
        """Test the message without a reason."""
        error = UnresolvableError("mailer")
        assert str(error) == "Cannot build service for interface: mailer"


class TestCircularDependencyError:
    """Test cases for CircularDependencyError."""

    def test_chain_is_described(self):
        """Test that the chain is kept and joined in the message."""

        class ServiceA:
            pass

        chain = [ServiceA, "service.b", ServiceA]
        error = CircularDependencyError(chain)

        assert error.dependency_chain == chain
        assert str(error) == "Circular dependency detected: ServiceA -> service.b -> ServiceA"
