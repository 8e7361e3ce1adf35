from typing import Any, List, Optional


def describe(interface: Any) -> str:
    """Return a readable name for an interface key or class reference."""
    if isinstance(interface, type):
        return interface.__name__
    return str(interface)


class WireException(Exception):
    """Base exception for container-related errors."""


class IncompatibilityError(WireException):
    """Raised when a binding cannot be accepted by the active strategy or definition.

    This occurs when:
    - Named or non-contiguous positional arguments are used without coordinated entity support.
    - A concrete is omitted while the strategy cannot resolve entities automatically.
    - A concrete class does not support the serviced interface.
    - A factory or extension callback does not fit the serviced interface.
    - Bulk wiring input or a resolver value is malformed.
    """


class InterfaceNotFoundError(WireException, LookupError):
    """Raised when an interface cannot be found locally or through connected containers.

    Attributes:
        interface: The interface that could not be found.
        reason: Optional reason for the failure.
    """

    def __init__(self, interface: Any, reason: Optional[str] = None) -> None:
        self.interface = interface
        self.reason = reason
        message = f"Unable to resolve interface `{describe(interface)}`"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class BlockedInterfaceError(WireException):
    """Raised when an operation targets an interface ignored by the container.

    Attributes:
        interface: The blocked interface.
        operation: The operation that was attempted.
    """

    def __init__(self, interface: Any, operation: str) -> None:
        self.interface = interface
        self.operation = operation
        super().__init__(
            f"Can not {operation} `{describe(interface)}`, interface is blocked by this container"
        )


class UnresolvableError(WireException):
    """Raised when a definition cannot be built into an instance.

    This occurs when:
    - The concrete class reference cannot be imported.
    - A constructor parameter lacks a binding, a type hint and a default value.
    - The constructor, factory, a method call or an extension raised.

    Attributes:
        interface: The interface whose definition failed to build.
        reason: Optional reason for the failure.
    """

    def __init__(self, interface: Any, reason: Optional[str] = None) -> None:
        self.interface = interface
        self.reason = reason
        message = f"Cannot build service for interface: {describe(interface)}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class CircularDependencyError(WireException):
    """Raised when a circular dependency is detected while building.

    Attributes:
        dependency_chain: List of interfaces involved in the circular dependency.
    """

    def __init__(self, dependency_chain: List[Any]) -> None:
        self.dependency_chain = dependency_chain
        message = f"Circular dependency detected: {' -> '.join([describe(key) for key in dependency_chain])}"
        super().__init__(message)
