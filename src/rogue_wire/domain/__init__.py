"""
Domain layer - Core models and contracts.

This layer contains the values, definitions and contracts of the container.
It has no dependencies on other layers.
"""

from .attributes import Wire, read_wire, wire
from .enums import ValueKind
from .exceptions import (
    BlockedInterfaceError,
    CircularDependencyError,
    IncompatibilityError,
    InterfaceNotFoundError,
    UnresolvableError,
    WireException,
)
from .interfaces import IConcrete, IContainer, IContainerStrategy, ILifetimeManager, IServiceProvider
from .models import (
    OMITTED,
    Binding,
    ClassBinding,
    Definition,
    FactoryBinding,
    InstanceBinding,
    Value,
    classify_concrete,
    is_class_reference,
    literal,
    locate,
    service,
)

__all__ = [
    # Enums
    "ValueKind",
    # Exceptions
    "WireException",
    "IncompatibilityError",
    "InterfaceNotFoundError",
    "BlockedInterfaceError",
    "UnresolvableError",
    "CircularDependencyError",
    # Interfaces
    "IConcrete",
    "IContainer",
    "IContainerStrategy",
    "ILifetimeManager",
    "IServiceProvider",
    # Models
    "OMITTED",
    "Value",
    "Definition",
    "Binding",
    "ClassBinding",
    "FactoryBinding",
    "InstanceBinding",
    "classify_concrete",
    "is_class_reference",
    "locate",
    "service",
    "literal",
    # Attributes
    "Wire",
    "wire",
    "read_wire",
]
