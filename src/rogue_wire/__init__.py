"""
rogue-wire: Dependency injection container with pluggable wiring strategies
and container networks.

Public API exports for the rogue-wire package.
"""

# Application exports
from rogue_wire.application.concrete import Concrete
from rogue_wire.application.container import Container
from rogue_wire.application.strategies import AutoWiringStrategy, ContainerStrategy, ManualWiringStrategy

# Domain exports
from rogue_wire.domain.attributes import Wire, wire
from rogue_wire.domain.enums import ValueKind
from rogue_wire.domain.exceptions import (
    BlockedInterfaceError,
    CircularDependencyError,
    IncompatibilityError,
    InterfaceNotFoundError,
    UnresolvableError,
    WireException,
)
from rogue_wire.domain.interfaces import IConcrete, IContainer, IContainerStrategy, IServiceProvider
from rogue_wire.domain.models import (
    ClassBinding,
    Definition,
    FactoryBinding,
    InstanceBinding,
    Value,
    literal,
    service,
)

__version__ = "1.0.0"

__all__ = [
    # Container
    "Container",
    "Concrete",
    # Strategies
    "ContainerStrategy",
    "ManualWiringStrategy",
    "AutoWiringStrategy",
    # Contracts
    "IContainer",
    "IConcrete",
    "IContainerStrategy",
    "IServiceProvider",
    # Models
    "Definition",
    "Value",
    "ClassBinding",
    "FactoryBinding",
    "InstanceBinding",
    "ValueKind",
    "service",
    "literal",
    # Attributes
    "Wire",
    "wire",
    # Exceptions
    "WireException",
    "IncompatibilityError",
    "InterfaceNotFoundError",
    "BlockedInterfaceError",
    "UnresolvableError",
    "CircularDependencyError",
]
