from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from rogue_wire.domain.models import OMITTED, Definition, ParameterKey

MethodArguments = Optional[Union[Mapping[ParameterKey, Any], Sequence[Any]]]


class IConcrete(ABC):
    """Abstract interface for the fluent builder refining one service definition.

    Every method returns the builder itself for chaining.
    """

    @abstractmethod
    def with_method_call(self, method: str, parameters: MethodArguments = None) -> "IConcrete":
        """Invoke ``method`` on the built instance with the given arguments.

        Args:
            method: Name of the method.
            parameters: Arguments keyed by name (str) or position (int).
        """

    @abstractmethod
    def with_method_calls(self, methods: Mapping[str, MethodArguments]) -> "IConcrete":
        """Register several method calls at once, in mapping order."""

    @abstractmethod
    def with_parameter(self, parameter: ParameterKey, concrete: Any = OMITTED) -> "IConcrete":
        """Bind a constructor argument; omitting the concrete asks for automatic resolution."""

    @abstractmethod
    def with_parameters(self, parameters: Mapping[ParameterKey, Any]) -> "IConcrete":
        """Bind several constructor arguments at once."""

    @abstractmethod
    def with_property(self, property_name: str, concrete: Any = OMITTED) -> "IConcrete":
        """Assign a property after construction; omitting the concrete asks for automatic resolution."""

    @abstractmethod
    def with_properties(self, properties: Mapping[str, Any]) -> "IConcrete":
        """Assign several properties at once."""

    @abstractmethod
    def with_concrete_class(self, concrete: Any) -> "IConcrete":
        """Serve the interface with another class, which must support the interface."""

    @abstractmethod
    def with_factory(self, callback: Callable[..., Any]) -> "IConcrete":
        """Create the instance with ``callback`` instead of the concrete class."""

    @abstractmethod
    def extend(self, callback: Callable[..., Any]) -> "IConcrete":
        """Append an extension applied to every freshly built instance."""

    @abstractmethod
    def forget_instance(self) -> "IConcrete":
        """Drop the cached instance, keeping the shared flag."""

    @abstractmethod
    def shared(self, switch: bool = True) -> "IConcrete":
        """Switch sharing on or off; switching off drops the cached instance."""


class IContainer(ABC):
    """Abstract interface for dependency injection container operations."""

    @abstractmethod
    def get(self, interface: Any) -> Any:
        """Resolve the interface, reusing a cached instance for shared services."""

    @abstractmethod
    def has(self, interface: Any) -> bool:
        """Check whether the interface can be serviced by this container or its connections."""

    @abstractmethod
    def add(self, interface: Any, concrete: Any = None) -> IConcrete:
        """Register a service and return its builder."""

    @abstractmethod
    def wire(self, interfaces: Union[Mapping[Any, Any], Sequence[Any]]) -> "IContainer":
        """Register many services at once."""

    @abstractmethod
    def singleton(self, interface: Any, concrete: Any = None) -> IConcrete:
        """Register a shared service and return its builder."""

    @abstractmethod
    def extend(self, interface: Any, callback: Callable[..., Any]) -> "IContainer":
        """Append an extension to a registered service."""

    @abstractmethod
    def extend_if(self, interface: Any, callback: Callable[..., Any]) -> "IContainer":
        """Append an extension if the service is registered and not ignored."""

    @abstractmethod
    def concrete(self, interface: Any) -> IConcrete:
        """Return a builder over the stored definition of the interface."""

    @abstractmethod
    def connect_with(self, *containers: "IContainer") -> "IContainer":
        """Connect peer containers that ignored interfaces are delegated to."""

    @abstractmethod
    def disconnect_from(self, *containers: "IContainer") -> "IContainer":
        """Remove peer containers."""

    @abstractmethod
    def has_connections(self) -> bool:
        """Check whether any peer container is connected."""

    @abstractmethod
    def ignore(self, *interfaces: Any) -> "IContainer":
        """Block interfaces from being resolved locally."""

    @abstractmethod
    def unignore(self, *interfaces: Any) -> "IContainer":
        """Unblock interfaces; without arguments, unblock all of them."""

    @abstractmethod
    def does_ignore(self, *interfaces: Any) -> bool:
        """Check whether all given interfaces are blocked."""

    @abstractmethod
    def share(self, *interfaces: Any) -> "IContainer":
        """Mark services as shared."""

    @abstractmethod
    def unshare(self, *interfaces: Any) -> "IContainer":
        """Mark services as not shared and drop their cached instances."""

    @abstractmethod
    def does_share(self, *interfaces: Any) -> bool:
        """Check whether all given services exist and are shared."""

    @abstractmethod
    def default_to_share(self, value: bool) -> "IContainer":
        """Set whether services added from now on are shared."""

    @abstractmethod
    def register(self, *providers: Any) -> "IContainer":
        """Let service providers register their services, once per provider class."""

    @abstractmethod
    def supports(self, provider: Any) -> bool:
        """Check whether the provider was already registered."""

    @abstractmethod
    def make(self, interface: Any) -> Any:
        """Build a fresh instance of the interface, bypassing the shared instance cache."""


class IContainerStrategy(ABC):
    """Abstract interface for the policy deciding what bindings are legal and how they are built."""

    @abstractmethod
    def supports_coordinated_entities(self) -> bool:
        """Check whether named and non-contiguous positional arguments may be mixed."""

    @abstractmethod
    def can_automatically_resolve_entities(self) -> bool:
        """Check whether omitted parameter and property concretes can be resolved."""

    @abstractmethod
    def can_aggregate_entities(self) -> bool:
        """Check whether definitions can be derived from class metadata."""

    @abstractmethod
    def create_from_attributes(self, interface: Any, concrete: Any) -> Definition:
        """Assemble a definition from the metadata declared on the concrete class."""

    @abstractmethod
    def sanitize_callback(self, callback: Callable[..., Any], interface: Any, concrete: Any) -> Callable[..., Any]:
        """Validate a factory or extension callback and adapt it to the calling convention.

        Raises:
            IncompatibilityError: If the callback does not fit the serviced interface.
        """

    @abstractmethod
    def build(self, definition: Definition, container_scope: IContainer, ignore_sharing: bool = False) -> Any:
        """Build the instance described by ``definition``.

        Args:
            definition: The recipe to build.
            container_scope: Container used to resolve dependencies.
            ignore_sharing: Neither consult nor fill the shared instance cache.

        Returns:
            The built, or cached, instance.
        """


class IServiceProvider(ABC):
    """Abstract interface for units registering services in bulk."""

    @abstractmethod
    def register(self, container: IContainer) -> None:
        """Register services on the given container."""


class ILifetimeManager(ABC):
    """Abstract interface for managing shared instances of definitions."""

    @abstractmethod
    def get_or_create(self, definition: Definition, factory: Callable[[], Any], ignore_sharing: bool = False) -> Any:
        """Get the cached instance or create a new one based on the shared flag.

        Args:
            definition: The definition owning the cache slot.
            factory: A callable creating a new instance.
            ignore_sharing: Always create and never cache.
        """

