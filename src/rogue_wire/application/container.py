import logging
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, Union

from rogue_wire.application.circular_detector import CircularDependencyDetector
from rogue_wire.application.concrete import Concrete
from rogue_wire.application.strategies import ManualWiringStrategy
from rogue_wire.domain import (
    BlockedInterfaceError,
    ClassBinding,
    Definition,
    FactoryBinding,
    IContainer,
    IContainerStrategy,
    IncompatibilityError,
    InstanceBinding,
    InterfaceNotFoundError,
    UnresolvableError,
    classify_concrete,
    is_class_reference,
    locate,
)

logger = logging.getLogger(__name__)


class Container(IContainer):
    """Dependency injection container.

    Maps interfaces to definitions and resolves them into instances through
    its strategy. Containers can be connected into a network: interfaces a
    container ignores, or does not know, are delegated to its peers.

    Attributes:
        _strategy: Policy deciding legal bindings and building instances.
        _definitions: Dictionary mapping interfaces to their definitions.
        _ignored: Interfaces blocked from local resolution, in insertion order.
        _peers: Connected containers, in connection order.
        _providers: Classes of the service providers already registered.
        _defaults_to_share: Whether services added from now on are shared.
        _circular_detector: Component detecting circular dependencies.

    Example:
        >>> container = Container()
        >>> container.singleton(Database).with_parameter("dsn", literal("sqlite://"))
        >>> container.add(UserRepository).with_parameter("db", Database)
        >>> repository = container.get(UserRepository)
    """

    def __init__(self, strategy: Optional[IContainerStrategy] = None, defaults_to_share: bool = False) -> None:
        """Initialize an empty container.

        Args:
            strategy: Container strategy, defaults to :class:`ManualWiringStrategy`.
            defaults_to_share: Whether added services are shared by default.
        """
        self._strategy: IContainerStrategy = strategy or ManualWiringStrategy()
        self._definitions: Dict[Any, Definition] = {}
        self._ignored: List[Any] = []
        self._peers: List[Container] = []
        self._providers: Set[Any] = set()
        self._defaults_to_share = defaults_to_share
        self._circular_detector = CircularDependencyDetector()

    @property
    def strategy(self) -> IContainerStrategy:
        return self._strategy

    def get(self, interface: Any) -> Any:
        """Resolve an interface, reusing the cached instance of shared services.

        Ignored interfaces are delegated to connected containers. Interfaces
        unknown to this container are delegated to the first connected
        container that has them.

        Args:
            interface: The interface to resolve.

        Returns:
            The instance serving the interface.

        Raises:
            InterfaceNotFoundError: If neither this container nor its connections can serve it.
            CircularDependencyError: If the interface needs itself to be built.
            UnresolvableError: If the definition can not be built.

        Example:
            >>> mailer = container.get(Mailer)
        """
        return self._get(interface, frozenset())

    def has(self, interface: Any) -> bool:
        """Check whether the interface can be served by this container or its connections.

        An ignored interface is never reported, even if a connection has it.
        """
        return self._has(interface, frozenset())

    def add(self, interface: Any, concrete: Any = None) -> Concrete:
        """Register a service.

        Args:
            interface: The interface to register.
            concrete: Class reference, factory or instance serving the interface,
                      defaults to the interface itself.

        Returns:
            Builder over the stored definition.

        Raises:
            IncompatibilityError: If the concrete is not supported.

        Example:
            >>> container.add(Mailer, SmtpMailer).with_parameter("host", literal("localhost"))
            >>> container.add("clock", lambda c: SystemClock())
        """
        binding = classify_concrete(interface if concrete is None else concrete)

        if isinstance(binding, ClassBinding):
            if self._strategy.can_aggregate_entities():
                definition = self._strategy.create_from_attributes(interface, binding.reference)
            else:
                definition = Definition(interface=interface, concrete_class=binding.reference)
        elif isinstance(binding, FactoryBinding):
            definition = Definition(interface=interface)
            definition.set_factory(self._strategy.sanitize_callback(binding.factory, interface, interface))
        else:
            definition = Definition(interface=interface, concrete_class=type(binding.instance))
            definition.set_shared(True)
            definition.set_instance(binding.instance)

        if self._defaults_to_share and "shared" not in definition.model_fields_set:
            definition.set_shared(True)

        self._definitions[interface] = definition
        logger.debug("Registered %r as %s", interface, type(binding).__name__)

        return Concrete(definition, self._strategy)

    def wire(self, interfaces: Union[Mapping[Any, Any], Sequence[Any]]) -> "Container":
        """Register many services at once.

        Integer keys (or sequence items) register a self-bound interface, any
        other key registers the key as interface served by the class named in
        its value.

        Raises:
            BlockedInterfaceError: If an interface is ignored by this container.
            IncompatibilityError: If a value is not a class reference.

        Example:
            >>> container.wire([Database, Clock])
            >>> container.wire({Mailer: SmtpMailer, "cache": "app.cache.RedisCache"})
        """
        items = interfaces.items() if isinstance(interfaces, Mapping) else enumerate(interfaces)

        for key, value in items:
            if isinstance(key, int) and not isinstance(key, bool):
                if value in self._ignored:
                    raise BlockedInterfaceError(value, "add")
                if not is_class_reference(value):
                    raise IncompatibilityError(
                        f"when using a list of interfaces, each must be a class name, {type(value).__name__} given."
                    )
                self.add(value)
                continue

            if key in self._ignored:
                raise BlockedInterfaceError(key, "add")

            if not isinstance(value, (str, type)):
                raise IncompatibilityError(
                    f"when using key => value, the value must be a concrete class name, "
                    f"{type(value).__name__} given."
                )

            self.add(key, value)

        return self

    def singleton(self, interface: Any, concrete: Any = None) -> Concrete:
        """Register a shared service.

        Raises:
            BlockedInterfaceError: If the interface is ignored by this container.
        """
        if interface in self._ignored:
            raise BlockedInterfaceError(interface, "add singleton")

        return self.add(interface, concrete).shared(True)

    def extend(self, interface: Any, callback: Callable[..., Any]) -> "Container":
        """Append an extension to a registered service.

        Raises:
            BlockedInterfaceError: If the interface is ignored by this container.
            InterfaceNotFoundError: If the interface is not registered here.
            IncompatibilityError: If the strategy rejects the callback.
        """
        if interface in self._ignored:
            raise BlockedInterfaceError(interface, "add extension to")

        self.concrete(interface).extend(callback)
        return self

    def extend_if(self, interface: Any, callback: Callable[..., Any]) -> "Container":
        """Append an extension if the service is registered here and not ignored."""
        if interface in self._definitions and interface not in self._ignored:
            return self.extend(interface, callback)
        return self

    def concrete(self, interface: Any) -> Concrete:
        """Return a builder over the stored definition of an interface.

        Raises:
            BlockedInterfaceError: If the interface is ignored by this container.
            InterfaceNotFoundError: If the interface is not registered here.
        """
        if interface in self._ignored:
            raise BlockedInterfaceError(interface, "fetch concrete instance for")

        if interface not in self._definitions:
            raise InterfaceNotFoundError(interface, "interface is not known to this container")

        return Concrete(self._definitions[interface], self._strategy)

    def connect_with(self, *containers: "Container") -> "Container":
        for container in containers:
            if container is not self and container not in self._peers:
                self._peers.append(container)
                logger.debug("Connected container %#x with %#x", id(self), id(container))
        return self

    def disconnect_from(self, *containers: "Container") -> "Container":
        for container in containers:
            if container in self._peers:
                self._peers.remove(container)
        return self

    def has_connections(self) -> bool:
        return len(self._peers) > 0

    def ignore(self, *interfaces: Any) -> "Container":
        for interface in interfaces:
            if interface not in self._ignored:
                self._ignored.append(interface)
        return self

    def unignore(self, *interfaces: Any) -> "Container":
        """Unblock the given interfaces, or every interface when called without arguments."""
        if not interfaces:
            self._ignored.clear()
            return self

        self._ignored = [interface for interface in self._ignored if interface not in interfaces]
        return self

    def does_ignore(self, *interfaces: Any) -> bool:
        return all(interface in self._ignored for interface in interfaces)

    def share(self, *interfaces: Any) -> "Container":
        for interface in interfaces:
            if self.has(interface) and interface in self._definitions:
                self._definitions[interface].set_shared(True)
        return self

    def unshare(self, *interfaces: Any) -> "Container":
        """Mark services as not shared; their cached instances are dropped."""
        for interface in interfaces:
            if self.has(interface) and interface in self._definitions:
                self._definitions[interface].set_shared(False)
                self._definitions[interface].clear_instance()
        return self

    def does_share(self, *interfaces: Any) -> bool:
        """Check whether every given interface is registered here and shared."""
        for interface in interfaces:
            if not self.has(interface) or interface not in self._definitions:
                return False
            if not self._definitions[interface].is_shared():
                return False
        return True

    def default_to_share(self, value: bool) -> "Container":
        """Set whether services added from now on are shared."""
        self._defaults_to_share = value
        return self

    def register(self, *providers: Any) -> "Container":
        """Let service providers register their services.

        Each provider class registers at most once. Providers given as a
        class or an import path are built with :meth:`make`.

        Raises:
            IncompatibilityError: If a provider has no ``register`` method.
            UnresolvableError: If a provider class can not be located or built.

        Example:
            >>> container.register(DatabaseProvider(), "app.providers.MailProvider")
        """
        for provider in providers:
            identity = self._provider_identity(provider)

            if identity in self._providers:
                logger.debug("Skipping already registered provider %r", identity)
                continue

            service_provider = self.make(identity) if isinstance(provider, (str, type)) else provider

            if not callable(getattr(service_provider, "register", None)):
                raise IncompatibilityError(
                    f"service provider `{identity.__name__}` must define a register(container) method"
                )

            service_provider.register(self)
            self._providers.add(identity)
            logger.debug("Registered provider %r", identity)

        return self

    def supports(self, provider: Any) -> bool:
        """Check whether the provider class was already registered."""
        try:
            return self._provider_identity(provider) in self._providers
        except UnresolvableError:
            return False

    def make(self, interface: Any) -> Any:
        """Build a fresh instance, bypassing the shared instance cache.

        An interface unknown to this container is built as a self-bound class
        reference without being registered, from its class metadata when the
        strategy reads it.

        Raises:
            CircularDependencyError: If the interface needs itself to be built.
            UnresolvableError: If the definition can not be built.

        Example:
            >>> first, second = container.make(Clock), container.make(Clock)
            >>> assert first is not second
        """
        definition = self._definitions.get(interface)
        if definition is None:
            definition = self._transient_definition(interface)

        with self._circular_detector.resolving(interface):
            return self._strategy.build(definition, self, True)

    def _transient_definition(self, interface: Any) -> Definition:
        if self._strategy.can_aggregate_entities() and is_class_reference(interface):
            return self._strategy.create_from_attributes(interface, interface)
        return Definition(interface=interface)

    def _get(self, interface: Any, visited: FrozenSet[int]) -> Any:
        if interface in self._ignored:
            if not self._peers:
                raise InterfaceNotFoundError(interface, "interface is blocked and no container is connected")
            return self._delegate(interface, visited, blocked=True)

        definition = self._definitions.get(interface)
        if definition is None:
            return self._delegate(interface, visited, blocked=False)

        if definition.is_shared() and definition.has_instance():
            return definition.get_instance()

        with self._circular_detector.resolving(interface):
            logger.debug("Resolving %r", interface)
            return self._strategy.build(definition, self)

    def _delegate(self, interface: Any, visited: FrozenSet[int], blocked: bool) -> Any:
        path = visited | {id(self)}

        for peer in self._peers:
            if id(peer) in path:
                continue

            if peer._has(interface, path):
                logger.debug("Delegating %r to container %#x", interface, id(peer))
                return peer._get(interface, path)

            if blocked and peer.does_ignore(interface) and peer.has_connections():
                logger.debug("Delegating blocked %r through container %#x", interface, id(peer))
                return peer._get(interface, path)

        raise InterfaceNotFoundError(interface)

    def _has(self, interface: Any, visited: FrozenSet[int]) -> bool:
        if interface in self._ignored:
            return False

        if interface in self._definitions:
            return True

        path = visited | {id(self)}
        return any(peer._has(interface, path) for peer in self._peers if id(peer) not in path)

    @staticmethod
    def _provider_identity(provider: Any) -> Any:
        if isinstance(provider, str):
            return locate(provider)
        if isinstance(provider, type):
            return provider
        return type(provider)
