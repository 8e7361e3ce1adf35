"""Application layer - Container strategies.

A strategy decides which bindings a container accepts and how a definition
is turned into an object graph.
"""

import inspect
import logging
from typing import Any, Callable, Iterable, List, Optional, Tuple

from rogue_wire.application.lifetime_manager import LifetimeManager
from rogue_wire.application.resolver import Arguments, DependencyResolver, type_hints_of
from rogue_wire.domain import (
    Definition,
    IContainer,
    IContainerStrategy,
    ILifetimeManager,
    IncompatibilityError,
    UnresolvableError,
    Value,
    locate,
    read_wire,
)
from rogue_wire.domain.exceptions import describe

logger = logging.getLogger(__name__)

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)

# Factories are offered (container,), extensions (instance, container)
_MAX_OFFERED = 2


def _signature(callback: Callable[..., Any]) -> Optional[inspect.Signature]:
    try:
        return inspect.signature(callback)
    except (TypeError, ValueError):
        return None


class ContainerStrategy(IContainerStrategy):
    """Base strategy holding the build pipeline shared by all strategies.

    Building a definition runs, in order: the factory or the constructor of
    the concrete class, property assignments, method calls in registration
    order and extensions in registration order. Extensions returning an
    object replace the instance. Shared definitions are cached through the
    lifetime manager.

    Attributes:
        _resolver: Component turning bound values into arguments.
        _lifetime_manager: Component caching shared instances.
    """

    def __init__(
        self,
        resolver: Optional[DependencyResolver] = None,
        lifetime_manager: Optional[ILifetimeManager] = None,
    ) -> None:
        self._resolver = resolver or DependencyResolver()
        self._lifetime_manager: ILifetimeManager = lifetime_manager or LifetimeManager()

    def supports_coordinated_entities(self) -> bool:
        return False

    def can_automatically_resolve_entities(self) -> bool:
        return False

    def can_aggregate_entities(self) -> bool:
        return False

    def create_from_attributes(self, interface: Any, concrete: Any) -> Definition:
        raise IncompatibilityError(f"{type(self).__name__} can not derive definitions from class metadata")

    def sanitize_callback(self, callback: Callable[..., Any], interface: Any, concrete: Any) -> Callable[..., Any]:
        """Validate a callback and adapt it to the factory and extension calling convention.

        Factories are called with the container, extensions with the instance
        and the container. The returned wrapper accepts either and hands the
        callback what its signature asks for.

        Raises:
            IncompatibilityError: If the callback is not callable, its signature
                can not be satisfied or its return annotation does not support
                the serviced interface.
        """
        if not callable(callback):
            raise IncompatibilityError(
                f"callback for `{describe(interface)}` must be callable, `{type(callback).__name__}` given"
            )

        self._check_return_annotation(callback, interface)

        signature = _signature(callback)
        if signature is None:
            return callback

        return self._adapt_callback(callback, signature, interface, concrete)

    def build(self, definition: Definition, container_scope: IContainer, ignore_sharing: bool = False) -> Any:
        """Build the instance described by ``definition``.

        Raises:
            UnresolvableError: If the object graph can not be built.
            IncompatibilityError: If the bindings do not fit the strategy.
        """
        return self._lifetime_manager.get_or_create(
            definition,
            lambda: self._assemble(definition, container_scope),
            ignore_sharing,
        )

    def _assemble(self, definition: Definition, container: IContainer) -> Any:
        interface = definition.get_interface()

        if definition.has_factory():
            logger.debug("Building %r from factory", interface)
            instance = definition.get_factory()(container)
            if instance is None:
                raise UnresolvableError(interface, "Factory returned None")
        else:
            concrete_class = locate(definition.get_concrete_class())
            logger.debug("Building %r from class %s", interface, concrete_class.__qualname__)
            args, kwargs = self._constructor_arguments(definition, concrete_class, container)
            instance = concrete_class(*args, **kwargs)

        for value in definition.generate_properties():
            setattr(instance, value.origin_name, self._property_value(instance, value, container))

        for method, arguments in definition.generate_method_calls():
            bound = getattr(instance, method)
            args, kwargs = self._call_arguments(definition, bound, arguments, container)
            bound(*args, **kwargs)

        for extension in definition.generate_extensions():
            result = extension(instance, container)
            if result is not None:
                instance = result

        return instance

    def _check_return_annotation(self, callback: Callable[..., Any], interface: Any) -> None:
        returned = type_hints_of(callback).get("return")
        if not isinstance(returned, type) or not isinstance(interface, type):
            return
        try:
            compatible = issubclass(returned, interface)
        except TypeError:
            # Protocols without runtime support can not be checked
            return
        if not compatible:
            raise IncompatibilityError(
                f"callback returns `{returned.__name__}` which does not support the serviced "
                f"interface `{interface.__name__}`"
            )

    def _adapt_callback(
        self,
        callback: Callable[..., Any],
        signature: inspect.Signature,
        interface: Any,
        concrete: Any,
    ) -> Callable[..., Any]:
        parameters = list(signature.parameters.values())
        positional = [p for p in parameters if p.kind in _POSITIONAL]
        required = [p for p in positional if p.default is inspect.Parameter.empty]
        required_keyword = [
            p for p in parameters if p.kind == p.KEYWORD_ONLY and p.default is inspect.Parameter.empty
        ]

        if len(required) > _MAX_OFFERED or required_keyword:
            raise IncompatibilityError(
                f"callback for `{describe(interface)}` requires arguments the container can not supply"
            )

        capacity = None if any(p.kind == p.VAR_POSITIONAL for p in parameters) else len(positional)

        def adapted(*offered: Any) -> Any:
            return callback(*(offered if capacity is None else offered[:capacity]))

        return adapted

    def _constructor_arguments(self, definition: Definition, concrete_class: type, container: IContainer) -> Arguments:
        return self._resolver.collect_arguments(
            definition.get_interface(),
            definition.generate_parameters(),
            container,
        )

    def _call_arguments(
        self,
        definition: Definition,
        bound: Callable[..., Any],
        arguments: Iterable[Value],
        container: IContainer,
    ) -> Arguments:
        return self._resolver.collect_arguments(
            f"{describe(definition.get_interface())}.{bound.__name__}",
            arguments,
            container,
        )

    def _property_value(self, instance: Any, value: Value, container: IContainer) -> Any:
        return self._resolver.resolve_value(value, container)


class ManualWiringStrategy(ContainerStrategy):
    """Strategy for containers wired entirely by hand.

    Every binding must be spelled out: no automatic resolution, no class
    metadata, and method call arguments must be a dense positional list.
    Constructor parameters may be bound by name (keyword arguments) or by
    dense position.
    """


class AutoWiringStrategy(ContainerStrategy):
    """Strategy resolving what is not bound from signatures and type hints.

    - Positional and named bindings may be mixed, positions are mapped onto
      parameter names of the constructor or method.
    - Unbound required parameters and omitted concretes are resolved from
      their class type hints; registered interfaces are fetched, other classes
      are built on the fly.
    - Definitions are derived from :func:`rogue_wire.wire` metadata on the
      concrete class.
    - Callbacks receive the container, the instance or resolved services
      according to their parameter annotations.
    """

    def supports_coordinated_entities(self) -> bool:
        return True

    def can_automatically_resolve_entities(self) -> bool:
        return True

    def can_aggregate_entities(self) -> bool:
        return True

    def create_from_attributes(self, interface: Any, concrete: Any) -> Definition:
        """Derive a definition from the wiring metadata of the concrete class.

        A class without metadata, or a reference that can not be located yet,
        yields a plain definition.
        """
        try:
            concrete_class = locate(concrete)
        except UnresolvableError:
            return Definition(interface=interface, concrete_class=concrete)

        metadata = read_wire(concrete_class)
        if metadata is None:
            return Definition(interface=interface, concrete_class=concrete)

        logger.debug("Deriving definition of %r from metadata on %s", interface, concrete_class.__qualname__)
        return metadata.to_definition(interface, concrete)

    def _adapt_callback(
        self,
        callback: Callable[..., Any],
        signature: inspect.Signature,
        interface: Any,
        concrete: Any,
    ) -> Callable[..., Any]:
        hints = type_hints_of(callback)
        serviced = [reference for reference in (interface, concrete) if isinstance(reference, type)]
        plan: List[Tuple[inspect.Parameter, str, Any]] = []
        unannotated = 0

        for parameter in signature.parameters.values():
            if parameter.kind in _VARIADIC:
                continue
            hint = hints.get(parameter.name)
            if isinstance(hint, type) and issubclass(hint, IContainer):
                plan.append((parameter, "container", hint))
            elif isinstance(hint, type) and any(self._is_serviced(hint, reference) for reference in serviced):
                plan.append((parameter, "instance", hint))
            elif isinstance(hint, type):
                plan.append((parameter, "resolve", hint))
            else:
                if parameter.default is inspect.Parameter.empty:
                    if parameter.kind == parameter.KEYWORD_ONLY:
                        raise IncompatibilityError(
                            f"keyword-only parameter '{parameter.name}' of callback for "
                            f"`{describe(interface)}` needs a type hint"
                        )
                    unannotated += 1
                plan.append((parameter, "positional", hint))

        if unannotated > _MAX_OFFERED:
            raise IncompatibilityError(
                f"callback for `{describe(interface)}` requires arguments the container can not supply"
            )

        resolver = self._resolver

        def adapted(*offered: Any) -> Any:
            container = offered[-1]
            instance = offered[0] if len(offered) > 1 else None
            cursor = 0
            args: List[Any] = []
            kwargs = {}

            for parameter, role, hint in plan:
                if role == "container":
                    argument = container
                elif role == "instance" and instance is not None:
                    argument = instance
                elif role in ("instance", "resolve"):
                    if parameter.default is not inspect.Parameter.empty and not container.has(hint):
                        argument = parameter.default
                    else:
                        argument = resolver.resolve_hint(hint, container)
                elif cursor < len(offered):
                    argument = offered[cursor]
                    cursor += 1
                else:
                    continue

                if parameter.kind == parameter.POSITIONAL_ONLY:
                    args.append(argument)
                else:
                    kwargs[parameter.name] = argument

            return callback(*args, **kwargs)

        return adapted

    @staticmethod
    def _is_serviced(hint: type, reference: type) -> bool:
        try:
            return issubclass(reference, hint)
        except TypeError:
            return False

    def _constructor_arguments(self, definition: Definition, concrete_class: type, container: IContainer) -> Arguments:
        initializer = concrete_class.__init__
        if _signature(initializer) is None:
            return super()._constructor_arguments(definition, concrete_class, container)
        return self._resolver.reflect_arguments(
            definition.get_interface(),
            initializer,
            definition.generate_parameters(),
            container,
            skip_first=True,
        )

    def _call_arguments(
        self,
        definition: Definition,
        bound: Callable[..., Any],
        arguments: Iterable[Value],
        container: IContainer,
    ) -> Arguments:
        if _signature(bound) is None:
            return super()._call_arguments(definition, bound, arguments, container)
        return self._resolver.reflect_arguments(
            f"{describe(definition.get_interface())}.{bound.__name__}",
            bound,
            arguments,
            container,
        )

    def _property_value(self, instance: Any, value: Value, container: IContainer) -> Any:
        hint = type_hints_of(type(instance)).get(value.origin_name) if value.is_automatic else None
        return self._resolver.resolve_value(value, container, hint)
