"""Application layer - Fluent builder over one service definition."""

from typing import Any, Callable, Mapping

from rogue_wire.domain import (
    OMITTED,
    Definition,
    IConcrete,
    IContainerStrategy,
    IncompatibilityError,
    UnresolvableError,
    Value,
    is_class_reference,
    locate,
)
from rogue_wire.domain.exceptions import describe
from rogue_wire.domain.interfaces import MethodArguments
from rogue_wire.domain.models import ParameterKey


def _is_position(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


class Concrete(IConcrete):
    """Refines the definition of one service under the rules of a strategy.

    The builder wraps the definition stored in the container, not a copy, so
    every change is seen by the next resolution.

    Attributes:
        _definition: The definition being refined.
        _strategy: The strategy of the owning container.

    Example:
        >>> container.add(Mailer, SmtpMailer) \\
        ...     .with_parameter("host", literal("localhost")) \\
        ...     .with_method_call("set_logger", [Logger]) \\
        ...     .shared()
    """

    def __init__(self, definition: Definition, strategy: IContainerStrategy) -> None:
        self._definition = definition
        self._strategy = strategy

    @property
    def definition(self) -> Definition:
        return self._definition

    def with_method_call(self, method: str, parameters: MethodArguments = None) -> "Concrete":
        """Invoke ``method`` on every built instance.

        Args:
            method: Name of the method.
            parameters: Arguments keyed by name (str) or position (int); a list binds positions in order.

        Raises:
            IncompatibilityError: If named or non-contiguous positional arguments are
                used while the strategy does not support coordinated entities.
        """
        if isinstance(parameters, Mapping):
            keys = list(parameters.keys())
        else:
            keys = list(range(len(parameters or [])))

        if not self._strategy.supports_coordinated_entities():
            if any(not _is_position(key) for key in keys):
                raise IncompatibilityError(
                    "You can not use named parameters at this container, named parameters are not supported"
                )
            if keys != list(range(len(keys))):
                raise IncompatibilityError(
                    "You can not use coordinated numeric indexes at this container, "
                    "coordinated numeric parameters are not supported"
                )
        elif any(not isinstance(key, str) and not _is_position(key) for key in keys):
            raise IncompatibilityError("method call arguments must be keyed by name or position")

        self._definition.add_method_call(method, parameters)
        return self

    def with_method_calls(self, methods: Mapping[str, MethodArguments]) -> "Concrete":
        """Register several method calls, in mapping order.

        Raises:
            IncompatibilityError: If a method name is not a string, or as in :meth:`with_method_call`.
        """
        for method, parameters in methods.items():
            if not isinstance(method, str):
                raise IncompatibilityError("method names shall never be numeric")
            self.with_method_call(method, parameters)
        return self

    def with_parameter(self, parameter: ParameterKey, concrete: Any = OMITTED) -> "Concrete":
        """Bind a constructor argument by name or position.

        A string or a class is resolved from the container at build time,
        anything else is used literally. Omitting ``concrete`` asks the
        strategy to resolve the argument automatically.

        Raises:
            IncompatibilityError: If the concrete is omitted and the strategy can not
                resolve entities automatically.
        """
        if not isinstance(parameter, str) and not _is_position(parameter):
            raise IncompatibilityError("parameters must be bound by name or position")
        self._definition.add_parameter(parameter, self._lift(concrete, "parameter"))
        return self

    def with_parameters(self, parameters: Mapping[ParameterKey, Any]) -> "Concrete":
        for parameter, concrete in parameters.items():
            self.with_parameter(parameter, concrete)
        return self

    def with_property(self, property_name: str, concrete: Any = OMITTED) -> "Concrete":
        """Assign a property on every built instance.

        Raises:
            IncompatibilityError: If the concrete is omitted and the strategy can not
                resolve entities automatically.
        """
        if not isinstance(property_name, str) or not property_name:
            raise IncompatibilityError("properties must be bound by name")
        self._definition.add_property(property_name, self._lift(concrete, "property"))
        return self

    def with_properties(self, properties: Mapping[str, Any]) -> "Concrete":
        for property_name, concrete in properties.items():
            self.with_property(property_name, concrete)
        return self

    def with_concrete_class(self, concrete: Any) -> "Concrete":
        """Serve the interface with another class.

        Raises:
            IncompatibilityError: If the class can not be located or does not
                support the serviced interface.
        """
        if not is_class_reference(concrete):
            raise IncompatibilityError("Provided concrete class must be a class or an import path")

        try:
            concrete_class = locate(concrete)
        except UnresolvableError as e:
            raise IncompatibilityError(f"Provided concrete class `{describe(concrete)}` can not be located") from e

        interface_class = self._interface_class()
        if interface_class is not None and not self._supports(concrete_class, interface_class):
            raise IncompatibilityError(
                f"Provided concrete class `{concrete_class.__name__}` does not support serviced "
                f"interface `{interface_class.__name__}`"
            )

        self._definition.set_concrete_class(concrete)
        return self

    def with_factory(self, callback: Callable[..., Any]) -> "Concrete":
        """Create instances with ``callback``, which is called with the container.

        Raises:
            IncompatibilityError: If the strategy rejects the callback.
        """
        self._definition.set_factory(
            self._strategy.sanitize_callback(
                callback,
                self._definition.get_interface(),
                self._definition.get_concrete_class(),
            )
        )
        return self

    def extend(self, callback: Callable[..., Any]) -> "Concrete":
        """Append an extension called with each freshly built instance and the container.

        Raises:
            IncompatibilityError: If the strategy rejects the callback.
        """
        self._definition.add_extension(
            self._strategy.sanitize_callback(
                callback,
                self._definition.get_interface(),
                self._definition.get_concrete_class(),
            )
        )
        return self

    def forget_instance(self) -> "Concrete":
        self._definition.clear_instance()
        return self

    def shared(self, switch: bool = True) -> "Concrete":
        self._definition.set_shared(switch)
        return self

    def _lift(self, concrete: Any, entity: str) -> Any:
        if concrete is not OMITTED:
            return concrete
        if not self._strategy.can_automatically_resolve_entities():
            raise IncompatibilityError(
                f"You can not omit the concrete definition for a {entity} at this container, "
                "automated resolving is not supported"
            )
        return Value.automatic()

    def _interface_class(self) -> Any:
        interface = self._definition.get_interface()
        if isinstance(interface, type):
            return interface
        try:
            return locate(interface)
        except UnresolvableError:
            return None

    @staticmethod
    def _supports(concrete_class: type, interface_class: type) -> bool:
        try:
            return issubclass(concrete_class, interface_class)
        except TypeError:
            # Protocols without runtime support can not be checked
            return True
