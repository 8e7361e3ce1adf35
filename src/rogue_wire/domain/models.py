import importlib
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rogue_wire.domain.enums import ValueKind
from rogue_wire.domain.exceptions import IncompatibilityError, UnresolvableError

ParameterKey = Union[str, int]


class _Omitted:
    """Marker for a concrete that was not passed at all."""

    def __repr__(self) -> str:
        return "OMITTED"


OMITTED: Any = _Omitted()


def is_class_reference(reference: Any) -> bool:
    """Check whether the given object can name a class or service interface.

    Args:
        reference: A class object or an import path string.

    Returns:
        True for classes and non-empty strings.
    """
    if isinstance(reference, type):
        return True
    return isinstance(reference, str) and bool(reference.strip())


def locate(reference: Any) -> type:
    """Locate the class named by a class reference.

    Accepts class objects as-is and import paths in either the
    ``package.module.Name`` or the ``package.module:Name`` form.

    Args:
        reference: The class reference to locate.

    Returns:
        The referenced class.

    Raises:
        UnresolvableError: If the reference cannot be imported or is not a class.

    Example:
        >>> locate("collections:OrderedDict")
        <class 'collections.OrderedDict'>
    """
    if isinstance(reference, type):
        return reference

    if not is_class_reference(reference):
        raise UnresolvableError(reference, "Not a class reference")

    module_name, separator, attribute = reference.partition(":")
    if not separator:
        module_name, _, attribute = reference.rpartition(".")

    if not module_name or not attribute:
        raise UnresolvableError(reference, "Import path must name a module and a class")

    try:
        target: Any = importlib.import_module(module_name)
        for part in attribute.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as e:
        raise UnresolvableError(reference, f"Failed to import class: {e}") from e

    if not isinstance(target, type):
        raise UnresolvableError(reference, "Import path does not refer to a class")

    return target


class Value(BaseModel):
    """One bound constructor parameter, property or method call argument.

    Use the named constructors instead of instantiating directly.

    Attributes:
        kind: How the payload is turned into an argument.
        origin_name: The parameter or property name the value is bound to, if any.
        origin_position: The positional index the value is bound to, if any.
        literal_type: Type name of a literal payload.
        payload: Interface to resolve, or the literal itself.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: ValueKind = Field(..., description="How the payload is turned into an argument.")
    origin_name: Optional[str] = Field(default=None, description="Name of the bound slot, if any.")
    origin_position: Optional[int] = Field(default=None, description="Position of the bound slot, if any.")
    literal_type: str = Field(default="", description="Type name of a literal payload.")
    payload: Any = Field(default=None, description="Interface to resolve or literal to use.")

    @model_validator(mode="after")
    def _check_resolver_payload(self) -> "Value":
        if self.kind == ValueKind.RESOLVER and not is_class_reference(self.payload):
            if isinstance(self.payload, str):
                raise IncompatibilityError("provided value can not be empty.")
            raise IncompatibilityError(
                f"provided value must be a string or a class, `{type(self.payload).__name__}` given."
            )
        return self

    @classmethod
    def resolver(cls, payload: Any, name: Optional[str] = None, position: Optional[int] = None) -> "Value":
        """Create a value that resolves ``payload`` as a service interface at build time.

        Raises:
            IncompatibilityError: If the payload is empty or neither a string nor a class.
        """
        return cls(kind=ValueKind.RESOLVER, origin_name=name, origin_position=position, payload=payload)

    @classmethod
    def literal(cls, payload: Any, name: Optional[str] = None, position: Optional[int] = None) -> "Value":
        """Create a value whose payload is used verbatim."""
        return cls(
            kind=ValueKind.LITERAL,
            origin_name=name,
            origin_position=position,
            literal_type=type(payload).__name__ or "unknown",
            payload=payload,
        )

    @classmethod
    def automatic(cls, name: Optional[str] = None, position: Optional[int] = None) -> "Value":
        """Create a value the strategy resolves from type hints at build time."""
        return cls(kind=ValueKind.AUTOMATIC, origin_name=name, origin_position=position)

    @classmethod
    def from_concrete(cls, concrete: Any, name: Optional[str] = None, position: Optional[int] = None) -> "Value":
        """Lift a raw concrete into a value bound to the given origin.

        Strings and classes become resolver values, existing values are copied
        with the new origin and anything else becomes a literal.
        """
        if isinstance(concrete, Value):
            return concrete.model_copy(update={"origin_name": name, "origin_position": position})
        if isinstance(concrete, (str, type)):
            return cls.resolver(concrete, name, position)
        return cls.literal(concrete, name, position)

    @property
    def is_resolver(self) -> bool:
        return self.kind == ValueKind.RESOLVER

    @property
    def is_literal(self) -> bool:
        return self.kind == ValueKind.LITERAL

    @property
    def is_automatic(self) -> bool:
        return self.kind == ValueKind.AUTOMATIC

    def clear_origin(self) -> None:
        """Forget the name and position the value was bound to."""
        self.origin_name = None
        self.origin_position = None


def service(interface: Any) -> Value:
    """Mark ``interface`` to be resolved from the container.

    Example:
        >>> container.add(Mailer).with_parameter("transport", service("smtp"))
    """
    return Value.resolver(interface)


def literal(value: Any) -> Value:
    """Mark ``value`` to be used verbatim, even if it is a string or a class.

    Example:
        >>> container.add(Mailer).with_parameter("host", literal("localhost"))
    """
    return Value.literal(value)


def _lift(key: ParameterKey, concrete: Any) -> Value:
    if isinstance(key, int) and not isinstance(key, bool):
        return Value.from_concrete(concrete, position=key)
    return Value.from_concrete(concrete, name=key)


class Definition(BaseModel):
    """Construction recipe for one service.

    Attributes:
        interface: The lookup key of the service, immutable after construction.
        concrete_class: Class reference instantiated when no factory is set.
        factory: Callback creating the instance, takes precedence over the concrete class.
        extensions: Callbacks applied in order after the instance was created.
        parameters: Constructor arguments keyed by name or position.
        properties: Attributes assigned after construction, keyed by name.
        method_calls: Methods invoked after construction with their arguments, in call order.
        shared: Whether a built instance is cached and reused.
        instance: The cached instance, only set while shared.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    interface: Any = Field(..., frozen=True, description="The lookup key of the service.")
    concrete_class: Any = Field(default=None, description="Class reference to instantiate.")
    factory: Optional[Callable[..., Any]] = Field(default=None, description="Factory callback, if any.")
    extensions: List[Callable[..., Any]] = Field(default_factory=list, description="Extension callbacks.")
    parameters: Dict[ParameterKey, Value] = Field(default_factory=dict, description="Constructor arguments.")
    properties: Dict[str, Value] = Field(default_factory=dict, description="Property assignments.")
    method_calls: Dict[str, List[Value]] = Field(default_factory=dict, description="Method invocations.")
    shared: bool = Field(default=False, description="Whether the built instance is cached.")
    instance: Optional[Any] = Field(default=None, description="Cached instance while shared.")

    @model_validator(mode="after")
    def _default_concrete_class(self) -> "Definition":
        if self.concrete_class is None:
            self.concrete_class = self.interface
        return self

    def get_interface(self) -> Any:
        return self.interface

    def set_concrete_class(self, concrete_class: Any) -> None:
        """Set the concrete class without validating it against the interface."""
        self.concrete_class = concrete_class

    def get_concrete_class(self) -> Any:
        return self.concrete_class

    def is_concrete_class_available(self) -> bool:
        """Check whether the concrete class reference can be located (imports modules)."""
        try:
            locate(self.concrete_class)
        except UnresolvableError:
            return False
        return True

    def does_concrete_class_match_interface(self) -> bool:
        """Check whether the concrete class is a subclass of the interface (imports modules)."""
        try:
            return issubclass(locate(self.concrete_class), locate(self.interface))
        except (UnresolvableError, TypeError):
            return False

    def set_factory(self, factory: Callable[..., Any]) -> None:
        self.factory = factory

    def get_factory(self) -> Optional[Callable[..., Any]]:
        return self.factory

    def has_factory(self) -> bool:
        return callable(self.factory)

    def add_extension(self, callback: Callable[..., Any]) -> None:
        self.extensions.append(callback)

    def generate_extensions(self) -> Iterator[Callable[..., Any]]:
        yield from list(self.extensions)

    def has_extensions(self) -> bool:
        return bool(self.extensions)

    def add_parameter(self, key: ParameterKey, concrete: Any) -> None:
        """Bind a constructor argument by name or position, replacing an earlier binding."""
        self.parameters[key] = _lift(key, concrete)

    def has_parameter(self, key: ParameterKey) -> bool:
        return key in self.parameters

    def has_parameters(self) -> bool:
        return bool(self.parameters)

    def generate_parameters(self) -> Iterator[Value]:
        yield from list(self.parameters.values())

    def add_property(self, name: str, concrete: Any) -> None:
        """Bind a property assignment, replacing an earlier binding."""
        self.properties[name] = Value.from_concrete(concrete, name=name)

    def has_property(self, name: str) -> bool:
        return name in self.properties

    def has_properties(self) -> bool:
        return bool(self.properties)

    def generate_properties(self) -> Iterator[Value]:
        yield from list(self.properties.values())

    def add_method_call(
        self,
        method: str,
        arguments: Optional[Union[Mapping[ParameterKey, Any], Sequence[Any]]] = None,
    ) -> None:
        """Register a method invocation, replacing the arguments of an earlier registration.

        Args:
            method: Name of the method to call on the built instance.
            arguments: Arguments keyed by name or position; a sequence binds positions in order.
        """
        items = arguments.items() if isinstance(arguments, Mapping) else enumerate(arguments or [])
        self.method_calls[method] = [_lift(key, concrete) for key, concrete in items]

    def has_method_call(self, method: str) -> bool:
        return method in self.method_calls

    def has_method_calls(self) -> bool:
        return bool(self.method_calls)

    def generate_method_calls(self) -> Iterator[Tuple[str, Iterator[Value]]]:
        """Yield every registered method with a fresh iterator over its arguments."""
        for method, arguments in list(self.method_calls.items()):
            yield method, iter(list(arguments))

    def set_shared(self, switch: bool) -> None:
        """Set the shared flag; unsharing drops the cached instance."""
        if not switch:
            self.instance = None
        self.shared = switch

    def is_shared(self) -> bool:
        return self.shared

    def set_instance(self, instance: Any) -> None:
        """Store the instance without checking it against the interface or concrete class."""
        self.instance = instance

    def has_instance(self) -> bool:
        return self.instance is not None

    def get_instance(self) -> Optional[Any]:
        return self.instance

    def clear_instance(self) -> None:
        self.instance = None


class ClassBinding(BaseModel):
    """Binds an interface to a concrete class reference."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    reference: Any = Field(..., description="Class object or import path of the concrete class.")

    @model_validator(mode="after")
    def _check_reference(self) -> "ClassBinding":
        if not is_class_reference(self.reference):
            raise IncompatibilityError(
                f"concrete class reference must be a class or a non-empty string, "
                f"`{type(self.reference).__name__}` given."
            )
        return self


class FactoryBinding(BaseModel):
    """Binds an interface to a factory callback."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    factory: Callable[..., Any] = Field(..., description="Callback creating the instance.")


class InstanceBinding(BaseModel):
    """Binds an interface to an already created instance."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    instance: Any = Field(..., description="The instance served for the interface.")


Binding = Union[ClassBinding, FactoryBinding, InstanceBinding]


def classify_concrete(concrete: Any) -> Binding:
    """Decide once which kind of binding a raw concrete describes.

    Strings and classes are class references, other callables are factories
    and anything else is an instance. Bindings are returned unchanged.

    Raises:
        IncompatibilityError: If ``concrete`` is None or an empty string.
    """
    if isinstance(concrete, (ClassBinding, FactoryBinding, InstanceBinding)):
        return concrete
    if concrete is None:
        raise IncompatibilityError("unsupported concrete `None`, must be a class reference, a callable or an object")
    if isinstance(concrete, (str, type)):
        return ClassBinding(reference=concrete)
    if callable(concrete):
        return FactoryBinding(factory=concrete)
    return InstanceBinding(instance=concrete)
