"""Declarative wiring metadata attached to classes."""

from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from rogue_wire.domain.models import Definition

T = TypeVar("T", bound=type)

WIRE_ATTRIBUTE = "__rogue_wire__"


class Wire(BaseModel):
    """Wiring instructions declared on a class with the :func:`wire` decorator.

    Attributes:
        parameters: Constructor arguments keyed by name or position.
        properties: Attributes assigned after construction.
        method_calls: Methods invoked after construction with their arguments.
        shared: Whether the service is shared, None leaves the container default.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    parameters: Dict[Union[str, int], Any] = Field(default_factory=dict, description="Constructor arguments.")
    properties: Dict[str, Any] = Field(default_factory=dict, description="Property assignments.")
    method_calls: Dict[str, Union[Dict[Union[str, int], Any], List[Any]]] = Field(
        default_factory=dict,
        description="Method invocations with their arguments.",
    )
    shared: Optional[bool] = Field(default=None, description="Shared flag for the service.")

    def to_definition(self, interface: Any, concrete: Any) -> Definition:
        """Turn the metadata into a definition for ``interface`` served by ``concrete``."""
        definition = Definition(interface=interface, concrete_class=concrete)
        for key, value in self.parameters.items():
            definition.add_parameter(key, value)
        for name, value in self.properties.items():
            definition.add_property(name, value)
        for method, arguments in self.method_calls.items():
            definition.add_method_call(method, arguments)
        if self.shared is not None:
            definition.set_shared(self.shared)
        return definition


def wire(
    parameters: Optional[Dict[Union[str, int], Any]] = None,
    properties: Optional[Dict[str, Any]] = None,
    method_calls: Optional[Dict[str, Any]] = None,
    shared: Optional[bool] = None,
) -> Callable[[T], T]:
    """Class decorator declaring how the class is wired.

    Only strategies that can aggregate entities read the metadata.

    Example:
        >>> @wire(parameters={"dsn": literal("sqlite://")}, shared=True)
        ... class Database:
        ...     def __init__(self, dsn: str):
        ...         self.dsn = dsn
    """
    metadata = Wire(
        parameters=parameters or {},
        properties=properties or {},
        method_calls=method_calls or {},
        shared=shared,
    )

    def decorator(cls: T) -> T:
        setattr(cls, WIRE_ATTRIBUTE, metadata)
        return cls

    return decorator


def read_wire(cls: Type) -> Optional[Wire]:
    """Return the wiring metadata declared directly on ``cls``, if any."""
    # vars() skips metadata inherited from a base class
    metadata = vars(cls).get(WIRE_ATTRIBUTE)
    return metadata if isinstance(metadata, Wire) else None
