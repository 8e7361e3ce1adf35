import inspect
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, get_type_hints

from rogue_wire.domain import IContainer, IncompatibilityError, UnresolvableError, Value

logger = logging.getLogger(__name__)

Arguments = Tuple[List[Any], Dict[str, Any]]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def type_hints_of(target: Any) -> Dict[str, Any]:
    """Return the resolved type hints of a callable or class, or an empty dict.

    Hints that cannot be evaluated (e.g. forward references to names that do
    not exist) are logged and treated as missing.
    """
    try:
        return get_type_hints(target)
    except (NameError, TypeError) as e:
        logger.warning("Unable to retrieve type hints of %r: %s", target, e)
        return {}


class DependencyResolver:
    """Turns bound values into call arguments.

    Resolver values are looked up in the container scope, literals are used
    verbatim. Signature reflection (``inspect`` and type hints) is used by
    strategies that can resolve entities automatically.
    """

    def resolve_value(self, value: Value, container: IContainer, hint: Optional[Any] = None) -> Any:
        """Resolve one bound value.

        Args:
            value: The bound value.
            container: The container resolver values are looked up in.
            hint: Type hint of the slot, used for automatic values.

        Raises:
            UnresolvableError: If an automatic value has no usable type hint.
        """
        if value.is_resolver:
            return container.get(value.payload)
        if value.is_literal:
            return value.payload
        if hint is None:
            raise UnresolvableError(
                value.origin_name if value.origin_name is not None else value.origin_position,
                "Automatic value has no type hint to resolve from",
            )
        return self.resolve_hint(hint, container)

    def resolve_hint(self, hint: Any, container: IContainer) -> Any:
        """Resolve a class type hint, building unregistered classes on the fly.

        Raises:
            UnresolvableError: If the hint is not a class, or an unregistered builtin type.
        """
        if not isinstance(hint, type):
            raise UnresolvableError(hint, "Only class type hints can be resolved automatically")
        if container.has(hint):
            return container.get(hint)
        if hint.__module__ == "builtins":
            raise UnresolvableError(hint, "Builtin types must be registered or bound explicitly")
        logger.debug("Auto-wiring unregistered %r", hint)
        return container.make(hint)

    def collect_arguments(self, owner: Any, values: Iterable[Value], container: IContainer) -> Arguments:
        """Collect arguments from bindings alone, without reflection.

        Positional values must form a dense ``0..n-1`` range; named values
        become keyword arguments.

        Raises:
            IncompatibilityError: If positions are not contiguous.
        """
        positional: Dict[int, Value] = {}
        named: Dict[str, Any] = {}

        for value in values:
            if value.origin_position is not None:
                positional[value.origin_position] = value
            elif value.origin_name is not None:
                named[value.origin_name] = self.resolve_value(value, container)

        if sorted(positional) != list(range(len(positional))):
            raise IncompatibilityError(
                f"positional arguments for `{owner}` must form a dense range starting at 0, "
                f"got positions {sorted(positional)}"
            )

        args = [self.resolve_value(positional[index], container) for index in range(len(positional))]
        return args, named

    def reflect_arguments(
        self,
        owner: Any,
        target: Callable[..., Any],
        values: Iterable[Value],
        container: IContainer,
        skip_first: bool = False,
    ) -> Arguments:
        """Collect arguments by matching bindings against the signature of ``target``.

        Positions are mapped onto parameter names, explicit bindings win,
        remaining required parameters are resolved from their class type hints
        and parameters with defaults keep them.

        Args:
            owner: The interface being built, used in error messages.
            target: The callable whose signature is inspected.
            values: The bound values.
            container: The container dependencies are resolved from.
            skip_first: Skip the first parameter (``self`` of an unbound ``__init__``).

        Raises:
            UnresolvableError: If a required parameter lacks a binding, a type hint and a default,
                or a binding matches no parameter.

        Example:
            >>> class UserService:
            ...     def __init__(self, repo: UserRepository, page_size: int = 20):
            ...         self.repo = repo
            >>>
            >>> args, kwargs = resolver.reflect_arguments(UserService, UserService.__init__, [], container, True)
        """
        parameters = list(inspect.signature(target).parameters.values())
        if skip_first:
            parameters = parameters[1:]
        hints = type_hints_of(target)

        positional_names = [p.name for p in parameters if p.kind in _POSITIONAL]
        explicit: Dict[str, Value] = {}
        extra_positional: Dict[int, Value] = {}
        extra_named: Dict[str, Value] = {}

        for value in values:
            if value.origin_position is not None:
                if value.origin_position < len(positional_names):
                    explicit[positional_names[value.origin_position]] = value
                else:
                    extra_positional[value.origin_position] = value
            elif value.origin_name is not None:
                if any(p.name == value.origin_name and p.kind != p.VAR_POSITIONAL for p in parameters):
                    explicit[value.origin_name] = value
                else:
                    extra_named[value.origin_name] = value

        if extra_positional and not any(p.kind == p.VAR_POSITIONAL for p in parameters):
            raise UnresolvableError(
                owner,
                f"positional argument {min(extra_positional)} has no matching parameter",
            )

        if extra_named and not any(p.kind == p.VAR_KEYWORD for p in parameters):
            raise UnresolvableError(owner, f"named argument '{next(iter(extra_named))}' has no matching parameter")

        args: List[Any] = []
        kwargs: Dict[str, Any] = {}

        for parameter in parameters:
            if parameter.kind == parameter.VAR_POSITIONAL:
                args.extend(
                    self.resolve_value(extra_positional[index], container) for index in sorted(extra_positional)
                )
                continue

            if parameter.kind == parameter.VAR_KEYWORD:
                continue

            hint = hints.get(parameter.name)

            if parameter.name in explicit:
                argument = self.resolve_value(explicit[parameter.name], container, hint)
            elif parameter.default is not inspect.Parameter.empty:
                if parameter.kind not in _POSITIONAL:
                    continue
                argument = parameter.default
            elif hint is not None:
                argument = self.resolve_hint(hint, container)
            else:
                raise UnresolvableError(
                    owner,
                    f"Parameter '{parameter.name}' lacks type hint and has no default value.",
                )

            if parameter.kind in _POSITIONAL:
                args.append(argument)
            else:
                kwargs[parameter.name] = argument

        for name, value in extra_named.items():
            kwargs[name] = self.resolve_value(value, container)

        return args, kwargs
