from enum import Enum


class ValueKind(str, Enum):
    """Defines how a bound value is turned into an argument at build time.

    Attributes:
        RESOLVER: The payload names a service interface looked up in the container.
        LITERAL: The payload is used verbatim.
        AUTOMATIC: No payload was bound, the strategy derives it from type hints.
    """

    RESOLVER = "resolver"
    LITERAL = "literal"
    AUTOMATIC = "automatic"

    def __str__(self) -> str:
        return self.value
