"""Application layer - Circular dependency detection."""

import threading
from contextlib import contextmanager
from typing import Any, Iterator, List

from rogue_wire.domain import CircularDependencyError


class CircularDependencyDetector:
    """Detects interfaces that, directly or indirectly, need themselves to be built.

    Each thread keeps its own stack of interfaces currently being resolved
    by the owning container. An interface entering the stack twice closes a
    cycle.

    Attributes:
        _local: Thread-local storage for resolution stacks.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _get_stack(self) -> List[Any]:
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    def push(self, interface: Any) -> None:
        """Enter the resolution of an interface.

        Args:
            interface: The interface being resolved.

        Raises:
            CircularDependencyError: If the interface is already being resolved.

        Example:
            >>> detector = CircularDependencyDetector()
            >>> detector.push("mailer")
            >>> detector.push("transport")
            >>> detector.push("mailer")  # Raises CircularDependencyError
        """
        stack = self._get_stack()

        if interface in stack:
            cycle = stack[stack.index(interface) :] + [interface]
            raise CircularDependencyError(cycle)

        stack.append(interface)

    def pop(self) -> None:
        """Leave the resolution of the most recent interface."""
        stack = self._get_stack()
        if stack:
            stack.pop()

    @contextmanager
    def resolving(self, interface: Any) -> Iterator[None]:
        """Keep ``interface`` on the stack for the duration of the block."""
        self.push(interface)
        try:
            yield
        finally:
            self.pop()

    def depth(self) -> int:
        """Return how many resolutions are nested on the current thread."""
        return len(self._get_stack())
