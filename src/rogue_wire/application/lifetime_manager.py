import logging
from typing import Any, Callable

from rogue_wire.domain import Definition, ILifetimeManager, UnresolvableError, WireException

logger = logging.getLogger(__name__)


class LifetimeManager(ILifetimeManager):
    """Manages the cached instances of shared definitions.

    Shared definitions keep their instance on the definition itself, so every
    container holding the definition observes the same instance. Unshared
    definitions are built on every call.
    """

    def get_or_create(self, definition: Definition, factory: Callable[[], Any], ignore_sharing: bool = False) -> Any:
        """Get the cached instance or create a new one based on the shared flag.

        Args:
            definition: The definition owning the cache slot.
            factory: Function creating a new instance.
            ignore_sharing: Always create a new instance and leave the cache untouched.

        Returns:
            Instance according to the sharing rules:
            - Shared: Returns the cached instance or creates and caches a new one
            - Not shared, or sharing ignored: Always creates a new instance

        Raises:
            UnresolvableError: If the factory raised anything but a container error.

        Example:
            >>> definition = Definition(interface=Mailer, shared=True)
            >>> mailer = manager.get_or_create(definition, lambda: Mailer())
            >>> assert manager.get_or_create(definition, lambda: Mailer()) is mailer
        """
        caching = definition.is_shared() and not ignore_sharing

        if caching and definition.has_instance():
            return definition.get_instance()

        instance = self._create(definition, factory)

        if caching:
            logger.debug("Caching shared instance of %r", definition.interface)
            definition.set_instance(instance)

        return instance

    @staticmethod
    def _create(definition: Definition, factory: Callable[[], Any]) -> Any:
        try:
            return factory()
        except WireException:
            raise
        except Exception as e:
            raise UnresolvableError(definition.interface, f"Failed to create instance: {e}") from e
