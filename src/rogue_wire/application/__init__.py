"""
Application layer - Use cases and orchestration.

This layer contains the container, its builder and the strategies that
turn definitions into instances. It depends only on the Domain layer.
"""

from .circular_detector import CircularDependencyDetector
from .concrete import Concrete
from .container import Container
from .lifetime_manager import LifetimeManager
from .resolver import DependencyResolver
from .strategies import AutoWiringStrategy, ContainerStrategy, ManualWiringStrategy

__all__ = [
    "Container",
    "Concrete",
    "ContainerStrategy",
    "ManualWiringStrategy",
    "AutoWiringStrategy",
    "DependencyResolver",
    "LifetimeManager",
    "CircularDependencyDetector",
]
