"""
Infrastructure layer - External integrations.

This layer contains integrations with external frameworks and tools.
It depends on both Application and Domain layers.

The FastAPI integration lives in ``rogue_wire.infrastructure.fastapi_integration``
and needs the ``fastapi`` extra.
"""

from . import testing

__all__ = [
    "testing",
]
