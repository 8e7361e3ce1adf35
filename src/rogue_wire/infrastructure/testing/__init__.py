"""
Testing utilities module.

Provides helpers and utilities for testing applications using rogue-wire.
"""

from .utilities import ChildScope, TestContainer, create_mock_container

__all__ = [
    "TestContainer",
    "create_mock_container",
    "ChildScope",
]
