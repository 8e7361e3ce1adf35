"""Unit tests for CircularDependencyDetector."""

import threading

import pytest

from rogue_wire.application.circular_detector import CircularDependencyDetector
from rogue_wire.domain import CircularDependencyError


class TestCircularDependencyDetector:
    """Test cases for CircularDependencyDetector class."""

    def test_detector_initialization(self):
        """Test that the stack is created lazily."""
        detector = CircularDependencyDetector()
        assert not hasattr(detector._local, "stack")
        assert detector.depth() == 0

    def test_push_and_pop(self):
        """Test that push and pop maintain the stack."""
        detector = CircularDependencyDetector()

        detector.push("mailer")
        detector.push("transport")
        assert detector._get_stack() == ["mailer", "transport"]

        detector.pop()
        assert detector._get_stack() == ["mailer"]

    def test_pop_on_empty_stack_is_noop(self):
        """Test that popping an empty stack does nothing."""
        detector = CircularDependencyDetector()
        detector.pop()
        assert detector.depth() == 0

    def test_push_detects_cycle(self):
        """Test that an interface entering twice closes a cycle."""
        detector = CircularDependencyDetector()

        class ServiceA:
            pass

        detector.push(ServiceA)
        detector.push("service.b")

        with pytest.raises(CircularDependencyError) as exc_info:
            detector.push(ServiceA)

        assert exc_info.value.dependency_chain == [ServiceA, "service.b", ServiceA]
        assert "ServiceA -> service.b -> ServiceA" in str(exc_info.value)

    def test_cycle_starts_at_first_occurrence(self):
        """Test that the reported chain starts where the cycle starts."""
        detector = CircularDependencyDetector()
        detector.push("root")
        detector.push("a")
        detector.push("b")

        with pytest.raises(CircularDependencyError) as exc_info:
            detector.push("a")

        assert exc_info.value.dependency_chain == ["a", "b", "a"]

    def test_resolving_pops_on_exit(self):
        """Test that the context manager pops even when the block raises."""
        detector = CircularDependencyDetector()

        with detector.resolving("mailer"):
            assert detector.depth() == 1

        assert detector.depth() == 0

        with pytest.raises(RuntimeError):
            with detector.resolving("mailer"):
                raise RuntimeError("boom")

        assert detector.depth() == 0

    def test_stacks_are_thread_local(self):
        """Test that each thread has its own stack."""
        detector = CircularDependencyDetector()
        detector.push("main")
        depths = []

        def worker():
            detector.push("main")
            depths.append(detector.depth())

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert depths == [1]
        assert detector.depth() == 1
