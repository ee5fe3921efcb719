"""
Test Configuration and Utilities

Common base classes and helper functions for TagInjection tests
"""

import unittest
from typing import Any, Callable, List

from taginjection import ContainerBuilder


class TagInjectionTestCase(unittest.TestCase):
    """
    Base test case class for TagInjection tests.

    Creates a fresh, open builder before each test.
    """

    def setUp(self):
        """Create a new builder before each test"""
        self.builder = ContainerBuilder()


def counting_factory(start: int = 0) -> Callable[[Any], int]:
    """
    Create a factory returning an increasing counter on every call.

    Example:
        >>> factory = counting_factory()
        >>> factory(None), factory(None)
        (1, 2)
    """
    calls: List[int] = [start]

    def factory(_container) -> int:
        calls[0] += 1
        return calls[0]

    return factory
