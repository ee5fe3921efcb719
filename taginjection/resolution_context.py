"""
ResolutionContext

This module provides the loading stack used for circular dependency
detection. One ResolutionContext is created per top-level ``get()`` call on
a sealed container and handed down through the unsealed views given to
factories, so unrelated chains never see each other's keys. A view keeps
one context per thread, so a view used after its factory returned is safe
to share between threads.
"""

from typing import List

from .exceptions import CircularDependencyError


class ResolutionContext:
    """Keys currently being constructed in one dependency chain.

    Attributes:
        loading: Keys in construction order, the chain origin first

    Example (internal usage)::

        ctx = ResolutionContext()
        ctx.push("s1")
        ctx.push("s2")
        ctx.push("s1")  # Raises CircularDependencyError
    """

    def __init__(self):
        self.loading: List[str] = []

    def push(self, key: str) -> None:
        """Enter the construction of ``key``.

        Raises:
            CircularDependencyError: When ``key`` is already being constructed
                in this chain. The message names the chain origin and the
                key whose factory requested ``key`` again.
        """
        if key in self.loading:
            origin, last = self.loading[0], self.loading[-1]
            raise CircularDependencyError(
                f"circular reference found while building service '{origin}' "
                f"at service '{last}'",
                origin=origin,
                key=last,
            )
        self.loading.append(key)

    def pop(self) -> str:
        """Leave the construction of the innermost key."""
        return self.loading.pop()

    def __len__(self) -> int:
        return len(self.loading)

    def __contains__(self, key: object) -> bool:
        return key in self.loading

    def __repr__(self) -> str:
        return f"ResolutionContext({' -> '.join(self.loading)})"
