"""
Container

This module provides the resolution session over a sealed ContainerBuilder.
It is the heart of TagInjection, responsible for:

- Constructing services lazily, on first request
- Caching shared services (one instance per container)
- Hiding private services from public callers
- Detecting circular dependencies

A sealed container is what ``ContainerBuilder.get_container()`` returns.
Factories receive an unsealed view of the same container instead, which can
reach private services and shares the instance cache and lock.
"""

import logging
import threading
from typing import Any, List, Optional, TYPE_CHECKING

from .definition import Definition
from .exceptions import VisibilityError
from .resolution_context import ResolutionContext

if TYPE_CHECKING:
    from .container_builder import ContainerBuilder

logger = logging.getLogger(__name__)


class Container:
    """Resolution session with its own instance cache.

    Attributes:
        _builder: The sealed builder holding the definitions
        _instances: Shared instances by requested key
        _sealed: True for the public container, False for factory views
        _lock: Serializes shared construction within the session
        _local: Per-thread loading stack of the chain (used by factory views)

    Example::

        container = builder.get_container()

        mailer = container.get("mailer")
        listeners = container.get_tagged_by("listener")

        # Fail fast on broken definitions at startup
        container.must_build(dry=True)
    """

    def __init__(
        self,
        builder: 'ContainerBuilder',
        instances: Optional[dict] = None,
        sealed: bool = True,
        lock: Optional[threading.RLock] = None,
    ):
        self._builder = builder
        self._instances = {} if instances is None else instances
        self._sealed = sealed
        # Re-entrant: a shared factory may request other shared services
        self._lock = lock or threading.RLock()
        # A view may outlive its factory and be used from several threads,
        # so each thread gets its own loading stack
        self._local = threading.local()

    @property
    def _context(self) -> ResolutionContext:
        context = getattr(self._local, "context", None)
        if context is None:
            context = self._local.context = ResolutionContext()
        return context

    @property
    def builder(self) -> 'ContainerBuilder':
        return self._builder

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    def has(self, key: str) -> bool:
        """Check whether ``key`` is registered (private keys included)."""
        return self._builder.has_definition(key)

    def get(self, key: str) -> Any:
        """Get the service registered for ``key``.

        Non-shared services are constructed on every call. Shared services
        are constructed once per container; the check, construction and
        caching happen under the container lock, so concurrent callers see
        a single construction.

        Args:
            key: Bare key of a definition or alias

        Returns:
            The constructed service

        Raises:
            DefinitionNotFoundError: When ``key`` is not registered
            VisibilityError: When ``key`` is private and this container is
                sealed
            CircularDependencyError: When construction re-enters ``key``

        Example::

            builder.set_factory("a #private", lambda c: 1)
            builder.set_factory("b", lambda c: c.get("a") + 1)

            container = builder.get_container()
            container.get("b")  # 2
            container.get("a")  # VisibilityError
        """
        definition = self._builder.get_definition(key)
        if self._sealed and definition.private:
            raise VisibilityError(
                f"service with key '{key}' is private and can't be retrieved from the container",
                key=key,
            )

        if not definition.shared:
            return self._construct(definition, key)

        with self._lock:
            if key in self._instances:
                return self._instances[key]

            instance = self._construct(definition, key)
            self._instances[key] = instance
            logger.debug("Created shared instance of '%s'", key)
            return instance

    def __getitem__(self, key: str) -> Any:
        """Support subscript syntax: container["key"]."""
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def get_tagged_by(self, tag: str, *values: str) -> List[Any]:
        """Get every service carrying ``tag``.

        Args:
            tag: Tag name to look for
            *values: When given, only services whose tag value is one of
                ``values`` are returned

        Returns:
            Services ordered by descending priority, registration order on
            ties

        Raises:
            VisibilityError: When a matching service is private and this
                container is sealed
            CircularDependencyError: When a construction re-enters itself

        Example::

            builder.set_factory("a #sum #priority=1", lambda c: 1)
            builder.set_factory("b #sum", lambda c: 10)
            builder.set_factory("c #sum #priority=2", lambda c: 100)

            builder.get_container().get_tagged_by("sum")  # [100, 1, 10]
        """
        keys = self._builder.get_tagged_keys(tag, values)
        return [self.get(key) for key in keys]

    def must_build(self, dry: bool = False) -> None:
        """Build every public service once to surface construction errors.

        Args:
            dry: When True, the instance cache is cleared afterwards so the
                container starts empty. When False, shared instances built
                here stay cached.

        Raises:
            Any error raised while building a service
        """
        built = 0
        for key in self._builder.keys():
            if self._builder.get_definition(key).private:
                continue
            self.get(key)
            built += 1

        if dry:
            with self._lock:
                self._instances.clear()

        logger.debug("Built %d public service(s)%s", built, " (dry run)" if dry else "")

    def _construct(self, definition: Definition, key: str) -> Any:
        """Run the factory of ``definition`` with an unsealed view.

        The key is on the loading stack while its factory runs, and is
        removed on exit whether the factory succeeds or not.
        """
        view = self._unseal()
        view._context.push(key)
        try:
            return definition.factory(view)
        except Exception as e:
            if self._sealed:
                logger.warning("Failed to build service '%s': %s", key, e)
            raise
        finally:
            view._context.pop()

    def _unseal(self) -> 'Container':
        """Return the view handed to factories.

        Views are unsealed, share this container's instances and lock, and
        own the loading stack of the chain, one per thread. A view returns
        itself, so nested constructions in the same thread extend the chain.
        """
        if not self._sealed:
            return self

        return Container(
            self._builder,
            instances=self._instances,
            sealed=False,
            lock=self._lock,
        )
