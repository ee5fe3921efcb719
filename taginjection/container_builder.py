"""
ContainerBuilder

This module provides the definition registry. A ContainerBuilder collects
definitions written with the tag mini-language, runs the registered
providers and resolvers once, and is then sealed for good. Sealed builders
hand out Container sessions that share the (now read-only) definitions.

Example::

    builder = ContainerBuilder()
    builder.set_value("counter.increment", 2)
    builder.set_factory(
        "counter #shared",
        lambda c: Counter(increment=c.get("counter.increment")),
    )

    container = builder.get_container()
    counter = container.get("counter")
"""

import logging
import threading
from enum import Enum
from typing import (
    Any, Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple,
    Union,
)

from .container import Container
from .definition import (
    Definition,
    Factory,
    KIND_TAGS,
    merge_tags,
    new_definition,
    select_kind_tag,
)
from .exceptions import (
    AliasCollisionError,
    AliasTargetNotFoundError,
    ConfigurationError,
    ContainerSealedError,
    DefinitionNotFoundError,
    InvalidKeyError,
)
from .inject_descriptor import injectable_factory
from .key_parser import parse_key
from .kind import DefinitionKind
from .provider import Provider, ProviderFunc, Resolver, ResolverFunc

logger = logging.getLogger(__name__)


class BuilderState(Enum):
    """Lifecycle of a ContainerBuilder"""
    OPEN = "OPEN"
    SEALED = "SEALED"


class Binding(NamedTuple):
    """One entry for ``ContainerBuilder.set_all()``.

    Attributes:
        key: Raw key, may carry tags
        target: Value, factory, alias target key or injectable class
        tags: Explicit tags, winning over the tags embedded in ``key``
    """
    key: str
    target: Any
    tags: Optional[Mapping[str, str]] = None


class ContainerBuilder:
    """Definition registry with a one-way OPEN -> SEALED lifecycle.

    While open, definitions, aliases, providers and resolvers can be added.
    The first ``get_container()`` call runs every provider and then every
    resolver, and seals the builder. Further mutation raises
    ContainerSealedError.

    Attributes:
        _definitions: Definitions by bare key, in registration order
        _providers: Providers to run when sealing
        _resolvers: Resolvers to run after the providers
        _state: Current BuilderState
        _providers_done: Providers that completed, resumed from on retry
        _resolvers_done: Resolvers that completed, resumed from on retry
        _lock: Guards the state and the sealing sweep

    Example::

        builder = ContainerBuilder()
        builder.set_factory("db #shared", lambda c: Database(c.get("dsn")))
        builder.set_value("dsn #private", "sqlite://")

        container = builder.get_container()
        db = container.get("db")
    """

    def __init__(self):
        self._definitions: Dict[str, Definition] = {}
        self._providers: List[Provider] = []
        self._resolvers: List[Resolver] = []
        self._state: BuilderState = BuilderState.OPEN
        self._sealing: bool = False
        # Hooks already run by an interrupted sweep are not run again
        self._providers_done: int = 0
        self._resolvers_done: int = 0
        # Re-entrant: providers and resolvers mutate the builder while the
        # sealing thread holds the lock
        self._lock = threading.RLock()

    @property
    def is_sealed(self) -> bool:
        """Check whether ``get_container()`` has sealed the builder."""
        return self._state is BuilderState.SEALED

    def _ensure_open(self) -> None:
        """Ensure the builder still accepts mutations.

        Must be called while holding ``_lock``.

        Raises:
            ContainerSealedError: When the builder has been sealed
        """
        if self._state is BuilderState.SEALED:
            raise ContainerSealedError(
                "container is resolved and new items can not be set"
            )

    def set_value(self, key: str, value: Any, tags: Optional[Mapping[str, str]] = None) -> None:
        """Register a constant value.

        The generated factory ignores the container and always returns
        ``value`` (the same object on every call).

        Args:
            key: Raw key, may carry tags
            value: The value to return
            tags: Explicit tags, winning over the key's tags

        Raises:
            ContainerSealedError: When the builder is sealed
            ConfigurationError: When the key or its tags are invalid

        Example::

            builder.set_value("mail.port #priority=1", 25)
        """
        self._set(key, lambda _: value, tags, DefinitionKind.VALUE)

    def set_factory(self, key: str, factory: Factory, tags: Optional[Mapping[str, str]] = None) -> None:
        """Register a ``factory(container)`` callable.

        Args:
            key: Raw key, may carry tags (``#shared``, ``#private``, ...)
            factory: Called with a container to build the service
            tags: Explicit tags, winning over the key's tags

        Raises:
            ContainerSealedError: When the builder is sealed
            ConfigurationError: When ``factory`` is not callable, or the key
                or its tags are invalid

        Example::

            builder.set_factory("mailer #shared", lambda c: Mailer(c.get("mail.port")))
        """
        if not callable(factory):
            raise ConfigurationError(
                f"factory for '{key}' must be callable, got {type(factory).__name__}"
            )
        self._set(key, factory, tags, DefinitionKind.FACTORY)

    def set_injectable(self, key: str, target: Any, tags: Optional[Mapping[str, str]] = None) -> None:
        """Register a class whose ``Inject`` attributes are filled by the container.

        Args:
            key: Raw key, may carry tags
            target: The class to build, or an instance of it
            tags: Explicit tags, winning over the key's tags

        Raises:
            ContainerSealedError: When the builder is sealed
            ConfigurationError: When the key or its tags are invalid
        """
        self._set(key, injectable_factory(target), tags, DefinitionKind.INJECT)

    def set_alias(self, key: str, target: str, tags: Optional[Mapping[str, str]] = None) -> None:
        """Register ``key`` as an alias of an already registered definition.

        The alias reuses the target's factory but keeps its own tags, so it
        can be shared, private or prioritized independently of the target.
        The target must be a real definition, not another alias.

        Args:
            key: Raw alias key, may carry tags
            target: Bare key of the aliased definition
            tags: Explicit tags, winning over the key's tags

        Raises:
            ContainerSealedError: When the builder is sealed
            AliasTargetNotFoundError: When ``target`` is not registered, or is
                itself an alias
            AliasCollisionError: When ``key`` already names a real definition
            ConfigurationError: When the key or its tags are invalid

        Example::

            builder.set_factory("smtp_mailer #private", make_smtp_mailer)
            builder.set_alias("mailer", "smtp_mailer")  # public entry point
        """
        if not isinstance(target, str):
            raise ConfigurationError(
                f"alias '{key}' must target a key, got {type(target).__name__}"
            )

        with self._lock:
            self._ensure_open()
            bare_key, merged = self._parse(key, tags, DefinitionKind.ALIAS)
            target_key = target.strip()

            aliased = self._definitions.get(target_key)
            if aliased is None or aliased.is_alias:
                raise AliasTargetNotFoundError(
                    f"definition with id '{target_key}' does not exist and alias cannot be set"
                )

            existing = self._definitions.get(bare_key)
            if existing is not None and not existing.is_alias:
                raise AliasCollisionError(
                    f"definition with id '{bare_key}' already exists and alias cannot be set"
                )

            definition = new_definition(bare_key, aliased.factory, merged, alias_of=aliased)
            self._definitions[bare_key] = definition

        logger.debug("Registered alias '%s' -> '%s'", bare_key, target_key)

    def set_all(self, bindings: Iterable[Union[Binding, Tuple]]) -> None:
        """Register a batch of bindings.

        Each binding's explicit tags are merged over the tags embedded in its
        key. The kind tag then selects ``set_value``, ``set_factory``,
        ``set_alias`` or ``set_injectable``. Without a kind tag, a string
        target is an alias, a callable is a factory and anything else is a
        value.

        Args:
            bindings: ``Binding`` objects or ``(key, target[, tags])`` tuples

        Example::

            builder.set_all([
                Binding("service #private", lambda c: c.get("param") + 1),
                Binding("param", 1),
                Binding("alias", "service"),
                Binding("greeting", "hello", {"value": ""}),
            ])
        """
        for binding in bindings:
            if not isinstance(binding, Binding):
                binding = Binding(*binding)

            bare_key, key_tags = parse_key(binding.key)
            merged = merge_tags(binding.tags, key_tags)

            if any(tag in merged for tag in KIND_TAGS):
                kind = select_kind_tag(merged, bare_key)
            else:
                kind = _infer_kind(binding.target)

            setter = self._setters[kind]
            setter(self, binding.key, binding.target, binding.tags)

    def has_definition(self, key: str) -> bool:
        """Check whether ``key`` names a definition or an alias."""
        return key in self._definitions

    def has_alias(self, key: str) -> bool:
        """Check whether ``key`` names an alias."""
        definition = self._definitions.get(key)
        return definition is not None and definition.is_alias

    def get_definition(self, key: str) -> Definition:
        """Get the definition registered for ``key``.

        Raises:
            DefinitionNotFoundError: When ``key`` is not registered
        """
        definition = self._definitions.get(key)
        if definition is None:
            # Private keys are not advertised
            registered = ", ".join(
                k for k, d in self._definitions.items() if not d.private
            ) or "None"
            raise DefinitionNotFoundError(
                f"service with key '{key}' is not registered.\n"
                f"Registered keys: {registered}"
            )
        return definition

    def keys(self) -> List[str]:
        """Return all registered keys, in registration order."""
        return list(self._definitions)

    def get_tagged_keys(self, tag: str, values: Optional[Sequence[str]] = None) -> List[str]:
        """Return the keys whose definition carries ``tag``.

        Args:
            tag: Tag name to look for
            values: When non-empty, only keys whose tag value is one of
                ``values`` are returned

        Returns:
            Keys ordered by descending priority. Keys with equal priority
            keep their registration order.

        Example::

            builder.set_factory("a #listener #priority=1", make_a)
            builder.set_factory("b #listener", make_b)
            builder.set_factory("c #listener=late #priority=2", make_c)

            builder.get_tagged_keys("listener")           # ["c", "a", "b"]
            builder.get_tagged_keys("listener", ["late"])  # ["c"]
        """
        values = tuple(values or ())
        tagged = [
            definition for definition in self._definitions.values()
            if tag in definition.tags and (not values or definition.tags[tag] in values)
        ]
        tagged.sort(key=lambda definition: -definition.priority)
        return [definition.key for definition in tagged]

    def add_provider(self, *providers: Union[Provider, Callable[['ContainerBuilder'], None]]) -> None:
        """Add providers, run in order when the builder is sealed.

        Plain callables are wrapped in ProviderFunc.

        Raises:
            ContainerSealedError: When the builder is sealed
            ConfigurationError: When an item is neither a Provider nor callable
        """
        if not providers:
            return

        adapted = [_adapt(p, Provider, ProviderFunc, "provide") for p in providers]
        with self._lock:
            self._ensure_open()
            self._providers.extend(adapted)

    def add_resolver(self, *resolvers: Union[Resolver, Callable[['ContainerBuilder'], None]]) -> None:
        """Add resolvers, run in order after all providers when sealing.

        Plain callables are wrapped in ResolverFunc.

        Raises:
            ContainerSealedError: When the builder is sealed
            ConfigurationError: When an item is neither a Resolver nor callable
        """
        if not resolvers:
            return

        adapted = [_adapt(r, Resolver, ResolverFunc, "resolve") for r in resolvers]
        with self._lock:
            self._ensure_open()
            self._resolvers.extend(adapted)

    def get_container(self) -> Container:
        """Seal the builder if needed and return a fresh container.

        The first call runs every provider, then every resolver, each exactly
        once, and seals the builder. Every call returns a new Container with
        an empty instance cache over the same definitions.

        If a provider or resolver raises, the error propagates and the builder
        stays open. The next call resumes the sweep with the hook that failed;
        hooks that completed are not run again.

        Returns:
            A new sealed Container

        Raises:
            ConfigurationError: When called from a provider or resolver

        Example::

            c1 = builder.get_container()
            c2 = builder.get_container()  # same definitions, separate instances
        """
        if self._state is not BuilderState.SEALED:
            with self._lock:
                if self._sealing:
                    raise ConfigurationError(
                        "get_container() can not be called from a provider or resolver"
                    )
                if self._state is not BuilderState.SEALED:
                    self._seal()

        return Container(self)

    def _seal(self) -> None:
        """Run providers and resolvers, then seal. Called holding ``_lock``."""
        logger.debug(
            "Sealing builder: %d provider(s), %d resolver(s)",
            len(self._providers), len(self._resolvers),
        )
        self._sealing = True
        try:
            # Index-based so callbacks added during the sweep also run
            while self._providers_done < len(self._providers):
                self._providers[self._providers_done].provide(self)
                self._providers_done += 1

            while self._resolvers_done < len(self._resolvers):
                self._resolvers[self._resolvers_done].resolve(self)
                self._resolvers_done += 1
        finally:
            self._sealing = False

        self._state = BuilderState.SEALED
        logger.debug("Builder sealed with %d definition(s)", len(self._definitions))

    def _parse(self, key: str, tags: Optional[Mapping[str, str]],
               kind: DefinitionKind) -> Tuple[str, Dict[str, str]]:
        """Parse a raw key and merge explicit, embedded and implicit tags."""
        bare_key, key_tags = parse_key(key)
        if not bare_key:
            raise InvalidKeyError(f"key '{key}' has no service name")

        return bare_key, merge_tags(tags, key_tags, {kind.value: ""})

    def _set(self, key: str, factory: Factory, tags: Optional[Mapping[str, str]],
             kind: DefinitionKind) -> None:
        with self._lock:
            self._ensure_open()
            bare_key, merged = self._parse(key, tags, kind)
            definition = new_definition(bare_key, factory, merged)
            replaced = self._definitions.get(bare_key)
            self._definitions[bare_key] = definition

        logger.debug(
            "Registered %s '%s' (shared=%s, private=%s, priority=%d)%s",
            definition.kind.value, bare_key, definition.shared, definition.private,
            definition.priority, " replacing alias" if replaced is not None and replaced.is_alias else "",
        )

    _setters: Dict[DefinitionKind, Callable[..., None]] = {
        DefinitionKind.VALUE: set_value,
        DefinitionKind.FACTORY: set_factory,
        DefinitionKind.ALIAS: set_alias,
        DefinitionKind.INJECT: set_injectable,
    }


def _infer_kind(target: Any) -> DefinitionKind:
    if isinstance(target, str):
        return DefinitionKind.ALIAS
    if callable(target):
        return DefinitionKind.FACTORY
    return DefinitionKind.VALUE


def _adapt(item: Any, base: type, adapter: type, method: str) -> Any:
    if isinstance(item, base):
        return item
    if callable(item):
        return adapter(item)
    raise ConfigurationError(
        f"{type(item).__name__} is not a {base.__name__}: expected a "
        f"{method}(builder) method or a callable"
    )
