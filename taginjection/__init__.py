# Public API
from .container import Container
from .container_builder import Binding, BuilderState, ContainerBuilder
from .definition import (
    Definition,
    TAG_ALIAS,
    TAG_FACTORY,
    TAG_INJECT,
    TAG_PRIORITY,
    TAG_PRIVATE,
    TAG_SHARED,
    TAG_VALUE,
)
from .exceptions import (
    AliasCollisionError,
    AliasTargetNotFoundError,
    CircularDependencyError,
    ConfigurationError,
    ContainerSealedError,
    CycleError,
    DefinitionNotFoundError,
    InvalidKeyError,
    KindConflictError,
    TagInjectionError,
    TagValueError,
    VisibilityError,
)
from .inject_descriptor import Inject, injectable_factory
from .key_parser import parse_key
from .kind import DefinitionKind
from .provider import Provider, ProviderFunc, Resolver, ResolverFunc

__all__ = [
    "ContainerBuilder",
    "Container",
    "Binding",
    "BuilderState",
    "Definition",
    "DefinitionKind",
    "parse_key",
    # Hooks
    "Provider",
    "ProviderFunc",
    "Resolver",
    "ResolverFunc",
    # Inject
    "Inject",
    "injectable_factory",
    # Reserved tags
    "TAG_SHARED",
    "TAG_PRIVATE",
    "TAG_PRIORITY",
    "TAG_FACTORY",
    "TAG_VALUE",
    "TAG_ALIAS",
    "TAG_INJECT",
    # Exceptions
    "TagInjectionError",
    "ConfigurationError",
    "InvalidKeyError",
    "TagValueError",
    "KindConflictError",
    "AliasTargetNotFoundError",
    "AliasCollisionError",
    "ContainerSealedError",
    "DefinitionNotFoundError",
    "VisibilityError",
    "CircularDependencyError",
    "CycleError",
]

__version__ = '0.1.0'
