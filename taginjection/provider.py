"""
Providers and Resolvers

Configuration callbacks run once, when the builder is sealed by its first
``get_container()`` call. All providers run first, then all resolvers, each
group in registration order. Both receive the still-open builder, so
resolvers can inspect and complete whatever the providers registered.
"""

from abc import ABC, abstractmethod
from typing import Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from .container_builder import ContainerBuilder


class Provider(ABC):
    """
    Base class for objects that contribute definitions to a builder.

    Example:
        ```python
        class MailProvider(Provider):
            def provide(self, builder: ContainerBuilder) -> None:
                builder.set_value("mail.host", "localhost")
                builder.set_factory("mailer #shared", make_mailer)

        builder.add_provider(MailProvider())
        ```
    """

    @abstractmethod
    def provide(self, builder: 'ContainerBuilder') -> None:
        """Register definitions into ``builder``."""
        return NotImplemented


class Resolver(ABC):
    """
    Base class for objects that finish the configuration of a builder.

    Resolvers run after every provider, once all definitions are known, so
    they can add defaults or aliases depending on what is already there.

    Example:
        ```python
        class DefaultMailer(Resolver):
            def resolve(self, builder: ContainerBuilder) -> None:
                if not builder.has_definition("mailer"):
                    builder.set_alias("mailer", "null_mailer")
        ```
    """

    @abstractmethod
    def resolve(self, builder: 'ContainerBuilder') -> None:
        """Complete the definitions of ``builder``."""
        return NotImplemented


class ProviderFunc(Provider):
    """Adapts a plain ``fn(builder)`` callable into a Provider."""

    def __init__(self, fn: Callable[['ContainerBuilder'], None]):
        self.fn = fn

    def provide(self, builder: 'ContainerBuilder') -> None:
        self.fn(builder)

    def __repr__(self) -> str:
        return f"ProviderFunc({getattr(self.fn, '__qualname__', self.fn)!s})"


class ResolverFunc(Resolver):
    """Adapts a plain ``fn(builder)`` callable into a Resolver."""

    def __init__(self, fn: Callable[['ContainerBuilder'], None]):
        self.fn = fn

    def resolve(self, builder: 'ContainerBuilder') -> None:
        self.fn(builder)

    def __repr__(self) -> str:
        return f"ResolverFunc({getattr(self.fn, '__qualname__', self.fn)!s})"
