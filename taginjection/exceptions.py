"""
TagInjection Exceptions

Custom exception hierarchy for the TagInjection service container
"""

from typing import Iterable, Optional


class TagInjectionError(Exception):
    """
    Base exception for all TagInjection errors.

    All TagInjection-specific exceptions inherit from this class.
    You can catch this to handle any TagInjection error generically.

    Example:
        >>> try:
        ...     service = container.get("mailer")
        ... except TagInjectionError as e:
        ...     print(f"DI error: {e}")
    """

    pass


class ConfigurationError(TagInjectionError):
    """
    Raised when a definition cannot be registered.

    This error is raised by the builder call that received the offending
    key, tags or target. It is never deferred to resolution time.

    Common causes:
        - Conflicting kind tags such as ``"mailer #value #alias"``
        - Tag values that are not valid booleans or numbers
        - Aliases pointing to missing definitions
        - A factory that is not callable
    """

    pass


class InvalidKeyError(ConfigurationError):
    """
    Raised when a raw key has no bare key part.

    Common causes:
        - Passing only tags, e.g. ``"#shared"``
        - Passing an empty or blank string

    Solution:
        Always start the raw key with the service name::

            builder.set_factory("mailer #shared", make_mailer)
    """

    pass


class TagValueError(ConfigurationError):
    """
    Raised when a reserved tag carries a value that cannot be interpreted.

    Boolean tags (``shared``, ``private``) accept an empty value, ``true``,
    ``1``, ``false`` or ``0``. The ``priority`` tag accepts a signed 16-bit
    integer.

    Attributes:
        tag: The name of the offending tag
        value: The literal value found
        key: The definition key the tag was attached to
    """

    def __init__(self, message: str, tag: str, value: str, key: str = ""):
        super().__init__(message)
        self.tag = tag
        self.value = value
        self.key = key


class KindConflictError(TagValueError):
    """
    Raised when a key carries more than one kind tag.

    The kind tags ``factory``, ``value``, ``alias`` and ``inject`` are
    mutually exclusive.

    Example::

        builder.set_value("port #alias", 8080)  # KindConflictError!

    Attributes:
        kinds: The full set of mutually exclusive tags
    """

    def __init__(self, message: str, tag: str, value: str, key: str = "",
                 kinds: Iterable[str] = ()):
        super().__init__(message, tag, value, key)
        self.kinds = tuple(kinds)


class AliasTargetNotFoundError(ConfigurationError):
    """
    Raised when an alias points to a key that is not registered yet.

    Aliases do not support forward references. Register the target first::

        builder.set_factory("smtp_mailer", make_smtp_mailer)
        builder.set_alias("mailer", "smtp_mailer")
    """

    pass


class AliasCollisionError(ConfigurationError):
    """
    Raised when an alias would replace a real definition.

    Real definitions may replace aliases, never the other way round.
    """

    pass


class ContainerSealedError(TagInjectionError):
    """
    Raised when the builder is modified after it has been sealed.

    The first call to ``ContainerBuilder.get_container()`` runs the providers
    and resolvers and seals the builder. Any later ``set_*``, ``add_provider``
    or ``add_resolver`` call is a programming error.

    Solution:
        Register everything up front, or from a provider/resolver::

            builder.add_provider(lambda b: b.set_value("port", 8080))
            container = builder.get_container()
    """

    pass


class DefinitionNotFoundError(TagInjectionError, LookupError):
    """
    Raised when a requested key is not registered.

    Common causes:
        - Forgetting to register the service
        - Typo in the key
        - Requesting the raw key with tags instead of the bare key

    Note:
        The error message includes a list of registered public keys
        to help identify available services.
    """

    pass


class VisibilityError(TagInjectionError):
    """
    Raised when a private service is requested from the public container.

    Private definitions can only be obtained from inside another
    definition's factory.

    Example::

        builder.set_factory("dsn #private", lambda c: "sqlite://")
        builder.set_factory("db", lambda c: connect(c.get("dsn")))

        container = builder.get_container()
        container.get("db")   # OK
        container.get("dsn")  # VisibilityError!

    Attributes:
        key: The requested key
    """

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key


class CircularDependencyError(TagInjectionError):
    """
    Raised when circular dependency is detected during resolution.

    This error occurs when service A depends on service B, and service B
    (directly or indirectly) depends on service A.

    Example of circular dependency::

        builder.set_factory("a", lambda c: c.get("b"))
        builder.set_factory("b", lambda c: c.get("a"))  # Circular!

    Attributes:
        origin: The first key of the construction chain
        key: The key being constructed when re-entry was detected
    """

    def __init__(self, message: str, origin: str = "", key: Optional[str] = None):
        super().__init__(message)
        self.origin = origin
        self.key = key


CycleError = CircularDependencyError
