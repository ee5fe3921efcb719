"""
Inject

This module turns plain classes into factories. Class attributes marked with
``Inject("key")`` name the services to inject, and ``injectable_factory()``
scans the class once, at registration time, to produce a regular
``factory(container)`` callable:

    class Counter:
        increment = Inject("counter.increment")

        def __init__(self):
            self.count = 0

    builder.set_injectable("counter", Counter)

The generated factory instantiates the class with no arguments and assigns
every marked attribute from the container before returning the instance.
"""

from typing import Any, Callable, Dict, Optional, Type, TYPE_CHECKING

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .container import Container


class Inject:
    """
    Marker descriptor naming the service injected into an attribute.

    On the class the marker returns itself, so the injection points stay
    discoverable. On an instance the injected value lives in the instance
    ``__dict__`` and shadows the marker; an instance built outside the
    container reads ``None``.

    Attributes:
        key: The service key to inject
        name: The attribute name, set when the owner class is created

    Example::

        class Service:
            repository = Inject("user.repository")

        Service.repository      # Inject('user.repository')
        Service().repository    # None, not built by a container
    """

    def __init__(self, key: str):
        key = key.strip() if isinstance(key, str) else key
        if not key or not isinstance(key, str):
            raise ConfigurationError(f"no injection key present: {key!r}")
        self.key = key
        self.name: Optional[str] = None

    def __set_name__(self, owner: Type, name: str) -> None:
        self.name = name

    def __get__(self, obj: Optional[object], objtype: Optional[Type] = None) -> Any:
        if obj is None:
            return self
        return None

    def __repr__(self) -> str:
        return f"Inject({self.key!r})"


def injection_points(cls: Type) -> Dict[str, str]:
    """Return ``{attribute: key}`` for every Inject marker on ``cls``.

    Base classes are scanned too; a subclass redefining an attribute wins.
    """
    points: Dict[str, str] = {}
    for klass in reversed(cls.__mro__):
        for name, attr in vars(klass).items():
            if isinstance(attr, Inject):
                points[name] = attr.key
            else:
                points.pop(name, None)
    return points


def injectable_factory(target: Any) -> Callable[['Container'], Any]:
    """Generate a factory for a class with Inject markers.

    Args:
        target: The class to build. An instance may be given instead, in
            which case its class is used and its state is ignored.

    Returns:
        A ``factory(container)`` callable for ``ContainerBuilder``

    Raises:
        ConfigurationError: When ``target`` cannot be instantiated without
            arguments (detected on first construction)
    """
    cls = target if isinstance(target, type) else type(target)
    points = injection_points(cls)

    def factory(container: 'Container') -> Any:
        try:
            instance = cls()
        except TypeError as e:
            raise ConfigurationError(
                f"{cls.__name__} cannot be injected: it must be "
                f"constructible without arguments ({e})"
            ) from e

        for name, key in points.items():
            setattr(instance, name, container.get(key))

        return instance

    factory.__qualname__ = f"injectable_factory({cls.__qualname__})"
    return factory
