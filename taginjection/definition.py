"""
Definition

Data class representing service definitions, plus the rules that turn a
tag map into a validated Definition
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, TYPE_CHECKING

from .exceptions import KindConflictError, TagValueError
from .kind import DefinitionKind

if TYPE_CHECKING:
    from .container import Container

# Reserved tag names
TAG_SHARED = "shared"
TAG_PRIVATE = "private"
TAG_PRIORITY = "priority"
TAG_FACTORY = DefinitionKind.FACTORY.value
TAG_VALUE = DefinitionKind.VALUE.value
TAG_ALIAS = DefinitionKind.ALIAS.value
TAG_INJECT = DefinitionKind.INJECT.value

# Scan order matters: the first kind tag found is reported on conflict
KIND_TAGS: Tuple[str, ...] = (TAG_FACTORY, TAG_VALUE, TAG_ALIAS, TAG_INJECT)

PRIORITY_DEFAULT = 0
PRIORITY_MIN = -(2 ** 15)
PRIORITY_MAX = 2 ** 15 - 1

_TRUE_VALUES = ("", "true", "1")
_FALSE_VALUES = ("false", "0")
_INTEGER = re.compile(r"[+-]?[0-9]+\Z")

Factory = Callable[['Container'], Any]


@dataclass(frozen=True, eq=False)
class Definition:
    """Service definition

    Compared and hashed by identity, the tags dict is not hashable.
    """
    key: str
    factory: Factory
    tags: Dict[str, str] = field(default_factory=dict)
    shared: bool = False
    private: bool = False
    priority: int = PRIORITY_DEFAULT
    kind: DefinitionKind = DefinitionKind.FACTORY
    alias_of: Optional['Definition'] = None  # Concrete target for aliases

    @property
    def is_alias(self) -> bool:
        return self.alias_of is not None

    def has_tag(self, name: str) -> bool:
        return name in self.tags

    def get_tag(self, name: str, default: str = "") -> str:
        return self.tags.get(name, default)


def parse_bool_tag(tag: str, tags: Mapping[str, str], key: str = "") -> bool:
    """Interpret a boolean tag.

    A tag present with an empty value counts as ``True``, so ``#shared`` and
    ``#shared=true`` are equivalent.

    Raises:
        TagValueError: When the value is not one of ``""``, ``true``, ``1``,
            ``false`` or ``0``
    """
    if tag not in tags:
        return False

    value = tags[tag]
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False

    raise TagValueError(
        f"{tag} tag value '{value}' is not a valid boolean",
        tag=tag, value=value, key=key,
    )


def parse_integer_tag(tag: str, tags: Mapping[str, str], key: str = "") -> int:
    """Interpret a signed 16-bit integer tag, 0 when absent or empty.

    Raises:
        TagValueError: When the value is not a number or is out of range
    """
    value = tags.get(tag, "")
    if value == "":
        return PRIORITY_DEFAULT

    number = int(value) if _INTEGER.match(value) else None
    if number is None or not PRIORITY_MIN <= number <= PRIORITY_MAX:
        raise TagValueError(
            f"{tag} tag value '{value}' is not a valid number",
            tag=tag, value=value, key=key,
        )

    return number


def select_kind_tag(tags: Mapping[str, str], key: str = "") -> DefinitionKind:
    """Return the kind selected by the exclusive kind tags.

    Defaults to ``DefinitionKind.FACTORY`` when no kind tag is present.

    Raises:
        KindConflictError: When more than one kind tag is present
    """
    selected: Optional[str] = None
    for tag in KIND_TAGS:
        if tag not in tags:
            continue
        if selected is not None:
            raise KindConflictError(
                f"tag '{tag}' can't be used simultaneously with "
                f"[{' '.join(KIND_TAGS)}]",
                tag=tag, value=tags[tag], key=key, kinds=KIND_TAGS,
            )
        selected = tag

    if selected is None:
        return DefinitionKind.FACTORY

    return DefinitionKind(selected)


def merge_tags(*sources: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Merge tag maps into a new dict. Earlier sources win on conflict."""
    merged: Dict[str, str] = {}
    for source in sources:
        if not source:
            continue
        for name, value in source.items():
            merged.setdefault(name, value)
    return merged


def new_definition(
    key: str,
    factory: Factory,
    tags: Optional[Mapping[str, str]] = None,
    alias_of: Optional[Definition] = None,
) -> Definition:
    """Validate the reserved tags and build a Definition.

    Args:
        key: The bare key
        factory: Canonical ``factory(container)`` callable
        tags: Merged tags of the definition
        alias_of: Concrete definition mirrored by an alias

    Returns:
        A new, immutable Definition

    Raises:
        TagValueError: When ``shared``, ``private`` or ``priority`` is invalid
        KindConflictError: When more than one kind tag is present
    """
    tags = dict(tags or {})

    return Definition(
        key=key,
        factory=factory,
        tags=tags,
        shared=parse_bool_tag(TAG_SHARED, tags, key),
        private=parse_bool_tag(TAG_PRIVATE, tags, key),
        priority=parse_integer_tag(TAG_PRIORITY, tags, key),
        kind=select_kind_tag(tags, key),
        alias_of=alias_of,
    )
