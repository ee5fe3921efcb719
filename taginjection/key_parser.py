"""
Key Parser

Parses raw definition keys written in the tag mini-language::

    " mailer #shared #priority=2 "  ->  ("mailer", {"shared": "", "priority": "2"})

Everything before the first ``#`` is the bare key. Each ``#name`` or
``#name=value`` segment adds one tag. Names and values are trimmed, and a
tag without ``=`` gets an empty value.
"""

from typing import Dict, Tuple

TAG_PREFIX = "#"
VALUE_SEPARATOR = "="


def parse_key(raw: str) -> Tuple[str, Dict[str, str]]:
    """Split a raw key into its bare key and tag map.

    Args:
        raw: Raw key text, e.g. ``"mailer #shared #priority=2"``

    Returns:
        A ``(key, tags)`` tuple. ``tags`` is a new dict on every call.

    Example::

        parse_key("=tag1")            # ("=tag1", {})
        parse_key("#tag1")            # ("", {"tag1": ""})
        parse_key("k #a=1 #b = 2 3")  # ("k", {"a": "1", "b": "2 3"})
    """
    key, *segments = raw.split(TAG_PREFIX)
    tags: Dict[str, str] = {}

    for segment in segments:
        name, _, value = segment.partition(VALUE_SEPARATOR)
        name = name.strip()
        if not name:
            # a lone "#" or "#=value" names nothing
            continue
        tags[name] = value.strip()

    return key.strip(), tags
