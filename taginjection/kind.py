"""
DefinitionKind Enum

Defines how the factory of a definition was produced
"""

from enum import Enum


class DefinitionKind(Enum):
    """Kind of definition, selected by one of the exclusive kind tags"""
    FACTORY = "factory"
    VALUE = "value"
    ALIAS = "alias"
    INJECT = "inject"
