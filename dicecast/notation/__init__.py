"""
Roll notation parsing.

Usage:
    from dicecast.notation import parse

    spec = parse("2d20+3d6kh2-4")
    spec.groups     # (2d20, 3d6kh2)
    spec.modifier   # -4
"""

from .parser import (
    COMPOUND_DICE,
    DiceParser,
    DieGroup,
    KeepMode,
    KeepRule,
    RollSpec,
    parse,
)

__all__ = ['COMPOUND_DICE', 'DiceParser', 'DieGroup', 'KeepMode', 'KeepRule', 'RollSpec', 'parse']
