"""
Dice notation parser.

Supports:
- 2d6, d20 (count defaults to 1)
- 2d20+3d6-4 (several groups and flat modifiers)
- -1d4 (subtract a sub-roll's total)
- d%, d100 (percentile), d66, d88 (tens + ones compound rolls)
- 4d6kh3, 2d20kl (keep highest / keep lowest, amount defaults to 1)

Parsing is lenient and never raises: a token that is neither a dice term nor
an integer is dropped and contributes nothing, and so is a term asking for
more than DiceParser.MAX_DICE dice.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class KeepMode(Enum):
    HIGHEST = 'highest'
    LOWEST = 'lowest'


@dataclass(frozen=True)
class KeepRule:
    """Sum only the best (or worst) `amount` results of a group."""
    mode: KeepMode
    amount: int = 1

    def __str__(self) -> str:
        suffix = 'kh' if self.mode is KeepMode.HIGHEST else 'kl'
        return f"{suffix}{self.amount}"


# Compound dice: notation type -> (tens die, ones die)
COMPOUND_DICE: Dict[str, Tuple[str, str]] = {
    'd%': ('d100', 'd10'),
    'd100': ('d100', 'd10'),
    'd66': ('d60', 'd6'),
    'd88': ('d80', 'd8'),
}

PERCENTILE_TYPES = ('d%', 'd100')


@dataclass(frozen=True)
class DieGroup:
    """
    One parsed dice term.

    Attributes:
        count: Number of dice (or dice pairs); negative means "subtract this
               group's total" - the same positive number of dice is rolled
        sides: Number of sides (100 for d%)
        type: 'dN', or one of the compound types 'd%', 'd100', 'd66', 'd88'
        keep: Optional keep-highest / keep-lowest rule
    """
    count: int
    sides: int
    type: str
    keep: Optional[KeepRule] = None

    @property
    def is_negative(self) -> bool:
        return self.count < 0

    @property
    def dice(self) -> int:
        """Number of units rolled (dice, or pairs for compound groups)."""
        return abs(self.count)

    @property
    def is_compound(self) -> bool:
        return self.type in COMPOUND_DICE

    @property
    def is_percentile(self) -> bool:
        return self.type in PERCENTILE_TYPES

    def die_types(self) -> Tuple[str, ...]:
        """Die types spawned per unit: (tens, ones) for compound groups."""
        if self.is_compound:
            return COMPOUND_DICE[self.type]
        return (self.type,)

    def __str__(self) -> str:
        sign = '-' if self.is_negative else ''
        keep = str(self.keep) if self.keep else ''
        return f"{sign}{self.dice}{self.type}{keep}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'count': self.count, 'sides': self.sides, 'type': self.type}
        if self.keep:
            data['keep'] = {'mode': self.keep.mode.value, 'amount': self.keep.amount}
        return data


@dataclass(frozen=True)
class RollSpec:
    """Complete parsed roll: dice groups in notation order plus a flat modifier."""
    groups: Tuple[DieGroup, ...]
    modifier: int
    notation: str

    @property
    def is_empty(self) -> bool:
        return not self.groups

    def dice_count(self) -> int:
        """Number of physical dice a roll of this spec spawns."""
        return sum(group.dice * len(group.die_types()) for group in self.groups)

    def to_notation(self) -> str:
        """Canonical notation, e.g. '2d20+3d6kh2-4'."""
        parts: List[str] = []
        for group in self.groups:
            text = str(group)
            parts.append(text if text.startswith('-') or not parts else f"+{text}")
        if self.modifier or not parts:
            parts.append(f"{self.modifier:+d}" if parts else str(self.modifier))
        return ''.join(parts)

    def __str__(self) -> str:
        return self.notation

    def to_dict(self) -> Dict[str, Any]:
        return {
            'notation': self.notation,
            'groups': [group.to_dict() for group in self.groups],
            'modifier': self.modifier,
        }


class DiceParser:
    """Parser for roll notation."""

    # Split before every sign so each token carries its own
    TOKEN_SPLIT = re.compile(r'(?=[+-])')
    DICE_TERM = re.compile(r'^(\d*)d(%|\d+)(?:(kh|kl)(\d*))?$')
    FLAT_TERM = re.compile(r'^\d+$')
    # Most dice one term may throw
    MAX_DICE = 100

    @classmethod
    def parse(cls, notation: str) -> RollSpec:
        """
        Parse roll notation into a RollSpec.

        Examples:
            "4d6"          -> groups=[4d6], modifier=0
            "2d20+3d6kh2-4" -> groups=[2d20, 3d6kh2], modifier=-4
            "1d%"          -> groups=[1d%]
            "+5"           -> groups=[], modifier=5

        Args:
            notation: Notation string; whitespace and case are ignored

        Returns:
            RollSpec (possibly with no groups)
        """
        original = notation if isinstance(notation, str) else ''

        # Normalize: remove whitespace, lowercase, explicit leading sign
        cleaned = re.sub(r'\s+', '', original).lower()
        if cleaned and cleaned[0] not in '+-':
            cleaned = '+' + cleaned

        groups: List[DieGroup] = []
        modifier = 0
        for token in cls.TOKEN_SPLIT.split(cleaned):
            if not token:
                continue
            sign = -1 if token[0] == '-' else 1
            body = token[1:]

            group = cls._parse_dice_term(body, sign)
            if group is not None:
                groups.append(group)
            elif cls.FLAT_TERM.match(body):
                modifier += sign * int(body)
            else:
                logger.debug(f"Dropping unparseable token '{token}' in notation '{original}'")

        return RollSpec(groups=tuple(groups), modifier=modifier, notation=original)

    @classmethod
    def _parse_dice_term(cls, body: str, sign: int) -> Optional[DieGroup]:
        match = cls.DICE_TERM.match(body)
        if not match:
            return None
        count_str, sides_str, keep_str, amount_str = match.groups()

        count = int(count_str) if count_str else 1
        if count == 0:
            logger.debug(f"Dropping zero-dice term '{body}'")
            return None
        if count > cls.MAX_DICE:
            logger.debug(f"Dropping term '{body}': more than {cls.MAX_DICE} dice")
            return None

        if sides_str == '%':
            sides, die_type = 100, 'd%'
        else:
            sides = int(sides_str)
            die_type = f"d{sides}"

        keep = None
        if keep_str:
            mode = KeepMode.HIGHEST if keep_str == 'kh' else KeepMode.LOWEST
            keep = KeepRule(mode=mode, amount=int(amount_str) if amount_str else 1)

        return DieGroup(count=count * sign, sides=sides, type=die_type, keep=keep)

    @classmethod
    def validate(cls, notation: str) -> bool:
        """
        Check whether notation rolls any dice at all.

        Args:
            notation: Notation string

        Returns:
            True if at least one dice group parses
        """
        return not cls.parse(notation).is_empty


def parse(notation: str) -> RollSpec:
    """Module-level shortcut for DiceParser.parse."""
    return DiceParser.parse(notation)
