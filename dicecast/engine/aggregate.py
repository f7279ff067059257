"""
Turning resolved die faces into a roll result.

Per group, in notation order:
- compound groups pair their dice (tens, ones) in spawn order and add them;
  a percentile pair showing 00 and 0 is 100
- a plain d10 showing 0 counts as 10
- keep rules rank the group's results and sum only the kept ones; the rest
  stay in the breakdown marked as dropped
- negative groups subtract their sum
Finally the flat modifier is added.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from ..notation import DieGroup, KeepMode


@dataclass(frozen=True)
class BreakdownEntry:
    """One die (or one compound pair) in a roll result."""
    type: str
    value: int
    dropped: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'type': self.type, 'value': self.value}
        if self.dropped:
            data['dropped'] = True
        return data

    def __str__(self) -> str:
        return f"~{self.value}~" if self.dropped else str(self.value)


@dataclass(frozen=True)
class RollResult:
    """
    Complete result of a settled roll.

    Attributes:
        total: Kept dice (negative groups subtracted) plus modifier
        notation: Notation as the caller wrote it
        breakdown: Every die or pair, including dropped ones
        modifier: Flat modifier that was applied
        cancelled: True for the empty result sent when a roll is cancelled or cleared
    """
    total: int
    notation: str
    breakdown: Tuple[BreakdownEntry, ...]
    modifier: int
    cancelled: bool = False

    @classmethod
    def empty(cls, notation: str = '', cancelled: bool = True) -> 'RollResult':
        """Zeroed result for a roll that never completed."""
        return cls(total=0, notation=notation, breakdown=(), modifier=0, cancelled=cancelled)

    def kept(self) -> Tuple[BreakdownEntry, ...]:
        return tuple(entry for entry in self.breakdown if not entry.dropped)

    def dropped(self) -> Tuple[BreakdownEntry, ...]:
        return tuple(entry for entry in self.breakdown if entry.dropped)

    def describe(self) -> str:
        """Human-readable breakdown, e.g. 'd20: 14, 3 | d6: 5, 4, ~1~ | modifier: -4 | Total: 21'."""
        if self.cancelled:
            return "Cancelled"

        parts = []
        by_type: Dict[str, List[str]] = {}
        for entry in self.breakdown:
            by_type.setdefault(entry.type, []).append(str(entry))
        for die_type, values in by_type.items():
            parts.append(f"{die_type}: {', '.join(values)}")

        if self.modifier != 0:
            parts.append(f"modifier: {self.modifier:+d}")

        parts.append(f"Total: {self.total}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'notation': self.notation,
            'breakdown': [entry.to_dict() for entry in self.breakdown],
            'modifier': self.modifier,
            'cancelled': self.cancelled,
        }


def pair_value(group: DieGroup, tens: int, ones: int) -> int:
    """Combine a tens die and a ones die of a compound group."""
    value = tens + ones
    if group.is_percentile and value == 0:
        return 100
    return value


def plain_value(group: DieGroup, value: int) -> int:
    if group.sides == 10 and value == 0:
        return 10
    return value


def group_units(group: DieGroup, values: Sequence[int]) -> List[int]:
    """
    Results of a group before any keep rule, in spawn order.

    Args:
        group: Parsed group
        values: Raw face values in spawn order (tens, ones, tens, ones... for compound groups)
    """
    if group.is_compound:
        return [pair_value(group, values[i], values[i + 1]) for i in range(0, len(values) - 1, 2)]
    return [plain_value(group, value) for value in values]


def resolve_group(group: DieGroup, values: Sequence[int]) -> Tuple[int, List[BreakdownEntry]]:
    """
    Sum one group and build its breakdown entries.

    Returns:
        (signed contribution to the total, breakdown entries)
    """
    units = group_units(group, values)

    if group.keep is None:
        entries = [BreakdownEntry(type=group.type, value=unit) for unit in units]
        subtotal = sum(units)
    else:
        ranked = sorted(units, reverse=(group.keep.mode is KeepMode.HIGHEST))
        amount = max(0, group.keep.amount)
        entries = [
            BreakdownEntry(type=group.type, value=unit, dropped=(rank >= amount))
            for rank, unit in enumerate(ranked)
        ]
        subtotal = sum(ranked[:amount])

    return (-subtotal if group.is_negative else subtotal), entries


def aggregate(notation: str, groups: Sequence[DieGroup],
              group_values: Sequence[Sequence[int]], modifier: int) -> RollResult:
    """
    Build the final result of a roll.

    Args:
        notation: Notation as the caller wrote it
        groups: Groups that were rolled, in notation order
        group_values: Raw face values per group, in spawn order
        modifier: Flat modifier

    Returns:
        RollResult
    """
    total = 0
    breakdown: List[BreakdownEntry] = []
    for group, values in zip(groups, group_values):
        contribution, entries = resolve_group(group, values)
        total += contribution
        breakdown.extend(entries)

    return RollResult(
        total=total + modifier,
        notation=notation,
        breakdown=tuple(breakdown),
        modifier=modifier,
    )
