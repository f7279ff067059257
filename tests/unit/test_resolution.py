"""
Unit tests for reading resting dice and aggregating results.
"""

import pytest

from dicecast.engine.aggregate import (
    BreakdownEntry,
    RollResult,
    aggregate,
    group_units,
    resolve_group,
)
from dicecast.engine.resting import resting_face, resting_value
from dicecast.geometry import FaceLabel, get_descriptor, missing_corner_value
from dicecast.geometry import quaternion as quat
from dicecast.notation import DiceParser


def group(notation):
    return DiceParser.parse(notation).groups[0]


class TestRestingValue:
    """Test reading the value of a die at rest."""

    def test_d4_missing_corner(self):
        """Test that a d4 resting on the face labeled {2,3,4} shows 1."""
        label = FaceLabel(values=(2, 3, 4), texts=('2', '3', '4'))
        assert missing_corner_value(label) == 1

        label = FaceLabel(values=(4, 1, 3), texts=('4', '1', '3'))
        assert missing_corner_value(label) == 2

    def test_d4_reads_face_on_table(self):
        """Test that the d4 is read from the face pointing down."""
        descriptor = get_descriptor('d4')
        for index, label in enumerate(descriptor.labels.labels):
            orientation = quat.from_unit_vectors(descriptor.normals[index], quat.DOWN)
            assert resting_face(descriptor, orientation) == index
            assert resting_value(descriptor, orientation) == missing_corner_value(label)

    @pytest.mark.parametrize('die_type', ['d6', 'd8', 'd10', 'd12', 'd20', 'd100'])
    def test_reads_face_on_top(self, die_type):
        """Test that other dice are read from the face pointing up."""
        descriptor = get_descriptor(die_type)
        for index, label in enumerate(descriptor.labels.labels):
            orientation = quat.from_unit_vectors(descriptor.normals[index], quat.UP)
            assert resting_face(descriptor, orientation) == index
            assert resting_value(descriptor, orientation) == label.value

    def test_every_d20_value(self, showing):
        """Test that each d20 value can be brought to the top and read back."""
        for value in range(1, 21):
            orientation = showing('d20', value)
            assert resting_value(get_descriptor('d20'), orientation) == value

    def test_slightly_tilted_die(self):
        """Test that a die a few degrees off flat still reads its top face."""
        descriptor = get_descriptor('d6')
        flat = quat.from_unit_vectors(descriptor.normals[2], quat.UP)
        tilt = quat.from_axis_angle((1.0, 0.0, 0.0), 0.2)
        orientation = quat.multiply(tilt, flat)
        assert resting_value(descriptor, orientation) == descriptor.labels[2].value


class TestGroupResolution:
    """Test per-group aggregation rules."""

    def test_plain_sum(self):
        """Test summing a plain group."""
        subtotal, entries = resolve_group(group("3d6"), [4, 2, 6])
        assert subtotal == 12
        assert [entry.value for entry in entries] == [4, 2, 6]
        assert not any(entry.dropped for entry in entries)

    def test_keep_lowest(self):
        """Test that kl1 over [5, 2] keeps 2 and drops 5."""
        subtotal, entries = resolve_group(group("2d20kl1"), [5, 2])
        assert subtotal == 2
        dropped = [entry for entry in entries if entry.dropped]
        assert len(dropped) == 1
        assert dropped[0].value == 5

    def test_keep_highest(self):
        """Test keeping the two highest of three."""
        subtotal, entries = resolve_group(group("3d6kh2"), [3, 6, 1])
        assert subtotal == 9
        assert [(entry.value, entry.dropped) for entry in entries] == [
            (6, False), (3, False), (1, True)
        ]

    def test_keep_ties(self):
        """Test that tied values drop exactly the requested number."""
        subtotal, entries = resolve_group(group("3d6kh1"), [4, 4, 4])
        assert subtotal == 4
        assert sum(1 for entry in entries if entry.dropped) == 2

    def test_keep_more_than_rolled(self):
        """Test keeping more dice than were rolled."""
        subtotal, entries = resolve_group(group("2d8kh5"), [3, 7])
        assert subtotal == 10
        assert not any(entry.dropped for entry in entries)

    def test_keep_zero(self):
        """Test that kh0 keeps nothing."""
        subtotal, entries = resolve_group(group("2d8kh0"), [3, 7])
        assert subtotal == 0
        assert all(entry.dropped for entry in entries)

    def test_negative_group(self):
        """Test that a negative group subtracts."""
        subtotal, entries = resolve_group(DiceParser.parse("-2d4").groups[0], [3, 1])
        assert subtotal == -4
        assert [entry.value for entry in entries] == [3, 1]

    def test_plain_d10_zero_is_ten(self):
        """Test that a plain d10 showing 0 counts as 10."""
        assert group_units(group("2d10"), [0, 7]) == [10, 7]

    def test_percentile_pairs(self):
        """Test percentile tens + ones."""
        assert group_units(group("d%"), [40, 7]) == [47]
        assert group_units(group("d%"), [0, 3]) == [3]
        assert group_units(group("d%"), [90, 0]) == [90]

    def test_percentile_double_zero_is_hundred(self):
        """Test that 00 and 0 read as 100."""
        assert group_units(group("d100"), [0, 0]) == [100]

    def test_d66_pairs(self):
        """Test d66 tens + ones, with no special zero case."""
        assert group_units(group("2d66"), [30, 5, 60, 6]) == [35, 66]

    def test_keep_over_compound_pairs(self):
        """Test that keep rules rank whole pairs."""
        subtotal, entries = resolve_group(group("2d%kh1"), [10, 5, 80, 2])
        assert subtotal == 82
        assert [(entry.value, entry.dropped) for entry in entries] == [(82, False), (15, True)]


class TestAggregate:
    """Test full roll aggregation."""

    def test_total_with_modifier(self):
        """Test the end-to-end sum of groups and modifier."""
        spec = DiceParser.parse("2d20+3d6kh2-4")
        result = aggregate(spec.notation, spec.groups, [[14, 3], [5, 1, 4]], spec.modifier)

        assert result.total == 14 + 3 + 5 + 4 - 4
        assert result.modifier == -4
        assert result.notation == "2d20+3d6kh2-4"
        assert [entry.type for entry in result.breakdown] == ['d20', 'd20', 'd6', 'd6', 'd6']
        assert [entry.value for entry in result.dropped()] == [1]
        assert len(result.kept()) == 4
        assert not result.cancelled

    def test_modifier_only(self):
        """Test aggregating a roll without dice."""
        result = aggregate("+5", [], [], 5)
        assert result.total == 5
        assert result.breakdown == ()

    def test_result_is_immutable(self):
        """Test that results cannot be modified."""
        result = aggregate("1d6", DiceParser.parse("1d6").groups, [[3]], 0)
        with pytest.raises(AttributeError):
            result.total = 99


class TestRollResult:
    """Test RollResult helpers."""

    def test_empty(self):
        """Test the cancelled placeholder result."""
        result = RollResult.empty("2d6")
        assert result.total == 0
        assert result.breakdown == ()
        assert result.modifier == 0
        assert result.cancelled
        assert result.describe() == "Cancelled"

    def test_describe(self):
        """Test the human-readable breakdown."""
        result = RollResult(
            total=21,
            notation="2d20+3d6kh2-4",
            breakdown=(
                BreakdownEntry('d20', 14), BreakdownEntry('d20', 3),
                BreakdownEntry('d6', 5), BreakdownEntry('d6', 4), BreakdownEntry('d6', 1, dropped=True),
            ),
            modifier=-4,
        )
        assert result.describe() == "d20: 14, 3 | d6: 5, 4, ~1~ | modifier: -4 | Total: 21"

    def test_to_dict(self):
        """Test serialization."""
        result = RollResult(
            total=3, notation="2d6kl1", modifier=0,
            breakdown=(BreakdownEntry('d6', 3), BreakdownEntry('d6', 6, dropped=True)),
        )
        assert result.to_dict() == {
            'total': 3,
            'notation': '2d6kl1',
            'breakdown': [{'type': 'd6', 'value': 3}, {'type': 'd6', 'value': 6, 'dropped': True}],
            'modifier': 0,
            'cancelled': False,
        }
