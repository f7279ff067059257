"""
Labeling stage of the geometry pipeline.

Builds the face -> label table for a die from its base solid and label slots.
Most dice print one number per face. The tetrahedral die prints a number in
each corner of every face instead: the number belonging to a vertex appears
on the three faces meeting there, and the die's value is read off the vertex
pointing up.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from .solids import BaseSolid


@dataclass(frozen=True)
class FaceLabel:
    """
    Numbers printed on one value face.

    Attributes:
        values: One value, or three corner values for the tetrahedral die
        texts: Printed text for each value ('00' on the percentile tens die)
    """
    values: Tuple[int, ...]
    texts: Tuple[str, ...]

    @property
    def value(self) -> int:
        """The face value of a single-label face."""
        if len(self.values) != 1:
            raise ValueError(f"Face carries {len(self.values)} labels, not one")
        return self.values[0]

    @property
    def text(self) -> str:
        return ' '.join(self.texts)


@dataclass(frozen=True)
class DieLabelTable:
    """
    Face index -> label for the value faces of one die.

    Bevel faces are not part of the table; they are blank and never read.
    """
    labels: Tuple[FaceLabel, ...]
    corner_labels: bool = False

    def __len__(self) -> int:
        return len(self.labels)

    def __getitem__(self, face_index: int) -> FaceLabel:
        return self.labels[face_index]

    def values(self) -> Tuple[int, ...]:
        """Every distinct value this die can show, ascending."""
        return tuple(sorted({v for label in self.labels for v in label.values}))


def single_labels(solid: BaseSolid, texts: Sequence[str],
                  values: Optional[Sequence[int]] = None) -> DieLabelTable:
    """
    One printed number per face.

    Args:
        solid: Base solid whose face slots index into texts
        texts: Printed text per slot
        values: Numeric value per slot (defaults to int(text))

    Returns:
        DieLabelTable
    """
    if values is None:
        values = [int(text) for text in texts]
    return DieLabelTable(tuple(
        FaceLabel(values=(values[slot],), texts=(texts[slot],))
        for slot in solid.slots
    ))


def corner_labels(solid: BaseSolid, texts: Sequence[str]) -> DieLabelTable:
    """
    Corner numbering for the tetrahedral die.

    Slot k's text belongs to the one vertex that face k does not touch; each
    face then lists the numbers of its own three vertices in winding order.
    """
    vertex_text: Dict[int, str] = {}
    all_vertices = set(range(len(solid.vertices)))
    for face, slot in zip(solid.faces, solid.slots):
        (missing,) = all_vertices - set(face)
        vertex_text[missing] = texts[slot]

    labels = []
    for face in solid.faces:
        face_texts = tuple(vertex_text[v] for v in face)
        labels.append(FaceLabel(values=tuple(int(t) for t in face_texts), texts=face_texts))
    return DieLabelTable(tuple(labels), corner_labels=True)


def tens_labels(solid: BaseSolid, texts: Sequence[str]) -> DieLabelTable:
    """
    Relabel a die by tens to serve as the tens die of a compound roll.

    '0' becomes '00' (value 0); every other digit d becomes d*10.
    """
    values = [int(text) * 10 for text in texts]
    tens_texts = ['00' if value == 0 else str(value) for value in values]
    return single_labels(solid, tens_texts, values)


def missing_corner_value(label: FaceLabel, sides: int = 4) -> int:
    """
    Value shown by a tetrahedral die resting on the face with this label.

    The face on the table touches three vertices; the fourth one points up and
    its number is the only value absent from the face's label set.
    """
    (value,) = set(range(1, sides + 1)) - set(label.values)
    return value
