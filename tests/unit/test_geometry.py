"""
Unit tests for the geometry forge.
"""

import numpy as np
import pytest

from dicecast.geometry import (
    DieType,
    UnsupportedDieType,
    build,
    descriptor_table,
    get_descriptor,
    missing_corner_value,
)
from dicecast.geometry import quaternion as quat
from dicecast.geometry.chamfer import chamfer
from dicecast.geometry.solids import BASE_SOLIDS


def opposite_face(descriptor, index):
    normals = np.array(descriptor.normals)
    return int(np.argmin(normals @ normals[index]))


class TestDieType:
    """Test die type lookup."""

    def test_from_name(self):
        """Test looking up die types by name."""
        assert DieType.from_name('d20') is DieType.D20
        assert DieType.from_name(' D6 ') is DieType.D6
        assert DieType.from_name(DieType.D100) is DieType.D100

    def test_unknown_name_raises(self):
        """Test that unknown die types raise UnsupportedDieType."""
        with pytest.raises(UnsupportedDieType):
            DieType.from_name('d7')

        # Still a ValueError for callers that catch broadly
        with pytest.raises(ValueError):
            DieType.from_name('coin')

    def test_for_sides(self):
        """Test plain die lookup by side count."""
        assert DieType.for_sides(6) is DieType.D6
        assert DieType.for_sides(10) is DieType.D10

        with pytest.raises(UnsupportedDieType):
            DieType.for_sides(3)

    def test_for_sides_rejects_tens_dice(self):
        """Test that tens dice are only available through compound rolls."""
        for sides in (60, 80, 100):
            with pytest.raises(UnsupportedDieType):
                DieType.for_sides(sides)

    def test_tens_bases(self):
        """Test which solid each tens die is built on."""
        assert DieType.D100.base == 'd10'
        assert DieType.D60.base == 'd6'
        assert DieType.D80.base == 'd8'
        assert DieType.D20.base == 'd20'
        assert DieType.D100.is_tens
        assert not DieType.D10.is_tens


class TestDescriptors:
    """Test built descriptors."""

    @pytest.mark.parametrize('die_type,faces', [
        ('d4', 4), ('d6', 6), ('d8', 8), ('d10', 10), ('d12', 12), ('d20', 20),
        ('d60', 6), ('d80', 8), ('d100', 10),
    ])
    def test_value_face_count(self, die_type, faces):
        """Test that every die has one label per value face."""
        descriptor = get_descriptor(die_type)
        assert descriptor.value_face_count == faces
        assert len(descriptor.normals) == faces
        assert len(descriptor.collision_hull.faces) == faces

    @pytest.mark.parametrize('die_type,values', [
        ('d4', range(1, 5)),
        ('d6', range(1, 7)),
        ('d8', range(1, 9)),
        ('d10', range(0, 10)),
        ('d12', range(1, 13)),
        ('d20', range(1, 21)),
        ('d60', range(10, 70, 10)),
        ('d80', range(10, 90, 10)),
        ('d100', range(0, 100, 10)),
    ])
    def test_labels_cover_values_once(self, die_type, values):
        """Test that value faces carry every number exactly once."""
        descriptor = get_descriptor(die_type)
        if descriptor.reads_from_top_vertex:
            return
        printed = sorted(label.value for label in descriptor.labels.labels)
        assert printed == list(values)

    def test_d4_corner_labels(self):
        """Test that each d4 corner number appears on the three faces meeting there."""
        descriptor = get_descriptor('d4')
        assert descriptor.reads_from_top_vertex

        for label in descriptor.labels.labels:
            assert len(label.values) == 3
            assert len(set(label.values)) == 3

        counts = {}
        for label in descriptor.labels.labels:
            for value in label.values:
                counts[value] = counts.get(value, 0) + 1
        assert counts == {1: 3, 2: 3, 3: 3, 4: 3}

        # Reading the face on the table gives each value exactly once
        missing = sorted(missing_corner_value(label) for label in descriptor.labels.labels)
        assert missing == [1, 2, 3, 4]

    @pytest.mark.parametrize('die_type,total', [
        ('d6', 7), ('d8', 9), ('d10', 9), ('d12', 13), ('d20', 21),
    ])
    def test_opposite_faces_sum(self, die_type, total):
        """Test that opposite faces add up the way real dice are numbered."""
        descriptor = get_descriptor(die_type)
        labels = descriptor.labels
        for index in range(descriptor.value_face_count):
            other = opposite_face(descriptor, index)
            assert np.dot(descriptor.normals[index], descriptor.normals[other]) < -0.99
            assert labels[index].value + labels[other].value == total

    def test_percentile_tens_text(self):
        """Test that the percentile tens die prints 00 rather than 0."""
        descriptor = get_descriptor('d100')
        texts = {label.text for label in descriptor.labels.labels}
        assert '00' in texts
        assert '0' not in texts
        assert '90' in texts

    @pytest.mark.parametrize('die_type', [t.value for t in DieType])
    def test_normals_are_unit_and_outward(self, die_type):
        """Test face normals."""
        descriptor = get_descriptor(die_type)
        hull = descriptor.collision_hull
        for face, normal in zip(hull.faces, descriptor.normals):
            assert np.linalg.norm(normal) == pytest.approx(1.0)
            center = np.mean([hull.vertices[i] for i in face], axis=0)
            assert np.dot(center, normal) > 0

    @pytest.mark.parametrize('die_type', ['d4', 'd6', 'd8', 'd10', 'd12', 'd20'])
    def test_hull_scaled_by_radius(self, die_type):
        """Test that hull vertices sit on the die's radius."""
        descriptor = get_descriptor(die_type)
        for vertex in descriptor.collision_hull.vertices:
            assert np.linalg.norm(vertex) == pytest.approx(descriptor.radius)

    def test_value_face_lookup(self):
        """Test up/down face lookup from a local direction."""
        descriptor = get_descriptor('d6')
        for index, normal in enumerate(descriptor.normals):
            assert descriptor.value_face_up(normal) == index
            assert descriptor.value_face_down(quat.normalize(np.negative(normal))) == index

    def test_descriptor_table_is_built_once(self):
        """Test that descriptors are cached and cover every die type."""
        table = descriptor_table()
        assert set(table) == set(DieType)
        assert get_descriptor('d20') is get_descriptor(DieType.D20)
        assert descriptor_table() is table

    def test_build_is_deterministic(self):
        """Test that building twice gives equal geometry."""
        first = build('d12')
        second = build(DieType.D12)
        assert first.normals == second.normals
        assert first.render_mesh.triangles == second.render_mesh.triangles

    def test_build_unknown_type(self):
        """Test that building an unknown die raises."""
        with pytest.raises(UnsupportedDieType):
            build('d3')

    def test_to_dict(self):
        """Test serialization with and without meshes."""
        descriptor = get_descriptor('d8')
        summary = descriptor.to_dict(include_mesh=False)
        assert summary['type'] == 'd8'
        assert summary['value_faces'] == 8
        assert summary['values'] == list(range(1, 9))
        assert 'render_mesh' not in summary

        full = descriptor.to_dict()
        assert len(full['collision_hull']['faces']) == 8
        assert full['render_mesh']['material_labels'][0] == ''


class TestChamfer:
    """Test the chamfering stage."""

    @pytest.mark.parametrize('die_type,bevels', [
        ('d4', 10), ('d6', 20), ('d8', 18), ('d10', 32), ('d12', 50), ('d20', 42),
    ])
    def test_bevel_face_count(self, die_type, bevels):
        """Test one bevel per original edge plus one per original vertex."""
        assert get_descriptor(die_type).bevel_face_count == bevels

    def test_cube_chamfer(self):
        """Test chamfering the cube directly."""
        solid = BASE_SOLIDS['d6']
        vertices = np.array([quat.normalize(v) for v in solid.vertices])
        result = chamfer(vertices, solid.faces, 0.9)

        assert len(result.value_faces) == 6
        assert len(result.bevel_faces) == 12 + 8
        assert len(result.vertices) == 24

        edge_quads = result.bevel_faces[:12]
        corners = result.bevel_faces[12:]
        assert all(len(quad) == 4 for quad in edge_quads)
        assert all(len(corner) == 3 for corner in corners)

        # Every shrunk vertex belongs to exactly one corner polygon
        used = sorted(i for corner in corners for i in corner)
        assert used == list(range(24))

    def test_shrunk_faces_stay_inside(self):
        """Test that value faces shrink toward their centroids."""
        solid = BASE_SOLIDS['d20']
        vertices = np.array([quat.normalize(v) for v in solid.vertices])
        result = chamfer(vertices, solid.faces, 0.9)
        for vertex in result.vertices:
            assert np.linalg.norm(vertex) < 1.0


class TestRenderMesh:
    """Test the triangulated render mesh."""

    @pytest.mark.parametrize('die_type', ['d4', 'd6', 'd10', 'd20', 'd100'])
    def test_materials(self, die_type):
        """Test that every value face and the bevel get their own material."""
        descriptor = get_descriptor(die_type)
        mesh = descriptor.render_mesh
        assert set(mesh.materials) == set(range(descriptor.value_face_count + 1))
        assert len(mesh.materials) == len(mesh.triangles) == len(mesh.uvs)
        assert len(mesh.material_labels) == descriptor.value_face_count + 1

    def test_triangle_indices_in_range(self):
        """Test that triangles reference existing vertices."""
        mesh = get_descriptor('d12').render_mesh
        count = len(mesh.vertices)
        assert all(0 <= i < count for triangle in mesh.triangles for i in triangle)

    def test_value_face_uvs_in_unit_square(self):
        """Test label UVs."""
        mesh = get_descriptor('d20').render_mesh
        for material, uv in zip(mesh.materials, mesh.uvs):
            if material:
                for u, v in uv:
                    assert -0.5 <= u <= 1.5
                    assert -0.5 <= v <= 1.5
