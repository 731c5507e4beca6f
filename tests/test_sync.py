"""Tests for synchronizing accepted and trial spaces."""

import numpy as np
import pytest

from mccore.catalog import AtomCatalog, AtomType
from mccore.errors import InvariantViolation
from mccore.system import Change, Cuboid, Space, particles_from_atoms


@pytest.fixture
def atoms():
    return AtomCatalog([AtomType("A", sigma=1.0), AtomType("B", sigma=1.0)])


@pytest.fixture
def spaces(atoms):
    """Accepted space with two groups and an independent trial copy."""
    space = Space(Cuboid.cubic(30.0))
    a, b = atoms
    rng = np.random.default_rng(11)
    space.append(0, particles_from_atoms([a] * 4, space.geometry.random_position(rng, 4)))
    space.append(1, particles_from_atoms([b] * 3, space.geometry.random_position(rng, 3)))
    return space, space.copy()


def assert_same(first, second):
    assert len(first.particles) == len(second.particles)
    assert np.allclose(first.p["pos"], second.p["pos"])
    assert np.array_equal(first.p["active"], second.p["active"])
    assert np.array_equal(first.p["id"], second.p["id"])
    assert [(g.begin, g.end, g.id) for g in first.groups] == [
        (g.begin, g.end, g.id) for g in second.groups
    ]


class TestDifferentialSync:
    """Test copying only what a change lists."""

    def test_atom_offsets(self, spaces):
        space, trial = spaces
        trial.groups[1].slots["pos"][2] = [1.0, 2.0, 3.0]
        change = Change()
        change.add(1, atoms=[2])
        space.sync(trial, change)
        assert np.allclose(space.groups[1].slots["pos"][2], [1.0, 2.0, 3.0])
        assert_same(space, trial)

    def test_only_listed_slots_are_copied(self, spaces):
        space, trial = spaces
        trial.groups[0].slots["pos"][0] = [5.0, 5.0, 5.0]
        trial.groups[0].slots["pos"][1] = [6.0, 6.0, 6.0]
        change = Change()
        change.add(0, atoms=[0])
        space.sync(trial, change)
        assert np.allclose(space.groups[0].slots["pos"][0], 5.0)
        assert not np.allclose(space.groups[0].slots["pos"][1], 6.0)

    def test_whole_group(self, spaces):
        space, trial = spaces
        trial.groups[0].slots["pos"] += 1.0
        change = Change()
        change.add(0, all=True)
        space.sync(trial, change)
        assert_same(space, trial)

    def test_deactivate_then_reset(self, spaces):
        space, trial = spaces
        trial.groups[0].slots["active"][1:3] = False
        change = Change()
        change.add(0, deactivated=[(1, 3)])

        # accept
        space.sync(trial, change)
        assert space.groups[0].size == 2
        assert_same(space, trial)

        # and the reverse direction restores the flags
        fresh = space.copy()
        fresh.groups[0].slots["active"][1:3] = True
        fresh.sync(space, change)
        assert fresh.groups[0].size == 2

    def test_activate_copies_records(self, spaces):
        space, trial = spaces
        space.groups[1].slots["active"][0] = False
        trial.groups[1].slots["active"][0] = True
        trial.groups[1].slots["pos"][0] = [-3.0, -3.0, -3.0]
        change = Change()
        change.add(1, activated=[(0, 1)])
        space.sync(trial, change)
        assert space.groups[1].slots["active"][0]
        assert np.allclose(space.groups[1].slots["pos"][0], -3.0)

    def test_volume_change_copies_geometry(self, spaces):
        space, trial = spaces
        trial.geometry = trial.geometry.scaled(2 * trial.geometry.volume)
        change = Change(dV=space.geometry.volume)
        space.sync(trial, change)
        assert space.geometry is trial.geometry

    def test_mismatched_ranges(self, atoms):
        a = atoms[0]
        first = Space(Cuboid.cubic(10.0))
        first.append(0, particles_from_atoms([a] * 2))
        first.append(0, particles_from_atoms([a] * 2))
        second = Space(Cuboid.cubic(10.0))
        second.append(0, particles_from_atoms([a] * 1))
        second.append(0, particles_from_atoms([a] * 3))
        change = Change()
        change.add(0, all=True)
        with pytest.raises(InvariantViolation):
            first.sync(second, change)

    def test_offsets_outside_group(self, spaces):
        space, trial = spaces
        change = Change()
        change.add(1, atoms=[3])
        with pytest.raises(InvariantViolation):
            space.sync(trial, change)


class TestStructuralSync:
    """Test deep copies on particle or group count mismatch."""

    def test_grown_group(self, spaces, atoms):
        space, trial = spaces
        extra = particles_from_atoms([atoms[0]] * 2, [[1, 1, 1], [2, 2, 2]])
        trial.insert_slots(0, extra)
        change = Change()
        change.add(0, activated=[(4, 6)])

        space.sync(trial, change)

        assert_same(space, trial)
        assert not np.may_share_memory(space.particles.buffer, trial.particles.buffer)
        for group in space.groups:
            assert group.buffer is space.particles.buffer

    def test_new_group(self, spaces, atoms):
        space, trial = spaces
        trial.append(1, particles_from_atoms([atoms[1]]))
        space.sync(trial, Change())
        assert len(space.groups) == 3
        assert_same(space, trial)


class TestAliasing:
    """Test that aliased storage is rejected."""

    def test_shared_storage(self, spaces):
        space, _ = spaces
        alias = Space(space.geometry)
        alias.particles = space.particles
        alias.groups = [g.copy_to(space.particles.buffer) for g in space.groups]
        change = Change()
        change.add(0, all=True)
        with pytest.raises(InvariantViolation):
            alias.sync(space, change)
