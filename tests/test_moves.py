"""Tests for the Metropolis move protocol and displacement moves."""

import numpy as np
import pytest

from mccore.catalog import AtomCatalog, AtomType, MoleculeCatalog, MoleculeType
from mccore.energy import Hamiltonian, Nonbonded
from mccore.errors import ConfigurationError, InvariantViolation
from mccore.moves import AtomicTranslation, MoleculeTranslation, Move
from mccore.potentials import Dummy, LennardJones, SigmaEpsilonTable
from mccore.system import Cuboid, Space, particles_from_atoms


class NullMove(Move):
    """Move that proposes nothing; used to exercise the acceptance test."""

    name = "null"

    def propose(self):
        pass


@pytest.fixture
def atoms():
    return AtomCatalog([AtomType("LJ", sigma=3.0, eps=2.5)])


@pytest.fixture
def fluid(atoms):
    """Accepted and trial spaces with 27 atoms on a lattice in one group."""
    space = Space(Cuboid.cubic(18.0))
    grid = np.arange(3) * 6.0 - 6.0
    positions = np.array([[x, y, z] for x in grid for y in grid for z in grid])
    space.append(0, particles_from_atoms([atoms[0]] * 27, positions))
    return space, space.copy()


@pytest.fixture
def hamiltonian(atoms):
    return Hamiltonian([Nonbonded(LennardJones(SigmaEpsilonTable(atoms)))])


def assert_synced(space, trial):
    assert np.array_equal(space.p["pos"], trial.p["pos"])
    assert np.array_equal(space.p["active"], trial.p["active"])


class TestMetropolis:
    """Test the acceptance criterion."""

    def test_downhill_always_accepted(self, fluid, hamiltonian):
        move = NullMove(*fluid, hamiltonian, seed=1)
        assert all(move.decide(du) for du in (0.0, -0.1, -5.0, -np.inf))

    def test_infinite_energy_rejected(self, fluid, hamiltonian):
        move = NullMove(*fluid, hamiltonian, seed=1)
        assert not any(move.decide(np.inf) for _ in range(100))

    @pytest.mark.parametrize("du", [0.5, 1.0, 2.0])
    def test_acceptance_frequency(self, fluid, hamiltonian, du):
        move = NullMove(*fluid, hamiltonian, rng=np.random.default_rng(42))
        n = 20000
        accepted = sum(move.decide(du) for _ in range(n))
        assert accepted / n == pytest.approx(np.exp(-du), abs=0.015)

    def test_aliased_spaces(self, fluid, hamiltonian):
        space, _ = fluid
        with pytest.raises(InvariantViolation):
            NullMove(space, space, hamiltonian)

    def test_empty_proposal(self, fluid, hamiltonian):
        move = NullMove(*fluid, hamiltonian, seed=1)
        assert move.move() == 0.0
        assert move.cnt == 1
        assert move.naccept == 0

    def test_disabled(self, fluid, hamiltonian):
        move = NullMove(*fluid, hamiltonian, runfraction=0.0)
        assert not move.enabled
        assert move.move() == 0.0
        assert move.cnt == 0


class TestAtomicTranslation:
    """Test single atom displacements."""

    def test_spaces_stay_synced(self, fluid, hamiltonian):
        space, trial = fluid
        move = AtomicTranslation(space, trial, hamiltonian, molid=0, dp=6.0, seed=3)
        for _ in range(200):
            move.move()
            assert_synced(space, trial)
        assert 0 < move.naccept < move.cnt

    def test_energy_bookkeeping(self, fluid, hamiltonian):
        space, trial = fluid
        move = AtomicTranslation(space, trial, hamiltonian, molid=0, dp=3.0, seed=4)
        u0 = hamiltonian.system_energy(space)
        total = sum(move.move() for _ in range(300))
        assert total == pytest.approx(move.utot)
        assert u0 + total == pytest.approx(hamiltonian.system_energy(space), abs=1e-6)

    def test_only_one_atom_moves(self, fluid):
        space, trial = fluid
        before = space.p["pos"].copy()
        move = AtomicTranslation(
            space, trial, Hamiltonian([Nonbonded(Dummy())]), molid=0, dp=1.0, seed=5
        )
        move.move()
        moved = np.any(space.p["pos"] != before, axis=1)
        assert np.count_nonzero(moved) == 1
        assert move.acceptance == 1.0

    def test_direction(self, fluid):
        space, trial = fluid
        before = space.p["pos"].copy()
        move = AtomicTranslation(
            space, trial, Hamiltonian([Nonbonded(Dummy())]), molid=0, dp=1.0,
            direction=(0, 0, 1), seed=6,
        )
        for _ in range(20):
            move.move()
        assert np.allclose(space.p["pos"][:, :2], before[:, :2])
        assert move.mean_square_displacement > 0

    def test_no_matching_group(self, fluid, hamiltonian):
        move = AtomicTranslation(*fluid, hamiltonian, molid=7, dp=1.0, seed=1)
        assert move.move() == 0.0
        assert move.naccept == 0


class TestMoleculeTranslation:
    """Test rigid group displacements."""

    def test_whole_group_moves_together(self, atoms):
        space = Space(Cuboid.cubic(100.0))
        a = atoms[0]
        space.append(0, particles_from_atoms([a, a, a], [[0, 0, 0], [3, 0, 0], [0, 3, 0]]))
        space.append(0, particles_from_atoms([a], [[20, 20, 20]]))
        trial = space.copy()
        move = MoleculeTranslation(
            space, trial, Hamiltonian([Nonbonded(Dummy())]), molid=0, dp=2.0, seed=8
        )
        for _ in range(10):
            move.move()
        first = space.groups[0].positions
        assert np.allclose(first[1] - first[0], [3, 0, 0])
        assert np.allclose(first[2] - first[0], [0, 3, 0])
        assert_synced(space, trial)


class TestFromDict:
    """Test creating displacement moves from records."""

    def test_from_dict(self, atoms, fluid, hamiltonian):
        molecules = MoleculeCatalog([MoleculeType("fluid", (atoms[0],), atomic=True)])
        move = AtomicTranslation.from_dict(
            {"molecule": "fluid", "dp": 0.5, "runfraction": 0.5}, *fluid, hamiltonian, molecules
        )
        assert move.dp == 0.5
        assert move.runfraction == 0.5
        assert "atomtranslate" in move.info()
        assert move.to_dict()["name"] == "atomtranslate"

    def test_missing_molecule(self, atoms, fluid, hamiltonian):
        molecules = MoleculeCatalog([MoleculeType("fluid", (atoms[0],), atomic=True)])
        with pytest.raises(ConfigurationError) as err:
            MoleculeTranslation.from_dict({"dp": 1.0}, *fluid, hamiltonian, molecules)
        assert err.value.key == "moltranslate.molecule"
