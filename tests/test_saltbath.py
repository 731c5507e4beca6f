"""Tests for the grand-canonical salt bath move."""

import logging

import numpy as np
import pytest
from scipy.special import gammaln

from mccore.catalog import AtomCatalog, AtomType
from mccore.energy import Hamiltonian, Nonbonded
from mccore.engines import MonteCarloEngine
from mccore.errors import ConfigurationError
from mccore.moves import AtomicTranslation, SaltBath, SaltBathState
from mccore.potentials import Coulomb, Dummy, HardSphere
from mccore.system import Cuboid, Space, particles_from_atoms


@pytest.fixture
def atoms():
    return AtomCatalog(
        [
            AtomType("NA", charge=1.0, sigma=4.0),
            AtomType("CL", charge=-1.0, sigma=4.0),
        ]
    )


@pytest.fixture
def salt(atoms):
    """Three ion pairs in a 50 A box, with an independent trial copy."""
    space = Space(Cuboid.cubic(50.0))
    na, cl = atoms
    xs = [-10.0, 0.0, 10.0]
    space.append(0, particles_from_atoms([na] * 3, [[x, 0.0, 0.0] for x in xs]))
    space.append(1, particles_from_atoms([cl] * 3, [[x, 10.0, 0.0] for x in xs]))
    return space, space.copy()


@pytest.fixture
def hamiltonian():
    return Hamiltonian([Nonbonded(HardSphere() + Coulomb(lB=7.0))])


def count(space, atomid):
    return len(space.find_particles_by_type(atomid))


class TestSetup:
    """Test construction and configuration errors."""

    def test_species_groups(self, atoms, salt, hamiltonian):
        move = SaltBath(*salt, hamiltonian, atoms, ["NA"], ["CL"], mu=-19.0, k=3)
        assert move.polymer.group_index == 0
        assert move.counter.group_index == 1
        assert move.polymer.valency == move.counter.valency == 1
        assert move.enabled

    def test_same_group(self, atoms, salt, hamiltonian):
        with pytest.raises(ConfigurationError):
            SaltBath(*salt, hamiltonian, atoms, ["NA"], ["NA"], mu=-19.0)

    def test_unknown_atom(self, atoms, salt, hamiltonian):
        with pytest.raises(ConfigurationError):
            SaltBath(*salt, hamiltonian, atoms, ["K"], ["CL"], mu=-19.0)

    def test_bad_trial_count(self, atoms, salt, hamiltonian):
        with pytest.raises(ConfigurationError) as err:
            SaltBath(*salt, hamiltonian, atoms, ["NA"], ["CL"], mu=-19.0, k=0)
        assert err.value.key == "ktrials"

    def test_unit_size_must_divide_group(self, atoms, salt, hamiltonian):
        with pytest.raises(ConfigurationError):
            SaltBath(*salt, hamiltonian, atoms, ["NA", "NA"], ["CL"], mu=-19.0)

    def test_bonded_insertion_not_implemented(self, atoms, salt, hamiltonian):
        move = SaltBath(
            *salt, hamiltonian, atoms, ["NA"], ["CL"], mu=-19.0, bondtype="harmonic"
        )
        with pytest.raises(NotImplementedError):
            move.insert()


class TestDisabled:
    """Test the move without a chemical potential."""

    def test_does_nothing(self, atoms, salt, hamiltonian):
        space, trial = salt
        before = space.p.copy()
        move = SaltBath(space, trial, hamiltonian, atoms, ["NA"], ["CL"], mu=None)
        assert not move.enabled
        assert move.runfraction == 0.0
        for _ in range(10):
            assert move.move() == 0.0
        assert move.cnt == 0
        assert np.array_equal(space.p["pos"], before["pos"])
        assert "disabled" in move.info()
        assert move.to_dict()["mu"] is None

    def test_warns(self, atoms, salt, hamiltonian, caplog):
        with caplog.at_level(logging.WARNING, logger="mccore.moves.saltbath"):
            SaltBath.from_dict({"ktrials": 5}, *salt, hamiltonian, atoms)
        assert "disabled" in caplog.text


class TestExchange:
    """Test insertion and removal."""

    def test_mass_balance(self, atoms, salt, hamiltonian):
        space, trial = salt
        move = SaltBath(
            space, trial, hamiltonian, atoms, ["NA"], ["CL"], mu=-19.0, k=4,
            rng=np.random.default_rng(7),
        )
        for _ in range(300):
            move.move()
            n_na, n_cl = count(space, 0), count(space, 1)
            assert n_na == n_cl
            assert n_na == 3 + move.n_inserted - move.n_removed
            assert count(trial, 0) == n_na
            assert move.state == SaltBathState.IDLE
        assert move.n_inserted > 0
        assert move.n_removed > 0

    def test_trial_matches_accepted(self, atoms, salt, hamiltonian):
        space, trial = salt
        move = SaltBath(
            space, trial, hamiltonian, atoms, ["NA"], ["CL"], mu=-19.0, k=2,
            rng=np.random.default_rng(8),
        )
        for _ in range(100):
            move.move()
            assert len(space.particles) == len(trial.particles)
            mask = space.p["active"]
            assert np.array_equal(mask, trial.p["active"])
            assert np.array_equal(space.p["pos"][mask], trial.p["pos"][mask])

    def test_groups_grow(self, atoms, salt, hamiltonian):
        space, trial = salt
        move = SaltBath(
            space, trial, hamiltonian, atoms, ["NA"], ["CL"], mu=-10.0, k=2,
            rng=np.random.default_rng(9),
        )
        for _ in range(40):
            move.move()
        first, second = space.groups
        assert first.capacity > 3
        assert first.end == second.begin
        assert first.buffer is space.particles.buffer
        assert second.buffer is space.particles.buffer
        assert count(space, 0) > 3
        # no active ion overlaps another
        positions = space.p["pos"][space.active_indices()]
        dr = space.geometry.distance(positions[:, None, :], positions[None, :, :])
        r = np.sqrt(np.sum(dr * dr, axis=-1)) + 100.0 * np.eye(len(positions))
        assert r.min() >= 4.0

    def test_energy_bookkeeping(self, atoms, salt, hamiltonian):
        space, trial = salt
        rng = np.random.default_rng(10)
        moves = [
            AtomicTranslation(space, trial, hamiltonian, molid=0, dp=5.0, rng=rng),
            AtomicTranslation(space, trial, hamiltonian, molid=1, dp=5.0, rng=rng),
            SaltBath(space, trial, hamiltonian, atoms, ["NA"], ["CL"], mu=-19.0, k=3, rng=rng),
        ]
        engine = MonteCarloEngine(space, hamiltonian, moves, trial=trial, rng=rng)
        engine.run(100)
        assert abs(engine.drift()) < 1e-6
        assert count(space, 0) == count(space, 1)

    def test_info(self, atoms, salt, hamiltonian):
        move = SaltBath(*salt, hamiltonian, atoms, ["NA"], ["CL"], mu=-19.0, k=3, index=2)
        text = move.info()
        assert "Chemical potential" in text
        assert "Rosenbluth trials         = 3" in text
        record = move.to_dict()
        assert record["polymer"] == ["NA"]
        assert record["counterions"] == ["CL"]
        assert record["index"] == 2


class TestMultiAtomUnits:
    """Test a polymer unit of two atoms with single-atom counter ions."""

    @pytest.fixture
    def dimers(self, atoms):
        """Two NA-NA polymer units and two counter ions in a 50 A box."""
        space = Space(Cuboid.cubic(50.0))
        na, cl = atoms
        space.append(
            0,
            particles_from_atoms(
                [na] * 4, [[-15, 0, 0], [-10, 0, 0], [10, 0, 0], [15, 0, 0]]
            ),
        )
        space.append(1, particles_from_atoms([cl] * 2, [[-10, 10, 0], [10, 10, 0]]))
        return space, space.copy()

    def test_valency(self, atoms, dimers, hamiltonian):
        move = SaltBath(*dimers, hamiltonian, atoms, ["NA", "NA"], ["CL"], mu=-33.6)
        assert move.polymer.valency == 2
        assert move.counter.valency == 1
        assert move.active_count(move.polymer) == 4
        assert move.active_count(move.counter) == 2

    def test_mass_balance(self, atoms, dimers, hamiltonian):
        space, trial = dimers
        # ln z = mu + 3 ln V is about ln 5
        move = SaltBath(
            space, trial, hamiltonian, atoms, ["NA", "NA"], ["CL"], mu=-33.6, k=3,
            rng=np.random.default_rng(11),
        )
        for _ in range(300):
            move.move()
            units = 2 + move.n_inserted - move.n_removed
            n_na, n_cl = count(space, 0), count(space, 1)
            assert n_na % 2 == 0
            assert n_na == 2 * units
            assert n_cl == units
            assert space.groups[0].capacity % 2 == 0
            assert np.array_equal(space.p["active"], trial.p["active"])
        assert move.n_inserted > 0
        assert move.n_removed > 0

    def test_units_stay_whole(self, atoms, dimers, hamiltonian):
        space, trial = dimers
        move = SaltBath(
            space, trial, hamiltonian, atoms, ["NA", "NA"], ["CL"], mu=-30.0, k=2,
            rng=np.random.default_rng(12),
        )
        for _ in range(100):
            move.move()
        mask = space.groups[0].active_mask.reshape(-1, 2)
        assert np.all(mask[:, 0] == mask[:, 1])
        assert space.groups[0].capacity > 4

    def test_ideal_gas_distribution(self, atoms, dimers):
        """Without interactions the unit count follows z^n / (n!)^2."""
        space, trial = dimers
        volume = space.geometry.volume
        mu = np.log(25.0) - 3 * np.log(volume)
        move = SaltBath(
            space, trial, Hamiltonian([Nonbonded(Dummy())]), atoms, ["NA", "NA"], ["CL"],
            mu=mu, k=1, rng=np.random.default_rng(13),
        )
        samples = []
        for i in range(12000):
            move.move()
            if i >= 1000:
                samples.append(count(space, 1))

        n = np.arange(40)
        log_weights = n * np.log(25.0) - 2 * gammaln(n + 1)
        weights = np.exp(log_weights - log_weights.max())
        expected = np.sum(n * weights) / np.sum(weights)
        assert np.mean(samples) == pytest.approx(expected, abs=0.3)
