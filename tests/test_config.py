"""Tests for configuration records and the high-level drivers."""

import json

import numpy as np
import pytest

from mccore import simulate
from mccore.errors import ConfigurationError
from mccore.io import build_simulation, load_config
from mccore.moves import AtomicTranslation, MoleculeTranslation, SaltBath


@pytest.fixture
def record():
    return {
        "temperature": 298.15,
        "random": {"seed": 3},
        "geometry": {"type": "cuboid", "length": 40.0},
        "atomlist": [
            {"NA": {"q": 1.0, "sigma": 4.0}},
            {"CL": {"q": -1.0, "sigma": 4.0}},
            {"M": {"sigma": 3.0, "eps": 0.5}},
        ],
        "moleculelist": [
            {"cations": {"atoms": ["NA", "NA"], "atomic": True, "Ninit": 1}},
            {"anions": {"atoms": ["CL", "CL"], "atomic": True, "Ninit": 1}},
            {
                "dimer": {
                    "atoms": ["M", "M"],
                    "structure": [[0, 0, 0], [3.5, 0, 0]],
                    "bondlist": [{"harmonic": {"index": [0, 1], "k": 5.0, "req": 3.5}}],
                    "Ninit": 2,
                }
            },
        ],
        "energy": {
            "nonbonded": {"hardsphere": {}, "coulomb": {"epsr": 80}},
            "cutoff": 18.0,
        },
        "moves": {
            "atomtranslate": [
                {"molecule": "cations", "dp": 4.0},
                {"molecule": "anions", "dp": 4.0},
            ],
            "moltranslate": {"molecule": "dimer", "dp": 2.0},
            "saltbath": {"mu": -19.0, "ktrials": 3, "polymer": ["NA"], "counterions": ["CL"]},
        },
    }


class TestBuildSimulation:
    """Test building a full simulation from a record."""

    def test_components(self, record):
        sim = build_simulation(record)
        assert sim.atoms.names == ["NA", "CL", "M"]
        assert len(sim.molecules) == 3
        assert [g.id for g in sim.space.groups] == [0, 1, 2, 2]
        assert [type(m) for m in sim.moves] == [
            AtomicTranslation,
            AtomicTranslation,
            MoleculeTranslation,
            SaltBath,
        ]
        assert [term.name for term in sim.hamiltonian.terms] == ["nonbonded", "bonded"]
        assert sim.engine.space is sim.space

    def test_runs(self, record):
        sim = build_simulation(record)
        sim.run(20)
        assert sim.engine.total_steps == 20
        n_na = len(sim.space.find_particles_by_type(0))
        n_cl = len(sim.space.find_particles_by_type(1))
        assert n_na == n_cl

    def test_seed_is_reproducible(self, record):
        first = build_simulation(record)
        second = build_simulation(record)
        assert np.array_equal(first.space.p["pos"], second.space.p["pos"])

    def test_missing_section(self, record):
        del record["geometry"]
        with pytest.raises(ConfigurationError) as err:
            build_simulation(record)
        assert err.value.key == "geometry"

    def test_unknown_move(self, record):
        record["moves"]["swap"] = {}
        with pytest.raises(ConfigurationError) as err:
            build_simulation(record)
        assert err.value.key == "moves.swap"

    def test_unknown_potential(self, record):
        record["energy"]["nonbonded"] = {"yukawa": {}}
        with pytest.raises(ConfigurationError):
            build_simulation(record)

    def test_saltbath_without_mu_is_disabled(self, record):
        del record["moves"]["saltbath"]["mu"]
        sim = build_simulation(record)
        assert not sim.moves[-1].enabled

    def test_saltbath_starts_without_salt(self, record):
        for entry in record["moleculelist"][:2]:
            next(iter(entry.values()))["Ninit"] = 0
        sim = build_simulation(record)
        assert [g.id for g in sim.space.groups] == [0, 1, 2, 2]
        assert sim.space.groups[0].size == 0
        assert sim.space.groups[1].size == 0
        sim.run(200)
        n_na = len(sim.space.find_particles_by_type(0))
        assert n_na == len(sim.space.find_particles_by_type(1))
        assert n_na > 0
        assert abs(sim.engine.drift()) < 1e-6

    def test_bad_temperature(self, record):
        record["temperature"] = "warm"
        with pytest.raises(ConfigurationError) as err:
            build_simulation(record)
        assert err.value.key == "temperature"

    def test_bad_displacement(self, record):
        record["moves"]["atomtranslate"] = {"molecule": "cations", "dp": "big"}
        with pytest.raises(ConfigurationError) as err:
            build_simulation(record)
        assert err.value.key == "atomtranslate.dp"

    def test_bad_runfraction(self, record):
        record["moves"]["moltranslate"]["runfraction"] = "often"
        with pytest.raises(ConfigurationError) as err:
            build_simulation(record)
        assert err.value.key == "moltranslate.runfraction"

    def test_bad_cutoff(self, record):
        record["energy"]["cutoff"] = "far"
        with pytest.raises(ConfigurationError) as err:
            build_simulation(record)
        assert err.value.key == "energy.cutoff"

    def test_bad_saltbath_fields(self, record):
        for field, value in (("mu", "low"), ("ktrials", "many"), ("index", [0])):
            entry = dict(record["moves"]["saltbath"], **{field: value})
            bad = dict(record, moves={"saltbath": entry})
            with pytest.raises(ConfigurationError) as err:
                build_simulation(bad)
            assert err.value.key == f"saltbath.{field}"

    def test_optional_fields_default(self, record):
        del record["energy"]["cutoff"]
        del record["moves"]["moltranslate"]["dp"]
        sim = build_simulation(record)
        assert sim.hamiltonian.terms[0].cutoff == np.inf
        assert sim.moves[2].dp == 1.0
        assert sim.moves[2].runfraction == 1.0


class TestLoadConfig:
    """Test reading JSON files."""

    def test_load(self, tmp_path, record):
        path = tmp_path / "input.json"
        path.write_text(json.dumps(record))
        assert load_config(path) == record

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError):
            load_config(path)


class TestSimulate:
    """Test the high-level drivers."""

    def test_lj_fluid(self):
        result = simulate.lj_fluid(n_atoms=20, density=0.3, n_steps=30, n_equil=10,
                                   verbose=False)
        assert len(result.energy) == 30
        assert np.all(result.n_active == 20)
        assert abs(result.energy_drift) < 1e-6
        assert 0.0 <= result.acceptance["atomtranslate"] <= 1.0

    def test_salt_bath(self):
        result = simulate.salt_bath(n_salt=3, box_length=40.0, n_steps=30, n_equil=10,
                                    verbose=False)
        assert len(result.n_active) == 30
        assert np.all(result.n_active % 2 == 0)
        assert result.mean_n_active > 0

    def test_salt_bath_needs_ions(self):
        with pytest.raises(ValueError):
            simulate.salt_bath(n_salt=0, verbose=False)
