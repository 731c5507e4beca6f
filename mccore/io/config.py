"""Building simulations from JSON configuration records."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np

from ..catalog import AtomCatalog, MoleculeCatalog
from ..energy import Bonded, Hamiltonian, Nonbonded
from ..engines import MonteCarloEngine
from ..errors import ConfigurationError, optional, require
from ..moves import AtomicTranslation, MoleculeTranslation, Move, SaltBath
from ..potentials import pair_potential_from_dict
from ..system import Space, geometry_from_dict
from ..units import DEFAULT_TEMPERATURE

logger = logging.getLogger(__name__)

DISPLACEMENT_MOVES = {
    AtomicTranslation.name: AtomicTranslation,
    MoleculeTranslation.name: MoleculeTranslation,
}


@dataclass
class Simulation:
    """
    Everything built from one configuration record.

    Attributes:
        atoms: Atom catalog.
        molecules: Molecule catalog.
        space: Accepted space, populated with the initial molecules.
        hamiltonian: Energy function.
        engine: Engine owning the space, its trial copy and all moves.
        temperature: Temperature in K.
        rng: Random number generator shared by every component.
    """

    atoms: AtomCatalog
    molecules: MoleculeCatalog
    space: Space
    hamiltonian: Hamiltonian
    engine: MonteCarloEngine
    temperature: float = DEFAULT_TEMPERATURE
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    @property
    def moves(self) -> list[Move]:
        return self.engine.moves

    def run(self, nsteps: int) -> Space:
        return self.engine.run(nsteps)


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Read a JSON configuration file.

    Raises:
        ConfigurationError: If the file is not valid JSON or not a mapping.
    """
    path = Path(path)
    with path.open() as f:
        try:
            record = json.load(f)
        except json.JSONDecodeError as err:
            raise ConfigurationError(f"{path}: {err}") from err
    if not isinstance(record, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping")
    return record


def _as_list(value: Any) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def build_hamiltonian(
    record: dict,
    atoms: AtomCatalog,
    molecules: MoleculeCatalog,
    temperature: float = DEFAULT_TEMPERATURE,
) -> Hamiltonian:
    """
    Create the energy function from the ``energy`` section.

    Example::

        {"nonbonded": {"lennardjones": {"mixing": "LB"}, "coulomb": {"epsr": 80}},
         "cutoff": 20.0}

    Bonded energy is added whenever a molecule type carries bonds.
    """
    if not isinstance(record, dict):
        raise ConfigurationError("energy section must be a mapping", key="energy")
    hamiltonian = Hamiltonian()
    if "nonbonded" in record:
        cutoff = optional(record, "cutoff", np.inf, float, "energy")
        pot = pair_potential_from_dict(record["nonbonded"], atoms, temperature)
        hamiltonian.add_term(Nonbonded(pot, cutoff))
    if any(molecule.bonds for molecule in molecules):
        hamiltonian.add_term(Bonded(molecules, temperature))
    return hamiltonian


def build_moves(
    record: dict,
    space: Space,
    trial: Space,
    hamiltonian: Hamiltonian,
    atoms: AtomCatalog,
    molecules: MoleculeCatalog,
    rng: np.random.Generator,
) -> list[Move]:
    """
    Create moves from the ``moves`` section.

    Each key names a move type and holds one record or a list of records.

    Raises:
        ConfigurationError: On unknown move names.
    """
    if not isinstance(record, dict):
        raise ConfigurationError("moves section must be a mapping", key="moves")
    moves: list[Move] = []
    for name, entries in record.items():
        for i, entry in enumerate(_as_list(entries)):
            if name in DISPLACEMENT_MOVES:
                move = DISPLACEMENT_MOVES[name].from_dict(
                    entry, space, trial, hamiltonian, molecules, rng
                )
            elif name == "saltbath":
                entry = dict(entry)
                entry.setdefault("index", i)
                move = SaltBath.from_dict(entry, space, trial, hamiltonian, atoms, rng)
            else:
                raise ConfigurationError(f"unknown move '{name}'", key=f"moves.{name}")
            moves.append(move)
    return moves


def build_simulation(
    record: dict[str, Any], rng: np.random.Generator | None = None
) -> Simulation:
    """
    Build catalogs, space, energy function, moves and engine from a record.

    Args:
        record: Configuration mapping, e.g. from `load_config`.
        rng: Random number generator; defaults to one seeded from
            ``record["random"]["seed"]``.

    Returns:
        Ready to run simulation.

    Raises:
        ConfigurationError: On missing sections or malformed values.
    """
    for section in ("atomlist", "moleculelist", "geometry"):
        if section not in record:
            raise ConfigurationError("missing required section", key=section)

    temperature = (
        require(record, "temperature", float)
        if "temperature" in record
        else DEFAULT_TEMPERATURE
    )
    if rng is None:
        seed = record.get("random", {}).get("seed")
        rng = np.random.default_rng(seed)

    atoms = AtomCatalog.from_dict(record["atomlist"])
    molecules = MoleculeCatalog.from_dict(record["moleculelist"], atoms)
    space = Space(geometry_from_dict(record["geometry"]))
    space.populate(molecules, rng)
    trial = space.copy()

    hamiltonian = build_hamiltonian(record.get("energy", {}), atoms, molecules, temperature)
    moves = build_moves(
        record.get("moves", {}), space, trial, hamiltonian, atoms, molecules, rng
    )
    engine = MonteCarloEngine(space, hamiltonian, moves, trial=trial, rng=rng)
    logger.info(
        "built simulation: %d atom types, %d molecule types, %d groups, %d moves",
        len(atoms),
        len(molecules),
        len(space.groups),
        len(moves),
    )
    return Simulation(atoms, molecules, space, hamiltonian, engine, temperature, rng)
