"""
mccore - core of a particle based Metropolis Monte Carlo engine.

Design Principles:
- Accepted and trial configurations kept apart and synced differentially
- Composable pair potentials and energy terms
- Deterministic runs from a seeded random generator
- Plain configuration records as the only input format

Quick Start:
    >>> from mccore import simulate
    >>> result = simulate.lj_fluid(n_atoms=64, density=0.5)
    >>> print(f"Mean energy: {result.mean_energy:.3f} kT")
"""

__version__ = "0.1.0"

# High-level APIs
from . import simulate
from .catalog import AtomCatalog, AtomType, MoleculeCatalog, MoleculeType
from .energy import Bonded, Hamiltonian, Nonbonded
from .engines import MonteCarloEngine
from .errors import ConfigurationError, InvariantViolation
from .io import build_simulation, load_config
from .moves import AtomicTranslation, MoleculeTranslation, SaltBath

# Core components for advanced users
from .system import Change, Cuboid, Space, Sphere

__all__ = [
    "simulate",
    "AtomCatalog",
    "AtomType",
    "MoleculeCatalog",
    "MoleculeType",
    "Space",
    "Change",
    "Cuboid",
    "Sphere",
    "Nonbonded",
    "Bonded",
    "Hamiltonian",
    "AtomicTranslation",
    "MoleculeTranslation",
    "SaltBath",
    "MonteCarloEngine",
    "ConfigurationError",
    "InvariantViolation",
    "build_simulation",
    "load_config",
]
