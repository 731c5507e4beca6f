"""Configuration input."""

from .config import (
    Simulation,
    build_hamiltonian,
    build_moves,
    build_simulation,
    load_config,
)

__all__ = [
    "Simulation",
    "load_config",
    "build_hamiltonian",
    "build_moves",
    "build_simulation",
]
