"""Energy evaluation over spaces."""

from .base import EnergyTerm, touched_indices
from .bonded import Bonded
from .hamiltonian import Hamiltonian
from .nonbonded import Nonbonded

__all__ = ["EnergyTerm", "touched_indices", "Nonbonded", "Bonded", "Hamiltonian"]
