"""Monte Carlo moves."""

from .base import Move
from .saltbath import SaltBath, SaltBathState, Species
from .translate import AtomicTranslation, MoleculeTranslation

__all__ = [
    "Move",
    "AtomicTranslation",
    "MoleculeTranslation",
    "SaltBath",
    "SaltBathState",
    "Species",
]
