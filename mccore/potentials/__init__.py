"""Pair potentials, mixing tables and bonded interactions."""

from .base import Dummy, PairPotential
from .bonds import BondData, BondType, filter_bonds
from .composite import CombinedPairPotential
from .mixing import SigmaEpsilonTable, lorentz_berthelot
from .nonbonded import Coulomb, HardSphere, LennardJones, WeeksChandlerAndersen
from .registry import POTENTIALS, pair_potential_from_dict, serialize

__all__ = [
    "PairPotential",
    "Dummy",
    "CombinedPairPotential",
    "SigmaEpsilonTable",
    "lorentz_berthelot",
    "LennardJones",
    "WeeksChandlerAndersen",
    "Coulomb",
    "HardSphere",
    "BondData",
    "BondType",
    "filter_bonds",
    "POTENTIALS",
    "pair_potential_from_dict",
    "serialize",
]
