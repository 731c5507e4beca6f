"""Nonbonded pair potentials."""

from .coulomb import Coulomb
from .hardsphere import HardSphere
from .lj import LennardJones, WeeksChandlerAndersen

__all__ = ["LennardJones", "WeeksChandlerAndersen", "Coulomb", "HardSphere"]
