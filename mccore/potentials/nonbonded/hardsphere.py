"""Hard-sphere pair potential."""

from __future__ import annotations

import numpy as np

from ..base import PairPotential, squared_norm


class HardSphere(PairPotential):
    """
    Hard-sphere overlap potential.

    V(r) = inf  if r < R_a + R_b
    V(r) = 0    otherwise

    Radii are read from the particle records. The force is zero wherever
    the energy is finite.
    """

    name = "hardsphere"

    def __call__(self, a, b, r):
        contact = a["radius"] + b["radius"]
        return np.where(squared_norm(r) < contact * contact, np.inf, 0.0)

    def force(self, a, b, r):
        return np.zeros(np.shape(r))

    def to_dict(self) -> dict:
        return {}

    @classmethod
    def from_dict(cls, params=None, atoms=None, temperature=None) -> HardSphere:
        return cls()
