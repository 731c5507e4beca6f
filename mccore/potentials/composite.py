"""Additive composition of pair potentials."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from .base import PairPotential


class CombinedPairPotential(PairPotential):
    """
    Sum of pair potentials.

    Terms are kept in a flat list, so `(u1 + u2) + u3` and `u1 + (u2 + u3)`
    evaluate the same terms in the same order.

    Example:
        pot = LennardJones(table) + Coulomb(lB=7.0)
        u = pot(a, b, r)
    """

    name = "combined"

    def __init__(self, terms: Iterable[PairPotential] = ()) -> None:
        self.terms: list[PairPotential] = []
        for term in terms:
            self.add_term(term)

    def add_term(self, term: PairPotential) -> None:
        """Add a term, flattening nested combinations."""
        if isinstance(term, CombinedPairPotential):
            self.terms.extend(term.terms)
        else:
            self.terms.append(term)

    def __call__(self, a, b, r):
        total = 0.0
        for term in self.terms:
            total = total + term(a, b, r)
        if np.ndim(r) > 1 and np.ndim(total) == 0:
            return np.full(np.shape(r)[:-1], total)
        return total

    def force(self, a, b, r):
        total = np.zeros(np.shape(r))
        for term in self.terms:
            total += term.force(a, b, r)
        return total

    def to_dict(self) -> list:
        return [term.serialize() for term in self.terms]

    def serialize(self) -> list:
        return self.to_dict()

    def info(self) -> str:
        return " + ".join(term.info() for term in self.terms) or "empty"
