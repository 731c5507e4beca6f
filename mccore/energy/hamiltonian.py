"""Composite energy function combining multiple energy terms."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import EnergyTerm

if TYPE_CHECKING:
    from ..system import Change, Space


class Hamiltonian(EnergyTerm):
    """
    Sum of energy terms.

    Example:
        hamiltonian = Hamiltonian([
            Nonbonded(LennardJones(table) + Coulomb(lB=7.0)),
            Bonded(molecules),
        ])
        du = hamiltonian.energy(trial, change) - hamiltonian.energy(accepted, change)
    """

    name = "hamiltonian"

    def __init__(self, terms: list[EnergyTerm] | None = None) -> None:
        self.terms: list[EnergyTerm] = terms if terms is not None else []

    def add_term(self, term: EnergyTerm) -> None:
        """Add an energy term."""
        self.terms.append(term)

    def remove_term(self, term: EnergyTerm) -> None:
        """Remove an energy term."""
        self.terms.remove(term)

    def energy(self, space: Space, change: Change) -> float:
        return sum((term.energy(space, change) for term in self.terms), 0.0)

    def system_energy(self, space: Space) -> float:
        return sum((term.system_energy(space) for term in self.terms), 0.0)

    def energy_per_term(self, space: Space, change: Change) -> dict[str, float]:
        """
        Energy of each term separately.

        Useful for debugging and reporting.
        """
        return {term.name: term.energy(space, change) for term in self.terms}

    def info(self) -> str:
        return "\n".join(term.info() for term in self.terms)
