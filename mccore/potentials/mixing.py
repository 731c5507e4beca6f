"""Pair parameter tables built with mixing rules."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from ..errors import ConfigurationError, require
from ..units import DEFAULT_TEMPERATURE, kjmol

if TYPE_CHECKING:
    from ..catalog import AtomCatalog


def lorentz_berthelot(
    sigma_i: float, sigma_j: float, eps_i: float, eps_j: float
) -> tuple[float, float]:
    """Arithmetic mean of sizes, geometric mean of energies."""
    return 0.5 * (sigma_i + sigma_j), float(np.sqrt(eps_i * eps_j))


MIXING_RULES: dict[str, Callable[[float, float, float, float], tuple[float, float]]] = {
    "LB": lorentz_berthelot,
}


class SigmaEpsilonTable:
    """
    Symmetric tables of mixed sigma^2 and 4*epsilon over all atom types.

    Built once from an atom catalog. Entries for explicit atom pairs can be
    overridden with a ``custom`` record keyed by two space separated atom
    names.

    Attributes:
        s2: sigma_ij^2 in A^2, shape (n_types, n_types).
        eps: 4 * epsilon_ij in kT, shape (n_types, n_types).
        mixing: Name of the mixing rule.
        custom: Overrides exactly as given ({"A B": {"sigma": .., "eps": ..}},
            eps in kJ/mol).
    """

    def __init__(
        self,
        atoms: AtomCatalog,
        mixing: str = "LB",
        custom: dict[str, dict[str, float]] | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> None:
        if mixing not in MIXING_RULES:
            raise ConfigurationError(f"unknown mixing rule '{mixing}'", key="mixing")
        self.mixing = mixing
        self.temperature = temperature
        self.custom: dict[str, dict[str, float]] = {}

        rule = MIXING_RULES[mixing]
        n = len(atoms)
        self.s2: NDArray[np.floating] = np.zeros((n, n))
        self.eps: NDArray[np.floating] = np.zeros((n, n))
        for a in atoms:
            for b in atoms:
                sigma, epsilon = rule(a.sigma, b.sigma, a.eps, b.eps)
                self._set(a.id, b.id, sigma, epsilon)

        for key, values in (custom or {}).items():
            names = key.split()
            if len(names) != 2:
                raise ConfigurationError(
                    "custom epsilon/sigma parameters require exactly two "
                    "space-separated atoms",
                    key=f"custom.{key}",
                )
            id1 = atoms.find(names[0]).id
            id2 = atoms.find(names[1]).id
            sigma = require(values, "sigma", float, context=f"custom.{key}")
            epsilon = require(values, "eps", float, context=f"custom.{key}")
            self._set(id1, id2, sigma, epsilon)
            self.custom[key] = {"sigma": sigma, "eps": epsilon}

    def _set(self, i: int, j: int, sigma: float, epsilon: float) -> None:
        self.s2[i, j] = self.s2[j, i] = sigma * sigma
        self.eps[i, j] = self.eps[j, i] = 4.0 * kjmol(epsilon, self.temperature)

    def __len__(self) -> int:
        return len(self.s2)

    def to_dict(self) -> dict:
        record: dict = {"mixing": self.mixing}
        if self.custom:
            record["custom"] = {key: dict(values) for key, values in self.custom.items()}
        return record

    @classmethod
    def from_dict(
        cls,
        record: dict,
        atoms: AtomCatalog,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> SigmaEpsilonTable:
        if record is None:
            record = {}
        if not isinstance(record, dict):
            raise ConfigurationError("mixing parameters must be a mapping", key="mixing")
        custom = record.get("custom", {})
        if not isinstance(custom, dict):
            raise ConfigurationError("custom parameters must be a mapping", key="custom")
        return cls(
            atoms,
            mixing=record.get("mixing", "LB"),
            custom=custom,
            temperature=temperature,
        )
