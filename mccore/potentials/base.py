"""Base interface for pair potentials."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from ..units import DEFAULT_TEMPERATURE

if TYPE_CHECKING:
    from ..catalog import AtomCatalog


def squared_norm(r: NDArray[np.floating]) -> NDArray[np.floating]:
    """|r|^2 along the last axis."""
    r = np.asarray(r, dtype=np.float64)
    return np.sum(r * r, axis=-1)


def along(magnitude: NDArray[np.floating], r: NDArray[np.floating]) -> NDArray:
    """Scale separation vector(s) `r` by per-pair factor(s) `magnitude`."""
    return np.asarray(magnitude)[..., np.newaxis] * np.asarray(r, dtype=np.float64)


class PairPotential(ABC):
    """
    Abstract base class for pair potentials.

    A pair potential maps two particles and their separation vector to an
    energy in kT. Evaluation must not modify particles or the potential, so
    one instance can be shared by every energy summation site.

    `a` and `b` are particle records (or equally shaped arrays of records)
    and `r = a.pos - b.pos` under the geometry's distance convention, shape
    (3,) or (N, 3). Array arguments return per-pair energies.

    Potentials are combined with `+`; the result is a flat
    `CombinedPairPotential` whose energy is the sum of its terms.
    """

    name: str = ""
    cite: str = ""

    @abstractmethod
    def __call__(self, a: Any, b: Any, r: NDArray[np.floating]) -> Any:
        """
        Pair energy in kT.

        Args:
            a: First particle record(s).
            b: Second particle record(s).
            r: Separation vector(s) a - b.

        Returns:
            Energy, scalar or shape (N,).
        """
        ...

    @abstractmethod
    def force(self, a: Any, b: Any, r: NDArray[np.floating]) -> NDArray[np.floating]:
        """
        Force on `a` due to `b` in kT/A, i.e. -dU/dr.

        Returns:
            Force vector(s), same shape as `r`.
        """
        ...

    @abstractmethod
    def to_dict(self) -> Any:
        """Parameters as a configuration record (without the name key)."""
        ...

    @classmethod
    def from_dict(
        cls,
        params: Any,
        atoms: AtomCatalog | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> PairPotential:
        """Create the potential from its parameter record."""
        raise NotImplementedError(f"{cls.__name__} cannot be created from a record")

    def serialize(self) -> Any:
        """Configuration record keyed by the potential's name."""
        return {self.name: self.to_dict()}

    def info(self) -> str:
        text = f"{self.name}"
        if self.cite:
            text += f" [{self.cite}]"
        return text

    def __add__(self, other: PairPotential) -> PairPotential:
        from .composite import CombinedPairPotential

        if not isinstance(other, PairPotential):
            return NotImplemented
        return CombinedPairPotential([self, other])


class Dummy(PairPotential):
    """Pair potential that is zero everywhere; identity element of `+`."""

    name = "dummy"

    def __call__(self, a, b, r):
        return np.zeros(np.shape(r)[:-1]) if np.ndim(r) > 1 else 0.0

    def force(self, a, b, r):
        return np.zeros(np.shape(r))

    def to_dict(self) -> dict:
        return {}

    @classmethod
    def from_dict(cls, params=None, atoms=None, temperature=None) -> Dummy:
        return cls()
