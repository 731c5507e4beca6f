"""Container geometries."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ..errors import ConfigurationError, require


class Geometry(ABC):
    """
    Abstract container shape.

    The Monte Carlo core only needs three things from a geometry: the
    separation between two positions, a boundary operation that brings a
    position back into the container, and uniform random positions inside it.
    """

    @abstractmethod
    def distance(
        self, a: NDArray[np.floating], b: NDArray[np.floating]
    ) -> NDArray[np.floating]:
        """
        Separation vector a - b.

        Args:
            a: Position(s), shape (3,) or (N, 3).
            b: Position(s), shape (3,) or (N, 3).

        Returns:
            Separation vector(s), broadcast shape of the inputs.
        """
        ...

    @abstractmethod
    def boundary(self, positions: NDArray[np.floating]) -> NDArray[np.floating]:
        """Apply boundary conditions, returning positions inside the container."""
        ...

    @abstractmethod
    def random_position(self, rng: np.random.Generator, n: int | None = None):
        """Uniform random position(s) inside the container."""
        ...

    @abstractmethod
    def collision(self, positions: NDArray[np.floating]) -> NDArray[np.bool_]:
        """True for positions outside the container."""
        ...

    @property
    @abstractmethod
    def volume(self) -> float:
        """Container volume in cubic angstrom."""
        ...

    @abstractmethod
    def to_dict(self) -> dict:
        ...


@dataclass(frozen=True, eq=False)
class Cuboid(Geometry):
    """
    Orthorhombic box with periodic boundaries in all directions.

    Positions run from -L/2 to L/2 along each axis.

    Attributes:
        lengths: Side lengths, shape (3,).
    """

    lengths: NDArray[np.floating]

    def __post_init__(self) -> None:
        lengths = np.asarray(self.lengths, dtype=np.float64)
        if lengths.shape == ():
            lengths = np.full(3, float(lengths))
        if lengths.shape != (3,):
            raise ValueError(f"Cuboid lengths must be scalar or (3,), got {lengths.shape}")
        if np.any(lengths <= 0):
            raise ValueError(f"Cuboid lengths must be positive, got {lengths}")
        object.__setattr__(self, "lengths", lengths)

    @classmethod
    def cubic(cls, length: float) -> Cuboid:
        """Create a cube with given side length."""
        return cls(np.array([length, length, length]))

    @property
    def volume(self) -> float:
        return float(np.prod(self.lengths))

    def distance(self, a, b):
        dr = np.asarray(a) - np.asarray(b)
        return dr - self.lengths * np.round(dr / self.lengths)

    def boundary(self, positions):
        positions = np.asarray(positions, dtype=np.float64)
        return positions - self.lengths * np.floor(positions / self.lengths + 0.5)

    def random_position(self, rng, n=None):
        size = (3,) if n is None else (n, 3)
        return (rng.random(size) - 0.5) * self.lengths

    def collision(self, positions):
        positions = np.asarray(positions)
        return np.any(np.abs(positions) > 0.5 * self.lengths, axis=-1)

    def scaled(self, volume: float) -> Cuboid:
        """Return an isotropically scaled box of the given volume."""
        return Cuboid(self.lengths * (volume / self.volume) ** (1.0 / 3.0))

    def to_dict(self) -> dict:
        return {"type": "cuboid", "length": self.lengths.tolist()}


@dataclass(frozen=True)
class Sphere(Geometry):
    """
    Spherical container with a hard wall, centered at the origin.

    Attributes:
        radius: Sphere radius in angstrom.
    """

    radius: float

    def __post_init__(self) -> None:
        if self.radius <= 0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")

    @property
    def volume(self) -> float:
        return 4.0 / 3.0 * np.pi * self.radius**3

    def distance(self, a, b):
        return np.asarray(a) - np.asarray(b)

    def boundary(self, positions):
        # No periodicity: positions are already in absolute coordinates
        return np.asarray(positions, dtype=np.float64)

    def random_position(self, rng, n=None):
        count = 1 if n is None else n
        positions = np.empty((count, 3))
        filled = 0
        while filled < count:
            trial = (rng.random((count, 3)) - 0.5) * 2.0 * self.radius
            inside = trial[np.sum(trial * trial, axis=1) <= self.radius**2]
            take = min(len(inside), count - filled)
            positions[filled : filled + take] = inside[:take]
            filled += take
        return positions[0] if n is None else positions

    def collision(self, positions):
        positions = np.asarray(positions)
        return np.sum(positions * positions, axis=-1) > self.radius**2

    def to_dict(self) -> dict:
        return {"type": "sphere", "radius": self.radius}


def geometry_from_dict(record: dict) -> Geometry:
    """
    Create a geometry from a configuration record.

    ``{"type": "cuboid", "length": 50}`` or ``{"type": "sphere", "radius": 40}``.

    Raises:
        ConfigurationError: On unknown type or missing dimensions.
    """
    kind = record.get("type", "cuboid") if isinstance(record, dict) else None
    if kind == "cuboid":
        if "length" not in record:
            raise ConfigurationError("missing required field", key="geometry.length")
        length = record["length"]
        try:
            return Cuboid(np.asarray(length, dtype=np.float64))
        except (TypeError, ValueError) as err:
            raise ConfigurationError(str(err), key="geometry.length") from err
    if kind == "sphere":
        return Sphere(require(record, "radius", float, context="geometry"))
    raise ConfigurationError(f"unknown geometry type {kind!r}", key="geometry.type")
