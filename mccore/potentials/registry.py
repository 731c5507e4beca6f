"""Creation of pair potentials from configuration records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import ConfigurationError
from ..units import DEFAULT_TEMPERATURE
from .base import Dummy, PairPotential
from .composite import CombinedPairPotential
from .nonbonded import Coulomb, HardSphere, LennardJones, WeeksChandlerAndersen

if TYPE_CHECKING:
    from ..catalog import AtomCatalog

POTENTIALS: dict[str, type[PairPotential]] = {
    cls.name: cls
    for cls in (Dummy, LennardJones, WeeksChandlerAndersen, Coulomb, HardSphere)
}


def pair_potential_from_dict(
    record: Any,
    atoms: AtomCatalog | None = None,
    temperature: float = DEFAULT_TEMPERATURE,
) -> PairPotential:
    """
    Create a pair potential from a configuration record.

    A single-key mapping creates one potential; a mapping with several keys
    or a list of single-key mappings creates their sum, in order.

    Example:
        pot = pair_potential_from_dict(
            [{"lennardjones": {"mixing": "LB"}}, {"coulomb": {"epsr": 80}}], atoms
        )

    Raises:
        ConfigurationError: On unknown potential names or bad parameters.
    """
    if isinstance(record, list):
        terms = [pair_potential_from_dict(item, atoms, temperature) for item in record]
        if not terms:
            raise ConfigurationError("empty pair potential list", key="nonbonded")
        return terms[0] if len(terms) == 1 else CombinedPairPotential(terms)

    if not isinstance(record, dict) or not record:
        raise ConfigurationError("pair potential record must be a mapping", key="nonbonded")

    terms = []
    for name, params in record.items():
        if name not in POTENTIALS:
            raise ConfigurationError(f"unknown pair potential '{name}'", key=name)
        terms.append(POTENTIALS[name].from_dict(params, atoms, temperature))
    return terms[0] if len(terms) == 1 else CombinedPairPotential(terms)


def serialize(potential: PairPotential) -> Any:
    """Configuration record of a potential; inverse of `pair_potential_from_dict`."""
    return potential.serialize()
