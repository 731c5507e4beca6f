"""
Unit conventions.

Energies are kept in units of the thermal energy kT, lengths in angstrom and
charges in elementary charges. Input records give Lennard-Jones energies and
force constants in kJ/mol, which are converted with :func:`kjmol`.
"""

from __future__ import annotations

import numpy as np

# Molar gas constant (kJ/mol/K)
R_GAS = 8.314462618e-3

ELEMENTARY_CHARGE = 1.602176634e-19  # C
VACUUM_PERMITTIVITY = 8.8541878128e-12  # F/m
K_BOLTZMANN = 1.380649e-23  # J/K

DEFAULT_TEMPERATURE = 298.15  # K


def kjmol(value: float, temperature: float = DEFAULT_TEMPERATURE) -> float:
    """Convert an energy in kJ/mol to kT."""
    return value / (R_GAS * temperature)


def bjerrum_length(epsr: float, temperature: float = DEFAULT_TEMPERATURE) -> float:
    """
    Bjerrum length in angstrom.

    lB = e^2 / (4 pi eps0 epsr kB T)

    Args:
        epsr: Relative dielectric constant of the medium.
        temperature: Temperature in K.

    Returns:
        Bjerrum length in angstrom.
    """
    if epsr <= 0:
        raise ValueError(f"relative dielectric constant must be positive, got {epsr}")
    lb = ELEMENTARY_CHARGE**2 / (
        4.0 * np.pi * VACUUM_PERMITTIVITY * epsr * K_BOLTZMANN * temperature
    )
    return float(lb * 1e10)
