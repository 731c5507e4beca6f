"""
Simple high-level simulation API.

This module provides a user-friendly interface for running common Monte
Carlo systems with minimal configuration. Each driver builds a
configuration record, hands it to `io.build_simulation` and runs it.

Example:
    >>> from mccore import simulate
    >>> result = simulate.salt_bath(mu=-19.0, n_steps=500)
    >>> print(result.mean_n_active)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray

from .engines import EnergyReporter
from .io import build_simulation


@dataclass
class SimulationResult:
    """Results from a simulation run."""

    # Time series, one entry per engine step
    energy: NDArray[np.floating] = field(default_factory=lambda: np.array([]))
    n_active: NDArray[np.integer] = field(default_factory=lambda: np.array([]))

    # Summary statistics
    mean_energy: float = 0.0
    mean_n_active: float = 0.0
    energy_drift: float = 0.0
    acceptance: dict[str, float] = field(default_factory=dict)

    # Metadata
    n_steps: int = 0
    box_size: float = 0.0
    config: dict[str, Any] = field(default_factory=dict)


def _lattice_positions(n_atoms: int, box_length: float) -> NDArray[np.floating]:
    """Simple cubic lattice positions relative to the first site."""
    n_side = int(np.ceil(n_atoms ** (1 / 3)))
    spacing = box_length / n_side
    sites = np.array(
        [[ix, iy, iz] for ix in range(n_side) for iy in range(n_side) for iz in range(n_side)]
    )
    return sites[:n_atoms] * spacing


def _run(record: dict, n_steps: int, n_equil: int, verbose: bool) -> SimulationResult:
    sim = build_simulation(record)
    if n_equil > 0:
        if verbose:
            print(f"Equilibrating ({n_equil} steps)...", end=" ", flush=True)
        sim.run(n_equil)
        if verbose:
            print("done")
        for move in sim.moves:
            move.reset_statistics()

    energies = EnergyReporter(frequency=1)
    sim.engine.add_reporter(energies)
    if verbose:
        print(f"Running production ({n_steps} steps)...", end=" ", flush=True)
    sim.run(n_steps)
    if verbose:
        print("done")

    energy = energies.energy
    n_active = energies.n_active
    return SimulationResult(
        energy=energy,
        n_active=n_active,
        mean_energy=float(np.mean(energy)) if len(energy) else 0.0,
        mean_n_active=float(np.mean(n_active)) if len(n_active) else 0.0,
        energy_drift=float(sim.engine.drift()),
        acceptance={move.name: move.acceptance for move in sim.moves},
        n_steps=n_steps,
        box_size=float(np.cbrt(sim.space.geometry.volume)),
        config=record,
    )


def lj_fluid(
    n_atoms: int = 64,
    density: float = 0.5,
    sigma: float = 3.0,
    epsilon: float = 2.5,
    n_steps: int = 1000,
    n_equil: int = 200,
    dp: float = 1.0,
    cutoff: float | None = None,
    seed: int = 42,
    verbose: bool = True,
) -> SimulationResult:
    """
    Run a canonical Lennard-Jones fluid with single atom displacements.

    Atoms start on a simple cubic lattice filling the box.

    Args:
        n_atoms: Number of atoms (default: 64).
        density: Reduced density N sigma^3 / V (default: 0.5).
        sigma: Atom diameter in angstrom (default: 3.0).
        epsilon: Well depth in kJ/mol (default: 2.5, roughly 1 kT).
        n_steps: Number of production steps (default: 1000).
        n_equil: Number of equilibration steps (default: 200).
        dp: Displacement parameter in angstrom (default: 1.0).
        cutoff: Pair cutoff in angstrom (default: 2.5 sigma).
        seed: Random seed for reproducibility (default: 42).
        verbose: Print progress (default: True).

    Returns:
        SimulationResult with energy time series.
    """
    box_length = float(np.cbrt(n_atoms * sigma**3 / density))
    record = {
        "temperature": 298.15,
        "random": {"seed": seed},
        "geometry": {"type": "cuboid", "length": box_length},
        "atomlist": [{"LJ": {"sigma": sigma, "eps": epsilon}}],
        "moleculelist": [
            {
                "fluid": {
                    "atoms": ["LJ"] * n_atoms,
                    "structure": _lattice_positions(n_atoms, box_length).tolist(),
                    "Ninit": 1,
                }
            }
        ],
        "energy": {
            "nonbonded": {"lennardjones": {"mixing": "LB"}},
            "cutoff": 2.5 * sigma if cutoff is None else cutoff,
        },
        "moves": {"atomtranslate": {"molecule": "fluid", "dp": dp}},
    }
    if verbose:
        print(f"LJ fluid: N={n_atoms}, rho*={density}, L={box_length:.2f} A")
    result = _run(record, n_steps, n_equil, verbose)
    if verbose:
        print(f"  Mean energy: {result.mean_energy:.3f} kT")
        print(f"  Energy drift: {result.energy_drift:.2e} kT")
    return result


def salt_bath(
    mu: float = -19.0,
    n_salt: int = 10,
    box_length: float = 50.0,
    epsr: float = 80.0,
    ktrials: int = 5,
    dp: float = 5.0,
    n_steps: int = 1000,
    n_equil: int = 100,
    seed: int = 42,
    verbose: bool = True,
) -> SimulationResult:
    """
    Run a 1:1 primitive model salt in contact with a salt reservoir.

    Sodium and chloride ions are hard spheres with Coulomb interactions;
    ion pairs are exchanged with the reservoir at chemical potential `mu`
    while single ions are displaced.

    Args:
        mu: Salt chemical potential in kT, per ion pair with a 1/A^3
            standard state (default: -19.0, about 0.1 M in the default box).
        n_salt: Initial number of ion pairs, at least 1 (default: 10).
        box_length: Cube side in angstrom (default: 50).
        epsr: Relative dielectric constant (default: 80).
        ktrials: Rosenbluth trials per inserted ion (default: 5).
        dp: Displacement parameter in angstrom (default: 5.0).
        n_steps: Number of production steps (default: 1000).
        n_equil: Number of equilibration steps (default: 100).
        seed: Random seed for reproducibility (default: 42).
        verbose: Print progress (default: True).

    Returns:
        SimulationResult; `n_active` counts ions of both kinds.
    """
    if n_salt < 1:
        raise ValueError(f"n_salt must be at least 1, got {n_salt}")
    record = {
        "temperature": 298.15,
        "random": {"seed": seed},
        "geometry": {"type": "cuboid", "length": box_length},
        "atomlist": [
            {"NA": {"q": 1.0, "sigma": 4.0}},
            {"CL": {"q": -1.0, "sigma": 4.0}},
        ],
        "moleculelist": [
            {"cations": {"atoms": ["NA"] * n_salt, "atomic": True, "Ninit": 1}},
            {"anions": {"atoms": ["CL"] * n_salt, "atomic": True, "Ninit": 1}},
        ],
        "energy": {"nonbonded": {"hardsphere": {}, "coulomb": {"epsr": epsr}}},
        "moves": {
            "atomtranslate": [
                {"molecule": "cations", "dp": dp},
                {"molecule": "anions", "dp": dp},
            ],
            "saltbath": {
                "mu": mu,
                "ktrials": ktrials,
                "polymer": ["NA"],
                "counterions": ["CL"],
            },
        },
    }
    if verbose:
        print(f"Salt bath: mu={mu} kT, L={box_length} A, k={ktrials}")
    result = _run(record, n_steps, n_equil, verbose)
    if verbose:
        print(f"  Mean number of ions: {result.mean_n_active:.2f}")
    return result
