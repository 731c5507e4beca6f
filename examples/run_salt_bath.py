#!/usr/bin/env python
"""
Example: grand-canonical primitive model salt built from a JSON record.

This script demonstrates how to:
1. Describe atoms, molecules, energy and moves in a configuration record
2. Build the simulation with `build_simulation`
3. Attach reporters to the engine
4. Inspect move statistics afterwards

Usage:
    python examples/run_salt_bath.py [input.json]
"""

import logging
import sys

from mccore.engines import StateReporter
from mccore.io import build_simulation, load_config

CONFIG = {
    "temperature": 298.15,
    "random": {"seed": 1},
    "geometry": {"type": "cuboid", "length": 60.0},
    "atomlist": [
        {"NA": {"q": 1.0, "sigma": 4.0, "mw": 22.99}},
        {"CL": {"q": -1.0, "sigma": 4.0, "mw": 35.45}},
    ],
    "moleculelist": [
        {"cations": {"atoms": ["NA"] * 10, "atomic": True, "Ninit": 1}},
        {"anions": {"atoms": ["CL"] * 10, "atomic": True, "Ninit": 1}},
    ],
    "energy": {"nonbonded": {"hardsphere": {}, "coulomb": {"epsr": 80}}},
    "moves": {
        "atomtranslate": [
            {"molecule": "cations", "dp": 10.0},
            {"molecule": "anions", "dp": 10.0},
        ],
        "saltbath": {"mu": -19.5, "ktrials": 10, "polymer": ["NA"], "counterions": ["CL"]},
    },
}


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")
    record = load_config(sys.argv[1]) if len(sys.argv) > 1 else CONFIG

    sim = build_simulation(record)
    sim.engine.add_reporter(StateReporter(frequency=100))
    sim.run(1000)

    print(sim.engine.info())
    volume = sim.space.geometry.volume
    n_ions = len(sim.space.find_particles_by_type(0))
    # 1 ion per A^3 = 1660.5 mol/l
    print(f"Final NaCl concentration: {n_ions / volume * 1660.5:.3f} M")


if __name__ == "__main__":
    main()
