#!/usr/bin/env python
"""
Quick start example - the simplest way to run a simulation.

This demonstrates the high-level API for users who just want results
without dealing with the internal details.

Usage:
    python examples/quickstart.py
"""

from mccore import simulate


def main():
    print("=" * 60)
    print("MC Core Quick Start")
    print("=" * 60)

    # 1. Canonical Lennard-Jones fluid
    print("\n1. LJ Fluid:")
    print("-" * 40)
    result = simulate.lj_fluid(n_atoms=64, density=0.5, n_steps=500)
    print(f"   Acceptance: {result.acceptance['atomtranslate']:.2f}")

    # 2. Salt in contact with a reservoir
    print("\n2. Grand-canonical salt bath:")
    print("-" * 40)
    result = simulate.salt_bath(mu=-19.0, n_salt=5, n_steps=500)
    print(f"   Energy drift: {result.energy_drift:.2e} kT")

    print("\n" + "=" * 60)
    print("All examples completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
