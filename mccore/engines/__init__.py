"""Simulation engine implementations."""

from .engine import MonteCarloEngine
from .reporters import (
    CallbackReporter,
    EnergyReporter,
    Reporter,
    ReporterGroup,
    StateReporter,
)

__all__ = [
    "MonteCarloEngine",
    "Reporter",
    "ReporterGroup",
    "StateReporter",
    "CallbackReporter",
    "EnergyReporter",
]
