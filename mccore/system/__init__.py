"""Particle storage, groups, change tracking and container geometry."""

from .change import Change, GroupChange
from .geometry import Cuboid, Geometry, Sphere, geometry_from_dict
from .group import Group
from .particles import (
    PARTICLE_DTYPE,
    Particle,
    ParticleVector,
    particle_array,
    particles_from_atoms,
)
from .space import FilteredView, Space

__all__ = [
    "Change",
    "GroupChange",
    "Geometry",
    "Cuboid",
    "Sphere",
    "geometry_from_dict",
    "Group",
    "PARTICLE_DTYPE",
    "Particle",
    "ParticleVector",
    "particle_array",
    "particles_from_atoms",
    "FilteredView",
    "Space",
]
