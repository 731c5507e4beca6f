"""Atom and molecule type catalogs."""

from .atoms import AtomCatalog, AtomType
from .molecules import MoleculeCatalog, MoleculeType

__all__ = ["AtomType", "AtomCatalog", "MoleculeType", "MoleculeCatalog"]
