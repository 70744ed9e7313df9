"""Hierarchy store layer.

This package is the single owner of a system's data units: a tree of named
groups for navigation plus a flat path index for direct lookup.
"""

from pymavlog.store.group import DataGroup
from pymavlog.store.hierarchy import HierarchyStore, normalize_path, split_path

__all__ = ["DataGroup", "HierarchyStore", "normalize_path", "split_path"]
