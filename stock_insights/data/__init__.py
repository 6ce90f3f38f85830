"""
Data Generation Module
"""
from .generators import InventorySnapshotGenerator, generate_items

__all__ = [
    "InventorySnapshotGenerator",
    "generate_items",
]
