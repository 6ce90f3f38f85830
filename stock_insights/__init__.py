"""
Bookstore Inventory Classification Service

Derives rotation quadrants, ABC/XYZ classes, dead-stock risk and reorder
urgency from an inventory metrics snapshot.
"""

__version__ = "1.0.0"
