"""
Table Organizer - Source Package

Splits the bill of a shared table: tracks what was ordered, who is
sitting at the table, who consumed what, and how much each person owes
including the tip.

DESIGN PRINCIPLES:
1. One table session owns all state
2. Storage is swappable (in-memory or SQLite)
3. Nothing is added in memory unless storage accepted it
4. Amounts are integer cents, never floats
"""

__version__ = "1.0.0"
__author__ = "Table Organizer Team"
