"""
Ghar Kharch Tracker - Source Package

A household expense tracker core: dated, categorized expenses,
a monthly budget, and aggregated reports over them.

DESIGN PRINCIPLES:
1. In-memory state is authoritative for the session
2. Durability is best-effort across redundant backends
3. Reports are pure functions of records and an explicit "now"
4. Validation failures are loud, storage failures are logged
"""

__version__ = "1.0.0"
__author__ = "Ghar Kharch Team"
