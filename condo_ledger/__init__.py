"""
Condo Ledger - Source Package

Bookkeeping core for condominium administrators: users, condominiums,
income/expense movements and the reports built on top of them.

DESIGN PRINCIPLES:
1. Validate at construction, persist only well-formed entities
2. Money is integer minor units, never floats
3. One document, rewritten whole on every change
4. Every significant action is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Condo Ledger Team"
