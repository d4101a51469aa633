"""
SmartExpense - Source Package

A single-user personal finance tracker: local accounts, an income and
expense ledger, dashboard statistics and charts, AI tips and backups.

DESIGN PRINCIPLES:
1. Derived figures are always recomputed from the full ledger
2. Storage is a swappable key-value port, never a global
3. Every user action is audited
4. Errors become messages; the app never stops on one
"""

__version__ = "1.0.0"
__author__ = "SmartExpense Team"
