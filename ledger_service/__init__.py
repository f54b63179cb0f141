"""
Ledger Service - Source Package

The financial core of the church administration platform: records receipts
and expenses, protects them behind authentication and per-origin rate limits,
keeps an append-only audit trail, and computes balances and period reports.

DESIGN PRINCIPLES:
1. Validate at the boundary, never "clean" input into validity
2. Fail early, fail visibly
3. Only confirmed transactions count
4. Every mutation must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Ledger Service Team"
