"""
Budget Kernel

Core domain for personal budgeting:
- Budget period lifecycle (start, close, auto-chain)
- Transaction aggregation with transfer exclusion
- Decimal-safe money handling
- Persistence through a narrow Data Port
"""

__version__ = "0.1.0"
