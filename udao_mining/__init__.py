"""
UDAO mining ledger: token supply, balances and the halving reward schedule.
"""

__version__ = "1.0.0"
