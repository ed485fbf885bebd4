"""
ProcureLedger - Public procurement registry core.

Three ledger-resident record stores (tenders, bidder qualification,
audit verification) sharing one authority-gated state-machine design.
"""

__version__ = "0.1.0"
__app_name__ = "procureledger"
