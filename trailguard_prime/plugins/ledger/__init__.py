"""Settlement ledgers."""

from .paper_ledger import InsufficientBalanceError, PaperLedger, Transfer

__all__ = ["InsufficientBalanceError", "PaperLedger", "Transfer"]
