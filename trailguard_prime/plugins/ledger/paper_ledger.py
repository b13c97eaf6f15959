# TRAILGUARD_FEAT: paper-ledger-001
"""
TRAILGUARD PRIME - Paper Ledger
===============================

Simulated token custody for paper settlement.

Balances are integers in each token's smallest unit. A transfer either
moves the full amount or raises and leaves balances untouched.

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List

from shared.trailguard_core.exceptions import InvalidAmountError, SettlementError

logger = logging.getLogger("TRAILGUARD_Ledger")


class InsufficientBalanceError(SettlementError):
    """Sender balance below transfer amount."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "INSUFFICIENT_BALANCE")
        super().__init__(message, **kwargs)


@dataclass
class Transfer:
    """A completed ledger movement."""

    token: str
    sender: str
    recipient: str
    amount: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "sender": self.sender,
            "recipient": self.recipient,
            "amount": self.amount,
            "timestamp": self.timestamp.isoformat(),
        }


class PaperLedger:
    """
    In-memory multi-token balance sheet.

    Example:
        ledger = PaperLedger()
        ledger.mint("WETH", "maker", 10**18)
        ledger.transfer("WETH", "maker", "taker", 5 * 10**17)
    """

    def __init__(self):
        self._balances: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._transfers: List[Transfer] = []

    def mint(self, token: str, account: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidAmountError(f"Mint amount must be positive: {amount}")
        self._balances[token][account] += amount

    def balance_of(self, token: str, account: str) -> int:
        return self._balances[token][account]

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> Transfer:
        """
        Move `amount` of `token` from sender to recipient.

        Raises:
            InvalidAmountError: amount <= 0
            InsufficientBalanceError: sender cannot cover amount
        """
        if amount <= 0:
            raise InvalidAmountError(f"Transfer amount must be positive: {amount}")

        balance = self._balances[token][sender]
        if balance < amount:
            raise InsufficientBalanceError(
                f"{sender} holds {balance} {token}, needs {amount}",
                details={"token": token, "account": sender, "balance": balance, "amount": amount},
            )

        self._balances[token][sender] = balance - amount
        self._balances[token][recipient] += amount

        record = Transfer(token=token, sender=sender, recipient=recipient, amount=amount)
        self._transfers.append(record)
        logger.info(f"Transfer {amount} {token}: {sender} -> {recipient}")
        return record

    def get_transfers(self, limit: int = 100) -> List[Transfer]:
        return self._transfers[-limit:]


__all__ = ["InsufficientBalanceError", "Transfer", "PaperLedger"]
