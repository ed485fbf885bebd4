"""
Ambient ledger environment shared by the registry components.

Provides:
- Caller identity and the logical block clock supplied to every call
- A write-once authority slot
- An append-only log of fee transfers the ledger should execute
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

DEFAULT_BURN_ADDRESS = "SP000000000000000000002Q6VF78"
DEFAULT_CALLER = "ST1TEST"


# =============================================================================
# Fee Transfers
# =============================================================================


@dataclass(frozen=True)
class FeeTransfer:
    """A transfer of ``amount`` from ``sender`` to ``recipient`` that should occur."""

    amount: int
    sender: str
    recipient: str
    block_height: int = 0
    memo: str | None = None


class TransferLog:
    """Append-only record of fee transfers, in commit order."""

    def __init__(self, transfers: list[FeeTransfer] | None = None) -> None:
        self._transfers: list[FeeTransfer] = list(transfers or [])

    def record(self, transfer: FeeTransfer) -> None:
        self._transfers.append(transfer)

    def total_to(self, recipient: str) -> int:
        """Sum of all amounts recorded towards ``recipient``."""
        return sum(t.amount for t in self._transfers if t.recipient == recipient)

    def __iter__(self) -> Iterator[FeeTransfer]:
        return iter(self._transfers)

    def __len__(self) -> int:
        return len(self._transfers)

    def __getitem__(self, index: int) -> FeeTransfer:
        return self._transfers[index]


# =============================================================================
# Authority Slot
# =============================================================================


@dataclass
class AuthoritySlot:
    """Once-settable authority principal.

    ``present`` is tracked separately from ``principal`` so an installed
    authority can never be silently overwritten.
    """

    burn_address: str = DEFAULT_BURN_ADDRESS
    present: bool = False
    principal: str | None = None

    def can_install(self, principal: str) -> bool:
        """Check whether ``principal`` would be accepted by ``install``."""
        return not self.present and principal != self.burn_address

    def install(self, principal: str) -> bool:
        """Install the authority. Returns False if rejected."""
        if not self.can_install(principal):
            return False
        self.principal = principal
        self.present = True
        return True

    def is_authority(self, principal: str) -> bool:
        return self.present and self.principal == principal


# =============================================================================
# Ledger Environment
# =============================================================================


@dataclass
class LedgerEnvironment:
    """Caller identity and block clock for the currently executing call.

    The surrounding runtime serializes calls and updates ``caller`` and
    ``block_height`` between them. Registries only read these values.
    """

    caller: str = DEFAULT_CALLER
    block_height: int = 0
    transfers: TransferLog = field(default_factory=TransferLog)

    @contextmanager
    def as_caller(self, principal: str) -> Iterator["LedgerEnvironment"]:
        """Temporarily execute calls as ``principal``.

        Usage:
            with env.as_caller("ST3OTHER"):
                registry.close_tender(0)
        """
        previous = self.caller
        self.caller = principal
        try:
            yield self
        finally:
            self.caller = previous

    def advance(self, blocks: int = 1) -> int:
        """Move the block clock forward and return the new height."""
        if blocks < 0:
            raise ValueError(f"Block clock cannot move backwards (got {blocks})")
        self.block_height += blocks
        return self.block_height

    def charge(self, amount: int, recipient: str, memo: str | None = None) -> FeeTransfer:
        """Record a fee transfer from the current caller to ``recipient``."""
        transfer = FeeTransfer(
            amount=amount,
            sender=self.caller,
            recipient=recipient,
            block_height=self.block_height,
            memo=memo,
        )
        self.transfers.record(transfer)
        return transfer
