"""
Registry component base class.

Implements the pattern every store shares: a once-settable authority
principal, authority-gated threshold setters, and rejection logging.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, ClassVar, Protocol

from procureledger.core.ledger import AuthoritySlot, LedgerEnvironment
from procureledger.core.logging import ContextualLogger, get_contextual_logger
from procureledger.core.result import Result


class AuthorityStore(Protocol):
    """Anything holding an authority slot."""

    authority: AuthoritySlot


class RegistryComponent(ABC):
    """Base class for the tender, bidder and audit registries.

    Subclasses own a store object and operate on it in place. Every
    operation validates fully before its first mutation.
    """

    # Error code used when the burn address is offered as authority
    burn_principal_code: ClassVar[int | None] = None

    def __init__(
        self,
        store: AuthorityStore,
        env: LedgerEnvironment | None = None,
        strict_authority: bool = False,
    ) -> None:
        """Initialize the component.

        Args:
            store: State owned by this component
            env: Ambient caller/clock; a fresh environment if omitted
            strict_authority: Require the caller to be the installed authority
                for gated operations, instead of only requiring one is installed
        """
        self.store = store
        self.env = env if env is not None else LedgerEnvironment()
        self.strict_authority = strict_authority
        self._log = get_contextual_logger(f"registry.{self.component}", component=self.component)

    @property
    @abstractmethod
    def component(self) -> str:
        """Component identifier used in logs."""
        pass

    @property
    @abstractmethod
    def errors(self) -> type[IntEnum]:
        """Error code enum for this component."""
        pass

    @property
    def log(self) -> ContextualLogger:
        """Logger bound to the current caller and block height."""
        return self._log.with_context(caller=self.env.caller, block_height=self.env.block_height)

    # -------------------------------------------------------------------------
    # Authority
    # -------------------------------------------------------------------------

    @property
    def authority(self) -> AuthoritySlot:
        return self.store.authority

    def get_authority_principal(self) -> str | None:
        """Installed authority principal, or None."""
        return self.authority.principal if self.authority.present else None

    def set_authority_principal(self, principal: str) -> Result[bool]:
        """Install the authority principal. Succeeds at most once."""
        if principal == self.authority.burn_address:
            code = self.burn_principal_code or self.errors.NOT_AUTHORIZED
            return self._reject("set_authority_principal", code)
        if self.authority.present:
            return self._reject("set_authority_principal", self.errors.NOT_AUTHORIZED)

        self.authority.install(principal)
        self.log.info("Authority principal installed: %s", principal)
        return Result.success(True)

    def _authorized(self) -> bool:
        """Check the authority gate for the current caller."""
        if not self.authority.present:
            return False
        if self.strict_authority:
            return self.authority.principal == self.env.caller
        return True

    def _set_threshold(self, operation: str, attribute: str, value: int, minimum: int) -> Result[bool]:
        """Authority-gated update of a numeric store setting."""
        if value < minimum:
            return self._reject(operation, self.errors.INVALID_THRESHOLD)
        if not self._authorized():
            return self._reject(operation, self.errors.NOT_AUTHORIZED)

        old_value = getattr(self.store, attribute)
        setattr(self.store, attribute, value)
        self.log.info("%s changed from %s to %s", attribute, old_value, value)
        return Result.success(True)

    # -------------------------------------------------------------------------
    # Fees and rejections
    # -------------------------------------------------------------------------

    def _charge_fee(self, amount: int, memo: str) -> None:
        """Record a fee transfer to the authority, if one is installed."""
        if self.authority.present and self.authority.principal is not None:
            self.env.charge(amount, self.authority.principal, memo=memo)

    def _reject(self, operation: str, code: Any) -> Result[Any]:
        """Log a rejected call and build its failure result."""
        name = code.name if isinstance(code, IntEnum) else str(code)
        self.log.debug(
            "%s rejected: %s",
            operation,
            name,
            extra={"operation": operation, "code": int(code)},
        )
        return Result.failure(code)
