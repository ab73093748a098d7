"""
Ledger boundary.

The engine never touches balances, storage or the clock directly. Every
operation receives a LedgerView: a capability object scoped to one
transaction, exposing the caller, the two vault accounts the caller named,
record storage, value movement and the current time.
"""

from dataclasses import dataclass
from typing import ContextManager, Protocol, Tuple

from solders.pubkey import Pubkey

# Owner of plain key-less accounts (the funds vault must stay one)
SYSTEM_PROGRAM_ID = Pubkey.default()


class LedgerError(Exception):
    """Failure raised by the ledger itself, not by swap validation."""


class AccountNotFound(LedgerError):
    pass


class AccountAlreadyInUse(LedgerError):
    pass


class InsufficientFunds(LedgerError):
    pass


@dataclass
class AccountMeta:
    """Per-transaction view of one account."""
    pubkey: Pubkey
    is_signer: bool = False
    is_writable: bool = False
    owner: Pubkey = SYSTEM_PROGRAM_ID


@dataclass(frozen=True)
class ValueMovement:
    """A transfer the ledger must execute together with the record write."""
    source: Pubkey
    destination: Pubkey
    amount: int
    asset_class: Pubkey

    def to_dict(self) -> dict:
        return {
            "source": str(self.source),
            "destination": str(self.destination),
            "amount": self.amount,
            "asset_class": str(self.asset_class),
        }


class LedgerView(Protocol):
    """What the engine consumes from its host ledger."""

    def caller_identity(self) -> Pubkey:
        ...

    def swap_vaults(self) -> Tuple[Pubkey, Pubkey]:
        """(funds_vault, data_vault) as supplied by the caller."""
        ...

    def account(self, pubkey: Pubkey) -> AccountMeta:
        ...

    def verify_role(self, account: Pubkey, signer: bool = False,
                    writable: bool = False, owned_by_engine: bool = False) -> bool:
        """True if the account has every role requested."""
        ...

    def read_record(self, vault: Pubkey) -> bytes:
        ...

    def write_record(self, vault: Pubkey, data: bytes) -> None:
        ...

    def allocate_record(self, payer: Pubkey, vault: Pubkey, size: int,
                        funding_amount: int) -> None:
        """Create engine-owned storage; fails if the vault is already in use."""
        ...

    def move_value(self, source: Pubkey, destination: Pubkey, amount: int,
                   asset_class: Pubkey) -> None:
        ...

    def current_time(self) -> int:
        ...

    def atomic(self) -> ContextManager[None]:
        """All-or-nothing scope for record writes and value movements."""
        ...
