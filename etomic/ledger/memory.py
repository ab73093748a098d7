"""
In-memory ledger.

A reference host for the swap engine: balances per (account, asset class),
engine-owned record storage, a settable clock, and transaction views that
carry per-call signer / writable flags. Writes inside LedgerView.atomic()
are rolled back if anything in the scope raises.
"""

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Tuple

from solders.pubkey import Pubkey

from ..core import NATIVE_ASSET
from .base import (
    AccountMeta, ValueMovement, SYSTEM_PROGRAM_ID,
    AccountNotFound, AccountAlreadyInUse, InsufficientFunds,
)

log = logging.getLogger(__name__)


class MemoryLedger:
    """Ledger state shared by all transaction views."""

    def __init__(self, program_id: Pubkey, now: int = 0):
        self.program_id = program_id
        self.now = now
        self.balances: Dict[Tuple[Pubkey, Pubkey], int] = {}
        self.storage: Dict[Pubkey, bytearray] = {}
        self.owners: Dict[Pubkey, Pubkey] = {}
        self.executed: List[ValueMovement] = []

    # -------------------------------------------------------------------------
    # Setup / inspection
    # -------------------------------------------------------------------------

    def fund(self, account: Pubkey, amount: int, asset_class: Pubkey = NATIVE_ASSET):
        key = (account, asset_class)
        self.balances[key] = self.balances.get(key, 0) + amount

    def balance(self, account: Pubkey, asset_class: Pubkey = NATIVE_ASSET) -> int:
        return self.balances.get((account, asset_class), 0)

    def owner_of(self, account: Pubkey) -> Pubkey:
        return self.owners.get(account, SYSTEM_PROGRAM_ID)

    def set_time(self, now: int):
        self.now = now

    def view(self, caller: Pubkey, funds_vault: Pubkey, data_vault: Pubkey,
             signer: bool = True, writable: bool = True,
             vaults_writable: bool = True) -> "MemoryLedgerView":
        """Open a transaction view for one engine call."""
        metas = {
            caller: AccountMeta(caller, is_signer=signer, is_writable=writable,
                                owner=self.owner_of(caller)),
            funds_vault: AccountMeta(funds_vault, is_writable=vaults_writable,
                                     owner=self.owner_of(funds_vault)),
            data_vault: AccountMeta(data_vault, is_writable=vaults_writable,
                                    owner=self.owner_of(data_vault)),
        }
        return MemoryLedgerView(self, caller, funds_vault, data_vault, metas)

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def _snapshot(self):
        return (
            dict(self.balances),
            {k: bytearray(v) for k, v in self.storage.items()},
            dict(self.owners),
            list(self.executed),
        )

    def _restore(self, snapshot):
        self.balances, self.storage, self.owners, self.executed = snapshot


class MemoryLedgerView:
    """LedgerView over a MemoryLedger for a single transaction."""

    def __init__(self, ledger: MemoryLedger, caller: Pubkey, funds_vault: Pubkey,
                 data_vault: Pubkey, metas: Dict[Pubkey, AccountMeta]):
        self.ledger = ledger
        self.caller = caller
        self.funds_vault = funds_vault
        self.data_vault = data_vault
        self.metas = metas

    def caller_identity(self) -> Pubkey:
        return self.caller

    def swap_vaults(self) -> Tuple[Pubkey, Pubkey]:
        return self.funds_vault, self.data_vault

    def account(self, pubkey: Pubkey) -> AccountMeta:
        meta = self.metas.get(pubkey)
        if meta is None:
            return AccountMeta(pubkey, owner=self.ledger.owner_of(pubkey))
        # Ownership can change inside the transaction (allocation)
        meta.owner = self.ledger.owner_of(pubkey)
        return meta

    def verify_role(self, account: Pubkey, signer: bool = False,
                    writable: bool = False, owned_by_engine: bool = False) -> bool:
        meta = self.account(account)
        if signer and not meta.is_signer:
            return False
        if writable and not meta.is_writable:
            return False
        if owned_by_engine and meta.owner != self.ledger.program_id:
            return False
        return True

    def read_record(self, vault: Pubkey) -> bytes:
        data = self.ledger.storage.get(vault)
        if data is None:
            raise AccountNotFound(f"no storage at {vault}")
        return bytes(data)

    def write_record(self, vault: Pubkey, data: bytes) -> None:
        if vault not in self.ledger.storage:
            raise AccountNotFound(f"no storage at {vault}")
        if self.ledger.owner_of(vault) != self.ledger.program_id:
            raise AccountNotFound(f"{vault} is not engine-owned storage")
        self.ledger.storage[vault] = bytearray(data)

    def allocate_record(self, payer: Pubkey, vault: Pubkey, size: int,
                        funding_amount: int) -> None:
        if vault in self.ledger.storage or self.ledger.balance(vault) > 0:
            raise AccountAlreadyInUse(f"{vault} already in use")
        self.move_value(payer, vault, funding_amount, NATIVE_ASSET)
        self.ledger.storage[vault] = bytearray(size)
        self.ledger.owners[vault] = self.ledger.program_id
        log.debug(f"Allocated {size} bytes at {vault}, funded {funding_amount}")

    def move_value(self, source: Pubkey, destination: Pubkey, amount: int,
                   asset_class: Pubkey) -> None:
        available = self.ledger.balance(source, asset_class)
        if available < amount:
            raise InsufficientFunds(
                f"{source} holds {available} of {asset_class}, needs {amount}"
            )
        self.ledger.balances[(source, asset_class)] = available - amount
        self.ledger.fund(destination, amount, asset_class)
        self.ledger.executed.append(ValueMovement(source, destination, amount, asset_class))

    def current_time(self) -> int:
        return self.ledger.now

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = self.ledger._snapshot()
        try:
            yield
        except BaseException:
            self.ledger._restore(snapshot)
            log.debug("Ledger transaction rolled back")
            raise
