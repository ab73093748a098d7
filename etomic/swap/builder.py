"""
Caller-side swap tooling.

The engine only verifies vault bumps; finding them is the caller's job.
SwapBuilder searches the bumps with Pubkey.find_program_address and builds
the matching instructions, so a client can go from swap parameters to
instruction bytes plus the vault accounts to pass alongside them.

Flow (sender side):
1. secret, secret_hash = generate_secret()
2. ix, vaults = builder.payment(secret_hash, lock_time, amount, receiver)
3. Submit encode_instruction(ix) with (sender, vaults.data_vault, vaults.funds_vault)
4. Receiver later submits builder.receiver_spend(secret, ...) - revealing the secret
5. Or after lock_time the sender submits builder.sender_refund(secret_hash, ...)
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from solders.pubkey import Pubkey

from ..config import EngineConfig
from ..core import NATIVE_ASSET, VAULT_SEED, VAULT_DATA_SEED, is_native, sha256
from ..htlc.instruction import (
    Payment, TokenPayment, ReceiverSpend, SenderRefund, SwapInstruction,
)
from ..htlc.vault import vault_seeds

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapVaults:
    """Vault accounts and bumps for one (lock_time, secret_hash) pair."""
    funds_vault: Pubkey
    vault_bump: int
    data_vault: Pubkey
    vault_data_bump: int

    def to_dict(self) -> dict:
        return {
            "funds_vault": str(self.funds_vault),
            "vault_bump": self.vault_bump,
            "data_vault": str(self.data_vault),
            "vault_data_bump": self.vault_data_bump,
        }


def find_vaults(program_id: Pubkey, lock_time: int, secret_hash: bytes) -> SwapVaults:
    """Search the canonical (highest valid) bump for both vaults."""
    funds_vault, vault_bump = Pubkey.find_program_address(
        vault_seeds(VAULT_SEED, lock_time, secret_hash), program_id
    )
    data_vault, vault_data_bump = Pubkey.find_program_address(
        vault_seeds(VAULT_DATA_SEED, lock_time, secret_hash), program_id
    )
    log.debug(f"Vaults for {secret_hash.hex()[:16]}...: funds={funds_vault} "
              f"(bump {vault_bump}), data={data_vault} (bump {vault_data_bump})")
    return SwapVaults(funds_vault, vault_bump, data_vault, vault_data_bump)


class SwapBuilder:
    """Builds swap instructions with their vault accounts."""

    def __init__(self, config: EngineConfig = None):
        self.config = config or EngineConfig()

    def vaults(self, lock_time: int, secret_hash: bytes) -> SwapVaults:
        return find_vaults(self.config.program_id, lock_time, secret_hash)

    def payment(self, secret_hash: bytes, lock_time: int, amount: int,
                receiver: Pubkey, funding_amount: int = 0,
                asset_class: Pubkey = NATIVE_ASSET) -> Tuple[SwapInstruction, SwapVaults]:
        """Escrow instruction: Payment for native value, TokenPayment otherwise."""
        vaults = self.vaults(lock_time, secret_hash)
        if is_native(asset_class):
            ix = Payment(
                secret_hash=secret_hash,
                lock_time=lock_time,
                amount=amount,
                receiver=receiver,
                funding_amount=funding_amount,
                vault_bump=vaults.vault_bump,
                vault_data_bump=vaults.vault_data_bump,
            )
        else:
            ix = TokenPayment(
                secret_hash=secret_hash,
                lock_time=lock_time,
                amount=amount,
                receiver=receiver,
                asset_class=asset_class,
                funding_amount=funding_amount,
                vault_bump=vaults.vault_bump,
                vault_data_bump=vaults.vault_data_bump,
            )
        return ix, vaults

    def receiver_spend(self, secret: bytes, lock_time: int, amount: int,
                       sender: Pubkey,
                       asset_class: Pubkey = NATIVE_ASSET) -> Tuple[ReceiverSpend, SwapVaults]:
        vaults = self.vaults(lock_time, sha256(secret))
        ix = ReceiverSpend(
            secret=secret,
            lock_time=lock_time,
            amount=amount,
            sender=sender,
            asset_class=asset_class,
            vault_bump=vaults.vault_bump,
            vault_data_bump=vaults.vault_data_bump,
        )
        return ix, vaults

    def sender_refund(self, secret_hash: bytes, lock_time: int, amount: int,
                      receiver: Pubkey,
                      asset_class: Pubkey = NATIVE_ASSET) -> Tuple[SenderRefund, SwapVaults]:
        vaults = self.vaults(lock_time, secret_hash)
        ix = SenderRefund(
            secret_hash=secret_hash,
            lock_time=lock_time,
            amount=amount,
            receiver=receiver,
            asset_class=asset_class,
            vault_bump=vaults.vault_bump,
            vault_data_bump=vaults.vault_data_bump,
        )
        return ix, vaults
