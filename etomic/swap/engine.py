"""
Swap Engine.

Executes the four swap operations as guarded transitions over a
PaymentRecord stored in the data vault:

    UNINITIALIZED --Payment--> SENT --ReceiverSpend--> RECEIVER_SPENT
                                    --SenderRefund---> SENDER_REFUNDED

ReceiverSpend and SenderRefund are mutually exclusive: whichever is applied
first wins, the other then fails with InvalidPaymentState.

The engine holds no mutable state. Every call validates fully before any
effect, then applies the record write and value movements inside
ledger.atomic() so a failing movement leaves nothing behind.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, assert_never

from solders.pubkey import Pubkey

from ..config import EngineConfig
from ..core import NATIVE_ASSET, PaymentState, U64_MAX, is_native
from ..errors import (
    SwapError, AmountZero, InvalidAmount, InvalidOwner, InvalidPaymentHash,
    InvalidPaymentState, ReceiverSetToDefault, SenderAccountNotSigner,
    SenderAccountNotWritable, SwapAccountNotFound, VaultDataNotWritable,
    VaultNotWritable, VaultProgramNotOwner, WaitForLockTime,
)
from ..htlc.commitment import payment_commitment
from ..htlc.instruction import (
    Payment, TokenPayment, ReceiverSpend, SenderRefund, SwapInstruction,
    decode_instruction,
)
from ..htlc.payment import PaymentRecord, load_record, store_record
from ..htlc.vault import VaultDeriver
from ..ledger.base import LedgerError, LedgerView, ValueMovement, SYSTEM_PROGRAM_ID

log = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """
    Outcome of a successful engine call.

    movements lists every value transfer the call made, in order. For
    Payment that includes the storage funding paid into the data vault.
    """
    operation: str
    data_vault: Pubkey
    record: PaymentRecord
    movements: List[ValueMovement] = field(default_factory=list)
    # Set by ReceiverSpend: counterpart chains watch for it
    disclosed_secret: Optional[bytes] = None

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "data_vault": str(self.data_vault),
            "commitment": self.record.commitment.hex(),
            "lock_time": self.record.lock_time,
            "state": self.record.state.name,
            "movements": [m.to_dict() for m in self.movements],
            "disclosed_secret": self.disclosed_secret.hex() if self.disclosed_secret else None,
        }


class SwapEngine:
    """
    HTLC swap state machine.

    Usage:
        engine = SwapEngine(EngineConfig())
        result = engine.process(instruction_bytes, ledger_view)
    """

    def __init__(self, config: EngineConfig = None):
        self.config = config or EngineConfig()
        self.vaults = VaultDeriver(self.config.program_id)

    # =========================================================================
    # Entry points
    # =========================================================================

    def process(self, data: bytes, ledger: LedgerView) -> ExecutionResult:
        """Decode an instruction and execute it."""
        return self.execute(decode_instruction(data), ledger)

    def execute(self, instruction: SwapInstruction, ledger: LedgerView) -> ExecutionResult:
        name = type(instruction).__name__
        log.info(f"Processing {name}")
        try:
            if isinstance(instruction, (Payment, TokenPayment)):
                return self._payment(instruction, ledger)
            elif isinstance(instruction, ReceiverSpend):
                return self._receiver_spend(instruction, ledger)
            elif isinstance(instruction, SenderRefund):
                return self._sender_refund(instruction, ledger)
            else:
                assert_never(instruction)
        except SwapError as e:
            log.warning(f"{name} rejected: {e}")
            raise

    # =========================================================================
    # Operations
    # =========================================================================

    def _payment(self, ix, ledger: LedgerView) -> ExecutionResult:
        if ix.receiver == Pubkey.default():
            raise ReceiverSetToDefault("receiver is the default identity")
        if ix.amount == 0:
            raise AmountZero("payment amount is zero")

        sender = ledger.caller_identity()
        funds_vault, data_vault = ledger.swap_vaults()
        self._validate_accounts(ledger, sender, funds_vault, data_vault)
        self.vaults.verify_pair(
            funds_vault, data_vault, ix.lock_time, ix.secret_hash,
            ix.vault_bump, ix.vault_data_bump,
        )

        commitment = payment_commitment(
            ix.receiver, sender, ix.secret_hash, ix.asset_class, ix.amount
        )
        record = PaymentRecord(commitment=commitment, lock_time=ix.lock_time,
                               state=PaymentState.SENT)
        movements = self._payment_movements(ix, sender, funds_vault)

        with ledger.atomic():
            ledger.allocate_record(sender, data_vault, self.config.record_size,
                                   ix.funding_amount)
            self._store(ledger, data_vault, record)
            self._move(ledger, movements)

        if ix.funding_amount:
            # Moved by allocate_record; reported ahead of the escrow
            movements.insert(0, ValueMovement(sender, data_vault, ix.funding_amount,
                                              NATIVE_ASSET))

        log.info(f"Payment Event: vault={data_vault}, "
                 f"commitment={commitment.hex()[:16]}..., lock_time={ix.lock_time}, "
                 f"amount={ix.amount}")
        return ExecutionResult("Payment", data_vault, record, movements)

    def _payment_movements(self, ix, sender: Pubkey,
                           funds_vault: Pubkey) -> List[ValueMovement]:
        if is_native(ix.asset_class):
            total = ix.amount + ix.funding_amount
            if total > U64_MAX:
                raise InvalidAmount(f"amount + funding overflows u64: {total}")
            return [ValueMovement(sender, funds_vault, total, NATIVE_ASSET)]

        movements = []
        if ix.funding_amount:
            movements.append(ValueMovement(sender, funds_vault, ix.funding_amount, NATIVE_ASSET))
        movements.append(ValueMovement(sender, funds_vault, ix.amount, ix.asset_class))
        return movements

    def _receiver_spend(self, ix: ReceiverSpend, ledger: LedgerView) -> ExecutionResult:
        receiver = ledger.caller_identity()
        funds_vault, data_vault = ledger.swap_vaults()
        self._validate_accounts(ledger, receiver, funds_vault, data_vault)
        self._require_engine_owned(ledger, data_vault)

        secret_hash = ix.secret_hash
        commitment = payment_commitment(
            receiver, ix.sender, secret_hash, ix.asset_class, ix.amount
        )
        record = self._load(ledger, data_vault)
        self._require_claimable(record, commitment)
        # Vaults must derive from the disclosed secret's hash
        self.vaults.verify_pair(
            funds_vault, data_vault, ix.lock_time, secret_hash,
            ix.vault_bump, ix.vault_data_bump,
        )

        spent = record.with_state(PaymentState.RECEIVER_SPENT)
        movements = [ValueMovement(funds_vault, receiver, ix.amount, ix.asset_class)]

        with ledger.atomic():
            self._store(ledger, data_vault, spent)
            self._move(ledger, movements)

        log.info(f"Swap account: {data_vault}, Secret: {ix.secret.hex()}")
        return ExecutionResult("ReceiverSpend", data_vault, spent, movements,
                               disclosed_secret=ix.secret)

    def _sender_refund(self, ix: SenderRefund, ledger: LedgerView) -> ExecutionResult:
        sender = ledger.caller_identity()
        funds_vault, data_vault = ledger.swap_vaults()
        self._validate_accounts(ledger, sender, funds_vault, data_vault)
        self._require_engine_owned(ledger, data_vault)

        commitment = payment_commitment(
            ix.receiver, sender, ix.secret_hash, ix.asset_class, ix.amount
        )
        record = self._load(ledger, data_vault)
        # Commitment, state and vaults are checked before the clock
        self._require_claimable(record, commitment)
        self.vaults.verify_pair(
            funds_vault, data_vault, ix.lock_time, ix.secret_hash,
            ix.vault_bump, ix.vault_data_bump,
        )

        now = ledger.current_time()
        if now < record.lock_time:
            raise WaitForLockTime(
                f"refund available at {record.lock_time}, now {now}"
            )

        refunded = record.with_state(PaymentState.SENDER_REFUNDED)
        movements = [ValueMovement(funds_vault, sender, ix.amount, ix.asset_class)]

        with ledger.atomic():
            self._store(ledger, data_vault, refunded)
            self._move(ledger, movements)

        log.info(f"Swap account: {data_vault} refunded to {sender}")
        return ExecutionResult("SenderRefund", data_vault, refunded, movements)

    # =========================================================================
    # Guards
    # =========================================================================

    def _validate_accounts(self, ledger: LedgerView, caller: Pubkey,
                           funds_vault: Pubkey, data_vault: Pubkey) -> None:
        if not ledger.verify_role(caller, signer=True):
            raise SenderAccountNotSigner(f"{caller} did not sign")
        if not ledger.verify_role(caller, writable=True):
            raise SenderAccountNotWritable(f"{caller} is not writable")
        if not ledger.verify_role(data_vault, writable=True):
            raise VaultDataNotWritable(f"data vault {data_vault} is not writable")
        if not ledger.verify_role(funds_vault, writable=True):
            raise VaultNotWritable(f"funds vault {funds_vault} is not writable")
        if ledger.account(funds_vault).owner != SYSTEM_PROGRAM_ID:
            raise VaultProgramNotOwner(f"funds vault {funds_vault} must be a system account")

    def _require_engine_owned(self, ledger: LedgerView, data_vault: Pubkey) -> None:
        if not ledger.verify_role(data_vault, owned_by_engine=True):
            raise InvalidOwner(f"data vault {data_vault} is not owned by the engine")

    @staticmethod
    def _require_claimable(record: PaymentRecord, commitment: bytes) -> None:
        if record.commitment != commitment:
            log.debug(f"stored commitment {record.commitment.hex()}, "
                      f"recomputed {commitment.hex()}")
            raise InvalidPaymentHash("commitment does not match payment record")
        if record.state != PaymentState.SENT:
            raise InvalidPaymentState(f"payment is {record.state.name}, expected SENT")

    # =========================================================================
    # Ledger effects
    # =========================================================================

    @staticmethod
    def _load(ledger: LedgerView, data_vault: Pubkey) -> PaymentRecord:
        try:
            data = ledger.read_record(data_vault)
        except LedgerError as e:
            raise SwapAccountNotFound(str(e)) from e
        return load_record(data)

    @staticmethod
    def _store(ledger: LedgerView, data_vault: Pubkey, record: PaymentRecord) -> None:
        buffer = bytearray(ledger.read_record(data_vault))
        store_record(buffer, record)
        ledger.write_record(data_vault, bytes(buffer))

    @staticmethod
    def _move(ledger: LedgerView, movements: List[ValueMovement]) -> None:
        for m in movements:
            ledger.move_value(m.source, m.destination, m.amount, m.asset_class)
