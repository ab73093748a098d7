"""
Error taxonomy for the etomic swap engine.

Every failure the engine reports carries a stable numeric code so a ledger
can surface it to its own caller unchanged. Codes 601-615 are the historic
on-chain values; newer checks continue from 616.

Groups:
- DecodingError:     wrong total length, unparseable field, unknown tag
- PreconditionError: default receiver, zero amount, account roles, vaults
- CommitmentError:   recomputed commitment differs from the stored record
- LifecycleError:    record is not in the SENT state
- TimingError:       refund requested before the lock time (re-triable)
- StorageError:      record storage missing or too small
"""

from typing import Dict, Type

# Historic codes
INVALID_INPUT_LENGTH = 601
INVALID_SECRET_HASH = 602
INVALID_LOCK_TIME = 603
INVALID_AMOUNT = 604
INVALID_RECEIVER_PUBKEY = 605
INVALID_TOKEN_PROGRAM = 606
INVALID_SECRET = 607
INVALID_SENDER_PUBKEY = 608
INVALID_ATOMIC_SWAP_INSTRUCTION = 609
RECEIVER_SET_TO_DEFAULT = 610
AMOUNT_ZERO = 611
SWAP_ACCOUNT_NOT_FOUND = 612
INVALID_PAYMENT_HASH = 613
INVALID_PAYMENT_STATE = 614
NOT_SUPPORTED = 615

# Account roles, ownership, timing and derivation
INVALID_OWNER = 616
SENDER_ACCOUNT_NOT_SIGNER = 617
SENDER_ACCOUNT_NOT_WRITABLE = 618
VAULT_PDA_DATA_NOT_WRITABLE = 619
VAULT_PDA_NOT_WRITABLE = 620
VAULT_PDA_PROGRAM_NOT_OWNER = 621
WAIT_FOR_LOCK_TIME = 622
INVALID_VAULT_DERIVATION = 623
INVALID_ACCOUNT_DATA = 624
ACCOUNT_DATA_TOO_SMALL = 625


class SwapError(Exception):
    """Base class for every error the engine reports."""
    code: int = 0
    retryable: bool = False

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class DecodingError(SwapError):
    pass


class PreconditionError(SwapError):
    pass


class CommitmentError(SwapError):
    pass


class LifecycleError(SwapError):
    pass


class TimingError(SwapError):
    retryable = True


class StorageError(SwapError):
    pass


# =============================================================================
# Decoding
# =============================================================================

class InvalidInputLength(DecodingError):
    code = INVALID_INPUT_LENGTH


class InvalidSecretHash(DecodingError):
    code = INVALID_SECRET_HASH


class InvalidLockTime(DecodingError):
    code = INVALID_LOCK_TIME


class InvalidAmount(DecodingError):
    code = INVALID_AMOUNT


class InvalidReceiverPubkey(DecodingError):
    code = INVALID_RECEIVER_PUBKEY


class InvalidTokenProgram(DecodingError):
    code = INVALID_TOKEN_PROGRAM


class InvalidSecret(DecodingError):
    code = INVALID_SECRET


class InvalidSenderPubkey(DecodingError):
    code = INVALID_SENDER_PUBKEY


class InvalidInstruction(DecodingError):
    code = INVALID_ATOMIC_SWAP_INSTRUCTION


class InvalidAccountData(DecodingError):
    code = INVALID_ACCOUNT_DATA


# =============================================================================
# Preconditions
# =============================================================================

class ReceiverSetToDefault(PreconditionError):
    code = RECEIVER_SET_TO_DEFAULT


class AmountZero(PreconditionError):
    code = AMOUNT_ZERO


class NotSupported(PreconditionError):
    code = NOT_SUPPORTED


class InvalidOwner(PreconditionError):
    code = INVALID_OWNER


class SenderAccountNotSigner(PreconditionError):
    code = SENDER_ACCOUNT_NOT_SIGNER


class SenderAccountNotWritable(PreconditionError):
    code = SENDER_ACCOUNT_NOT_WRITABLE


class VaultDataNotWritable(PreconditionError):
    code = VAULT_PDA_DATA_NOT_WRITABLE


class VaultNotWritable(PreconditionError):
    code = VAULT_PDA_NOT_WRITABLE


class VaultProgramNotOwner(PreconditionError):
    code = VAULT_PDA_PROGRAM_NOT_OWNER


class InvalidVaultDerivation(PreconditionError):
    code = INVALID_VAULT_DERIVATION


# =============================================================================
# Commitment / lifecycle / timing / storage
# =============================================================================

class InvalidPaymentHash(CommitmentError):
    code = INVALID_PAYMENT_HASH


class InvalidPaymentState(LifecycleError):
    code = INVALID_PAYMENT_STATE


class WaitForLockTime(TimingError):
    code = WAIT_FOR_LOCK_TIME


class SwapAccountNotFound(StorageError):
    code = SWAP_ACCOUNT_NOT_FOUND


class AccountDataTooSmall(StorageError):
    code = ACCOUNT_DATA_TOO_SMALL


def _collect(base: Type[SwapError]) -> Dict[int, Type[SwapError]]:
    found = {}
    for cls in base.__subclasses__():
        if cls.code:
            found[cls.code] = cls
        found.update(_collect(cls))
    return found


ERRORS_BY_CODE: Dict[int, Type[SwapError]] = _collect(SwapError)


def error_for_code(code: int) -> Type[SwapError]:
    """Map a numeric code reported by the engine back to its error class."""
    try:
        return ERRORS_BY_CODE[code]
    except KeyError:
        raise ValueError(f"Unknown swap error code: {code}") from None
