"""
Engine configuration.
"""

import os
import logging
from dataclasses import dataclass

from solders.pubkey import Pubkey

from .core import PAYMENT_RECORD_SIZE, sha256

log = logging.getLogger(__name__)

# Program identity used when ETOMIC_PROGRAM_ID is unset. Engine-owned
# accounts and vault derivations are bound to it.
DEFAULT_PROGRAM_ID = Pubkey.from_bytes(sha256(b"etomic_swap"))


@dataclass
class EngineConfig:
    """Swap engine configuration."""
    program_id: Pubkey = DEFAULT_PROGRAM_ID

    # Bytes allocated for a payment record
    record_size: int = PAYMENT_RECORD_SIZE

    log_level: str = "INFO"

    def __post_init__(self):
        if self.record_size < PAYMENT_RECORD_SIZE:
            raise ValueError(
                f"record_size {self.record_size} < minimum {PAYMENT_RECORD_SIZE}"
            )

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build config from ETOMIC_* environment variables."""
        program_id = os.environ.get("ETOMIC_PROGRAM_ID")
        record_size = int(os.environ.get("ETOMIC_RECORD_SIZE", PAYMENT_RECORD_SIZE))
        log_level = os.environ.get("ETOMIC_LOG_LEVEL", "INFO").upper()

        config = cls(
            program_id=Pubkey.from_string(program_id) if program_id else DEFAULT_PROGRAM_ID,
            record_size=record_size,
            log_level=log_level,
        )
        log.debug(f"Loaded config: program_id={config.program_id}, "
                  f"record_size={config.record_size}")
        return config
