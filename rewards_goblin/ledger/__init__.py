"""
AO ledger client package.

Talks to the cheese-mint collection process through an AO compute unit
(dry runs, message results) and messenger unit (signed messages), with
bounded retry and exponential backoff on server errors.
"""

from rewards_goblin.ledger.client import AOClient, SendResult
from rewards_goblin.ledger.models import LedgerState
from rewards_goblin.ledger.signer import ArweaveSigner, load_signer

__all__ = ["AOClient", "ArweaveSigner", "LedgerState", "SendResult", "load_signer"]
