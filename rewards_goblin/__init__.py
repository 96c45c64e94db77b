"""
Rewards Goblin: gamification achievements for search activity.

Consumes reward events from the rewards queue, validates the originating
wallet (Arweave, EVM or Solana), and awards achievements by messaging the
cheese-mint collection process on AO. Modular architecture with clear
separation between wallet validation, ledger client, achievements service,
queue worker, and API server.
"""

__version__ = "0.1.0"
