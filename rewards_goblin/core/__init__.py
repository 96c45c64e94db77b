"""
Core utilities: shared error taxonomy and cross-cutting concerns.

Used across wallet validation, ledger client, achievements service,
rewards worker and API server.
"""
