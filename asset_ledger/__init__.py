"""
Asset Ledger - world-state asset contract

A chaincode-style asset manager over a key-value world state with:
- Idempotent seed initialization
- Upsert creation with a CarCreated event notification
- Ordered full-range queries with fail-fast decoding
- Scoped range-scan cursors released on every exit path
"""

__version__ = "0.1.0"
