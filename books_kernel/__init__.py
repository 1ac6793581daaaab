"""
Books Kernel - ledger consistency core

Double-entry bookkeeping for small-business documents with:
- Balanced, single-use ledger postings
- Exact inverse reversal of posted documents
- Invoice and party outstanding-balance reconciliation
- Explicit, immutable accounting settings per operation
"""

__version__ = "0.1.0"
