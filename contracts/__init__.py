"""
Contracts module.

Contract records, the document version ledger, the approval state machine
and the HTTP surface built on top of them.
"""

__version__ = "1.0.0"
