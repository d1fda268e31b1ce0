"""Agent Market Package — credit ledger backend for an AI agent marketplace.

Invariants:
    - core/ is pure; services/, infrastructure/, api/ and db/ form the imperative shell

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
