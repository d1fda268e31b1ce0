"""Services Layer — ledger engines and catalog glue (the imperative shell).

Invariants:
    - Business rules come from core/; services load, lock, write, and log
    - Every ledger mutation runs inside one DatabaseSessionManager.transaction()

Design Decisions:
    - Engines are classes holding their collaborators; catalog helpers are plain functions
      over the request session
"""
