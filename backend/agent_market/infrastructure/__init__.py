"""Infrastructure Layer — database sessions, payment processors, logging.

Invariants:
    - Infrastructure never imports core/ rules, only core/errors and core/money
    - All database failures mapped to DatabaseError before leaving this layer
"""
