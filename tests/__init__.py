"""
Guildhall test suite.

- tests/unit/         services, gate and ledger against per-test SQLite files
- tests/integration/  concurrency against PostgreSQL via testcontainers

Run ``pytest -m "not integration"`` for the fast tier.
"""
