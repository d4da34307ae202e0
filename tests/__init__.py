"""
Failover Monitor Test Suite.

This package contains:
- unit/: Unit tests (temporary SQLite databases, no services)
- integration/: Concurrency tests against a shared database file
"""
