"""Database Layer — declarative Base and unit of work.

Invariants:
    - Single async engine per process (initialized via init_db)
    - All sessions are async (AsyncSession)
    - Multi-row writes go through unit_of_work()

Design Decisions:
    - asyncpg driver for PostgreSQL (native async, no thread pool overhead)
"""
