"""asyncpg boundary: pools, scoped handles, query helpers and fault mapping.

Submodules are imported directly (``pgspine.db.pool``, ``pgspine.db.faults``)
so that the resilience layer can depend on the fault mapping alone.
"""
