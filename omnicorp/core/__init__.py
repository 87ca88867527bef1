"""Simulation core (ledger, catalogs, production, prestige, narrative, task timer).

Kept free of FastAPI and Redis concerns so it can be reused by the API, the clock, and tests.
"""
