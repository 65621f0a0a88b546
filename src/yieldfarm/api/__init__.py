# src/yieldfarm/api/__init__.py
"""HTTP simulator: FastAPI routes over an in-memory farm, token ledgers and manual clock."""
