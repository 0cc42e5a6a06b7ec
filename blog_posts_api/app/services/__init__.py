"""
Service layer abstraction.

Services own persisted data and the business rules that apply to it.
API handlers depend on the abstract store so the SQLite implementation
can be swapped for the in-memory one without changing them.
"""
