"""
HTTP interface of the commissions bounded context.

Routers for commissions, custody, break-even and trades, their
Pydantic schemas and the dependency wiring that builds use cases.
"""
