"""
Application layer for the commissions bounded context.

Use cases coordinate domain calculators and ports to fulfill
business operations. No framework or infrastructure imports allowed.
"""
