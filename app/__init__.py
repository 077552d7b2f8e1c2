"""
CEDEARs Manager: commission and custody cost service.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters) with domain-driven design.

Bounded contexts:
    - commissions: Operation commissions, custody fees, break-even
      analysis, broker catalog, trade and custody fee ledgers.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, orchestration.
    - infrastructure: SQLAlchemy adapters implementing domain ports.
    - interfaces: FastAPI routers, Pydantic schemas.
    - jobs: Background scheduler for the monthly custody fee.
    - shared: Cross-cutting concerns (errors, security, logging).
"""
