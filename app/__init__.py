"""
Aurelius Analytics: portfolio and market analytics engine.

Application package root. A modular monolith using hexagonal
architecture (ports & adapters) with domain-driven design.

Bounded contexts:
    - analytics: Portfolio ledger, technical indicators, chart series,
      custom price/volume alerts.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, orchestration.
    - infrastructure: Adapters (market data, storage) implementing domain ports.
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (errors, security, logging).
"""
