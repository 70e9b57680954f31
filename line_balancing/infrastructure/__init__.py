"""
Infrastructure Layer

Concrete implementations of the ports defined in the domain layer.

Components:
- database/: SQLModel tables, unit of work and repository implementations
- events/: Event handlers bridging domain events to observability
"""
