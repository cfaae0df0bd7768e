"""Service layer for business logic.

Services encapsulate all business logic, keeping routes thin and focused
on HTTP handling.

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Repositories (Database)
                                               -> Rendering (SVG/PNG/JPEG)

Services should:
- Contain all business rules and validation
- Orchestrate calls to repositories and renderers
- Raise domain exceptions that routes map to status codes
- Return Pydantic response schemas (never ORM models)

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details
"""
