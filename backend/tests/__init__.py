"""
pytest suite for the Jersey Order backend.

Test categories:
- unit: validators, services and middleware with mocked transports
- api: full FastAPI app over in-memory SQLite
- integration: schema constraints hit directly through the ORM
"""
