"""
Service layer abstraction.

Each service encapsulates business logic for a domain and talks to the
database directly, so API handlers stay thin.
"""
