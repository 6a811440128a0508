"""
High-level use cases for the facescan API.

Each service module orchestrates the repository and core adapters to
implement business rules (register, verify, reset password, manage API keys).
Routers call these services instead of touching the database directly.
"""
