"""
Persistence adapters.

These modules encapsulate how accounts and API keys are stored and retrieved.
Services depend on the repository rather than touching SQLAlchemy sessions.
"""
