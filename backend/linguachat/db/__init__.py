"""Database engine and session factory.

Imports are intentionally NOT eagerly loaded here so that importing the ORM
models never creates an engine. Use explicit imports:
``from linguachat.db.postgres import async_session_factory``.
"""
