"""Database session management and storage adapters."""
