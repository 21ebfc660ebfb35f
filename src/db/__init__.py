"""Progress store: SQLAlchemy models, sessions and repository."""
