"""Relational persistence: models, sessions, repositories."""
