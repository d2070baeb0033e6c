"""Repositories wrapping single-statement asyncpg queries."""
