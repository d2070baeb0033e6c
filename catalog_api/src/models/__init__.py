"""Data models for the catalog service.

This package contains Pydantic models for request/response validation and
the SQLAlchemy table definitions the schema is created from.
"""
