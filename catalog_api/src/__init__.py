"""FastAPI service for the book catalog.

This package provides REST API endpoints for managing book records and
registering and authenticating users.
"""

__version__ = "1.0.0"
