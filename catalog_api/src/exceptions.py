"""Domain exceptions raised by repositories and services.

The API layer translates these into HTTP responses; none of them carry
transport details themselves.
"""


class CatalogError(Exception):
    """Base class for catalog errors."""


class BookNotFoundError(CatalogError):
    """No book row exists for the given ISBN."""

    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__(f"Book '{isbn}' not found")


class UsernameNotFoundError(CatalogError):
    """No user row exists for the given username."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"User '{username}' not found")


class DuplicateUsernameError(CatalogError):
    """A user row with this username already exists."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username '{username}' already exists")


class InvalidPasswordError(CatalogError):
    """The password cannot be hashed (e.g. it contains a NUL byte)."""

    def __init__(self, message: str = "Password contains unsupported characters"):
        super().__init__(message)


class BadCredentialsError(CatalogError):
    """Username/password pair was rejected.

    Raised for both unknown users and wrong passwords so callers cannot
    tell the two apart.
    """

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)
