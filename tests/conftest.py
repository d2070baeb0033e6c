"""
Shared fixtures for unit and contract tests.

The API is exercised through FastAPI's TestClient with the repository
factories replaced by in-memory fakes, so no PostgreSQL instance is needed.
The client is created without entering its context, which skips the
lifespan (pool creation, table creation and seeding).
"""

import os

os.environ["CATALOG_API_ENVIRONMENT"] = "development"
os.environ["CATALOG_API_PASSWORD_BCRYPT_ROUNDS"] = "4"
os.environ["CATALOG_API_JWT_SECRET_KEY"] = "test-secret-key-for-the-book-catalog-api-0123"
os.environ["CATALOG_API_LOG_LEVEL"] = "WARNING"
os.environ["CATALOG_API_LOG_FORMAT"] = "text"

import pytest
from typing import Dict, List, Optional
from fastapi.testclient import TestClient

from catalog_api.src.config import clear_settings_cache

clear_settings_cache()

from catalog_api.src.dependencies import get_book_repository, get_user_repository
from catalog_api.src.exceptions import BookNotFoundError, DuplicateUsernameError
from catalog_api.src.models.auth import Role, UserDB
from catalog_api.src.models.book import BookDB
from catalog_api.src.services.user_service import UserService, build_password_context


ADMIN_PASSWORD = "admin123"
USER_PASSWORD = "user123"


# ============================================================================
# IN-MEMORY REPOSITORIES (Test Doubles)
# ============================================================================


class FakeBookRepository:
    """Dict-backed stand-in for BookRepository."""

    def __init__(self):
        self.books: Dict[str, BookDB] = {}

    async def save(self, book: BookDB) -> BookDB:
        self.books[book.isbn] = book.model_copy()
        return self.books[book.isbn]

    async def find_by_id(self, isbn: str) -> Optional[BookDB]:
        return self.books.get(isbn)

    async def find_all(self) -> List[BookDB]:
        return list(self.books.values())

    async def exists_by_id(self, isbn: str) -> bool:
        return isbn in self.books

    async def delete_by_id(self, isbn: str) -> None:
        if isbn not in self.books:
            raise BookNotFoundError(isbn)
        del self.books[isbn]


class FakeUserRepository:
    """Dict-backed stand-in for UserRepository."""

    def __init__(self):
        self.users: Dict[str, UserDB] = {}
        self._next_id = 1

    async def save(self, user: UserDB) -> UserDB:
        if user.username in self.users:
            raise DuplicateUsernameError(user.username)
        stored = user.model_copy(update={"id": self._next_id})
        self._next_id += 1
        self.users[stored.username] = stored
        return stored

    async def find_by_username(self, username: str) -> Optional[UserDB]:
        return self.users.get(username)

    async def exists_by_username(self, username: str) -> bool:
        return username in self.users


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def pwd_context():
    return build_password_context(4)


@pytest.fixture
def book_repo():
    return FakeBookRepository()


@pytest.fixture
def user_repo():
    return FakeUserRepository()


@pytest.fixture
def user_service(user_repo, pwd_context):
    return UserService(user_repo, pwd_context=pwd_context)


@pytest.fixture
def seeded_user_repo(user_repo, pwd_context):
    """User repository holding the default ``admin`` and ``user`` accounts."""
    user_repo.users["admin"] = UserDB(
        id=1,
        username="admin",
        password=pwd_context.hash(ADMIN_PASSWORD),
        role=Role.ADMIN.value
    )
    user_repo.users["user"] = UserDB(
        id=2,
        username="user",
        password=pwd_context.hash(USER_PASSWORD),
        role=Role.USER.value
    )
    user_repo._next_id = 3
    return user_repo


@pytest.fixture
def app(book_repo, seeded_user_repo):
    from catalog_api.src.main import create_app

    application = create_app()
    application.dependency_overrides[get_book_repository] = lambda: book_repo
    application.dependency_overrides[get_user_repository] = lambda: seeded_user_repo
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


def login_headers(client: TestClient, username: str, password: str) -> Dict[str, str]:
    response = client.post(
        "/api/auth/login",
        json={"username": username, "password": password}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return login_headers(client, "admin", ADMIN_PASSWORD)


@pytest.fixture
def user_headers(client):
    return login_headers(client, "user", USER_PASSWORD)
