"""
pytest configuration and fixtures for the users service test suite
An in-memory stand-in for the asyncpg pool backs both service and HTTP tests.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import asyncpg
import httpx
import pytest
import pytest_asyncio

from app import create_app
from database.connection import get_db_pool
from services.users_service import UsersService

PUBLIC_DIR = Path(__file__).resolve().parent.parent / "public"


class FakeConnection:
    """Implements the subset of asyncpg.Connection the service uses"""

    def __init__(self, pool: "FakePool"):
        self._pool = pool

    @asynccontextmanager
    async def transaction(self):
        self._pool.transactions += 1
        yield

    async def execute(self, query: str, *args) -> str:
        return self._pool.run(query, args)

    async def fetch(self, query: str, *args) -> List[Dict[str, Any]]:
        return self._pool.run(query, args)

    async def fetchrow(self, query: str, *args) -> Optional[Dict[str, Any]]:
        rows = self._pool.run(query, args)
        return rows[0] if rows else None

    async def fetchval(self, query: str, *args):
        result = self._pool.run(query, args)
        if isinstance(result, list):
            return next(iter(result[0].values())) if result else None
        return result


class FakePool:
    """
    In-memory users table behind a pool-like interface.

    Understands exactly the statements issued by the service and the schema
    bootstrap; anything else fails loudly so query drift shows up in tests.
    """

    def __init__(self):
        self.rows: Dict[int, Dict[str, Any]] = {}
        self.next_id = 1
        self.queries: List[str] = []
        self.acquire_count = 0
        self.transactions = 0
        self.fail_with: Optional[Exception] = None
        self.closed = False

    @asynccontextmanager
    async def acquire(self):
        self.acquire_count += 1
        yield FakeConnection(self)

    async def close(self):
        self.closed = True

    def is_closing(self) -> bool:
        return self.closed

    def statements(self, prefix: str) -> List[str]:
        return [query for query in self.queries if query.startswith(prefix)]

    def _email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        return any(row["email"] == email and row_id != exclude_id for row_id, row in self.rows.items())

    def _unique_violation(self):
        return asyncpg.UniqueViolationError('duplicate key value violates unique constraint "users_email_key"')

    def run(self, query: str, args: tuple):
        query = " ".join(query.split())
        self.queries.append(query)

        if self.fail_with is not None:
            raise self.fail_with

        if query == "SELECT 1":
            return 1

        if query.startswith("CREATE TABLE IF NOT EXISTS users"):
            return "CREATE TABLE"

        if query.startswith("INSERT INTO users"):
            name, email, age = args
            if self._email_taken(email):
                raise self._unique_violation()
            row = {
                "id": self.next_id,
                "name": name,
                "email": email,
                "age": age,
                "created_at": datetime(2024, 1, 1, 12, 0, self.next_id % 60),
            }
            self.rows[self.next_id] = row
            self.next_id += 1
            return [dict(row)]

        if query.startswith("SELECT id, name, email, age, created_at FROM users ORDER BY id ASC"):
            return [dict(self.rows[row_id]) for row_id in sorted(self.rows)]

        if query.startswith("SELECT id, name, email, age, created_at FROM users WHERE id = $1"):
            row = self.rows.get(args[0])
            return [dict(row)] if row else []

        if query.startswith("SELECT id FROM users WHERE id = $1"):
            return [{"id": args[0]}] if args[0] in self.rows else []

        if query.startswith("UPDATE users SET name = $1, email = $2, age = $3 WHERE id = $4"):
            name, email, age, user_id = args
            if user_id not in self.rows:
                return []
            if self._email_taken(email, exclude_id=user_id):
                raise self._unique_violation()
            self.rows[user_id].update(name=name, email=email, age=age)
            return [dict(self.rows[user_id])]

        if query.startswith("DELETE FROM users WHERE id = $1"):
            removed = self.rows.pop(args[0], None)
            return f"DELETE {1 if removed else 0}"

        raise AssertionError(f"Unexpected query: {query}")


@pytest.fixture
def fake_pool() -> FakePool:
    return FakePool()


@pytest.fixture
def users_service(fake_pool) -> UsersService:
    return UsersService(fake_pool)


@pytest.fixture
def app(fake_pool):
    application = create_app(static_dir=str(PUBLIC_DIR))

    async def override_pool():
        return fake_pool

    application.dependency_overrides[get_db_pool] = override_pool
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
