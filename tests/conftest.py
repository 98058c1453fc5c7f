import os
from typing import Dict, Generator, List, Optional

import jwt
import pytest
from fastapi.testclient import TestClient

# Set test environment variables FIRST
os.environ["TESTING"] = "true"
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-hangout-planner-tests")

from database import orm  # noqa: E402
from database import user as user_repo  # noqa: E402
from database.user import User  # noqa: E402
from utils.constants import JWT_AUDIENCE, JWT_ISSUER, JWT_SECRET  # noqa: E402


@pytest.fixture(scope="function")
def setup_test_db(tmp_path, monkeypatch):
    """Set up a fresh SQLite database for each test."""
    db_url = f"sqlite://{tmp_path / 'test.db'}"
    monkeypatch.setattr(orm, "DATABASE_URL", db_url)

    orm.run_migrations()

    yield db_url


@pytest.fixture(scope="function")
def client(setup_test_db) -> Generator:
    """Create a test client with a fresh database for each test."""
    from main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_graph(setup_test_db):
    """
    Create users and wire their first-degree lists.

    Takes ``{user_id: [friend ids...]}`` and returns the users keyed by id.
    """

    def _make(friends: Dict[str, List[str]]) -> Dict[str, User]:
        for user_id in friends:
            user_repo.create_user(
                user_id=user_id,
                name=user_id.capitalize(),
                profile_image_url=f"https://img.example.com/{user_id}.png",
            )
        for user_id, friend_ids in friends.items():
            user_repo.replace_first_degree_friends(user_id, friend_ids)
        return {user.id: user for user in user_repo.get_users_by_ids(friends)}

    return _make


def make_token(user_id: str, name: Optional[str] = None) -> str:
    return jwt.encode(
        {
            "sub": user_id,
            "name": name or user_id.capitalize(),
            "aud": JWT_AUDIENCE,
            "iss": JWT_ISSUER,
        },
        JWT_SECRET,
        algorithm="HS256",
    )


@pytest.fixture
def auth_headers():
    def _headers(user_id: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers


@pytest.fixture
def token_for():
    return make_token
