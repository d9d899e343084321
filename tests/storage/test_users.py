from __future__ import annotations

import pytest

from chatbridge.core.exceptions import UserExistsError
from chatbridge.storage import users


@pytest.fixture(autouse=True)
def _db(in_memory_db):
    return in_memory_db


def test_create_and_authenticate():
    created = users.create_user("alice", "alice@example.com", "wonderland")

    assert created.password_hash != "wonderland"
    assert users.get_user(created.id).username == "alice"
    assert users.authenticate("alice", "wonderland").id == created.id
    assert users.authenticate("alice", "looking-glass") is None
    assert users.authenticate("nobody", "wonderland") is None


@pytest.mark.parametrize(
    ("username", "email"),
    [("alice", "other@example.com"), ("alice2", "alice@example.com")],
)
def test_duplicate_username_or_email_is_rejected(username, email):
    users.create_user("alice", "alice@example.com", "wonderland")

    with pytest.raises(UserExistsError):
        users.create_user(username, email, "another1")


def test_get_unknown_user():
    assert users.get_user(404) is None
