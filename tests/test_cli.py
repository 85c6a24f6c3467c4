"""Unit tests for main.py -- the account provisioning CLI.

Covers:
- create-user writes a nonadmin by default and an admin with --admin
- the created account can sign in with the supplied password
- duplicate usernames exit 1 with the SGR code printed
- empty passwords are refused before touching the database
"""

import io

import pytest

import main
from auth.service import UserService
from auth.store import UserStore


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'cli.db'}"


def _run(monkeypatch, db_url: str, password: str, *args: str) -> int:
    monkeypatch.setattr("sys.stdin", io.StringIO(password + "\n"))
    return main.main(["--database-url", db_url, "create-user", *args, "--password-stdin"])


class TestCreateUser:
    def test_creates_nonadmin_by_default(self, monkeypatch, capsys, db_url: str) -> None:
        assert _run(monkeypatch, db_url, "alicepass123", "alice", "alice@example.com") == 0
        assert "Created nonadmin 'alice'" in capsys.readouterr().out

        store = UserStore(db_url)
        try:
            assert not store.get_by_username("alice").is_admin
            session = UserService(store).signin("alice", "alicepass123")
            assert session.user.username == "alice"
        finally:
            store.close()

    def test_admin_flag(self, monkeypatch, db_url: str) -> None:
        assert _run(monkeypatch, db_url, "rootpass123", "root", "root@example.com", "--admin") == 0
        store = UserStore(db_url)
        try:
            assert store.get_by_username("root").is_admin
        finally:
            store.close()

    def test_duplicate_username_exits_1(self, monkeypatch, capsys, db_url: str) -> None:
        _run(monkeypatch, db_url, "alicepass123", "alice", "alice@example.com")
        assert _run(monkeypatch, db_url, "otherpass1", "alice", "other@example.com") == 1
        assert "SGR-001" in capsys.readouterr().out

    def test_empty_password_refused(self, monkeypatch, capsys, db_url: str) -> None:
        assert _run(monkeypatch, db_url, "", "alice", "alice@example.com") == 1
        assert "A password is required" in capsys.readouterr().out
