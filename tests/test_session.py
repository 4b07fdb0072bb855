"""
Tests for the single-role console session and its file store.
"""

import json
import os
import stat

import pytest

from petpulse_console.exceptions import SessionException
from petpulse_console.session import (
    LEGACY_TOKEN_KEYS,
    MemorySessionStore,
    Role,
    Session,
    SessionStore,
)


class TestRole:
    """Test cases for the role enum."""

    @pytest.mark.parametrize(
        "role,path",
        [
            (Role.ADMIN, "/admin/login"),
            (Role.CARETAKER, "/caretaker/login"),
            (Role.DOCTOR, "/doctor/login"),
        ],
    )
    def test_login_path(self, role, path):
        """Test each role's login endpoint."""
        assert role.login_path == path

    def test_anonymous_has_no_login_path(self):
        """Test that the anonymous role cannot log in."""
        with pytest.raises(SessionException):
            Role.NONE.login_path


class TestSession:
    """Test cases for the session value."""

    def test_anonymous(self):
        """Test the signed-out session."""
        session = Session.anonymous()

        assert session.role is Role.NONE
        assert session.token is None
        assert not session.is_authenticated
        assert session.auth_headers() == {}

    def test_authenticated(self):
        """Test a signed-in session and its bearer header."""
        session = Session(role=Role.DOCTOR, token="d-123")

        assert session.is_authenticated
        assert session.auth_headers() == {"Authorization": "Bearer d-123"}

    def test_role_from_string(self):
        """Test that plain role names are accepted."""
        assert Session(role="caretaker", token="c").role is Role.CARETAKER

    def test_role_requires_token(self):
        """Test that a signed-in role without a token is rejected."""
        with pytest.raises(SessionException):
            Session(role=Role.ADMIN)

    def test_anonymous_cannot_carry_token(self):
        """Test that a token without a role is rejected."""
        with pytest.raises(SessionException):
            Session(role=Role.NONE, token="stray")

    def test_unknown_role(self):
        """Test that unknown role names are rejected."""
        with pytest.raises(ValueError):
            Session(role="superuser", token="x")

    def test_session_is_immutable(self):
        """Test that sessions cannot be changed in place."""
        session = Session(role=Role.ADMIN, token="a")

        with pytest.raises(AttributeError):
            session.role = Role.DOCTOR

    def test_repr_masks_token(self):
        """Test that the token never appears in the repr."""
        text = repr(Session(role=Role.ADMIN, token="very-secret"))

        assert "very-secret" not in text
        assert "admin" in text

    def test_dict_round_trip(self):
        """Test the stored form of a session."""
        session = Session(role=Role.CARETAKER, token="c-1")

        assert session.to_dict() == {"role": "caretaker", "token": "c-1"}
        assert Session.from_dict(session.to_dict()) == session

    @pytest.mark.parametrize("key,role", list(LEGACY_TOKEN_KEYS.items()))
    def test_legacy_token_keys(self, key, role):
        """Test importing the per-role browser storage layout."""
        session = Session.from_dict({key: "tok"})

        assert session.role is role
        assert session.token == "tok"

    def test_legacy_empty_tokens(self):
        """Test that empty legacy tokens mean nobody is signed in."""
        assert Session.from_dict({"aToken": "", "cToken": None}) == Session.anonymous()

    def test_legacy_ambiguous_tokens(self):
        """Test that several legacy tokens are rejected instead of prioritised."""
        with pytest.raises(SessionException):
            Session.from_dict({"aToken": "a", "dToken": "d"})


class TestSessionStore:
    """Test cases for the JSON file store."""

    def test_missing_file_is_anonymous(self, tmp_path):
        """Test that no stored file means signed out."""
        store = SessionStore(tmp_path / "session.json")

        assert store.load() == Session.anonymous()

    def test_save_and_load(self, tmp_path):
        """Test persisting a session."""
        path = tmp_path / "nested" / "session.json"
        store = SessionStore(path)

        store.save(Session(role=Role.ADMIN, token="a-1"))

        assert json.loads(path.read_text()) == {"role": "admin", "token": "a-1"}
        assert store.load() == Session(role=Role.ADMIN, token="a-1")

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions only")
    def test_saved_file_is_private(self, tmp_path):
        """Test that the token file is readable by the owner only."""
        path = tmp_path / "session.json"
        SessionStore(path).save(Session(role=Role.ADMIN, token="a-1"))

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_new_role_replaces_previous(self, tmp_path):
        """Test that signing in as another role replaces the stored one."""
        store = SessionStore(tmp_path / "session.json")

        store.save(Session(role=Role.ADMIN, token="a-1"))
        store.save(Session(role=Role.DOCTOR, token="d-1"))

        assert store.load() == Session(role=Role.DOCTOR, token="d-1")

    def test_save_anonymous_clears(self, tmp_path):
        """Test that saving a signed-out session removes the file."""
        path = tmp_path / "session.json"
        store = SessionStore(path)
        store.save(Session(role=Role.ADMIN, token="a-1"))

        store.save(Session.anonymous())

        assert not path.exists()

    def test_clear_missing_file(self, tmp_path):
        """Test that clearing twice is harmless."""
        store = SessionStore(tmp_path / "session.json")

        store.clear()
        store.clear()

        assert store.load() == Session.anonymous()

    def test_load_legacy_file(self, tmp_path):
        """Test loading a file written in the legacy layout."""
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"cToken": "c-9"}))

        assert SessionStore(path).load() == Session(role=Role.CARETAKER, token="c-9")

    @pytest.mark.parametrize(
        "content",
        ["{not json", "[1, 2, 3]", '{"role": "superuser", "token": "x"}'],
    )
    def test_unreadable_file(self, tmp_path, content):
        """Test that corrupt files raise SessionException."""
        path = tmp_path / "session.json"
        path.write_text(content)

        with pytest.raises(SessionException) as exc_info:
            SessionStore(path).load()

        assert exc_info.value.details["session_file"] == str(path)


class TestMemorySessionStore:
    """Test cases for the in-memory store."""

    def test_memory_store(self):
        """Test save, load and clear without touching disk."""
        store = MemorySessionStore()
        assert store.load() == Session.anonymous()

        store.save(Session(role=Role.ADMIN, token="a"))
        assert store.load().role is Role.ADMIN

        store.clear()
        assert not store.load().is_authenticated
