"""Tests for admin credential storage and bearer-token verification."""

from __future__ import annotations

import stat
import typing as typ
from types import SimpleNamespace

import pytest
import requests
import tomlkit

from cms_pages.credentials import (
    CredentialError,
    CredentialVerifier,
    RemoteTokenVerifier,
    hash_password,
    issue_credentials,
    load_credentials,
    save_credentials,
    verify_password,
)
from cms_pages.gate import GateConfig, GateRequest, Outcome, RouteGate, RouteTable

if typ.TYPE_CHECKING:
    from pathlib import Path

FAST_ITERATIONS = 1_000


class FakeSession:
    """Stand-in for :class:`requests.Session` that records POST calls."""

    def __init__(
        self,
        status_code: int = 200,
        payload: typ.Any = None,
        error: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        self.payload = payload
        self.error = error
        self.calls: list[dict[str, typ.Any]] = []

    def post(self, url: str, **kwargs: typ.Any) -> SimpleNamespace:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error

        def _json() -> typ.Any:
            if self.payload is None:
                raise ValueError("no JSON body")
            return self.payload

        return SimpleNamespace(status_code=self.status_code, json=_json)


def _issue(password: str = "correct horse battery") -> typ.Any:
    return issue_credentials(password, secret="s3cret", iterations=FAST_ITERATIONS)


def test_password_hash_round_trip() -> None:
    encoded = hash_password("hunter22", iterations=FAST_ITERATIONS)

    assert encoded.startswith(f"pbkdf2_sha256${FAST_ITERATIONS}$")
    assert verify_password("hunter22", encoded) is True
    assert verify_password("hunter23", encoded) is False
    assert verify_password("hunter22", "not-a-hash") is False


def test_issued_token_verifies_locally() -> None:
    creds = _issue()
    verifier = CredentialVerifier(creds)

    assert creds.username == "admin"
    assert verifier.verify(creds.token) is True
    assert verifier.verify(creds.token[:-1] + "0") is False


@pytest.mark.parametrize(
    ("password", "username"), [("", "admin"), ("long enough", "   ")]
)
def test_issue_rejects_empty_values(password: str, username: str) -> None:
    with pytest.raises(CredentialError):
        issue_credentials(password, username=username, iterations=FAST_ITERATIONS)


def test_short_password_warns(caplog: pytest.LogCaptureFixture) -> None:
    issue_credentials("short", iterations=FAST_ITERATIONS)

    assert "shorter than 8 characters" in caplog.text


def test_save_and_load_credentials(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "credentials.toml"
    path.parent.mkdir()
    path.write_text('[other]\nkeep = "me"\n', encoding="utf-8")
    creds = _issue()

    save_credentials(creds, path=path)

    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    doc = tomlkit.parse(path.read_text(encoding="utf-8"))
    assert doc["other"]["keep"] == "me"
    assert load_credentials(path) == creds
    assert CredentialVerifier.from_path(path).verify(creds.token) is True


def test_load_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_credentials(tmp_path / "absent.toml")


def test_load_incomplete_table_raises(tmp_path: Path) -> None:
    path = tmp_path / "credentials.toml"
    path.write_text('[admin]\nusername = "admin"\n', encoding="utf-8")

    with pytest.raises(CredentialError, match="password_hash"):
        load_credentials(path)


@pytest.mark.parametrize(
    ("session", "expected"),
    [
        (FakeSession(200), False),
        (FakeSession(204), False),
        (FakeSession(200, {"status": "ok"}), True),
        (FakeSession(200, ["ok"]), True),
        (FakeSession(200, {"valid": True}), True),
        (FakeSession(200, {"valid": False}), False),
        (FakeSession(401), False),
        (FakeSession(503), False),
        (FakeSession(error=requests.Timeout("slow")), False),
        (FakeSession(error=requests.ConnectionError("down")), False),
    ],
)
def test_remote_verifier(session: FakeSession, expected: bool) -> None:
    verifier = RemoteTokenVerifier(
        "https://auth.example.com/verify",
        session=typ.cast("requests.Session", session),
        timeout=0.5,
    )

    assert verifier.verify("abc") is expected
    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["json"] == {"token": "abc"}
    assert call["timeout"] == 0.5


def test_remote_verifier_requires_endpoint() -> None:
    with pytest.raises(ValueError, match="endpoint"):
        RemoteTokenVerifier("  ")


def test_gate_clears_cookie_when_remote_check_fails() -> None:
    session = FakeSession(error=requests.Timeout("slow"))
    verifier = RemoteTokenVerifier(
        "https://auth.example.com/verify",
        session=typ.cast("requests.Session", session),
    )
    gate = RouteGate(RouteTable(), verifier, GateConfig())

    decision = gate.decide(
        GateRequest("/admin/pages", cookies={"admin-token": "abc"})
    )

    assert decision.outcome is Outcome.REDIRECT
    assert decision.location == "/admin/login"
    assert decision.clear_credential is True
    assert len(session.calls) == 1
