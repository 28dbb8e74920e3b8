"""Admin credential issuance, persistence, and token verification.

This module backs the ``pages credentials`` command and the gate's admin
branch by:

* Issuing a username, a salted PBKDF2 password hash, a random secret, and the
  bearer token derived from all three.
* Loading / persisting those values in ``~/.config/cms-pages/credentials.toml``
  with owner-only permissions.
* Verifying bearer tokens either locally against the stored credentials or
  through a remote HTTP endpoint.
"""

from __future__ import annotations

import base64
import dataclasses as dc
import hashlib
import hmac
import logging
import os
import secrets
import typing as typ
from http import HTTPStatus
from pathlib import Path

import requests
import tomlkit

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_PATH = Path(
    os.getenv(
        "PAGES_CREDENTIALS_FILE",
        Path.home() / ".config" / "cms-pages" / "credentials.toml",
    )
)
DEFAULT_USERNAME = "admin"
PBKDF2_ITERATIONS = 600_000
MIN_PASSWORD_LENGTH = 8

_HASH_SCHEME = "pbkdf2_sha256"
_CREDENTIALS_FILE_MODE = 0o600


class CredentialError(RuntimeError):
    """Raised when credentials are missing or malformed."""


@dc.dataclass(frozen=True, slots=True)
class AdminCredentials:
    """Issued admin credentials.

    Attributes
    ----------
    username : str
        Admin login name.
    password_hash : str
        ``pbkdf2_sha256$<iterations>$<salt>$<digest>`` encoded hash.
    secret : str
        Random server-side secret mixed into the bearer token.
    token : str
        Bearer token presented in the ``admin-token`` cookie.
    """

    username: str
    password_hash: str
    secret: str
    token: str


def hash_password(
    password: str, *, salt: bytes | None = None, iterations: int = PBKDF2_ITERATIONS
) -> str:
    """Return a salted PBKDF2-SHA256 hash of ``password``."""
    salt = salt if salt is not None else secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    encoded_salt = base64.b64encode(salt).decode("ascii")
    encoded_digest = base64.b64encode(digest).decode("ascii")
    return f"{_HASH_SCHEME}${iterations}${encoded_salt}${encoded_digest}"


def verify_password(password: str, password_hash: str) -> bool:
    """Return True when ``password`` matches ``password_hash``."""
    try:
        scheme, iterations, salt, expected = password_hash.split("$")
        if scheme != _HASH_SCHEME:
            return False
        digest = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            base64.b64decode(salt),
            int(iterations),
        )
    except ValueError:
        return False
    return hmac.compare_digest(base64.b64encode(digest).decode("ascii"), expected)


def derive_token(username: str, password_hash: str, secret: str) -> str:
    """Derive the bearer token bound to a username, hash, and secret."""
    material = f"{username}:{password_hash}:{secret}".encode()
    return hashlib.sha256(material).hexdigest()


def issue_credentials(
    password: str,
    *,
    username: str = DEFAULT_USERNAME,
    secret: str | None = None,
    iterations: int = PBKDF2_ITERATIONS,
) -> AdminCredentials:
    """Create a fresh credential set for ``username``.

    Raises
    ------
    CredentialError
        If the password or username is empty.
    """
    if not password:
        msg = "Password is required"
        raise CredentialError(msg)
    if not username.strip():
        msg = "Username cannot be empty"
        raise CredentialError(msg)
    if len(password) < MIN_PASSWORD_LENGTH:
        logger.warning(
            "Password is shorter than %d characters; choose a longer one",
            MIN_PASSWORD_LENGTH,
        )
    password_hash = hash_password(password, iterations=iterations)
    secret = secret or secrets.token_hex(32)
    return AdminCredentials(
        username=username.strip(),
        password_hash=password_hash,
        secret=secret,
        token=derive_token(username.strip(), password_hash, secret),
    )


def save_credentials(
    creds: AdminCredentials, *, path: Path = DEFAULT_CREDENTIALS_PATH
) -> None:
    """Persist ``creds`` under the ``[admin]`` table, preserving other tables."""
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        doc = tomlkit.parse(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        doc = tomlkit.document()
    except tomlkit.exceptions.ParseError as exc:
        msg = f"Unable to parse credentials TOML at {path}"
        raise CredentialError(msg) from exc

    admin_table = tomlkit.table()
    admin_table.update(
        {
            "username": creds.username,
            "password_hash": creds.password_hash,
            "secret": creds.secret,
            "token": creds.token,
        }
    )
    doc["admin"] = admin_table

    path.write_text(tomlkit.dumps(doc), encoding="utf-8")
    os.chmod(path, _CREDENTIALS_FILE_MODE)


def load_credentials(path: Path = DEFAULT_CREDENTIALS_PATH) -> AdminCredentials:
    """Read credentials saved by :func:`save_credentials`.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    CredentialError
        If the file cannot be parsed or lacks a required field.
    """
    if not path.exists():
        msg = f"Credentials file not found: {path}"
        raise FileNotFoundError(msg)
    try:
        data = tomlkit.parse(path.read_text(encoding="utf-8"))
    except tomlkit.exceptions.ParseError as exc:
        msg = f"Unable to parse credentials TOML at {path}"
        raise CredentialError(msg) from exc

    table = data.get("admin")
    admin: dict[str, typ.Any] = dict(table.items()) if table else {}
    try:
        username = str(admin["username"])
        password_hash = str(admin["password_hash"])
        secret = str(admin["secret"])
    except KeyError as exc:
        msg = f"Missing {exc} in [admin] table of {path}"
        raise CredentialError(msg) from exc
    token = str(admin.get("token") or derive_token(username, password_hash, secret))
    return AdminCredentials(
        username=username, password_hash=password_hash, secret=secret, token=token
    )


class CredentialVerifier:
    """Verify bearer tokens against locally stored credentials."""

    def __init__(self, creds: AdminCredentials) -> None:
        self._expected = derive_token(creds.username, creds.password_hash, creds.secret)

    @classmethod
    def from_path(cls, path: Path = DEFAULT_CREDENTIALS_PATH) -> CredentialVerifier:
        return cls(load_credentials(path))

    def verify(self, token: str) -> bool:
        return hmac.compare_digest(token.encode(), self._expected.encode())


class RemoteTokenVerifier:
    """Verify bearer tokens by POSTing them to an HTTP endpoint.

    The endpoint receives ``{"token": ...}``. A 2xx response with a JSON body
    means valid unless that body carries ``"valid": false``. A body that is not
    JSON, any other status, a transport error, or a timeout means invalid.
    Exactly one request is made per call, with no retries.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 2.0,
    ) -> None:
        if not endpoint.strip():
            msg = "Verification endpoint cannot be empty"
            raise ValueError(msg)
        self.endpoint = endpoint.strip()
        self.timeout = timeout
        self._session = session or requests.Session()
        self._headers = {"Accept": "application/json", "User-Agent": "cms-pages/0.1"}

    def verify(self, token: str) -> bool:
        try:
            response = self._session.post(
                self.endpoint,
                json={"token": token},
                headers=self._headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning(
                "Token verification request to %s failed: %s", self.endpoint, exc
            )
            return False

        if not HTTPStatus.OK <= response.status_code < HTTPStatus.MULTIPLE_CHOICES:
            logger.info(
                "Token verification rejected with status %s", response.status_code
            )
            return False
        try:
            payload = response.json()
        except ValueError:
            logger.info(
                "Token verification response from %s is not JSON", self.endpoint
            )
            return False
        if isinstance(payload, dict) and "valid" in payload:
            return payload["valid"] is True
        return True


__all__ = [
    "DEFAULT_CREDENTIALS_PATH",
    "AdminCredentials",
    "CredentialError",
    "CredentialVerifier",
    "RemoteTokenVerifier",
    "derive_token",
    "hash_password",
    "issue_credentials",
    "load_credentials",
    "save_credentials",
    "verify_password",
]
