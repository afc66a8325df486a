"""User accounts with bcrypt-hashed passwords, persisted as JSON."""

from __future__ import annotations

import json
import shutil
import sys
import time
import uuid
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Optional, Union

import bcrypt

DEFAULT_PATH = "accounts.json"
DEFAULT_ROUNDS = 12

PathLike = Union[str, Path]


class AccountError(Exception):
    """Base class for account management failures."""

    message = "Account error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)


class UsernameExistsError(AccountError):
    message = "Username already exists"


class InvalidCredentialsError(AccountError):
    message = "Invalid credentials"


class AccountNotFoundError(AccountError):
    message = "Account not found"


class HashingFailedError(AccountError):
    message = "Failed to hash password"


@dataclass(frozen=True)
class UserAccount:
    """A registered user; timestamps are seconds since the Unix epoch."""

    id: str
    username: str
    password_hash: str
    email: Optional[str] = None
    characters: tuple[str, ...] = field(default_factory=tuple)
    created_at: int = 0
    last_login: Optional[int] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["characters"] = list(self.characters)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> UserAccount:
        return cls(
            id=data["id"],
            username=data["username"],
            password_hash=data["password_hash"],
            email=data.get("email"),
            characters=tuple(data.get("characters", ())),
            created_at=int(data["created_at"]),
            last_login=data.get("last_login"),
        )


def _now() -> int:
    return int(time.time())


def _hash(password: str, rounds: int) -> str:
    try:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("ascii")
    except (ValueError, TypeError) as exc:
        raise HashingFailedError() from exc


def _verify(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except (ValueError, TypeError):
        return False


class AccountManager:
    """Keeps accounts keyed by username and by id, saving after each change."""

    def __init__(self, path: PathLike = DEFAULT_PATH, rounds: int = DEFAULT_ROUNDS) -> None:
        self.path = Path(path)
        self.rounds = rounds
        self._accounts: dict[str, UserAccount] = {}
        self._account_ids: dict[str, str] = {}

    @classmethod
    def load(cls, path: PathLike = DEFAULT_PATH) -> AccountManager:
        """Load accounts from ``path``; start empty if missing or unreadable.

        A file that cannot be parsed is copied aside with a ``.bak`` suffix.
        """
        manager = cls(path)
        if not manager.path.exists():
            return manager
        try:
            content = manager.path.read_text(encoding="utf-8")
        except OSError as exc:
            print(f"Error reading accounts file: {exc}", file=sys.stderr)
            return manager
        try:
            data = json.loads(content)
            accounts = {
                name: UserAccount.from_dict(entry) for name, entry in data["accounts"].items()
            }
            account_ids = {str(key): str(value) for key, value in data["account_ids"].items()}
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            print(f"Error parsing accounts file: {exc}", file=sys.stderr)
            backup = manager.path.with_name(manager.path.name + ".bak")
            try:
                shutil.copyfile(manager.path, backup)
            except OSError as copy_exc:
                print(f"Failed to backup accounts file: {copy_exc}", file=sys.stderr)
            return manager
        manager._accounts = accounts
        manager._account_ids = account_ids
        return manager

    def save(self) -> None:
        """Write all accounts to the manager's file."""
        data = {
            "accounts": {name: account.to_dict() for name, account in self._accounts.items()},
            "account_ids": dict(self._account_ids),
        }
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def _save_quietly(self, context: str) -> None:
        try:
            self.save()
        except OSError as exc:
            print(f"Error saving accounts{context}: {exc}", file=sys.stderr)

    def register_account(
        self, username: str, password: str, email: Optional[str] = None
    ) -> UserAccount:
        """Create an account; raise UsernameExistsError if the name is taken."""
        if username in self._accounts:
            raise UsernameExistsError()
        account = UserAccount(
            id=str(uuid.uuid4()),
            username=username,
            password_hash=_hash(password, self.rounds),
            email=email,
            characters=(),
            created_at=_now(),
            last_login=None,
        )
        self._accounts[username] = account
        self._account_ids[account.id] = username
        self._save_quietly("")
        return account

    def authenticate(self, username: str, password: str) -> UserAccount:
        """Check a password and record the login time."""
        account = self._accounts.get(username)
        if account is None or not _verify(password, account.password_hash):
            raise InvalidCredentialsError()
        updated = replace(account, last_login=_now())
        self._accounts[username] = updated
        self._save_quietly(" after login")
        return updated

    def add_character(self, username: str, character_id: str) -> None:
        """Attach a character id to an account, once."""
        account = self._accounts.get(username)
        if account is None:
            raise AccountNotFoundError()
        if character_id in account.characters:
            return
        self._accounts[username] = replace(
            account, characters=account.characters + (character_id,)
        )
        self._save_quietly(" after adding character")

    def username_exists(self, username: str) -> bool:
        return username in self._accounts

    def get_account_by_username(self, username: str) -> Optional[UserAccount]:
        return self._accounts.get(username)

    def get_account_by_id(self, account_id: str) -> Optional[UserAccount]:
        username = self._account_ids.get(account_id)
        return self._accounts.get(username) if username is not None else None

    def get_all_usernames(self) -> list[str]:
        return list(self._accounts)

    def change_password(self, username: str, current_password: str, new_password: str) -> None:
        """Replace the password after checking the current one."""
        account = self.authenticate(username, current_password)
        self._accounts[username] = replace(
            account, password_hash=_hash(new_password, self.rounds)
        )
        self._save_quietly(" after password change")

    def delete_account(self, username: str, password: str) -> None:
        """Remove an account after checking its password."""
        account = self.authenticate(username, password)
        self._account_ids.pop(account.id, None)
        self._accounts.pop(username, None)
        self._save_quietly(" after deletion")