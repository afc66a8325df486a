import pytest

from spacetrader.account import (
    AccountError,
    AccountManager,
    AccountNotFoundError,
    InvalidCredentialsError,
    UsernameExistsError,
)


@pytest.fixture
def manager(tmp_path):
    return AccountManager(tmp_path / "accounts.json", rounds=4)


def test_register_and_authenticate(manager):
    account = manager.register_account("testuser", "password", None)
    assert account.username == "testuser"

    authenticated = manager.authenticate("testuser", "password")
    assert authenticated.id == account.id

    with pytest.raises(InvalidCredentialsError):
        manager.authenticate("testuser", "secret")


def test_username_exists(manager):
    manager.register_account("existinguser", "password", None)
    assert manager.username_exists("existinguser")
    assert not manager.username_exists("nonexistentuser")


def test_duplicate_username_rejected(manager):
    manager.register_account("pilot", "password", None)
    with pytest.raises(UsernameExistsError) as info:
        manager.register_account("pilot", "secret", None)
    assert str(info.value) == "Username already exists"
    assert isinstance(info.value, AccountError)


def test_unknown_user_is_invalid_credentials(manager):
    with pytest.raises(InvalidCredentialsError) as info:
        manager.authenticate("ghost", "password")
    assert str(info.value) == "Invalid credentials"


def test_register_fields_and_login_time(manager):
    account = manager.register_account("pilot", "password", "pilot@example.com")
    assert account.email == "pilot@example.com"
    assert account.last_login is None
    assert account.characters == ()
    assert account.password_hash != "password"

    logged_in = manager.authenticate("pilot", "password")
    assert logged_in.last_login is not None
    assert logged_in.last_login >= account.created_at
    assert manager.get_account_by_username("pilot").last_login == logged_in.last_login


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "accounts.json"
    first = AccountManager(path, rounds=4)
    account = first.register_account("pilot", "password", None)
    first.add_character("pilot", "char-1")

    loaded = AccountManager.load(path)
    assert loaded.username_exists("pilot")
    restored = loaded.get_account_by_id(account.id)
    assert restored.username == "pilot"
    assert restored.characters == ("char-1",)
    assert loaded.authenticate("pilot", "password").id == account.id


def test_load_missing_file_is_empty(tmp_path):
    loaded = AccountManager.load(tmp_path / "none.json")
    assert loaded.get_all_usernames() == []


def test_load_corrupted_file_makes_backup(tmp_path):
    path = tmp_path / "accounts.json"
    path.write_text("{not json", encoding="utf-8")
    loaded = AccountManager.load(path)
    assert loaded.get_all_usernames() == []
    backup = tmp_path / "accounts.json.bak"
    assert backup.read_text(encoding="utf-8") == "{not json"


def test_add_character_once_and_missing_account(manager):
    manager.register_account("pilot", "password", None)
    manager.add_character("pilot", "char-1")
    manager.add_character("pilot", "char-1")
    manager.add_character("pilot", "char-2")
    assert manager.get_account_by_username("pilot").characters == ("char-1", "char-2")

    with pytest.raises(AccountNotFoundError):
        manager.add_character("ghost", "char-1")


def test_get_all_usernames(manager):
    manager.register_account("alpha", "password", None)
    manager.register_account("beta", "password", None)
    assert sorted(manager.get_all_usernames()) == ["alpha", "beta"]


def test_get_account_by_unknown_id(manager):
    assert manager.get_account_by_id("missing") is None


def test_change_password(manager):
    manager.register_account("pilot", "password", None)
    manager.change_password("pilot", "password", "secret")
    assert manager.authenticate("pilot", "secret").username == "pilot"
    with pytest.raises(InvalidCredentialsError):
        manager.authenticate("pilot", "password")


def test_change_password_requires_current(manager):
    manager.register_account("pilot", "password", None)
    with pytest.raises(InvalidCredentialsError):
        manager.change_password("pilot", "token", "secret")
    assert manager.authenticate("pilot", "password").username == "pilot"


def test_delete_account(manager):
    account = manager.register_account("pilot", "password", None)
    with pytest.raises(InvalidCredentialsError):
        manager.delete_account("pilot", "secret")
    assert manager.username_exists("pilot")

    manager.delete_account("pilot", "password")
    assert not manager.username_exists("pilot")
    assert manager.get_account_by_id(account.id) is None