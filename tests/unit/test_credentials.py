# tests/unit/test_credentials.py

import pytest

from matchpass.application import credential_service
from matchpass.domain.exceptions import InvalidInputError
from matchpass.domain.limits import USERNAME_MAX_LENGTH


@pytest.fixture
def admin(services):
    return services.credentials.provision("admin", "s3cret-pass", "Admin User")


def test_correct_password_returns_identity(services, admin):
    identity = services.credentials.verify("admin", "s3cret-pass")

    assert identity == admin
    assert identity.username == "admin"
    assert identity.name == "Admin User"
    assert not hasattr(identity, "password_hash")


def test_wrong_password_fails(services, admin):
    assert services.credentials.verify("admin", "wrong") is None


def test_unknown_user_fails(services, admin):
    assert services.credentials.verify("someone", "s3cret-pass") is None


@pytest.mark.parametrize("username, password", [("", "s3cret-pass"), ("admin", ""), (None, None)])
def test_empty_credentials_fail(services, admin, username, password):
    assert services.credentials.verify(username, password) is None


def test_overlong_password_fails_closed(services, admin):
    assert services.credentials.verify("admin", "s3cret-pass" + "x" * 100) is None


def test_password_is_stored_hashed(services, store, admin):
    with store.unit_of_work() as uow:
        credential = uow.admins.get_by_username("admin")

    assert credential.password_hash != b"s3cret-pass"
    assert credential.password_hash.startswith(b"$2")


def test_duplicate_admin_is_rejected(services, admin):
    with pytest.raises(InvalidInputError):
        services.credentials.provision("admin", "another-pass", "Second Admin")


def test_provision_requires_all_fields(services):
    with pytest.raises(InvalidInputError):
        services.credentials.provision("admin", "", "Admin User")


@pytest.fixture
def checkpw_calls(monkeypatch):
    calls = []
    real_checkpw = credential_service.bcrypt.checkpw

    def recording_checkpw(password, hashed):
        calls.append(password)
        return real_checkpw(password, hashed)

    monkeypatch.setattr(credential_service.bcrypt, "checkpw", recording_checkpw)
    return calls


def test_overlong_password_still_costs_one_bcrypt_check(services, admin, checkpw_calls):
    assert services.credentials.verify("admin", "s3cret-pass" + "x" * 100) is None

    assert len(checkpw_calls) == 1
    assert len(checkpw_calls[0]) == credential_service.MAX_PASSWORD_BYTES


def test_unknown_user_still_costs_one_bcrypt_check(services, admin, checkpw_calls):
    assert services.credentials.verify("someone", "s3cret-pass") is None

    assert checkpw_calls == [b"s3cret-pass"]


def test_overlong_username_cannot_be_provisioned(services):
    with pytest.raises(InvalidInputError):
        services.credentials.provision("a" * (USERNAME_MAX_LENGTH + 1), "s3cret-pass", "Admin")
