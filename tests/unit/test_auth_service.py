"""Unit tests for authentication service."""

from __future__ import annotations

import pytest
from lms.core.auth import PasswordHasher, Role
from lms.core.errors import InvalidCredentialsError, InvalidInputError
from lms.domain.services import AuthService, UserExistsError
from lms.infrastructure.repositories import UnitOfWork


class TestPasswordHashing:
    """Tests for the bcrypt password hasher."""

    def test_hash_returns_bcrypt_hash(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("test_password_123")

        assert hashed.startswith("$2b$")
        assert len(hashed) == 60

    def test_hash_unique_per_call(self, hasher: PasswordHasher) -> None:
        """Same password should produce different hashes (due to salt)."""
        assert hasher.hash("test_password_123") != hasher.hash("test_password_123")

    def test_verify(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("TestPassword123")

        assert hasher.verify("TestPassword123", hashed) is True
        assert hasher.verify("testpassword123", hashed) is False

    def test_rounds_are_configurable(self) -> None:
        hashed = PasswordHasher(rounds=4).hash("secret-password")

        assert hashed.startswith("$2b$04$")

    def test_dummy_verify_never_succeeds(self, hasher: PasswordHasher) -> None:
        assert hasher.dummy_verify() is False


class TestRegistration:
    @pytest.mark.asyncio
    async def test_register_creates_student(self, uow: UnitOfWork, hasher: PasswordHasher) -> None:
        service = AuthService(uow, hasher)

        user = await service.register_user(username="  ada  ", password="password123")

        assert user.username == "ada"
        assert user.role is Role.STUDENT
        found = await uow.users.get_credentials("ada")
        assert found is not None
        assert found[1] != "password123"

    @pytest.mark.asyncio
    async def test_duplicate_username_is_rejected(
        self, uow: UnitOfWork, hasher: PasswordHasher
    ) -> None:
        service = AuthService(uow, hasher)
        await service.register_user(username="ada", password="password123")

        with pytest.raises(UserExistsError):
            await service.register_user(username="ada", password="another-password")

        assert len(await service.list_users()) == 1

    @pytest.mark.asyncio
    async def test_blank_username_is_invalid(
        self, uow: UnitOfWork, hasher: PasswordHasher
    ) -> None:
        service = AuthService(uow, hasher)

        with pytest.raises(InvalidInputError):
            await service.register_user(username="   ", password="password123")


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_valid_credentials_return_user(
        self, uow: UnitOfWork, hasher: PasswordHasher
    ) -> None:
        service = AuthService(uow, hasher)
        created = await service.register_user(
            username="root", password="password123", role=Role.ADMIN
        )

        user = await service.authenticate(username="root", password="password123")

        assert user.user_id == created.user_id
        assert user.role is Role.ADMIN

    @pytest.mark.asyncio
    async def test_unknown_user_and_wrong_password_are_indistinguishable(
        self, uow: UnitOfWork, hasher: PasswordHasher
    ) -> None:
        service = AuthService(uow, hasher)
        await service.register_user(username="ada", password="password123")

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await service.authenticate(username="ada", password="not-the-password")
        with pytest.raises(InvalidCredentialsError) as unknown_user:
            await service.authenticate(username="nobody", password="password123")

        assert type(wrong_password.value) is type(unknown_user.value)
        assert str(wrong_password.value) == str(unknown_user.value)

    @pytest.mark.asyncio
    async def test_unknown_user_still_runs_a_hash_check(
        self, uow: UnitOfWork, hasher: PasswordHasher, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[str] = []
        monkeypatch.setattr(hasher, "dummy_verify", lambda: calls.append("dummy") or False)
        service = AuthService(uow, hasher)

        with pytest.raises(InvalidCredentialsError):
            await service.authenticate(username="nobody", password="password123")

        assert calls == ["dummy"]
