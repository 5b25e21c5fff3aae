"""
Tests for signup, login and user lookups.
"""

import pytest

import accounts
import models
from errors import ConflictError, InvalidCredentialsError, NotFoundError, ValidationError


class TestSignup:
    def test_creates_user_with_hashed_password(self, db):
        user = accounts.signup(db, "a@x.com", "secret1")

        assert user.id is not None
        assert user.email == "a@x.com"
        assert user.password_hash != "secret1"
        assert user.created_at is not None

    def test_email_is_normalized(self, db):
        user = accounts.signup(db, "  Mixed@Example.COM ", "secret1")
        assert user.email == "mixed@example.com"

    @pytest.mark.parametrize("password", ["secret1", "something-else"])
    def test_duplicate_email_conflicts_regardless_of_password(self, db, alice, password):
        with pytest.raises(ConflictError):
            accounts.signup(db, "alice@example.com", password)

    def test_duplicate_check_ignores_case(self, db, alice):
        with pytest.raises(ConflictError):
            accounts.signup(db, "ALICE@example.com", "secret1")

    def test_duplicate_does_not_persist(self, db, alice):
        with pytest.raises(ConflictError):
            accounts.signup(db, "alice@example.com", "secret9")
        assert db.query(models.User).count() == 1

    def test_unique_index_violation_is_a_conflict(self, db, alice, monkeypatch):
        # simulates a concurrent signup that passed the lookup before ours committed
        monkeypatch.setattr(accounts, "get_user_by_email", lambda db, email: None)

        with pytest.raises(ConflictError):
            accounts.signup(db, "alice@example.com", "secret1")

        assert db.query(models.User).count() == 1


class TestLogin:
    def test_success_issues_token_for_user(self, db, tokens, alice):
        token = accounts.login(db, "alice@example.com", "secret1", tokens)
        assert tokens.verify(token) == alice.id

    def test_login_ignores_email_case(self, db, tokens, alice):
        token = accounts.login(db, "Alice@Example.com", "secret1", tokens)
        assert tokens.verify(token) == alice.id

    def test_unknown_email_and_wrong_password_are_indistinguishable(self, db, tokens, alice):
        with pytest.raises(InvalidCredentialsError) as unknown:
            accounts.login(db, "nobody@example.com", "secret1", tokens)
        with pytest.raises(InvalidCredentialsError) as wrong:
            accounts.login(db, "alice@example.com", "wrong-password", tokens)

        assert type(unknown.value) is type(wrong.value)
        assert unknown.value.message == wrong.value.message == "Invalid credentials"

    def test_invalid_credentials_is_a_validation_error(self):
        assert issubclass(InvalidCredentialsError, ValidationError)
        assert InvalidCredentialsError.status_code == 400


class TestLookups:
    def test_get_user(self, db, alice):
        assert accounts.get_user(db, alice.id).email == "alice@example.com"

    def test_get_missing_user(self, db):
        with pytest.raises(NotFoundError):
            accounts.get_user(db, 999)

    def test_get_user_by_email(self, db, alice):
        assert accounts.get_user_by_email(db, "ALICE@example.com").id == alice.id
        assert accounts.get_user_by_email(db, "carol@example.com") is None
