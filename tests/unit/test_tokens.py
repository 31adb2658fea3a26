"""Unit tests for the token issuer."""

from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from ibcrm.modules.auth import Credential, TokenIssuer, TokenType
from ibcrm.shared.exceptions import ExpiredTokenError, InvalidTokenError


@pytest.fixture
def issuer():
    return TokenIssuer("access-secret", "refresh-secret", "reset-secret")


@pytest.fixture
def record():
    return Credential.new("token@example.com", "hash")


class TestIssueAndVerify:
    """Round trips within one token class."""

    def test_access_claims(self, issuer, record):
        claims = issuer.verify(issuer.issue_access(record), TokenType.ACCESS)

        assert claims.subject == record.id
        assert claims.email == "token@example.com"
        assert claims.token_type is TokenType.ACCESS
        assert claims.purpose is None

    def test_reset_token_carries_purpose(self, issuer, record):
        claims = issuer.verify(issuer.issue_reset(record), TokenType.RESET)

        assert claims.purpose == "password-reset"

    def test_tokens_issued_back_to_back_differ(self, issuer, record):
        assert issuer.issue_refresh(record) != issuer.issue_refresh(record)

    def test_default_lifetimes(self, issuer):
        assert issuer.ttl(TokenType.ACCESS) == timedelta(hours=24)
        assert issuer.ttl(TokenType.REFRESH) == timedelta(days=7)
        assert issuer.ttl(TokenType.RESET) == timedelta(hours=1)


class TestClassSeparation:
    """A token of one class never verifies as another."""

    @pytest.mark.parametrize(
        "issue,expected",
        [
            ("issue_refresh", TokenType.ACCESS),
            ("issue_reset", TokenType.ACCESS),
            ("issue_access", TokenType.REFRESH),
            ("issue_access", TokenType.RESET),
        ],
    )
    def test_cross_class_rejected(self, issuer, record, issue, expected):
        token = getattr(issuer, issue)(record)

        with pytest.raises(InvalidTokenError):
            issuer.verify(token, expected)

    def test_type_claim_checked_even_with_shared_secret(self, record):
        issuer = TokenIssuer("same", "same", "same")
        token = issuer.issue_refresh(record)

        with pytest.raises(InvalidTokenError):
            issuer.verify(token, TokenType.ACCESS)


class TestRejection:
    """Malformed and expired tokens."""

    def test_expired(self, record):
        issuer = TokenIssuer("a", "r", "s", access_ttl=timedelta(seconds=-10))
        token = issuer.issue_access(record)

        with pytest.raises(ExpiredTokenError):
            issuer.verify(token, TokenType.ACCESS)

    def test_garbage(self, issuer):
        with pytest.raises(InvalidTokenError):
            issuer.verify("not-a-jwt", TokenType.ACCESS)

    def test_wrong_signature(self, issuer, record):
        other = TokenIssuer("other-access", "other-refresh", "other-reset")

        with pytest.raises(InvalidTokenError):
            issuer.verify(other.issue_access(record), TokenType.ACCESS)

    def test_missing_type_claim(self, issuer):
        token = jwt.encode(
            {"sub": str(uuid4()), "exp": 9999999999},
            "access-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            issuer.verify(token, TokenType.ACCESS)

    def test_subject_not_a_uuid(self, issuer):
        token = jwt.encode(
            {"sub": "42", "exp": 9999999999, "type": "access"},
            "access-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            issuer.verify(token, TokenType.ACCESS)
