from dataclasses import dataclass

import jwt
import pytest
from fastapi_users import exceptions

from app.core.jwt_strategy import RS256JWTStrategyWithKid


@dataclass
class FakeUser:
    id: int
    email: str


class FakeUserManager:
    def __init__(self, *users: FakeUser):
        self.users = {u.id: u for u in users}

    def parse_id(self, value):
        try:
            return int(value)
        except ValueError as e:
            raise exceptions.InvalidID() from e

    async def get(self, user_id):
        if user_id not in self.users:
            raise exceptions.UserNotExists()
        return self.users[user_id]


@pytest.fixture
def user():
    return FakeUser(id=7, email="learner@example.com")


@pytest.fixture
def strategy(tmp_path):
    return RS256JWTStrategyWithKid(
        lifetime_seconds=600,
        key_file=tmp_path / "jwt.pem",
        issuer="flashcards-test",
        audience="flashcards-app",
    )


async def test_token_round_trip(strategy, user):
    token = await strategy.write_token(user)
    assert await strategy.read_token(token, FakeUserManager(user)) == user


async def test_token_claims_and_kid_header(strategy, user):
    token = await strategy.write_token(user)
    assert jwt.get_unverified_header(token)["kid"] == "v1"
    claims = jwt.decode(token, options={"verify_signature": False})
    assert claims["sub"] == "user:7"
    assert claims["user_id"] == "7"
    assert claims["email"] == "learner@example.com"
    assert claims["iss"] == "flashcards-test"
    assert claims["exp"] - claims["iat"] == 600


async def test_signing_key_is_reused_from_file(tmp_path, user):
    first = RS256JWTStrategyWithKid(600, key_file=tmp_path / "jwt.pem", issuer="i", audience="a")
    second = RS256JWTStrategyWithKid(600, key_file=tmp_path / "jwt.pem", issuer="i", audience="a")
    token = await first.write_token(user)
    assert await second.read_token(token, FakeUserManager(user)) == user


async def test_token_from_another_key_is_rejected(tmp_path, strategy, user):
    other = RS256JWTStrategyWithKid(
        600, key_file=tmp_path / "other.pem", issuer="flashcards-test", audience="flashcards-app"
    )
    token = await other.write_token(user)
    assert await strategy.read_token(token, FakeUserManager(user)) is None


async def test_token_for_another_audience_is_rejected(tmp_path, strategy, user):
    other = RS256JWTStrategyWithKid(
        600, key_file=tmp_path / "jwt.pem", issuer="flashcards-test", audience="someone-else"
    )
    token = await other.write_token(user)
    assert await strategy.read_token(token, FakeUserManager(user)) is None


async def test_unknown_user_and_garbage_tokens(strategy, user):
    token = await strategy.write_token(user)
    assert await strategy.read_token(token, FakeUserManager()) is None
    assert await strategy.read_token("not-a-token", FakeUserManager(user)) is None
    assert await strategy.read_token(None, FakeUserManager(user)) is None


def test_jwks_publishes_public_key_only(strategy):
    jwks = strategy.get_jwks()
    (key,) = jwks["keys"]
    assert key["kty"] == "RSA"
    assert key["kid"] == "v1"
    assert key["alg"] == "RS256"
    assert key["use"] == "sig"
    assert "d" not in key
