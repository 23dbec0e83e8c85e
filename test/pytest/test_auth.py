# test/pytest/test_auth.py
import time

import pytest
from datetime import timedelta

from app.core.errors import AuthError, ConflictError, RateLimitError, ValidationError
from app.core.rate_limit import AttemptLimiter, attempt_key
from app.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from app.schemas.user import LoginRequest, PasswordChange, ProfileUpdate, SignupRequest
from app.services.auth_service import AuthService


def _signup(**overrides):
    base = dict(username="jane_doe", email="Jane@Example.com", password="secret123", role="student")
    base.update(overrides)
    return SignupRequest(**base)


# --------------------------------- Tokens and hashes --------------------------------------
def test_password_hash_round_trip():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong-pass", hashed)
    assert not verify_password("secret123", "")


def test_token_round_trip():
    token = create_access_token("abc", "jane", "teacher")
    user = decode_access_token(token)
    assert (user.user_id, user.username, user.role) == ("abc", "jane", "teacher")


def test_expired_and_garbage_tokens():
    expired = create_access_token("abc", "jane", "teacher", expires_delta=timedelta(seconds=-10))
    with pytest.raises(AuthError) as exc:
        decode_access_token(expired)
    assert exc.value.message == "Token expired"
    with pytest.raises(AuthError) as exc:
        decode_access_token("not.a.token")
    assert exc.value.message == "Invalid token"


# --------------------------------- Rate limiting --------------------------------------
def test_limiter_blocks_sixth_attempt():
    limiter = AttemptLimiter("login", max_attempts=5, window_seconds=900)
    key = attempt_key("127.0.0.1", "jane@example.com")
    for _ in range(5):
        limiter.hit(key)
    assert limiter.remaining(key) == 0
    with pytest.raises(RateLimitError):
        limiter.hit(key)
    # other identities are unaffected
    limiter.hit(attempt_key("127.0.0.1", "bob@example.com"))


def test_limiter_window_expires():
    limiter = AttemptLimiter("signup", max_attempts=2, window_seconds=1)
    limiter.hit("a")
    limiter.hit("a")
    with pytest.raises(RateLimitError):
        limiter.hit("a")

    time.sleep(1.2)
    limiter.hit("a")
    assert limiter.remaining("a") == 1


def test_limiters_keep_separate_counts():
    login = AttemptLimiter("login", max_attempts=1, window_seconds=900)
    signup = AttemptLimiter("signup", max_attempts=1, window_seconds=900)
    login.hit("k")
    signup.hit("k")
    with pytest.raises(RateLimitError):
        login.hit("k")

    login.reset()
    login.hit("k")


def test_attempt_key_ignores_case_and_padding():
    assert attempt_key("10.0.0.1", "Victim@Example.com") == attempt_key("10.0.0.1", " victim@example.com ")
    assert attempt_key(None, None) == "unknown:unknown"


# --------------------------------- AuthService --------------------------------------
@pytest.mark.asyncio
async def test_signup_and_login(users):
    result = await AuthService.signup(_signup(), users)
    assert result.user.email == "jane@example.com"
    assert result.user.role == "student"
    assert decode_access_token(result.token).user_id == result.user.id

    stored = users.items[result.user.id]
    assert stored.passwordHash != "secret123"

    logged = await AuthService.login(LoginRequest(email="jane@example.com", password="secret123"), users)
    assert logged.user.id == result.user.id


@pytest.mark.asyncio
async def test_signup_accepts_admin_alias(users):
    result = await AuthService.signup(_signup(role="college_admin"), users)
    assert result.user.role == "admin"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [{"username": "x"}, {"email": "nope"}, {"password": "123"}, {"role": "janitor"}, {"role": None}],
)
async def test_signup_validation(users, overrides):
    with pytest.raises(ValidationError):
        await AuthService.signup(_signup(**overrides), users)
    assert users.items == {}


@pytest.mark.asyncio
async def test_signup_duplicate(users):
    await AuthService.signup(_signup(), users)
    with pytest.raises(ConflictError):
        await AuthService.signup(_signup(username="someone_else"), users)
    with pytest.raises(ConflictError):
        await AuthService.signup(_signup(email="other@example.com"), users)


@pytest.mark.asyncio
async def test_login_failures(users):
    await AuthService.signup(_signup(), users)
    with pytest.raises(ValidationError):
        await AuthService.login(LoginRequest(email="bad", password="secret123"), users)
    with pytest.raises(AuthError) as exc:
        await AuthService.login(LoginRequest(email="jane@example.com", password="wrong-pass"), users)
    assert exc.value.message == "Invalid email or password"
    with pytest.raises(AuthError):
        await AuthService.login(LoginRequest(email="ghost@example.com", password="secret123"), users)


@pytest.mark.asyncio
async def test_profile_and_password(users):
    first = await AuthService.signup(_signup(), users)
    await AuthService.signup(_signup(username="taken_name", email="taken@example.com"), users)
    me = decode_access_token(first.token)

    updated = await AuthService.update_profile(ProfileUpdate(username="jane_smith"), me, users)
    assert updated.username == "jane_smith"
    assert updated.email == "jane@example.com"

    with pytest.raises(ConflictError):
        await AuthService.update_profile(ProfileUpdate(email="taken@example.com"), me, users)

    with pytest.raises(AuthError):
        await AuthService.change_password(
            PasswordChange(currentPassword="wrong-pass", newPassword="newsecret"), me, users)
    await AuthService.change_password(
        PasswordChange(currentPassword="secret123", newPassword="newsecret"), me, users)
    await AuthService.login(LoginRequest(email="jane@example.com", password="newsecret"), users)
