import asyncio

import pytest

from notiapp_backend.core.errors import (
    AuthError,
    EmailInUseError,
    UserNotFoundError,
    ValidationError,
    WrongPasswordError,
)
from notiapp_backend.core.session import SessionContext
from notiapp_backend.stores import FirebaseAuthProvider, InMemoryAuthProvider


def test_session_is_loading_until_first_notification():
    session = SessionContext(InMemoryAuthProvider())
    assert session.loading
    session.start()
    assert not session.loading
    assert session.current_user is None
    assert session.user_id is None


def test_sign_up_then_sign_in_updates_listeners():
    provider = InMemoryAuthProvider()
    session = SessionContext(provider)
    seen = []
    session.add_listener(lambda s: seen.append(s.user_id))
    session.start()

    async def scenario():
        user = await session.sign_up("ana@example.com", "secret1")
        await session.sign_out()
        await session.sign_in("ana@example.com", "secret1")
        return user

    user = asyncio.run(scenario())
    assert seen == [None, user.id, None, user.id]
    assert session.is_authenticated
    assert session.to_dict()["currentUser"]["email"] == "ana@example.com"


@pytest.mark.parametrize(
    "email, password",
    [("not-an-email", "secret1"), ("ana@example.com", ""), ("ana@example.com", "   ")],
)
def test_sign_in_validates_before_calling_provider(email, password):
    session = SessionContext(InMemoryAuthProvider())
    session.start()
    with pytest.raises(ValidationError):
        asyncio.run(session.sign_in(email, password))


def test_sign_up_rejects_short_password():
    session = SessionContext(InMemoryAuthProvider())
    session.start()
    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(session.sign_up("ana@example.com", "12345"))
    assert excinfo.value.field == "password"


def test_provider_errors_carry_user_facing_messages():
    provider = InMemoryAuthProvider()
    session = SessionContext(provider)
    session.start()

    with pytest.raises(UserNotFoundError) as excinfo:
        asyncio.run(session.sign_in("nobody@example.com", "secret1"))
    assert excinfo.value.message == "No account found with this email."

    asyncio.run(session.sign_up("ana@example.com", "secret1"))
    with pytest.raises(WrongPasswordError):
        asyncio.run(session.sign_in("ana@example.com", "wrong-password"))
    with pytest.raises(EmailInUseError):
        asyncio.run(session.sign_up("ana@example.com", "another1"))


def test_subscription_failure_is_fatal():
    session = SessionContext(FirebaseAuthProvider(api_key=""))
    with pytest.raises(AuthError):
        session.start()
    assert session.loading
    assert session.fatal_error == "Firebase API key is not configured."


def test_stop_unsubscribes():
    provider = InMemoryAuthProvider()
    session = SessionContext(provider)
    session.start()
    session.stop()
    asyncio.run(provider.sign_up("ana@example.com", "secret1"))
    assert session.current_user is None
