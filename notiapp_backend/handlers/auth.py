"""
Auth command handlers
Sign in/up/out intents and the session projection
"""

from typing import Any, Dict

from notiapp_backend.core.logger import get_logger
from notiapp_backend.models import SignInRequest, SignUpRequest
from notiapp_backend.system.runtime import get_runtime

from . import api_handler, error_response, success_response

logger = get_logger(__name__)


async def _session_data() -> Dict[str, Any]:
    runtime = get_runtime()
    # Let the fetch triggered by the auth change settle before projecting
    await runtime.engine.drain()
    return {
        "session": runtime.session.to_dict(),
        "view": runtime.engine.view().to_dict(),
    }


@api_handler(method="GET", path="/auth/session")
async def get_session() -> Dict[str, Any]:
    """Get the current session (loading flag, user, fatal error).

    @returns Session state
    """
    try:
        return success_response(get_runtime().session.to_dict())
    except Exception as e:
        return error_response(e)


@api_handler(body=SignInRequest, path="/auth/sign_in")
async def sign_in(body: SignInRequest) -> Dict[str, Any]:
    """Sign in with email and password.

    @param body - Email and password.
    @returns Session and the freshly loaded schedule view
    """
    try:
        await get_runtime().session.sign_in(body.email, body.password)
        return success_response(await _session_data(), "Signed in")
    except Exception as e:
        return error_response(e)


@api_handler(body=SignUpRequest, path="/auth/sign_up")
async def sign_up(body: SignUpRequest) -> Dict[str, Any]:
    """Create an account; the new account is signed in right away.

    @param body - Email and password (at least 6 characters).
    @returns Session and the (empty) schedule view
    """
    try:
        await get_runtime().session.sign_up(body.email, body.password)
        return success_response(await _session_data(), "Account created")
    except Exception as e:
        return error_response(e)


@api_handler(path="/auth/sign_out")
async def sign_out() -> Dict[str, Any]:
    """Sign out; the schedule list is cleared.

    @returns Session state
    """
    try:
        await get_runtime().session.sign_out()
        return success_response(await _session_data(), "Signed out")
    except Exception as e:
        return error_response(e)
