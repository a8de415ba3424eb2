"""Per-browser UI state kept in a signed cookie.

The cookie holds the cart and the armed delete confirmations. It is a JWT
(HS256) so a tampered or expired cookie is simply discarded.
"""
import logging
import time
from typing import Any, Dict, Optional

import jwt
from fastapi import Request
from starlette.responses import Response

from . import config
from .confirmation import DeleteConfirmation

logger = logging.getLogger(__name__)

COOKIE_NAME = "storefront_session"
ALGORITHM = "HS256"
EXP_SECONDS = 60 * 60 * 24  # 1 day


def encode_session(data: Dict[str, Any], secret: Optional[str] = None, expires_delta: Optional[int] = None) -> str:
    now = int(time.time())
    exp = now + (expires_delta or EXP_SECONDS)
    payload = {"data": data, "iat": now, "exp": exp}
    return jwt.encode(payload, secret or config.get_settings().session_secret, algorithm=ALGORITHM)


def decode_session(token: Optional[str], secret: Optional[str] = None) -> Dict[str, Any]:
    if not token:
        return {}
    try:
        payload = jwt.decode(token, secret or config.get_settings().session_secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError as e:
        logger.info("discarding session cookie: %s", e)
        return {}
    data = payload.get("data")
    return data if isinstance(data, dict) else {}


class BrowserSession:
    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = data or {}
        self.modified = False

    @property
    def cart(self) -> list:
        return list(self.data.get("cart", []))

    @cart.setter
    def cart(self, items: list):
        self.data["cart"] = items
        self.modified = True

    def confirmation(self, scope: str) -> DeleteConfirmation:
        state = self.data.get("confirm", {}).get(scope)
        return DeleteConfirmation.from_state(state, timeout=config.get_settings().confirm_timeout)

    def store_confirmation(self, scope: str, confirmation: DeleteConfirmation):
        confirm = dict(self.data.get("confirm", {}))
        state = confirmation.to_state()
        if state is None:
            confirm.pop(scope, None)
        else:
            confirm[scope] = state
        self.data["confirm"] = confirm
        self.modified = True

    def commit(self, response: Response) -> Response:
        if self.modified:
            response.set_cookie(COOKIE_NAME, encode_session(self.data), max_age=EXP_SECONDS, httponly=True, samesite="lax")
        return response


def get_session(request: Request) -> BrowserSession:
    return BrowserSession(decode_session(request.cookies.get(COOKIE_NAME)))
