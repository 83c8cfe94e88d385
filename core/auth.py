from __future__ import annotations

import hmac
from typing import Callable, Optional

Authorizer = Callable[[Optional[str]], bool]


def make_authorizer(admin_token: str) -> Authorizer:
    """Return ``authorize(token) -> bool`` for the shared admin token.

    A missing token is compared as the empty string.
    """
    expected = admin_token.encode("utf-8")

    def authorize(token: Optional[str]) -> bool:
        return hmac.compare_digest((token or "").encode("utf-8"), expected)

    return authorize
