"""Signed session tokens.

A token carries the user id and the time it was signed, and is protected
with the app secret (itsdangerous). Two policies:

* ``max_age`` set: the token stops verifying once it is older than that.
* ``max_age`` None: permanent, valid for as long as the signature checks out.

`verify` never raises; anything that doesn't decode to a user id is None.
"""

from __future__ import annotations

from typing import Any, Optional

from flask import Flask, current_app
from itsdangerous import BadData, URLSafeTimedSerializer

CODEC_KEY = "bakeryshop.token_codec"


class TokenCodec:
    def __init__(self, secret_key: str, salt: str = "bakeryshop-auth", max_age: Optional[int] = None):
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret_key, salt=salt)

    def issue(self, user_id: int) -> str:
        return self._serializer.dumps({"uid": int(user_id)})

    def verify(self, token: Any) -> Optional[int]:
        if not token or not isinstance(token, str):
            return None
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except BadData:
            # covers bad signature, expiry and undecodable payloads
            return None
        if not isinstance(payload, dict):
            return None
        uid = payload.get("uid")
        if isinstance(uid, bool) or not isinstance(uid, int):
            return None
        return uid


def init_token_codec(app: Flask) -> TokenCodec:
    codec = TokenCodec(
        app.config["SECRET_KEY"],
        salt=app.config.get("TOKEN_SALT") or "bakeryshop-auth",
        max_age=app.config.get("TOKEN_MAX_AGE"),
    )
    app.extensions[CODEC_KEY] = codec
    return codec


def issue_token(user_id: int) -> str:
    return current_app.extensions[CODEC_KEY].issue(user_id)


def verify_token(token: Any) -> Optional[int]:
    return current_app.extensions[CODEC_KEY].verify(token)
