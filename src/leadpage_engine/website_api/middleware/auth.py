"""Owner identity check for dashboard routes.

The identity provider signs the user id with the shared secret and the
client forwards both headers:

    X-LP-User:      <user id>
    X-LP-Signature: HMAC-SHA256(secret, user id), hex encoded
"""

import hmac
import hashlib
from fastapi import Request, HTTPException
from ..config import settings


def sign_user_id(user_id: str, secret: str) -> str:
    return hmac.new(secret.encode(), user_id.encode(), hashlib.sha256).hexdigest()


async def current_user(request: Request) -> str:
    """Resolve the signed user id from the request headers."""
    user_id = request.headers.get("X-LP-User", "").strip()
    signature = request.headers.get("X-LP-Signature", "")

    if user_id and signature:
        expected = sign_user_id(user_id, settings.api_secret)
        if hmac.compare_digest(signature.encode("latin-1"), expected.encode()):
            return user_id

    raise HTTPException(
        status_code=401,
        detail={"success": False, "error": "auth_error", "detail": "Invalid or missing authentication"},
    )
