from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass

from supabase import Client, create_client

from src.infrastructure.config import Settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UserInfo:
    id: str
    email: str | None


class AuthAdapter:
    """Decides whether a presented credential may manage images.

    Accepted, in order:
    - any token when AUTH_DISABLED=1 (local development and tests),
    - the configured API_KEY,
    - a Supabase Auth access token when SUPABASE_URL/SUPABASE_ANON_KEY are set.
    """

    def __init__(self, settings: Settings) -> None:
        self.disabled = settings.auth_disabled
        self.api_key = settings.api_key
        self._client: Client | None = None
        if not self.disabled and settings.supabase_url and settings.supabase_anon_key:
            self._client = get_supabase_client(settings.supabase_url, settings.supabase_anon_key)

    def validate_token(self, token: str) -> UserInfo:
        if not token:
            raise ValueError("Missing access token")
        if self.disabled:
            # Deterministic fake user so repeated calls agree
            digest = hashlib.sha256(token.encode("utf-8")).hexdigest()[:10]
            return UserInfo(id=f"fake-{digest}", email=None)
        if self.api_key and hmac.compare_digest(token.encode("utf-8"), self.api_key.encode("utf-8")):
            return UserInfo(id="api-key", email=None)
        if self._client is None:
            raise ValueError("Invalid access token")
        try:  # pragma: no cover - network
            res = self._client.auth.get_user(token)
            user = res.user if res else None
        except Exception as exc:  # pragma: no cover - network
            logger.info("Supabase rejected token: %s", exc)
            raise ValueError("Invalid access token") from exc
        if not user:
            raise ValueError("Invalid access token")
        return UserInfo(id=user.id, email=user.email)


_CLIENT_SINGLETON: Client | None = None


def get_supabase_client(url: str, key: str) -> Client:
    global _CLIENT_SINGLETON
    if _CLIENT_SINGLETON is None:
        _CLIENT_SINGLETON = create_client(url, key)
    return _CLIENT_SINGLETON
