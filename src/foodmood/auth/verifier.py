"""
Google Sign-In ID token verification.

Tokens are checked against Google's tokeninfo endpoint. A token is accepted when:
- the endpoint answers 2xx with a JSON payload,
- the issuer is one of `auth.issuers`,
- the audience matches `auth.client_id` (skipped when no client id is configured),
- a `sub` (the stable Google user id) is present.

Anything else (expired token, bad signature, network error) means "no user": callers get
None and treat the request as anonymous.
"""

from __future__ import annotations

import logging

import httpx

from foodmood.config.settings import Settings
from foodmood.core.http import get_json

logger = logging.getLogger(__name__)


class UserVerifier:
    def __init__(self, settings: Settings):
        self._settings = settings

    def get_user_id(self, id_token: str | None) -> str | None:
        """Return the verified user id for `id_token`, or None."""
        if not id_token or not id_token.strip():
            return None

        cfg = self._settings.auth
        try:
            payload = get_json(
                cfg.tokeninfo_url,
                params={"id_token": id_token.strip()},
                timeout_seconds=self._settings.app.http_timeout_seconds,
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.info("ID token verification failed: %s", str(e))
            return None

        if not isinstance(payload, dict):
            return None
        if payload.get("iss") not in set(cfg.issuers):
            logger.info("ID token rejected: unexpected issuer %r", payload.get("iss"))
            return None
        if cfg.client_id and payload.get("aud") != cfg.client_id:
            logger.info("ID token rejected: audience mismatch")
            return None

        sub = payload.get("sub")
        return str(sub) if sub else None
