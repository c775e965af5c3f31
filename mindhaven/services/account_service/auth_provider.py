"""Identity provider integration and request authorization.

Account identities live in Supabase Auth; this module creates them
through the admin API. Profile data stays in the KV store.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from mindhaven.shared.errors import AuthenticationError, UpstreamError
from mindhaven.shared.utils import hash_user_id

logger = logging.getLogger(__name__)

ACCOUNT_CREATION_FAILED = "Account creation failed"


@dataclass(frozen=True)
class AuthUser:
    """Identity returned by the provider."""
    id: str
    email: str


class AuthProvider(ABC):
    """External identity provider."""

    @abstractmethod
    def create_user(self, email: str, password: str, metadata: Dict[str, Any]) -> AuthUser:
        """Create a confirmed identity.

        Raises:
            UpstreamError: If the provider rejects the request or is unreachable
        """


class SupabaseAuthProvider(AuthProvider):
    """Supabase Auth admin API client (service-role key)."""

    def __init__(
        self,
        supabase_url: str,
        service_role_key: str,
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = supabase_url.rstrip("/")
        self.service_role_key = service_role_key
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def create_user(self, email: str, password: str, metadata: Dict[str, Any]) -> AuthUser:
        email_hash = hash_user_id(email)
        try:
            response = self.session.post(
                f"{self.base_url}/auth/v1/admin/users",
                json={
                    "email": email,
                    "password": password,
                    "user_metadata": metadata,
                    # No mail server is configured, so confirm immediately
                    "email_confirm": True,
                },
                headers={
                    "apikey": self.service_role_key,
                    "Authorization": f"Bearer {self.service_role_key}",
                },
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error(
                "AUTH_PROVIDER_UNREACHABLE",
                extra={"email_hash": email_hash, "error": str(e), "error_type": type(e).__name__}
            )
            raise UpstreamError(f"Auth provider unreachable: {e}", ACCOUNT_CREATION_FAILED) from e

        if not response.ok:
            detail = _error_detail(response)
            logger.error(
                "AUTH_PROVIDER_REJECTED",
                extra={"email_hash": email_hash, "status_code": response.status_code, "detail": detail}
            )
            raise UpstreamError(f"Auth error: {detail}", ACCOUNT_CREATION_FAILED)

        body = response.json()
        user = body.get("user", body)
        if not user or not user.get("id"):
            logger.error("AUTH_PROVIDER_NO_USER", extra={"email_hash": email_hash})
            raise UpstreamError("User creation failed - no user returned", ACCOUNT_CREATION_FAILED)

        return AuthUser(id=user["id"], email=user.get("email", email))


def _error_detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    return body.get("msg") or body.get("message") or body.get("error_description") or str(body)


def validate_bearer_token(auth_header: Optional[str]) -> str:
    """Check an Authorization header and return its token.

    Only presence is checked: the header must be "Bearer <token>" with a
    token that is not empty, "null" or "undefined". Signatures are not
    verified here.

    Raises:
        AuthenticationError: If the header or token is unusable
    """
    if not auth_header or not auth_header.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header")

    token = auth_header[len("Bearer "):].strip()
    if not token or token in ("null", "undefined"):
        raise AuthenticationError("Invalid token")

    return token
