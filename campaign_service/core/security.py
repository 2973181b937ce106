import logging
from typing import Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from campaign_service.core.exceptions import InvalidTokenException
from campaign_service.models.identity import Identity

logger = logging.getLogger(__name__)


class GoogleIdentityVerifier:
    """Verifies Google ID tokens issued for ``client_id``.

    Built once at startup and shared by every request; the HTTP transport
    is reused for fetching Google's signing certificates.
    """

    def __init__(self, client_id: Optional[str], request: Optional[google_requests.Request] = None):
        self.client_id = client_id
        self._request = request or google_requests.Request()

    def verify(self, token: str) -> Identity:
        try:
            claims = id_token.verify_oauth2_token(token, self._request, audience=self.client_id)
        except (ValueError, GoogleAuthError) as e:
            logger.info(f"Rejected identity token: {e}")
            raise InvalidTokenException() from e
        if not claims or "sub" not in claims:
            raise InvalidTokenException()
        return Identity.from_claims(claims)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of an ``Authorization: Bearer <token>`` header, if any."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None
