import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from google.auth.transport.requests import Request as GoogleRequest
from google.oauth2 import id_token
from google_auth_oauthlib.flow import Flow

from resort.config import Settings, settings

logger = logging.getLogger(__name__)


class GoogleOAuthError(Exception):
    """Raised when the Google sign-in exchange fails"""


@dataclass
class GoogleProfile:
    email: str
    name: Optional[str]
    google_id: str


class GoogleOAuthClient:
    """OAuth 2.0 sign-in with Google accounts"""

    SCOPES = [
        'openid',
        'https://www.googleapis.com/auth/userinfo.email',
        'https://www.googleapis.com/auth/userinfo.profile'
    ]

    def __init__(self, config: Settings = settings):
        self.config = config

    @property
    def is_configured(self) -> bool:
        return bool(self.config.GOOGLE_CLIENT_ID and self.config.GOOGLE_CLIENT_SECRET)

    def _flow(self, state: Optional[str] = None, code_verifier: Optional[str] = None) -> Flow:
        client_config = {
            "web": {
                "client_id": self.config.GOOGLE_CLIENT_ID,
                "client_secret": self.config.GOOGLE_CLIENT_SECRET,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": [self.config.GOOGLE_REDIRECT_URI],
            }
        }
        return Flow.from_client_config(
            client_config,
            scopes=self.SCOPES,
            redirect_uri=self.config.GOOGLE_REDIRECT_URI,
            state=state,
            code_verifier=code_verifier,
        )

    def authorization_url(self) -> Tuple[str, str, Optional[str]]:
        """Return the consent URL, its state value and the PKCE code verifier"""
        flow = self._flow()
        url, state = flow.authorization_url(prompt='select_account', include_granted_scopes='true')
        return url, state, flow.code_verifier

    def fetch_profile(self, code: str, state: str, code_verifier: Optional[str] = None) -> GoogleProfile:
        """Exchange an authorization code for the signed-in user's profile"""
        flow = self._flow(state=state, code_verifier=code_verifier)
        try:
            flow.fetch_token(code=code)
            claims = id_token.verify_oauth2_token(
                flow.credentials.id_token,
                GoogleRequest(),
                self.config.GOOGLE_CLIENT_ID
            )
        except Exception as e:
            logger.warning("Google token exchange failed: %s", e)
            raise GoogleOAuthError("Google authentication failed") from e

        email = claims.get("email")
        if not email:
            raise GoogleOAuthError("Email not found in Google profile")

        return GoogleProfile(email=email, name=claims.get("name"), google_id=claims["sub"])


def get_google_client() -> GoogleOAuthClient:
    return GoogleOAuthClient(settings)
