import base64
import json
import logging
import secrets
import urllib.parse
from typing import Any, Dict, Iterable, Optional

import httpx

from .token_manager import TokenInfo, TokenManager

logger = logging.getLogger(__name__)

SPOTIFY_ACCOUNTS_BASE_URL = "https://accounts.spotify.com"

SCOPES = (
    "playlist-read-private",
    "playlist-read-collaborative",
    "playlist-modify-public",
    "playlist-modify-private",
    "user-library-modify",
)


class SpotifyAuthError(RuntimeError):
    """Raised when Spotify's accounts service rejects or fails a token request."""


def extract_code_from_redirect_url(redirect_url: str) -> Dict[str, str]:
    """Parse a redirect URL and return {"code": ..., "state": ...} (missing keys omitted)."""

    parsed = urllib.parse.urlparse(str(redirect_url or "").strip())
    qs = urllib.parse.parse_qs(parsed.query)
    out: Dict[str, str] = {}
    if qs.get("code"):
        out["code"] = str(qs["code"][0])
    if qs.get("state"):
        out["state"] = str(qs["state"][0])
    if qs.get("error"):
        out["error"] = str(qs["error"][0])
    return out


def basic_auth_header(client_id: str, client_secret: str) -> str:
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def spotify_app_setup_instructions(*, redirect_uri: str) -> str:
    """Return user-facing setup instructions for creating a Spotify Developer app."""

    return (
        "Spotify app setup:\n"
        "1) Go to https://developer.spotify.com/dashboard\n"
        "2) Create an app (or select an existing app)\n"
        f"3) Add this Redirect URI in the app settings: {redirect_uri}\n"
        "4) Run `spores configure` and enter the app's Client ID and Client secret\n"
    )


class SpotifyAuth:
    """Spotify OAuth (Authorization Code with client secret) helper."""

    def __init__(
        self,
        config: Dict[str, Any],
        *,
        token_manager: Optional[TokenManager] = None,
        scopes: Iterable[str] = SCOPES,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config or {}
        self.token_manager = token_manager or TokenManager()
        self.scopes = tuple(scopes)
        self.transport = transport

    @property
    def client_id(self) -> str:
        return str(self.config.get("client_id", "")).strip()

    @property
    def redirect_uri(self) -> str:
        return str(self.config.get("redirect_uri", "")).strip()

    @staticmethod
    def new_state() -> str:
        return secrets.token_urlsafe(16).rstrip("=")

    def get_authorize_url(self, *, state: str, show_dialog: bool = False) -> str:
        if not self.client_id:
            raise ValueError("Missing client_id in config")
        if not self.redirect_uri:
            raise ValueError("Missing redirect_uri in config")

        params: Dict[str, str] = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(self.scopes),
            "state": str(state),
        }
        if show_dialog:
            params["show_dialog"] = "true"

        return f"{SPOTIFY_ACCOUNTS_BASE_URL}/authorize?{urllib.parse.urlencode(params)}"

    def exchange_code_for_token(self, *, code: str) -> TokenInfo:
        payload = self._post_form(
            f"{SPOTIFY_ACCOUNTS_BASE_URL}/api/token",
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            },
        )
        token = TokenInfo.from_spotify_token_response(payload)
        if not token.access_token:
            raise SpotifyAuthError(f"Spotify token exchange failed: {payload}")

        # Spotify echoes granted scopes; fall back to what was asked for.
        if not token.scope:
            token = TokenInfo(
                access_token=token.access_token,
                token_type=token.token_type,
                expires_at=token.expires_at,
                refresh_token=token.refresh_token,
                scope=" ".join(self.scopes),
            )

        self.token_manager.save(token)
        return token

    def refresh_access_token(self, *, refresh_token: str, previous_scope: Optional[str] = None) -> TokenInfo:
        payload = self._post_form(
            f"{SPOTIFY_ACCOUNTS_BASE_URL}/api/token",
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
        )

        token = TokenInfo.from_spotify_token_response(payload)
        if not token.access_token:
            raise SpotifyAuthError(f"Spotify token refresh failed: {payload}")

        # Spotify may omit refresh_token and scope on refresh; keep existing.
        token = TokenInfo(
            access_token=token.access_token,
            token_type=token.token_type,
            expires_at=token.expires_at,
            refresh_token=token.refresh_token or refresh_token,
            scope=token.scope or previous_scope,
        )

        self.token_manager.save(token)
        return token

    def load_cached_token(self) -> Optional[TokenInfo]:
        return self.token_manager.load()

    def get_cached_or_refreshed_token(self) -> Optional[TokenInfo]:
        """Return a usable token without user interaction, or None.

        A cached token missing any requested scope is not usable.
        """
        token = self.load_cached_token()
        if token is None:
            logger.debug("No cached token at %s", self.token_manager.cache_path)
            return None

        if not token.has_scopes(self.scopes):
            logger.debug("Cached token lacks scopes %s", sorted(set(self.scopes) - token.scopes))
            return None

        if not self.token_manager.is_expired(token):
            return token

        if not token.refresh_token:
            logger.debug("Cached token expired and has no refresh_token")
            return None

        logger.debug("Refreshing expired access token")
        return self.refresh_access_token(refresh_token=token.refresh_token, previous_scope=token.scope)

    def _post_form(self, url: str, form: Dict[str, Any]) -> Dict[str, Any]:
        data = {k: str(v) for k, v in (form or {}).items() if v is not None}
        client_secret = str(self.config.get("client_secret", "")).strip()

        try:
            with httpx.Client(
                timeout=float(self.config.get("http_timeout", 30.0)),
                follow_redirects=False,
                transport=self.transport,
            ) as client:
                resp = client.post(
                    url,
                    data=data,
                    headers={
                        "Content-Type": "application/x-www-form-urlencoded",
                        "Authorization": basic_auth_header(self.client_id, client_secret),
                    },
                )
        except httpx.HTTPError as e:
            raise SpotifyAuthError(f"Spotify token request failed: {e}") from e

        if resp.status_code >= 400:
            raise SpotifyAuthError(f"Spotify token request failed (HTTP {resp.status_code}): {resp.text}")

        try:
            payload = resp.json()
        except json.JSONDecodeError as e:
            raise SpotifyAuthError(f"Spotify token response was not JSON: {resp.text}") from e

        if not isinstance(payload, dict):
            raise SpotifyAuthError(f"Spotify token response was not an object: {payload}")

        return payload
