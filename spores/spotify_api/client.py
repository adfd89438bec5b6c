import json
import logging
import urllib.parse
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx

from .ids import SpotifyId
from .token_manager import TokenInfo

logger = logging.getLogger(__name__)

SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1"

# Per-request limits documented by the Web API.
MAX_PLAYLIST_ITEMS_PER_REQUEST = 100
MAX_SAVED_TRACKS_PER_REQUEST = 50
MAX_SAVED_ALBUMS_PER_REQUEST = 20

SEARCH_TYPES = ("track", "album", "artist", "playlist")


class SpotifyAPIError(RuntimeError):
    """A Web API call failed. status is None for transport errors."""

    def __init__(self, message: str, *, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def _chunks(seq: Sequence[Any], size: int) -> Iterable[Sequence[Any]]:
    for start in range(0, len(seq), size):
        yield seq[start:start + size]


def _error_message(resp: httpx.Response) -> str:
    """Pull Spotify's {"error": {"message": ...}} out of a failed response."""
    try:
        payload = resp.json()
    except (json.JSONDecodeError, ValueError):
        return resp.text or resp.reason_phrase
    err = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(err, dict):
        return str(err.get("message") or err)
    if isinstance(err, str):
        return payload.get("error_description") or err
    return resp.text


class SpotifyClient:
    """Thin Spotify Web API client.

    Each method is one HTTP call (chunked writes excepted) and returns the
    decoded JSON body. Failures raise SpotifyAPIError; nothing is retried.
    """

    def __init__(
        self,
        token: TokenInfo,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        base_url: str = SPOTIFY_API_BASE_URL,
    ):
        self.token = token
        self._http = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"{token.token_type or 'Bearer'} {token.access_token}",
                "Accept": "application/json",
            },
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "SpotifyClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -----------------
    # HTTP helpers
    # -----------------

    def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """Make a Spotify Web API request and return parsed JSON ({} for empty bodies)."""

        clean_params = {k: str(v) for k, v in (params or {}).items() if v is not None}
        logger.debug("%s %s params=%s", method.upper(), path, clean_params)

        try:
            resp = self._http.request(method.upper(), path, params=clean_params or None, json=json_body)
        except httpx.HTTPError as e:
            raise SpotifyAPIError(f"Spotify API request failed: {e}") from e

        if resp.status_code >= 400:
            raise SpotifyAPIError(
                f"Spotify API error {resp.status_code}: {_error_message(resp)}",
                status=resp.status_code,
            )

        if not resp.content:
            return {}

        try:
            payload = resp.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise SpotifyAPIError(
                f"Spotify API response was not JSON (status {resp.status_code}): {resp.text}",
                status=resp.status_code,
            ) from e

        # Some write endpoints answer with a bare array or null.
        return payload if isinstance(payload, dict) else {}

    # -----------------
    # Endpoints
    # -----------------

    def me(self) -> Dict[str, Any]:
        return self.request_json("GET", "/me")

    def search(self, query: str, search_type: str, *, limit: int = 20, offset: int = 0) -> Dict[str, Any]:
        if search_type not in SEARCH_TYPES:
            raise ValueError(f"Unsupported search type: {search_type}")
        return self.request_json(
            "GET",
            "/search",
            params={"q": query, "type": search_type, "limit": limit, "offset": offset},
        )

    def current_user_playlists(self, *, limit: int = 50, offset: int = 0) -> Dict[str, Any]:
        return self.request_json("GET", "/me/playlists", params={"limit": limit, "offset": offset})

    def create_playlist(
        self,
        user_id: str,
        name: str,
        *,
        public: bool = False,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"name": name, "public": bool(public)}
        if description is not None:
            body["description"] = description
        # user ids are free-form and may contain "/" or "#"
        user = urllib.parse.quote(user_id, safe="")
        return self.request_json("POST", f"/users/{user}/playlists", json_body=body)

    def playlist(self, playlist: SpotifyId) -> Dict[str, Any]:
        return self.request_json(
            "GET",
            f"/playlists/{playlist.id}",
            params={"additional_types": "track,episode"},
        )

    def playlist_items(self, playlist: SpotifyId, *, limit: int = 100, offset: int = 0) -> Dict[str, Any]:
        return self.request_json(
            "GET",
            f"/playlists/{playlist.id}/tracks",
            params={"limit": limit, "offset": offset, "additional_types": "track,episode"},
        )

    def playlist_add_items(self, playlist: SpotifyId, items: List[SpotifyId]) -> Dict[str, Any]:
        """Append playable items in request-sized chunks; returns the last response."""
        result: Dict[str, Any] = {}
        uris = [item.uri for item in items]
        for chunk in _chunks(uris, MAX_PLAYLIST_ITEMS_PER_REQUEST):
            result = self.request_json("POST", f"/playlists/{playlist.id}/tracks", json_body={"uris": list(chunk)})
        return result

    def saved_tracks_add(self, tracks: List[SpotifyId]) -> None:
        ids = [t.id for t in tracks]
        for chunk in _chunks(ids, MAX_SAVED_TRACKS_PER_REQUEST):
            self.request_json("PUT", "/me/tracks", json_body={"ids": list(chunk)})

    def saved_albums_add(self, albums: List[SpotifyId]) -> None:
        ids = [a.id for a in albums]
        for chunk in _chunks(ids, MAX_SAVED_ALBUMS_PER_REQUEST):
            self.request_json("PUT", "/me/albums", json_body={"ids": list(chunk)})

    def playlist_follow(self, playlist: SpotifyId, *, public: bool = True) -> None:
        self.request_json("PUT", f"/playlists/{playlist.id}/followers", json_body={"public": bool(public)})
