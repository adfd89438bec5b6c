import json
import logging
import math
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from ..config import get_token_cache_path

logger = logging.getLogger(__name__)

# 9999-12-31T23:59:59Z; later values overflow time.localtime
MAX_EXPIRES_AT = 253402300799


@dataclass(frozen=True)
class TokenInfo:
    """Canonical token payload stored by TokenManager."""

    access_token: str
    token_type: str
    expires_at: float
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    @staticmethod
    def from_spotify_token_response(payload: Dict[str, Any], *, now: Optional[float] = None) -> "TokenInfo":
        """Convert Spotify token response JSON into TokenInfo.

        Spotify returns:
        - access_token
        - token_type
        - expires_in (seconds)
        - refresh_token (optional)
        - scope (space-delimited string)
        """

        now_ts = float(time.time() if now is None else now)
        expires_in = float(payload.get("expires_in", 0))

        return TokenInfo(
            access_token=str(payload.get("access_token", "")),
            token_type=str(payload.get("token_type", "Bearer")),
            expires_at=now_ts + expires_in,
            refresh_token=payload.get("refresh_token"),
            scope=payload.get("scope"),
        )

    @property
    def scopes(self) -> frozenset:
        return frozenset(s for s in (self.scope or "").split() if s)

    def has_scopes(self, required: Iterable[str]) -> bool:
        return set(required).issubset(self.scopes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "expires_at": self.expires_at,
            "refresh_token": self.refresh_token,
            "scope": self.scope,
        }


class TokenManager:
    """Reads and writes the on-disk token cache and answers expiry questions."""

    def __init__(self, *, cache_path: Optional[str] = None):
        self.cache_path = str(cache_path or get_token_cache_path())

    def ensure_cache_dir(self) -> None:
        parent = os.path.dirname(self.cache_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

    def exists(self) -> bool:
        return os.path.exists(self.cache_path)

    def load(self) -> Optional[TokenInfo]:
        """Load cached token info from disk; unreadable caches count as missing."""
        if not self.exists():
            return None

        try:
            with open(self.cache_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.debug("Ignoring unreadable token cache %s: %s", self.cache_path, e)
            return None

        if not isinstance(data, dict) or not data.get("access_token"):
            return None

        try:
            expires_at = float(data.get("expires_at", 0))
        except (TypeError, ValueError) as e:
            logger.debug("Ignoring malformed token cache %s: %s", self.cache_path, e)
            return None

        # json accepts NaN / Infinity and huge floats; none of them is a timestamp
        if not math.isfinite(expires_at) or not 0 <= expires_at <= MAX_EXPIRES_AT:
            logger.debug("Ignoring token cache %s with expires_at=%r", self.cache_path, expires_at)
            return None

        return TokenInfo(
            access_token=str(data.get("access_token", "")),
            token_type=str(data.get("token_type", "Bearer")),
            expires_at=expires_at,
            refresh_token=data.get("refresh_token"),
            scope=data.get("scope"),
        )

    def save(self, token: TokenInfo) -> None:
        """Persist token info to disk, readable by the owner only."""
        self.ensure_cache_dir()
        fd = os.open(self.cache_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            # the mode above only applies to new files
            try:
                os.fchmod(f.fileno(), 0o600)
            except (AttributeError, OSError):
                logger.debug("Could not restrict permissions on %s", self.cache_path)
            json.dump(token.to_dict(), f, indent=2)

    def clear(self) -> bool:
        """Remove the cache file. Returns True if a file was removed."""
        if not self.exists():
            return False
        os.remove(self.cache_path)
        return True

    @staticmethod
    def is_expired(token: TokenInfo, *, skew_seconds: int = 60, now: Optional[float] = None) -> bool:
        now_ts = time.time() if now is None else float(now)
        return now_ts >= float(token.expires_at) - float(skew_seconds)
