import time
from typing import Any, Dict

from ..spotify_api.token_manager import TokenManager


def cmd_auth_status(token_manager: TokenManager) -> Dict[str, Any]:
    """Describe the token cache without touching the network."""
    token = token_manager.load()
    if token is None:
        return {
            "cached": False,
            "expired": None,
            "expires_at": None,
            "scope": None,
            "token_cache": token_manager.cache_path,
        }

    return {
        "cached": True,
        "expired": token_manager.is_expired(token),
        "expires_at": time.strftime("%Y-%m-%dT%H:%M:%S%z", time.localtime(float(token.expires_at))),
        "scope": sorted(token.scopes),
        "token_cache": token_manager.cache_path,
    }


def cmd_auth_logout(token_manager: TokenManager) -> Dict[str, Any]:
    return {
        "cleared": token_manager.clear(),
        "token_cache": token_manager.cache_path,
    }
