from typing import Any, Dict, List

from ..spotify_api.client import SpotifyClient
from ..spotify_api.ids import parse_ids

SAVE_ARTIST_ERROR = "saving artists is not supported; use 'follow' instead"


def cmd_save(client: SpotifyClient, item_type: str, ids: List[str]) -> Dict[str, Any]:
    """Save tracks or albums to the library, or follow playlists.

    Artists cannot be saved; the returned document carries an "error" key.
    """
    if item_type == "artist":
        return {"error": SAVE_ARTIST_ERROR}

    if not ids:
        raise ValueError("At least one id is required")

    if item_type == "track":
        client.saved_tracks_add(parse_ids(ids, "track"))
    elif item_type == "album":
        client.saved_albums_add(parse_ids(ids, "album"))
    elif item_type == "playlist":
        for pid in parse_ids(ids, "playlist"):
            client.playlist_follow(pid)
    else:
        raise ValueError(f"Unsupported item type: {item_type}")

    return {
        "type": item_type,
        "saved": len(ids),
        "ids": list(ids),
    }
