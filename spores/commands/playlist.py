from typing import Any, Dict, List, Optional

from ..spotify_api.client import SpotifyClient
from ..spotify_api.data_loader import SpotifyDataLoader
from ..spotify_api.ids import parse_id, parse_ids, playlist_id
from ..utils.logger import log_debug

PLAYLIST_PAGE_SIZE = 50


def cmd_playlist_list(client: SpotifyClient) -> Dict[str, Any]:
    playlists = SpotifyDataLoader(client).list_all_playlists(limit=PLAYLIST_PAGE_SIZE)
    return {
        "total": len(playlists),
        "playlists": playlists,
    }


def cmd_playlist_create(
    client: SpotifyClient,
    name: str,
    public: bool = False,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    user = client.me()
    user_id = parse_id(user.get("id") or "", "user")
    log_debug(f"Creating playlist {name!r} for user {user_id.id}")

    playlist = client.create_playlist(user_id.id, name, public=public, description=description)
    summary = SpotifyDataLoader.normalize_playlist_summary(playlist)

    return {
        "id": summary["id"],
        "name": playlist.get("name"),
        "public": bool(playlist.get("public") or False),
        "description": playlist.get("description"),
        "url": summary["url"],
    }


def cmd_playlist_info(client: SpotifyClient, playlist: str, all_items: bool = False) -> Dict[str, Any]:
    pid = playlist_id(playlist)
    return SpotifyDataLoader(client).load_playlist(pid, all_items=all_items)


def cmd_playlist_add(client: SpotifyClient, playlist: str, tracks: List[str]) -> Dict[str, Any]:
    if not tracks:
        raise ValueError("At least one track is required")

    pid = playlist_id(playlist)
    track_ids = parse_ids(tracks, "track")

    result = client.playlist_add_items(pid, track_ids)
    return {
        "playlist": playlist,
        "added": len(track_ids),
        "snapshot_id": result.get("snapshot_id"),
    }
