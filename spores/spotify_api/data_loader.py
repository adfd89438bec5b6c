from typing import Any, Dict, List, Optional

from .client import SpotifyClient
from .ids import SpotifyId, uri_for

UNKNOWN_OWNER = "unknown"


def _artist_names(obj: Dict[str, Any]) -> List[str]:
    return [a.get("name") for a in (obj.get("artists") or []) if isinstance(a, dict)]


def _owner_name(obj: Dict[str, Any]) -> str:
    owner = obj.get("owner")
    if isinstance(owner, dict) and owner.get("display_name"):
        return owner["display_name"]
    return UNKNOWN_OWNER


def _spotify_url(obj: Dict[str, Any]) -> Optional[str]:
    return (obj.get("external_urls") or {}).get("spotify")


def _items_total(obj: Dict[str, Any]) -> Optional[int]:
    # Playlist objects carry their item count under "tracks" (older payloads) or "items".
    for key in ("tracks", "items"):
        ref = obj.get(key)
        if isinstance(ref, dict) and "total" in ref:
            return ref.get("total")
    return None


class SpotifyDataLoader:
    """Turns Web API payloads into the flat JSON documents spores prints.

    Every normalize_* helper takes one API object and returns a plain dict;
    the instance methods drive the client for operations that need paging.
    """

    def __init__(self, client: SpotifyClient):
        self.client = client

    # -----------------
    # Per-object normalization
    # -----------------

    @staticmethod
    def normalize_track(track: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": uri_for("track", track.get("id")),
            "name": track.get("name"),
            "artists": _artist_names(track),
            "album": (track.get("album") or {}).get("name"),
            "duration_ms": track.get("duration_ms"),
        }

    @staticmethod
    def normalize_album(album: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": uri_for("album", album.get("id")),
            "name": album.get("name"),
            "artists": _artist_names(album),
            "release_date": album.get("release_date"),
        }

    @staticmethod
    def normalize_artist(artist: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": uri_for("artist", artist.get("id")),
            "name": artist.get("name"),
            "genres": list(artist.get("genres") or []),
            "followers": (artist.get("followers") or {}).get("total"),
            "popularity": artist.get("popularity"),
        }

    @staticmethod
    def normalize_playlist_summary(playlist: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": uri_for("playlist", playlist.get("id")),
            "name": playlist.get("name"),
            "tracks": _items_total(playlist),
            "owner": _owner_name(playlist),
            "url": _spotify_url(playlist),
        }

    @staticmethod
    def normalize_episode(episode: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": uri_for("episode", episode.get("id")),
            "name": episode.get("name"),
            "show": (episode.get("show") or {}).get("name"),
            "duration_ms": episode.get("duration_ms"),
        }

    @classmethod
    def normalize_playable(cls, item: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Normalize one playlist entry; None when the entry has no playable item."""

        # Newer payloads nest the playable under "item", older ones under "track".
        playable = item.get("track") if "track" in item else item.get("item")
        if not isinstance(playable, dict):
            return None

        kind = playable.get("type")
        if kind == "track":
            return {"type": "track", **cls.normalize_track(playable)}
        if kind == "episode":
            return {"type": "episode", **cls.normalize_episode(playable)}
        return {"type": "unknown"}

    # -----------------
    # Operations
    # -----------------

    def search(self, query: str, search_type: str, *, limit: int = 20) -> Dict[str, Any]:
        normalizers = {
            "track": self.normalize_track,
            "album": self.normalize_album,
            "artist": self.normalize_artist,
            "playlist": self.normalize_playlist_summary,
        }
        normalize = normalizers.get(search_type)
        if normalize is None:
            return {"error": "unsupported search type"}

        payload = self.client.search(query, search_type, limit=limit)
        page = payload.get(f"{search_type}s") or {}

        # Spotify pads some result pages with nulls.
        items = [normalize(obj) for obj in (page.get("items") or []) if isinstance(obj, dict)]

        return {
            "query": query,
            "type": search_type,
            "total": page.get("total", len(items)),
            "items": items,
        }

    def list_all_playlists(self, *, limit: int = 50) -> List[Dict[str, Any]]:
        """Every playlist of the current user, following `next` until it runs out."""

        playlists: List[Dict[str, Any]] = []
        offset = 0

        while True:
            page = self.client.current_user_playlists(limit=limit, offset=offset)
            items = page.get("items") or []
            for p in items:
                if not isinstance(p, dict):
                    continue
                entry = self.normalize_playlist_summary(p)
                playlists.append(
                    {
                        "id": entry["id"],
                        "name": entry["name"],
                        "tracks": entry["tracks"],
                        "public": bool(p.get("public") or False),
                        "owner": entry["owner"],
                        "url": entry["url"],
                    }
                )

            if not page.get("next") or not items:
                break

            offset += limit

        return playlists

    def load_playlist(self, playlist: SpotifyId, *, all_items: bool = False) -> Dict[str, Any]:
        """Playlist details plus its entries.

        Without all_items only the first page embedded in the playlist object
        is listed; total_tracks always reports the full count.
        """

        data = self.client.playlist(playlist)
        page = data.get("tracks") if isinstance(data.get("tracks"), dict) else (data.get("items") or {})
        raw_items = list(page.get("items") or [])

        if all_items:
            next_url = page.get("next")
            offset = len(raw_items)
            while next_url:
                more = self.client.playlist_items(playlist, limit=100, offset=offset)
                batch = more.get("items") or []
                if not batch:
                    break
                raw_items.extend(batch)
                offset += len(batch)
                next_url = more.get("next")

        tracks = []
        for item in raw_items:
            if not isinstance(item, dict):
                continue
            normalized = self.normalize_playable(item)
            if normalized is not None:
                tracks.append(normalized)

        return {
            "id": uri_for("playlist", data.get("id")),
            "name": data.get("name"),
            "owner": _owner_name(data),
            "public": bool(data.get("public") or False),
            "collaborative": bool(data.get("collaborative") or False),
            "followers": (data.get("followers") or {}).get("total"),
            "description": data.get("description"),
            "url": _spotify_url(data),
            "total_tracks": page.get("total"),
            "tracks": tracks,
        }
