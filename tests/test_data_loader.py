import unittest

from spores.spotify_api.data_loader import SpotifyDataLoader
from spores.spotify_api.ids import playlist_id
from tests.helpers import track_payload


class FakeSpotifyClient:
    def __init__(self, *, total_playlists: int = 0, search_payload=None, playlist_payload=None, extra_items=None):
        self.total_playlists = total_playlists
        self.search_payload = search_payload or {}
        self.playlist_payload = playlist_payload or {}
        self.extra_items = list(extra_items or [])
        self.calls = []

    def search(self, query, search_type, *, limit=20, offset=0):
        self.calls.append(("search", query, search_type, limit))
        return self.search_payload

    def current_user_playlists(self, *, limit=50, offset=0):
        self.calls.append(("playlists", limit, offset))
        n = max(0, min(limit, self.total_playlists - offset))
        items = [
            {
                "id": f"playlist{offset + i}",
                "name": f"Playlist {offset + i}",
                "tracks": {"total": 12},
                "owner": {"display_name": "Me"} if i % 2 == 0 else {"display_name": None},
                "public": True if i % 2 == 0 else None,
                "external_urls": {"spotify": f"https://open.spotify.com/playlist/playlist{offset + i}"},
            }
            for i in range(n)
        ]
        has_next = offset + n < self.total_playlists
        return {"items": items, "total": self.total_playlists, "next": "more" if has_next else None}

    def playlist(self, pid):
        self.calls.append(("playlist", pid.id))
        return self.playlist_payload

    def playlist_items(self, pid, *, limit=100, offset=0):
        self.calls.append(("playlist_items", offset))
        batch = self.extra_items[:limit]
        self.extra_items = self.extra_items[limit:]
        return {"items": batch, "next": "more" if self.extra_items else None}


class TestSearch(unittest.TestCase):
    def test_track_results(self):
        payload = {"tracks": {"total": 321, "items": [track_payload(0), None, track_payload(1)]}}
        client = FakeSpotifyClient(search_payload=payload)
        result = SpotifyDataLoader(client).search("song", "track", limit=3)

        self.assertEqual(result["query"], "song")
        self.assertEqual(result["type"], "track")
        self.assertEqual(result["total"], 321)
        self.assertEqual([i["name"] for i in result["items"]], ["Song 0", "Song 1"])
        self.assertEqual(
            result["items"][0],
            {
                "id": "spotify:track:track0",
                "name": "Song 0",
                "artists": ["A", "B"],
                "album": "Album",
                "duration_ms": 180000,
            },
        )
        self.assertEqual(client.calls, [("search", "song", "track", 3)])

    def test_artist_results(self):
        payload = {"artists": {"total": 1, "items": [
            {"id": "ar1", "name": "Band", "genres": ["rock"], "followers": {"total": 10}, "popularity": 55}
        ]}}
        result = SpotifyDataLoader(FakeSpotifyClient(search_payload=payload)).search("band", "artist")
        self.assertEqual(result["items"], [
            {"id": "spotify:artist:ar1", "name": "Band", "genres": ["rock"], "followers": 10, "popularity": 55}
        ])

    def test_album_results(self):
        payload = {"albums": {"total": 1, "items": [
            {"id": "al1", "name": "LP", "artists": [{"name": "X"}], "release_date": "1999"}
        ]}}
        item = SpotifyDataLoader(FakeSpotifyClient(search_payload=payload)).search("lp", "album")["items"][0]
        self.assertEqual(item["artists"], ["X"])
        self.assertEqual(item["release_date"], "1999")

    def test_playlist_results_owner_fallback(self):
        payload = {"playlists": {"total": 2, "items": [
            {"id": "p1", "name": "One", "tracks": {"total": 4}, "owner": {"display_name": None}},
            None,
        ]}}
        items = SpotifyDataLoader(FakeSpotifyClient(search_payload=payload)).search("x", "playlist")["items"]
        self.assertEqual(items, [
            {"id": "spotify:playlist:p1", "name": "One", "tracks": 4, "owner": "unknown", "url": None}
        ])

    def test_ids_print_as_uris(self):
        track = SpotifyDataLoader.normalize_track({"id": "4uLU6hMCjMI75M1A2tKUQC", "name": "Never Gonna Give You Up"})
        self.assertEqual(track["id"], "spotify:track:4uLU6hMCjMI75M1A2tKUQC")
        self.assertNotIn("uri", track)
        # local files come back without an id
        self.assertIsNone(SpotifyDataLoader.normalize_track({"id": None, "name": "local.mp3"})["id"])

    def test_unsupported_type(self):
        result = SpotifyDataLoader(FakeSpotifyClient()).search("x", "show")
        self.assertEqual(result, {"error": "unsupported search type"})


class TestListPlaylists(unittest.TestCase):
    def test_follows_next_until_exhausted(self):
        client = FakeSpotifyClient(total_playlists=120)
        playlists = SpotifyDataLoader(client).list_all_playlists(limit=50)

        self.assertEqual(len(playlists), 120)
        self.assertEqual(playlists[0]["id"], "spotify:playlist:playlist0")
        self.assertEqual(playlists[-1]["id"], "spotify:playlist:playlist119")
        self.assertEqual([c[2] for c in client.calls], [0, 50, 100])

    def test_entry_shape(self):
        playlists = SpotifyDataLoader(FakeSpotifyClient(total_playlists=2)).list_all_playlists()
        self.assertEqual(playlists[0]["public"], True)
        self.assertEqual(playlists[1]["public"], False)
        self.assertEqual(playlists[1]["owner"], "unknown")
        self.assertEqual(playlists[0]["tracks"], 12)
        self.assertEqual(playlists[0]["url"], "https://open.spotify.com/playlist/playlist0")

    def test_no_playlists(self):
        self.assertEqual(SpotifyDataLoader(FakeSpotifyClient(total_playlists=0)).list_all_playlists(), [])


class TestLoadPlaylist(unittest.TestCase):
    def playlist_payload(self, items, *, total=None, next_url=None):
        return {
            "id": "pl1",
            "name": "Road trip",
            "owner": {"display_name": "Me"},
            "public": None,
            "collaborative": False,
            "followers": {"total": 3},
            "description": "songs",
            "external_urls": {"spotify": "https://open.spotify.com/playlist/pl1"},
            "tracks": {"items": items, "total": len(items) if total is None else total, "next": next_url},
        }

    def test_mixed_items(self):
        items = [
            {"track": track_payload(0)},
            {"track": None},
            {"track": {"type": "episode", "id": "ep1", "name": "Pod", "show": {"name": "Show"}, "duration_ms": 60000}},
            {"track": {"type": "something-else"}},
        ]
        client = FakeSpotifyClient(playlist_payload=self.playlist_payload(items))
        result = SpotifyDataLoader(client).load_playlist(playlist_id("pl1"))

        self.assertEqual(result["id"], "spotify:playlist:pl1")
        self.assertEqual(result["name"], "Road trip")
        self.assertEqual(result["owner"], "Me")
        self.assertFalse(result["public"])
        self.assertEqual(result["followers"], 3)
        self.assertEqual(result["total_tracks"], 4)
        self.assertEqual([t["type"] for t in result["tracks"]], ["track", "episode", "unknown"])
        self.assertEqual(result["tracks"][1], {
            "type": "episode", "id": "spotify:episode:ep1", "name": "Pod", "show": "Show", "duration_ms": 60000,
        })

    def test_first_page_only_by_default(self):
        payload = self.playlist_payload([{"track": track_payload(0)}], total=150, next_url="more")
        client = FakeSpotifyClient(playlist_payload=payload, extra_items=[{"track": track_payload(1)}])
        result = SpotifyDataLoader(client).load_playlist(playlist_id("pl1"))
        self.assertEqual(len(result["tracks"]), 1)
        self.assertEqual(result["total_tracks"], 150)
        self.assertNotIn("playlist_items", [c[0] for c in client.calls])

    def test_all_items_pages_through(self):
        first = [{"track": track_payload(i)} for i in range(100)]
        rest = [{"track": track_payload(i)} for i in range(100, 230)]
        payload = self.playlist_payload(first, total=230, next_url="more")
        client = FakeSpotifyClient(playlist_payload=payload, extra_items=rest)

        result = SpotifyDataLoader(client).load_playlist(playlist_id("pl1"), all_items=True)

        self.assertEqual(len(result["tracks"]), 230)
        self.assertEqual(result["tracks"][-1]["id"], "spotify:track:track229")
        self.assertEqual([c for c in client.calls if c[0] == "playlist_items"], [("playlist_items", 100), ("playlist_items", 200)])


if __name__ == "__main__":
    unittest.main(verbosity=2)
