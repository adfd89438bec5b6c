import unittest

from spores.spotify_api.ids import parse_id, parse_ids, playlist_id, track_id, uri_for


class TestParseId(unittest.TestCase):
    def test_bare_id(self):
        sid = track_id("4uLU6hMCjMI75M1A2tKUQC")
        self.assertEqual(sid.kind, "track")
        self.assertEqual(sid.id, "4uLU6hMCjMI75M1A2tKUQC")
        self.assertEqual(sid.uri, "spotify:track:4uLU6hMCjMI75M1A2tKUQC")

    def test_uri(self):
        sid = playlist_id("spotify:playlist:37i9dQZF1DXcBWIGoYBM5M")
        self.assertEqual(sid.id, "37i9dQZF1DXcBWIGoYBM5M")
        self.assertEqual(str(sid), "spotify:playlist:37i9dQZF1DXcBWIGoYBM5M")

    def test_open_url_with_query_and_locale(self):
        sid = track_id("https://open.spotify.com/intl-de/track/4uLU6hMCjMI75M1A2tKUQC?si=abc")
        self.assertEqual(sid.id, "4uLU6hMCjMI75M1A2tKUQC")
        self.assertEqual(sid.url, "https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC")

    def test_legacy_user_playlist_uri(self):
        sid = playlist_id("spotify:user:someone:playlist:37i9dQZF1DXcBWIGoYBM5M")
        self.assertEqual(sid.id, "37i9dQZF1DXcBWIGoYBM5M")

    def test_wrong_kind_is_rejected(self):
        with self.assertRaises(ValueError):
            track_id("spotify:album:4uLU6hMCjMI75M1A2tKUQC")

    def test_invalid_characters_are_rejected(self):
        for bad in ("", "   ", "abc-def", "spotify:track:", "spotify:track:a:b", "https://example.com/track/abc"):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    track_id(bad)

    def test_user_ids_are_free_form(self):
        self.assertEqual(parse_id("john.doe-1", "user").id, "john.doe-1")

    def test_parse_ids_fails_on_any_bad_value(self):
        with self.assertRaises(ValueError):
            parse_ids(["abc", "not valid"], "track")

    def test_uri_for_none(self):
        self.assertIsNone(uri_for("track", None))
        self.assertEqual(uri_for("album", "x1"), "spotify:album:x1")


if __name__ == "__main__":
    unittest.main(verbosity=2)
