import re
import urllib.parse
from dataclasses import dataclass

KINDS = ("track", "album", "artist", "playlist", "episode", "show", "user")

_BASE62_RE = re.compile(r"^[0-9A-Za-z]+$")
OPEN_SPOTIFY_HOST = "open.spotify.com"


@dataclass(frozen=True)
class SpotifyId:
    """A validated Spotify identifier of a known kind."""

    kind: str
    id: str

    @property
    def uri(self) -> str:
        return f"spotify:{self.kind}:{self.id}"

    @property
    def url(self) -> str:
        return f"https://{OPEN_SPOTIFY_HOST}/{self.kind}/{self.id}"

    def __str__(self) -> str:
        return self.uri


def _split_uri_or_url(value: str):
    """Return (kind, id) for URI / URL inputs, or (None, value) for a bare id."""

    if value.startswith("spotify:"):
        parts = value.split(":")
        # spotify:user:<user>:playlist:<id> is a legacy playlist URI
        if len(parts) == 5 and parts[1] == "user" and parts[3] == "playlist":
            return "playlist", parts[4]
        if len(parts) != 3:
            raise ValueError(f"Invalid Spotify URI: {value!r}")
        return parts[1], parts[2]

    if value.startswith(("http://", "https://")):
        parsed = urllib.parse.urlparse(value)
        if parsed.netloc != OPEN_SPOTIFY_HOST:
            raise ValueError(f"Not an {OPEN_SPOTIFY_HOST} URL: {value!r}")
        segments = [s for s in parsed.path.split("/") if s]
        # localized links look like /intl-de/track/<id>
        if segments and segments[0].startswith("intl-"):
            segments = segments[1:]
        if len(segments) != 2:
            raise ValueError(f"Invalid Spotify URL: {value!r}")
        return segments[0], segments[1]

    return None, value


def parse_id(value: str, kind: str) -> SpotifyId:
    """Parse a bare id, `spotify:<kind>:<id>` URI or open.spotify.com URL.

    Raises ValueError when the input is malformed or names a different kind.
    """

    if kind not in KINDS:
        raise ValueError(f"Unknown Spotify item kind: {kind!r}")

    raw = str(value or "").strip()
    if not raw:
        raise ValueError(f"Empty {kind} id")

    found_kind, ident = _split_uri_or_url(raw)
    if found_kind is not None and found_kind != kind:
        raise ValueError(f"Expected a {kind} id or URI, got a {found_kind}: {raw!r}")

    # user ids are free-form; everything else is base62
    if kind != "user" and not _BASE62_RE.match(ident or ""):
        raise ValueError(f"Invalid {kind} id: {raw!r}")
    if not ident:
        raise ValueError(f"Empty {kind} id")

    return SpotifyId(kind=kind, id=ident)


def parse_ids(values, kind: str) -> list:
    """Parse every value up front so nothing is sent when one input is bad."""
    return [parse_id(v, kind) for v in values]


def track_id(value: str) -> SpotifyId:
    return parse_id(value, "track")


def playlist_id(value: str) -> SpotifyId:
    return parse_id(value, "playlist")


def uri_for(kind: str, ident):
    """Printed form of an id from the API: its URI. None stays None (local tracks)."""
    if not ident:
        return None
    return f"spotify:{kind}:{ident}"
