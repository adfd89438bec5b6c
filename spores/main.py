import argparse
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .commands import (
    cmd_auth_logout,
    cmd_auth_status,
    cmd_playlist_add,
    cmd_playlist_create,
    cmd_playlist_info,
    cmd_playlist_list,
    cmd_save,
    cmd_search,
)
from .config import DEFAULT_REDIRECT_URI, load_config
from .menus.auth_menu import prompt_for_token
from .menus.config_menu import configure
from .spotify_api.auth import SpotifyAuth, SpotifyAuthError, spotify_app_setup_instructions
from .spotify_api.client import SpotifyAPIError, SpotifyClient
from .spotify_api.token_manager import TokenInfo, TokenManager
from .utils.logger import log_debug, log_error, log_info, setup_logging
from .utils.output import print_json

ITEM_TYPES = ["track", "album", "artist", "playlist"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spores", description="Spotify playlist manager")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    search = sub.add_parser("search", help="Search Spotify")
    search.add_argument("query", help="Search query")
    search.add_argument("-t", "--type", dest="item_type", choices=ITEM_TYPES, default="track",
                        help="Type of item to search for (default: track)")
    search.add_argument("-l", "--limit", type=int, default=20, help="Maximum number of results (default: 20)")

    playlist = sub.add_parser("playlist", help="Manage playlists")
    playlist_sub = playlist.add_subparsers(dest="playlist_command", required=True, metavar="ACTION")

    playlist_sub.add_parser("list", help="List your playlists")

    create = playlist_sub.add_parser("create", help="Create a new playlist")
    create.add_argument("name", help="Name of the playlist")
    create.add_argument("--public", action="store_true", help="Make the playlist public")
    create.add_argument("-d", "--description", help="Description for the playlist")

    info = playlist_sub.add_parser("info", help="Show details of a playlist")
    info.add_argument("playlist", help="Playlist ID or URI")
    info.add_argument("--all", dest="all_items", action="store_true",
                      help="List every item instead of only the first page")

    add = playlist_sub.add_parser("add", help="Add tracks to a playlist")
    add.add_argument("playlist", help="Playlist ID or URI")
    add.add_argument("tracks", nargs="+", help="Track IDs or URIs to add")

    sub.add_parser("configure", help="Configure Spotify credentials interactively")

    save = sub.add_parser("save", help="Save a track, album, or playlist to your library")
    save.add_argument("-t", "--type", dest="item_type", choices=ITEM_TYPES, default="track",
                      help="Type of item to save (default: track)")
    save.add_argument("ids", nargs="+", help="IDs or URIs of items to save")

    auth = sub.add_parser("auth", help="Inspect or clear the cached login")
    auth_sub = auth.add_subparsers(dest="auth_command", required=True, metavar="ACTION")
    auth_sub.add_parser("status", help="Show the cached token status")
    auth_sub.add_parser("logout", help="Delete the cached token")

    return parser


def authenticate(config: Dict[str, Any]) -> TokenInfo:
    auth = SpotifyAuth(config, token_manager=TokenManager())
    return prompt_for_token(auth)


def dispatch(args: argparse.Namespace, client: SpotifyClient) -> Dict[str, Any]:
    """Run the remote operation selected by args against an authenticated client."""

    if args.command == "search":
        return cmd_search(client, args.query, args.item_type, args.limit)

    if args.command == "playlist":
        if args.playlist_command == "list":
            return cmd_playlist_list(client)
        if args.playlist_command == "create":
            return cmd_playlist_create(client, args.name, args.public, args.description)
        if args.playlist_command == "info":
            return cmd_playlist_info(client, args.playlist, args.all_items)
        if args.playlist_command == "add":
            return cmd_playlist_add(client, args.playlist, args.tracks)

    if args.command == "save":
        return cmd_save(client, args.item_type, args.ids)

    raise ValueError(f"Unknown command: {args.command}")


def _run_local(args: argparse.Namespace) -> Optional[int]:
    """Commands that need neither credentials nor the network."""

    if args.command == "configure":
        return configure()

    if args.command == "auth":
        tm = TokenManager()
        if args.auth_command == "status":
            print_json(cmd_auth_status(tm))
        else:
            print_json(cmd_auth_logout(tm))
        return 0

    return None


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        local_rc = _run_local(args)
        if local_rc is not None:
            return local_rc

        config = load_config()
        token = authenticate(config)

        with SpotifyClient(token, timeout=config["http_timeout"]) as client:
            result = dispatch(args, client)

        print_json(result)
        return 1 if "error" in result else 0
    except KeyboardInterrupt:
        log_error("Interrupted.")
        return 130
    except FileNotFoundError as e:
        log_error(str(e))
        log_info(spotify_app_setup_instructions(redirect_uri=DEFAULT_REDIRECT_URI))
        return 1
    except (SpotifyAPIError, SpotifyAuthError, ValueError, OSError) as e:
        log_debug(f"{type(e).__name__} while running {args.command}")
        log_error(str(e), e)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
