from pathlib import Path
from typing import Optional

import questionary

from ..config import DEFAULT_REDIRECT_URI, get_config_path, read_existing_config, save_config
from ..utils.logger import log_error, log_success


def _ask_text(label: str, default: Optional[str], *, secret: bool = False) -> Optional[str]:
    """Ask for one value; an empty answer keeps the default. None means cancelled."""
    prompt = questionary.password if secret else questionary.text
    answer = prompt(f"{label}:", default=default or "").ask()
    if answer is None:
        return None
    answer = answer.strip()
    return answer or (default or "")


def configure(path: Optional[Path] = None) -> int:
    """Interactive credentials wizard. Returns a process exit code."""

    path = path or get_config_path()
    existing = read_existing_config(path)

    print("Spores configuration wizard")
    print("Create a Spotify app at https://developer.spotify.com/dashboard")
    print()

    default_id = str(existing.get("client_id") or "") or None
    default_secret = str(existing.get("client_secret") or "") or None
    default_redirect = str(existing.get("redirect_uri") or "") or DEFAULT_REDIRECT_URI

    client_id = _ask_text("Client ID", default_id)
    if client_id is None:
        log_error("Configuration cancelled.")
        return 1
    client_secret = _ask_text("Client secret", default_secret, secret=True)
    if client_secret is None:
        log_error("Configuration cancelled.")
        return 1
    redirect_uri = _ask_text("Redirect URI", default_redirect)
    if redirect_uri is None:
        log_error("Configuration cancelled.")
        return 1

    if not client_id or not client_secret:
        log_error("client_id and client_secret are required.")
        return 1

    saved = save_config(
        {"client_id": client_id, "client_secret": client_secret, "redirect_uri": redirect_uri},
        path,
    )
    print()
    log_success(f"Configuration saved to {saved}")
    return 0
