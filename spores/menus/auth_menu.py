import time
import webbrowser

import questionary

from ..spotify_api.auth import SpotifyAuth, SpotifyAuthError, extract_code_from_redirect_url
from ..spotify_api.token_manager import TokenInfo
from ..utils.logger import log_info, log_success, log_warning


def _format_expiry(token: TokenInfo) -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(float(token.expires_at)))


def _open_browser(url: str) -> None:
    try:
        if not webbrowser.open(url):
            log_info("Could not open a browser; open the URL above manually.")
    except webbrowser.Error as e:
        log_warning(f"Could not open a browser ({e}); open the URL above manually.")


def authenticate_interactive(auth: SpotifyAuth, *, open_browser: bool = True) -> TokenInfo:
    """Authorization Code flow where the user pastes the redirect URL back into the CLI."""

    state = auth.new_state()
    auth_url = auth.get_authorize_url(state=state)

    log_info("Spotify authorization required.")
    log_info("1) Log in and approve access in the browser.")
    log_info("2) Spotify redirects you to your redirect_uri.")
    log_info("3) Copy the FULL redirect URL from the browser and paste it here.")
    log_info(f"Authorize URL:\n{auth_url}")

    if open_browser:
        _open_browser(auth_url)

    pasted = questionary.text("Please enter the URL you were redirected to:").ask()
    pasted = (pasted or "").strip()
    if not pasted:
        raise SpotifyAuthError("No redirect URL or code provided; authentication cancelled.")

    if "://" in pasted:
        parsed = extract_code_from_redirect_url(pasted)
        if parsed.get("error"):
            raise SpotifyAuthError(f"Spotify returned an error: {parsed['error']}")
        code = parsed.get("code", "")
        if parsed.get("state") != state:
            raise SpotifyAuthError(
                "OAuth state mismatch. Paste the redirect URL from the most recent login attempt."
            )
    else:
        # Assume the user pasted the raw code.
        code = pasted

    if not code:
        raise SpotifyAuthError("Could not find an authorization code. Paste the full redirect URL that contains ?code=...")

    token = auth.exchange_code_for_token(code=code)
    log_success(f"Spotify authentication successful. Token expires at: {_format_expiry(token)}")
    return token


def prompt_for_token(auth: SpotifyAuth, *, open_browser: bool = True) -> TokenInfo:
    """Return a usable access token, asking the user to log in only when needed."""

    try:
        token = auth.get_cached_or_refreshed_token()
    except SpotifyAuthError as e:
        log_warning(f"Could not refresh the cached token: {e}")
        token = None

    if token is not None:
        return token

    return authenticate_interactive(auth, open_browser=open_browser)
