import json
import os
import sys
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

APP_NAME = "spores"
CONFIG_FILE_NAME = "config.toml"
TOKEN_CACHE_FILE_NAME = "token_cache.json"

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8888/callback"

# Default configuration values
DEFAULT_CONFIG = {
    "client_id": "",
    "client_secret": "",
    "redirect_uri": DEFAULT_REDIRECT_URI,
    "http_timeout": 30.0,
}

# Validation rules for config fields
CONFIG_SCHEMA = {
    "client_id": {"type": str, "required": True, "non_empty": True},
    "client_secret": {"type": str, "required": True, "non_empty": True},
    "redirect_uri": {"type": str, "required": False, "non_empty": True},
    "http_timeout": {"type": (int, float), "required": False, "min": 1, "max": 300},
}

CONFIG_TEMPLATE = """# Spotify application credentials
# Create an app at https://developer.spotify.com/dashboard
client_id = {client_id}
client_secret = {client_secret}

# Must match the redirect URI registered in your Spotify app.
# Use 127.0.0.1, Spotify rejects "localhost".
{redirect_line}
"""


def get_config_dir() -> Path:
    """Per-user config directory for spores.

    SPORES_CONFIG_DIR wins; otherwise the platform's usual user config location.
    """
    override = os.environ.get("SPORES_CONFIG_DIR")
    if override:
        return Path(override)

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_config_path() -> Path:
    return get_config_dir() / CONFIG_FILE_NAME


def get_token_cache_path() -> Path:
    return get_config_dir() / TOKEN_CACHE_FILE_NAME


def _toml_string(value: str) -> str:
    # JSON string escapes are valid TOML basic-string escapes.
    return json.dumps(str(value), ensure_ascii=False)


def render_config(client_id: str = "", client_secret: str = "", redirect_uri: Optional[str] = None) -> str:
    """Render the commented config file.

    With no redirect_uri the line is left commented out, showing the default.
    """
    if redirect_uri:
        redirect_line = f"redirect_uri = {_toml_string(redirect_uri)}"
    else:
        redirect_line = f"# redirect_uri = {_toml_string(DEFAULT_REDIRECT_URI)}"

    return CONFIG_TEMPLATE.format(
        client_id=_toml_string(client_id),
        client_secret=_toml_string(client_secret),
        redirect_line=redirect_line,
    )


def read_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """Parse the TOML config file without applying defaults or validation."""
    path = path or get_config_path()
    with open(path, "rb") as f:
        return tomllib.load(f)


def read_existing_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Best-effort read used for wizard defaults; a missing or broken file yields {}."""
    path = path or get_config_path()
    if not path.exists():
        return {}
    try:
        return read_config_file(path)
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def save_config(config: Dict[str, Any], path: Optional[Path] = None) -> Path:
    """Write client credentials and redirect URI to the config file."""
    path = path or get_config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            render_config(
                client_id=config.get("client_id", ""),
                client_secret=config.get("client_secret", ""),
                redirect_uri=config.get("redirect_uri") or DEFAULT_REDIRECT_URI,
            ),
            encoding="utf-8",
        )
    except OSError as e:
        raise IOError(f"Failed to save config {path}: {e}") from e
    return path


def write_config_template(path: Optional[Path] = None) -> Path:
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_config(), encoding="utf-8")
    return path


def validate_config(config: Dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate configuration against schema.
    Returns (is_valid, list_of_errors).
    """
    errors = []

    for key, rules in CONFIG_SCHEMA.items():
        if rules.get("required", False) and key not in config:
            errors.append(f"Missing required field: {key}")
            continue

        if key not in config:
            continue

        value = config[key]

        expected_type = rules.get("type")
        # bool is an int subclass; never accept it for numeric fields
        if expected_type and (not isinstance(value, expected_type) or isinstance(value, bool)):
            type_names = expected_type.__name__ if not isinstance(expected_type, tuple) else "/".join(t.__name__ for t in expected_type)
            errors.append(f"Field '{key}' must be {type_names}, got {type(value).__name__}")
            continue

        if rules.get("non_empty") and isinstance(value, str) and not value.strip():
            errors.append(f"Field '{key}' must not be empty")

        if isinstance(value, (int, float)):
            if "min" in rules and value < rules["min"]:
                errors.append(f"Field '{key}' must be >= {rules['min']}, got {value}")
            if "max" in rules and value > rules["max"]:
                errors.append(f"Field '{key}' must be <= {rules['max']}, got {value}")

    return len(errors) == 0, errors


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from file, applying defaults for missing fields.

    A missing file is replaced by a template and FileNotFoundError is raised so
    the user can fill in the credentials. Invalid content raises ValueError.
    """
    path = path or get_config_path()

    if not path.exists():
        write_config_template(path)
        raise FileNotFoundError(
            f"Created config file at {path}. Please fill in your Spotify credentials and run again."
        )

    try:
        raw = read_config_file(path)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Failed to parse {path}: {e}") from e

    config = {key: raw[key] for key in CONFIG_SCHEMA if key in raw}

    for key, value in DEFAULT_CONFIG.items():
        if key not in config:
            config[key] = value

    is_valid, errors = validate_config(config)
    if not is_valid:
        if any(k in e for e in errors for k in ("client_id", "client_secret")):
            raise ValueError(f"client_id and client_secret must be set in {path}")
        raise ValueError(f"Invalid config {path}: {', '.join(errors)}")

    config["client_id"] = config["client_id"].strip()
    config["client_secret"] = config["client_secret"].strip()
    config["redirect_uri"] = config["redirect_uri"].strip()
    config["http_timeout"] = float(config["http_timeout"])
    return config
