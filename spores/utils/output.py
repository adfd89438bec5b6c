import json
import sys
from typing import Any


def to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def print_json(value: Any, *, stream=None) -> None:
    """Pretty-print a JSON-serializable value to stdout."""
    out = stream if stream is not None else sys.stdout
    out.write(to_json(value) + "\n")
    out.flush()
