"""Config and report files: YAML in, YAML/JSON out, always written atomically."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import IO, Any, Callable

from ruamel.yaml import YAML

_yaml = YAML()
_yaml.default_flow_style = False


def _replace_atomically(path: Path | str, dump: Callable[[IO[str]], None]) -> None:
    """Write through `dump` into a sibling temp file, then move it over `path`.

    Readers never see a half-written config or report.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w", dir=path.parent, prefix=f".{path.stem}-", suffix=path.suffix, delete=False
    ) as tmp:
        dump(tmp)
    Path(tmp.name).replace(path)


def read_yaml(path: Path | str) -> dict:
    """Load a YAML mapping as plain dicts and lists (no ruamel wrappers)."""
    with open(path) as f:
        loaded = _yaml.load(f)
    if loaded is None:
        return {}
    if not hasattr(loaded, "items"):
        raise ValueError(f"expected a mapping at the top level, got {type(loaded).__name__}")
    return json.loads(json.dumps(loaded))


def write_yaml(path: Path | str, data: dict) -> None:
    _replace_atomically(path, lambda f: _yaml.dump(data, f))


def write_json(path: Path | str, data: Any) -> None:
    """Write an analysis report; numpy scalars and paths fall back to str()."""
    _replace_atomically(path, lambda f: json.dump(data, f, indent=2, default=str))
