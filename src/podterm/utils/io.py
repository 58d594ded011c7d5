"""File helpers: atomic writes, YAML config files and JSON catalogs."""

from __future__ import annotations

import json
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Iterator

from ruamel.yaml import YAML

_yaml = YAML()
_yaml.default_flow_style = False


@contextmanager
def atomic_output(path: Path | str, mode: str = "w") -> Iterator[IO]:
    """Write through a temp file beside ``path``.

    The temp file replaces ``path`` only when the block exits cleanly; on
    any exception it is removed and ``path`` is left untouched.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        mode=mode,
        dir=path.parent,
        prefix=f"{path.name}.",
        suffix=".part",
        delete=False,
    )
    tmp_path = Path(tmp.name)
    try:
        with tmp:
            yield tmp
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    tmp_path.replace(path)


def read_yaml(path: Path | str) -> dict:
    """Read a YAML mapping; an empty file gives an empty dict."""
    with open(path, encoding="utf-8") as f:
        return dict(_yaml.load(f) or {})


def write_yaml(path: Path | str, data: dict) -> None:
    with atomic_output(path) as f:
        _yaml.dump(data, f)


def read_json(path: Path | str) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)
