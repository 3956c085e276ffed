"""Project configuration loading for lrustore.

Only reads `lrustore.toml` and performs light validation. The store itself
never reads configuration; the CLI passes the resulting values explicitly.
"""

from __future__ import annotations

import tomllib
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lrustore.errors import LRUStoreConfigError

CONFIG_FILENAME = "lrustore.toml"

# Parsers applied to the raw text of snapshot keys/values on load.
VALUE_TYPES: dict[str, Callable[[str], Any]] = {
    "str": str,
    "int": int,
    "float": float,
}

DEFAULT_CONFIG_TOML = """\
version = 1

[store]
capacity = 3

[snapshot]
path = "cache_data.txt"
key_type = "str"
value_type = "str"
"""


@dataclass(frozen=True)
class StoreConfig:
    capacity: int


@dataclass(frozen=True)
class SnapshotConfig:
    path: Path
    key_type: str
    value_type: str

    @property
    def key_parser(self) -> Callable[[str], Any]:
        return VALUE_TYPES[self.key_type]

    @property
    def value_parser(self) -> Callable[[str], Any]:
        return VALUE_TYPES[self.value_type]


@dataclass(frozen=True)
class LRUStoreSettings:
    version: int
    root: Path
    store: StoreConfig
    snapshot: SnapshotConfig


def find_project_root(start: Path) -> Path:
    """Walk upward from `start` (file or directory) looking for `lrustore.toml`."""

    cur = start
    try:
        if cur.is_file():
            cur = cur.parent
    except OSError:
        cur = cur.parent

    cur = cur.resolve()
    while True:
        if (cur / CONFIG_FILENAME).is_file():
            return cur
        if cur.parent == cur:
            break
        cur = cur.parent

    raise LRUStoreConfigError(
        f"Could not find {CONFIG_FILENAME} by walking upward from start path."
    )


def _as_table(value: Any, *, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise LRUStoreConfigError(f"Expected [{name}] to be a table.")
    return value


def _as_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise LRUStoreConfigError(f"Expected {name} to be an integer.")
    return value


def _as_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str):
        raise LRUStoreConfigError(f"Expected {name} to be a string.")
    return value


def _as_type_name(value: Any, *, name: str) -> str:
    type_name = _as_str(value, name=name)
    if type_name not in VALUE_TYPES:
        allowed = ", ".join(sorted(VALUE_TYPES))
        raise LRUStoreConfigError(f"Invalid {name}: {type_name!r} (expected one of: {allowed}).")
    return type_name


def load_config(*, root: Path | None = None, config_path: Path | None = None) -> LRUStoreSettings:
    """Load and validate `lrustore.toml`.

    If neither `root` nor `config_path` are provided, the project root is
    discovered by walking upward from the current working directory.
    """

    if config_path is None:
        if root is None:
            root = find_project_root(Path.cwd())
        config_path = root / CONFIG_FILENAME
    elif root is None:
        root = config_path.parent

    try:
        raw = config_path.read_bytes()
    except FileNotFoundError as e:
        raise LRUStoreConfigError(f"Missing {CONFIG_FILENAME} at: {config_path}") from e
    except OSError as e:
        raise LRUStoreConfigError(f"Failed reading config file: {config_path}") from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise LRUStoreConfigError(f"Config is not valid UTF-8: {config_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise LRUStoreConfigError(f"Invalid TOML in {config_path}: {e}") from e

    version = data.get("version", None)
    if version is None:
        raise LRUStoreConfigError(f"Missing required `version = 1` in {CONFIG_FILENAME}.")
    version_i = _as_int(version, name="version")
    if version_i != 1:
        raise LRUStoreConfigError(f"Unsupported config version: {version_i} (expected 1).")

    store_tbl = _as_table(data.get("store"), name="store")
    snapshot_tbl = _as_table(data.get("snapshot"), name="snapshot")

    if "capacity" in store_tbl:
        capacity = _as_int(store_tbl["capacity"], name="store.capacity")
    else:
        capacity = 3

    if "path" in snapshot_tbl:
        snapshot_path = _as_str(snapshot_tbl["path"], name="snapshot.path")
    else:
        snapshot_path = "cache_data.txt"

    if "key_type" in snapshot_tbl:
        key_type = _as_type_name(snapshot_tbl["key_type"], name="snapshot.key_type")
    else:
        key_type = "str"

    if "value_type" in snapshot_tbl:
        value_type = _as_type_name(snapshot_tbl["value_type"], name="snapshot.value_type")
    else:
        value_type = "str"

    # Validation
    if capacity < 1:
        raise LRUStoreConfigError("Invalid config: store.capacity must be >= 1.")

    if not snapshot_path.strip():
        raise LRUStoreConfigError("Invalid config: snapshot.path must not be empty.")

    return LRUStoreSettings(
        version=version_i,
        root=root,
        store=StoreConfig(capacity=capacity),
        snapshot=SnapshotConfig(
            path=root / snapshot_path,
            key_type=key_type,
            value_type=value_type,
        ),
    )
