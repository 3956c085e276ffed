from __future__ import annotations

from pathlib import Path

import pytest

from lrustore.config import DEFAULT_CONFIG_TOML, find_project_root, load_config
from lrustore.errors import LRUStoreConfigError


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "lrustore.toml"
    p.write_text(text, encoding="utf-8")
    return p


def test_load_config_defaults(tmp_path: Path) -> None:
    _write(tmp_path, "version = 1\n")

    cfg = load_config(root=tmp_path)
    assert cfg.version == 1
    assert cfg.root == tmp_path
    assert cfg.store.capacity == 3
    assert cfg.snapshot.path == tmp_path / "cache_data.txt"
    assert cfg.snapshot.key_parser is str
    assert cfg.snapshot.value_parser is str


def test_load_config_overrides(tmp_path: Path) -> None:
    _write(
        tmp_path,
        "\n".join(
            [
                "version = 1",
                "[store]",
                "capacity = 128",
                "[snapshot]",
                'path = "data/snap.txt"',
                'key_type = "int"',
                'value_type = "float"',
                "",
            ]
        ),
    )

    cfg = load_config(root=tmp_path)
    assert cfg.store.capacity == 128
    assert cfg.snapshot.path == tmp_path / "data" / "snap.txt"
    assert cfg.snapshot.key_parser is int
    assert cfg.snapshot.value_parser is float


def test_default_config_text_is_loadable(tmp_path: Path) -> None:
    _write(tmp_path, DEFAULT_CONFIG_TOML)
    cfg = load_config(root=tmp_path)
    assert cfg.store.capacity == 3


def test_config_path_implies_root(tmp_path: Path) -> None:
    p = _write(tmp_path, "version = 1\n")
    cfg = load_config(config_path=p)
    assert cfg.root == tmp_path


@pytest.mark.parametrize(
    "text",
    [
        "",
        "version = 2\n",
        'version = "1"\n',
        "version = 1\nstore = 3\n",
        "version = 1\n[store]\ncapacity = 0\n",
        "version = 1\n[store]\ncapacity = true\n",
        'version = 1\n[snapshot]\nkey_type = "bytes"\n',
        'version = 1\n[snapshot]\npath = "  "\n',
        "version = [\n",
    ],
)
def test_load_config_rejects_invalid(tmp_path: Path, text: str) -> None:
    _write(tmp_path, text)
    with pytest.raises(LRUStoreConfigError):
        load_config(root=tmp_path)


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(LRUStoreConfigError, match="Missing"):
        load_config(root=tmp_path)


def test_find_project_root_walks_upward(tmp_path: Path) -> None:
    _write(tmp_path, "version = 1\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert find_project_root(nested) == tmp_path.resolve()


def test_find_project_root_from_file(tmp_path: Path) -> None:
    _write(tmp_path, "version = 1\n")
    f = tmp_path / "x.txt"
    f.write_text("", encoding="utf-8")
    assert find_project_root(f) == tmp_path.resolve()
