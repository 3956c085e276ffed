from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from lrustore import __version__
from lrustore.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG_TOML,
    LRUStoreSettings,
    find_project_root,
    load_config,
)
from lrustore.errors import LRUStoreConfigError, SnapshotIOError
from lrustore.store import LRUStore

EXIT_OK = 0
EXIT_KEY_ABSENT = 1
EXIT_CONFIG_ERROR = 2
EXIT_SNAPSHOT_ERROR = 3
EXIT_BAD_ARGUMENT = 4

DEMO_CAPACITY = 3
DEMO_ENTRIES = [("A", "value_a"), ("B", "value_b"), ("C", "value_c"), ("D", "value_d")]


def _add_common_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--root",
        type=str,
        default=None,
        help=f"Project root (defaults to searching upward from cwd for {CONFIG_FILENAME}).",
    )
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help=f"Path to {CONFIG_FILENAME} (defaults to <root>/{CONFIG_FILENAME}).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lrustore")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_p = subparsers.add_parser("init", help=f"Write a default {CONFIG_FILENAME}.")
    init_p.add_argument("--force", action="store_true", help="Overwrite an existing config.")

    demo_p = subparsers.add_parser("demo", help="Fill a small store, save it, print lookups.")
    demo_p.add_argument(
        "--snapshot",
        type=str,
        default="cache_data.txt",
        help="Snapshot file to load from and save to.",
    )

    get_p = subparsers.add_parser("get", help="Print the value stored for KEY.")
    _add_common_flags(get_p)
    get_p.add_argument("key")

    put_p = subparsers.add_parser("put", help="Store VALUE under KEY.")
    _add_common_flags(put_p)
    put_p.add_argument("key")
    put_p.add_argument("value")

    show_p = subparsers.add_parser("show", help="List resident entries, least recent first.")
    _add_common_flags(show_p)

    bench_p = subparsers.add_parser("bench", help="Time repeated get() calls.")
    _add_common_flags(bench_p)
    bench_p.add_argument("--iterations", type=int, default=100_000)
    bench_p.add_argument(
        "--key",
        dest="keys",
        action="append",
        default=[],
        help="Key to look up (repeatable; defaults to B, C and D).",
    )

    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _load_config(args: argparse.Namespace) -> LRUStoreSettings:
    root = Path(args.root).resolve() if args.root else None
    config_path = Path(args.config).resolve() if args.config else None
    if root is None and config_path is None:
        root = find_project_root(Path.cwd())
    return load_config(root=root, config_path=config_path)


def _open_store(cfg: LRUStoreSettings) -> LRUStore:
    return LRUStore.persistent(
        cfg.store.capacity,
        cfg.snapshot.path,
        key_parser=cfg.snapshot.key_parser,
        value_parser=cfg.snapshot.value_parser,
    )


def _parse_argument(parser: Callable[[str], Any], raw: str, *, name: str, type_name: str) -> Any:
    try:
        return parser(raw)
    except ValueError as e:
        raise ValueError(f"invalid {name} {raw!r} (expected {type_name})") from e


def _eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


def _print_error(e: BaseException) -> None:
    msg = (str(e) or repr(e)).strip()
    _eprint(f"error: {msg}")


def cmd_init(args: argparse.Namespace) -> int:
    path = Path.cwd() / CONFIG_FILENAME
    if path.exists() and not args.force:
        _eprint(f"error: {path} already exists (use --force to overwrite).")
        return EXIT_CONFIG_ERROR
    path.write_text(DEFAULT_CONFIG_TOML, encoding="utf-8")
    print(f"wrote {path}")
    return EXIT_OK


def cmd_demo(args: argparse.Namespace) -> int:
    try:
        store = LRUStore.persistent(DEMO_CAPACITY, args.snapshot)
        for key, value in DEMO_ENTRIES:
            store.put(key, value)
        store.save(args.snapshot)
    except SnapshotIOError as e:
        _print_error(e)
        return EXIT_SNAPSHOT_ERROR

    print(f"Store after save (capacity {DEMO_CAPACITY}, snapshot {args.snapshot})")
    for key, _ in DEMO_ENTRIES:
        print(f"{key} -> {store.get(key)!r}")
    return EXIT_OK


def cmd_get(args: argparse.Namespace) -> int:
    try:
        cfg = _load_config(args)
        key = _parse_argument(
            cfg.snapshot.key_parser, args.key, name="KEY", type_name=cfg.snapshot.key_type
        )
        store = _open_store(cfg)
        missing = object()
        value = store.get(key, missing)
        if value is missing:
            _eprint(f"absent: {args.key}")
            return EXIT_KEY_ABSENT
        store.save(cfg.snapshot.path)
        print(value)
        return EXIT_OK
    except LRUStoreConfigError as e:
        _print_error(e)
        return EXIT_CONFIG_ERROR
    except ValueError as e:
        _print_error(e)
        return EXIT_BAD_ARGUMENT
    except SnapshotIOError as e:
        _print_error(e)
        return EXIT_SNAPSHOT_ERROR


def cmd_put(args: argparse.Namespace) -> int:
    try:
        cfg = _load_config(args)
        key = _parse_argument(
            cfg.snapshot.key_parser, args.key, name="KEY", type_name=cfg.snapshot.key_type
        )
        value = _parse_argument(
            cfg.snapshot.value_parser, args.value, name="VALUE", type_name=cfg.snapshot.value_type
        )
        store = _open_store(cfg)
        store.put(key, value)
        store.save(cfg.snapshot.path)
        return EXIT_OK
    except LRUStoreConfigError as e:
        _print_error(e)
        return EXIT_CONFIG_ERROR
    except ValueError as e:
        _print_error(e)
        return EXIT_BAD_ARGUMENT
    except SnapshotIOError as e:
        _print_error(e)
        return EXIT_SNAPSHOT_ERROR


def cmd_show(args: argparse.Namespace) -> int:
    try:
        cfg = _load_config(args)
        store = _open_store(cfg)
    except LRUStoreConfigError as e:
        _print_error(e)
        return EXIT_CONFIG_ERROR
    except SnapshotIOError as e:
        _print_error(e)
        return EXIT_SNAPSHOT_ERROR

    for key, value in store.items():
        print(f"{key} -> {value}")
    return EXIT_OK


def cmd_bench(args: argparse.Namespace) -> int:
    from lrustore.bench import format_results, run_get_benchmark

    try:
        cfg = _load_config(args)
        keys = [
            _parse_argument(
                cfg.snapshot.key_parser, k, name="--key", type_name=cfg.snapshot.key_type
            )
            for k in (args.keys or ["B", "C", "D"])
        ]
        store = _open_store(cfg)
        results = run_get_benchmark(store, keys, iterations=int(args.iterations))
    except LRUStoreConfigError as e:
        _print_error(e)
        return EXIT_CONFIG_ERROR
    except ValueError as e:
        _print_error(e)
        return EXIT_BAD_ARGUMENT
    except SnapshotIOError as e:
        _print_error(e)
        return EXIT_SNAPSHOT_ERROR

    print(format_results(results))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    try:
        args = parse_args(list(sys.argv[1:] if argv is None else argv))
    except SystemExit as e:
        # argparse uses SystemExit for --help/--version and parse errors.
        code = e.code
        return int(code) if isinstance(code, int) else EXIT_CONFIG_ERROR

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "init":
        return cmd_init(args)
    if args.command == "demo":
        return cmd_demo(args)
    if args.command == "get":
        return cmd_get(args)
    if args.command == "put":
        return cmd_put(args)
    if args.command == "show":
        return cmd_show(args)
    if args.command == "bench":
        return cmd_bench(args)

    return EXIT_CONFIG_ERROR


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
