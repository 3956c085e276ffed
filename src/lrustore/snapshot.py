"""Snapshot persistence for :class:`~lrustore.store.LRUStore`.

A snapshot is a UTF-8 text file with one ``<key>:<value>`` record per line.
The same delimiter is used for writing and reading. Backslash, colon, newline
and carriage return are backslash-escaped on write, so any ``str`` key or value
survives a save/load cycle. When decoding, the first *unescaped* colon splits
the line; unescaped colons after it are kept verbatim as part of the value.

Loading replays records through ``store.put`` in file order. A snapshot with
more records than the store's capacity therefore keeps only the last ones.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import TYPE_CHECKING, Any

from lrustore.errors import SnapshotFormatError, SnapshotIOError

if TYPE_CHECKING:  # pragma: no cover
    from lrustore.store import LRUStore

logger = logging.getLogger("lrustore.snapshot")

DELIMITER = ":"

_ESCAPES = {"\\": "\\\\", DELIMITER: "\\" + DELIMITER, "\n": "\\n", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", DELIMITER: DELIMITER, "n": "\n", "r": "\r"}


@dataclass(frozen=True, slots=True)
class LoadReport:
    path: Path
    found: bool
    loaded: int = 0
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.found


def _escape(text: str) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def encode_record(key: object, value: object) -> str:
    """Return the snapshot line (without newline) for one entry."""

    return f"{_escape(str(key))}{DELIMITER}{_escape(str(value))}"


def decode_record(line: str) -> tuple[str, str]:
    """Split one snapshot line into unescaped ``(key, value)`` text.

    Raises SnapshotFormatError when the line has no delimiter or contains an
    invalid escape sequence.
    """

    parts: list[list[str]] = [[]]
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == "\\":
            if i + 1 >= n:
                raise SnapshotFormatError(f"Dangling escape at end of record: {line!r}")
            nxt = line[i + 1]
            if nxt not in _UNESCAPES:
                raise SnapshotFormatError(f"Unknown escape \\{nxt} in record: {line!r}")
            parts[-1].append(_UNESCAPES[nxt])
            i += 2
            continue
        if ch == DELIMITER and len(parts) == 1:
            parts.append([])
        else:
            parts[-1].append(ch)
        i += 1

    if len(parts) != 2:
        raise SnapshotFormatError(f"Missing {DELIMITER!r} delimiter in record: {line!r}")
    return "".join(parts[0]), "".join(parts[1])


def export_snapshot(store: LRUStore, path: str | PathLike[str]) -> None:
    """Write every resident entry of `store` to `path`, replacing its content.

    Iteration does not promote entries. The whole snapshot is encoded before
    the file is opened, so an entry that cannot be written as UTF-8 leaves the
    previous snapshot untouched. A failure part-way through the write itself
    leaves the file in an undefined state. Both are raised as SnapshotIOError.
    """

    p = Path(path)
    entries = store.items()
    text = "".join(encode_record(key, value) + "\n" for key, value in entries)
    try:
        payload = text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise SnapshotIOError(f"Snapshot entry is not valid UTF-8: {p}: {e}") from e

    try:
        p.write_bytes(payload)
    except OSError as e:
        raise SnapshotIOError(f"Failed writing snapshot: {p}: {e}") from e

    logger.info("Saved %d entries to %s", len(entries), p)


def _read_snapshot(p: Path) -> str | None:
    try:
        return p.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as e:
        raise SnapshotIOError(f"Snapshot is not valid UTF-8: {p}") from e
    except OSError as e:
        raise SnapshotIOError(f"Failed reading snapshot: {p}: {e}") from e


def import_snapshot(
    store: LRUStore,
    path: str | PathLike[str],
    *,
    key_parser: Callable[[str], Any] = str,
    value_parser: Callable[[str], Any] = str,
) -> LoadReport:
    """Replay the records at `path` into `store` via ``put``.

    A missing file is not an error: the returned report has ``found=False``.
    Records that cannot be decoded or parsed are skipped and counted.
    """

    p = Path(path)
    text = _read_snapshot(p)
    if text is None:
        logger.debug("No snapshot at %s", p)
        return LoadReport(path=p, found=False)

    loaded = 0
    skipped = 0
    for lineno, line in enumerate(text.split("\n"), start=1):
        if not line:
            continue
        try:
            raw_key, raw_value = decode_record(line)
            key = key_parser(raw_key)
            value = value_parser(raw_value)
        except (SnapshotFormatError, ValueError, TypeError) as e:
            skipped += 1
            logger.debug("Skipping %s:%d: %s", p, lineno, e)
            continue
        store.put(key, value)
        loaded += 1

    logger.info("Loaded %d entries from %s (%d skipped)", loaded, p, skipped)
    return LoadReport(path=p, found=True, loaded=loaded, skipped=skipped)
