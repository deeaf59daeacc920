"""Where: src/agent_defs/features/cache/adapters/store.py
What: On-disk cache of definition bodies plus an append-only manifest journal.
Why: Bodies are written before the manifest record that references them, so
     a crash at any point never leaves a manifest entry without its body.

Layout::

    <root>/manifest.jsonl      header line, then one JSON record per change
    <root>/bodies/<source>/<path-digest>-<fingerprint-digest>.md

Body files are versioned by fingerprint: an update writes a new file,
appends the manifest record, and only then deletes the superseded file.
"""

from __future__ import annotations

import hashlib
import json
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Final, final
from urllib.parse import quote

from agent_defs.features.cache.domain.models import CacheManifest, ManifestEntry
from agent_defs.features.definitions.domain.errors import CacheCorruption, FsError, NotFound
from agent_defs.features.definitions.domain.models import Definition, DefinitionKey, DefinitionKind
from agent_defs.platform.filesystem import (
    atomic_write_text,
    ensure_directory,
    fsync_directory,
    is_temp_artifact,
    remove_empty_directories,
)
from agent_defs.platform.logging import logger

MANIFEST_NAME: Final[str] = "manifest.jsonl"
BODIES_DIR: Final[str] = "bodies"
MANIFEST_FORMAT: Final[str] = "agent-defs-manifest"
MANIFEST_VERSION: Final[int] = 1
COMPACT_THRESHOLD_DEFAULT: Final[int] = 2000


@final
class CacheStore:
    """Persistent definition cache rooted at ``root``.

    Manifest mutation is serialized by a lock; body files for distinct
    keys may be written concurrently.
    """

    def __init__(self, root: Path, *, compact_threshold: int = COMPACT_THRESHOLD_DEFAULT) -> None:
        self._root = root
        self._compact_threshold = compact_threshold
        self._lock = threading.Lock()
        self._manifest: CacheManifest | None = None
        self._journal_records = 0
        self._dirty = False

    @property
    def root(self) -> Path:
        return self._root

    @property
    def manifest_path(self) -> Path:
        return self._root / MANIFEST_NAME

    @property
    def bodies_dir(self) -> Path:
        return self._root / BODIES_DIR

    # --- Read ----------------------------------------------------------------

    def load(self) -> CacheManifest:
        """Replay the journal and return a snapshot of the manifest.

        A missing manifest is an empty cache. A torn final record from an
        interrupted append is dropped. Entries whose body file has vanished
        are dropped with a warning.

        Raises:
            CacheCorruption: If the header or any complete record is invalid.
        """

        with self._lock:
            manifest, records, dirty, torn = self._replay()
            self._manifest = manifest
            self._journal_records = records
            self._dirty = dirty
            if torn:
                # Later appends must not land after a partial line.
                self._rewrite_journal(manifest)
                self._dirty = True
            return manifest.copy()

    def manifest(self) -> CacheManifest:
        """Snapshot of the current manifest, loading it on first use."""

        manifest = self._loaded()
        with self._lock:
            return manifest.copy()

    def entry(self, key: DefinitionKey) -> ManifestEntry | None:
        manifest = self._loaded()
        with self._lock:
            return manifest.entries.get(key)

    def keys_for_source(self, source_name: str) -> list[DefinitionKey]:
        # Other sources' workers insert concurrently; iterate under the lock.
        manifest = self._loaded()
        with self._lock:
            return manifest.keys_for_source(source_name)

    def last_synced(self, source_name: str) -> datetime | None:
        manifest = self._loaded()
        with self._lock:
            return manifest.last_synced.get(source_name)

    def get_body(self, key: DefinitionKey) -> str:
        """Return the cached body for ``key``.

        Raises:
            NotFound: If ``key`` is not cached.
            FsError: If the body file cannot be read.
        """

        entry = self.entry(key)
        if entry is None:
            raise NotFound(f"No cached definition {key}")
        return self._read_body(entry)

    def get(self, key: DefinitionKey) -> Definition:
        entry = self.entry(key)
        if entry is None:
            raise NotFound(f"No cached definition {key}")
        return _to_definition(key, entry, self._read_body(entry))

    def all(self) -> list[Definition]:
        """Every cached definition, bodies included, sorted by key."""

        manifest = self._loaded()
        with self._lock:
            entries = sorted(manifest.entries.items())
        return [_to_definition(key, entry, self._read_body(entry)) for key, entry in entries]

    # --- Write ---------------------------------------------------------------

    def put(self, definition: Definition) -> None:
        """Store ``definition``: body first, manifest record last.

        Raises:
            FsError: If the body or the manifest record cannot be written.
        """

        self._loaded()
        key = definition.key
        body_file = body_relpath(key, definition.fingerprint)
        body_path = self._root / body_file

        try:
            atomic_write_text(body_path, definition.body)
        except OSError as exc:
            raise FsError(body_path, f"cannot write body: {exc}") from exc

        entry = ManifestEntry(
            fingerprint=definition.fingerprint,
            synced_at=definition.synced_at,
            kind=definition.kind,
            title=definition.title,
            body_file=body_file,
            description=definition.description,
            category=definition.category,
        )

        with self._lock:
            manifest = self._require_manifest()
            previous = manifest.entries.get(key)
            self._append(_put_record(key, entry))
            manifest.entries[key] = entry

        if previous is not None and previous.body_file != body_file:
            self._delete_body(previous.body_file)

    def remove(self, key: DefinitionKey) -> None:
        """Forget ``key``: manifest record first, then the body file.

        Removing an unknown key is a no-op.

        Raises:
            FsError: If the manifest record cannot be written.
        """

        self._loaded()
        with self._lock:
            manifest = self._require_manifest()
            previous = manifest.entries.get(key)
            if previous is None:
                return
            self._append({"op": "remove", "source": key.source_name, "path": key.relative_path})
            del manifest.entries[key]

        self._delete_body(previous.body_file)

    def record_sync(self, source_name: str, at: datetime | None = None) -> None:
        """Remember when ``source_name`` last completed a successful pass."""

        self._loaded()
        moment = at or datetime.now(timezone.utc)
        with self._lock:
            manifest = self._require_manifest()
            self._append({"op": "synced", "source": source_name, "at": moment.isoformat()})
            manifest.last_synced[source_name] = moment

    # --- Maintenance ---------------------------------------------------------

    @property
    def needs_compaction(self) -> bool:
        with self._lock:
            if self._manifest is None:
                return False
            live = len(self._manifest.entries) + len(self._manifest.last_synced)
            return self._dirty or self._journal_records - live > self._compact_threshold

    def compact(self) -> None:
        """Rewrite the journal with live state only and sweep orphan bodies.

        Raises:
            FsError: If the new manifest cannot be written.
        """

        self._loaded()
        with self._lock:
            manifest = self._require_manifest()
            self._rewrite_journal(manifest)
            referenced = {entry.body_file for entry in manifest.entries.values()}

        removed = self._sweep_bodies(referenced)
        logger.debug("Compacted cache manifest (%d entries, %d orphan files removed)", len(referenced), removed)

    def reset(self) -> Path | None:
        """Set a corrupt manifest aside and start from an empty cache.

        Returns:
            Path | None: Where the previous manifest was moved, if it existed.

        Raises:
            FsError: If the cache root cannot be cleaned.
        """

        with self._lock:
            moved_to: Path | None = None
            try:
                if self.manifest_path.exists():
                    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
                    moved_to = self.manifest_path.with_name(f"{MANIFEST_NAME}.corrupt-{stamp}")
                    os.replace(self.manifest_path, moved_to)
                self._manifest = CacheManifest()
                self._journal_records = 0
                self._dirty = False
            except OSError as exc:
                raise FsError(self.manifest_path, f"cannot reset cache: {exc}") from exc

        _ = self._sweep_bodies(set())
        return moved_to

    # --- Internal ------------------------------------------------------------

    def _loaded(self) -> CacheManifest:
        if self._manifest is None:
            _ = self.load()
        return self._require_manifest()

    def _read_body(self, entry: ManifestEntry) -> str:
        path = self._root / entry.body_file
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FsError(path, f"cannot read body: {exc}") from exc

    def _require_manifest(self) -> CacheManifest:
        manifest = self._manifest
        if manifest is None:
            raise CacheCorruption("cache manifest has not been loaded")
        return manifest

    def _rewrite_journal(self, manifest: CacheManifest) -> None:
        """Atomically replace the journal with live state. Caller holds the lock."""

        lines = [json.dumps(_header(), sort_keys=True)]
        for key, entry in sorted(manifest.entries.items()):
            lines.append(json.dumps(_put_record(key, entry), sort_keys=True))
        for source_name, moment in sorted(manifest.last_synced.items()):
            lines.append(
                json.dumps({"op": "synced", "source": source_name, "at": moment.isoformat()}, sort_keys=True)
            )
        try:
            atomic_write_text(self.manifest_path, "\n".join(lines) + "\n")
        except OSError as exc:
            raise FsError(self.manifest_path, f"cannot rewrite manifest: {exc}") from exc
        self._journal_records = len(lines) - 1
        self._dirty = False

    def _replay(self) -> tuple[CacheManifest, int, bool, bool]:
        manifest = CacheManifest()
        path = self.manifest_path
        if not path.exists():
            return manifest, 0, False, False

        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise CacheCorruption(f"cannot read {path}: {exc}") from exc
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CacheCorruption(f"{path} is not UTF-8: {exc}") from exc

        dirty = False
        torn = False
        lines = text.split("\n")
        if lines[-1] == "":
            _ = lines.pop()
        else:
            logger.warning("Discarding incomplete trailing record in %s", path)
            _ = lines.pop()
            torn = True

        if not lines:
            # Crash while creating the journal: nothing was committed.
            return manifest, 0, torn, torn

        _check_header(path, lines[0])
        for number, line in enumerate(lines[1:], start=2):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise CacheCorruption(f"{path}:{number}: invalid JSON: {exc}") from exc
            _apply(manifest, record, f"{path}:{number}")

        for key, entry in list(manifest.entries.items()):
            if not (self._root / entry.body_file).is_file():
                logger.warning("Dropping cache entry %s: body file missing", key)
                del manifest.entries[key]
                dirty = True

        return manifest, len(lines) - 1, dirty or torn, torn

    def _append(self, record: dict[str, Any]) -> None:
        """Append one record durably. Caller holds the lock."""

        path = self.manifest_path
        line = json.dumps(record, sort_keys=True) + "\n"
        try:
            _ = ensure_directory(self._root)
            is_new = not path.exists() or path.stat().st_size == 0
            with open(path, "a", encoding="utf-8", newline="") as handle:
                if is_new:
                    _ = handle.write(json.dumps(_header(), sort_keys=True) + "\n")
                _ = handle.write(line)
                handle.flush()
                os.fsync(handle.fileno())
            if is_new:
                fsync_directory(self._root)
        except OSError as exc:
            raise FsError(path, f"cannot append to manifest: {exc}") from exc
        self._journal_records += 1

    def _delete_body(self, body_file: str) -> None:
        path = self._root / body_file
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            # The manifest no longer references it; compaction sweeps it later.
            logger.warning("Could not delete stale body %s: %s", path, exc)
            with self._lock:
                self._dirty = True

    def _sweep_bodies(self, referenced: set[str]) -> int:
        if not self.bodies_dir.is_dir():
            return 0
        removed = 0
        for candidate in self.bodies_dir.rglob("*"):
            if not candidate.is_file():
                continue
            relative = candidate.relative_to(self._root).as_posix()
            if relative in referenced and not is_temp_artifact(candidate):
                continue
            try:
                candidate.unlink()
                removed += 1
            except OSError as exc:
                logger.warning("Could not remove orphan cache file %s: %s", candidate, exc)
        remove_empty_directories(self.bodies_dir)
        return removed


def body_relpath(key: DefinitionKey, fingerprint: str) -> str:
    """Relative body path for ``key`` at ``fingerprint``."""

    source_dir = quote(key.source_name, safe="") or "_"
    path_digest = hashlib.sha256(key.relative_path.encode("utf-8")).hexdigest()[:32]
    fingerprint_digest = hashlib.sha256(fingerprint.encode("utf-8")).hexdigest()[:12]
    return f"{BODIES_DIR}/{source_dir}/{path_digest}-{fingerprint_digest}.md"


def _header() -> dict[str, Any]:
    return {"format": MANIFEST_FORMAT, "version": MANIFEST_VERSION}


def _check_header(path: Path, line: str) -> None:
    try:
        header = json.loads(line)
    except json.JSONDecodeError as exc:
        raise CacheCorruption(f"{path}: unreadable header: {exc}") from exc
    if not isinstance(header, dict) or header.get("format") != MANIFEST_FORMAT:
        raise CacheCorruption(f"{path}: not an agent-defs manifest")
    if header.get("version") != MANIFEST_VERSION:
        raise CacheCorruption(f"{path}: unsupported manifest version {header.get('version')!r}")


def _put_record(key: DefinitionKey, entry: ManifestEntry) -> dict[str, Any]:
    return {
        "op": "put",
        "source": key.source_name,
        "path": key.relative_path,
        "fingerprint": entry.fingerprint,
        "synced_at": entry.synced_at.isoformat(),
        "kind": entry.kind.value,
        "title": entry.title,
        "description": entry.description,
        "category": entry.category,
        "body": entry.body_file,
    }


def _apply(manifest: CacheManifest, record: Any, where: str) -> None:
    if not isinstance(record, dict):
        raise CacheCorruption(f"{where}: record is not an object")
    op = record.get("op")
    try:
        if op == "put":
            key = DefinitionKey(_str(record, "source"), _str(record, "path"))
            kind = DefinitionKind(_str(record, "kind"))
            manifest.entries[key] = ManifestEntry(
                fingerprint=_str(record, "fingerprint"),
                synced_at=datetime.fromisoformat(_str(record, "synced_at")),
                kind=kind,
                title=_str(record, "title"),
                body_file=_str(record, "body"),
                description=_opt_str(record, "description"),
                category=_opt_str(record, "category"),
            )
        elif op == "remove":
            key = DefinitionKey(_str(record, "source"), _str(record, "path"))
            _ = manifest.entries.pop(key, None)
        elif op == "synced":
            manifest.last_synced[_str(record, "source")] = datetime.fromisoformat(_str(record, "at"))
        else:
            raise CacheCorruption(f"{where}: unknown op {op!r}")
    except ValueError as exc:
        raise CacheCorruption(f"{where}: {exc}") from exc


def _str(record: dict[str, Any], key: str) -> str:
    value = record.get(key)
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' must be a string")
    return value


def _opt_str(record: dict[str, Any], key: str) -> str | None:
    value = record.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' must be a string or null")
    return value


def _to_definition(key: DefinitionKey, entry: ManifestEntry, body: str) -> Definition:
    return Definition(
        source_name=key.source_name,
        relative_path=key.relative_path,
        kind=entry.kind,
        title=entry.title,
        body=body,
        fingerprint=entry.fingerprint,
        synced_at=entry.synced_at,
        description=entry.description,
        category=entry.category,
    )


__all__ = ["CacheStore", "MANIFEST_NAME", "body_relpath"]
