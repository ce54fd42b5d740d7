"""Persist in-progress engine state so it survives app restarts.

State is written to two JSON files derived from a base path
(``<base>_1.json`` and ``<base>_2.json``).  Both files receive the same
payload; if the primary is lost or truncated the backup is used.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from backend import DEFAULT_RECOVERY_BASE
from backend.errors import PersistenceFailure


class RecoveryStore:
    """Dual-file JSON store for engine snapshots."""

    def __init__(self, base: Path = DEFAULT_RECOVERY_BASE):
        self.base = Path(base)

    @property
    def paths(self) -> tuple[Path, Path]:
        return (
            self.base.with_name(self.base.name + "_1.json"),
            self.base.with_name(self.base.name + "_2.json"),
        )

    def save(self, state: dict) -> None:
        """Write ``state`` to both recovery files.

        Raises :class:`PersistenceFailure` if the state cannot be serialised
        or written.
        """

        try:
            payload = json.dumps(state)
        except (TypeError, ValueError) as exc:
            raise PersistenceFailure(f"State is not serialisable: {exc}") from exc
        try:
            self.base.parent.mkdir(parents=True, exist_ok=True)
            for path in self.paths:
                path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            raise PersistenceFailure(f"Could not write recovery files: {exc}") from exc

    def load(self) -> dict | None:
        """Return the first readable snapshot, or ``None``."""

        for path in self.paths:
            try:
                text = path.read_text(encoding="utf-8").strip()
            except FileNotFoundError:
                continue
            except OSError:
                logging.exception("Could not read recovery file %s", path)
                continue
            if not text:
                continue
            try:
                data = json.loads(text)
            except ValueError:
                logging.warning("Ignoring corrupt recovery file %s", path)
                continue
            if isinstance(data, dict):
                return data
        return None

    def clear(self) -> None:
        """Remove any existing recovery files."""

        for path in self.paths:
            try:
                path.unlink()
            except FileNotFoundError:
                pass
