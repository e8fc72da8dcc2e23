"""JSON file data store for propjournal."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable

from propjournal.db.normalize import normalize
from propjournal.models import Database

logger = logging.getLogger(__name__)


class DataStore:
    """JSON-file data store holding the whole database as one document.

    The store is the single writer: it keeps the current normalized snapshot
    and replaces it on every ``commit``. Readers take ``snapshot()`` and pass
    it to the reporting functions.
    """

    COLLECTIONS = ["firms", "accounts", "journals", "compliance"]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the JSON database file.
        """
        self.db_path = Path(db_path)
        self._ensure_db_dir()
        self._snapshot = normalize(self.load())

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def empty() -> dict:
        return {name: [] for name in DataStore.COLLECTIONS}

    def load(self) -> Any:
        """Read the raw document.

        Returns:
            The parsed JSON value, or an empty database document if the file
            is missing or cannot be parsed.
        """
        if not self.db_path.exists():
            return self.empty()
        try:
            return json.loads(self.db_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s, starting from an empty database: %s", self.db_path, e)
            return self.empty()

    def _write_text(self, text: str) -> None:
        """Replace the file contents atomically."""
        fd, tmp_path = tempfile.mkstemp(
            dir=self.db_path.parent, prefix=f".{self.db_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, self.db_path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def save(self, db: Database) -> None:
        """Persist a database snapshot."""
        self._write_text(json.dumps(db.to_dict(), indent=2))

    def snapshot(self) -> Database:
        """The current normalized database."""
        return self._snapshot

    def commit(self, updater: Callable[[Database], Database]) -> Database:
        """Apply an edit, then normalize, persist and publish the result.

        Args:
            updater: Function from the current snapshot to the edited one.

        Returns:
            The new snapshot.
        """
        next_db = normalize(updater(self._snapshot))
        self.save(next_db)
        self._snapshot = next_db
        logger.debug(
            "Committed %d firm(s), %d account(s), %d compliance entries, %d journal(s)",
            len(next_db.firms),
            len(next_db.accounts),
            len(next_db.compliance),
            len(next_db.journals),
        )
        return next_db

    def reload(self) -> Database:
        """Re-read the file, normalize it and persist the normalized form."""
        next_db = normalize(self.load())
        self.save(next_db)
        self._snapshot = next_db
        return next_db

    def export_text(self) -> str:
        """The stored document as pretty-printed JSON."""
        if not self.db_path.exists():
            return json.dumps(self.empty(), indent=2)
        return json.dumps(self.load(), indent=2)

    def import_text(self, text: str) -> Database:
        """Replace the stored document with ``text`` and reload.

        Raises:
            ValueError: If ``text`` is not valid JSON. The store is left
                unchanged.
        """
        try:
            json.loads(text)
        except ValueError as e:
            raise ValueError(f"Import is not valid JSON: {e}") from e
        self._write_text(text)
        return self.reload()

    def reset(self) -> Database:
        """Replace the stored document with an empty database."""
        self._write_text(json.dumps(self.empty(), indent=2))
        return self.reload()

    def get_stats(self) -> dict:
        """Record counts per collection."""
        db = self._snapshot
        return {name: len(getattr(db, name)) for name in self.COLLECTIONS}
