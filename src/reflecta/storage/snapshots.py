"""JSON file persistence for theme snapshots with version checks."""

import json
import logging
import os
import tempfile
from pathlib import Path

from ..errors import SnapshotConflictError
from ..models import ThemeSnapshot

logger = logging.getLogger(__name__)


class ThemeSnapshotStore:
    """Loads and saves a ``ThemeSnapshot`` at a single path.

    ``save`` only succeeds when the stored version still equals the version
    the caller read, so two writers cannot silently overwrite each other.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def load(self) -> ThemeSnapshot:
        if not self.path.exists():
            return ThemeSnapshot()
        with open(self.path) as f:
            data = json.load(f)
        return ThemeSnapshot.from_dict(data)

    def current_version(self) -> int:
        return self.load().version

    def save(self, snapshot: ThemeSnapshot, expected_version: int) -> ThemeSnapshot:
        """Write ``snapshot`` if the stored version is still ``expected_version``."""
        found = self.current_version()
        if found != expected_version:
            logger.warning(f"Snapshot at {self.path} is at version {found}, expected {expected_version}")
            raise SnapshotConflictError(expected_version, found)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".themes-", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(snapshot.to_dict(), f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.debug(f"Saved {len(snapshot.themes)} theme(s) at version {snapshot.version} to {self.path}")
        return snapshot
