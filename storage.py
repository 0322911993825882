import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List

logger = logging.getLogger(__name__)

COLLECTIONS = ("contacts", "bookings", "subscribers")

STATUS_OK = "ok"
STATUS_MISSING = "missing"
STATUS_CORRUPT = "corrupt"


@dataclass
class LoadResult:
    """Outcome of reading one collection file.

    ``records`` is always usable; ``status`` says whether an empty list is
    genuinely empty or stands in for a missing or unreadable file.
    """

    records: list = field(default_factory=list)
    status: str = STATUS_OK
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


class RecordStore:
    """Whole-collection JSON persistence, one array per file.

    There is no locking: concurrent read-modify-write cycles race and the
    last write wins.
    """

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self.files: Dict[str, str] = {
            name: os.path.join(data_dir, f"{name}.json") for name in COLLECTIONS
        }

    def path_for(self, collection: str) -> str:
        try:
            return self.files[collection]
        except KeyError:
            raise KeyError(f"Unknown collection: {collection}") from None

    def ensure_files(self) -> None:
        """Create the data directory and any missing collection file as ``[]``."""
        os.makedirs(self.data_dir, exist_ok=True)
        for path in self.files.values():
            if os.path.exists(path):
                continue
            with open(path, "w", encoding="utf-8") as handle:
                json.dump([], handle, indent=2)
            logger.info("Created %s in %s", os.path.basename(path), self.data_dir)

    def load_result(self, collection: str) -> LoadResult:
        path = self.path_for(collection)
        existed = os.path.exists(path)
        try:
            self.ensure_files()
        except OSError as exc:
            logger.warning("Could not initialise %s: %s", self.data_dir, exc)

        if not existed:
            logger.warning("Collection %s was missing, treating as empty", collection)
            return LoadResult(status=STATUS_MISSING)

        try:
            with open(path, "r", encoding="utf-8") as handle:
                raw = handle.read()
            data = json.loads(raw) if raw.strip() else []
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Collection %s is unreadable, treating as empty: %s", collection, exc)
            return LoadResult(status=STATUS_CORRUPT, error=str(exc))

        if not isinstance(data, list):
            logger.warning("Collection %s is not a JSON array, treating as empty", collection)
            return LoadResult(status=STATUS_CORRUPT, error="not a JSON array")

        return LoadResult(records=data)

    def load(self, collection: str) -> List:
        return self.load_result(collection).records

    def save(self, collection: str, records: List) -> None:
        path = self.path_for(collection)
        os.makedirs(self.data_dir, exist_ok=True)
        with open(path, "w", encoding="utf-8") as handle:
            json.dump(list(records), handle, indent=2)
