import json
import logging
import os
from datetime import datetime, timezone
from typing import Dict

from pydantic import ValidationError as ModelValidationError

from driveway_calendar import config
from driveway_calendar.store import SlotStore

logger = logging.getLogger(__name__)


def ensure_data_dir(path: str):
    """Ensures the directory holding the given file exists."""
    folder = os.path.dirname(path)
    if folder and not os.path.exists(folder):
        os.makedirs(folder)


def load_slots(path: str | None = None) -> SlotStore:
    """Loads the saved slots from a JSON file with timestamp metadata."""
    path = path or config.SLOTS_FILE
    if not os.path.exists(path):
        logger.info("No slots file found. Starting with an empty calendar.")
        return SlotStore()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data: Dict = json.load(f)
    except (ValueError, OSError):  # JSONDecodeError and UnicodeDecodeError are ValueErrors
        logger.warning("Failed to load slots file. Starting with an empty calendar.")
        return SlotStore()

    if not isinstance(data, dict) or "slots" not in data:
        logger.warning("Slots file has unexpected format. Starting with an empty calendar.")
        return SlotStore()

    try:
        store = SlotStore.from_snapshot(data["slots"])
    except (ModelValidationError, ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Slots file contains invalid records ({e}). Starting with an empty calendar.")
        return SlotStore()

    logger.info(f"Loaded {len(store)} slots, last updated: {data.get('last_updated')}")
    return store


def save_slots(store: SlotStore, path: str | None = None) -> bool:
    """Saves the slots to a JSON file with timestamp. Returns False if the write failed."""
    path = path or config.SLOTS_FILE
    try:
        ensure_data_dir(path)
        data = {
            "last_updated": datetime.now(timezone.utc).isoformat(),
            "slots": {
                date: [slot.model_dump(mode="json") for slot in slots]
                for date, slots in store.snapshot().items()
            },
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        logger.error(f"Failed to save slots: {e}")
        return False
    logger.info(f"Saved {len(store)} slots to {path} on {data['last_updated']}")
    return True


class InMemorySlotBackend:
    """Keeps the last saved store in memory. Used for tests and throwaway sessions."""

    def __init__(self, store: SlotStore | None = None):
        self._store = store or SlotStore()

    def load(self) -> SlotStore:
        return self._store

    def save(self, store: SlotStore) -> bool:
        self._store = store
        return True


class JsonSlotBackend:
    """Reads and writes the slot store as a JSON file."""

    def __init__(self, path: str | None = None):
        self.path = path or config.SLOTS_FILE

    def load(self) -> SlotStore:
        return load_slots(self.path)

    def save(self, store: SlotStore) -> bool:
        return save_slots(store, self.path)
