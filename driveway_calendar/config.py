import logging
import os
from typing import List

logger = logging.getLogger(__name__)

# --- File Paths ---
DATA_DIR = os.environ.get("DRIVEWAY_DATA_DIR", "data")
SLOTS_FILE = os.environ.get("DRIVEWAY_SLOTS_FILE", os.path.join(DATA_DIR, "slots.json"))

# --- Slot defaults ---
DEFAULT_CAPACITY = int(os.environ.get("DRIVEWAY_DEFAULT_CAPACITY", "1"))
MAX_CAPACITY = int(os.environ.get("DRIVEWAY_MAX_CAPACITY", "50"))

if DEFAULT_CAPACITY < 1 or DEFAULT_CAPACITY > MAX_CAPACITY:
    logger.warning(f"DRIVEWAY_DEFAULT_CAPACITY={DEFAULT_CAPACITY} out of range. Falling back to 1.")
    DEFAULT_CAPACITY = 1

# --- Calendar layout ---
# Weeks start on Sunday, weekday index 0.
DAY_NAMES: List[str] = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
WEEKDAY_KEYS: List[str] = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]
MONTH_NAMES: List[str] = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
