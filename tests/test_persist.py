import json
from datetime import datetime
from unittest.mock import MagicMock, mock_open, patch

from helpers import make_slot
from driveway_calendar import persist
from driveway_calendar.models import SlotStatus
from driveway_calendar.store import SlotStore


def test_ensure_data_dir():
    with patch("os.path.exists") as mock_exists, patch("os.makedirs") as mock_makedirs:
        # Case 1: Exists
        mock_exists.return_value = True
        persist.ensure_data_dir("data/slots.json")
        mock_makedirs.assert_not_called()

        # Case 2: Does not exist
        mock_exists.return_value = False
        persist.ensure_data_dir("data/slots.json")
        mock_makedirs.assert_called_with("data")


@patch("os.path.exists")
def test_load_slots(mock_exists):
    mock_exists.return_value = True
    test_data = json.dumps({
        "last_updated": "2024-03-01T12:00:00Z",
        "slots": {
            "2024-03-04": [
                {"id": "a", "date": "2024-03-04", "start_time": 540, "end_time": 600, "capacity": 2, "booked": 1, "status": "booked"}
            ]
        },
    })
    with patch("builtins.open", mock_open(read_data=test_data)):
        store = persist.load_slots("/tmp/test_slots.json")

    slot = store.get("2024-03-04", "a")
    assert slot.status == SlotStatus.BOOKED
    assert slot.booked == 1


@patch("os.path.exists")
def test_load_slots_unexpected_format(mock_exists):
    mock_exists.return_value = True
    with patch("builtins.open", mock_open(read_data='{"2024-03-04": []}')):
        assert persist.load_slots("/tmp/test_slots.json") == SlotStore()


@patch("os.path.exists")
def test_load_slots_corrupt_file(mock_exists):
    mock_exists.return_value = True
    with patch("builtins.open", mock_open(read_data="{not json")):
        assert persist.load_slots("/tmp/test_slots.json") == SlotStore()


@patch("os.path.exists")
def test_load_slots_invalid_record(mock_exists):
    """A slot breaking booked <= capacity makes the whole file unusable."""
    mock_exists.return_value = True
    test_data = json.dumps({
        "slots": {"2024-03-04": [{"id": "a", "start_time": 540, "end_time": 600, "capacity": 1, "booked": 3}]},
    })
    with patch("builtins.open", mock_open(read_data=test_data)):
        assert persist.load_slots("/tmp/test_slots.json") == SlotStore()


def test_load_slots_no_file():
    with patch("os.path.exists") as mock_exists:
        mock_exists.return_value = False
        assert persist.load_slots("/tmp/missing.json") == SlotStore()


@patch("driveway_calendar.persist.datetime")
@patch("driveway_calendar.persist.json.dump")
@patch("driveway_calendar.persist.ensure_data_dir")
def test_save_slots(mock_ensure, mock_dump, mock_datetime):
    """Test that save_slots wraps data with timestamp."""
    mock_now = MagicMock()
    mock_now.isoformat.return_value = "2024-03-01T12:00:00Z"
    mock_datetime.now.return_value = mock_now
    store = SlotStore({"2024-03-04": [make_slot("a", "2024-03-04", "09:00", "10:00")]})

    with patch("builtins.open", mock_open()):
        persist.save_slots(store, "/tmp/test_slots.json")

    args, _ = mock_dump.call_args
    saved_data = args[0]
    assert saved_data["last_updated"] == "2024-03-01T12:00:00Z"
    saved_slot = saved_data["slots"]["2024-03-04"][0]
    assert saved_slot["id"] == "a"
    assert saved_slot["start_time"] == 540
    assert saved_slot["status"] == "available"


def test_save_slots_io_error_is_reported(caplog):
    with patch("driveway_calendar.persist.ensure_data_dir"), patch("builtins.open", side_effect=IOError("disk full")):
        assert persist.save_slots(SlotStore(), "/tmp/test_slots.json") is False
    assert "Failed to save slots" in caplog.text


def test_json_backend_round_trip(tmp_path):
    path = str(tmp_path / "nested" / "slots.json")
    backend = persist.JsonSlotBackend(path)
    store = SlotStore({
        "2024-03-04": [
            make_slot("a", "2024-03-04", "09:00", "10:00", title="Front"),
            make_slot("b", "2024-03-04", "10:00", "11:00", status=SlotStatus.CANCELLED, cancellation_reason="rain"),
        ]
    })

    assert backend.save(store) is True

    assert backend.load() == store
    with open(path) as f:
        data = json.load(f)
    datetime.fromisoformat(data["last_updated"])


def test_in_memory_backend():
    backend = persist.InMemorySlotBackend()
    store = SlotStore({"2024-03-04": [make_slot("a", "2024-03-04", "09:00", "10:00")]})
    assert backend.save(store) is True
    assert backend.load() is store


def test_load_slots_undecodable_file(tmp_path, caplog):
    path = tmp_path / "slots.json"
    path.write_bytes(b'{"slots": {}, "x": "\xff\xfe"}')

    assert persist.load_slots(str(path)) == SlotStore()
    assert "Failed to load slots file" in caplog.text


def test_save_slots_data_dir_error_is_reported(caplog):
    with patch("driveway_calendar.persist.ensure_data_dir", side_effect=PermissionError("read-only")):
        assert persist.save_slots(SlotStore(), "/tmp/locked/slots.json") is False
    assert "Failed to save slots" in caplog.text


def test_json_backend_save_to_directory_fails(tmp_path):
    backend = persist.JsonSlotBackend(str(tmp_path))
    assert backend.save(SlotStore({"2024-03-04": [make_slot("a", "2024-03-04", "09:00", "10:00")]})) is False


def test_json_backend_save_succeeds(tmp_path):
    assert persist.JsonSlotBackend(str(tmp_path / "slots.json")).save(SlotStore()) is True
