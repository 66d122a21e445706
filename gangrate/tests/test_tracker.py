import uuid

from gangrate import tracker


def test_track_basic_event(caplog_json):
    """Test tracking a basic event."""
    tracker.track("test_event")

    logs = caplog_json.get_json_logs()
    assert len(logs) == 1
    assert logs[0] == {"event": "test_event", "n": 1}


def test_track_event_with_count(caplog_json):
    tracker.track("test_event", n=5)

    logs = caplog_json.get_json_logs()
    assert logs == [{"event": "test_event", "n": 5}]


def test_track_event_with_value(caplog_json):
    """Test tracking an event with distribution value."""
    tracker.track("gang_rating_computed", value=1250)

    logs = caplog_json.get_json_logs()
    assert len(logs) == 1
    assert logs[0] == {"event": "gang_rating_computed", "n": 1, "value": 1250}


def test_track_event_with_labels(caplog_json):
    """Test tracking an event with multiple labels."""
    tracker.track(
        "cost_cache_purge_failed", reason="equipment", tags=5, deferred=True
    )

    logs = caplog_json.get_json_logs()
    assert len(logs) == 1
    assert logs[0] == {
        "event": "cost_cache_purge_failed",
        "n": 1,
        "labels": {"reason": "equipment", "tags": 5, "deferred": True},
    }


def test_track_converts_ids_and_tag_sets(caplog_json):
    """UUIDs become strings and sets become sorted lists."""
    gang_id = uuid.uuid4()

    tracker.track(
        "gang_rating_out_of_sync",
        gang_id=gang_id,
        tags=frozenset({"shared-gang-rating-b", "base-gang-basic-a"}),
    )

    logs = caplog_json.get_json_logs()
    assert logs[0]["labels"] == {
        "gang_id": str(gang_id),
        "tags": ["base-gang-basic-a", "shared-gang-rating-b"],
    }


def test_track_reduces_objects_with_an_id(caplog_json):
    class Gang:
        id = uuid.UUID("00000000-0000-0000-0000-000000000001")

    tracker.track("fighter_hired", gang=Gang())

    logs = caplog_json.get_json_logs()
    assert logs[0]["labels"] == {"gang": "00000000-0000-0000-0000-000000000001"}


def test_track_drops_unserializable_labels(caplog_json):
    tracker.track("cost_cache_bypass", key="gang-rating:x", handle=object())

    logs = caplog_json.get_json_logs()
    assert logs[0]["labels"] == {"key": "gang-rating:x"}


def test_multiple_track_calls(caplog_json):
    """Test multiple track calls produce separate log entries."""
    tracker.track("event1")
    tracker.track("event2", n=2)
    tracker.track("event3", value=3.0)

    logs = caplog_json.get_json_logs()
    assert len(logs) == 3
    assert logs[0] == {"event": "event1", "n": 1}
    assert logs[1] == {"event": "event2", "n": 2}
    assert logs[2] == {"event": "event3", "n": 1, "value": 3.0}
    assert [log["event"] for log in caplog_json.events("event2")] == ["event2"]
