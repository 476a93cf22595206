#!/usr/bin/env python3
"""
Device fingerprint generation and anomaly detection tests.
"""

import hashlib
import json
from datetime import datetime, timedelta, timezone

from models.attendance_record import DeviceDescriptor
from services.fingerprint_service import DeviceFingerprintAnalyzer

CAPTURED_AT = datetime(2026, 3, 2, 1, 0, tzinfo=timezone.utc)

DESKTOP = DeviceDescriptor(
    user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    screen_resolution="1920x1080",
    timezone="Asia/Taipei",
    language="zh-TW",
    platform="Win32",
)

IPHONE = DeviceDescriptor(
    user_agent="Mozilla/5.0 (iPhone; CPU iPhone OS 14_0 like Mac OS X)",
    screen_resolution="375x667",
    timezone="Asia/Taipei",
    language="zh-TW",
    platform="iPhone",
)


def test_hash_is_sha256_of_canonical_payload():
    analyzer = DeviceFingerprintAnalyzer()
    fp = analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT)

    payload = {
        "userAgent": DESKTOP.user_agent,
        "screenResolution": "1920x1080",
        "timezone": "Asia/Taipei",
        "language": "zh-TW",
        "platform": "Win32",
        "timestamp": int(CAPTURED_AT.timestamp() * 1000),
    }
    expected = hashlib.sha256(json.dumps(payload, separators=(",", ":")).encode("utf-8")).hexdigest()

    assert fp.fingerprint_hash == expected
    assert len(fp.short_hash) == 8


def test_same_device_same_instant_is_deterministic():
    analyzer = DeviceFingerprintAnalyzer()
    first = analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT)
    second = analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT)
    assert first.fingerprint_hash == second.fingerprint_hash


def test_capture_time_changes_hash():
    analyzer = DeviceFingerprintAnalyzer()
    first = analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT)
    later = analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT + timedelta(seconds=1))
    assert first.fingerprint_hash != later.fingerprint_hash
    assert first.snapshot == later.snapshot


def test_missing_attributes_become_unknown():
    analyzer = DeviceFingerprintAnalyzer()
    fp = analyzer.generate_fingerprint(DeviceDescriptor(user_agent="curl/8.0"), CAPTURED_AT)
    assert fp.snapshot.user_agent == "curl/8.0"
    assert fp.snapshot.platform == "unknown"
    assert fp.snapshot.screen_resolution == "unknown"


def test_first_fingerprint_is_never_anomalous():
    analyzer = DeviceFingerprintAnalyzer()
    fp = analyzer.generate_fingerprint(IPHONE, CAPTURED_AT)
    check = analyzer.detect_anomaly("emp-1", fp)
    assert check.is_anomalous is False
    assert check.differences == []
    assert check.last_check_at is None


def test_three_changed_attributes_is_anomalous():
    analyzer = DeviceFingerprintAnalyzer()
    analyzer.record("emp-1", analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT))

    check = analyzer.detect_anomaly("emp-1", analyzer.generate_fingerprint(IPHONE, CAPTURED_AT + timedelta(days=1)))

    assert check.is_anomalous is True
    assert {d.property for d in check.differences} == {"user_agent", "screen_resolution", "platform"}
    assert check.last_check_at == CAPTURED_AT


def test_one_changed_attribute_is_not_anomalous():
    analyzer = DeviceFingerprintAnalyzer()
    analyzer.record("emp-1", analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT))

    upgraded = DESKTOP.model_copy(update={"user_agent": "Mozilla/5.0 (Windows NT 11.0; Win64; x64)"})
    check = analyzer.detect_anomaly("emp-1", analyzer.generate_fingerprint(upgraded, CAPTURED_AT + timedelta(days=1)))

    assert check.is_anomalous is False
    assert len(check.differences) == 1
    assert check.differences[0].previous == DESKTOP.user_agent


def test_two_changed_attributes_is_still_normal():
    analyzer = DeviceFingerprintAnalyzer()
    analyzer.record("emp-1", analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT))

    travelling = DESKTOP.model_copy(update={"timezone": "Asia/Tokyo", "language": "ja-JP"})
    check = analyzer.detect_anomaly("emp-1", analyzer.generate_fingerprint(travelling, CAPTURED_AT + timedelta(days=1)))

    assert check.is_anomalous is False
    assert len(check.differences) == 2


def test_hash_match_short_circuits_comparison():
    analyzer = DeviceFingerprintAnalyzer()
    fp = analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT)
    analyzer.record("emp-1", fp)
    analyzer.record("emp-1", analyzer.generate_fingerprint(IPHONE, CAPTURED_AT + timedelta(hours=1)))

    check = analyzer.detect_anomaly("emp-1", fp)
    assert check.is_anomalous is False
    assert "matches" in check.reason


def test_comparison_uses_most_recent_entry():
    analyzer = DeviceFingerprintAnalyzer()
    analyzer.record("emp-1", analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT))
    analyzer.record("emp-1", analyzer.generate_fingerprint(IPHONE, CAPTURED_AT + timedelta(days=1)))

    check = analyzer.detect_anomaly("emp-1", analyzer.generate_fingerprint(IPHONE, CAPTURED_AT + timedelta(days=2)))
    assert check.is_anomalous is False
    assert check.differences == []


def test_history_is_a_bounded_ring_buffer():
    analyzer = DeviceFingerprintAnalyzer(history_size=10)
    for i in range(12):
        analyzer.record("emp-1", analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT + timedelta(days=i)))

    history = analyzer.history("emp-1")
    assert len(history) == 10
    assert history[0].created_at == CAPTURED_AT + timedelta(days=2)
    assert history[-1].created_at == CAPTURED_AT + timedelta(days=11)


def test_histories_are_per_employee():
    analyzer = DeviceFingerprintAnalyzer()
    analyzer.record("emp-1", analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT))
    assert analyzer.history("emp-2") == []
    check = analyzer.detect_anomaly("emp-2", analyzer.generate_fingerprint(IPHONE, CAPTURED_AT))
    assert check.is_anomalous is False


def test_late_synced_capture_does_not_become_the_baseline():
    analyzer = DeviceFingerprintAnalyzer()
    analyzer.record("emp-1", analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT + timedelta(days=1)))
    # Queued offline on the phone, delivered after the newer desktop event
    analyzer.record("emp-1", analyzer.generate_fingerprint(IPHONE, CAPTURED_AT - timedelta(days=1)))

    history = analyzer.history("emp-1")
    assert [h.created_at for h in history] == [CAPTURED_AT - timedelta(days=1), CAPTURED_AT + timedelta(days=1)]

    check = analyzer.detect_anomaly("emp-1", analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT + timedelta(days=2)))
    assert check.is_anomalous is False
    assert check.differences == []
    assert check.last_check_at == CAPTURED_AT + timedelta(days=1)


def test_full_ring_drops_the_oldest_capture_on_late_sync():
    analyzer = DeviceFingerprintAnalyzer(history_size=3)
    for i in (1, 2, 3):
        analyzer.record("emp-1", analyzer.generate_fingerprint(DESKTOP, CAPTURED_AT + timedelta(days=i)))
    analyzer.record("emp-1", analyzer.generate_fingerprint(IPHONE, CAPTURED_AT + timedelta(hours=36)))

    history = analyzer.history("emp-1")
    assert [h.created_at for h in history] == [
        CAPTURED_AT + timedelta(hours=36),
        CAPTURED_AT + timedelta(days=2),
        CAPTURED_AT + timedelta(days=3),
    ]
