"""
Device fingerprinting for check-in events.

A fingerprint is a SHA-256 over the device attributes *and* the capture
timestamp, so two captures from the same phone almost never share a hash.
The hash is a log key, not a device identity: the anomaly signal in practice
comes from the attribute-by-attribute comparison against the last capture.
"""

import hashlib
import json
import threading
from collections import deque
from datetime import datetime
from typing import Deque, Dict, List

from models.attendance_record import DeviceDescriptor
from models.device_fingerprint import (
    SNAPSHOT_FIELDS,
    UNKNOWN,
    AnomalyCheck,
    DeviceDifference,
    DeviceFingerprint,
    DeviceFingerprintRecord,
    DeviceSnapshot,
)
from utils.datetime_helpers import epoch_millis

# Canonical keys used inside the hashed payload, in hashing order
_CANONICAL_KEYS = {
    "user_agent": "userAgent",
    "screen_resolution": "screenResolution",
    "timezone": "timezone",
    "language": "language",
    "platform": "platform",
}


class DeviceFingerprintAnalyzer:
    def __init__(self, history_size: int = 10, difference_threshold: int = 2):
        self.history_size = history_size
        self.difference_threshold = difference_threshold
        self._lock = threading.Lock()
        self._history: Dict[str, Deque[DeviceFingerprintRecord]] = {}

    def generate_fingerprint(self, descriptor: DeviceDescriptor, captured_at: datetime) -> DeviceFingerprint:
        """
        Hash a device descriptor together with its capture time.

        Args:
            descriptor: attributes reported by the browser
            captured_at: capture instant, folded into the hash

        Returns:
            DeviceFingerprint: hex digest plus the normalized snapshot
        """
        snapshot = DeviceSnapshot(
            **{field: getattr(descriptor, field) or UNKNOWN for field in SNAPSHOT_FIELDS}
        )

        payload = {_CANONICAL_KEYS[field]: getattr(snapshot, field) for field in SNAPSHOT_FIELDS}
        payload["timestamp"] = epoch_millis(captured_at)

        serialized = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        digest = hashlib.sha256(serialized.encode("utf-8")).hexdigest()

        return DeviceFingerprint(fingerprint_hash=digest, snapshot=snapshot, captured_at=captured_at)

    def history(self, employee_id: str) -> List[DeviceFingerprintRecord]:
        """Retained fingerprints for an employee, oldest capture first."""
        with self._lock:
            return list(self._history.get(employee_id, ()))

    def detect_anomaly(self, employee_id: str, fingerprint: DeviceFingerprint) -> AnomalyCheck:
        recent = self.history(employee_id)

        if not recent:
            return AnomalyCheck(
                is_anomalous=False,
                reason="First check-in, device baseline established.",
            )

        if any(entry.fingerprint_hash == fingerprint.fingerprint_hash for entry in recent):
            return AnomalyCheck(
                is_anomalous=False,
                reason="Device fingerprint matches history.",
                last_check_at=recent[-1].created_at,
            )

        last = recent[-1]
        differences = [
            DeviceDifference(
                property=field,
                previous=getattr(last.snapshot, field),
                current=getattr(fingerprint.snapshot, field),
            )
            for field in SNAPSHOT_FIELDS
            if getattr(last.snapshot, field) != getattr(fingerprint.snapshot, field)
        ]

        is_anomalous = len(differences) > self.difference_threshold
        if is_anomalous:
            reason = "Device fingerprint differs too much from history."
        elif differences:
            reason = "Minor device differences, treated as normal."
        else:
            reason = "Device attributes match the last check-in."

        return AnomalyCheck(
            is_anomalous=is_anomalous,
            reason=reason,
            differences=differences,
            last_check_at=last.created_at,
        )

    def record(self, employee_id: str, fingerprint: DeviceFingerprint) -> DeviceFingerprintRecord:
        entry = DeviceFingerprintRecord(
            employee_id=employee_id,
            fingerprint_hash=fingerprint.fingerprint_hash,
            snapshot=fingerprint.snapshot,
            created_at=fingerprint.captured_at,
        )
        with self._lock:
            ring = self._history.get(employee_id)
            if ring is None:
                ring = deque(maxlen=self.history_size)
                self._history[employee_id] = ring
            if ring and epoch_millis(entry.created_at) < epoch_millis(ring[-1].created_at):
                # Late-synced event: keep the ring ordered by capture time and
                # drop the oldest captures, not the newest
                ordered = sorted([*ring, entry], key=lambda e: epoch_millis(e.created_at))
                ring = deque(ordered[-self.history_size:], maxlen=self.history_size)
                self._history[employee_id] = ring
            else:
                ring.append(entry)
        return entry
