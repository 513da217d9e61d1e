import threading
from dataclasses import replace
from datetime import datetime

from otp_service.models.otp import ChannelType, OtpRecord, User
from otp_service.storage.base import OtpStore, UserDirectory


class InMemoryOtpStore(OtpStore):
    """Process-local store. Suitable for dev, tests and single-worker deployments."""

    def __init__(self):
        self._records: dict[tuple[str, ChannelType], OtpRecord] = {}
        self._lock = threading.Lock()

    def find_one(self, user_id: str, channel_type: ChannelType) -> OtpRecord | None:
        with self._lock:
            record = self._records.get((user_id, channel_type))
        # Copies keep callers from mutating stored state outside the lock.
        return replace(record) if record else None

    def upsert(self, record: OtpRecord) -> bool:
        with self._lock:
            self._records[record.key] = replace(record)
        return True

    def mark_verified(self, user_id: str, channel_type: ChannelType, otp: str, at: datetime) -> bool:
        with self._lock:
            record = self._records.get((user_id, channel_type))
            if record is None or record.otp != otp or record.is_verified:
                return False
            self._records[record.key] = replace(record, verified_at=at)
        return True

    def delete(self, user_id: str, channel_type: ChannelType) -> bool:
        with self._lock:
            return self._records.pop((user_id, channel_type), None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class InMemoryUserDirectory(UserDirectory):
    def __init__(self, users: list[User] | None = None):
        self._users: dict[str, User] = {u.id: u for u in users or []}
        self._lock = threading.Lock()

    def find_one(self, user_id: str) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
        return replace(user) if user else None

    def update_one(self, user_id: str, patch: dict) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            self._users[user_id] = replace(user, **patch)
        return True
