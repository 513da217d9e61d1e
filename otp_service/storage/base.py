from abc import ABC, abstractmethod
from datetime import datetime

from otp_service.models.otp import ChannelType, OtpRecord, User


class UserDirectory(ABC):
    """Resolves users and applies verification updates to them."""

    @abstractmethod
    def find_one(self, user_id: str) -> User | None:
        ...

    @abstractmethod
    def update_one(self, user_id: str, patch: dict) -> bool:
        """Apply `patch` to the user. Returns True if a user was updated."""
        ...


class OtpStore(ABC):
    """Holds the latest OTP record per (user_id, channel type)."""

    @abstractmethod
    def find_one(self, user_id: str, channel_type: ChannelType) -> OtpRecord | None:
        ...

    @abstractmethod
    def upsert(self, record: OtpRecord) -> bool:
        """Insert or replace the record for its key. Atomic per key."""
        ...

    @abstractmethod
    def mark_verified(self, user_id: str, channel_type: ChannelType, otp: str, at: datetime) -> bool:
        """
        Stamp `verified_at` on the stored record, only if it still holds `otp`
        and is not verified yet. Check and write are atomic per key.
        """
        ...

    @abstractmethod
    def delete(self, user_id: str, channel_type: ChannelType) -> bool:
        ...

    def ping(self) -> bool:
        return True
