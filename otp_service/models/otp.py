from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import TypeAdapter


_DATETIME = TypeAdapter(datetime)


class ChannelType(str, Enum):
    SMS = "sms"
    MAIL = "mail"


class ResultKind(str, Enum):
    OK = "ok"
    USER_NOT_FOUND = "user_not_found"
    RECORD_NOT_FOUND = "record_not_found"
    DELIVERY_FAILED = "delivery_failed"
    EXPIRED = "expired"
    INVALID = "invalid"

    @property
    def is_not_found(self) -> bool:
        return self in (ResultKind.USER_NOT_FOUND, ResultKind.RECORD_NOT_FOUND)


@dataclass
class User:
    id: str
    phone_no: str | None = None
    email: str | None = None
    phone_verified: bool = False
    email_verified: bool = False

    def contact_for(self, channel: ChannelType) -> str | None:
        """Return the address an OTP for `channel` is delivered to, if any."""
        value = self.phone_no if channel is ChannelType.SMS else self.email
        return value or None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "User":
        return cls(
            id=str(row["id"]),
            phone_no=row.get("phone_no"),
            email=row.get("email"),
            phone_verified=bool(row.get("phone_verified", False)),
            email_verified=bool(row.get("email_verified", False)),
        )


@dataclass
class OtpRecord:
    user_id: str
    type: ChannelType
    otp: str
    expiry_time: datetime
    verified_at: datetime | None = None

    @property
    def key(self) -> tuple[str, ChannelType]:
        return self.user_id, self.type

    @property
    def is_verified(self) -> bool:
        return self.verified_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expiry_time

    def to_row(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "type": self.type.value,
            "otp": self.otp,
            "expiry_time": self.expiry_time.isoformat(),
            "verified_at": self.verified_at.isoformat() if self.verified_at else None,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "OtpRecord":
        verified_at = row.get("verified_at")
        return cls(
            user_id=str(row["user_id"]),
            type=ChannelType(row["type"]),
            otp=str(row["otp"]),
            expiry_time=_parse_ts(row["expiry_time"]),
            verified_at=_parse_ts(verified_at) if verified_at else None,
        )


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    message: str


@dataclass(frozen=True)
class OtpResult:
    success: bool
    message: str
    kind: ResultKind = ResultKind.OK


def _parse_ts(value: str | datetime) -> datetime:
    # PostgREST trims trailing zeros from fractional seconds.
    return _DATETIME.validate_python(value)
