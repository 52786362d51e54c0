"""
Typed records decoded from the Realtime Database.

Raw nodes are loosely typed maps written by several front-end forms, so
every collection is decoded through a pydantic model at the boundary.
Aliases map the stored camelCase keys onto the attribute names the
analytics code uses. A record that fails validation is skipped and
counted rather than failing the whole request.
"""
import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from utils import stay_nights, to_date

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CHECKED_IN = "checked-in"
    COMPLETED = "completed"      # Checked out
    CANCELLED = "cancelled"


# Statuses whose bookings count toward revenue and occupancy. Both sets are
# kept as separate names so either can be narrowed without touching callers.
REVENUE_RECOGNIZED_STATUSES = frozenset({
    BookingStatus.PAID.value,
    BookingStatus.CHECKED_IN.value,
    BookingStatus.COMPLETED.value,
})
OCCUPANCY_RECOGNIZED_STATUSES = frozenset({
    BookingStatus.PAID.value,
    BookingStatus.CHECKED_IN.value,
    BookingStatus.COMPLETED.value,
})

POS_COMPLETED_STATUS = "completed"


class GoalType(str, Enum):
    REVENUE = "revenue"
    OCCUPANCY = "occupancy"
    BOOKINGS = "bookings"


class GoalPeriod(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class ReportFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ReportContent(str, Enum):
    FULL = "full"
    POS_REVENUE = "pos_revenue"
    ROOM_REVENUE = "room_revenue"
    OCCUPANCY = "occupancy"
    BOOKINGS = "bookings"


class StoreRecord(BaseModel):
    """Base for decoded records: the node key becomes `id`"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str


class Room(StoreRecord):
    type: str = "Unknown"
    rate: float = Field(0.0, alias="pricePerNight")
    capacity: int = 2
    status: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)

    @field_validator("rate", "capacity", mode="before")
    @classmethod
    def _missing_numbers(cls, value, info):
        if value is None or value == "":
            return 2 if info.field_name == "capacity" else 0
        return value


class Booking(StoreRecord):
    guest_id: Optional[str] = Field(None, alias="guestId")
    guest_name: str = Field("", alias="guestName")
    guest_email: str = Field("", alias="guestEmail")
    guest_phone: str = Field("", alias="guestPhone")
    room_id: Optional[str] = Field(None, alias="roomId")
    room_type: str = Field("Unknown", alias="roomType")
    check_in: date = Field(alias="checkIn")
    check_out: date = Field(alias="checkOut")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    status: str = BookingStatus.PENDING.value
    total_price: float = Field(0.0, alias="totalPrice")
    is_walk_in: bool = Field(False, alias="isWalkIn")

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def _stay_date(cls, value):
        # Stored either as "YYYY-MM-DD" or as a full ISO timestamp
        return to_date(value)

    @field_validator("created_at", mode="before")
    @classmethod
    def _blank_timestamp(cls, value):
        return value or None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        return str(value or BookingStatus.PENDING.value).strip().lower()

    @field_validator("total_price", mode="before")
    @classmethod
    def _missing_price(cls, value):
        return 0 if value is None or value == "" else value

    @field_validator("guest_name", "guest_email", "guest_phone", "room_type", mode="before")
    @classmethod
    def _missing_text(cls, value, info):
        if value is None:
            return "Unknown" if info.field_name == "room_type" else ""
        return value

    @field_validator("is_walk_in", mode="before")
    @classmethod
    def _missing_flag(cls, value):
        return bool(value)

    @model_validator(mode="after")
    def _check_out_after_check_in(self):
        if self.check_out < self.check_in:
            raise ValueError("checkOut is before checkIn")
        return self

    @property
    def booked_on(self) -> date:
        """Calendar day the booking was made, falling back to the arrival day"""
        if self.created_at is not None:
            return self.created_at.date()
        return self.check_in

    @property
    def nights(self) -> int:
        return stay_nights(self.check_in, self.check_out)

    @property
    def guest_key(self) -> str:
        """Identity used to count distinct guests"""
        return self.guest_id or self.guest_email or self.guest_name


class PosTransaction(StoreRecord):
    created_at: datetime
    status: str = "pending"
    subtotal: float = 0.0
    total: float = 0.0
    tax: float = 0.0
    payment_method: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        return str(value or "pending").strip().lower()

    @field_validator("subtotal", "total", "tax", mode="before")
    @classmethod
    def _missing_amount(cls, value):
        return 0 if value is None or value == "" else value

    @property
    def created_on(self) -> date:
        return self.created_at.date()


class PosTransactionItem(StoreRecord):
    transaction_id: str
    product_id: Optional[str] = None
    quantity: int = 1
    total_price: float = 0.0

    @field_validator("quantity", "total_price", mode="before")
    @classmethod
    def _missing_numbers(cls, value, info):
        if value is None or value == "":
            return 1 if info.field_name == "quantity" else 0
        return value


class PosProduct(StoreRecord):
    name: Optional[str] = None
    category_id: Optional[str] = None
    price: float = 0.0


class PosCategory(StoreRecord):
    name: Optional[str] = None


class Guest(StoreRecord):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class Goal(StoreRecord):
    type: GoalType
    target: float = Field(gt=0)
    period: GoalPeriod
    month: int = Field(ge=0, le=11)     # 0 = January
    year: int = Field(ge=2000, le=2100)
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    created_by: Optional[str] = Field(None, alias="createdBy")


class ScheduledReport(StoreRecord):
    email: str
    frequency: ReportFrequency
    day_of_week: Optional[int] = Field(None, alias="dayOfWeek", ge=0, le=6)     # 0 = Sunday
    day_of_month: Optional[int] = Field(None, alias="dayOfMonth", ge=1, le=31)
    hour: int = Field(8, ge=0, le=23)
    enabled: bool = True
    report_content: ReportContent = Field(ReportContent.FULL, alias="reportContent")
    last_sent: Optional[datetime] = Field(None, alias="lastSent")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    created_by: Optional[str] = Field(None, alias="createdBy")


class AuditLogEntry(StoreRecord):
    action: str
    category: str
    description: str = ""
    user_id: Optional[str] = Field(None, alias="userId")
    user_name: Optional[str] = Field(None, alias="userName")
    user_email: Optional[str] = Field(None, alias="userEmail")
    user_role: Optional[str] = Field(None, alias="userRole")
    timestamp: datetime
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _missing_metadata(cls, value):
        return value or {}


T = TypeVar("T", bound=StoreRecord)


def decode_collection(raw: Optional[Dict[str, Any]], model: Type[T], collection: str) -> Tuple[List[T], int]:
    """
    Decode a raw collection node into typed records.

    Args:
        raw: Map of record id -> raw record, as returned by the database
        model: Record model to validate against
        collection: Collection name, used for logging

    Returns:
        Tuple of (decoded records, number of skipped malformed records)
    """
    records = []
    skipped = 0

    for record_id, value in (raw or {}).items():
        if not isinstance(value, dict):
            skipped += 1
            continue
        try:
            records.append(model.model_validate({**value, "id": str(record_id)}))
        except ValidationError as e:
            skipped += 1
            logger.debug(f"Skipping malformed {collection} record {record_id}: {e.error_count()} errors")

    if skipped:
        logger.warning(f"Skipped {skipped} malformed {collection} records")

    return records, skipped
