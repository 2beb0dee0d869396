"""Customer directory records, the lookup wire format, and per-call customer context."""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from receptionist.schemas.call_schema import TeamMemberName


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DirectoryErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    TIMEOUT = "TIMEOUT"
    AUTH_FAILED = "AUTH_FAILED"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"


class PolicyType(str, Enum):
    AUTO = "auto"
    HOME = "home"
    BUSINESS = "business"
    LIFE = "life"
    RENTERS = "renters"
    FLOOD = "flood"
    SPECIALTY = "specialty"
    OTHER = "other"


class PolicyStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Policy(WireModel):
    policy_number: str
    policy_type: PolicyType
    carrier: str
    effective_date: str
    expiration_date: str
    status: PolicyStatus
    premium: Optional[float] = None
    premium_frequency: Optional[Literal["monthly", "quarterly", "semi-annual", "annual"]] = None


class Address(WireModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class CustomerRecord(WireModel):
    """Customer record returned by the directory. Only ``found`` is always set."""

    found: bool
    customer_id: Optional[str] = None
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Address] = None
    policies: list[Policy] = Field(default_factory=list)
    preferred_agent: Optional[TeamMemberName] = None
    notes: Optional[str] = None
    is_priority: Optional[bool] = None


class DirectoryLookupRequest(WireModel):
    """Caller details sent to the directory."""

    phone_number: str
    caller_name: Optional[str] = None
    address: Optional[str] = None
    zip_code: Optional[str] = None
    timestamp: str
    session_id: str


class DirectoryLookupResponse(WireModel):
    success: bool
    error: Optional[str] = None
    error_code: Optional[DirectoryErrorCode] = None
    data: Optional[CustomerRecord] = None
    response_timestamp: str
    correlation_id: str

    @property
    def found(self) -> bool:
        return self.success and self.data is not None and self.data.found


class CollectedInfo(BaseModel):
    """What the caller told us about themselves during the call."""

    phone_number: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    zip_code: Optional[str] = None


class CustomerContext(BaseModel):
    """Directory lookup state for one call. Written only by the lookup tool."""

    lookup_attempted: bool = False
    lookup_successful: bool = False
    customer: Optional[CustomerRecord] = None
    lookup_timestamp: Optional[datetime] = None
    collected_info: CollectedInfo = Field(default_factory=CollectedInfo)
