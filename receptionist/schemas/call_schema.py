"""Records captured during a call: notes, quote requests, messages, transfers."""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

TeamMemberName = Literal["Eric", "Cherry", "Bryce", "Glen", "Melissa", "Riley"]
RequestedAgent = Literal[TeamMemberName, "none"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CallReason(str, Enum):
    NEW_QUOTE = "new_quote"
    POLICY_SERVICE = "policy_service"
    CLAIM = "claim"
    PAYMENT = "payment"
    GENERAL_QUESTION = "general_question"
    OTHER = "other"


class InsuranceType(str, Enum):
    AUTO = "auto"
    HOME = "home"
    BUSINESS = "business"
    LIFE = "life"
    RENTERS = "renters"
    FLOOD = "flood"
    SPECIALTY = "specialty"
    UMBRELLA = "umbrella"
    COMMERCIAL_AUTO = "commercial_auto"
    UNKNOWN = "unknown"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ContactMethod(str, Enum):
    PHONE = "phone"
    TEXT = "text"
    EMAIL = "email"


class MessageCategory(str, Enum):
    QUOTE = "quote"
    POLICY_SERVICE = "policy_service"
    CLAIM = "claim"
    BILLING = "billing"
    GENERAL = "general"


class ClaimHandling(str, Enum):
    """How the caller would like their claim handled."""

    FILE_NEW_CLAIM = "file_new_claim"
    CHECK_CLAIM_STATUS = "check_claim_status"
    SPEAK_WITH_AGENT = "speak_with_agent"
    CARRIER_CONTACT = "carrier_contact"


class CallNote(BaseModel):
    """Outcome of one customer interaction, appended for agent follow-up."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=_utcnow)
    caller_name: str
    phone_number: str
    email: Optional[str] = None
    reason: CallReason
    insurance_type: Optional[InsuranceType] = None
    details: str
    urgency: Urgency
    requested_agent: Optional[TeamMemberName] = None
    existing_client: bool = False
    customer_id: Optional[str] = None


class QuoteRequest(BaseModel):
    """A caller's request for a new insurance quote."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=_utcnow)
    caller_name: str
    phone_number: str
    email: Optional[str] = None
    insurance_types: list[InsuranceType] = Field(min_length=1)
    vehicle_info: Optional[str] = None
    address: Optional[str] = None
    number_of_drivers: Optional[int] = Field(default=None, ge=0)
    owns_home: Optional[bool] = None
    preferred_contact: ContactMethod = ContactMethod.PHONE
    interested_in_bundle: bool = False
    callback_preferred: bool = True
    callback_time: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("insurance_types")
    @classmethod
    def _dedupe_types(cls, value: list[InsuranceType]) -> list[InsuranceType]:
        return list(dict.fromkeys(value))


class MessageRequest(BaseModel):
    """A message left for a team member to return."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=_utcnow)
    caller_name: str
    phone_number: str
    for_team_member: Optional[TeamMemberName] = None
    message: str
    urgency: Urgency
    callback_time: Optional[str] = None
    reason: MessageCategory = MessageCategory.GENERAL


class TransferRequest(BaseModel):
    """A warm-transfer intent. No call is actually transferred."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=_utcnow)
    agent_name: TeamMemberName
    caller_name: str
    reason: str
    announcement: str
