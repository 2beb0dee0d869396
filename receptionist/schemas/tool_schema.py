"""Argument models for the LLM-callable tools, plus the common tool result.

Arguments are validated against these models before a tool touches any
session state. Closed vocabularies are enums or team-member literals.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from receptionist.schemas.call_schema import (
    CallReason,
    ClaimHandling,
    ContactMethod,
    InsuranceType,
    MessageCategory,
    NonBlankStr,
    RequestedAgent,
    TeamMemberName,
    Urgency,
)


class ToolArgs(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class LookupCustomerArgs(ToolArgs):
    phone_number: NonBlankStr
    caller_name: Optional[str] = None
    address: Optional[str] = None
    zip_code: Optional[str] = None


class CaptureQuoteRequestArgs(ToolArgs):
    caller_name: NonBlankStr
    phone_number: NonBlankStr
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


class CheckOfficeHoursArgs(ToolArgs):
    pass


class CheckAgentAvailabilityArgs(ToolArgs):
    agent_name: TeamMemberName


class WarmTransferArgs(ToolArgs):
    agent_name: TeamMemberName
    caller_name: NonBlankStr
    reason: NonBlankStr
    caller_phone: Optional[str] = None


class TakeMessageArgs(ToolArgs):
    caller_name: NonBlankStr
    phone_number: NonBlankStr
    message: NonBlankStr
    for_team_member: Optional[TeamMemberName] = None
    urgency: Urgency = Urgency.MEDIUM
    callback_time: Optional[str] = None
    reason: MessageCategory = MessageCategory.GENERAL


class RecordClaimInquiryArgs(ToolArgs):
    caller_name: NonBlankStr
    phone_number: NonBlankStr
    description: NonBlankStr
    preferred_handling: ClaimHandling
    policy_number: Optional[str] = None
    insurance_type: Optional[InsuranceType] = None
    email: Optional[str] = None


class CaptureCallNotesArgs(ToolArgs):
    caller_name: NonBlankStr
    phone_number: NonBlankStr
    reason: CallReason
    details: NonBlankStr
    urgency: Urgency
    email: Optional[str] = None
    insurance_type: Optional[InsuranceType] = None
    requested_agent: Optional[RequestedAgent] = None


class EndCallArgs(ToolArgs):
    summary: str = ""


@dataclass(frozen=True)
class ToolResult:
    """What a tool hands back to the voice layer.

    ``message`` is spoken to the caller; ``data`` is the structured payload.
    """

    message: str
    data: dict[str, Any] = field(default_factory=dict)
    ok: bool = True

    def __str__(self) -> str:
        return self.message

    def for_llm(self) -> Union[dict[str, Any], str]:
        """Structured data on success; on failure only the caller-safe message."""
        if self.ok and self.data:
            return self.data
        return self.message
