"""
Receptionist agent: the single LiveKit agent that answers the phone.

Each function tool is a thin adapter: it forwards the LLM's arguments to
the shared ``ToolDispatcher`` under the current call's session id and hands
the dispatcher's sentence back to the voice pipeline. Validation, state and
error handling all live in the dispatcher.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from livekit.agents import Agent, RunContext, function_tool

from receptionist.logging_context import get_call_logger
from receptionist.prompts.system_prompts import (
    GREETING_INSTRUCTIONS,
    RECEPTIONIST_SYSTEM_PROMPT,
)
from receptionist.schemas.call_schema import (
    CallReason,
    ClaimHandling,
    ContactMethod,
    InsuranceType,
    MessageCategory,
    RequestedAgent,
    TeamMemberName,
    Urgency,
)
from receptionist.tools.dispatcher import ToolDispatcher

logger = get_call_logger(__name__)


@dataclass
class SessionUserData:
    """Stored on ``AgentSession.userdata``; ties tool calls to the call's session."""

    session_id: str


class ReceptionistAgent(Agent):
    """Answers calls for the agency and routes every tool through the dispatcher."""

    def __init__(self, dispatcher: ToolDispatcher) -> None:
        super().__init__(instructions=RECEPTIONIST_SYSTEM_PROMPT)
        self._dispatcher = dispatcher

    async def on_enter(self) -> None:
        self.session.generate_reply(instructions=GREETING_INSTRUCTIONS)

    async def _run(
        self, context: RunContext[SessionUserData], tool: str, **arguments: Any
    ) -> str:
        result = await self._dispatcher.dispatch(context.userdata.session_id, tool, arguments)
        return result.message

    @function_tool()
    async def lookup_customer(
        self,
        context: RunContext[SessionUserData],
        phone_number: str,
        caller_name: Optional[str] = None,
        address: Optional[str] = None,
        zip_code: Optional[str] = None,
    ) -> str:
        """Look up the caller in the customer directory by phone number.

        Use early in the call once you have their number. Returns whether they
        are an existing client and a short summary of their policies.
        """
        return await self._run(
            context,
            "lookup_customer",
            phone_number=phone_number,
            caller_name=caller_name,
            address=address,
            zip_code=zip_code,
        )

    @function_tool()
    async def capture_quote_request(
        self,
        context: RunContext[SessionUserData],
        caller_name: str,
        phone_number: str,
        insurance_types: list[InsuranceType],
        email: Optional[str] = None,
        vehicle_info: Optional[str] = None,
        address: Optional[str] = None,
        number_of_drivers: Optional[int] = None,
        owns_home: Optional[bool] = None,
        preferred_contact: ContactMethod = ContactMethod.PHONE,
        interested_in_bundle: bool = False,
        callback_preferred: bool = True,
        callback_time: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> str:
        """Save a new quote request once you have the caller's name, number,
        and the types of insurance they want quoted."""
        return await self._run(
            context,
            "capture_quote_request",
            caller_name=caller_name,
            phone_number=phone_number,
            insurance_types=insurance_types,
            email=email,
            vehicle_info=vehicle_info,
            address=address,
            number_of_drivers=number_of_drivers,
            owns_home=owns_home,
            preferred_contact=preferred_contact,
            interested_in_bundle=interested_in_bundle,
            callback_preferred=callback_preferred,
            callback_time=callback_time,
            notes=notes,
        )

    @function_tool()
    async def check_office_hours(
        self, context: RunContext[SessionUserData]
    ) -> Union[dict[str, Any], str]:
        """Check whether the office is open right now in its local time and when
        the next business day is."""
        result = await self._dispatcher.check_office_hours(context.userdata.session_id)
        return result.for_llm()

    @function_tool()
    async def check_agent_availability(
        self, context: RunContext[SessionUserData], agent_name: TeamMemberName
    ) -> str:
        """Check whether a specific team member can take a call right now."""
        return await self._run(context, "check_agent_availability", agent_name=agent_name)

    @function_tool()
    async def warm_transfer(
        self,
        context: RunContext[SessionUserData],
        agent_name: TeamMemberName,
        caller_name: str,
        reason: str,
        caller_phone: Optional[str] = None,
    ) -> str:
        """Ask a team member to take over the caller's request. The team member
        is notified and will call the caller back."""
        return await self._run(
            context,
            "warm_transfer",
            agent_name=agent_name,
            caller_name=caller_name,
            reason=reason,
            caller_phone=caller_phone,
        )

    @function_tool()
    async def take_message(
        self,
        context: RunContext[SessionUserData],
        caller_name: str,
        phone_number: str,
        message: str,
        urgency: Urgency = Urgency.MEDIUM,
        for_team_member: Optional[TeamMemberName] = None,
        callback_time: Optional[str] = None,
        reason: MessageCategory = MessageCategory.GENERAL,
    ) -> str:
        """Take a message for the team, or for a specific team member, to return."""
        return await self._run(
            context,
            "take_message",
            caller_name=caller_name,
            phone_number=phone_number,
            message=message,
            urgency=urgency,
            for_team_member=for_team_member,
            callback_time=callback_time,
            reason=reason,
        )

    @function_tool()
    async def record_claim_inquiry(
        self,
        context: RunContext[SessionUserData],
        caller_name: str,
        phone_number: str,
        description: str,
        preferred_handling: ClaimHandling,
        policy_number: Optional[str] = None,
        insurance_type: Optional[InsuranceType] = None,
        email: Optional[str] = None,
    ) -> str:
        """Record a claim-related call. Claims are always treated as high urgency."""
        return await self._run(
            context,
            "record_claim_inquiry",
            caller_name=caller_name,
            phone_number=phone_number,
            description=description,
            preferred_handling=preferred_handling,
            policy_number=policy_number,
            insurance_type=insurance_type,
            email=email,
        )

    @function_tool()
    async def capture_call_notes(
        self,
        context: RunContext[SessionUserData],
        caller_name: str,
        phone_number: str,
        reason: CallReason,
        details: str,
        urgency: Urgency,
        email: Optional[str] = None,
        insurance_type: Optional[InsuranceType] = None,
        requested_agent: Optional[RequestedAgent] = None,
    ) -> str:
        """Save caller details and the reason for their call for agent follow-up.

        Urgency is high for claims, expiring policies, or anything time-sensitive.
        """
        return await self._run(
            context,
            "capture_call_notes",
            caller_name=caller_name,
            phone_number=phone_number,
            reason=reason,
            details=details,
            urgency=urgency,
            email=email,
            insurance_type=insurance_type,
            requested_agent=requested_agent,
        )

    @function_tool()
    async def end_call(self, context: RunContext[SessionUserData], summary: str = "") -> str:
        """Use when the caller is done or the conversation has naturally concluded."""
        logger.info("Caller wrapping up")
        return await self._run(context, "end_call", summary=summary)
