"""
Tool dispatch for the receptionist.

Every LLM-callable tool goes through ``ToolDispatcher.dispatch``:

1. Arguments are validated against the tool's pydantic model. Invalid
   input gets a polite re-ask and leaves session state untouched.
2. The handler runs against the calling session's state, records what the
   caller told us, and logs it with PII masked.
3. The handler returns a ``ToolResult``: a sentence for the voice layer
   plus a structured payload.

Any unexpected exception is logged with its traceback and turned into a
generic apology. Nothing a tool does can end a call.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping, Optional

from pydantic import ValidationError

from receptionist.config import settings
from receptionist.conversation.session_store import CallSessionState, SessionStore
from receptionist.directory.client import CustomerDirectoryClient
from receptionist.exceptions import ToolInputError, UnknownToolError
from receptionist.logging_context import get_call_logger, safe_log, set_session_id
from receptionist.schemas.call_schema import (
    CallNote,
    CallReason,
    ClaimHandling,
    MessageRequest,
    QuoteRequest,
    TransferRequest,
    Urgency,
)
from receptionist.schemas.customer_schema import (
    CollectedInfo,
    CustomerContext,
    DirectoryLookupRequest,
)
from receptionist.schemas.tool_schema import (
    CaptureCallNotesArgs,
    CaptureQuoteRequestArgs,
    CheckAgentAvailabilityArgs,
    CheckOfficeHoursArgs,
    EndCallArgs,
    LookupCustomerArgs,
    RecordClaimInquiryArgs,
    TakeMessageArgs,
    ToolArgs,
    ToolResult,
    WarmTransferArgs,
)
from receptionist.tools.customer import (
    first_name,
    format_policy_summary,
    policy_payload,
    spoken_list,
)
from receptionist.tools.team import get_member, next_contact
from receptionist.utils.office_hours import OfficeHoursResult, check_office_hours
from receptionist.utils.phone import validate_phone

logger = get_call_logger(__name__)

APOLOGY_MESSAGE = (
    "I'm so sorry, I ran into a problem on my end. "
    "Let me make sure someone from our team follows up with you."
)
END_CALL_MESSAGE = "Call concluded successfully."
PHONE_REASK_MESSAGE = (
    "I'm sorry, I didn't quite catch that number. "
    "Could you repeat your phone number for me, including the area code?"
)

# Tools that read session state but never create it.
READ_ONLY_TOOLS = frozenset({"end_call"})

CLAIM_RESPONSES: dict[ClaimHandling, str] = {
    ClaimHandling.FILE_NEW_CLAIM: (
        "I'm so sorry to hear that. I've noted the details, and one of our agents "
        "will reach out right away to help you start your claim. If anyone is hurt, "
        "please call 911 first."
    ),
    ClaimHandling.CHECK_CLAIM_STATUS: (
        "I've noted that you'd like an update on your claim. One of our agents will "
        "look into it and call you back as soon as possible."
    ),
    ClaimHandling.SPEAK_WITH_AGENT: (
        "Of course. I've marked this as urgent, and an agent will call you back as "
        "soon as possible to talk through your claim."
    ),
    ClaimHandling.CARRIER_CONTACT: (
        "For the fastest help, you can call your insurance carrier's claims line "
        "directly. The number is usually on your ID card or policy documents. "
        "I've also noted your call so one of our agents can follow up with you."
    ),
}

FOLLOW_UP_TIMING: dict[Urgency, str] = {
    Urgency.HIGH: "as soon as possible",
    Urgency.MEDIUM: "shortly",
    Urgency.LOW: "within one to two business days",
}

Handler = Callable[[CallSessionState, Any], Awaitable[ToolResult]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _nobody_available(agent_name: str) -> bool:
    # Real-time presence needs the phone system.
    return False


def _field_label(loc: tuple) -> str:
    top = str(loc[0]) if loc else "details"
    return top.replace("_", " ")


def _reask_message(labels: list[str]) -> str:
    if not labels:
        return "I'm sorry, I missed some of those details. Could you repeat them for me?"
    return (
        f"I'm sorry, I didn't quite get the {spoken_list(labels)}. "
        "Could you repeat that for me?"
    )


def _when(next_business_day: str) -> str:
    return next_business_day if next_business_day == "tomorrow" else f"on {next_business_day}"


class ToolDispatcher:
    """
    Runs named tools against per-call session state.

    The dispatcher holds no per-call data itself: everything a call records
    lives in the ``SessionStore`` under that call's session id.
    """

    def __init__(
        self,
        store: SessionStore,
        directory: CustomerDirectoryClient,
        clock: Optional[Callable[[], datetime]] = None,
        availability: Optional[Callable[[str], bool]] = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._clock = clock or _utcnow
        self._availability = availability or _nobody_available
        self._tools: dict[str, tuple[type[ToolArgs], Handler]] = {
            "lookup_customer": (LookupCustomerArgs, self._lookup_customer),
            "capture_quote_request": (CaptureQuoteRequestArgs, self._capture_quote_request),
            "check_office_hours": (CheckOfficeHoursArgs, self._check_office_hours),
            "check_agent_availability": (
                CheckAgentAvailabilityArgs, self._check_agent_availability,
            ),
            "warm_transfer": (WarmTransferArgs, self._warm_transfer),
            "take_message": (TakeMessageArgs, self._take_message),
            "record_claim_inquiry": (RecordClaimInquiryArgs, self._record_claim_inquiry),
            "capture_call_notes": (CaptureCallNotesArgs, self._capture_call_notes),
            "end_call": (EndCallArgs, self._end_call),
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    # ------------------------------------------------------------------ #
    # Dispatch boundary
    # ------------------------------------------------------------------ #

    async def dispatch(
        self,
        session_id: str,
        tool_name: str,
        arguments: Optional[Mapping[str, Any]] = None,
    ) -> ToolResult:
        """Validate arguments and run a tool. Never raises."""
        set_session_id(session_id)
        try:
            if tool_name not in self._tools:
                raise UnknownToolError(f"Unknown tool '{tool_name}'")
            args_model, handler = self._tools[tool_name]

            try:
                args = args_model.model_validate(dict(arguments or {}))
            except ValidationError as exc:
                labels = list(dict.fromkeys(_field_label(e["loc"]) for e in exc.errors()))
                raise ToolInputError(_reask_message(labels), labels) from None

            if tool_name in READ_ONLY_TOOLS:
                state = await self._store.get(session_id)
            else:
                state = await self._store.get_or_create(session_id)
            return await handler(state, args)
        except ToolInputError as exc:
            logger.info("Tool %s rejected input: %s", tool_name, exc.fields)
            return ToolResult(
                exc.message, {"error": exc.code, "fields": exc.fields}, ok=False
            )
        except Exception as exc:
            logger.exception("Tool %s failed in session %s", tool_name, session_id)
            code = getattr(exc, "code", "INTERNAL_ERROR")
            return ToolResult(APOLOGY_MESSAGE, {"error": code}, ok=False)

    async def lookup_customer(self, session_id: str, **arguments: Any) -> ToolResult:
        return await self.dispatch(session_id, "lookup_customer", arguments)

    async def capture_quote_request(self, session_id: str, **arguments: Any) -> ToolResult:
        return await self.dispatch(session_id, "capture_quote_request", arguments)

    async def check_office_hours(self, session_id: str) -> ToolResult:
        return await self.dispatch(session_id, "check_office_hours", {})

    async def check_agent_availability(self, session_id: str, **arguments: Any) -> ToolResult:
        return await self.dispatch(session_id, "check_agent_availability", arguments)

    async def warm_transfer(self, session_id: str, **arguments: Any) -> ToolResult:
        return await self.dispatch(session_id, "warm_transfer", arguments)

    async def take_message(self, session_id: str, **arguments: Any) -> ToolResult:
        return await self.dispatch(session_id, "take_message", arguments)

    async def record_claim_inquiry(self, session_id: str, **arguments: Any) -> ToolResult:
        return await self.dispatch(session_id, "record_claim_inquiry", arguments)

    async def capture_call_notes(self, session_id: str, **arguments: Any) -> ToolResult:
        return await self.dispatch(session_id, "capture_call_notes", arguments)

    async def end_call(self, session_id: str, **arguments: Any) -> ToolResult:
        return await self.dispatch(session_id, "end_call", arguments)

    # ------------------------------------------------------------------ #
    # Handlers
    # ------------------------------------------------------------------ #

    def _office_hours(self) -> OfficeHoursResult:
        agency = settings.agency
        return check_office_hours(
            self._clock(),
            tz=agency.timezone,
            open_hour=agency.open_hour,
            close_hour=agency.close_hour,
        )

    async def _lookup_customer(
        self, state: CallSessionState, args: LookupCustomerArgs
    ) -> ToolResult:
        phone = validate_phone(args.phone_number)
        if not phone.is_valid:
            logger.info("Lookup rejected phone number: %s", phone.error)
            raise ToolInputError(PHONE_REASK_MESSAGE, ["phone number"])

        now = self._clock()
        request = DirectoryLookupRequest(
            phone_number=phone.normalized,
            caller_name=args.caller_name,
            address=args.address,
            zip_code=args.zip_code,
            timestamp=now.isoformat(),
            session_id=state.session_id,
        )
        response = await self._directory.lookup(request)
        found = response.found
        record = response.data if found else None

        previous = state.customer_context.collected_info
        collected = CollectedInfo(
            phone_number=phone.normalized,
            name=args.caller_name or previous.name,
            address=args.address or previous.address,
            zip_code=args.zip_code or previous.zip_code,
        )
        state.customer_context = CustomerContext(
            lookup_attempted=True,
            lookup_successful=found,
            customer=record,
            lookup_timestamp=now,
            collected_info=collected,
        )
        safe_log("Customer lookup:", state.customer_context, logger=logger)

        data: dict[str, Any] = {
            "found": found,
            "correlation_id": response.correlation_id,
        }
        if not response.success:
            data["error_code"] = response.error_code.value if response.error_code else None

        if record is None:
            return ToolResult(
                "I wasn't able to pull up an account with that number, but that's no "
                "problem at all. How can I help you today?",
                data,
            )

        name = first_name(record)
        greeting = f"Welcome back, {name}!" if name else "Welcome back!"
        message = f"{greeting} {format_policy_summary(record)}"
        if record.preferred_agent:
            message += f" Your agent on file is {record.preferred_agent}."
        data.update(
            customer_id=record.customer_id,
            policies=policy_payload(record),
            preferred_agent=record.preferred_agent,
            is_priority=bool(record.is_priority),
        )
        return ToolResult(message, data)

    async def _capture_quote_request(
        self, state: CallSessionState, args: CaptureQuoteRequestArgs
    ) -> ToolResult:
        quote = state.add_quote_request(
            QuoteRequest(timestamp=self._clock(), **args.model_dump())
        )
        safe_log("Quote request captured:", quote, logger=logger)

        kinds = spoken_list(t.value.replace("_", " ") for t in quote.insurance_types)
        message = f"Wonderful! I've noted that you're looking for {kinds} insurance."
        if quote.interested_in_bundle:
            message += " We'll look at bundling options for you too."
        if quote.callback_preferred:
            when = f" {quote.callback_time}" if quote.callback_time else " shortly"
            message += (
                f" One of our agents will call you back{when} to go over a personalized "
                "quote. They'll shop multiple carriers to find you the best coverage."
            )
        else:
            channel = {"phone": "phone", "text": "text message", "email": "email"}
            message += (
                " One of our agents will put together a personalized quote and reach out "
                f"by {channel[quote.preferred_contact.value]}."
            )
        return ToolResult(
            message,
            {
                "insurance_types": [t.value for t in quote.insurance_types],
                "callback_preferred": quote.callback_preferred,
                "quote_count": len(state.quote_requests),
            },
        )

    async def _check_office_hours(
        self, state: CallSessionState, args: CheckOfficeHoursArgs
    ) -> ToolResult:
        result = self._office_hours()
        return ToolResult(result.message, asdict(result))

    async def _check_agent_availability(
        self, state: CallSessionState, args: CheckAgentAvailabilityArgs
    ) -> ToolResult:
        member = get_member(args.agent_name)
        available = bool(self._availability(member.name))
        logger.info("Availability check for %s: %s", member.name, available)
        if available:
            message = f"{member.name} is available. I can let {member.name} know you're on the line."
        else:
            message = (
                f"{member.name} isn't able to take a call right now. I'd be happy to take "
                f"a message so {member.name} can call you back."
            )
        data: dict[str, Any] = {
            "agent": member.name,
            "role": member.role.value,
            "available": available,
        }
        if not available:
            data["next_contact"] = next_contact("general", exhausted=[member.name])
        return ToolResult(message, data)

    async def _warm_transfer(
        self, state: CallSessionState, args: WarmTransferArgs
    ) -> ToolResult:
        member = get_member(args.agent_name)
        announcement = (
            f"Hi {member.name}, I have {args.caller_name} on the line "
            f"regarding {args.reason}."
        )
        transfer = state.add_transfer_request(
            TransferRequest(
                timestamp=self._clock(),
                agent_name=member.name,
                caller_name=args.caller_name,
                reason=args.reason,
                announcement=announcement,
            )
        )
        context = state.customer_context
        safe_log(
            "Transfer requested:",
            {
                **transfer.model_dump(mode="json", exclude={"announcement"}),
                "phone": args.caller_phone or context.collected_info.phone_number,
                "customer_id": context.customer.customer_id if context.customer else None,
                "existing_client": context.lookup_successful,
            },
            logger=logger,
        )
        return ToolResult(
            f"I've let {member.name} know you'd like to talk about {args.reason}. "
            f"{member.name} is tied up at the moment, so I've asked for a call back "
            "as soon as possible.",
            {"pending": True, "agent": member.name, "announcement": announcement},
        )

    async def _take_message(
        self, state: CallSessionState, args: TakeMessageArgs
    ) -> ToolResult:
        message = state.add_message_request(
            MessageRequest(timestamp=self._clock(), **args.model_dump())
        )
        safe_log("Message taken:", message, logger=logger)

        hours = self._office_hours()
        if message.urgency == Urgency.HIGH and hours.is_open:
            window = "as soon as possible"
        elif hours.is_open:
            window = "later today or by the next business day"
        else:
            window = _when(hours.next_business_day)

        recipient = f" for {message.for_team_member}" if message.for_team_member else ""
        text = f"I've got your message{recipient}. You can expect a call back {window}."
        if message.callback_time:
            text += f" I've noted that {message.callback_time} works best for you."
        return ToolResult(
            text,
            {
                "for_team_member": message.for_team_member,
                "urgency": message.urgency.value,
                "callback_window": window,
            },
        )

    async def _record_claim_inquiry(
        self, state: CallSessionState, args: RecordClaimInquiryArgs
    ) -> ToolResult:
        context = state.customer_context
        details = f"Claim ({args.preferred_handling.value}): {args.description}"
        if args.policy_number:
            details += f" Policy: {args.policy_number}."
        note = state.add_call_note(
            CallNote(
                timestamp=self._clock(),
                caller_name=args.caller_name,
                phone_number=args.phone_number,
                email=args.email,
                reason=CallReason.CLAIM,
                insurance_type=args.insurance_type,
                details=details,
                urgency=Urgency.HIGH,
                existing_client=context.lookup_successful,
                customer_id=context.customer.customer_id if context.customer else None,
            )
        )
        safe_log("Claim inquiry recorded:", note, logger=logger)
        return ToolResult(
            CLAIM_RESPONSES[args.preferred_handling],
            {"preferred_handling": args.preferred_handling.value, "urgency": note.urgency.value},
        )

    async def _capture_call_notes(
        self, state: CallSessionState, args: CaptureCallNotesArgs
    ) -> ToolResult:
        context = state.customer_context
        requested = None if args.requested_agent == "none" else args.requested_agent
        note = state.add_call_note(
            CallNote(
                timestamp=self._clock(),
                caller_name=args.caller_name,
                phone_number=args.phone_number,
                email=args.email,
                reason=args.reason,
                insurance_type=args.insurance_type,
                details=args.details,
                urgency=args.urgency,
                requested_agent=requested,
                existing_client=context.lookup_successful,
                customer_id=context.customer.customer_id if context.customer else None,
            )
        )
        safe_log("Call note captured:", note, logger=logger)
        timing = FOLLOW_UP_TIMING[note.urgency]
        return ToolResult(
            f"Call notes saved successfully for {note.caller_name}. "
            f"An agent will follow up {timing}.",
            {"reason": note.reason.value, "urgency": note.urgency.value},
        )

    async def _end_call(
        self, state: Optional[CallSessionState], args: EndCallArgs
    ) -> ToolResult:
        counts = state.counts() if state is not None else {}
        safe_log(
            "Call ended:",
            {"summary": args.summary, **counts},
            logger=logger,
        )
        return ToolResult(END_CALL_MESSAGE, {"summary": args.summary})
