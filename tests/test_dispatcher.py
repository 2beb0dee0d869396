"""Tests for tool dispatch: validation, per-session recording, failure handling."""

import logging

import pytest

from receptionist.directory.backends import CustomerDirectory
from receptionist.exceptions import DirectoryServerError
from receptionist.logging_context import get_session_id
from receptionist.schemas.call_schema import (
    CallReason,
    ClaimHandling,
    ContactMethod,
    InsuranceType,
    MessageCategory,
    Urgency,
)
from receptionist.tools.dispatcher import (
    APOLOGY_MESSAGE,
    CLAIM_RESPONSES,
    END_CALL_MESSAGE,
    PHONE_REASK_MESSAGE,
    ToolDispatcher,
)
from receptionist.utils.office_hours import check_office_hours
from tests.conftest import (
    MOCK_PHONE,
    WEEKEND_NOW,
    make_directory,
    make_dispatcher,
    pacific,
)

SESSION = "room-test"


class BrokenDirectory(CustomerDirectory):
    async def lookup(self, request, correlation_id=None):
        raise DirectoryServerError("CRM returned 502")


class ExplodingStore:
    async def get_or_create(self, session_id):
        raise RuntimeError("store unavailable")

    async def get(self, session_id):
        raise RuntimeError("store unavailable")


def broken_clock():
    raise RuntimeError("clock unavailable")


def quote_args(**overrides):
    args = {
        "caller_name": "Jane Doe",
        "phone_number": "949-555-0100",
        "insurance_types": ["auto", "home"],
    }
    args.update(overrides)
    return args


class TestDispatchBoundary:
    def test_registered_tools(self, dispatcher):
        assert set(dispatcher.tool_names) == {
            "lookup_customer",
            "capture_quote_request",
            "check_office_hours",
            "check_agent_availability",
            "warm_transfer",
            "take_message",
            "record_claim_inquiry",
            "capture_call_notes",
            "end_call",
        }

    @pytest.mark.asyncio
    async def test_unknown_tool_apologizes(self, dispatcher, session_store):
        result = await dispatcher.dispatch(SESSION, "book_flight", {})
        assert not result.ok
        assert result.message == APOLOGY_MESSAGE
        assert result.data == {"error": "UNKNOWN_TOOL"}
        assert SESSION not in session_store

    @pytest.mark.asyncio
    async def test_invalid_arguments_leave_no_state(self, dispatcher, session_store):
        result = await dispatcher.capture_quote_request(
            SESSION, caller_name="Jane Doe", phone_number="949-555-0100", insurance_types=[]
        )
        assert not result.ok
        assert result.data["error"] == "INVALID_INPUT"
        assert result.data["fields"] == ["insurance types"]
        assert "insurance types" in result.message
        assert SESSION not in session_store

    @pytest.mark.asyncio
    async def test_invalid_enum_rejected(self, dispatcher, session_store):
        result = await dispatcher.capture_call_notes(
            SESSION,
            caller_name="Jane Doe",
            phone_number="949-555-0100",
            reason="complaint",
            details="Unhappy",
            urgency="extreme",
        )
        assert not result.ok
        assert set(result.data["fields"]) == {"reason", "urgency"}
        assert SESSION not in session_store

    @pytest.mark.asyncio
    async def test_blank_required_field_rejected(self, dispatcher):
        result = await dispatcher.take_message(
            SESSION, caller_name="   ", phone_number="949-555-0100", message="Call me"
        )
        assert not result.ok
        assert result.data["fields"] == ["caller name"]

    @pytest.mark.asyncio
    async def test_unknown_team_member_rejected(self, dispatcher):
        result = await dispatcher.check_agent_availability(SESSION, agent_name="Bob")
        assert not result.ok
        assert result.data["fields"] == ["agent name"]

    @pytest.mark.asyncio
    async def test_extra_arguments_ignored(self, dispatcher):
        result = await dispatcher.end_call(SESSION, summary="Done", mood="cheerful")
        assert result.ok

    @pytest.mark.asyncio
    async def test_internal_failure_apologizes(self, directory, caplog):
        dispatcher = make_dispatcher(store=ExplodingStore(), directory=directory)
        with caplog.at_level(logging.ERROR):
            result = await dispatcher.end_call(SESSION)
        assert not result.ok
        assert result.message == APOLOGY_MESSAGE
        assert result.data == {"error": "INTERNAL_ERROR"}
        assert "store unavailable" in caplog.text

    @pytest.mark.asyncio
    async def test_tool_results_stringify_to_message(self, dispatcher):
        result = await dispatcher.end_call(SESSION)
        assert str(result) == END_CALL_MESSAGE

    @pytest.mark.asyncio
    async def test_dispatch_tags_logs_with_session(self, dispatcher):
        await dispatcher.end_call("room-tagged")
        assert get_session_id() == "room-tagged"


class TestLookupCustomer:
    @pytest.mark.asyncio
    async def test_existing_customer(self, dispatcher, session_store):
        result = await dispatcher.lookup_customer(
            SESSION, phone_number="(714) 555-1234", caller_name="John Smith"
        )
        assert result.ok
        assert result.message.startswith("Welcome back, John!")
        assert "an auto policy with Progressive and a home policy with State Farm" in result.message
        assert result.message.endswith("Your agent on file is Cherry.")
        assert result.data["found"] is True
        assert result.data["customer_id"] == "MOCK-001"
        assert result.data["preferred_agent"] == "Cherry"
        assert result.data["correlation_id"].startswith("dir-")
        assert [p["policy_number"] for p in result.data["policies"]] == [
            "AUTO-123456",
            "HOME-789012",
        ]

        context = (await session_store.get(SESSION)).customer_context
        assert context.lookup_attempted
        assert context.lookup_successful
        assert context.customer.customer_id == "MOCK-001"
        assert context.collected_info.phone_number == MOCK_PHONE
        assert context.collected_info.name == "John Smith"
        assert context.lookup_timestamp is not None

    @pytest.mark.asyncio
    async def test_not_found(self, dispatcher, session_store):
        result = await dispatcher.lookup_customer(SESSION, phone_number="949-555-0100")
        assert result.ok
        assert result.data["found"] is False
        assert "wasn't able to pull up an account" in result.message

        context = (await session_store.get(SESSION)).customer_context
        assert context.lookup_attempted
        assert not context.lookup_successful
        assert context.customer is None
        assert context.collected_info.phone_number == "+19495550100"

    @pytest.mark.asyncio
    async def test_invalid_phone_reasks_without_state_change(self, dispatcher, session_store):
        await dispatcher.lookup_customer(SESSION, phone_number="714-555-1234")
        before = (await session_store.get(SESSION)).customer_context

        result = await dispatcher.lookup_customer(SESSION, phone_number="555-12")
        assert not result.ok
        assert result.message == PHONE_REASK_MESSAGE
        assert result.data["fields"] == ["phone number"]
        assert (await session_store.get(SESSION)).customer_context is before

    @pytest.mark.asyncio
    async def test_failing_directory_degrades_to_not_found(self, session_store):
        dispatcher = make_dispatcher(
            session_store, make_directory(backend=BrokenDirectory())
        )
        result = await dispatcher.lookup_customer(SESSION, phone_number="714-555-1234")
        assert result.ok
        assert result.data["found"] is False
        assert result.data["error_code"] == "SERVER_ERROR"
        context = (await session_store.get(SESSION)).customer_context
        assert context.lookup_attempted
        assert not context.lookup_successful

    @pytest.mark.asyncio
    async def test_disabled_directory_is_not_found(self, session_store):
        dispatcher = make_dispatcher(session_store, make_directory(enabled=False))
        result = await dispatcher.lookup_customer(SESSION, phone_number="714-555-1234")
        assert result.data["found"] is False
        assert "error_code" not in result.data

    @pytest.mark.asyncio
    async def test_later_lookup_keeps_earlier_details(self, dispatcher, session_store):
        await dispatcher.lookup_customer(
            SESSION, phone_number="949-555-0100", caller_name="Jane Doe", zip_code="92626"
        )
        await dispatcher.lookup_customer(SESSION, phone_number="714-555-1234")
        info = (await session_store.get(SESSION)).customer_context.collected_info
        assert info.phone_number == MOCK_PHONE
        assert info.name == "Jane Doe"
        assert info.zip_code == "92626"


class TestCaptureQuoteRequest:
    @pytest.mark.asyncio
    async def test_records_quote(self, dispatcher, session_store):
        result = await dispatcher.capture_quote_request(
            SESSION, **quote_args(interested_in_bundle=True, callback_time="after 3 PM")
        )
        assert result.ok
        assert result.message.startswith(
            "Wonderful! I've noted that you're looking for auto and home insurance."
        )
        assert "bundling" in result.message
        assert "after 3 PM" in result.message

        state = await session_store.get(SESSION)
        quote = state.quote_requests[0]
        assert quote.insurance_types == [InsuranceType.AUTO, InsuranceType.HOME]
        assert quote.preferred_contact == ContactMethod.PHONE
        assert quote.callback_preferred is True

    @pytest.mark.asyncio
    async def test_duplicate_types_collapsed(self, dispatcher, session_store):
        await dispatcher.capture_quote_request(
            SESSION, **quote_args(insurance_types=["auto", "auto", "renters"])
        )
        quote = (await session_store.get(SESSION)).quote_requests[0]
        assert quote.insurance_types == [InsuranceType.AUTO, InsuranceType.RENTERS]

    @pytest.mark.asyncio
    async def test_no_callback_uses_preferred_channel(self, dispatcher):
        result = await dispatcher.capture_quote_request(
            SESSION, **quote_args(callback_preferred=False, preferred_contact="email")
        )
        assert "reach out by email" in result.message

    @pytest.mark.asyncio
    async def test_negative_driver_count_rejected(self, dispatcher, session_store):
        result = await dispatcher.capture_quote_request(
            SESSION, **quote_args(number_of_drivers=-1)
        )
        assert not result.ok
        assert result.data["fields"] == ["number of drivers"]
        assert SESSION not in session_store

    @pytest.mark.asyncio
    async def test_multi_word_type_is_spoken(self, dispatcher):
        result = await dispatcher.capture_quote_request(
            SESSION, **quote_args(insurance_types=["commercial_auto"])
        )
        assert "commercial auto insurance" in result.message


class TestOfficeHoursAndAvailability:
    @pytest.mark.asyncio
    async def test_open(self, dispatcher):
        result = await dispatcher.check_office_hours(SESSION)
        assert result.data["is_open"] is True
        assert result.data["current_day"] == "Tuesday"
        assert "currently open" in result.message

    @pytest.mark.asyncio
    async def test_closed(self, after_hours_dispatcher):
        result = await after_hours_dispatcher.check_office_hours(SESSION)
        assert result.data["is_open"] is False
        assert result.data["next_business_day"] == "Monday"

    @pytest.mark.asyncio
    async def test_open_hands_structured_data_to_llm(self, dispatcher):
        result = await dispatcher.check_office_hours(SESSION)
        assert result.for_llm() == result.data
        assert result.for_llm()["message"] == result.message

    @pytest.mark.asyncio
    async def test_failure_hands_only_apology_to_llm(self, session_store, directory):
        dispatcher = ToolDispatcher(session_store, directory, clock=broken_clock)
        result = await dispatcher.check_office_hours(SESSION)
        assert not result.ok
        assert result.data == {"error": "INTERNAL_ERROR"}
        assert result.for_llm() == APOLOGY_MESSAGE

    @pytest.mark.asyncio
    async def test_agent_availability_reports_unavailable(self, dispatcher):
        result = await dispatcher.check_agent_availability(SESSION, agent_name="Bryce")
        assert result.ok
        assert result.data == {
            "agent": "Bryce",
            "role": "agent",
            "available": False,
            "next_contact": "Melissa",
        }
        assert "take a message" in result.message

    @pytest.mark.asyncio
    async def test_injected_availability_checker(self, session_store, directory):
        dispatcher = ToolDispatcher(
            session_store, directory, availability=lambda name: name == "Glen"
        )
        glen = await dispatcher.check_agent_availability(SESSION, agent_name="Glen")
        bryce = await dispatcher.check_agent_availability(SESSION, agent_name="Bryce")
        assert glen.data["available"] is True
        assert "Glen is available" in glen.message
        assert bryce.data["available"] is False
        assert "next_contact" not in glen.data


class TestWarmTransfer:
    @pytest.mark.asyncio
    async def test_records_pending_transfer(self, dispatcher, session_store):
        result = await dispatcher.warm_transfer(
            SESSION, agent_name="Cherry", caller_name="John Smith", reason="a new car"
        )
        assert result.ok
        assert result.data["pending"] is True
        assert result.data["announcement"] == (
            "Hi Cherry, I have John Smith on the line regarding a new car."
        )
        transfer = (await session_store.get(SESSION)).transfer_requests[0]
        assert transfer.agent_name == "Cherry"

    @pytest.mark.asyncio
    async def test_transfer_log_is_masked(self, dispatcher, caplog):
        with caplog.at_level(logging.INFO):
            await dispatcher.warm_transfer(
                SESSION,
                agent_name="Glen",
                caller_name="John Smith",
                reason="billing",
                caller_phone="714-555-1234",
            )
        assert "714-555-1234" not in caplog.text
        assert "(***) ***-1234" in caplog.text


class TestTakeMessage:
    @pytest.mark.asyncio
    async def test_during_hours(self, dispatcher, session_store):
        result = await dispatcher.take_message(
            SESSION,
            caller_name="Jane Doe",
            phone_number="949-555-0100",
            message="Please call about my renewal",
            for_team_member="Melissa",
            reason="policy_service",
        )
        assert result.ok
        assert result.message.startswith("I've got your message for Melissa.")
        assert result.data["callback_window"] == "later today or by the next business day"

        message = (await session_store.get(SESSION)).message_requests[0]
        assert message.urgency == Urgency.MEDIUM
        assert message.reason == MessageCategory.POLICY_SERVICE

    @pytest.mark.asyncio
    async def test_urgent_during_hours(self, dispatcher):
        result = await dispatcher.take_message(
            SESSION,
            caller_name="Jane Doe",
            phone_number="949-555-0100",
            message="Policy lapses tomorrow",
            urgency="high",
        )
        assert result.data["callback_window"] == "as soon as possible"

    @pytest.mark.asyncio
    async def test_after_hours(self, after_hours_dispatcher):
        result = await after_hours_dispatcher.take_message(
            SESSION,
            caller_name="Jane Doe",
            phone_number="949-555-0100",
            message="Call me back",
            callback_time="mornings",
        )
        assert result.data["callback_window"] == "on Monday"
        assert "on Monday" in result.message
        assert "mornings" in result.message

    @pytest.mark.asyncio
    async def test_weekday_evening_is_tomorrow(self, session_store, directory):
        dispatcher = make_dispatcher(session_store, directory, now=pacific(2025, 3, 18, 19))
        result = await dispatcher.take_message(
            SESSION, caller_name="Jane Doe", phone_number="949-555-0100", message="Hi"
        )
        assert result.data["callback_window"] == "tomorrow"


class TestRecordClaimInquiry:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("handling", list(ClaimHandling))
    async def test_each_handling_has_a_response(self, dispatcher, session_store, handling):
        result = await dispatcher.record_claim_inquiry(
            SESSION,
            caller_name="John Smith",
            phone_number="714-555-1234",
            description="Hail damage to roof",
            preferred_handling=handling.value,
        )
        assert result.ok
        assert result.message == CLAIM_RESPONSES[handling]
        note = (await session_store.get(SESSION)).call_notes[0]
        assert note.reason == CallReason.CLAIM
        assert note.urgency == Urgency.HIGH

    @pytest.mark.asyncio
    async def test_links_looked_up_customer(self, dispatcher, session_store):
        await dispatcher.lookup_customer(SESSION, phone_number="714-555-1234")
        await dispatcher.record_claim_inquiry(
            SESSION,
            caller_name="John Smith",
            phone_number="714-555-1234",
            description="Fender bender",
            preferred_handling="file_new_claim",
            policy_number="AUTO-123456",
        )
        note = (await session_store.get(SESSION)).call_notes[0]
        assert note.existing_client
        assert note.customer_id == "MOCK-001"
        assert "AUTO-123456" in note.details


class TestCaptureCallNotes:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "urgency,timing",
        [
            ("high", "as soon as possible"),
            ("medium", "shortly"),
            ("low", "within one to two business days"),
        ],
    )
    async def test_follow_up_timing(self, dispatcher, urgency, timing):
        result = await dispatcher.capture_call_notes(
            SESSION,
            caller_name="Jane Doe",
            phone_number="949-555-0100",
            reason="payment",
            details="Wants to change payment date",
            urgency=urgency,
        )
        assert result.message == (
            f"Call notes saved successfully for Jane Doe. An agent will follow up {timing}."
        )

    @pytest.mark.asyncio
    async def test_requested_agent_none_is_dropped(self, dispatcher, session_store):
        await dispatcher.capture_call_notes(
            SESSION,
            caller_name="Jane Doe",
            phone_number="949-555-0100",
            reason="other",
            details="General question",
            urgency="low",
            requested_agent="none",
        )
        note = (await session_store.get(SESSION)).call_notes[0]
        assert note.requested_agent is None
        assert not note.existing_client

    @pytest.mark.asyncio
    async def test_requested_agent_kept(self, dispatcher, session_store):
        await dispatcher.capture_call_notes(
            SESSION,
            caller_name="Jane Doe",
            phone_number="949-555-0100",
            reason="policy_service",
            details="Add a vehicle",
            urgency="medium",
            requested_agent="Eric",
            insurance_type="auto",
        )
        note = (await session_store.get(SESSION)).call_notes[0]
        assert note.requested_agent == "Eric"
        assert note.insurance_type == InsuranceType.AUTO


class TestEndCall:
    @pytest.mark.asyncio
    async def test_end_call(self, dispatcher, caplog):
        with caplog.at_level(logging.INFO):
            result = await dispatcher.end_call(SESSION, summary="Caller got a quote")
        assert result.ok
        assert result.message == END_CALL_MESSAGE
        assert result.data == {"summary": "Caller got a quote"}
        assert "Call ended:" in caplog.text

    @pytest.mark.asyncio
    async def test_end_call_does_not_remove_session(self, dispatcher, session_store):
        await dispatcher.capture_quote_request(SESSION, **quote_args())
        await dispatcher.end_call(SESSION)
        assert SESSION in session_store
        assert len((await session_store.get(SESSION)).quote_requests) == 1

    @pytest.mark.asyncio
    async def test_late_end_call_does_not_revive_session(self, dispatcher, session_store):
        await dispatcher.capture_quote_request(SESSION, **quote_args())
        await session_store.end_session(SESSION)

        result = await dispatcher.end_call(SESSION, summary="Caller hung up")
        assert result.ok
        assert result.message == END_CALL_MESSAGE
        assert SESSION not in session_store
        assert len(session_store) == 0

    @pytest.mark.asyncio
    async def test_other_tools_still_create_sessions(self, dispatcher, session_store):
        await dispatcher.check_office_hours(SESSION)
        assert SESSION in session_store


class TestSessionIsolation:
    @pytest.mark.asyncio
    async def test_calls_do_not_see_each_other(self, dispatcher, session_store):
        await dispatcher.lookup_customer("room-a", phone_number="714-555-1234")
        await dispatcher.capture_quote_request("room-a", **quote_args())
        await dispatcher.take_message(
            "room-b", caller_name="Sam Lee", phone_number="208-555-0199", message="Hi"
        )

        a = await session_store.get("room-a")
        b = await session_store.get("room-b")
        assert len(a.quote_requests) == 1 and a.message_requests == []
        assert b.quote_requests == [] and len(b.message_requests) == 1
        assert a.customer_context.lookup_successful
        assert not b.customer_context.lookup_attempted


class TestAfterHoursClock:
    def test_weekend_fixture_is_saturday(self):
        assert check_office_hours(WEEKEND_NOW).current_day == "Saturday"
