"""
Offline console demo: replays scripted receptionist calls without any API keys.

Each scenario is a scripted call. The caller's lines are printed, and the
tool the model would call is run for real through the ``ToolDispatcher``
against the mock customer directory. No LLM, no LiveKit, no network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario claim
    python console_demo.py --scenario after_hours
"""

import argparse
import asyncio
import sys
from datetime import datetime, timezone
from typing import Any, Callable, NamedTuple, Optional

from receptionist.config import settings
from receptionist.conversation.session_store import SessionStore
from receptionist.directory.client import CustomerDirectoryClient
from receptionist.directory.config import DirectoryConfig
from receptionist.logging_context import masked_json
from receptionist.tools.dispatcher import ToolDispatcher

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class Step(NamedTuple):
    caller: str
    tool: str
    arguments: dict[str, Any]


# Tuesday 10:30 AM and Saturday 8:00 PM Pacific.
OPEN_INSTANT = datetime(2025, 3, 18, 17, 30, tzinfo=timezone.utc)
CLOSED_INSTANT = datetime(2025, 3, 23, 3, 0, tzinfo=timezone.utc)

SCENARIOS: dict[str, tuple[datetime, list[Step]]] = {
    "returning_quote": (
        OPEN_INSTANT,
        [
            Step("Hi, this is John Smith, my number is 714-555-1234.",
                 "lookup_customer",
                 {"phone_number": "714-555-1234", "caller_name": "John Smith"}),
            Step("I'd like a quote for renters insurance too.",
                 "capture_quote_request",
                 {"caller_name": "John Smith", "phone_number": "+17145551234",
                  "insurance_types": ["renters"], "interested_in_bundle": True}),
            Step("Can I talk to Cherry about it?",
                 "warm_transfer",
                 {"agent_name": "Cherry", "caller_name": "John Smith",
                  "reason": "a renters quote"}),
            Step("That's all, thanks!", "end_call",
                 {"summary": "Returning client requested renters quote"}),
        ],
    ),
    "after_hours": (
        CLOSED_INSTANT,
        [
            Step("Are you open right now?", "check_office_hours", {}),
            Step("Could you have Bryce call me back? I'm Jane Doe, 949-555-0100.",
                 "take_message",
                 {"caller_name": "Jane Doe", "phone_number": "949-555-0100",
                  "message": "Question about adding a driver", "for_team_member": "Bryce",
                  "reason": "policy_service"}),
            Step("Thanks, bye.", "end_call", {"summary": "After-hours message for Bryce"}),
        ],
    ),
    "claim": (
        OPEN_INSTANT,
        [
            Step("My number is (714) 555-1234, I was just in a car accident.",
                 "lookup_customer", {"phone_number": "(714) 555-1234"}),
            Step("Nobody's hurt. I'd like to start a claim.",
                 "record_claim_inquiry",
                 {"caller_name": "John Smith", "phone_number": "+17145551234",
                  "description": "Rear-ended at a stop light, bumper damage",
                  "preferred_handling": "file_new_claim", "insurance_type": "auto",
                  "policy_number": "AUTO-123456"}),
            Step("Okay, thank you.", "end_call", {"summary": "Auto claim reported"}),
        ],
    ),
    "bad_input": (
        OPEN_INSTANT,
        [
            Step("My number is five five five.", "lookup_customer",
                 {"phone_number": "555"}),
            Step("Sorry, it's 714-555-9999.", "lookup_customer",
                 {"phone_number": "714-555-9999"}),
            Step("Just have someone call me, I'm Sam Lee.", "capture_call_notes",
                 {"caller_name": "Sam Lee", "phone_number": "714-555-9999",
                  "reason": "general_question", "details": "Wants a call back",
                  "urgency": "low"}),
        ],
    ),
}


def demo_directory() -> CustomerDirectoryClient:
    return CustomerDirectoryClient(
        config=DirectoryConfig(),
        enabled=True,
        use_mock_data=True,
        webhook_url="https://crm.example.com/lookup",
    )


class ConsoleSession:
    """Plays one scripted call through the tool layer."""

    def __init__(self, clock: Callable[[], datetime], verbose: bool = False) -> None:
        self.store = SessionStore()
        self.dispatcher = ToolDispatcher(self.store, demo_directory(), clock=clock)
        self.verbose = verbose

    def agent_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[{settings.agency.receptionist_name}]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    async def play(self, name: str, steps: list[Step]) -> None:
        session_id = f"console-{name}"
        agency = settings.agency

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  AGENCY RECEPTIONIST - Scenario: {name}{RESET}")
        print(f"{BOLD}  Agency: {agency.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

        self.agent_say(
            f"Thank you for calling {agency.name}, this is {agency.receptionist_name}. "
            "How can I help you today?"
        )

        for step in steps:
            print(f"\n{BLUE}[Caller] {RESET}{step.caller}")
            result = await self.dispatcher.dispatch(session_id, step.tool, step.arguments)
            colour = YELLOW if result.ok else RED
            self.system_log(f"{colour}{step.tool}{RESET}{DIM} ok={result.ok}")
            if self.verbose:
                self.system_log(masked_json(result.data))
            self.agent_say(result.message)

        state = await self.store.get(session_id)
        counts = state.counts() if state else {}
        await self.store.end_session(session_id)

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{name}' complete.{RESET}")
        print(f"{DIM}  Records: {counts}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Agency receptionist console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(SCENARIOS),
        help="Play a single scenario (default: all)",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Show masked tool payloads"
    )
    args = parser.parse_args(argv)

    names = [args.scenario] if args.scenario else list(SCENARIOS)
    for name in names:
        instant, steps = SCENARIOS[name]
        session = ConsoleSession(clock=lambda instant=instant: instant, verbose=args.verbose)
        asyncio.run(session.play(name, steps))
    return 0


if __name__ == "__main__":
    sys.exit(main())
