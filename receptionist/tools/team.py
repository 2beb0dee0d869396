"""
Agency team roster and call routing order.

Static configuration: nothing here changes at runtime. The president is the
single last-resort contact and is only offered when the caller asks for
them by name or everyone else has been tried.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, get_args

from receptionist.schemas.call_schema import TeamMemberName

logger = logging.getLogger(__name__)


class TeamRole(str, Enum):
    SERVICE_QUOTES = "service_quotes"
    AGENT = "agent"
    PRESIDENT = "president"


@dataclass(frozen=True)
class TeamMember:
    name: str
    role: TeamRole
    title: str
    can_handle_quotes: bool
    can_handle_claims: bool
    is_agent: bool
    is_last_resort: bool = False


TEAM_MEMBERS: tuple[TeamMember, ...] = (
    TeamMember("Melissa", TeamRole.SERVICE_QUOTES, "Customer Service and Quotes",
               can_handle_quotes=True, can_handle_claims=False, is_agent=False),
    TeamMember("Riley", TeamRole.SERVICE_QUOTES, "Customer Service and Quotes",
               can_handle_quotes=True, can_handle_claims=False, is_agent=False),
    TeamMember("Cherry", TeamRole.AGENT, "Agent and Customer Service",
               can_handle_quotes=True, can_handle_claims=True, is_agent=True),
    TeamMember("Bryce", TeamRole.AGENT, "Agent",
               can_handle_quotes=True, can_handle_claims=True, is_agent=True),
    TeamMember("Glen", TeamRole.AGENT, "Agent",
               can_handle_quotes=True, can_handle_claims=True, is_agent=True),
    TeamMember("Eric", TeamRole.PRESIDENT, "President and Owner",
               can_handle_quotes=True, can_handle_claims=True, is_agent=True,
               is_last_resort=True),
)

TEAM_MEMBER_NAMES: tuple[str, ...] = tuple(m.name for m in TEAM_MEMBERS)

# Category -> ordered first-line contacts. The last-resort member never appears here.
ROUTING: dict[str, tuple[str, ...]] = {
    "general": ("Melissa", "Riley", "Cherry"),
    "quotes": ("Melissa", "Riley", "Cherry"),
    "agent_specific": ("Bryce", "Glen"),
    "claims": ("Cherry", "Bryce", "Glen"),
}


def validate_team(members: Iterable[TeamMember] = TEAM_MEMBERS) -> None:
    """Raise ValueError if the roster breaks the routing rules."""
    members = list(members)
    last_resort = [m.name for m in members if m.is_last_resort]
    if len(last_resort) != 1:
        raise ValueError(f"Exactly one last-resort team member required, got {last_resort}")

    names = {m.name for m in members}
    if names != set(get_args(TeamMemberName)):
        raise ValueError(f"Team roster {sorted(names)} does not match TeamMemberName")

    for category, order in ROUTING.items():
        unknown = [n for n in order if n not in names]
        if unknown:
            raise ValueError(f"Routing '{category}' references unknown members: {unknown}")
        if last_resort[0] in order:
            raise ValueError(f"Routing '{category}' must not list the last-resort member")


def get_member(name: str) -> Optional[TeamMember]:
    """Case-insensitive lookup by first name."""
    wanted = name.strip().lower()
    for member in TEAM_MEMBERS:
        if member.name.lower() == wanted:
            return member
    return None


def last_resort_member() -> TeamMember:
    return next(m for m in TEAM_MEMBERS if m.is_last_resort)


def routing_order(category: str, include_last_resort: bool = False) -> list[str]:
    """Ordered contacts for a routing category.

    Raises:
        KeyError: If the category is unknown.
    """
    if category not in ROUTING:
        raise KeyError(f"Unknown routing category '{category}'. Available: {list(ROUTING)}")
    order = list(ROUTING[category])
    if include_last_resort:
        order.append(last_resort_member().name)
    return order


def next_contact(
    category: str,
    exhausted: Iterable[str] = (),
    requested: Optional[str] = None,
) -> Optional[str]:
    """Pick who to try next.

    An explicitly requested member always wins. Otherwise the category's
    contacts are tried in order, then any remaining non-last-resort member,
    and the last-resort member only once everyone else is exhausted.
    """
    if requested:
        member = get_member(requested)
        if member:
            return member.name

    tried = {n.lower() for n in exhausted}
    fallback = [m.name for m in TEAM_MEMBERS if not m.is_last_resort]
    for name in routing_order(category) + fallback:
        if name.lower() not in tried:
            return name

    final = last_resort_member().name
    if final.lower() not in tried:
        logger.info("Routing '%s' escalated to last resort: %s", category, final)
        return final
    return None


validate_team()
