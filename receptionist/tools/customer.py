"""Voice-friendly phrasing of directory customer records."""

from typing import Iterable, Optional

from receptionist.schemas.customer_schema import CustomerRecord, Policy, PolicyStatus


def spoken_list(items: Iterable[str]) -> str:
    """``["auto", "home", "life"]`` -> ``"auto, home, and life"``."""
    words = [i for i in items if i]
    if not words:
        return ""
    if len(words) == 1:
        return words[0]
    if len(words) == 2:
        return f"{words[0]} and {words[1]}"
    return ", ".join(words[:-1]) + f", and {words[-1]}"


def first_name(record: CustomerRecord) -> Optional[str]:
    if record.first_name:
        return record.first_name
    if record.full_name:
        return record.full_name.split()[0]
    return None


def _describe_policy(policy: Policy) -> str:
    kind = policy.policy_type.value.replace("_", " ")
    article = "an" if kind[0] in "aeiou" else "a"
    text = f"{article} {kind} policy with {policy.carrier}"
    if policy.status != PolicyStatus.ACTIVE:
        text += f" that shows as {policy.status.value}"
    return text


def format_policy_summary(record: CustomerRecord) -> str:
    """One sentence describing the customer's policies, for reading aloud."""
    if not record.policies:
        return "I don't see any policies on file yet."
    return f"I see you have {spoken_list(_describe_policy(p) for p in record.policies)}."


def policy_payload(record: CustomerRecord) -> list[dict]:
    """Structured policy list handed back to the LLM alongside the spoken text."""
    return [
        {
            "policy_number": p.policy_number,
            "policy_type": p.policy_type.value,
            "carrier": p.carrier,
            "status": p.status.value,
            "expiration_date": p.expiration_date,
        }
        for p in record.policies
    ]
