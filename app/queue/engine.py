# app/queue/engine.py
"""Queue ordering rules.

VIP tickets are always served before Regular tickets, and within a priority
class the oldest ticket is served first. Everything here is a pure function of
its input.
"""
from typing import Iterable

from app.ticket.schemas import Priority, TicketOut, TicketStatus


def _sort_key(ticket: TicketOut) -> tuple[int, object]:
    return (0 if ticket.priority == Priority.VIP else 1, ticket.created_at)


def order(tickets: Iterable[TicketOut]) -> list[TicketOut]:
    """Return tickets VIP first, then by ascending ``created_at``.

    ``sorted`` is stable, so tickets with the same ``created_at`` keep the
    order they were given in.
    """
    return sorted(tickets, key=_sort_key)


def next_eligible(tickets: Iterable[TicketOut]) -> TicketOut | None:
    """First Open ticket in queue order, or ``None`` when nothing is open."""
    for ticket in order(tickets):
        if ticket.status == TicketStatus.OPEN:
            return ticket
    return None


def view(tickets: Iterable[TicketOut], status: TicketStatus | None = None) -> list[TicketOut]:
    if status is None:
        return order(tickets)
    return order(t for t in tickets if t.status == status)


def count_by_status(tickets: Iterable[TicketOut]) -> dict[str, int]:
    counts = {"all": 0, "open": 0, "assigned": 0, "resolved": 0}
    for ticket in tickets:
        counts["all"] += 1
        counts[ticket.status.value.lower()] += 1
    return counts
