# app/queue/memory_store.py
"""In-process ticket store with simulated latency and flaky assignment."""
import asyncio
import logging
import random
import uuid
from datetime import datetime, timezone

import pydantic

from app.core.config import Settings, get_settings
from app.queue.errors import ConflictError, NotFoundError, TransientError, ValidationError
from app.ticket.schemas import (
    AssignResult,
    Priority,
    ResolveResult,
    TicketCreate,
    TicketOut,
    TicketStatus,
)
from app.ticket.seed import demo_tickets

logger = logging.getLogger(__name__)


class InMemoryTicketStore:
    def __init__(
        self,
        tickets: list[TicketOut] | None = None,
        failure_rate: float = 0.1,
        latency_ms: tuple[int, int] = (0, 0),
        rng: random.Random | None = None,
    ):
        self._tickets: list[TicketOut] = list(tickets or [])
        self.failure_rate = failure_rate
        self.latency_ms = latency_ms
        self._rng = rng or random.Random()

    @classmethod
    def with_demo_tickets(cls, **kwargs) -> "InMemoryTicketStore":
        tickets = [
            TicketOut(id=str(uuid.uuid4()), created_at=created_at, **payload.model_dump())
            for payload, created_at in demo_tickets()
        ]
        return cls(tickets=tickets, **kwargs)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "InMemoryTicketStore":
        settings = settings or get_settings()
        kwargs = {
            "failure_rate": settings.ASSIGN_FAILURE_RATE,
            "latency_ms": (settings.STORE_LATENCY_MIN_MS, settings.STORE_LATENCY_MAX_MS),
        }
        if settings.SEED_DEMO_DATA:
            return cls.with_demo_tickets(**kwargs)
        return cls(**kwargs)

    async def _delay(self) -> None:
        low, high = self.latency_ms
        if high > 0:
            await asyncio.sleep(self._rng.randint(low, max(low, high)) / 1000)

    def _index(self, ticket_id: str) -> int:
        for i, ticket in enumerate(self._tickets):
            if ticket.id == ticket_id:
                return i
        raise NotFoundError()

    async def list_tickets(self) -> list[TicketOut]:
        await self._delay()
        return list(self._tickets)

    async def create_ticket(self, title: str, description: str, priority: Priority) -> TicketOut:
        await self._delay()
        try:
            payload = TicketCreate(title=title, description=description, priority=priority)
        except pydantic.ValidationError as e:
            raise ValidationError(e.errors()[0]["msg"]) from e
        ticket = TicketOut(
            id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
            **payload.model_dump(),
        )
        self._tickets.append(ticket)
        return ticket

    async def assign_ticket(self, ticket_id: str, agent_id: str) -> AssignResult:
        await self._delay()
        if self._rng.random() < self.failure_rate:
            logger.warning("Simulated assignment failure for ticket %s", ticket_id)
            raise TransientError("Assignment failed. Please try again.")
        i = self._index(ticket_id)
        if self._tickets[i].status != TicketStatus.OPEN:
            raise ConflictError("Ticket is not open")
        ticket = self._tickets[i].model_copy(
            update={"status": TicketStatus.ASSIGNED, "assignee": agent_id}
        )
        self._tickets[i] = ticket
        return AssignResult(id=ticket.id, status=ticket.status, assignee=ticket.assignee)

    async def resolve_ticket(self, ticket_id: str) -> ResolveResult:
        await self._delay()
        i = self._index(ticket_id)
        if self._tickets[i].status != TicketStatus.ASSIGNED:
            raise ConflictError("Ticket is not assigned")
        ticket = self._tickets[i].model_copy(update={"status": TicketStatus.RESOLVED})
        self._tickets[i] = ticket
        return ResolveResult(id=ticket.id, status=ticket.status)
