# app/queue/store.py
from typing import Protocol

from app.ticket.schemas import AssignResult, Priority, ResolveResult, TicketOut


class TicketStore(Protocol):
    """Where tickets live. Any call may raise a ``StoreError``."""

    async def list_tickets(self) -> list[TicketOut]: ...

    async def create_ticket(self, title: str, description: str, priority: Priority) -> TicketOut: ...

    async def assign_ticket(self, ticket_id: str, agent_id: str) -> AssignResult: ...

    async def resolve_ticket(self, ticket_id: str) -> ResolveResult: ...
