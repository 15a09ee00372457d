# app/queue/controller.py
"""Queue controller: the single writer of the local ticket collection.

The collection only changes after the store confirms an operation. Assign and
resolve share one in-flight slot, so while any ticket's action is outstanding
no other assign or resolve may start.
"""
import logging
from typing import NamedTuple

from app.core.config import get_settings
from app.queue import engine
from app.queue.errors import ConflictError, EligibilityError, GuardError, QueueError
from app.queue.notifier import LoggingNotifier, ResultNotifier
from app.queue.state import (
    ActionEnd,
    ActionStart,
    AssignSuccess,
    ClearError,
    CreateError,
    CreateStart,
    CreateSuccess,
    FetchError,
    FetchStart,
    FetchSuccess,
    QueueState,
    ResolveSuccess,
    SetError,
    SetFilter,
    reduce,
)
from app.queue.store import TicketStore
from app.ticket.schemas import Priority, TicketOut, TicketStatus

logger = logging.getLogger(__name__)

CREATED = "Ticket created successfully!"
ASSIGNED = "Ticket assigned successfully!"
NEXT_ASSIGNED = "Next ticket assigned successfully!"
RESOLVED = "Ticket resolved successfully!"


class ActionResult(NamedTuple):
    ok: bool
    error: str | None = None


class QueueController:
    def __init__(
        self,
        store: TicketStore,
        agent_id: str | None = None,
        notifier: ResultNotifier | None = None,
    ):
        self._store = store
        self.agent_id = agent_id or get_settings().AGENT_ID
        self._notifier = notifier or LoggingNotifier()
        self._state = QueueState()

    # -- reads ---------------------------------------------------------------

    @property
    def state(self) -> QueueState:
        return self._state

    @property
    def tickets(self) -> list[TicketOut]:
        """Ordered view under the current filter, rebuilt on every read."""
        return engine.view(self._state.tickets, self._state.filter)

    @property
    def all_tickets(self) -> list[TicketOut]:
        return list(self._state.tickets)

    @property
    def active_ticket_id(self) -> str | None:
        return self._state.active_ticket_id

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def filter(self) -> TicketStatus | None:
        return self._state.filter

    @property
    def fetch_loading(self) -> bool:
        return self._state.fetch_loading

    @property
    def create_loading(self) -> bool:
        return self._state.create_loading

    @property
    def has_open_tickets(self) -> bool:
        return any(t.status == TicketStatus.OPEN for t in self._state.tickets)

    @property
    def counts(self) -> dict[str, int]:
        return engine.count_by_status(self._state.tickets)

    def next_eligible(self) -> TicketOut | None:
        return engine.next_eligible(self._state.tickets)

    # -- local-only updates ----------------------------------------------------

    def set_filter(self, status: TicketStatus | None) -> None:
        self._dispatch(SetFilter(status=status))

    def clear_error(self) -> None:
        self._dispatch(ClearError())

    # -- store-backed operations -----------------------------------------------

    async def refresh(self) -> ActionResult:
        self._dispatch(FetchStart())
        try:
            tickets = await self._store.list_tickets()
        except QueueError as e:
            message = str(e) or "Failed to fetch tickets"
            logger.warning("Fetching tickets failed: %s", message)
            self._dispatch(FetchError(message=message))
            self._notifier.error(message)
            return ActionResult(False, message)
        self._dispatch(FetchSuccess(tickets=tuple(tickets)))
        logger.info("Loaded %d tickets", len(tickets))
        return ActionResult(True)

    async def create(self, title: str, description: str, priority: Priority) -> ActionResult:
        self._dispatch(CreateStart())
        try:
            ticket = await self._store.create_ticket(title, description, priority)
        except QueueError as e:
            message = str(e) or "Failed to create ticket"
            logger.warning("Creating ticket failed: %s", message)
            self._dispatch(CreateError(message=message))
            self._notifier.error(message)
            return ActionResult(False, message)
        self._dispatch(CreateSuccess(ticket=ticket))
        logger.info("Created ticket %s (%s)", ticket.id, ticket.priority.value)
        self._notifier.success(CREATED)
        return ActionResult(True)

    async def assign(self, ticket_id: str, agent_id: str | None = None) -> ActionResult:
        return await self._assign(ticket_id, agent_id or self.agent_id, ASSIGNED)

    async def assign_next(self, agent_id: str | None = None) -> ActionResult:
        # Not atomic with the store call: another agent may take the ticket
        # first, in which case the store rejects the assign and we report it.
        ticket = engine.next_eligible(self._state.tickets)
        if ticket is None:
            return self._report(EligibilityError())
        return await self._assign(ticket.id, agent_id or self.agent_id, NEXT_ASSIGNED)

    async def resolve(self, ticket_id: str) -> ActionResult:
        try:
            self._claim(ticket_id)
        except GuardError as e:
            return self._report(e)
        try:
            await self._store.resolve_ticket(ticket_id)
            self._dispatch(ResolveSuccess(ticket_id=ticket_id))
        except QueueError as e:
            return self._report(e, "Failed to resolve ticket")
        finally:
            self._dispatch(ActionEnd())
        logger.info("Resolved ticket %s", ticket_id)
        self._notifier.success(RESOLVED)
        return ActionResult(True)

    # -- internals ---------------------------------------------------------------

    def _dispatch(self, action) -> None:
        self._state = reduce(self._state, action)

    def _claim(self, ticket_id: str) -> None:
        # check and claim with no await in between
        if self._state.active_ticket_id is not None:
            raise GuardError()
        self._dispatch(ActionStart(ticket_id=ticket_id))

    def _report(self, err: QueueError, fallback: str | None = None) -> ActionResult:
        message = str(err) or fallback or err.default_message
        logger.warning("%s: %s", type(err).__name__, message)
        self._dispatch(SetError(message=message))
        self._notifier.error(message)
        return ActionResult(False, message)

    async def _assign(self, ticket_id: str, agent_id: str, success_message: str) -> ActionResult:
        try:
            self._claim(ticket_id)
        except GuardError as e:
            return self._report(e)
        try:
            result = await self._store.assign_ticket(ticket_id, agent_id)
            if result.assignee is not None and result.assignee != agent_id:
                raise ConflictError(f"Ticket {ticket_id} is already assigned to {result.assignee}")
            self._dispatch(AssignSuccess(ticket_id=ticket_id, assignee=agent_id))
        except QueueError as e:
            return self._report(e, "Assignment failed. Please try again.")
        finally:
            self._dispatch(ActionEnd())
        logger.info("Assigned ticket %s to %s", ticket_id, agent_id)
        self._notifier.success(success_message)
        return ActionResult(True)
