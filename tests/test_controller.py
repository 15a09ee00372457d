# tests/test_controller.py
import asyncio

import pytest

from app.queue.controller import QueueController
from app.queue.errors import TransientError
from app.queue.memory_store import InMemoryTicketStore
from app.ticket.schemas import AssignResult, Priority, TicketStatus
from conftest import make_ticket

AGENT = "agent-1"


class RecordingNotifier:
    def __init__(self):
        self.successes = []
        self.errors = []

    def success(self, message):
        self.successes.append(message)

    def error(self, message):
        self.errors.append(message)


class GatedStore(InMemoryTicketStore):
    """Holds assign/resolve calls open until ``release`` is set."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("failure_rate", 0.0)
        super().__init__(*args, **kwargs)
        self.release = asyncio.Event()
        self.calls = []

    async def assign_ticket(self, ticket_id, agent_id):
        self.calls.append(("assign", ticket_id))
        await self.release.wait()
        return await super().assign_ticket(ticket_id, agent_id)

    async def resolve_ticket(self, ticket_id):
        self.calls.append(("resolve", ticket_id))
        await self.release.wait()
        return await super().resolve_ticket(ticket_id)


class BrokenStore(InMemoryTicketStore):
    async def list_tickets(self):
        raise TransientError()

    async def create_ticket(self, title, description, priority):
        raise TransientError("Failed to create ticket")

    async def resolve_ticket(self, ticket_id):
        raise TransientError("")


class StolenStore(InMemoryTicketStore):
    """Another agent grabbed the ticket between our read and our assign."""

    async def assign_ticket(self, ticket_id, agent_id):
        return AssignResult(id=ticket_id, status=TicketStatus.ASSIGNED, assignee="agent-2")


def seeded(store_cls=InMemoryTicketStore, **kwargs):
    tickets = [
        make_ticket("r-old", "2024-01-15T08:00:00Z", Priority.REGULAR),
        make_ticket("vip", "2024-01-15T10:00:00Z", Priority.VIP),
        make_ticket("r-new", "2024-01-15T09:00:00Z", Priority.REGULAR),
    ]
    kwargs.setdefault("failure_rate", 0.0)
    return store_cls(tickets=tickets, **kwargs)


async def loaded(store):
    notifier = RecordingNotifier()
    controller = QueueController(store, agent_id=AGENT, notifier=notifier)
    assert (await controller.refresh()).ok
    return controller, notifier


@pytest.mark.asyncio
async def test_refresh_loads_and_orders():
    controller, _ = await loaded(seeded())
    assert [t.id for t in controller.tickets] == ["vip", "r-old", "r-new"]
    assert [t.id for t in controller.all_tickets] == ["r-old", "vip", "r-new"]
    assert controller.counts == {"all": 3, "open": 3, "assigned": 0, "resolved": 0}
    assert controller.has_open_tickets
    assert not controller.fetch_loading


@pytest.mark.asyncio
async def test_refresh_failure_keeps_collection():
    store = BrokenStore(tickets=[make_ticket("1")])
    controller = QueueController(store, agent_id=AGENT, notifier=RecordingNotifier())

    result = await controller.refresh()
    assert not result.ok
    assert result.error == TransientError.default_message
    assert controller.all_tickets == []
    assert controller.error == result.error
    assert not controller.fetch_loading


@pytest.mark.asyncio
async def test_create_appends_ticket():
    controller, notifier = await loaded(InMemoryTicketStore(failure_rate=0.0))

    result = await controller.create("Printer on fire", "The third floor printer is on fire again.", Priority.VIP)
    assert result.ok and result.error is None
    [ticket] = controller.all_tickets
    assert ticket.status == TicketStatus.OPEN
    assert ticket.assignee is None
    assert notifier.successes == ["Ticket created successfully!"]
    assert not controller.create_loading


@pytest.mark.asyncio
async def test_create_failure_adds_nothing():
    controller = QueueController(BrokenStore(), agent_id=AGENT, notifier=RecordingNotifier())
    result = await controller.create("Printer on fire", "The third floor printer is on fire again.", Priority.VIP)
    assert result == (False, "Failed to create ticket")
    assert controller.all_tickets == []
    assert not controller.create_loading


@pytest.mark.asyncio
async def test_create_rejected_by_store_validation():
    controller, notifier = await loaded(InMemoryTicketStore(failure_rate=0.0))
    result = await controller.create("Hi", "too short", Priority.REGULAR)
    assert not result.ok
    assert controller.all_tickets == []
    assert notifier.errors == [result.error]


@pytest.mark.asyncio
async def test_assign_then_resolve():
    controller, notifier = await loaded(seeded())

    assert (await controller.assign("r-new")).ok
    ticket = next(t for t in controller.all_tickets if t.id == "r-new")
    assert ticket.status == TicketStatus.ASSIGNED
    assert ticket.assignee == AGENT

    assert (await controller.resolve("r-new")).ok
    ticket = next(t for t in controller.all_tickets if t.id == "r-new")
    assert ticket.status == TicketStatus.RESOLVED
    assert ticket.assignee == AGENT
    assert notifier.successes == ["Ticket assigned successfully!", "Ticket resolved successfully!"]
    assert controller.active_ticket_id is None


@pytest.mark.asyncio
async def test_assign_next_prefers_vip_then_oldest_regular():
    controller, notifier = await loaded(seeded())

    assert (await controller.assign_next()).ok
    assert (await controller.assign_next()).ok
    assigned = [t.id for t in controller.tickets if t.status == TicketStatus.ASSIGNED]
    assert assigned == ["vip", "r-old"]
    assert notifier.successes[-1] == "Next ticket assigned successfully!"


@pytest.mark.asyncio
async def test_assign_next_without_open_tickets():
    store = InMemoryTicketStore(
        tickets=[
            make_ticket("1", "2024-01-15T10:00:00Z", Priority.VIP, TicketStatus.ASSIGNED),
            make_ticket("2", "2024-01-15T09:00:00Z", Priority.REGULAR, TicketStatus.RESOLVED),
        ],
        failure_rate=0.0,
    )
    controller, notifier = await loaded(store)
    before = controller.all_tickets

    result = await controller.assign_next()
    assert result == (False, "No open tickets available to assign.")
    assert controller.all_tickets == before
    assert controller.error == "No open tickets available to assign."
    assert notifier.errors == [result.error]
    assert controller.active_ticket_id is None


@pytest.mark.asyncio
async def test_second_action_while_in_flight_is_guarded():
    store = seeded(GatedStore)
    controller, notifier = await loaded(store)

    pending = asyncio.create_task(controller.assign("vip"))
    await asyncio.sleep(0)
    assert controller.active_ticket_id == "vip"

    second = await controller.assign("r-old")
    third = await controller.resolve("vip")
    assert second == (False, "Another ticket action is already in progress.")
    assert not third.ok
    assert store.calls == [("assign", "vip")]

    store.release.set()
    assert (await pending).ok
    assert controller.active_ticket_id is None
    assert (await controller.assign("r-old")).ok


@pytest.mark.asyncio
async def test_store_failure_on_assign_leaves_ticket_and_frees_slot():
    controller, notifier = await loaded(seeded(failure_rate=1.0))
    before = controller.all_tickets

    result = await controller.assign("vip")
    assert result == (False, "Assignment failed. Please try again.")
    assert controller.all_tickets == before
    assert controller.active_ticket_id is None
    assert controller.error == result.error

    controller.clear_error()
    assert controller.error is None


@pytest.mark.asyncio
async def test_assign_unknown_ticket_reports_not_found():
    controller, _ = await loaded(seeded())
    result = await controller.assign("missing")
    assert result == (False, "Ticket not found")
    assert controller.active_ticket_id is None


@pytest.mark.asyncio
async def test_resolve_defers_to_store_for_open_ticket():
    controller, _ = await loaded(seeded())
    result = await controller.resolve("vip")
    assert result == (False, "Ticket is not assigned")
    assert next(t for t in controller.all_tickets if t.id == "vip").status == TicketStatus.OPEN


@pytest.mark.asyncio
async def test_resolve_uses_fallback_for_empty_store_message():
    controller = QueueController(BrokenStore(), agent_id=AGENT, notifier=RecordingNotifier())
    result = await controller.resolve("anything")
    assert result == (False, "Failed to resolve ticket")
    assert controller.active_ticket_id is None


@pytest.mark.asyncio
async def test_ownership_mismatch_is_a_failure():
    controller, _ = await loaded(seeded(StolenStore))
    result = await controller.assign_next()
    assert result == (False, "Ticket vip is already assigned to agent-2")
    assert next(t for t in controller.all_tickets if t.id == "vip").status == TicketStatus.OPEN


@pytest.mark.asyncio
async def test_filter_view_is_recomputed():
    controller, _ = await loaded(seeded())
    controller.set_filter(TicketStatus.OPEN)
    assert [t.id for t in controller.tickets] == ["vip", "r-old", "r-new"]

    await controller.assign("r-old")
    assert [t.id for t in controller.tickets] == ["vip", "r-new"]

    controller.set_filter(TicketStatus.ASSIGNED)
    assert controller.filter == TicketStatus.ASSIGNED
    assert [t.id for t in controller.tickets] == ["r-old"]

    controller.set_filter(None)
    assert len(controller.tickets) == 3


@pytest.mark.asyncio
async def test_demo_store_seeds_three_open_tickets():
    controller, _ = await loaded(InMemoryTicketStore.with_demo_tickets(failure_rate=0.0))
    titles = [t.title for t in controller.tickets]
    assert titles == ["Cannot login to account", "Account upgrade request", "Payment processing failed"]
    assert (await controller.assign_next()).ok
    assert controller.next_eligible().title == "Account upgrade request"
