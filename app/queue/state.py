# app/queue/state.py
"""Queue state and the transitions the controller applies to it.

Each store outcome is turned into one action; ``reduce`` maps the current
state and that action to the next state. State is never modified in place.
"""
from pydantic import BaseModel, ConfigDict

from app.ticket.schemas import TicketOut, TicketStatus


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class QueueState(_Frozen):
    tickets: tuple[TicketOut, ...] = ()
    fetch_loading: bool = False
    create_loading: bool = False
    # ticket whose assign/resolve call is outstanding
    active_ticket_id: str | None = None
    error: str | None = None
    filter: TicketStatus | None = None


class FetchStart(_Frozen):
    pass


class FetchSuccess(_Frozen):
    tickets: tuple[TicketOut, ...]


class FetchError(_Frozen):
    message: str


class CreateStart(_Frozen):
    pass


class CreateSuccess(_Frozen):
    ticket: TicketOut


class CreateError(_Frozen):
    message: str


class ActionStart(_Frozen):
    ticket_id: str


class ActionEnd(_Frozen):
    pass


class AssignSuccess(_Frozen):
    ticket_id: str
    assignee: str


class ResolveSuccess(_Frozen):
    ticket_id: str


class SetFilter(_Frozen):
    status: TicketStatus | None = None


class SetError(_Frozen):
    message: str


class ClearError(_Frozen):
    pass


Action = (
    FetchStart | FetchSuccess | FetchError
    | CreateStart | CreateSuccess | CreateError
    | ActionStart | ActionEnd | AssignSuccess | ResolveSuccess
    | SetFilter | SetError | ClearError
)


def _replace_ticket(tickets: tuple[TicketOut, ...], ticket_id: str, **changes) -> tuple[TicketOut, ...]:
    # a ticket that vanished locally is left alone; the store already confirmed the change
    return tuple(t.model_copy(update=changes) if t.id == ticket_id else t for t in tickets)


def reduce(state: QueueState, action: Action) -> QueueState:
    if isinstance(action, FetchStart):
        return state.model_copy(update={"fetch_loading": True, "error": None})
    if isinstance(action, FetchSuccess):
        return state.model_copy(update={"fetch_loading": False, "tickets": action.tickets})
    if isinstance(action, FetchError):
        return state.model_copy(update={"fetch_loading": False, "error": action.message})
    if isinstance(action, CreateStart):
        return state.model_copy(update={"create_loading": True, "error": None})
    if isinstance(action, CreateSuccess):
        return state.model_copy(
            update={"create_loading": False, "tickets": state.tickets + (action.ticket,)}
        )
    if isinstance(action, CreateError):
        return state.model_copy(update={"create_loading": False, "error": action.message})
    if isinstance(action, ActionStart):
        return state.model_copy(update={"active_ticket_id": action.ticket_id, "error": None})
    if isinstance(action, ActionEnd):
        return state.model_copy(update={"active_ticket_id": None})
    if isinstance(action, AssignSuccess):
        tickets = _replace_ticket(
            state.tickets, action.ticket_id, status=TicketStatus.ASSIGNED, assignee=action.assignee
        )
        return state.model_copy(update={"tickets": tickets})
    if isinstance(action, ResolveSuccess):
        tickets = _replace_ticket(state.tickets, action.ticket_id, status=TicketStatus.RESOLVED)
        return state.model_copy(update={"tickets": tickets})
    if isinstance(action, SetFilter):
        return state.model_copy(update={"filter": action.status})
    if isinstance(action, SetError):
        return state.model_copy(update={"error": action.message})
    if isinstance(action, ClearError):
        return state.model_copy(update={"error": None})
    raise TypeError(f"Unknown queue action: {action!r}")
