# app/ticket/services.py
import logging
from datetime import datetime

from sqlalchemy.orm import Session
from app.ticket.models import Ticket
from app.ticket.schemas import TicketCreate, TicketStatus

logger = logging.getLogger(__name__)


class TicketNotFound(Exception):
    def __init__(self, ticket_id: str):
        super().__init__("Ticket not found")
        self.ticket_id = ticket_id


class InvalidTransition(Exception):
    """Raised when a ticket is asked to move to a state it cannot reach."""


def get_all_tickets(db: Session, status: TicketStatus | None = None) -> list[Ticket]:
    query = db.query(Ticket)
    if status is not None:
        query = query.filter(Ticket.status == status.value)
    # createdAt then id is the total order the queue relies on for ties
    return query.order_by(Ticket.created_at, Ticket.id).all()


def get_ticket(db: Session, ticket_id: str) -> Ticket | None:
    return db.query(Ticket).filter(Ticket.id == ticket_id).first()


def create_ticket(db: Session, payload: TicketCreate, created_at: datetime | None = None) -> Ticket:
    db_ticket = Ticket(
        title=payload.title,
        description=payload.description,
        priority=payload.priority.value,
        status=TicketStatus.OPEN.value,
        assignee=None,
    )
    if created_at is not None:
        db_ticket.created_at = created_at
    db.add(db_ticket)
    db.commit()
    db.refresh(db_ticket)
    logger.info("Created ticket %s priority=%s", db_ticket.id, db_ticket.priority)
    return db_ticket


def assign_ticket(db: Session, ticket_id: str, assignee: str) -> Ticket:
    db_ticket = get_ticket(db, ticket_id)
    if not db_ticket:
        raise TicketNotFound(ticket_id)
    if db_ticket.status != TicketStatus.OPEN.value:
        raise InvalidTransition("Ticket is not open")
    db_ticket.status = TicketStatus.ASSIGNED.value
    db_ticket.assignee = assignee
    db.commit()
    db.refresh(db_ticket)
    logger.info("Assigned ticket %s to %s", ticket_id, assignee)
    return db_ticket


def resolve_ticket(db: Session, ticket_id: str) -> Ticket:
    db_ticket = get_ticket(db, ticket_id)
    if not db_ticket:
        raise TicketNotFound(ticket_id)
    if db_ticket.status != TicketStatus.ASSIGNED.value:
        raise InvalidTransition("Ticket is not assigned")
    db_ticket.status = TicketStatus.RESOLVED.value
    db.commit()
    db.refresh(db_ticket)
    logger.info("Resolved ticket %s", ticket_id)
    return db_ticket
