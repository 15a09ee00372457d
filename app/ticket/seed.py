# app/ticket/seed.py
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session
from app.ticket import services as ticket_service
from app.ticket.models import Ticket
from app.ticket.schemas import Priority, TicketCreate


def demo_tickets(now: datetime | None = None) -> list[tuple[TicketCreate, datetime]]:
    """Three open tickets of mixed priority, created in the last two hours."""
    now = now or datetime.now(timezone.utc)
    return [
        (
            TicketCreate(
                title="Cannot login to account",
                description="User reports being unable to login after password reset. "
                "Error message shows invalid credentials.",
                priority=Priority.VIP,
            ),
            now - timedelta(hours=1),
        ),
        (
            TicketCreate(
                title="Payment processing failed",
                description="Customer attempted to make a purchase but payment was declined "
                "despite valid card details.",
                priority=Priority.REGULAR,
            ),
            now - timedelta(hours=2),
        ),
        (
            TicketCreate(
                title="Account upgrade request",
                description="VIP customer requesting immediate account upgrade to premium tier "
                "with additional features.",
                priority=Priority.VIP,
            ),
            now - timedelta(minutes=30),
        ),
    ]


def seed_demo_tickets(db: Session) -> int:
    """Insert the demo tickets into an empty table. Returns how many were added."""
    if db.query(Ticket).first() is not None:
        return 0
    seeded = demo_tickets()
    for payload, created_at in seeded:
        ticket_service.create_ticket(db, payload, created_at=created_at)
    return len(seeded)
