# app/ticket/routes.py
import asyncio
import logging
import random

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.ticket.schemas import (
    AssignRequest,
    AssignResult,
    ResolveResult,
    TicketCreate,
    TicketList,
    TicketOut,
    TicketStatus,
)
from app.ticket import services as ticket_service
from app.core.config import get_settings, Settings

logger = logging.getLogger(__name__)

ASSIGN_FAILED = "Assignment failed. Please try again."


async def simulate_latency(settings: Settings = Depends(get_settings)) -> None:
    low, high = settings.STORE_LATENCY_MIN_MS, settings.STORE_LATENCY_MAX_MS
    if high <= 0:
        return
    await asyncio.sleep(random.randint(low, max(low, high)) / 1000)


router = APIRouter(prefix="/tickets", tags=["Tickets"], dependencies=[Depends(simulate_latency)])


@router.get("", response_model=TicketList)
def list_all(
    status: TicketStatus | None = Query(default=None, description="Filter by status: Open, Assigned or Resolved"),
    db: Session = Depends(get_db),
):
    items = ticket_service.get_all_tickets(db, status)
    return TicketList(tickets=[TicketOut.model_validate(t) for t in items])


@router.post("", response_model=TicketOut, status_code=201)
def create(ticket: TicketCreate, db: Session = Depends(get_db)):
    return TicketOut.model_validate(ticket_service.create_ticket(db, ticket))


@router.get("/{ticket_id}", response_model=TicketOut)
def get(ticket_id: str, db: Session = Depends(get_db)):
    ticket = ticket_service.get_ticket(db, ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return TicketOut.model_validate(ticket)


@router.post("/{ticket_id}/assign", response_model=AssignResult)
def assign(
    ticket_id: str,
    body: AssignRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # the simulated outage fires before the lookup, whatever the ticket's state
    if random.random() < settings.ASSIGN_FAILURE_RATE:
        logger.warning("Simulated assignment failure for ticket %s", ticket_id)
        raise HTTPException(status_code=500, detail=ASSIGN_FAILED)
    try:
        ticket = ticket_service.assign_ticket(db, ticket_id, body.assignee)
    except ticket_service.TicketNotFound:
        raise HTTPException(status_code=404, detail="Ticket not found")
    except ticket_service.InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return AssignResult.model_validate(ticket)


@router.post("/{ticket_id}/resolve", response_model=ResolveResult)
def resolve(ticket_id: str, db: Session = Depends(get_db)):
    try:
        ticket = ticket_service.resolve_ticket(db, ticket_id)
    except ticket_service.TicketNotFound:
        raise HTTPException(status_code=404, detail="Ticket not found")
    except ticket_service.InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ResolveResult.model_validate(ticket)
