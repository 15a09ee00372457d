# app/queue/http_store.py
"""Ticket store backed by the ticket HTTP API (see ``app.ticket.routes``)."""
import logging
from typing import Any

import httpx
import pydantic

from app.core.config import Settings, get_settings
from app.queue.errors import ConflictError, NotFoundError, StoreError, TransientError, ValidationError
from app.ticket.schemas import AssignResult, Priority, ResolveResult, TicketList, TicketOut

logger = logging.getLogger(__name__)


def _detail(response: httpx.Response) -> str | None:
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        return None
    # 422 bodies carry a list of field errors; the first one is the message
    if isinstance(detail, list) and detail and isinstance(detail[0], dict):
        detail = detail[0].get("msg")
    return detail if isinstance(detail, str) and detail else None


class HttpTicketStore:
    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "HttpTicketStore":
        settings = settings or get_settings()
        return cls(httpx.AsyncClient(base_url=settings.STORE_BASE_URL, timeout=settings.STORE_TIMEOUT))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpTicketStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, fallback: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransientError(fallback) from e

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                logger.warning("%s %s returned a non-JSON body", method, path)
                raise StoreError(fallback) from e

        message = _detail(response) or fallback
        logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
        if response.status_code == 404:
            raise NotFoundError(message)
        if response.status_code == 409:
            raise ConflictError(message)
        if response.status_code in (400, 422):
            raise ValidationError(message)
        raise TransientError(message)

    @staticmethod
    def _parse(model: type[pydantic.BaseModel], data: Any, fallback: str):
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            logger.warning("Unexpected ticket store payload: %s", e)
            raise StoreError(fallback) from e

    async def list_tickets(self) -> list[TicketOut]:
        fallback = "Failed to fetch tickets"
        data = await self._request("GET", "/tickets", fallback)
        return list(self._parse(TicketList, data, fallback).tickets)

    async def create_ticket(self, title: str, description: str, priority: Priority) -> TicketOut:
        fallback = "Failed to create ticket"
        payload = {"title": title, "description": description, "priority": Priority(priority).value}
        data = await self._request("POST", "/tickets", fallback, json=payload)
        return self._parse(TicketOut, data, fallback)

    async def assign_ticket(self, ticket_id: str, agent_id: str) -> AssignResult:
        fallback = "Assignment failed. Please try again."
        data = await self._request(
            "POST", f"/tickets/{ticket_id}/assign", fallback, json={"assignee": agent_id}
        )
        return self._parse(AssignResult, data, fallback)

    async def resolve_ticket(self, ticket_id: str) -> ResolveResult:
        fallback = "Failed to resolve ticket"
        data = await self._request("POST", f"/tickets/{ticket_id}/resolve", fallback)
        return self._parse(ResolveResult, data, fallback)
