# app/routers/live.py
"""
Live subscriptions over WebSocket.

Each feed sends a full snapshot on connect and again after every
committed write to the collections it watches. Messages:

    {"type": "snapshot", "items": [...]}

The request feed also takes filter messages from the client,
{"q": ..., "category": ..., "status": ...}, and re-filters the last
loaded set without going back to the database.

Authentication uses the `token` query parameter (browsers cannot set
headers on WebSocket connections).
"""
import asyncio
import json
import logging
import uuid
from typing import Any, Callable

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from app.core.auth import resolve_user
from app.core.events import REQUESTS, PITCHES, feed
from app.database import engine
from app.models.user import User
from app.routers.deps import pitch_service, request_service
from app.services.request_service import filter_requests

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["Live"])

FILTER_KEYS = ("q", "category", "status")


def _authenticate(token: str, request_id: uuid.UUID | None = None) -> User:
    """Resolve the token; with request_id, also require ownership."""
    with Session(engine) as session:
        user = resolve_user(session, token)
        if request_id is not None:
            request_service.get_owned_request(session, user, request_id)
        return user


def _snapshot(items: list[Any]) -> dict[str, Any]:
    return {"type": "snapshot", "items": jsonable_encoder(items)}


async def _stream(
    websocket: WebSocket,
    collections: tuple[str, ...],
    load: Callable[[Session], list[Any]],
    render: Callable[[list[Any]], list[Any]] = lambda items: items,
    on_message: Callable[[dict[str, Any]], None] | None = None,
) -> None:
    """
    Pump snapshots to an accepted WebSocket until it disconnects.

    `load` runs in the threadpool with a short-lived session so the
    connection is not held between pushes.
    """

    def _load() -> list[Any]:
        with Session(engine) as session:
            return load(session)

    queue = feed.subscribe(*collections)
    receiver: asyncio.Task | None = None
    changed: asyncio.Task | None = None
    try:
        items = await run_in_threadpool(_load)
        await websocket.send_json(_snapshot(render(items)))

        receiver = asyncio.create_task(websocket.receive_text())
        changed = asyncio.create_task(queue.get())
        while True:
            done, _ = await asyncio.wait(
                {receiver, changed},
                return_when=asyncio.FIRST_COMPLETED,
            )

            if receiver in done:
                raw = receiver.result()
                receiver = asyncio.create_task(websocket.receive_text())
                if on_message is not None:
                    try:
                        message = json.loads(raw)
                    except ValueError:
                        logger.warning("Ignoring malformed live message: %r", raw)
                        continue
                    if isinstance(message, dict):
                        on_message(message)
                        await websocket.send_json(_snapshot(render(items)))

            if changed in done:
                # Several writes may have landed; one re-query covers them all.
                while not queue.empty():
                    queue.get_nowait()
                changed = asyncio.create_task(queue.get())
                items = await run_in_threadpool(_load)
                await websocket.send_json(_snapshot(render(items)))
    except WebSocketDisconnect:
        pass
    finally:
        feed.unsubscribe(queue)
        for task in (receiver, changed):
            if task is not None and not task.done():
                task.cancel()


async def _accept(websocket: WebSocket, token: str, request_id: uuid.UUID | None = None) -> User | None:
    try:
        user = await run_in_threadpool(_authenticate, token, request_id)
    except HTTPException as exc:
        logger.info("Rejected live subscription: %s", exc.detail)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return None
    await websocket.accept()
    return user


@router.websocket("/requests")
async def live_requests(
    websocket: WebSocket,
    token: str,
    city: str | None = None,
    q: str | None = None,
    category: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
):
    """Requests in a city (default: the user's active city)."""
    user = await _accept(websocket, token)
    if user is None:
        return

    scope_city = city or user.active_city
    filters: dict[str, str | None] = {"q": q, "category": category, "status": status_filter}

    def load(session: Session):
        return request_service.load_city_requests(session, scope_city)

    def render(items):
        return filter_requests(
            items,
            q=filters["q"],
            category=filters["category"],
            status_filter=filters["status"],
        )

    def on_message(message: dict[str, Any]) -> None:
        for key in FILTER_KEYS:
            if key in message:
                filters[key] = message[key] or None

    await _stream(websocket, (REQUESTS,), load, render, on_message)


@router.websocket("/requests/{request_id}/pitches")
async def live_request_pitches(websocket: WebSocket, request_id: uuid.UUID, token: str):
    """Pitches on one request (owner only)."""
    user = await _accept(websocket, token, request_id)
    if user is None:
        return

    def load(session: Session):
        return pitch_service.list_for_request(session, request_id)

    await _stream(websocket, (PITCHES,), load)


@router.websocket("/me/requests")
async def live_my_requests(websocket: WebSocket, token: str):
    """Requests posted by the current user."""
    user = await _accept(websocket, token)
    if user is None:
        return

    def load(session: Session):
        return request_service.list_user_requests(session, user.uid)

    await _stream(websocket, (REQUESTS,), load)


@router.websocket("/me/pitches")
async def live_my_pitches(websocket: WebSocket, token: str):
    """Pitches submitted by the current user (titles follow request edits)."""
    user = await _accept(websocket, token)
    if user is None:
        return

    def load(session: Session):
        return pitch_service.list_user_pitches(session, user.uid)

    await _stream(websocket, (PITCHES, REQUESTS), load)
