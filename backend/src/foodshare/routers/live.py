"""WebSocket views that stay in sync with the listing tables.

On connect the client gets the full current list; after every change to
listings or restaurants it gets the full list again. Changes are published
from worker threads, so snapshots are handed to the socket's event loop
through a queue.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, List

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from foodshare.core.database import get_session_factory
from foodshare.services import listings as listing_service
from foodshare.services.feed import LiveListingFeed, Snapshot, get_feed

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


async def _stream(websocket: WebSocket, fetch: Callable[[], List[dict]]) -> None:
    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def on_snapshot(snapshot: Snapshot) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, snapshot)

    live = LiveListingFeed(get_feed(), fetch, on_snapshot)

    async def send() -> None:
        last_sequence = 0
        while True:
            snapshot = await queue.get()
            if snapshot.sequence <= last_sequence:
                continue
            last_sequence = snapshot.sequence
            await websocket.send_json({"sequence": snapshot.sequence, "listings": snapshot.items})

    async def receive() -> None:
        # Only used to notice the client going away.
        while True:
            await websocket.receive_text()

    try:
        await run_in_threadpool(live.start)
        sender = asyncio.create_task(send())
        receiver = asyncio.create_task(receive())
        done, pending = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        for task in done:
            exc = task.exception()
            if exc and not isinstance(exc, WebSocketDisconnect):
                logger.warning("Live listing socket closed with error: %r", exc)
    finally:
        live.stop()


@router.websocket("/ws/listings")
async def available_listings_feed(
    websocket: WebSocket,
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    def fetch() -> List[dict]:
        with session_factory() as session:
            return [l.model_dump(mode="json") for l in listing_service.list_available(session)]

    await _stream(websocket, fetch)


@router.websocket("/ws/restaurants/{restaurant_id}/listings")
async def restaurant_listings_feed(
    websocket: WebSocket,
    restaurant_id: str,
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    def fetch() -> List[dict]:
        with session_factory() as session:
            return [
                l.model_dump(mode="json")
                for l in listing_service.list_by_restaurant(session, restaurant_id)
            ]

    await _stream(websocket, fetch)
