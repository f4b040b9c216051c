# src/taskminder/notifiers/matrix.py

"""
Matrix reminder delivery.

The reminder thread must not wait on the network, so:
- a background thread owns an asyncio loop and the nio AsyncClient,
- on_reminder() only submits a send coroutine to that loop and returns.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Any

from nio import AsyncClient, AsyncClientConfig, LoginResponse, RoomSendResponse

from ..tasks.task_models import TaskRecord
from .rendering import render_reminder_text

logger = logging.getLogger(__name__)

try:
    import olm  # type: ignore  # noqa: F401

    OLM_AVAILABLE = True
except Exception:
    OLM_AVAILABLE = False


def _session_path(store_dir: Path) -> Path:
    return store_dir / "session.json"


def _load_json(path: Path) -> dict[str, Any]:
    val = json.loads(path.read_text("utf-8"))
    if isinstance(val, dict):
        return val
    raise ValueError("Expected JSON object")


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False), "utf-8")
    os.replace(tmp, path)
    with contextlib.suppress(OSError):
        # Access token inside: keep it private where the FS allows it.
        os.chmod(path, 0o600)


async def create_matrix_client(settings) -> AsyncClient | None:
    """
    Create a Matrix AsyncClient, reusing session.json when present.

    A password login is only needed once; the resulting access token/device id are
    stored under matrix_store_path (a gitignored local dir).
    """
    homeserver = (getattr(settings, "matrix_homeserver", "") or "").strip()
    user_id = (getattr(settings, "matrix_user_id", "") or "").strip()
    password = (getattr(settings, "matrix_password", "") or "").strip()
    store_dir = Path(getattr(settings, "matrix_store_path", Path(".local/taskminder/matrix_store")))

    if not homeserver or not user_id:
        logger.error("Matrix is not configured: set TASKMINDER_MATRIX_HOMESERVER and TASKMINDER_MATRIX_USER_ID")
        return None

    store_dir.mkdir(parents=True, exist_ok=True)
    session_file = _session_path(store_dir)

    config = AsyncClientConfig(encryption_enabled=OLM_AVAILABLE, store_sync_tokens=True)
    client = AsyncClient(
        homeserver,
        user_id,
        store_path=str(store_dir) if OLM_AVAILABLE else None,
        config=config,
    )

    # ---- Session restore ----
    if session_file.exists():
        try:
            data = _load_json(session_file)
            access_token = data.get("access_token")
            sess_user_id = data.get("user_id")
            device_id = data.get("device_id")
            if not access_token or not sess_user_id or not device_id:
                raise ValueError("session.json is missing required fields")

            client.access_token = str(access_token)
            client.user_id = str(sess_user_id)
            client.device_id = str(device_id)
            if OLM_AVAILABLE:
                client.load_store()
            logger.info("Matrix session restored for %s", client.user_id)
            return client
        except Exception as e:
            logger.warning("Failed to restore Matrix session.json, will try password login: %r", e)

    # ---- Password login bootstrap ----
    if not password:
        logger.error(
            "Matrix session.json not found and password is not set. "
            "Set TASKMINDER_MATRIX_PASSWORD once to bootstrap a session."
        )
        await client.close()
        return None

    device_name = f"{getattr(settings, 'app_name', 'taskminder')} (Python)"
    resp = await client.login(password=password, device_name=device_name)
    if not isinstance(resp, LoginResponse):
        logger.error("Matrix login failed: %r", resp)
        await client.close()
        return None

    _atomic_write_json(
        session_file,
        {"access_token": resp.access_token, "user_id": resp.user_id, "device_id": resp.device_id},
    )
    logger.info("Matrix session saved to %s (user=%s)", session_file, resp.user_id)
    return client


class MatrixNotifier:
    """Sends each reminder as an m.text message to one room."""

    def __init__(
        self,
        client: AsyncClient,
        room_id: str,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._client = client
        self._room_id = room_id
        self._loop = loop
        self._runner: _MatrixLoopThread | None = None

    async def send_reminder(self, task: TaskRecord) -> bool:
        text = render_reminder_text(task)
        resp = await self._client.room_send(
            room_id=self._room_id,
            message_type="m.room.message",
            content={"msgtype": "m.text", "body": text},
            ignore_unverified_devices=True,
        )
        if isinstance(resp, RoomSendResponse):
            logger.info("Reminder for task %s sent to %s", task.id, self._room_id)
            return True
        logger.error("Matrix send failed for task %s: %r", task.id, resp)
        return False

    def on_reminder(self, task: TaskRecord) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.error("Matrix loop is not running; reminder for task %s dropped", task.id)
            return
        fut = asyncio.run_coroutine_threadsafe(self.send_reminder(task), loop)
        fut.add_done_callback(lambda f: self._log_failure(task, f))

    @staticmethod
    def _log_failure(task: TaskRecord, fut: Future) -> None:
        if fut.cancelled():
            logger.warning("Matrix send cancelled for task %s", task.id)
            return
        exc = fut.exception()
        if exc is not None:
            logger.error("Matrix send crashed for task %s: %r", task.id, exc)

    def close(self, timeout: float = 10.0) -> None:
        if self._runner is not None:
            self._runner.stop()
            self._runner.join(timeout=timeout)
            self._runner = None


class _MatrixLoopThread:
    """Background thread owning the asyncio loop and the Matrix client."""

    def __init__(self, settings) -> None:
        self._settings = settings
        self._ready = threading.Event()
        self.loop: asyncio.AbstractEventLoop | None = None
        self.client: AsyncClient | None = None
        self._stop_event: asyncio.Event | None = None
        self._thread = threading.Thread(target=self._run, name="taskminder-matrix", daemon=True)

    def start(self, timeout: float) -> bool:
        self._thread.start()
        self._ready.wait(timeout=timeout)
        return self.client is not None

    def _run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self.loop = loop
        try:
            loop.run_until_complete(self._main())
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    async def _main(self) -> None:
        self._stop_event = asyncio.Event()
        try:
            self.client = await create_matrix_client(self._settings)
        except Exception:
            logger.exception("Matrix client creation crashed.")
            self.client = None
        finally:
            self._ready.set()

        if self.client is None:
            return

        try:
            await self._stop_event.wait()
        finally:
            with contextlib.suppress(Exception):
                await self.client.close()
            logger.info("Matrix notifier stopped.")

    def stop(self) -> None:
        loop, stop_event = self.loop, self._stop_event
        if loop is None or stop_event is None:
            return
        try:
            loop.call_soon_threadsafe(stop_event.set)
        except RuntimeError:
            logger.debug("Matrix loop already closed.")

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout=timeout)


def start_matrix_notifier(settings, *, startup_timeout: float = 30.0) -> MatrixNotifier | None:
    """
    Start the Matrix client in a background thread and return a notifier bound to it.

    Returns None when Matrix is disabled, not configured, or login fails.
    """
    if not getattr(settings, "matrix_enabled", False):
        logger.info("Matrix notifier disabled, not starting.")
        return None

    room_id = (getattr(settings, "matrix_room_id", "") or "").strip()
    if not room_id:
        logger.error("Matrix is enabled but TASKMINDER_MATRIX_ROOM_ID is not set.")
        return None

    runner = _MatrixLoopThread(settings)
    if not runner.start(timeout=startup_timeout) or runner.client is None:
        logger.error("Matrix notifier could not start; reminders stay local.")
        runner.stop()
        return None

    notifier = MatrixNotifier(runner.client, room_id, loop=runner.loop)
    notifier._runner = runner
    logger.info("Matrix notifier started (room=%s).", room_id)
    return notifier
