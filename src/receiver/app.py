"""HTTP surface of the harness: ``POST /notify`` and ``GET /metrics``."""

from __future__ import annotations

import logging
import threading
import time

import uvicorn
from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from src.receiver.receiver import NotificationReceiver

log = logging.getLogger(__name__)


def create_app(receiver: NotificationReceiver, registry: CollectorRegistry) -> FastAPI:
    app = FastAPI(title="Alert Load Harness Receiver")

    @app.post("/notify")
    async def notify(request: Request) -> Response:
        body = await request.body()
        receiver.handle(body)
        return Response(status_code=200)

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    return app


class ReceiverServer:
    """Runs the receiver app under uvicorn in a background thread."""

    def __init__(self, app: FastAPI, host: str = "0.0.0.0", port: int = 8080) -> None:
        self.host = host
        self.port = port
        self._server = uvicorn.Server(
            uvicorn.Config(app, host=host, port=port, log_level="warning", access_log=False)
        )
        self._thread: threading.Thread | None = None

    def start(self, timeout: float = 10.0) -> None:
        """Start serving and wait until the socket is bound.

        Raises:
            OSError: If uvicorn did not come up within *timeout* seconds.
        """
        self._thread = threading.Thread(target=self._server.run, name="receiver", daemon=True)
        self._thread.start()
        deadline = time.monotonic() + timeout
        while not self._server.started:
            if not self._thread.is_alive() or time.monotonic() > deadline:
                raise OSError(f"receiver failed to listen on {self.host}:{self.port}")
            time.sleep(0.05)
        log.info("Receiver listening on %s:%d (/notify, /metrics)", self.host, self.port)

    def stop(self) -> None:
        if self._thread is None:
            return
        self._server.should_exit = True
        self._thread.join(timeout=5.0)
        self._thread = None
