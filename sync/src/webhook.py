"""Strava webhook receiver.

GET answers Strava's subscription handshake. POST receives activity events
and forwards new activities to the sync workflow.

Usage:
    python -m webhook [--host 0.0.0.0] [--port 8000]
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Callable

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from config import WebhookConfig, load_webhook_config
from dispatch import trigger_repository_dispatch
from models import WebhookEvent
from results import Result

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/api/strava"


def create_app(config: WebhookConfig, trigger: Callable[[dict], Result] | None = None) -> FastAPI:
    """Build the webhook app. ``trigger`` receives the client payload of each new activity."""
    if trigger is None:
        def trigger(client_payload):
            return trigger_repository_dispatch(
                client_payload, config.github_token, config.github_repo,
                timeout=config.request_timeout,
            )

    app = FastAPI(title="stravbit webhook")

    @app.get(WEBHOOK_PATH)
    def verify(request: Request):
        challenge = request.query_params.get("hub.challenge")
        token = request.query_params.get("hub.verify_token")
        if config.verify_token and token == config.verify_token:
            logger.info("Webhook verification successful")
            return {"hub.challenge": challenge}
        logger.error("Invalid verification token")
        return JSONResponse(status_code=403, content={"error": "Invalid verification token"})

    @app.post(WEBHOOK_PATH)
    async def receive_event(request: Request):
        try:
            data = await request.json()
        except ValueError:
            logger.error("Webhook body is not valid JSON")
            return JSONResponse(status_code=400, content={"status": "error", "message": "Invalid JSON"})
        if not isinstance(data, dict):
            return JSONResponse(status_code=400, content={"status": "error", "message": "Invalid event"})

        logger.info("Received webhook event: %s", json.dumps(data))
        event = WebhookEvent.from_payload(data)
        if not event.is_actionable():
            logger.info("Ignoring non-activity or non-create event")
            return {"status": "ignored", "message": "Event type not processed"}

        result = await run_in_threadpool(trigger, event.client_payload())
        if not result.ok:
            return JSONResponse(
                status_code=500,
                content={"status": "error", "message": "Failed to trigger GitHub Action"},
            )
        return {"status": "success", "message": "GitHub Action triggered"}

    @app.api_route(WEBHOOK_PATH, methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
    def method_not_allowed():
        return JSONResponse(status_code=405, content={"error": "Method not allowed"})

    return app


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the Strava webhook receiver")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    uvicorn.run(create_app(load_webhook_config()), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
