"""FastAPI router for the provider's webhook endpoint.

Requires the ``fastapi`` extra::

    pip install bluem-sdk-python[fastapi]

Usage:
    verifier = WebhookVerifier.from_config(config)
    app.include_router(create_webhook_router(verifier, handle_update), prefix="/bluem")
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Request, Response, status
from fastapi.concurrency import run_in_threadpool

from ..models.webhook import VerifiedWebhook
from ..webhooks import WebhookVerifier

logger = logging.getLogger(__name__)

WebhookHandler = Callable[[VerifiedWebhook], None]


def create_webhook_router(
    verifier: WebhookVerifier,
    handler: Optional[WebhookHandler] = None,
    path: str = "/webhook",
) -> APIRouter:
    """Build a router answering the provider's notification contract.

    Non-POST requests and notifications that fail verification get 400, an
    empty POST gets 200, and a verified status update is passed to
    ``handler`` before answering 200.
    """
    router = APIRouter(tags=["bluem-webhooks"])

    @router.api_route(path, methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    async def handle_bluem_webhook(request: Request) -> Response:
        body = await request.body()
        result = await run_in_threadpool(verifier.verify, body, request.method)
        if not result.accepted:
            return Response(status_code=status.HTTP_400_BAD_REQUEST)

        if result.payload is not None and handler is not None:
            await run_in_threadpool(handler, result.payload)
        return Response(status_code=status.HTTP_200_OK)

    return router
