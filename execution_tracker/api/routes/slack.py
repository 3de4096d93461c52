"""
Slack Events API Routes

Realtime receiver for the Slack Events API. New messages with image
attachments go through the same importer as the history sync, so an image
delivered both by the webhook and by a later backfill is stored once.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import Callable
import logging

from execution_tracker.config import Settings, get_settings
from execution_tracker.database import get_db
from execution_tracker.errors import ConfigurationError
from execution_tracker.integrations.slack import SlackHistoryMessage
from execution_tracker.services.sync_engine import (
    MessageImporter,
    SyncResult,
    build_message_importer,
)

logger = logging.getLogger(__name__)
router = APIRouter()

# Edits and deletions re-deliver the original files
IGNORED_SUBTYPES = {"message_changed", "message_deleted", "bot_message"}


def get_importer_factory() -> Callable[[Session, Settings], MessageImporter]:
    """Dependency returning the importer factory, overridden in tests."""
    return build_message_importer


@router.post("/events")
async def slack_events(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    importer_factory: Callable[[Session, Settings], MessageImporter] = Depends(get_importer_factory),
):
    """
    Handle a Slack Events API callback.

    - url_verification: echo the challenge as plain text
    - message event with files from a person: import its images
    - anything else: acknowledge with {"ok": true}
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        return JSONResponse(status_code=400, content={"ok": False, "error": "Invalid JSON body"})

    if body.get("type") == "url_verification":
        return PlainTextResponse(body.get("challenge", ""))

    event = body.get("event") or {}
    if (
        event.get("type") != "message"
        or not event.get("files")
        or event.get("bot_id")
        or event.get("subtype") in IGNORED_SUBTYPES
    ):
        return {"ok": True}

    try:
        message = SlackHistoryMessage(**event)
    except ValidationError as e:
        logger.warning(f"Ignoring malformed message event: {e}")
        return {"ok": True}

    try:
        importer = importer_factory(db, settings)
        result = SyncResult()
        await importer.import_message(message, result)
    except ConfigurationError as e:
        logger.error(f"Webhook import not configured: {e}")
        return JSONResponse(status_code=500, content={"ok": False, "error": str(e)})
    except Exception as e:
        logger.error(f"Webhook error for message {message.ts}: {e}")
        return JSONResponse(status_code=500, content={"ok": False, "error": "Server error"})

    logger.info(f"Webhook message {message.ts}: imported={result.imported_count}, "
                f"skipped={result.skipped_count}, errors={len(result.errors)}")
    return {"ok": True, "imported": result.imported_count, "errors": result.errors}
