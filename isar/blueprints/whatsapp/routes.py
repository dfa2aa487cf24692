"""Inbound WhatsApp webhook; replies are returned in the response body."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ...domain.errors import TransactionAbortedError
from ...services import whatsapp_service

logger = logging.getLogger(__name__)

bp = Blueprint("whatsapp", __name__, url_prefix="/api/whatsapp")

SYSTEM_ERROR = "❌ Maaf, berlaku ralat sistem. Sila cuba lagi atau hubungi Head Imam."


@bp.post("/webhook")
def webhook():
    sender = request.form.get("From", "")
    body = request.form.get("Body", "")
    logger.info("WhatsApp webhook from %s: %r", sender, body)

    try:
        reply = whatsapp_service.handle_message(sender, body)
    except TransactionAbortedError:
        logger.exception("Failed to process WhatsApp message from %s", sender)
        reply = SYSTEM_ERROR

    # Always 200 so the provider does not retry the delivery.
    return jsonify({"reply": reply}), 200


@bp.get("/webhook")
def webhook_status():
    return jsonify(
        {
            "status": "WhatsApp webhook is active",
            "commands": ["CUTI", "BATAL", "SENARAI"],
        }
    ), 200
