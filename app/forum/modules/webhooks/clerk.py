"""
Auth-provider webhook: keeps communities in sync with provider organizations.

Deliveries are signed by Svix; the raw body is verified against the
`svix-id`, `svix-timestamp` and `svix-signature` headers before any handler
runs. Each supported event type maps to exactly one community action.

Responses:
    201  event handled
    400  signature verification failed, or event type not handled
    500  the community action raised (transaction rolled back)
"""
from __future__ import annotations

import binascii
import json
from collections.abc import Callable
from typing import Any

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.orm import Session
from svix.webhooks import Webhook, WebhookVerificationError

from app.forum.db import db_session
from app.forum.modules.communities import service as communities

bp = Blueprint("webhooks", __name__)

SIGNATURE_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")
DEFAULT_COMMUNITY_BIO = "org bio"


def _organization_created(s: Session, data: dict[str, Any]) -> None:
    communities.create_community(
        s,
        data["id"],
        data["name"],
        data["slug"],
        data.get("logo_url") or data.get("image_url"),
        DEFAULT_COMMUNITY_BIO,
        data["created_by"],
    )


def _invitation_created(s: Session, data: dict[str, Any]) -> None:
    # Membership is created once the invitation is accepted.
    return None


def _membership_created(s: Session, data: dict[str, Any]) -> None:
    communities.add_member_to_community(
        s,
        data["organization"]["id"],
        data["public_user_data"]["user_id"],
    )


def _membership_deleted(s: Session, data: dict[str, Any]) -> None:
    communities.remove_user_from_community(
        s,
        data["public_user_data"]["user_id"],
        data["organization"]["id"],
    )


def _organization_updated(s: Session, data: dict[str, Any]) -> None:
    communities.update_community_info(s, data["id"], data["name"], data["slug"], data.get("logo_url"))


def _organization_deleted(s: Session, data: dict[str, Any]) -> None:
    communities.delete_community(s, data["id"])


EVENT_HANDLERS: dict[str, tuple[Callable[[Session, dict[str, Any]], None], str]] = {
    "organization.created": (_organization_created, "Organization created"),
    "organizationInvitation.created": (_invitation_created, "Invitation created"),
    "organizationMembership.created": (_membership_created, "Membership created"),
    "organizationMembership.deleted": (_membership_deleted, "Member removed"),
    "organization.updated": (_organization_updated, "Organization updated"),
    "organization.deleted": (_organization_deleted, "Organization deleted"),
}


def verify_event(payload: bytes, headers: dict[str, str]) -> dict[str, Any]:
    """
    Verify a Svix-signed delivery and return the decoded event. Raises WebhookVerificationError.

    The body is decoded here rather than taken from `Webhook.verify`: svix 2.x only
    checks the signature and returns None.
    """
    secret = current_app.config.get("CLERK_WEBHOOK_SECRET") or ""
    if not secret:
        raise WebhookVerificationError("Webhook secret is not configured")
    try:
        wh = Webhook(secret)
    except (binascii.Error, ValueError) as e:
        raise WebhookVerificationError("Webhook secret is malformed") from e
    try:
        # svix 1.x also decodes here and raises ValueError on a non-JSON body
        wh.verify(payload, headers)
        event = json.loads(payload)
    except ValueError as e:
        raise WebhookVerificationError("Invalid JSON payload") from e
    if not isinstance(event, dict):
        raise WebhookVerificationError("Unexpected payload shape")
    return event


@bp.post("/clerk")
def clerk_webhook():
    heads = {name: request.headers.get(name) for name in SIGNATURE_HEADERS}
    heads = {k: v for k, v in heads.items() if v}
    current_app.logger.info("Webhook received (svix-id=%s)", heads.get("svix-id"))

    try:
        event = verify_event(request.get_data(), heads)
    except WebhookVerificationError as e:
        current_app.logger.warning("Webhook verification failed (svix-id=%s): %s", heads.get("svix-id"), e)
        return jsonify({"message": str(e) or "Webhook verification failed"}), 400

    event_type = event.get("type")
    handler = EVENT_HANDLERS.get(event_type) if isinstance(event_type, str) else None
    if handler is None:
        current_app.logger.warning("Unhandled webhook event type: %s", event_type)
        return jsonify({"message": "Event type not handled"}), 400

    handle, message = handler
    current_app.logger.info("Handling %s event", event_type)
    s = db_session()
    try:
        handle(s, event.get("data") or {})
        s.commit()
    except Exception:
        s.rollback()
        current_app.logger.exception("Webhook handler failed for %s (svix-id=%s)", event_type, heads.get("svix-id"))
        return jsonify({"message": "Internal Server Error"}), 500

    return jsonify({"message": message}), 201
