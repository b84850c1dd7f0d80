"""
Raw rows (database or mock data) -> API shapes.

Chat session rows come from several widget versions, so the same value can
live under different column names; normalize_chat_session folds them into one
shape and derives duration, totals, browser/os and referrer fields.
"""

import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from notsoai.utils.dates import parse_timestamp, to_iso

_LAST_OCTET = re.compile(r"\.\d+$")


def _first(raw: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default


def _split_name_version(value: Optional[str]):
    parts = (value or "").split(" ")
    name = parts[0] or None
    version = " ".join(parts[1:]) or None
    return name, version


def _referrer_domain(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def normalize_chat_session(raw: Dict[str, Any]) -> Dict[str, Any]:
    started_at = _first(raw, "session_started_at", "session_start") or raw.get("created_at")
    ended_at = _first(raw, "session_ended_at", "session_end")

    start = parse_timestamp(started_at)
    end = parse_timestamp(ended_at)
    duration = round((end - start).total_seconds()) if start and end else None

    user_messages = _first(raw, "total_user_messages", "user_messages", default=0)
    assistant_messages = _first(raw, "total_bot_messages", "assistant_messages", default=0)
    total_messages = _first(raw, "total_messages", default=user_messages + assistant_messages)

    browser_name, browser_version = _split_name_version(raw.get("browser"))
    os_name, os_version = _split_name_version(raw.get("os"))

    ip_address = raw.get("ip_address") or None
    device_type = raw.get("device_type") or None

    return {
        "id": raw.get("id"),
        "mascot_slug": raw.get("mascot_slug") or raw.get("mascot_id"),
        "client_slug": raw.get("client_slug") or raw.get("client_id"),
        "domain": raw.get("domain") or None,
        "user_id": raw.get("user_id") or None,
        "session_started_at": to_iso(started_at),
        "session_ended_at": to_iso(ended_at),
        "first_message_at": to_iso(raw.get("first_message_at")),
        "last_message_at": to_iso(raw.get("last_message_at")),
        "ip_address": ip_address,
        "is_dev": bool(raw.get("is_dev")),
        "user_agent": raw.get("user_agent") or None,
        "visitor_ip_hash": _LAST_OCTET.sub(".xxx", ip_address) if ip_address else None,
        "visitor_country": raw.get("country") or raw.get("visitor_country") or None,
        "visitor_city": raw.get("city") or raw.get("visitor_city") or None,
        "device_type": device_type,
        "browser_name": browser_name,
        "browser_version": browser_version,
        "os_name": os_name,
        "os_version": os_version,
        "is_mobile": (device_type or "").lower() == "mobile",
        "widget_version": raw.get("widget_version") or None,
        "referrer_url": raw.get("referrer_url") or None,
        "referrer_domain": _referrer_domain(raw.get("referrer_url")),
        "landing_page_url": raw.get("page_url") or None,
        "total_messages": total_messages,
        "user_messages": user_messages,
        "assistant_messages": assistant_messages,
        "total_tokens": _first(raw, "total_tokens", default=0),
        "input_tokens": _first(raw, "total_prompt_tokens", default=0),
        "output_tokens": _first(raw, "total_completion_tokens", default=0),
        "total_cost_usd": raw.get("total_cost_usd"),
        "total_cost_eur": _first(raw, "total_cost_eur", default=0),
        "average_response_time_ms": raw.get("average_response_time_ms"),
        "session_duration_seconds": duration,
        "status": "active" if raw.get("is_active") else "ended",
        "easter_eggs_triggered": _first(raw, "easter_eggs_triggered", default=0),
        "created_at": to_iso(raw.get("created_at") or started_at),
        "updated_at": to_iso(raw.get("updated_at") or raw.get("created_at") or started_at),
        "full_transcript": raw.get("full_transcript") or None,
    }


def map_analysis(raw: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if raw is None:
        return None
    return {
        "session_id": raw.get("session_id"),
        "mascot_slug": raw.get("mascot_slug"),
        "language": raw.get("language"),
        "sentiment": raw.get("sentiment"),
        "escalated": bool(raw.get("escalated")),
        "category": raw.get("category"),
        "questions": raw.get("questions") or [],
        "unanswered_questions": raw.get("unanswered_questions") or [],
        "summary": raw.get("summary"),
        "session_outcome": raw.get("session_outcome"),
        "resolution_status": raw.get("resolution_status"),
        "engagement_level": raw.get("engagement_level"),
        "conversation_type": raw.get("conversation_type"),
        "created_at": to_iso(raw.get("created_at")),
        "raw_response": raw.get("raw_response"),
    }


def map_client(raw: Dict[str, Any]) -> Dict[str, Any]:
    # credentials never leave this layer
    return {
        "id": raw["id"],
        "slug": raw.get("slug") or raw["id"],
        "name": raw.get("name"),
        "email": raw.get("email") or None,
        "defaultWorkspaceId": raw.get("default_workspace_id") or None,
        "isDemo": bool(raw.get("is_demo")),
        "status": raw.get("status"),
        "createdAt": to_iso(raw.get("created_at")),
    }


def map_user(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": raw["id"],
        "clientId": raw.get("client_id"),
        "name": raw.get("name"),
        "email": raw.get("email"),
        "role": raw.get("role"),
        "status": raw.get("status"),
        "createdAt": to_iso(raw.get("created_at")),
    }


def map_conversation(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": raw["id"],
        "assistantId": raw.get("assistant_id"),
        "clientId": raw.get("client_id"),
        "userId": raw.get("user_id"),
        "userName": raw.get("user_name"),
        "status": raw.get("status"),
        "channel": raw.get("channel"),
        "intent": raw.get("intent"),
        "preview": raw.get("preview") or "",
        "messages": raw.get("messages") or 0,
        "startedAt": to_iso(raw.get("started_at")),
        "endedAt": to_iso(raw.get("ended_at")),
    }


def map_message(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": raw["id"],
        "conversationId": raw.get("conversation_id"),
        "sender": raw.get("sender"),
        "senderName": raw.get("sender_name"),
        "content": raw.get("content") or "",
        "timestamp": to_iso(raw.get("timestamp")),
    }
