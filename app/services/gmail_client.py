# filename: app/services/gmail_client.py
"""
Gmail REST client used by inbox scans.

Public API:
    build_search_query(filters, start_date, end_date, period, today) -> str
    extract_body(payload) -> str
    fetch_recent_emails(access_token, max_results, ...) -> list[str]
    fetch_user_profile(access_token) -> dict

All calls are sequential: one list call, then one detail call per message.
A failed list call raises GmailError; a failed detail call skips that message.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import requests

import config
from app.errors import GmailError

logger = logging.getLogger(__name__)

DEFAULT_RECEIPT_QUERY = "subject:(receipt OR order OR invoice OR payment)"

PERIODS = ("today", "7days", "14days", "30days", "lastweek", "all")

_TAG_RE = re.compile(r"<[^>]*>?")


# -------------------------------------------------------------------
# Query building
# -------------------------------------------------------------------

def _gmail_date(d: date) -> str:
    # Gmail search wants YYYY/MM/DD
    return d.strftime("%Y/%m/%d")


def build_date_clause(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    period: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    """
    Explicit range wins over period. `before:` is exclusive in Gmail, so it
    points at the day after end_date.
    """
    if start_date or end_date:
        parts = []
        if start_date:
            parts.append(f"after:{_gmail_date(start_date)}")
        if end_date:
            parts.append(f"before:{_gmail_date(end_date + timedelta(days=1))}")
        return " ".join(parts)

    if not period or period == "all":
        return ""
    if period not in PERIODS:
        raise ValueError(f"Unknown scan period: {period!r}")

    today = today or date.today()
    if period == "today":
        return f"after:{_gmail_date(today)}"
    if period == "lastweek":
        return (
            f"after:{_gmail_date(today - timedelta(days=14))} "
            f"before:{_gmail_date(today - timedelta(days=7))}"
        )
    days = {"7days": 7, "14days": 14, "30days": 30}[period]
    return f"after:{_gmail_date(today - timedelta(days=days))}"


def build_filter_clauses(filters: Optional[Dict[str, Any]]) -> List[str]:
    """
    filters keys: from_email, subject_keywords, has_attachment, label, custom_query.
    custom_query replaces everything else. No usable filter -> receipt keywords.
    """
    filters = filters or {}

    custom = (filters.get("custom_query") or "").strip()
    if custom:
        return [custom]

    parts: List[str] = []

    sender = (filters.get("from_email") or "").strip()
    if sender:
        parts.append(f"from:{sender}")

    keywords = [k.strip() for k in (filters.get("subject_keywords") or "").split(",")]
    keywords = [k for k in keywords if k]
    if keywords:
        parts.append(f"subject:({' OR '.join(keywords)})")

    if filters.get("has_attachment"):
        parts.append("has:attachment")

    label = (filters.get("label") or "").strip()
    if label:
        parts.append(f"label:{label}")

    if not parts:
        parts.append(DEFAULT_RECEIPT_QUERY)

    return parts


def build_search_query(
    filters: Optional[Dict[str, Any]] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    period: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    parts = build_filter_clauses(filters)
    date_clause = build_date_clause(start_date, end_date, period, today)
    if date_clause:
        parts.append(date_clause)
    return " ".join(parts)


# -------------------------------------------------------------------
# Message bodies
# -------------------------------------------------------------------

def _decode_base64url(data: str) -> str:
    try:
        padded = data + "=" * (-len(data) % 4)
        return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError) as e:
        logger.debug("[gmail] could not decode body: %r", e)
        return ""


def _part_data(part: Dict[str, Any]) -> Optional[str]:
    return (part.get("body") or {}).get("data")


def extract_body(payload: Optional[Dict[str, Any]]) -> str:
    """
    Plain text if present, else HTML with tags stripped, else the first nested part.
    Returns "" when nothing can be extracted.
    """
    if not payload:
        return ""

    data = _part_data(payload)
    if data:
        return _decode_base64url(data)

    parts = payload.get("parts") or []
    if not parts:
        return ""

    text_part = next((p for p in parts if p.get("mimeType") == "text/plain"), None)
    html_part = next((p for p in parts if p.get("mimeType") == "text/html"), None)

    if text_part and _part_data(text_part):
        return _decode_base64url(_part_data(text_part))
    if html_part and _part_data(html_part):
        html = _decode_base64url(_part_data(html_part))
        return _TAG_RE.sub("", html)

    # multipart/alternative and friends nest one level deeper
    return extract_body(parts[0])


# -------------------------------------------------------------------
# HTTP calls
# -------------------------------------------------------------------

def _auth_headers(access_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


def fetch_recent_emails(
    access_token: str,
    max_results: int = 10,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    period: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
    session: Optional[requests.Session] = None,
) -> List[str]:
    """
    List up to `max_results` matching messages and return their text bodies.
    """
    http = session or requests
    query = build_search_query(filters, start_date, end_date, period)
    headers = _auth_headers(access_token)

    logger.info("[gmail] listing messages q=%r max=%d", query, max_results)

    try:
        resp = http.get(
            f"{config.GMAIL_API_BASE}/messages",
            params={"maxResults": max_results, "q": query},
            headers=headers,
            timeout=config.HTTP_TIMEOUT,
        )
    except requests.RequestException as e:
        raise GmailError(f"Failed to list messages: {e}") from e

    if not resp.ok:
        raise GmailError(f"Failed to list messages: {resp.status_code}")

    messages = (resp.json() or {}).get("messages") or []
    bodies: List[str] = []

    for msg in messages[:max_results]:
        msg_id = msg.get("id")
        if not msg_id:
            continue
        try:
            detail = http.get(
                f"{config.GMAIL_API_BASE}/messages/{msg_id}",
                headers=headers,
                timeout=config.HTTP_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.warning("[gmail] detail fetch failed for %s: %r", msg_id, e)
            continue

        if not detail.ok:
            logger.warning("[gmail] detail fetch for %s returned %s", msg_id, detail.status_code)
            continue

        body = extract_body((detail.json() or {}).get("payload"))
        if body:
            bodies.append(body)

    logger.info("[gmail] %d of %d messages had a readable body", len(bodies), len(messages))
    return bodies


def fetch_user_profile(access_token: str, session: Optional[requests.Session] = None) -> Dict[str, Any]:
    http = session or requests
    try:
        resp = http.get(
            config.USERINFO_URL,
            headers=_auth_headers(access_token),
            timeout=config.HTTP_TIMEOUT,
        )
    except requests.RequestException as e:
        raise GmailError(f"Failed to fetch user profile: {e}") from e

    if not resp.ok:
        raise GmailError(f"Failed to fetch user profile: {resp.status_code}")
    return resp.json()
