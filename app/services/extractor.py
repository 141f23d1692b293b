# filename: app/services/extractor.py
"""
AI-based transaction extraction from email text.

Public API:
    extract_transaction(email_body) -> ExtractedTransaction | None
    generate_demo_emails(count) -> list[str]

Contract:
    - The model answers `null` for emails that are not transactions -> None.
    - Empty output, non-JSON output, or JSON missing required fields raises
      ExtractionError. So does a missing API key or any SDK failure.
    Scan callers catch ExtractionError per email.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError

import config
from app.errors import ExtractionError

logger = logging.getLogger(__name__)

_JSON_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)

DEMO_SPLIT = "---SPLIT---"

SUGGESTED_CATEGORIES = ["Food", "Transport", "Shopping", "Utilities", "Subscription", "Other"]


class ExtractedTransaction(BaseModel):
    id: str = ""
    merchant: str
    amount: float = Field(allow_inf_nan=False)
    currency: str
    date: str
    category: str
    summary: str

    def as_fields(self) -> dict:
        return self.model_dump(exclude={"id"})


def _strip_json_fences(s: str) -> str:
    # Removes leading/trailing ```json fences if the model includes them.
    return _JSON_FENCE_RE.sub("", s).strip()


def _openai_client():
    """
    Create an OpenAI client, or raise ExtractionError when no key is configured.
    """
    if not config.OPENAI_API_KEY:
        raise ExtractionError("OpenAI API key not configured")

    from openai import OpenAI

    return OpenAI(api_key=config.OPENAI_API_KEY)


def _response_text(resp: Any) -> str:
    return (getattr(resp, "output_text", "") or "").strip()


def _build_prompt(email_body: str) -> list[dict]:
    developer = (
        "You are a specialized financial parser. You extract precise data from unstructured email text.\n"
        "If the email contains a financial transaction (receipt, invoice, payment confirmation), "
        "return ONLY valid JSON (no markdown, no extra text) with this schema:\n"
        '{ "merchant": string, "amount": number, "currency": string, '
        '"date": string, "category": string, "summary": string }\n'
        "merchant: name of the merchant or service provider.\n"
        "amount: total transaction amount as a positive number.\n"
        "currency: ISO currency code (e.g. USD, EUR).\n"
        "date: date of the transaction in YYYY-MM-DD format.\n"
        f"category: one of {', '.join(SUGGESTED_CATEGORIES)}.\n"
        "summary: short description of items purchased (max 5 words).\n"
        "If the email is NOT a transaction, return exactly: null\n"
    )
    return [
        {"role": "developer", "content": developer},
        {"role": "user", "content": f'Email Content:\n"""\n{email_body}\n"""'},
    ]


def parse_extraction(text: str) -> Optional[ExtractedTransaction]:
    """
    Turn raw model output into an ExtractedTransaction, None, or an error.
    """
    if not text:
        raise ExtractionError("Model returned no output")

    cleaned = _strip_json_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Model output is not JSON: {e}") from e

    if data is None or data == {}:
        return None
    if not isinstance(data, dict):
        raise ExtractionError(f"Model output is not an object: {type(data).__name__}")

    try:
        tx = ExtractedTransaction.model_validate(data)
    except ValidationError as e:
        raise ExtractionError(f"Model output does not match schema: {e.error_count()} error(s)") from e

    tx.id = uuid.uuid4().hex[:8]
    return tx


def extract_transaction(email_body: str) -> Optional[ExtractedTransaction]:
    """
    Ask the model for the transaction in one email.
    """
    client = _openai_client()

    try:
        resp = client.responses.create(
            model=config.EXTRACTION_MODEL,
            input=_build_prompt(email_body),
        )
    except Exception as e:
        raise ExtractionError(f"Failed to extract transaction from email: {e}") from e

    return parse_extraction(_response_text(resp))


def split_demo_emails(text: str) -> List[str]:
    return [chunk.strip() for chunk in (text or "").split(DEMO_SPLIT) if chunk.strip()]


def generate_demo_emails(count: Optional[int] = None) -> List[str]:
    """
    Demo mode: have the model write `count` fake receipt emails.
    """
    count = count or config.DEMO_EMAIL_COUNT
    client = _openai_client()

    prompt = (
        f"Generate {count} different realistic short email bodies for transactions. "
        "Include Uber, a restaurant, a software subscription, an amazon purchase, and a utility bill. "
        "Vary the dates slightly within the current month. "
        f"Just return the email bodies separated by '{DEMO_SPLIT}'."
    )

    try:
        resp = client.responses.create(model=config.DEMO_MODEL, input=prompt)
    except Exception as e:
        raise ExtractionError(f"Failed to generate demo emails: {e}") from e

    emails = split_demo_emails(_response_text(resp))
    logger.info("[extract] generated %d demo email(s)", len(emails))
    return emails
