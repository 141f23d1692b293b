# routes_scan.py
"""
Routes for the inbox scan: emails -> LLM extraction -> dedup -> new transactions.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.deps import get_db, ok, require_user_id
from app.errors import ApiError
from app.schemas import ScanRequest, transaction_to_dict
from app.services import extractor, ingest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/expenses/scan")
def scan_inbox(
    payload: ScanRequest,
    db: Session = Depends(get_db),
):
    """
    Run one scan for payload.userId and return only the rows it inserted.

    Validation problems are 400s. Listing, generation, and database failures
    abort the scan with a 500; emails that fail extraction are skipped.
    """
    user_id = require_user_id(payload.user_id)

    try:
        emails = ingest.load_scan_emails(db, payload)

        if not emails:
            return ok([], message="No emails found")

        logger.info("[scan] processing %d email(s) for user %s", len(emails), user_id)
        inserted = ingest.ingest_emails(db, user_id, emails)

    except ApiError:
        raise
    except Exception as e:
        logger.exception("[scan] failed for user %s", user_id)
        raise ApiError(500, "Failed to scan inbox", details=str(e)) from e

    return ok(
        [transaction_to_dict(t) for t in inserted],
        message=f"Found {len(inserted)} new transaction(s)",
    )


@router.post("/emails/demo")
def demo_emails():
    """
    Debug endpoint: generate demo receipt emails without scanning or saving them.
    """
    try:
        emails = extractor.generate_demo_emails()
    except Exception as e:
        logger.exception("[scan] demo email generation failed")
        raise ApiError(500, "Failed to generate demo emails", details=str(e)) from e

    return ok(emails)
