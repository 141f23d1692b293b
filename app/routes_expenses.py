# routes_expenses.py
"""
CRUD routes for a user's transactions (/expenses).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from models import Transaction
from app.deps import get_db, ok, require_user_id
from app.errors import ApiError, BadRequestError, NotFoundError
from app.schemas import TransactionPayload, transaction_to_dict
from app.services.import_helpers import (
    apply_transaction_fields,
    build_transaction_from_dict,
    get_filter_range,
)

router = APIRouter()


def filtered_transactions_query(
    db: Session,
    user_id: str,
    date_filter: Optional[str] = None,
    categories: Optional[List[str]] = None,
    tx_type: Optional[str] = None,
):
    """
    Base query for one user's transactions with the optional list filters applied.
    Dates are compared as ISO strings, which also works for date-time values.
    """
    query = db.query(Transaction).filter(Transaction.user_id == user_id)

    try:
        date_range = get_filter_range(date_filter)
    except ValueError as e:
        raise BadRequestError(str(e)) from None

    if date_range:
        range_start, range_end_exclusive = date_range
        query = query.filter(
            Transaction.date >= range_start.isoformat(),
            Transaction.date < range_end_exclusive.isoformat(),
        )

    if categories:
        query = query.filter(or_(*[Transaction.category == c for c in categories]))

    if tx_type:
        if tx_type not in ("expense", "income"):
            raise BadRequestError("type must be 'expense' or 'income'")
        query = query.filter(Transaction.type == tx_type)

    return query


@router.get("/expenses")
def list_expenses(
    user_id: Optional[str] = Query(None, alias="userId"),
    date_filter: Optional[str] = Query(None, alias="dateFilter"),
    category: List[str] = Query(default=[]),
    tx_type: Optional[str] = Query(None, alias="type"),
    db: Session = Depends(get_db),
):
    user_id = require_user_id(user_id)

    transactions = (
        filtered_transactions_query(db, user_id, date_filter, category, tx_type)
        .order_by(Transaction.date.desc())
        .all()
    )
    return ok([transaction_to_dict(t) for t in transactions])


@router.get("/expenses/{tx_id}")
def get_expense(
    tx_id: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db),
):
    user_id = require_user_id(user_id)

    t = (
        db.query(Transaction)
        .filter(Transaction.id == tx_id, Transaction.user_id == user_id)
        .one_or_none()
    )
    if t is None:
        raise NotFoundError("Transaction not found")
    return ok(transaction_to_dict(t))


@router.put("/expenses/{tx_id}")
def put_expense(
    tx_id: str,
    payload: TransactionPayload,
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db),
):
    """
    Create the transaction under `tx_id` if this user has none, else overwrite it.
    """
    user_id = require_user_id(user_id)
    fields = payload.model_dump(by_alias=True)

    t = (
        db.query(Transaction)
        .filter(Transaction.id == tx_id, Transaction.user_id == user_id)
        .one_or_none()
    )

    if t is None:
        # Ids are global; another user's row keeps its id
        if db.query(Transaction.id).filter(Transaction.id == tx_id).first() is not None:
            raise ApiError(409, "Transaction id already in use")
        t = build_transaction_from_dict(fields, user_id, tx_id=tx_id)
        db.add(t)
    else:
        apply_transaction_fields(t, fields)

    db.commit()
    db.refresh(t)
    return ok(transaction_to_dict(t))


@router.delete("/expenses/{tx_id}")
def delete_expense(
    tx_id: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db),
):
    user_id = require_user_id(user_id)

    t = (
        db.query(Transaction)
        .filter(Transaction.id == tx_id, Transaction.user_id == user_id)
        .one_or_none()
    )
    if t is None:
        raise NotFoundError("Transaction not found")

    db.delete(t)
    db.commit()
    return ok(message="Transaction deleted")
