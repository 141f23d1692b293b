# app/routes_dashboard.py

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from models import Transaction
from .deps import get_db, ok, require_user_id
from .routes_expenses import filtered_transactions_query

router = APIRouter()


@router.get("/expenses/summary")
def expenses_summary(
    user_id: Optional[str] = Query(None, alias="userId"),
    date_filter: Optional[str] = Query(None, alias="dateFilter"),
    db: Session = Depends(get_db),
):
    """
    Totals for the dashboard cards: income, expenses, net, and spending by category.
    Amounts are magnitudes, so `type` decides which side a row counts on.
    """
    user_id = require_user_id(user_id)

    base = filtered_transactions_query(db, user_id, date_filter)
    criteria = base.whereclause

    is_income = Transaction.type == "income"

    income_total, expense_total, count = (
        db.query(
            func.coalesce(func.sum(case((is_income, Transaction.amount), else_=0.0)), 0.0),
            func.coalesce(func.sum(case((is_income, 0.0), else_=Transaction.amount)), 0.0),
            func.count(Transaction.id),
        )
        .filter(criteria)
        .one()
    )

    # Spending by category (expenses only)
    spent = func.sum(Transaction.amount)
    rows = (
        db.query(Transaction.category.label("category"), spent.label("total"))
        .filter(criteria, Transaction.type != "income")
        .group_by(Transaction.category)
        .order_by(spent.desc(), Transaction.category)
        .all()
    )

    income_total = float(income_total)
    expense_total = float(expense_total)

    return ok(
        {
            "incomeTotal": income_total,
            "expenseTotal": expense_total,
            "net": income_total - expense_total,
            "count": int(count),
            "byCategory": [{"category": r.category, "total": float(r.total)} for r in rows],
        }
    )
