# routes_root.py
"""
Root / basic endpoints (health).
"""

from fastapi import APIRouter

router = APIRouter()

API_VERSION = "1.0.0"


@router.get("/")
def read_root():
    """
    Simple health check endpoint.
    """
    return {
        "success": True,
        "message": "AutoExpense AI Backend API",
        "version": API_VERSION,
    }
