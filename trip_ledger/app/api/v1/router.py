"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from trip_ledger.app.api.v1.endpoints import transactions

router = APIRouter()

# Federated trip ledger over the Fixed and Ad-hoc stores
router.include_router(transactions.router)
