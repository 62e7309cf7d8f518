from fastapi import APIRouter

from leavedesk.api.balances import adjustment_router, employee_balance_router, employee_ledger_router
from leavedesk.api.holidays import holidays_router
from leavedesk.api.leaves import leaves_router

api_router = APIRouter()
api_router.include_router(leaves_router)
api_router.include_router(employee_balance_router)
api_router.include_router(employee_ledger_router)
api_router.include_router(adjustment_router)
api_router.include_router(holidays_router)
