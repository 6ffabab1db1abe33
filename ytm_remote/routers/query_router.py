"""Free-text query routes for launcher-style clients."""

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ytm_remote.dependencies import get_query_service
from ytm_remote.models import ActionRequest, CommandResponse, ErrorResponse, QueryResult
from ytm_remote.security import verify_api_key
from ytm_remote.services.query_service import QueryService

router = APIRouter(dependencies=[Depends(verify_api_key)])
limiter = Limiter(key_func=get_remote_address)


@router.get("", response_model=list[QueryResult])
@limiter.limit("120/minute")
async def query(
    request: Request,
    q: str = Query(default="", description='Query text, e.g. "vol +10" or "seek 1:30"'),
    service: QueryService = Depends(get_query_service),
):
    """Ranked results for the query, highest score first.

    An empty or unknown query lists the current track and common controls.
    """
    return service.query(q)


@router.post(
    "/execute",
    response_model=CommandResponse,
    responses={400: {"model": ErrorResponse, "description": "Unknown action"}},
)
@limiter.limit("60/minute")
async def execute(
    request: Request,
    body: ActionRequest,
    service: QueryService = Depends(get_query_service),
):
    """Run the action of a query result."""
    sent = await service.execute(body.action, body.data)
    return CommandResponse(action=body.action, sent=sent)
