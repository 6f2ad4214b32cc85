import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError

from api import errors
from auth.api_key import validate_api_key
from services.stats_service import USER_NOT_FOUND, StatsService, make_stats_service
from services.stats_types import ErrorResponse, GetStatsRequest, StatsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/consumer-app/stats", tags=["consumer-app"])


def get_stats_service() -> StatsService:
    return make_stats_service()


@router.get(
    "",
    response_model=StatsResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def get_consumer_stats(
    request: Request,
    user_id: Optional[str] = Query(default=None, alias="userId"),
    service: StatsService = Depends(get_stats_service),
):
    """Today's progress, current streak and weekly compliance for a consumer-app user."""
    try:
        if not validate_api_key(request):
            return errors.unauthorized()

        try:
            params = GetStatsRequest.model_validate({"userId": user_id})
        except ValidationError as e:
            return errors.invalid_request("Invalid request parameters", e.errors(include_url=False))

        result = await service.get_stats(str(params.userId))
        if not result.success:
            if result.error == USER_NOT_FOUND:
                return errors.not_found("User")
            return errors.internal_error(result.error)

        return result.data
    except Exception:
        logger.exception("Unexpected error in consumer stats route")
        return errors.internal_error()
