from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from redis import Redis as RedisClient

from app.config import CRON_SECRET
from app.dependencies import get_alert_engine, get_redis_client
from app.schemas.alert import AlertCheckResponse
from app.services.alert_engine import AlertEngine
from app.tasks.alert_monitoring import run_alert_check
from app.utils.logger import create_logger

logger = create_logger(__name__)
router = APIRouter()


def get_cron_secret() -> Optional[str]:
    """
    Provides the shared secret expected from the external scheduler.

    Returns:
        Optional[str]: The secret, or None when the check is open.
    """
    return CRON_SECRET


@router.post(
    "/alerts/check",
    tags=["Alerts"],
    summary="Check all active alerts",
    description=(
        "Evaluates every active and enabled alert against current quotes and "
        "creates notifications for the ones that fire."
    ),
    response_model=AlertCheckResponse,
    responses={
        200: {
            "description": "Alert check completed.",
            "content": {
                "application/json": {
                    "example": {"message": "Alert check completed", "checked": 12, "triggered": 1}
                }
            },
        },
        401: {"description": "Missing or invalid cron secret."},
        500: {"description": "Alerts could not be loaded."},
    },
)
def check_alerts(
    authorization: Optional[str] = Header(None),
    cron_secret: Optional[str] = Depends(get_cron_secret),
    engine: AlertEngine = Depends(get_alert_engine),
    redis_client: RedisClient = Depends(get_redis_client),
):
    """
    Runs one alert evaluation pass.

    Args:
        authorization (str): ``Bearer <CRON_SECRET>`` when a secret is configured.
        cron_secret (str): Expected secret.
        engine (AlertEngine): Process-wide alert engine.
        redis_client (RedisClient): Holds the run lock shared with the Celery task.

    Returns:
        AlertCheckResponse: checked / triggered counters (zero when another
        pass holds the run lock).

    Raises:
        HTTPException: 401 on a bad secret, 500 if the alert set cannot be loaded.
    """
    if cron_secret and authorization != f"Bearer {cron_secret}":
        logger.warning("Unauthorized alert check attempt")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    try:
        result = run_alert_check(engine, redis_client)
    except Exception as e:
        logger.error(f"Error in alert check process: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check alerts",
        )

    if result["status"] == "skipped":
        return AlertCheckResponse(message="Alert check already running", checked=0, triggered=0)

    return AlertCheckResponse(
        message="Alert check completed", checked=result["checked"], triggered=result["triggered"]
    )
