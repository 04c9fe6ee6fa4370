"""
Sync Router for the SkillSync backend.

Endpoints:
- POST /sync/hr-data-sync - Pull employees from the HR system
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..db_models import DBUser
from ..dependencies import get_hr_client, require_access
from ..exceptions import ConfigurationError, HRSystemError
from ..external_clients import HRSystemClient
from ..hr_sync_service import HRSyncService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/sync",
    tags=["sync"],
    responses={401: {"description": "Unauthorized"}, 403: {"description": "Forbidden"}},
)


@router.post("/hr-data-sync")
async def hr_data_sync(
    current_user: DBUser = Depends(require_access("user_management")),
    db: Session = Depends(get_db),
    hr_client: HRSystemClient = Depends(get_hr_client)
):
    """
    Synchronise users with the HR system.

    Raises:
        HTTPException 502: If the HR system cannot be read
        HTTPException 503: If the HR system is not configured
        HTTPException 500: If the database update fails
    """
    service = HRSyncService(db, hr_client)
    try:
        results = await service.sync()
    except HRSystemError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"HR sync failed: {e}")
        raise HTTPException(status_code=500, detail="HR synchronisation failed")

    return {
        "success": True,
        "message": "Synchronisation completed",
        "results": results,
    }
