"""
Batch Router for the SkillSync backend.

Endpoints:
- POST /batch/skill-update-reminder - Email users whose skills are stale
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..db_models import DBUser
from ..dependencies import get_llm, get_mail_client, require_access
from ..external_clients import MailClient
from ..llm_providers import LLMProvider
from ..reminder_service import ReminderService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/batch",
    tags=["batch"],
    responses={401: {"description": "Unauthorized"}, 403: {"description": "Forbidden"}},
)


@router.post("/skill-update-reminder")
async def skill_update_reminder(
    current_user: DBUser = Depends(require_access("user_management")),
    db: Session = Depends(get_db),
    mail_client: MailClient = Depends(get_mail_client),
    llm: LLMProvider = Depends(get_llm)
):
    """
    Send skill update reminders.

    Individual mail failures are recorded in notification_logs and counted
    in `failed`; they do not fail the request.
    """
    try:
        return await ReminderService(db, mail_client, llm).send_reminders()
    except Exception as e:
        db.rollback()
        logger.error(f"Skill reminder batch failed: {e}")
        raise HTTPException(status_code=500, detail="Reminder process failed")
