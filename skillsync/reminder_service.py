"""
Skill update reminder batch.

Finds users whose skills have not been touched for REMINDER_THRESHOLD_DAYS,
emails each of them and records every attempt in notification_logs.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from . import fallbacks
from .constants import (
    REMINDER_DEADLINE_DAYS,
    REMINDER_NOTIFICATION_TYPE,
    REMINDER_SUBJECT,
    REMINDER_THRESHOLD_DAYS,
)
from .db_models import DBNotificationLog, DBUser, DBUserSkill
from .exceptions import MailDeliveryError
from .external_clients import MailClient
from .llm_providers import LLMProvider, generate_with_fallback

logger = logging.getLogger(__name__)

USER_NAME_PLACEHOLDER = "{USER_NAME}"


class ReminderService:
    def __init__(self, db: Session, mail_client: MailClient, llm: Optional[LLMProvider] = None):
        self.db = db
        self.mail_client = mail_client
        self.llm = llm

    async def _email_template(self, now: datetime):
        prompt = (
            "Write a reminder email asking an employee to update their skill information.\n"
            "Include:\n"
            "- why regular skill updates matter\n"
            f"- that {REMINDER_THRESHOLD_DAYS} days have passed since the last update\n"
            "- the steps to update skills\n"
            f"- the deadline: {(now + timedelta(days=REMINDER_DEADLINE_DAYS)).strftime('%Y-%m-%d')}\n"
            f"Address the employee as {USER_NAME_PLACEHOLDER}."
        )
        return await generate_with_fallback(
            self.llm,
            "You write clear, polite business emails.",
            prompt,
            fallbacks.reminder_email_template(now),
        )

    async def send_reminders(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Run the reminder batch.

        Mail failures are recorded per user and never abort the batch.
        """
        now = now or datetime.utcnow()
        threshold = now - timedelta(days=REMINDER_THRESHOLD_DAYS)

        stale_user_ids = [
            row[0] for row in
            self.db.query(DBUserSkill.user_id)
            .filter(DBUserSkill.updated_at < threshold)
            .distinct()
            .all()
        ]

        if not stale_user_ids:
            logger.info("Skill reminder: no users need reminder")
            return {"message": "No users need reminder", "reminded_users": 0, "sent": 0, "failed": 0}

        users = self.db.query(DBUser).filter(DBUser.id.in_(stale_user_ids)).order_by(DBUser.name).all()
        template, fallback_used = await self._email_template(now)

        sent = failed = 0
        for user in users:
            text = template.replace(USER_NAME_PLACEHOLDER, user.name)
            try:
                await self.mail_client.send(user.email, REMINDER_SUBJECT, text)
            except MailDeliveryError as e:
                logger.error(f"Failed to send reminder to {user.email}: {e}")
                failed += 1
                self.db.add(DBNotificationLog(
                    user_id=user.id,
                    type=REMINDER_NOTIFICATION_TYPE,
                    status="failed",
                    content=text,
                    error_detail=str(e),
                ))
            else:
                sent += 1
                self.db.add(DBNotificationLog(
                    user_id=user.id,
                    type=REMINDER_NOTIFICATION_TYPE,
                    status="sent",
                    content=text,
                ))

        self.db.commit()
        logger.info(f"Skill reminder: {sent} sent, {failed} failed")

        return {
            "message": "Reminder process completed",
            "reminded_users": len(users),
            "sent": sent,
            "failed": failed,
            "fallback_used": fallback_used,
        }
