"""
Access-rights validation with an audit trail.

Rules, in order:
1. admin is granted everything
2. every requested flag must be true on the user
3. an optional LLM review may deny an otherwise granted request
Every decision is written to access_logs.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from .config import settings
from .db_models import DBAccessLog, DBUser
from .exceptions import ResourceNotFoundError
from .llm_providers import LLMProvider

logger = logging.getLogger(__name__)

ACCESS_REVIEW_PROMPT = (
    "You are an AI assistant that reviews access requests. Analyse the user's "
    "rights and the requested access and assess the security risk. Respond only "
    'with JSON: {"isValid": true|false, "reason": "..."}'
)


class AccessService:
    """Validate a user's access flags."""

    def __init__(self, db: Session, llm: Optional[LLMProvider] = None, ai_review: bool = None):
        self.db = db
        self.llm = llm
        self.ai_review = settings.ai_access_review if ai_review is None else ai_review

    def _log(self, user_id: str, required_access: List[str], granted: bool) -> None:
        self.db.add(DBAccessLog(user_id=user_id, access_type=list(required_access), granted=granted))
        self.db.commit()

    async def _review(self, user: DBUser, required_access: List[str]) -> Optional[str]:
        """Return a denial reason from the LLM, or None to keep the grant."""
        if not self.ai_review or self.llm is None:
            return None

        prompt = (
            f"User: {user.name}\n"
            f"Department: {user.department}\n"
            f"Requested access: {', '.join(required_access)}"
        )
        try:
            decision = await self.llm.generate_json(ACCESS_REVIEW_PROMPT, prompt)
        except Exception as e:
            logger.warning(f"Access review unavailable, keeping rule-based decision: {e}")
            return None

        if isinstance(decision, dict) and not decision.get("isValid"):
            return str(decision.get("reason") or "Access denied by security review")
        return None

    async def validate(self, user_id: str, required_access: List[str]) -> Dict[str, Any]:
        """
        Decide whether `user_id` holds every flag in `required_access`.

        Returns:
            Dictionary with has_access, message and, when granted, user_data

        Raises:
            ValueError: If required_access is empty
            ResourceNotFoundError: If the user does not exist
        """
        if not required_access:
            raise ValueError("required_access must not be empty")

        user = self.db.query(DBUser).filter(DBUser.id == user_id).first()
        if user is None:
            raise ResourceNotFoundError("User", user_id)

        rights = user.access_rights or {}
        user_data = {
            "id": user.id,
            "name": user.name,
            "department": user.department,
            "position": user.position,
        }

        if rights.get("admin") is True:
            self._log(user.id, required_access, True)
            return {
                "has_access": True,
                "message": "Access granted with administrator rights",
                "user_data": user_data,
            }

        missing = [flag for flag in required_access if rights.get(flag) is not True]
        if missing:
            logger.info(f"Access denied for {user.id}: missing {', '.join(missing)}")
            self._log(user.id, required_access, False)
            return {
                "has_access": False,
                "message": "You do not have permission to perform this operation",
            }

        denial = await self._review(user, required_access)
        if denial:
            logger.info(f"Access for {user.id} denied by review: {denial}")
            self._log(user.id, required_access, False)
            return {"has_access": False, "message": denial}

        self._log(user.id, required_access, True)
        return {
            "has_access": True,
            "message": "Access granted",
            "user_data": user_data,
        }
