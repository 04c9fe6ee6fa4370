"""
Admin Router for the SkillSync backend.

Endpoints:
- GET /admin/users - Users with their access rights
- PUT /admin/users/{user_id}/access-rights - Replace a user's access rights

All endpoints require the admin flag.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..database import get_db
from ..db_models import DBUser
from ..dependencies import require_access
from ..models import AccessRights, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses={401: {"description": "Unauthorized"}, 403: {"description": "Forbidden"}},
)


@router.get("/users", response_model=List[UserOut])
async def list_users(
    search: Optional[str] = None,
    current_user: DBUser = Depends(require_access("admin")),
    db: Session = Depends(get_db)
):
    query = db.query(DBUser)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            DBUser.name.ilike(pattern),
            DBUser.email.ilike(pattern),
            DBUser.department.ilike(pattern),
        ))
    return [UserOut.model_validate(u) for u in query.order_by(DBUser.name).all()]


@router.put("/users/{user_id}/access-rights", response_model=UserOut)
async def update_access_rights(
    user_id: str,
    rights: AccessRights,
    current_user: DBUser = Depends(require_access("admin")),
    db: Session = Depends(get_db)
):
    """
    Replace a user's access rights.

    Raises:
        HTTPException 400: If an admin tries to drop their own admin flag
        HTTPException 404: If the user does not exist
    """
    user = db.query(DBUser).filter(DBUser.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.id == current_user.id and not rights.admin:
        raise HTTPException(status_code=400, detail="You cannot remove your own admin rights")

    user.access_rights = rights.model_dump()
    db.commit()
    db.refresh(user)

    logger.info(f"Access rights for {user.id} updated by {current_user.id}: {user.access_rights}")
    return UserOut.model_validate(user)
