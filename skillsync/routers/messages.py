"""
Messages Router for the SkillSync backend.

Endpoints:
- GET /messages - Caller's direct messages
- POST /messages - Send a direct message
- POST /messages/{message_id}/read - Mark a received message as read
- GET /messages/groups/{group_id} - Group chat history
- POST /messages/groups/{group_id} - Post to a group chat
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session, aliased, joinedload

from ..database import get_db
from ..db_models import DBMessage, DBUser
from ..dependencies import get_current_user
from ..models import GroupMessageCreate, MessageCreate, MessageOut

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/messages",
    tags=["messages"],
    responses={401: {"description": "Unauthorized"}},
)


def _message_out(message: DBMessage) -> MessageOut:
    return MessageOut(
        id=message.id,
        sender_id=message.sender_id,
        sender_name=message.sender.name if message.sender else None,
        receiver_id=message.receiver_id,
        receiver_name=message.receiver.name if message.receiver else None,
        group_id=message.group_id,
        content=message.content,
        sent_at=message.sent_at,
        read_at=message.read_at,
    )


@router.get("", response_model=List[MessageOut])
async def list_messages(
    search: Optional[str] = None,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Direct messages sent or received by the caller, newest first."""
    query = (
        db.query(DBMessage)
        .options(joinedload(DBMessage.sender), joinedload(DBMessage.receiver))
        .filter(
            DBMessage.group_id.is_(None),
            or_(DBMessage.sender_id == current_user.id, DBMessage.receiver_id == current_user.id)
        )
    )

    if search:
        pattern = f"%{search.strip()}%"
        sender = aliased(DBUser)
        receiver = aliased(DBUser)
        query = (
            query.join(sender, sender.id == DBMessage.sender_id)
            .outerjoin(receiver, receiver.id == DBMessage.receiver_id)
            .filter(or_(
                DBMessage.content.ilike(pattern),
                sender.name.ilike(pattern),
                receiver.name.ilike(pattern),
            ))
        )

    return [_message_out(m) for m in query.order_by(DBMessage.sent_at.desc()).all()]


@router.post("", response_model=MessageOut)
async def send_message(
    body: MessageCreate,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    receiver = db.query(DBUser).filter(DBUser.id == body.receiver_id).first()
    if not receiver:
        raise HTTPException(status_code=404, detail="Receiver not found")

    message = DBMessage(sender_id=current_user.id, receiver_id=receiver.id, content=body.content)
    db.add(message)
    db.commit()
    db.refresh(message)

    logger.info(f"Message {message.id} sent from {current_user.id} to {receiver.id}")
    return _message_out(message)


# =============================================================================
# Group Chat
# =============================================================================

@router.get("/groups/{group_id}", response_model=List[MessageOut])
async def list_group_messages(
    group_id: str,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    messages = (
        db.query(DBMessage)
        .options(joinedload(DBMessage.sender))
        .filter(DBMessage.group_id == group_id)
        .order_by(DBMessage.sent_at.asc())
        .all()
    )
    return [_message_out(m) for m in messages]


@router.post("/groups/{group_id}", response_model=MessageOut)
async def post_group_message(
    group_id: str,
    body: GroupMessageCreate,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    message = DBMessage(sender_id=current_user.id, group_id=group_id, content=body.content)
    db.add(message)
    db.commit()
    db.refresh(message)
    return _message_out(message)

# =============================================================================
# Read Receipts
# =============================================================================

# Registered after the group routes so /groups/read reaches the group handlers
@router.post("/{message_id}/read", response_model=MessageOut)
async def mark_read(
    message_id: str,
    current_user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    message = db.query(DBMessage).filter(DBMessage.id == message_id).first()
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    if message.receiver_id != current_user.id:
        raise HTTPException(status_code=403, detail="Only the receiver can mark a message as read")

    if message.read_at is None:
        message.read_at = datetime.utcnow()
        db.commit()
        db.refresh(message)

    return _message_out(message)
