"""
Tests for AccessService.validate.
"""

import pytest

from skillsync.access_service import AccessService
from skillsync.db_models import DBAccessLog, default_access_rights
from skillsync.exceptions import ResourceNotFoundError
from skillsync.llm_providers import MockLLMProvider
from skillsync.models import AccessRights


async def test_admin_is_granted_everything(db_session, create_user, mock_llm):
    admin = create_user("Root", admin=True)

    result = await AccessService(db_session, mock_llm).validate(admin.id, ["user_management", "idea_management"])

    assert result["has_access"] is True
    assert result["message"] == "Access granted with administrator rights"
    assert result["user_data"]["id"] == admin.id
    # Admin decisions skip the review
    assert mock_llm.calls == []


async def test_missing_flag_is_denied_and_logged(db_session, create_user, mock_llm):
    user = create_user(skill_management=True)

    result = await AccessService(db_session, mock_llm).validate(user.id, ["skill_management", "user_management"])

    assert result == {
        "has_access": False,
        "message": "You do not have permission to perform this operation",
    }
    log = db_session.query(DBAccessLog).one()
    assert log.granted is False
    assert log.access_type == ["skill_management", "user_management"]


async def test_held_flags_are_granted_when_review_is_unparseable(db_session, create_user, mock_llm):
    user = create_user(challenge_management=True)

    result = await AccessService(db_session, mock_llm, ai_review=True).validate(user.id, ["challenge_management"])

    assert result["has_access"] is True
    assert result["message"] == "Access granted"
    assert len(mock_llm.calls) == 1
    assert db_session.query(DBAccessLog).one().granted is True


async def test_review_can_deny(db_session, create_user):
    user = create_user(challenge_management=True)
    llm = MockLLMProvider('{"isValid": false, "reason": "Unusual request pattern"}')

    result = await AccessService(db_session, llm, ai_review=True).validate(user.id, ["challenge_management"])

    assert result == {"has_access": False, "message": "Unusual request pattern"}


async def test_review_without_verdict_denies(db_session, create_user):
    user = create_user(challenge_management=True)
    llm = MockLLMProvider('{"reason": "Needs manager sign-off"}')

    result = await AccessService(db_session, llm, ai_review=True).validate(user.id, ["challenge_management"])

    assert result == {"has_access": False, "message": "Needs manager sign-off"}
    assert db_session.query(DBAccessLog).one().granted is False


async def test_review_cannot_grant_missing_flags(db_session, create_user):
    user = create_user()
    llm = MockLLMProvider('{"isValid": true}')

    result = await AccessService(db_session, llm, ai_review=True).validate(user.id, ["admin"])

    assert result["has_access"] is False
    assert llm.calls == []


async def test_review_disabled(db_session, create_user):
    user = create_user(idea_management=True)
    llm = MockLLMProvider('{"isValid": false}')

    result = await AccessService(db_session, llm, ai_review=False).validate(user.id, ["idea_management"])

    assert result["has_access"] is True


async def test_failing_review_keeps_grant(db_session, create_user, failing_llm):
    user = create_user(idea_management=True)

    result = await AccessService(db_session, failing_llm, ai_review=True).validate(user.id, ["idea_management"])

    assert result["has_access"] is True


async def test_empty_request_is_rejected(db_session, create_user, mock_llm):
    user = create_user()
    with pytest.raises(ValueError):
        await AccessService(db_session, mock_llm).validate(user.id, [])


async def test_unknown_user(db_session, mock_llm):
    with pytest.raises(ResourceNotFoundError):
        await AccessService(db_session, mock_llm).validate("missing", ["admin"])


def test_default_access_rights_cover_every_flag():
    assert default_access_rights() == AccessRights().model_dump()
