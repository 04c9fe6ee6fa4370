"""
Test analytics, admin, batch and sync endpoints, plus /health.
"""

from datetime import datetime, timedelta

from skillsync import fallbacks
from skillsync.db_models import DBNotificationLog, DBSyncLog, DBUser
from skillsync.exceptions import ConfigurationError, HRSystemError
from skillsync.llm_providers import MockLLMProvider


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] in ("healthy", "degraded")
    assert "database" in data["dependencies"]
    assert "X-Request-ID" in response.headers
    assert response.headers["X-Content-Type-Options"] == "nosniff"

# =============================================================================
# ANALYTICS
# =============================================================================

def test_skill_gap_analysis_endpoint(client, create_user, give_skill, auth_headers):
    user = create_user(department="Engineering")
    give_skill(user, "Python", 2)

    response = client.post(
        "/analytics/skill-gap-analysis",
        json={"department_id": "Engineering"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["gap_analysis"][0]["gap"] == 3
    assert data["department_summary"][0]["critical_skills"] == ["Python"]
    assert data["ai_recommendations"] == MockLLMProvider.DEFAULT_RESPONSE


def test_skill_gap_analysis_requires_department(client, create_user, auth_headers):
    user = create_user()
    response = client.post("/analytics/skill-gap-analysis", json={}, headers=auth_headers(user))
    assert response.status_code == 422


def test_skill_map_endpoint_with_failing_llm(client, create_user, auth_headers, use_llm, failing_llm):
    user = create_user()
    use_llm(failing_llm)

    response = client.post("/analytics/skill-map-aggregate", json={}, headers=auth_headers(user))

    assert response.status_code == 200
    data = response.json()
    assert data["skill_map_data"] == fallbacks.sample_skill_map()
    assert data["ai_analysis"] == fallbacks.SKILL_MAP_ANALYSIS
    assert data["fallback_used"] is True


def test_synergy_analysis_endpoint(client, create_user, auth_headers):
    user = create_user()

    response = client.post(
        "/analytics/synergy-analysis",
        json={"period": "6months", "departments": ["Engineering"]},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["project_count"] == 0
    assert data["summary"]["productivity_rate"] == 0
    assert data["kpi_data"] == fallbacks.sample_kpi_chart()


def test_synergy_analysis_rejects_unknown_period(client, create_user, auth_headers):
    user = create_user()
    response = client.post("/analytics/synergy-analysis", json={"period": "2weeks"}, headers=auth_headers(user))
    assert response.status_code == 422


def test_talent_utilization_endpoint(client, create_user, give_skill, auth_headers):
    alice = create_user("Alice", department="Engineering")
    create_user("Bob", department="Sales")
    give_skill(alice, "Python", 5)

    response = client.get(
        "/analytics/talent-utilization",
        params={"department": "Engineering", "period": 3},
        headers=auth_headers(alice),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["total_employees"] == 2
    assert [t["name"] for t in data["talent_data"]] == ["Alice"]
    assert data["talent_data"][0]["skill_growth"] == 100
    assert len(data["talent_data"][0]["monthly_data"]) == 3

    too_long = client.get("/analytics/talent-utilization", params={"period": 36}, headers=auth_headers(alice))
    assert too_long.status_code == 422

# =============================================================================
# ADMIN
# =============================================================================

def test_admin_endpoints_require_admin(client, create_user, auth_headers):
    member = create_user(user_management=True)
    assert client.get("/admin/users", headers=auth_headers(member)).status_code == 403


def test_admin_lists_and_updates_access_rights(client, create_user, auth_headers):
    admin = create_user("Admin", admin=True)
    member = create_user("Member", department="Sales")

    users = client.get("/admin/users", params={"search": "sales"}, headers=auth_headers(admin)).json()
    assert [u["name"] for u in users] == ["Member"]

    response = client.put(
        f"/admin/users/{member.id}/access-rights",
        json={"user_management": True, "idea_management": True},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    rights = response.json()["access_rights"]
    assert rights["user_management"] is True
    assert rights["admin"] is False


def test_admin_cannot_revoke_own_admin(client, create_user, auth_headers):
    admin = create_user(admin=True)
    response = client.put(
        f"/admin/users/{admin.id}/access-rights",
        json={"admin": False},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400


def test_admin_update_unknown_user(client, create_user, auth_headers):
    admin = create_user(admin=True)
    response = client.put("/admin/users/missing/access-rights", json={}, headers=auth_headers(admin))
    assert response.status_code == 404

# =============================================================================
# BATCH & SYNC
# =============================================================================

def test_skill_update_reminder_endpoint(client, create_user, give_skill, auth_headers, mail_client, db_session):
    manager = create_user("Manager", user_management=True)
    stale = create_user("Stale", email="stale@acme-corp.com")
    give_skill(stale, "Python", 3, updated_at=datetime.utcnow() - timedelta(days=100))

    response = client.post("/batch/skill-update-reminder", headers=auth_headers(manager))

    assert response.status_code == 200
    data = response.json()
    assert data["sent"] == 1
    assert data["failed"] == 0
    assert [m["to"] for m in mail_client.sent] == ["stale@acme-corp.com"]
    assert db_session.query(DBNotificationLog).count() == 1


def test_skill_update_reminder_requires_user_management(client, create_user, auth_headers):
    member = create_user()
    assert client.post("/batch/skill-update-reminder", headers=auth_headers(member)).status_code == 403


def test_hr_sync_endpoint(client, create_user, auth_headers, hr_client, db_session):
    manager = create_user("Manager", user_management=True)
    hr_client.employees = [{
        "employeeId": "E200",
        "name": "New Hire",
        "department": "Support",
        "position": "Agent",
        "email": "new.hire@acme-corp.com",
        "hireDate": "2026-10-01",
    }]

    response = client.post("/sync/hr-data-sync", headers=auth_headers(manager))

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["results"]["inserted"] == 1
    assert db_session.query(DBUser).filter(DBUser.employee_id == "E200").count() == 1


def test_hr_sync_endpoint_upstream_failure(client, create_user, auth_headers, hr_client, db_session):
    manager = create_user(user_management=True)
    hr_client.error = HRSystemError("HTTP 500")

    response = client.post("/sync/hr-data-sync", headers=auth_headers(manager))

    assert response.status_code == 502
    assert db_session.query(DBSyncLog).one().status == "error"


def test_hr_sync_endpoint_not_configured(client, create_user, auth_headers, hr_client):
    manager = create_user(user_management=True)
    hr_client.error = ConfigurationError("HR_SYSTEM_API_URL", "not configured")

    assert client.post("/sync/hr-data-sync", headers=auth_headers(manager)).status_code == 503
