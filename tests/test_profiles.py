"""
Test profile directory and career history endpoints.
"""


def test_list_profiles_paginates_and_sorts(client, create_user, auth_headers):
    viewer = create_user("Zed", department="Sales")
    for name in ("Alice", "Bob", "Carol"):
        create_user(name, department="Engineering")

    response = client.get(
        "/profiles",
        params={"page": 1, "page_size": 2, "sort_field": "name"},
        headers=auth_headers(viewer),
    )

    assert response.status_code == 200
    data = response.json()
    assert [u["name"] for u in data["data"]] == ["Alice", "Bob"]
    assert data["count"] == 4
    assert data["total_pages"] == 2
    assert data["departments"] == ["Engineering", "Sales"]

    page_two = client.get(
        "/profiles",
        params={"page": 2, "page_size": 2, "sort_field": "name"},
        headers=auth_headers(viewer),
    ).json()
    assert [u["name"] for u in page_two["data"]] == ["Carol", "Zed"]


def test_list_profiles_search_and_filter(client, create_user, auth_headers):
    viewer = create_user("Viewer", department="Sales")
    create_user("Hanako Sato", department="Engineering", email="hanako@acme-corp.com")
    create_user("Jiro Sato", department="Sales")

    headers = auth_headers(viewer)
    by_name = client.get("/profiles", params={"search": "sato"}, headers=headers).json()
    assert by_name["count"] == 2

    by_email = client.get("/profiles", params={"search": "HANAKO@"}, headers=headers).json()
    assert [u["name"] for u in by_email["data"]] == ["Hanako Sato"]

    filtered = client.get(
        "/profiles",
        params={"search": "sato", "department": "Sales", "sort_direction": "desc"},
        headers=headers,
    ).json()
    assert [u["name"] for u in filtered["data"]] == ["Jiro Sato"]


def test_list_profiles_rejects_bad_sort_field(client, create_user, auth_headers):
    viewer = create_user()
    response = client.get("/profiles", params={"sort_field": "password"}, headers=auth_headers(viewer))
    assert response.status_code == 422


def test_get_profile_not_found(client, create_user, auth_headers):
    viewer = create_user()
    assert client.get("/profiles/missing", headers=auth_headers(viewer)).status_code == 404


def test_update_own_profile_merges_profile_data(client, create_user, auth_headers):
    user = create_user("Alice")

    response = client.put(
        f"/profiles/{user.id}",
        json={"position": "Staff Engineer", "profile_data": {"bio": "Distributed systems", "career": {"x": 1}}},
        headers=auth_headers(user),
    )
    assert response.status_code == 200
    assert response.json()["position"] == "Staff Engineer"

    response = client.put(
        f"/profiles/{user.id}",
        json={"profile_data": {"interests": ["ml"]}},
        headers=auth_headers(user),
    )
    profile_data = response.json()["profile_data"]
    assert profile_data["bio"] == "Distributed systems"
    assert profile_data["interests"] == ["ml"]
    assert "career" not in profile_data


def test_update_other_profile_requires_user_management(client, create_user, auth_headers):
    alice = create_user("Alice")
    bob = create_user("Bob")
    manager = create_user("Manager", user_management=True)

    assert client.put(f"/profiles/{bob.id}", json={"name": "Robert"}, headers=auth_headers(alice)).status_code == 403

    response = client.put(f"/profiles/{bob.id}", json={"name": "Robert"}, headers=auth_headers(manager))
    assert response.status_code == 200
    assert response.json()["name"] == "Robert"


def test_update_profile_email_must_be_unique(client, create_user, auth_headers):
    alice = create_user("Alice", email="alice@acme-corp.com")
    create_user("Bob", email="bob@acme-corp.com")

    response = client.put(
        f"/profiles/{alice.id}",
        json={"email": "BOB@acme-corp.com"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 400

# =============================================================================
# Career History
# =============================================================================

def test_career_history_entries(client, create_user, auth_headers):
    user = create_user("Alice")
    headers = auth_headers(user)

    assert client.get(f"/profiles/{user.id}/career", headers=headers).json() == {
        "work_history": [], "certifications": [], "trainings": [],
    }

    client.post(
        f"/profiles/{user.id}/career/work-history",
        json={"company": "Acme", "position": "Engineer", "start_date": "2020-04-01"},
        headers=headers,
    )
    client.post(
        f"/profiles/{user.id}/career/certifications",
        json={"name": "AWS Solutions Architect", "issuer": "AWS"},
        headers=headers,
    )
    response = client.post(
        f"/profiles/{user.id}/career/trainings",
        json={"name": "Leadership 101"},
        headers=headers,
    )

    assert response.status_code == 200
    career = response.json()
    assert career["work_history"][0]["company"] == "Acme"
    assert "id" in career["work_history"][0]
    assert career["certifications"][0]["issuer"] == "AWS"
    assert career["trainings"][0]["name"] == "Leadership 101"


def test_career_entry_for_other_user_is_forbidden(client, create_user, auth_headers):
    alice = create_user("Alice")
    bob = create_user("Bob")

    response = client.post(
        f"/profiles/{bob.id}/career/trainings",
        json={"name": "Sneaky"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 403


def test_career_entry_validation(client, create_user, auth_headers):
    user = create_user()
    response = client.post(
        f"/profiles/{user.id}/career/work-history",
        json={"company": "", "position": "Engineer", "start_date": "2020-01-01"},
        headers=auth_headers(user),
    )
    assert response.status_code == 422
