"""Project scoping on the list endpoints."""

from __future__ import annotations


def _tags(response):
    return sorted(item["asset_tag"] for item in response.json()["items"])


def test_member_sees_only_member_projects(client, login):
    response = client.get("/assets", headers=login("uma.user@example.com"))

    assert response.status_code == 200
    assert _tags(response) == ["AST-0101"]
    assert response.json()["total_count"] == 1


def test_multi_project_member_sees_all_member_projects(client, login):
    response = client.get("/assets", headers=login("mira.manager@example.com"))

    assert _tags(response) == ["AST-0001", "AST-0002", "AST-0101"]


def test_requesting_foreign_project_is_403(client, login, seeded):
    response = client.get(
        "/assets",
        headers=login("uma.user@example.com"),
        params={"project_id": seeded["projects"]["HQ"]},
    )

    assert response.status_code == 403


def test_requesting_member_project_narrows(client, login, seeded):
    response = client.get(
        "/assets",
        headers=login("mira.manager@example.com"),
        params={"project_id": seeded["projects"]["SITE-A"]},
    )

    assert _tags(response) == ["AST-0101"]


def test_admin_sees_everything_and_can_filter(client, login, seeded):
    headers = login("adam.admin@example.com")

    everything = client.get("/assets", headers=headers)
    port_only = client.get("/assets", headers=headers, params={"project_id": seeded["projects"]["PORT"]})

    assert everything.json()["total_count"] == 4
    assert _tags(port_only) == ["AST-0201"]


def test_no_membership_sees_nothing(client, login, seeded):
    headers = login("nadia.new@example.com")

    assert client.get("/assets", headers=headers).json()["items"] == []
    assert client.get("/employees", headers=headers).json()["total_count"] == 0
    assert client.get("/projects", headers=headers).json() == []
    assert client.get("/assets", headers=headers, params={"project_id": seeded["projects"]["HQ"]}).status_code == 403


def test_asset_outside_scope_looks_absent(client, login, api_sessionmaker):
    from sqlalchemy import select

    from itasset.models.inventory import Asset

    with api_sessionmaker() as db:
        hq_asset_id = db.scalars(select(Asset.id).where(Asset.asset_tag == "AST-0001")).one()

    assert client.get(f"/assets/{hq_asset_id}", headers=login("uma.user@example.com")).status_code == 404
    assert client.get(f"/assets/{hq_asset_id}", headers=login("mira.manager@example.com")).status_code == 200


def test_search_combines_with_scope(client, login):
    headers = login("mira.manager@example.com")

    response = client.get("/assets", headers=headers, params={"search": "lenovo"})

    assert _tags(response) == ["AST-0101"]


def test_other_scoped_lists(client, login):
    headers = login("uma.user@example.com")

    assert client.get("/employees", headers=headers).json()["total_count"] == 1
    assert client.get("/sim-cards", headers=headers).json()["total_count"] == 1
    assert client.get("/software-licenses", headers=headers).json()["total_count"] == 1
    assert client.get("/purchase-orders", headers=headers).json()["total_count"] == 0


def test_dashboard_counts_follow_scope(client, login):
    mira = client.get("/dashboard/stats", headers=login("mira.manager@example.com")).json()
    nadia = client.get("/dashboard/stats", headers=login("nadia.new@example.com")).json()
    sara = client.get("/dashboard/stats", headers=login("sara.super@example.com")).json()

    assert mira["total_assets"] == 3
    assert mira["total_projects"] == 2
    assert mira["total_purchase_orders"] == 1
    assert all(value == 0 for value in nadia.values())
    assert sara["total_projects"] == 3


def test_deleted_user_token_sees_no_rows(client, login, seeded):
    uma_id = seeded["users"]["uma.user@example.com"]
    uma = login("uma.user@example.com")

    assert client.delete(f"/admin/users/{uma_id}", headers=login("adam.admin@example.com")).status_code == 204

    # Signature still verifies; scope resolution finds no user.
    response = client.get("/assets", headers=uma)
    assert response.status_code == 200
    assert response.json()["items"] == []


def test_membership_change_applies_to_existing_token(client, login, seeded):
    uma_id = seeded["users"]["uma.user@example.com"]
    uma = login("uma.user@example.com")

    put = client.put(
        f"/users/{uma_id}/projects",
        headers=login("adam.admin@example.com"),
        json={"project_ids": [seeded["projects"]["PORT"]]},
    )

    assert put.status_code == 200
    assert _tags(client.get("/assets", headers=uma)) == ["AST-0201"]


def test_promotion_and_demotion_apply_to_existing_token(client, login, seeded):
    # Arrange
    uma_id = seeded["users"]["uma.user@example.com"]
    uma = login("uma.user@example.com")
    sara = login("sara.super@example.com")

    # Act / Assert: promoted, the same token sees every project
    assert client.put(f"/admin/users/{uma_id}", headers=sara, json={"role": "Admin"}).status_code == 200
    assert client.get("/assets", headers=uma).json()["total_count"] == 4

    # Demoted again, back to membership only
    assert client.put(f"/admin/users/{uma_id}", headers=sara, json={"role": "User"}).status_code == 200
    assert _tags(client.get("/assets", headers=uma)) == ["AST-0101"]


def test_deactivated_user_token_sees_no_rows(client, login, seeded, demo_password):
    mira_id = seeded["users"]["mira.manager@example.com"]
    mira = login("mira.manager@example.com")
    adam = login("adam.admin@example.com")

    deactivated = client.patch(f"/admin/users/{mira_id}/status", headers=adam, json={"is_active": False})

    assert deactivated.status_code == 200
    assert deactivated.json()["is_active"] is False
    assert client.get("/assets", headers=mira).json()["items"] == []
    assert client.get("/dashboard/stats", headers=mira).json()["total_assets"] == 0
    relogin = client.post("/auth/login", json={"email": "mira.manager@example.com", "password": demo_password})
    assert relogin.status_code == 401

    client.patch(f"/admin/users/{mira_id}/status", headers=adam, json={"is_active": True})
    assert client.get("/assets", headers=mira).json()["total_count"] == 3


def test_handler_session_enforces_scope_on_by_id_reads(client, login, api_sessionmaker):
    from sqlalchemy import select

    from itasset.models.inventory import Asset

    with api_sessionmaker() as db:
        asset_ids = dict(db.execute(select(Asset.asset_tag, Asset.id)).all())
    nadia = login("nadia.new@example.com")

    for asset_id in asset_ids.values():
        assert client.get(f"/assets/{asset_id}", headers=nadia).status_code == 404
