from __future__ import annotations

import uuid

from sqlalchemy.orm import Session

from app.models import Dataset, Team, TeamMember, TeamRole, Visibility


def _roles(team_json):
    return {m["id"]: m["role"] for m in team_json["members"]}


def test_creator_becomes_sole_owner(client, alice, bob, carol, create_team):
    team = create_team(alice, member_ids=[bob.id, carol.id, alice.id, bob.id])

    roles = _roles(team)
    assert roles == {str(alice.id): "OWNER", str(bob.id): "MEMBER", str(carol.id): "MEMBER"}
    assert list(roles.values()).count("OWNER") == 1
    assert team["name"] == "Acme"
    assert "createdAt" in team


def test_create_team_validates_name(client, alice):
    assert client.post("/teams", json={}, headers=alice.headers).status_code == 400
    assert client.post("/teams", json={"name": "   "}, headers=alice.headers).status_code == 400


def test_create_team_with_unknown_member_creates_nothing(client, db, alice):
    resp = client.post(
        "/teams",
        json={"name": "Ghosts", "memberIds": [str(uuid.uuid4())]},
        headers=alice.headers,
    )
    assert resp.status_code == 404
    assert db.query(Team).count() == 0


def test_owner_member_lifecycle(client, db, alice, bob, create_team):
    team = create_team(alice)
    team_id = team["id"]

    resp = client.post(f"/teams/{team_id}/members", json={"userId": str(bob.id)}, headers=alice.headers)
    assert resp.status_code == 200
    added = resp.json()["added"]
    assert [m["id"] for m in added] == [str(bob.id)]
    assert added[0]["role"] == "MEMBER"

    # A MEMBER cannot act as owner.
    resp = client.delete(f"/teams/{team_id}", headers=bob.headers)
    assert resp.status_code == 403

    resp = client.delete(f"/teams/{team_id}/members/{bob.id}", headers=alice.headers)
    assert resp.status_code == 200
    assert (
        db.query(TeamMember)
        .filter(TeamMember.team_id == uuid.UUID(team_id), TeamMember.user_id == bob.id)
        .count()
        == 0
    )

    resp = client.delete(f"/teams/{team_id}/members/{alice.id}", headers=alice.headers)
    assert resp.status_code == 400
    assert (
        db.query(TeamMember)
        .filter(TeamMember.team_id == uuid.UUID(team_id), TeamMember.user_id == alice.id)
        .count()
        == 1
    )


def test_owner_self_removal_rejected_with_other_members(client, db, alice, bob, carol, create_team):
    team = create_team(alice, member_ids=[bob.id, carol.id])
    resp = client.delete(f"/teams/{team['id']}/members/{alice.id}", headers=alice.headers)
    assert resp.status_code == 400
    assert db.query(TeamMember).filter(TeamMember.team_id == uuid.UUID(team["id"])).count() == 3


def test_duplicate_single_add_is_skipped(client, db, alice, bob, create_team):
    team = create_team(alice)
    url = f"/teams/{team['id']}/members"

    first = client.post(url, json={"userId": str(bob.id)}, headers=alice.headers)
    second = client.post(url, json={"userId": str(bob.id)}, headers=alice.headers)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json() == {"added": [], "skipped": [str(bob.id)]}
    assert (
        db.query(TeamMember)
        .filter(TeamMember.team_id == uuid.UUID(team["id"]), TeamMember.user_id == bob.id)
        .count()
        == 1
    )


def test_batch_add_skips_existing_and_repeated(client, db, alice, bob, carol, create_team):
    team = create_team(alice, member_ids=[bob.id])
    resp = client.post(
        f"/teams/{team['id']}/members",
        json={
            "members": [
                {"userId": str(bob.id)},
                {"userId": str(carol.id)},
                {"userId": str(carol.id)},
                {"userId": str(alice.id)},
            ]
        },
        headers=alice.headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [m["id"] for m in body["added"]] == [str(carol.id)]
    assert sorted(body["skipped"]) == sorted([str(bob.id), str(carol.id), str(alice.id)])

    rows = db.query(TeamMember).filter(TeamMember.team_id == uuid.UUID(team["id"])).all()
    assert len(rows) == 3
    owner_rows = [r for r in rows if r.role == TeamRole.OWNER]
    assert [r.user_id for r in owner_rows] == [alice.id]


class _RacedLookup:
    """Membership lookup that ran before another writer inserted the row."""

    def filter(self, *criteria):
        return self

    def first(self):
        return None


def test_concurrent_duplicate_add_is_skipped(client, db, alice, bob, carol, create_team, monkeypatch):
    team = create_team(alice, member_ids=[bob.id])
    real_query = Session.query

    def _query(self, *entities, **kwargs):
        if entities and entities[0] is TeamMember.id:
            return _RacedLookup()
        return real_query(self, *entities, **kwargs)

    monkeypatch.setattr(Session, "query", _query)
    resp = client.post(
        f"/teams/{team['id']}/members",
        json={"members": [{"userId": str(bob.id)}, {"userId": str(carol.id)}]},
        headers=alice.headers,
    )
    monkeypatch.undo()

    assert resp.status_code == 200
    body = resp.json()
    assert body["skipped"] == [str(bob.id)]
    assert [m["id"] for m in body["added"]] == [str(carol.id)]

    team_id = uuid.UUID(team["id"])
    bob_rows = db.query(TeamMember).filter(TeamMember.team_id == team_id, TeamMember.user_id == bob.id).count()
    assert bob_rows == 1
    assert db.query(TeamMember).filter(TeamMember.team_id == team_id).count() == 3


def test_add_member_body_must_pick_one_form(client, alice, bob, create_team):
    team = create_team(alice)
    url = f"/teams/{team['id']}/members"
    assert client.post(url, json={}, headers=alice.headers).status_code == 400
    both = {"userId": str(bob.id), "members": [{"userId": str(bob.id)}]}
    assert client.post(url, json=both, headers=alice.headers).status_code == 400


def test_add_unknown_user_is_404(client, alice, create_team):
    team = create_team(alice)
    resp = client.post(
        f"/teams/{team['id']}/members",
        json={"userId": str(uuid.uuid4())},
        headers=alice.headers,
    )
    assert resp.status_code == 404


def test_only_owner_manages_members(client, alice, bob, carol, create_team):
    team = create_team(alice, member_ids=[bob.id])
    url = f"/teams/{team['id']}/members"

    assert client.post(url, json={"userId": str(carol.id)}, headers=bob.headers).status_code == 403
    assert client.post(url, json={"userId": str(carol.id)}, headers=carol.headers).status_code == 403
    assert client.delete(f"{url}/{alice.id}", headers=bob.headers).status_code == 403


def test_remove_missing_member_is_404(client, alice, carol, create_team):
    team = create_team(alice)
    resp = client.delete(f"/teams/{team['id']}/members/{carol.id}", headers=alice.headers)
    assert resp.status_code == 404


def test_team_detail_requires_membership(client, alice, bob, carol, create_team):
    team = create_team(alice, member_ids=[bob.id])

    resp = client.get(f"/teams/{team['id']}", headers=bob.headers)
    assert resp.status_code == 200
    members = resp.json()["members"]
    assert {m["email"] for m in members} == {alice.email, bob.email}
    assert all("joinedAt" in m for m in members)

    assert client.get(f"/teams/{team['id']}", headers=carol.headers).status_code == 403
    assert client.get(f"/teams/{uuid.uuid4()}", headers=carol.headers).status_code == 403


def test_my_teams_lists_role_and_member_count(client, alice, bob, create_team):
    create_team(alice, name="Acme", member_ids=[bob.id])
    create_team(bob, name="Bobcats")

    teams = client.get("/teams/me", headers=bob.headers).json()["teams"]
    by_name = {t["name"]: t for t in teams}
    assert by_name["Acme"]["role"] == "MEMBER"
    assert by_name["Acme"]["memberCount"] == 2
    assert by_name["Bobcats"]["role"] == "OWNER"
    assert by_name["Bobcats"]["memberCount"] == 1

    assert [t["name"] for t in client.get("/teams/me", headers=alice.headers).json()["teams"]] == ["Acme"]


def test_disband_makes_team_datasets_private(client, db, alice, bob, create_team, create_dataset):
    team = create_team(alice, member_ids=[bob.id])
    shared = create_dataset(alice, name="Shared", visibility="TEAM", team_id=team["id"])
    public = create_dataset(alice, name="Open", visibility="PUBLIC")

    resp = client.delete(f"/teams/{team['id']}", headers=alice.headers)
    assert resp.status_code == 200
    assert resp.json()["datasetsMadePrivate"] == 1

    db.expire_all()
    assert db.get(Team, uuid.UUID(team["id"])) is None
    assert db.query(TeamMember).count() == 0

    ds = db.get(Dataset, uuid.UUID(shared["id"]))
    assert ds.visibility == Visibility.PRIVATE
    assert ds.team_id is None
    assert ds.owner_id == alice.id
    assert db.get(Dataset, uuid.UUID(public["id"])).visibility == Visibility.PUBLIC

    # The former member no longer sees the dataset, its owner still does.
    assert client.get(f"/datasets/{shared['id']}", headers=bob.headers).status_code == 403
    assert client.get(f"/datasets/{shared['id']}", headers=alice.headers).status_code == 200


def test_disband_unknown_team_is_403(client, alice):
    assert client.delete(f"/teams/{uuid.uuid4()}", headers=alice.headers).status_code == 403
