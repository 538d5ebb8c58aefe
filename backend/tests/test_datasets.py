from __future__ import annotations

import uuid

from app.core.config import get_settings
from app.models import Dataset, Visibility, Visualization


def test_create_dataset_sets_caller_as_owner(client, alice, create_dataset):
    ds = create_dataset(alice, name="Sales", visibility="PUBLIC")
    assert ds["ownerId"] == str(alice.id)
    assert ds["owner"] == "Alice"
    assert ds["visibility"] == "PUBLIC"
    assert ds["teamId"] is None
    assert ds["team"] is None
    assert ds["visualizationCount"] == 0
    assert ds["fileName"] == "sales.csv"


def test_create_dataset_for_someone_else_is_forbidden(client, alice, bob):
    resp = client.post(
        "/datasets",
        json={
            "name": "Sales",
            "fileName": "sales.csv",
            "fileUrl": "https://files.example.com/sales.csv",
            "ownerId": str(bob.id),
            "visibility": "PRIVATE",
        },
        headers=alice.headers,
    )
    assert resp.status_code == 403


def test_create_dataset_team_rules(client, alice, bob, create_team):
    team = create_team(alice)
    base = {"name": "Sales", "fileName": "sales.csv", "fileUrl": "https://files.example.com/sales.csv"}

    no_team = client.post("/datasets", json={**base, "visibility": "TEAM"}, headers=alice.headers)
    assert no_team.status_code == 400

    unknown = client.post(
        "/datasets",
        json={**base, "visibility": "TEAM", "teamId": str(uuid.uuid4())},
        headers=alice.headers,
    )
    assert unknown.status_code == 400

    not_member = client.post(
        "/datasets",
        json={**base, "visibility": "TEAM", "teamId": team["id"]},
        headers=bob.headers,
    )
    assert not_member.status_code == 403

    stray_team = client.post(
        "/datasets",
        json={**base, "visibility": "PRIVATE", "teamId": team["id"]},
        headers=alice.headers,
    )
    assert stray_team.status_code == 400


def test_create_dataset_requires_fields(client, alice):
    resp = client.post("/datasets", json={"name": "Sales"}, headers=alice.headers)
    assert resp.status_code == 400


def test_only_owner_can_update(client, alice, bob, create_dataset):
    ds = create_dataset(alice, visibility="PUBLIC")
    resp = client.put(f"/datasets/{ds['id']}", json={"name": "Stolen"}, headers=bob.headers)
    assert resp.status_code == 403

    resp = client.put(f"/datasets/{uuid.uuid4()}", json={"name": "Ghost"}, headers=alice.headers)
    assert resp.status_code == 404


def test_update_to_team_without_team_id_is_rejected(client, db, alice, create_dataset):
    ds = create_dataset(alice, visibility="PRIVATE")

    resp = client.put(f"/datasets/{ds['id']}", json={"visibility": "TEAM"}, headers=alice.headers)
    assert resp.status_code == 400

    resp = client.put(
        f"/datasets/{ds['id']}",
        json={"visibility": "TEAM", "teamId": str(uuid.uuid4())},
        headers=alice.headers,
    )
    assert resp.status_code == 400

    db.expire_all()
    row = db.get(Dataset, uuid.UUID(ds["id"]))
    assert row.visibility == Visibility.PRIVATE
    assert row.team_id is None


def test_update_visibility_round_trip_clears_team(client, db, alice, create_team, create_dataset):
    team = create_team(alice)
    ds = create_dataset(alice, visibility="TEAM", team_id=team["id"])
    assert ds["teamId"] == team["id"]

    resp = client.put(f"/datasets/{ds['id']}", json={"description": "Q3"}, headers=alice.headers)
    assert resp.status_code == 200
    assert resp.json()["teamId"] == team["id"]
    assert resp.json()["description"] == "Q3"

    resp = client.put(f"/datasets/{ds['id']}", json={"visibility": "PUBLIC"}, headers=alice.headers)
    assert resp.status_code == 200
    assert resp.json()["visibility"] == "PUBLIC"
    assert resp.json()["teamId"] is None
    assert resp.json()["team"] is None


def test_update_ignores_fields_outside_allow_list(client, db, alice, bob, create_dataset):
    ds = create_dataset(alice, visibility="PRIVATE")
    resp = client.put(
        f"/datasets/{ds['id']}",
        json={"name": "Renamed", "ownerId": str(bob.id), "fileUrl": "/etc/passwd"},
        headers=alice.headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Renamed"
    assert body["ownerId"] == str(alice.id)
    assert body["fileUrl"] == ds["fileUrl"]


def test_update_rejects_null_name(client, alice, create_dataset):
    ds = create_dataset(alice)
    resp = client.put(f"/datasets/{ds['id']}", json={"name": None}, headers=alice.headers)
    assert resp.status_code == 400


def test_delete_dataset_cascades_visualizations(client, db, alice, bob, create_dataset, create_viz):
    ds = create_dataset(alice, visibility="PUBLIC")
    create_viz(alice, ds["id"])

    assert client.delete(f"/datasets/{ds['id']}", headers=bob.headers).status_code == 403

    resp = client.delete(f"/datasets/{ds['id']}", headers=alice.headers)
    assert resp.status_code == 200
    assert client.get(f"/datasets/{ds['id']}", headers=alice.headers).status_code == 404
    assert db.query(Visualization).count() == 0


def test_listing_shape_and_visualization_count(client, alice, create_team, create_dataset, create_viz):
    team = create_team(alice, name="Analysts")
    ds = create_dataset(alice, name="Sales", visibility="TEAM", team_id=team["id"])
    create_viz(alice, ds["id"], title="One")
    create_viz(alice, ds["id"], title="Two")

    rows = client.get("/datasets", params={"teamId": team["id"]}, headers=alice.headers).json()
    assert len(rows) == 1
    row = rows[0]
    assert set(row) == {
        "id",
        "name",
        "description",
        "createdAt",
        "team",
        "visibility",
        "visualizationCount",
        "owner",
        "fileName",
    }
    assert row["team"] == "Analysts"
    assert row["owner"] == "Alice"
    assert row["visualizationCount"] == 2


def test_listing_is_newest_first(client, alice, create_dataset):
    for name in ("First", "Second", "Third"):
        create_dataset(alice, name=name)
    names = [d["name"] for d in client.get("/datasets", headers=alice.headers).json()]
    assert names == ["Third", "Second", "First"]


def test_dataset_file_served_from_upload_dir(client, alice, bob, tmp_path, monkeypatch, create_dataset):
    monkeypatch.setattr(get_settings(), "upload_dir", str(tmp_path))
    (tmp_path / str(alice.id)).mkdir()
    (tmp_path / str(alice.id) / "sales.csv").write_text("month,revenue\njan,10\n")

    ds = create_dataset(alice, name="Sales", visibility="PRIVATE")
    resp = client.get(f"/datasets/{ds['id']}/file", headers=alice.headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.text == "month,revenue\njan,10\n"

    assert client.get(f"/datasets/{ds['id']}/file", headers=bob.headers).status_code == 403


def test_dataset_file_missing_on_disk_is_404(client, alice, tmp_path, monkeypatch, create_dataset):
    monkeypatch.setattr(get_settings(), "upload_dir", str(tmp_path))
    ds = create_dataset(alice, name="Gone")
    assert client.get(f"/datasets/{ds['id']}/file", headers=alice.headers).status_code == 404


def test_remote_dataset_file_redirects(client, alice, create_dataset):
    ds = create_dataset(
        alice,
        name="Remote",
        visibility="PUBLIC",
        fileUrl="https://files.example.com/remote.csv",
    )
    resp = client.get(f"/datasets/{ds['id']}/file", headers=alice.headers, follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "https://files.example.com/remote.csv"
