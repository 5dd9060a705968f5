from datetime import timedelta

import pytest

from _utils import login_user_to_client
from models.schedule import Season, Show, Timeslot


@pytest.fixture(scope="module")
def show(db, user, metadata_keys):
    show = Show(user)
    db.session.add(show)
    db.session.commit()
    return show


@pytest.fixture(scope="module")
def timeslot(db, show, term):
    timeslot = Timeslot(Season(show, term), term.start + timedelta(weeks=2, hours=10), timedelta(hours=1))
    db.session.add(timeslot)
    db.session.commit()
    return timeslot


def test_list_metadata_keys(client, metadata_keys):
    rv = client.get("/api/schedule/metadata-keys")
    assert rv.status_code == 200

    keys = {k["name"]: k for k in rv.json}
    assert keys["tag"]["allow_multiple"] is True
    assert keys["title"]["allow_multiple"] is False
    assert keys["title"]["id"] == metadata_keys.resolve("title")


def test_anonymous_members_cannot_set_metadata(client, show):
    rv = client.put(f"/api/schedule/show/{show.id}/metadata/title", json={"value": "Anonymous"})
    assert rv.status_code == 401


def test_members_need_scheduler_permission(client, user, show):
    login_user_to_client(client, user)
    rv = client.put(f"/api/schedule/show/{show.id}/metadata/title", json={"value": "Not Allowed"})
    assert rv.status_code == 403


def test_set_and_get_metadata(client, scheduler, show):
    login_user_to_client(client, scheduler)

    rv = client.put(f"/api/schedule/show/{show.id}/metadata/title", json={"value": "The Morning Show"})
    assert rv.status_code == 200
    assert rv.json == {"key": "title", "changed": True, "value": "The Morning Show"}

    rv = client.put(f"/api/schedule/show/{show.id}/metadata/title", json={"value": "The Morning Show"})
    assert rv.json["changed"] is False

    rv = client.get(f"/api/schedule/show/{show.id}/metadata/title")
    assert rv.status_code == 200
    assert rv.json == {"key": "title", "value": "The Morning Show"}


def test_set_multiple_values(client, scheduler, show):
    login_user_to_client(client, scheduler)

    client.put(f"/api/schedule/show/{show.id}/metadata/tag", json={"value": ["news", "chat"]})
    rv = client.put(f"/api/schedule/show/{show.id}/metadata/tag", json={"value": ["chat", "music"]})
    assert rv.status_code == 200
    assert rv.json["value"] == ["news", "chat", "music"]


def test_timeslot_metadata(client, scheduler, timeslot):
    login_user_to_client(client, scheduler)

    rv = client.put(f"/api/schedule/timeslot/{timeslot.id}/metadata/description", json={"value": "Live from campus"})
    assert rv.status_code == 200

    rv = client.get(f"/api/schedule/timeslot/{timeslot.id}/metadata/description")
    assert rv.json["value"] == "Live from campus"


@pytest.mark.parametrize("payload, status", [
    ({"value": ["One", "Two"]}, 400),
    ({"value": {"nested": "object"}}, 400),
    ({"value": None}, 400),
    ({"title": "No value"}, 400),
    ({"value": "Bad time", "effective_from": "not a time"}, 400),
])
def test_invalid_metadata_values(client, scheduler, show, payload, status):
    login_user_to_client(client, scheduler)
    rv = client.put(f"/api/schedule/show/{show.id}/metadata/title", json=payload)
    assert rv.status_code == status


def test_metadata_cannot_end_before_it_starts(client, scheduler, show):
    login_user_to_client(client, scheduler)
    url = f"/api/schedule/show/{show.id}/metadata/description"
    client.put(url, json={"value": "Weekday mornings"})

    rv = client.put(url, json={
        "value": "Backwards",
        "effective_from": "2026-01-10T10:00:00",
        "effective_to": "2026-01-09T10:00:00",
    })
    assert rv.status_code == 400
    assert "effective_to" in rv.json["message"]

    assert client.get(url).json["value"] == "Weekday mornings"


def test_metadata_must_be_json(client, scheduler, show):
    login_user_to_client(client, scheduler)
    rv = client.put(f"/api/schedule/show/{show.id}/metadata/title", data="value=Form")
    assert rv.status_code == 415


@pytest.mark.parametrize("url", [
    "/api/schedule/member/1/metadata/title",
    "/api/schedule/show/9999/metadata/title",
    "/api/schedule/show/{show_id}/metadata/colour",
])
def test_metadata_not_found(client, scheduler, show, url):
    login_user_to_client(client, scheduler)
    url = url.format(show_id=show.id)
    assert client.get(url).status_code == 404
    assert client.put(url, json={"value": "x"}).status_code == 404


def test_conflicts(client, term, timeslot):
    rv = client.post(
        "/api/schedule/conflicts",
        json={"term_id": term.id, "day": 0, "start_time": 10 * 3600, "duration": 3600},
    )
    assert rv.status_code == 200
    assert rv.json == {"slot": "Mon 10:00 - 11:00", "conflicts": {"3": timeslot.id}}


def test_no_conflicts(client, term, timeslot):
    rv = client.post(
        "/api/schedule/conflicts",
        json={"term_id": term.id, "day": 1, "start_time": 10 * 3600, "duration": 3600},
    )
    assert rv.status_code == 200
    assert rv.json["conflicts"] == {}


@pytest.mark.parametrize("payload, status", [
    ({"term_id": 1, "day": 7, "start_time": 0, "duration": 3600}, 400),
    ({"term_id": 1, "day": 0, "start_time": 0, "duration": 0}, 400),
    ({"term_id": 1, "day": 0, "start_time": 0}, 400),
    ({"term_id": 1, "day": "monday", "start_time": 0, "duration": 3600}, 400),
    ({"term_id": 9999, "day": 0, "start_time": 0, "duration": 3600}, 404),
])
def test_invalid_conflict_requests(client, term, payload, status):
    rv = client.post("/api/schedule/conflicts", json=payload)
    assert rv.status_code == status
