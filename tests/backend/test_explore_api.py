from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.orm import Session

from backend.app.dependencies import get_explore_service
from core.models import Decision
from core.pagination import Cursor, decode_cursor, encode_cursor
from core.services import BackgroundWriter, ExploreService

API = "/api/v1/explore"
BASE = 1_700_000_000


def seed(session_factory, *rows):
    session = session_factory()
    for actor, recipient, liked, seconds in rows:
        session.add(
            Decision(
                actor_user_id=actor,
                recipient_user_id=recipient,
                liked_recipient=liked,
                created_at=datetime.fromtimestamp(seconds, tz=timezone.utc),
            )
        )
    session.commit()
    session.close()


@pytest.fixture
def client(test_app_client, test_db):
    client, _ = test_app_client
    _, TestingSessionLocal, _ = test_db
    seed(
        TestingSessionLocal,
        ("alice", "user123", True, BASE + 300),
        ("bob", "user123", True, BASE + 200),
        ("carol", "user123", True, BASE + 100),
        ("dave", "user123", False, BASE + 50),
        ("user123", "bob", True, BASE + 400),
    )
    return client


def test_health(test_app_client):
    client, _ = test_app_client

    assert client.get("/health").json() == {"status": "ok"}

    response = client.get("/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["database"] is True


def test_list_liked_you(client):
    response = client.get(f"{API}/liked-you", params={"recipient_user_id": "user123"})

    assert response.status_code == 200
    assert response.json() == {
        "likers": [
            {"actor_id": "alice", "unix_timestamp": BASE + 300},
            {"actor_id": "bob", "unix_timestamp": BASE + 200},
            {"actor_id": "carol", "unix_timestamp": BASE + 100},
        ],
        "next_pagination_token": None,
    }


def test_list_liked_you_pages_through_results(client):
    token = encode_cursor(Cursor(last_created_at=BASE + 1000, limit=2))

    first = client.get(
        f"{API}/liked-you", params={"recipient_user_id": "user123", "pagination_token": token}
    ).json()

    assert [liker["actor_id"] for liker in first["likers"]] == ["alice", "bob"]
    assert decode_cursor(first["next_pagination_token"]) == Cursor(
        last_created_at=BASE + 200, limit=2
    )

    second = client.get(
        f"{API}/liked-you",
        params={"recipient_user_id": "user123", "pagination_token": first["next_pagination_token"]},
    ).json()

    assert second["likers"] == [{"actor_id": "carol", "unix_timestamp": BASE + 100}]
    assert second["next_pagination_token"] is None


def test_list_new_liked_you_excludes_answered_likers(client):
    response = client.get(f"{API}/liked-you/new", params={"recipient_user_id": "user123"})

    assert response.status_code == 200
    assert [liker["actor_id"] for liker in response.json()["likers"]] == ["alice", "carol"]


def test_count_liked_you(client):
    response = client.get(f"{API}/liked-you/count", params={"recipient_user_id": "user123"})

    assert response.status_code == 200
    assert response.json() == {"count": 3}


def test_reads_repopulate_the_cache(client, test_app_client, fake_cache):
    _, app = test_app_client

    client.get(f"{API}/liked-you/count", params={"recipient_user_id": "user123"})
    app.state.writer.shutdown(wait=True)

    assert fake_cache.data == {"likerscount:user123": {"count": 3}}


def test_cached_response_is_returned_verbatim(client, fake_cache):
    fake_cache.data["likerscount:user123"] = {"count": 42}

    response = client.get(f"{API}/liked-you/count", params={"recipient_user_id": "user123"})

    assert response.json() == {"count": 42}


@pytest.mark.parametrize("path", ["/liked-you", "/liked-you/new", "/liked-you/count"])
def test_missing_recipient_is_rejected(client, path):
    response = client.get(f"{API}{path}")

    assert response.status_code == 400
    assert response.json()["detail"] == "recipient_user_id is required"


@pytest.mark.parametrize("path", ["/liked-you", "/liked-you/new"])
def test_invalid_pagination_token_is_rejected(client, path):
    response = client.get(
        f"{API}{path}", params={"recipient_user_id": "user123", "pagination_token": "%%%"}
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "invalid pagination_token", "status_code": 400}


def test_put_decision_reports_mutual_like(test_app_client):
    client, _ = test_app_client

    first = client.put(
        f"{API}/decisions",
        json={"actor_user_id": "a", "recipient_user_id": "b", "liked_recipient": True},
    )
    second = client.put(
        f"{API}/decisions",
        json={"actor_user_id": "b", "recipient_user_id": "a", "liked_recipient": True},
    )

    assert first.status_code == 200
    assert first.json() == {"mutual_likes": False}
    assert second.json() == {"mutual_likes": True}


def test_pass_is_never_mutual(test_app_client):
    client, _ = test_app_client
    body = {"actor_user_id": "a", "recipient_user_id": "b", "liked_recipient": True}
    client.put(f"{API}/decisions", json=body)

    response = client.put(
        f"{API}/decisions",
        json={"actor_user_id": "b", "recipient_user_id": "a", "liked_recipient": False},
    )

    assert response.json() == {"mutual_likes": False}


def test_repeated_decision_overwrites(test_app_client, test_db):
    client, _ = test_app_client
    _, TestingSessionLocal, _ = test_db

    for liked in (True, False):
        response = client.put(
            f"{API}/decisions",
            json={"actor_user_id": "a", "recipient_user_id": "b", "liked_recipient": liked},
        )
        assert response.status_code == 200

    session = TestingSessionLocal()
    rows = session.query(Decision).all()
    session.close()

    assert len(rows) == 1
    assert rows[0].liked_recipient is False


@pytest.mark.parametrize(
    "body, detail",
    [
        ({"recipient_user_id": "b", "liked_recipient": True}, "actor_user_id is required"),
        ({"actor_user_id": "a", "liked_recipient": True}, "recipient_user_id is required"),
        (
            {"actor_user_id": "a", "recipient_user_id": "a", "liked_recipient": True},
            "actor and recipient cannot be the same user",
        ),
    ],
)
def test_put_decision_validation(test_app_client, body, detail):
    client, _ = test_app_client

    response = client.put(f"{API}/decisions", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == detail


def test_malformed_body_is_an_invalid_argument(test_app_client):
    client, _ = test_app_client

    response = client.put(f"{API}/decisions", json={"liked_recipient": "maybe"})

    assert response.status_code == 400


@pytest.mark.parametrize(
    "method, path, params, failing, detail",
    [
        ("get", "/liked-you", {"recipient_user_id": "u"}, "get_likers", "failed to get likers"),
        (
            "get",
            "/liked-you/new",
            {"recipient_user_id": "u"},
            "get_new_likers",
            "failed to get new likers",
        ),
        ("get", "/liked-you/count", {"recipient_user_id": "u"}, "count_likes", "failed to count likers"),
    ],
)
def test_storage_failures_map_to_internal_error(
    test_app_client, fake_store, fake_cache, method, path, params, failing, detail
):
    client, app = test_app_client
    fake_store.fail(failing)
    app.dependency_overrides[get_explore_service] = lambda: ExploreService(
        fake_store, fake_cache, BackgroundWriter(max_workers=1)
    )

    response = client.request(method, f"{API}{path}", params=params)

    assert response.status_code == 500
    assert response.json() == {"detail": detail, "status_code": 500}


@pytest.mark.parametrize("failing", ["upsert_decision", "has_mutual_like"])
def test_decision_failures_map_to_internal_error(test_app_client, fake_store, fake_cache, failing):
    client, app = test_app_client
    fake_store.fail(failing)
    app.dependency_overrides[get_explore_service] = lambda: ExploreService(
        fake_store, fake_cache, BackgroundWriter(max_workers=1)
    )

    response = client.put(
        f"{API}/decisions",
        json={"actor_user_id": "a", "recipient_user_id": "b", "liked_recipient": True},
    )

    assert response.status_code == 500
    # internal detail never leaks
    assert response.json()["detail"] == "failed to create decision"


def test_request_id_is_echoed(test_app_client):
    client, _ = test_app_client

    response = client.get("/health", headers={"X-Request-ID": "abc123"})

    assert response.headers["x-request-id"] == "abc123"
    assert client.get("/health").headers["x-request-id"]


def test_out_of_range_pagination_token_is_rejected(client):
    token = encode_cursor(Cursor(last_created_at=10**18, limit=2))

    response = client.get(
        f"{API}/liked-you", params={"recipient_user_id": "user123", "pagination_token": token}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "invalid pagination_token"


def test_decision_is_committed_before_response_is_sent(test_app_client):
    _, app = test_app_client
    order = []

    async def recording_app(scope, receive, send):
        async def recording_send(message):
            if message["type"] == "http.response.body":
                order.append("response_sent")
            await send(message)

        await app(scope, receive, recording_send)

    def on_commit(session):
        order.append("commit")

    event.listen(Session, "after_commit", on_commit)
    try:
        response = TestClient(recording_app).put(
            f"{API}/decisions",
            json={"actor_user_id": "a", "recipient_user_id": "b", "liked_recipient": True},
        )
    finally:
        event.remove(Session, "after_commit", on_commit)

    assert response.status_code == 200
    assert order.index("commit") < order.index("response_sent")
