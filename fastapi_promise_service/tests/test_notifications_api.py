from __future__ import annotations

from app.core.crypto import decrypt_token
from app.models.domain import UserIdentity
from app.services import kakao_notify_service


def test_notify_kakao_returns_aggregate_counts(
    client, make_user, make_meeting, auth_headers, memo_dispatcher, kakao_api, monkeypatch
):
    monkeypatch.setattr(kakao_notify_service, "get_dispatcher", lambda: memo_dispatcher)
    host = make_user("호스트", token="token-host")
    alice = make_user("앨리스", token="token-alice")
    bob = make_user("밥", token="token-bob")
    meeting = make_meeting(host, [alice, bob])
    kakao_api.failing_tokens.add("token-bob")

    response = client.post(
        "/notifications/kakao",
        json={"meeting_id": meeting.id},
        headers=auth_headers(host),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["sent_count"] == 1
    assert body["total_count"] == 2
    assert body["failed_count"] == 1
    assert body["message"] == "1/2 메시지가 전송되었습니다"


def test_notify_kakao_to_selected_receivers(
    client, make_user, make_meeting, auth_headers, memo_dispatcher, kakao_api, monkeypatch
):
    monkeypatch.setattr(kakao_notify_service, "get_dispatcher", lambda: memo_dispatcher)
    host = make_user("호스트", token="token-host")
    alice = make_user("앨리스", token="token-alice")
    bob = make_user("밥", token="token-bob")
    meeting = make_meeting(host, [alice, bob])

    response = client.post(
        "/notifications/kakao",
        json={"meeting_id": meeting.id, "receiver_ids": [bob.id]},
        headers=auth_headers(host),
    )

    assert response.json()["sent_count"] == 1
    assert [r.headers["Authorization"] for r in kakao_api.requests] == ["Bearer token-bob"]


def test_notify_kakao_rejects_empty_receiver_list(client, make_user, make_meeting, auth_headers):
    host = make_user("호스트")
    meeting = make_meeting(host)

    response = client.post(
        "/notifications/kakao",
        json={"meeting_id": meeting.id, "receiver_ids": []},
        headers=auth_headers(host),
    )

    assert response.status_code == 400


def test_notify_kakao_maps_validation_error_to_400(client, make_user, make_meeting, auth_headers):
    host = make_user("호스트", talk_consent=False)
    meeting = make_meeting(host)

    response = client.post(
        "/notifications/kakao",
        json={"meeting_id": meeting.id},
        headers=auth_headers(host),
    )

    assert response.status_code == 400
    assert "동의" in response.json()["detail"]


def test_link_kakao_identity_stores_encrypted_token(client, db_session, make_user, auth_headers):
    user = make_user("앨리스")

    response = client.put(
        "/users/me/kakao-identity",
        json={"access_token": "kakao-access-token", "expires_in": 21599, "kakao_user_id": "12345"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["has_token"] is True
    assert body["provider_user_id"] == "12345"
    assert "access_token" not in body

    identity = db_session.query(UserIdentity).filter_by(user_id=user.id).one()
    assert identity.access_token_enc != b"kakao-access-token"
    assert decrypt_token(identity.access_token_enc) == "kakao-access-token"
