"""API handlers end to end against the in-memory data access."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from notsoai.core.auth_context import SESSION_COOKIE_NAME
from notsoai.core.session import Role
from notsoai.db.mock_data import DEMO_PASSWORD, MockDataAccess
from notsoai.main import create_app


class TestLogin:

    def test_owner_login_sets_cookie(self, client, codec):
        response = client.post(
            "/api/auth/login",
            json={"email": "owner@acme-demo.com", "password": DEMO_PASSWORD},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["session"] == {
            "clientId": "c_123",
            "clientSlug": "acme-inc",
            "userId": "u_1",
            "role": "owner",
            "defaultWorkspaceId": "ws_acme",
        }
        assert data["redirectUrl"] == "/app/acme-inc/home"
        assert data["client"]["slug"] == "acme-inc"

        set_cookie = response.headers["set-cookie"]
        assert SESSION_COOKIE_NAME in set_cookie
        assert "httponly" in set_cookie.lower()
        assert "samesite=lax" in set_cookie.lower()
        assert codec.decode(client.cookies.get(SESSION_COOKIE_NAME)).role is Role.OWNER

    @pytest.mark.parametrize("email,role", [
        ("manager@acme-demo.com", "admin"),
        ("agent@acme-demo.com", "member"),
        ("viewer@acme-demo.com", "viewer"),
    ])
    def test_team_roles_mapped(self, client, email, role):
        response = client.post("/api/auth/login", json={"email": email, "password": DEMO_PASSWORD})
        assert response.json()["data"]["session"]["role"] == role

    def test_email_is_case_insensitive(self, client):
        response = client.post(
            "/api/auth/login",
            json={"email": "Owner@Acme-Demo.com", "password": DEMO_PASSWORD},
        )
        assert response.status_code == 200

    def test_wrong_password(self, client):
        response = client.post(
            "/api/auth/login",
            json={"email": "owner@acme-demo.com", "password": "nope"},
        )
        assert response.status_code == 401
        assert response.json() == {"code": "INVALID_CREDENTIALS", "message": "Invalid email or password"}
        assert SESSION_COOKIE_NAME not in response.headers.get("set-cookie", "")

    def test_unknown_user(self, client):
        response = client.post(
            "/api/auth/login",
            json={"email": "nobody@acme-demo.com", "password": DEMO_PASSWORD},
        )
        assert response.status_code == 401

    def test_invalid_body(self, client):
        response = client.post("/api/auth/login", json={"email": "not-an-email", "password": ""})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert set(body["errors"]) == {"email", "password"}

    def test_user_without_client(self, settings):
        data_access = MockDataAccess({
            "users": [{
                "id": "u_x",
                "client_id": "c_gone",
                "email": "ghost@acme-demo.com",
                "role": "owner",
                "password": "ghost-password",
            }],
        })
        with TestClient(create_app(settings=settings, data_access=data_access)) as c:
            response = c.post(
                "/api/auth/login",
                json={"email": "ghost@acme-demo.com", "password": "ghost-password"},
            )
        assert response.status_code == 403
        assert response.json()["code"] == "CLIENT_NOT_FOUND"


class TestSessionAndLogout:

    def test_session_without_cookie(self, client):
        response = client.get("/api/auth/session")
        assert response.status_code == 200
        assert response.json() == {"data": {"session": None, "client": None}}

    def test_session_with_cookie(self, client, login_as):
        login_as(Role.MEMBER)
        data = client.get("/api/auth/session").json()["data"]
        assert data["session"]["role"] == "member"
        assert data["client"]["id"] == "c_123"
        assert "password_hash" not in data["client"]

    def test_session_for_deleted_tenant_is_cleared(self, client, login_as):
        login_as(client_id="c_gone", client_slug="gone")
        response = client.get("/api/auth/session")
        assert response.json() == {"data": {"session": None, "client": None}}
        assert SESSION_COOKIE_NAME in response.headers["set-cookie"]

    def test_logout_clears_cookie(self, client, login_as):
        login_as()
        response = client.post("/api/auth/logout")
        assert response.json() == {"data": {"success": True}}
        set_cookie = response.headers["set-cookie"]
        assert SESSION_COOKIE_NAME in set_cookie
        assert "max-age=0" in set_cookie.lower()


class TestChatSessions:

    URL = "/api/analytics/chat-sessions"

    def test_requires_client_id(self, client, login_as):
        login_as()
        response = client.get(self.URL)
        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_PARAM"

    def test_anonymous_is_401(self, client):
        assert client.get(self.URL, params={"clientId": "c_123"}).status_code == 401

    def test_other_tenant_is_403(self, client, login_as):
        login_as()
        response = client.get(self.URL, params={"clientId": "globex"})
        assert response.status_code == 403
        assert response.json() == {"code": "FORBIDDEN", "message": "Access denied"}

    def test_owner_sees_raw_data(self, client, login_as):
        login_as(Role.OWNER)
        sessions = client.get(self.URL, params={"clientId": "acme-inc"}).json()["data"]

        assert [s["id"] for s in sessions] == ["cs_2", "cs_1"]  # newest first, dev session dropped
        cs_1 = sessions[1]
        assert cs_1["full_transcript"][0]["message"] == "Hi, what does the pro plan cost?"
        assert cs_1["analysis"]["raw_response"] == {"model": "analysis-v1", "tokens": 210}

    @pytest.mark.parametrize("role", [Role.VIEWER, Role.MEMBER])
    def test_restricted_roles_redacted(self, client, login_as, role):
        login_as(role)
        sessions = client.get(self.URL, params={"clientId": "c_123"}).json()["data"]
        cs_1 = next(s for s in sessions if s["id"] == "cs_1")

        assert cs_1["full_transcript"][0]["message"] == "*** **** **** *** *** **** *****"
        assert cs_1["full_transcript"][1]["message"] == "The pro plan is 49 euro per month."
        assert cs_1["analysis"]["raw_response"] is None
        assert cs_1["analysis"]["sentiment"] == "positive"

    def test_bot_filter_stays_in_tenant(self, client, login_as):
        login_as()
        sessions = client.get(self.URL, params={"clientId": "c_123", "botId": "globex-bot"}).json()["data"]
        assert sessions == []

    def test_date_range(self, client, login_as):
        login_as()
        params = {"clientId": "c_123", "from": "2025-03-02T00:00:00Z", "to": "2025-03-02T23:59:59Z"}
        sessions = client.get(self.URL, params=params).json()["data"]
        assert [s["id"] for s in sessions] == ["cs_2"]

    def test_bad_date(self, client, login_as):
        login_as()
        response = client.get(self.URL, params={"clientId": "c_123", "from": "soon", "to": "later"})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestAnalyticsConversations:

    URL = "/api/analytics/conversations"

    def test_requires_client_id(self, client, login_as):
        login_as()
        response = client.post(self.URL, json={})
        assert response.status_code == 400
        assert response.json() == {"code": "MISSING_PARAM", "message": "clientId is required"}

    def test_assistant_filter(self, client, login_as):
        login_as()
        body = {"clientId": "acme-inc", "assistantIds": ["other-bot"]}
        assert client.post(self.URL, json=body).json()["data"] == []

        body["assistantIds"] = ["all", "other-bot"]
        assert len(client.post(self.URL, json=body).json()["data"]) == 2

    def test_viewer_redacted(self, client, login_as):
        login_as(Role.VIEWER)
        sessions = client.post(self.URL, json={"clientId": "acme-inc"}).json()["data"]
        assert all(s["analysis"]["raw_response"] is None for s in sessions)

    def test_cross_tenant(self, client, login_as):
        login_as()
        assert client.post(self.URL, json={"clientId": "c_456"}).status_code == 403


class TestOverview:

    def test_report(self, client, login_as):
        login_as(Role.VIEWER)
        report = client.get("/api/analytics/overview", params={"clientId": "acme-inc"}).json()["data"]
        assert report["overview"]["totalSessions"] == 2
        assert report["overview"]["totalMessages"] == 6
        assert report["overview"]["escalationRate"] == 50.0
        assert report["sentiment"] == {"positive": 1, "neutral": 0, "negative": 1}
        assert len(report["hourly"]) == 24

    def test_viewer_questions_masked(self, client, login_as):
        login_as(Role.VIEWER)
        report = client.get("/api/analytics/overview", params={"clientId": "acme-inc"}).json()["data"]
        questions = {row["question"] for row in report["questions"]}
        assert "*** * ****** * ****** *****" in questions
        assert report["unansweredQuestions"][0]["question"] == "*** * ****** * ****** *****"
        assert report["unansweredQuestions"][0]["frequency"] == 1

    def test_owner_sees_questions(self, client, login_as):
        login_as(Role.OWNER)
        report = client.get("/api/analytics/overview", params={"clientId": "acme-inc"}).json()["data"]
        assert report["unansweredQuestions"][0]["question"] == "Can I return a broken item?"


class TestConversations:

    def test_list_newest_first(self, client, login_as):
        login_as()
        conversations = client.get("/api/conversations", params={"clientId": "c_123"}).json()["data"]
        assert [c["id"] for c in conversations] == ["conv_2", "conv_1"]
        assert conversations[1]["preview"] == "Where is my invoice?"

    def test_status_filter_and_pagination(self, client, login_as):
        login_as()
        params = {"clientId": "c_123", "status": "resolved"}
        assert [c["id"] for c in client.get("/api/conversations", params=params).json()["data"]] == ["conv_1"]

        params = {"clientId": "c_123", "limit": 1, "offset": 1}
        assert [c["id"] for c in client.get("/api/conversations", params=params).json()["data"]] == ["conv_1"]

        params = {"clientId": "c_123", "status": "bogus"}
        assert len(client.get("/api/conversations", params=params).json()["data"]) == 2

    def test_date_range(self, client, login_as):
        login_as()
        params = {"clientId": "c_123", "from": "2025-03-02T00:00:00Z", "to": "2025-03-02T23:59:59Z"}
        conversations = client.get("/api/conversations", params=params).json()["data"]
        assert [c["id"] for c in conversations] == ["conv_2"]

    def test_bad_date_range(self, client, login_as):
        login_as()
        params = {"clientId": "c_123", "from": "2025-03-05", "to": "2025-03-01"}
        response = client.get("/api/conversations", params=params)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_viewer_previews_masked(self, client, login_as):
        login_as(Role.VIEWER)
        conversations = client.get("/api/conversations", params={"clientId": "acme-inc"}).json()["data"]
        assert conversations[1]["preview"] == "***** ** ** ********"

    def test_detail_with_messages(self, client, login_as):
        login_as(Role.ADMIN)
        data = client.get("/api/conversations/conv_1", params={"clientId": "c_123"}).json()["data"]
        assert [m["id"] for m in data["messageList"]] == ["msg_1", "msg_2"]
        assert data["messageList"][0]["content"] == "Where is my invoice?"

    def test_detail_member_redacted(self, client, login_as):
        login_as(Role.MEMBER)
        data = client.get("/api/conversations/conv_1", params={"clientId": "c_123"}).json()["data"]
        assert data["preview"] == "***** ** ** ********"
        assert data["messageList"][0]["content"] == "***** ** ** ********"
        assert data["messageList"][1]["content"] == "You can download it from the billing page."

    def test_other_tenants_conversation_is_404(self, client, login_as):
        login_as()
        response = client.get("/api/conversations/conv_3", params={"clientId": "c_123"})
        assert response.status_code == 404
        assert response.json()["code"] == "CONVERSATION_NOT_FOUND"

    def test_unknown_conversation(self, client, login_as):
        login_as()
        assert client.get("/api/conversations/nope", params={"clientId": "c_123"}).status_code == 404


class TestClientsAndUsers:

    def test_own_client(self, client, login_as):
        login_as(Role.VIEWER)
        data = client.get("/api/clients/acme-inc").json()["data"]
        assert data["id"] == "c_123"
        assert data["name"] == "Acme Inc"

    def test_foreign_client(self, client, login_as):
        login_as()
        assert client.get("/api/clients/globex").status_code == 403

    def test_users_admin_only(self, client, login_as):
        login_as(Role.MEMBER)
        response = client.get("/api/users")
        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_users_anonymous(self, client):
        assert client.get("/api/users").status_code == 401

    def test_users_listed_for_admin(self, client, login_as):
        login_as(Role.ADMIN)
        users = client.get("/api/users").json()["data"]
        assert {u["clientId"] for u in users} == {"c_123"}
        assert len(users) == 4
        assert all("password_hash" not in u for u in users)
