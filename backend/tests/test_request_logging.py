"""API request/response logging tests."""

import logging

import pytest


@pytest.fixture
def api_logs(app, caplog):
    caplog.set_level(logging.INFO, logger=app.logger.name)
    return caplog


def _records(caplog, prefix):
    return [r for r in caplog.records if r.getMessage().startswith(prefix)]


class TestRequestLogging:

    def test_logs_request_and_response(self, client, db_session, api_logs):
        client.post("/api/login", json={"email": "x@example.com", "password": "hunter2"})

        request_record, = _records(api_logs, "API Request POST /api/login")
        assert request_record.body == {"email": "x@example.com", "password": "[redacted]"}

        response_record, = _records(api_logs, "API Response POST /api/login")
        assert response_record.status == 404
        assert response_record.content == {"message": "Email not found"}

    def test_redacts_authorization_header_and_token(self, client, cashier, headers, api_logs):
        client.get("/api/user", headers=headers)
        client.post("/api/login", json={"email": "rudi@example.com", "password": "secret123"})

        request_record = _records(api_logs, "API Request GET /api/user")[0]
        assert request_record.headers["Authorization"] == "[redacted]"

        login_response = _records(api_logs, "API Response POST /api/login")[0]
        assert login_response.content["access_token"] == "[redacted]"

    def test_bodies_can_be_turned_off(self, app, client, db_session, api_logs, monkeypatch):
        monkeypatch.setitem(app.config, "LOG_REQUEST_BODIES", False)

        client.post("/api/login", json={"email": "x@example.com", "password": "hunter2"})

        assert _records(api_logs, "API Request POST /api/login")[0].body is None
        assert _records(api_logs, "API Response POST /api/login")[0].content is None

    def test_ignores_non_api_paths(self, client, db_session, api_logs):
        client.get("/")
        assert _records(api_logs, "API Request") == []
