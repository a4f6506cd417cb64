"""Tests for standardized error handling."""

from fastapi import FastAPI
from fastapi.testclient import TestClient


class TestAPIErrors:

    def test_not_found_error_defaults(self):
        from meetsync.errors import NotFoundError

        error = NotFoundError()
        assert error.status_code == 404
        assert error.error == "not_found"
        assert error.detail == "Event not found"

    def test_not_found_error_with_context(self):
        from meetsync.errors import NotFoundError

        error = NotFoundError(detail="Event not found", event_id="abc")
        assert error.detail == "Event not found"
        assert error.context == {"event_id": "abc"}

    def test_conflict_error(self):
        from meetsync.errors import ConflictError

        error = ConflictError()
        assert error.status_code == 409
        assert error.error == "conflict"

    def test_database_error(self):
        from meetsync.errors import DatabaseError

        error = DatabaseError(detail="Connection timeout")
        assert error.status_code == 500
        assert error.error == "database_error"
        assert str(error) == "Connection timeout"


class TestErrorResponse:

    def test_error_response_minimal(self):
        from meetsync.errors import ErrorResponse

        data = ErrorResponse(error="internal_error").model_dump(exclude_none=True)
        assert data == {"error": "internal_error"}

    def test_api_error_to_response(self):
        from meetsync.errors import BadRequestError

        response = BadRequestError(detail="Empty submission", error_code="EMPTY").to_response()
        assert response.error == "bad_request"
        assert response.detail == "Empty submission"
        assert response.error_code == "EMPTY"
        assert response.context is None


class TestExceptionHandlers:

    def test_api_error_handler_integration(self):
        from meetsync.errors import NotFoundError, register_exception_handlers

        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/test-not-found")
        async def test_endpoint():
            raise NotFoundError(detail="Event not found", event_id="x")

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/test-not-found")

        assert response.status_code == 404
        assert response.json() == {
            "error": "not_found",
            "detail": "Event not found",
            "context": {"event_id": "x"},
        }

    def test_http_exception_uses_standard_format(self):
        from fastapi import HTTPException

        from meetsync.errors import register_exception_handlers

        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/teapot")
        async def test_endpoint():
            raise HTTPException(status_code=409, detail="Already there")

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/teapot")

        assert response.status_code == 409
        assert response.json() == {"error": "conflict", "detail": "Already there"}


class TestStatusToErrorType:

    def test_common_status_codes(self):
        from meetsync.errors import _status_to_error_type

        assert _status_to_error_type(400) == "bad_request"
        assert _status_to_error_type(404) == "not_found"
        assert _status_to_error_type(422) == "validation_error"
        assert _status_to_error_type(503) == "service_unavailable"

    def test_unknown_status_code(self):
        from meetsync.errors import _status_to_error_type

        assert _status_to_error_type(418) == "error"

    def test_method_not_allowed(self):
        from meetsync.errors import _status_to_error_type

        assert _status_to_error_type(405) == "method_not_allowed"


class TestValidationErrorHandler:

    def _app(self):
        from pydantic import BaseModel

        from meetsync.errors import register_exception_handlers

        class Body(BaseModel):
            title: str
            attendees: int

        app = FastAPI()
        register_exception_handlers(app)

        @app.post("/items")
        async def create(body: Body):
            return body

        return TestClient(app, raise_server_exceptions=False)

    def test_rejected_body_uses_error_format(self):
        res = self._app().post("/items", json={"title": "Sync", "attendees": "many"})

        assert res.status_code == 422
        body = res.json()
        assert body["error"] == "validation_error"
        assert body["detail"] == body["context"]["errors"][0]["msg"]
        assert body["context"]["errors"][0]["loc"] == "body.attendees"

    def test_every_failure_is_listed(self):
        res = self._app().post("/items", json={})

        assert res.status_code == 422
        locs = {e["loc"] for e in res.json()["context"]["errors"]}
        assert locs == {"body.title", "body.attendees"}
