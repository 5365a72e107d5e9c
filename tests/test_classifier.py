"""Response classification: status codes and bodies onto the error taxonomy."""

from typing import Optional

import httpx
import pytest

from safal_auth.errors import (
    ApiError,
    DecodingError,
    ErrorKind,
    NoDataError,
    ServerError,
    UnauthorizedError,
    UnknownError,
)
from safal_auth.models.envelope import ApiEnvelope
from safal_auth.models.user import UserModel
from safal_auth.transport.classifier import classify

REQUEST = httpx.Request("POST", "https://api.test/api/user/login")


def make_response(status: int, json: Optional[dict] = None, content: bytes = b"") -> httpx.Response:
    if json is not None:
        return httpx.Response(status, json=json, request=REQUEST)
    return httpx.Response(status, content=content, request=REQUEST)


class TestSuccess:
    def test_decodes_model(self):
        response = make_response(200, {"success": True, "data": {"id": "u1", "firstName": "Jo"}})
        envelope = classify(response, ApiEnvelope[UserModel])
        assert envelope.success is True
        assert envelope.data.id == "u1"
        assert envelope.data.first_name == "Jo"

    def test_no_model_ignores_body(self):
        assert classify(make_response(204)) is None
        assert classify(make_response(200, content=b"not json")) is None

    def test_empty_body_is_no_data(self):
        with pytest.raises(NoDataError) as exc:
            classify(make_response(200), UserModel)
        assert exc.value.kind == ErrorKind.NO_DATA

    def test_malformed_body_is_decoding_error(self):
        with pytest.raises(DecodingError):
            classify(make_response(200, content=b"<html>oops</html>"), UserModel)

    def test_wrong_shape_is_decoding_error(self):
        with pytest.raises(DecodingError):
            classify(make_response(201, {"data": "not-a-user"}), ApiEnvelope[UserModel])


class TestClientErrors:
    def test_401_with_message(self):
        with pytest.raises(ApiError) as exc:
            classify(make_response(401, {"message": "Invalid email or password"}), UserModel)
        assert exc.value.message == "Invalid email or password"

    def test_401_without_message(self):
        with pytest.raises(UnauthorizedError) as exc:
            classify(make_response(401, content=b""), UserModel)
        assert exc.value.message == "Invalid credentials"

    def test_4xx_message(self):
        with pytest.raises(ApiError) as exc:
            classify(make_response(409, {"message": "Email already registered"}), UserModel)
        assert exc.value.message == "Email already registered"

    def test_4xx_falls_back_to_error_field(self):
        with pytest.raises(ApiError) as exc:
            classify(make_response(400, {"error": "Bad Request"}), UserModel)
        assert exc.value.message == "Bad Request"

    def test_401_error_field_first(self):
        response = make_response(401, {"message": "Unauthorized", "error": "Organization not found"})
        with pytest.raises(ApiError) as exc:
            classify(response, UserModel, error_field_first=True)
        assert exc.value.message == "Organization not found"

    def test_4xx_reads_message_even_with_error_field_first(self):
        response = make_response(400, {"message": "Bad Request", "error": "Organization not found"})
        with pytest.raises(ApiError) as exc:
            classify(response, UserModel, error_field_first=True)
        assert exc.value.message == "Bad Request"

    def test_4xx_without_body(self):
        with pytest.raises(ApiError) as exc:
            classify(make_response(404, content=b"Not Found"), UserModel)
        assert exc.value.message == "Client error: 404"


class TestOtherStatuses:
    @pytest.mark.parametrize("status", [500, 502, 599])
    def test_server_error(self, status):
        with pytest.raises(ServerError) as exc:
            classify(make_response(status, {"message": "ignored"}), UserModel)
        assert exc.value.status_code == status
        assert str(status) in exc.value.message

    def test_unexpected_status(self):
        with pytest.raises(UnknownError) as exc:
            classify(make_response(302), UserModel)
        assert "302" in exc.value.message
