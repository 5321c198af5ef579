"""Unit tests for ResponseNormalizer."""

import json

import httpx
import pytest

from chagee_client.clients.response_normalizer import ResponseNormalizer
from chagee_client.models.common import NETWORK_ERROR, NETWORK_TIMEOUT
from chagee_client.utils.exceptions import RequestTimeoutError, TransportError


class TestResponseNormalizer:
    """Test suite for response and error normalization."""

    @pytest.fixture
    def normalizer(self) -> ResponseNormalizer:
        return ResponseNormalizer(timeout=12.0)

    @pytest.mark.parametrize(
        ("errcode", "expected"),
        [("0", "0"), (0, "0"), ("B0001", "B0001"), (10086, "10086")],
    )
    def test_explicit_code_preserved(self, errcode, expected):
        envelope = ResponseNormalizer.from_response(
            503, json.dumps({"errcode": errcode, "errmsg": "x"})
        )

        assert envelope.code == expected

    @pytest.mark.parametrize("status", [200, 201, 400, 429, 500])
    def test_missing_code_defaults_to_status(self, status):
        envelope = ResponseNormalizer.from_response(status, '{"errmsg": "hello"}')

        assert envelope.code == str(status)
        assert envelope.message == "hello"

    def test_null_code_defaults_to_status(self):
        envelope = ResponseNormalizer.from_response(502, '{"errcode": null}')

        assert envelope.code == "502"

    def test_data_key_becomes_payload(self):
        envelope = ResponseNormalizer.from_response(
            200, '{"errcode": "0", "data": {"storeNo": "S1"}, "globalTicket": "g"}'
        )

        assert envelope.payload == {"storeNo": "S1"}
        assert envelope.model_extra == {"globalTicket": "g"}

    def test_object_without_data_key_becomes_payload(self):
        envelope = ResponseNormalizer.from_response(200, '{"stores": [1, 2]}')

        assert envelope.code == "200"
        assert envelope.payload == {"stores": [1, 2]}

    def test_empty_body(self):
        envelope = ResponseNormalizer.from_response(200, "")

        assert envelope.code == "200"
        assert envelope.payload == {}
        assert envelope.message is None

    def test_non_json_body(self):
        envelope = ResponseNormalizer.from_response(500, "Internal Server Error")

        assert envelope.code == "500"
        assert envelope.message == "Internal Server Error"
        assert envelope.payload is None

    def test_json_string_body(self):
        envelope = ResponseNormalizer.from_response(200, '"maintenance"')

        assert envelope.code == "200"
        assert envelope.message == "maintenance"
        assert envelope.payload == "maintenance"

    def test_json_list_body(self):
        envelope = ResponseNormalizer.from_response(200, "[1, 2, 3]")

        assert envelope.message == "Unexpected response"
        assert envelope.payload == [1, 2, 3]

    def test_timeout_error(self, normalizer):
        envelope = normalizer.from_error(RequestTimeoutError(12.0))

        assert envelope.code == NETWORK_TIMEOUT
        assert envelope.message == "Request timed out after 12000ms."

    def test_httpx_timeout_counts_as_timeout(self, normalizer):
        envelope = normalizer.from_error(httpx.ReadTimeout("read timed out"))

        assert envelope.code == NETWORK_TIMEOUT

    def test_transport_error(self, normalizer):
        envelope = normalizer.from_error(TransportError("Connection refused"))

        assert envelope.code == NETWORK_ERROR
        assert envelope.message == "Connection refused"

    def test_transport_error_without_message(self, normalizer):
        envelope = normalizer.from_error(TransportError(""))

        assert envelope.message == "Network request failed."

    def test_exhausted_fallback(self):
        envelope = ResponseNormalizer.exhausted()

        assert envelope.code == NETWORK_ERROR
        assert envelope.message == "Request failed after retries."

    def test_too_deeply_nested_body(self):
        body = '{"a":' * 100000 + "1" + "}" * 100000

        envelope = ResponseNormalizer.from_response(500, body)

        assert envelope.code == "500"
        assert envelope.message == body
