"""Tests for the Renpho client: sign-in, fetch, and normalization."""

import base64
from unittest.mock import MagicMock, patch

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from httpx import Response

from scale_connector.client import RenphoClient
from scale_connector.exceptions import AuthError, FetchError
from scale_connector.vendor_types import Credential, Measurement, Session, VendorConfig

SIGN_IN_OK = {
    "status_code": "20000",
    "status_message": "ok",
    "terminal_user_session_key": "session-abc",
    "id": "4242",
}

SIGN_IN_REJECTED = {
    "status_code": "50004",
    "status_message": "password error",
    "terminal_user_session_key": None,
    "id": None,
}


def _response(payload, status_code: int = 200):
    mock_response = MagicMock(spec=Response)
    mock_response.status_code = status_code
    mock_response.json.return_value = payload
    return mock_response


@pytest.fixture(scope="module")
def private_key():
    """Throwaway RSA key pair standing in for the vendor's."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def vendor_config(private_key):
    der = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return VendorConfig(
        base_url="https://scale.example.com",
        public_key=base64.b64encode(der).decode("ascii"),
    )


@pytest.fixture
def client(vendor_config):
    """Create client instance."""
    return RenphoClient(
        Credential(email="user@example.com", password="hunter2"),
        config=vendor_config,
    )


class TestAuthenticate:
    """Tests for the two-stage sign-in."""

    @pytest.mark.asyncio
    async def test_plaintext_success_uses_one_attempt(self, client):
        with patch.object(
            client.http_client, "post", return_value=_response(SIGN_IN_OK)
        ) as mock_post:
            session = await client.authenticate()

        assert session == Session(session_key="session-abc", user_id="4242")
        assert client.session == session
        assert client.is_authenticated

        mock_post.assert_called_once()
        call_args = mock_post.call_args
        assert call_args[0][0] == "https://scale.example.com/api/v3/users/sign_in.json?app_id=Renpho"
        assert call_args[1]["json"] == {
            "secure_flag": "0",
            "email": "user@example.com",
            "password": "hunter2",
        }
        assert call_args[1]["headers"]["Content-Type"] == "application/json"
        assert call_args[1]["headers"]["User-Agent"] == "Renpho/4.9.0 (Android)"

    @pytest.mark.asyncio
    async def test_encrypted_success_uses_two_attempts(self, client, private_key):
        with patch.object(
            client.http_client,
            "post",
            side_effect=[_response(SIGN_IN_REJECTED), _response(SIGN_IN_OK)],
        ) as mock_post:
            session = await client.authenticate()

        assert session.session_key == "session-abc"
        assert mock_post.call_count == 2

        second_body = mock_post.call_args_list[1][1]["json"]
        assert second_body["secure_flag"] == "1"
        assert second_body["email"] == "user@example.com"
        assert second_body["password"] != "hunter2"

        ciphertext = base64.b64decode(second_body["password"])
        assert private_key.decrypt(ciphertext, padding.PKCS1v15()) == b"hunter2"

    @pytest.mark.asyncio
    async def test_both_rejected_raises_after_two_attempts(self, client):
        last = {"status_code": "50005", "status_message": "account locked"}

        with patch.object(
            client.http_client,
            "post",
            side_effect=[_response(SIGN_IN_REJECTED), _response(last)],
        ) as mock_post:
            with pytest.raises(AuthError) as exc_info:
                await client.authenticate()

        assert mock_post.call_count == 2
        assert exc_info.value.attempts == 2
        assert exc_info.value.status_code == "50005"
        assert exc_info.value.status_message == "account locked"
        assert "account locked" in str(exc_info.value)
        assert client.session is None

    @pytest.mark.asyncio
    async def test_success_code_without_tokens_is_rejected(self, client):
        incomplete = {"status_code": "20000", "terminal_user_session_key": "key-only"}

        with patch.object(
            client.http_client, "post", return_value=_response(incomplete)
        ) as mock_post:
            with pytest.raises(AuthError):
                await client.authenticate()

        assert mock_post.call_count == 2

    @pytest.mark.asyncio
    async def test_network_error_on_first_attempt_is_terminal(self, client):
        with patch.object(
            client.http_client,
            "post",
            side_effect=httpx.ConnectError("connection refused"),
        ) as mock_post:
            with pytest.raises(AuthError) as exc_info:
                await client.authenticate()

        mock_post.assert_called_once()
        assert exc_info.value.attempts == 1
        assert "Network error" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_network_error_on_second_attempt(self, client):
        with patch.object(
            client.http_client,
            "post",
            side_effect=[_response(SIGN_IN_REJECTED), httpx.ReadTimeout("timed out")],
        ) as mock_post:
            with pytest.raises(AuthError) as exc_info:
                await client.authenticate()

        assert mock_post.call_count == 2
        assert exc_info.value.attempts == 2

    @pytest.mark.asyncio
    async def test_malformed_key_falls_back_to_plaintext(self):
        client = RenphoClient(
            Credential(email="user@example.com", password="hunter2"),
            config=VendorConfig(public_key="this is not a key"),
        )

        with patch.object(
            client.http_client,
            "post",
            side_effect=[_response(SIGN_IN_REJECTED), _response(SIGN_IN_OK)],
        ) as mock_post:
            session = await client.authenticate()

        assert session.user_id == "4242"
        second_body = mock_post.call_args_list[1][1]["json"]
        assert second_body["secure_flag"] == "1"
        assert second_body["password"] == "hunter2"

    @pytest.mark.asyncio
    async def test_non_json_first_response_moves_to_encrypted(self, client):
        broken = MagicMock(spec=Response)
        broken.status_code = 502
        broken.json.side_effect = ValueError("Expecting value")

        with patch.object(
            client.http_client,
            "post",
            side_effect=[broken, _response(SIGN_IN_OK)],
        ) as mock_post:
            await client.authenticate()

        assert mock_post.call_count == 2

    @pytest.mark.asyncio
    async def test_numeric_ids_are_accepted(self, client):
        numeric = {"status_code": 20000, "terminal_user_session_key": "k", "id": 77}

        with patch.object(client.http_client, "post", return_value=_response(numeric)):
            session = await client.authenticate()

        assert session.user_id == "77"


class TestFetchMeasurements:
    """Tests for measurement fetching."""

    @pytest.fixture
    def signed_in(self, client):
        client._session = Session(session_key="session-abc", user_id="4242")
        return client

    @pytest.mark.asyncio
    async def test_without_session_returns_empty(self, client):
        with patch.object(client.http_client, "get") as mock_get:
            result = await client.fetch_measurements()

        assert result == []
        mock_get.assert_not_called()
        assert client.last_fetch_error is None

    @pytest.mark.asyncio
    async def test_fetch_success(self, signed_in):
        payload = {
            "status_code": "20000",
            "last_ary": [
                {"id": 1, "time_stamp": 1700000000, "weight": 70.5, "bodyfat": 18.2},
                {"id": 2, "time_stamp": None, "weight": 70.1, "extra_field": "x"},
            ],
        }

        with patch.object(
            signed_in.http_client, "get", return_value=_response(payload)
        ) as mock_get:
            result = await signed_in.fetch_measurements()

        assert [m.id for m in result] == [1, 2]
        assert result[0].bodyfat == 18.2
        assert result[1].time_stamp is None
        assert signed_in.last_fetch_error is None

        call_args = mock_get.call_args
        assert call_args[0][0] == "https://scale.example.com/api/v2/measurements/list.json"
        assert call_args[1]["params"] == {
            "user_id": "4242",
            "last_at": 883612800,
            "locale": "en",
            "app_id": "Renpho",
            "terminal_user_session_key": "session-abc",
        }

    @pytest.mark.asyncio
    async def test_rejected_status_returns_empty(self, signed_in):
        payload = {"status_code": "40001", "status_message": "session expired"}

        with patch.object(signed_in.http_client, "get", return_value=_response(payload)):
            result = await signed_in.fetch_measurements()

        assert result == []
        assert isinstance(signed_in.last_fetch_error, FetchError)
        assert signed_in.last_fetch_error.status_code == "40001"

    @pytest.mark.asyncio
    async def test_network_error_returns_empty(self, signed_in):
        with patch.object(
            signed_in.http_client, "get", side_effect=httpx.ConnectTimeout("slow")
        ):
            result = await signed_in.fetch_measurements()

        assert result == []
        assert "Network error" in signed_in.last_fetch_error.message

    @pytest.mark.asyncio
    async def test_malformed_body_returns_empty(self, signed_in):
        with patch.object(
            signed_in.http_client, "get", return_value=_response(["not", "an", "object"])
        ):
            result = await signed_in.fetch_measurements()

        assert result == []
        assert signed_in.last_fetch_error is not None

    @pytest.mark.asyncio
    async def test_unreadable_items_are_skipped(self, signed_in):
        payload = {
            "status_code": "20000",
            "last_ary": [
                {"id": 1, "weight": 70.0},
                "garbage",
                {"id": 3, "weight": "heavy"},
                {"id": 4, "weight": 69.8},
            ],
        }

        with patch.object(signed_in.http_client, "get", return_value=_response(payload)):
            result = await signed_in.fetch_measurements()

        assert [m.id for m in result] == [1, 4]

    @pytest.mark.asyncio
    async def test_missing_list_returns_empty_without_error(self, signed_in):
        with patch.object(
            signed_in.http_client, "get", return_value=_response({"status_code": "20000"})
        ):
            result = await signed_in.fetch_measurements()

        assert result == []
        assert signed_in.last_fetch_error is None


class TestSyncMeasurements:
    """Tests for the authenticate -> fetch -> normalize convenience."""

    @pytest.mark.asyncio
    async def test_sync_measurements(self, client):
        payload = {"status_code": "20000", "last_ary": [{"id": 9, "time_stamp": 0, "bodyfat": 18.2}]}

        with patch.object(client.http_client, "post", return_value=_response(SIGN_IN_OK)), \
                patch.object(client.http_client, "get", return_value=_response(payload)):
            records = await client.sync_measurements()

        assert len(records) == 1
        assert records[0]["bodyFat"] == 18.2
        assert records[0]["date"] == "1970-01-01"

    def test_normalize_is_static(self):
        records = RenphoClient.normalize([Measurement(id=1)])
        assert records[0]["date"] is None

    @pytest.mark.asyncio
    async def test_context_manager(self, client):
        async with client as c:
            assert c is client

        assert client.http_client.is_closed
