"""Unit tests for LogClient.

HTTP calls are mocked with patch.object on the wrapped httpx.AsyncClient.
"""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import structlog
from structlog.testing import LogCapture, capture_logs

from ajo_governance.domain.errors.log import LogSubmissionError, LogUnavailableError
from ajo_governance.domain.models.receipt import SequencedReceipt, SimulatedReceipt
from ajo_governance.infrastructure.adapters.log_client import LogClient


def _response(status_code: int = 200, payload=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = "" if payload is None else str(payload)
    response.json.return_value = payload
    return response


class TestLogClientInit:
    """Tests for client initialization."""

    def test_without_url_has_no_http_client(self) -> None:
        client = LogClient()
        assert client._client is None

    def test_custom_timeout(self) -> None:
        client = LogClient(base_url="http://log.test", timeout=4.0)
        assert client._client.timeout.read == 4.0


class TestLogClientSubmit:
    """Tests for submit()."""

    @pytest.mark.asyncio
    async def test_sequenced_receipt(self) -> None:
        """A successful submission returns the log's sequence number."""
        client = LogClient(base_url="http://log.test")
        response = _response(200, {"sequenceNumber": 42, "transactionId": "0.0.9@1.2"})

        with patch.object(client._client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = response
            receipt = await client.submit("0.0.4821", '{"proposalId":7}')

        assert receipt == SequencedReceipt(
            topic_id="0.0.4821", sequence_number=42, transaction_id="0.0.9@1.2"
        )
        assert receipt.simulated is False
        mock_post.assert_awaited_once_with(
            "/api/v1/topics/0.0.4821/messages",
            json={"topicId": "0.0.4821", "message": '{"proposalId":7}'},
        )

    @pytest.mark.asyncio
    async def test_hex_topic_converted(self) -> None:
        client = LogClient(base_url="http://log.test")

        with patch.object(client._client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _response(200, {"sequenceNumber": 1})
            receipt = await client.submit("0x" + (4821).to_bytes(32, "big").hex(), "{}")

        assert receipt.topic_id == "0.0.4821"

    @pytest.mark.asyncio
    async def test_connection_refused_is_simulated(self) -> None:
        """An unreachable log yields a simulated receipt, not an exception."""
        client = LogClient(base_url="http://log.test")

        with patch.object(client._client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.side_effect = httpx.ConnectError("Connection refused")
            with capture_logs() as logs:
                receipt = await client.submit("0.0.4821", "{}")

        assert isinstance(receipt, SimulatedReceipt)
        assert receipt.simulated is True
        assert 1 <= receipt.sequence_number < 1_000_000
        assert receipt.transaction_id.startswith("simulated-")
        assert "Connection refused" in receipt.reason
        assert logs[0]["event"] == "log_unavailable_simulating"
        assert logs[0]["log_level"] == "warning"

    @pytest.mark.asyncio
    async def test_timeout_is_simulated(self) -> None:
        client = LogClient(base_url="http://log.test")

        with patch.object(client._client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.side_effect = httpx.ReadTimeout("timed out")
            receipt = await client.submit("0.0.4821", "{}")

        assert receipt.simulated is True

    @pytest.mark.asyncio
    async def test_real_unreachable_endpoint_is_simulated(self) -> None:
        """Nothing listens on port 1; the fallback absorbs the failure."""
        async with LogClient(base_url="http://127.0.0.1:1", timeout=2.0) as client:
            receipt = await client.submit("0.0.4821", "{}")

        assert receipt.simulated is True

    @pytest.mark.asyncio
    async def test_unconfigured_is_simulated(self) -> None:
        receipt = await LogClient().submit("0.0.4821", "{}")

        assert receipt.simulated is True
        assert receipt.reason == "log endpoint not configured"

    @pytest.mark.asyncio
    async def test_fallback_disabled_raises(self) -> None:
        client = LogClient(base_url="http://log.test", allow_simulated_fallback=False)

        with patch.object(client._client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.side_effect = httpx.ConnectError("Connection refused")
            with pytest.raises(LogUnavailableError, match="0.0.4821"):
                await client.submit("0.0.4821", "{}")

    @pytest.mark.asyncio
    async def test_rejection_is_not_simulated(self) -> None:
        """A reachable log that refuses the message is an error."""
        client = LogClient(base_url="http://log.test")

        with patch.object(client._client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _response(400, {"error": "INVALID_TOPIC_ID"})
            with pytest.raises(LogSubmissionError, match="HTTP 400"):
                await client.submit("0.0.4821", "{}")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"sequenceNumber": "7"}, {"sequenceNumber": 0}, []])
    async def test_missing_sequence_number(self, payload) -> None:
        client = LogClient(base_url="http://log.test")

        with patch.object(client._client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _response(200, payload)
            with pytest.raises(LogSubmissionError, match="no sequence number"):
                await client.submit("0.0.4821", "{}")

    @pytest.mark.asyncio
    async def test_non_json_response(self) -> None:
        client = LogClient(base_url="http://log.test")
        response = _response(200)
        response.json.side_effect = ValueError("Expecting value")

        with patch.object(client._client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = response
            with pytest.raises(LogSubmissionError, match="not JSON"):
                await client.submit("0.0.4821", "{}")


class TestLogClientAvailability:
    """Tests for is_available()."""

    @pytest.mark.asyncio
    async def test_healthy(self) -> None:
        client = LogClient(base_url="http://log.test")

        with patch.object(client._client, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _response(200, {})
            assert await client.is_available() is True

        mock_get.assert_awaited_once_with("/health")

    @pytest.mark.asyncio
    async def test_unreachable(self) -> None:
        client = LogClient(base_url="http://log.test")

        with patch.object(client._client, "get", new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = httpx.ConnectError("refused")
            assert await client.is_available() is False

    @pytest.mark.asyncio
    async def test_server_error(self) -> None:
        client = LogClient(base_url="http://log.test")

        with patch.object(client._client, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _response(503, {})
            assert await client.is_available() is False

    @pytest.mark.asyncio
    async def test_unconfigured(self) -> None:
        assert await LogClient().is_available() is False


class TestLogClientLogging:
    """Tests for logger construction after configure()."""

    @pytest.fixture
    def capture(self):
        capture = LogCapture()
        yield capture
        structlog.reset_defaults()

    @pytest.mark.asyncio
    async def test_configured_processors_apply(self, capture) -> None:
        structlog.configure(processors=[capture])
        client = LogClient()

        await client.submit("0.0.4821", "{}")

        entry = [e for e in capture.entries if e["event"] == "log_unavailable_simulating"][0]
        assert entry["service"] == "LogClient"
        assert entry["log_level"] == "warning"

    @pytest.mark.asyncio
    async def test_configured_level_filters(self, capture) -> None:
        """A client built after configure() honours the configured level."""
        structlog.configure(
            processors=[capture],
            wrapper_class=structlog.make_filtering_bound_logger(logging.ERROR),
        )
        client = LogClient()

        receipt = await client.submit("0.0.4821", "{}")

        assert receipt.simulated is True
        assert capture.entries == []


class TestLogClientLifecycle:
    """Tests for closing the client."""

    @pytest.mark.asyncio
    async def test_context_manager_closes(self) -> None:
        client = LogClient(base_url="http://log.test")

        with patch.object(client._client, "aclose", new_callable=AsyncMock) as mock_close:
            async with client:
                pass

        mock_close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_without_client(self) -> None:
        await LogClient().close()
