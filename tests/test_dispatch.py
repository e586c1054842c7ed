"""Tests for forwarding command invocations to the action server."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from conftest import make_response, mock_async_client
from slashbridge.config import Settings
from slashbridge.errors import ResponseDecodeError
from slashbridge.modules.actions.dispatch import DispatchGateway, error_result
from slashbridge.modules.actions.models import CommandResult, ResponseType

CLIENT = "slashbridge.modules.actions.dispatch.httpx.AsyncClient"


@pytest.fixture
def gateway(settings: Settings) -> DispatchGateway:
    return DispatchGateway(settings=settings)


def _wire(mock_cls: MagicMock, response=None, send_error=None) -> AsyncMock:
    request = MagicMock()
    send = AsyncMock(side_effect=send_error) if send_error else AsyncMock(return_value=response)
    return mock_async_client(mock_cls, build_request=MagicMock(return_value=request), send=send)


class TestDispatch:
    """Tests for DispatchGateway.dispatch."""

    @pytest.mark.asyncio
    async def test_success_returns_remote_result(self, gateway: DispatchGateway) -> None:
        body = b'{"response_type": "in_channel", "text": "deployed to prod", "props": {"from_bridge": true}}'
        with patch(CLIENT) as mock_cls:
            client = _wire(mock_cls, make_response(200, body))
            result = await gateway.dispatch("deploy prod")

        assert result.response_type == "in_channel"
        assert result.text == "deployed to prod"
        assert result.props == {"from_bridge": True}
        client.build_request.assert_called_once_with(
            "POST",
            "http://actions.test/perform-action",
            json={"action": "deploy prod"},
            headers={"Content-Type": "application/json"},
        )
        client.send.assert_awaited_once()
        assert client.send.await_args.kwargs == {"stream": True}

    @pytest.mark.asyncio
    async def test_unknown_fields_pass_through(self, gateway: DispatchGateway) -> None:
        body = b'{"response_type": "ephemeral", "text": "hi", "extra_responses": [{"text": "more"}]}'
        with patch(CLIENT) as mock_cls:
            _wire(mock_cls, make_response(200, body))
            result = await gateway.dispatch("ping")

        assert result.is_ephemeral
        assert result.model_dump()["extra_responses"] == [{"text": "more"}]

    @pytest.mark.asyncio
    async def test_go_marshalled_result_with_null_fields(self, gateway: DispatchGateway) -> None:
        """A Go CommandResponse with nil maps and slices decodes and is returned as sent."""
        body = (
            b'{"response_type":"in_channel","text":"deployed","username":"","channel_id":"",'
            b'"icon_url":"","type":"","props":null,"goto_location":"","trigger_id":"",'
            b'"skip_slack_parsing":false,"attachments":null,"extra_responses":null}'
        )
        with patch(CLIENT) as mock_cls:
            _wire(mock_cls, make_response(200, body))
            result = await gateway.dispatch("deploy prod")

        assert result.text == "deployed"
        assert result.response_type == "in_channel"
        assert result.props == {}
        dumped = result.model_dump()
        assert dumped["attachments"] is None
        assert dumped["extra_responses"] is None
        assert dumped["skip_slack_parsing"] is False

    @pytest.mark.asyncio
    async def test_unreachable_server(self, gateway: DispatchGateway) -> None:
        """Transport failures come back as an ephemeral message, never an exception."""
        with patch(CLIENT) as mock_cls:
            _wire(mock_cls, send_error=httpx.ConnectError("Connection refused"))
            result = await gateway.dispatch("deploy prod")

        assert result.response_type == ResponseType.EPHEMERAL
        assert result.text == "Error sending request: Connection refused"

    @pytest.mark.asyncio
    async def test_timeout(self, gateway: DispatchGateway) -> None:
        with patch(CLIENT) as mock_cls:
            _wire(mock_cls, send_error=httpx.ReadTimeout("timed out"))
            result = await gateway.dispatch("slow")

        assert result.is_ephemeral
        assert result.text.startswith("Error sending request")

    @pytest.mark.asyncio
    async def test_body_read_failure(self, gateway: DispatchGateway) -> None:
        response = make_response(200)
        response.aread = AsyncMock(side_effect=httpx.RemoteProtocolError("peer closed connection"))
        with patch(CLIENT) as mock_cls:
            _wire(mock_cls, response)
            result = await gateway.dispatch("ping")

        assert result.is_ephemeral
        assert result.text == "Error reading request response: peer closed connection"
        response.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unparseable_response(self, gateway: DispatchGateway) -> None:
        with patch(CLIENT) as mock_cls:
            _wire(mock_cls, make_response(502, b"<html>Bad Gateway</html>"))
            result = await gateway.dispatch("ping")

        assert result.is_ephemeral
        assert result.text.startswith("Error parsing request response: ")

    @pytest.mark.asyncio
    async def test_request_build_failure(self, gateway: DispatchGateway) -> None:
        with patch(CLIENT) as mock_cls:
            client = _wire(mock_cls, make_response(200, b"{}"))
            client.build_request = MagicMock(side_effect=httpx.InvalidURL("bad url"))
            result = await gateway.dispatch("ping")

        assert result.is_ephemeral
        assert result.text == "Error building request: bad url"
        client.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_error_status_with_result_body_is_returned(self, gateway: DispatchGateway) -> None:
        """Non-2xx is not an error on its own; a decodable body is still shown."""
        body = b'{"response_type": "ephemeral", "text": "unknown action"}'
        with patch(CLIENT) as mock_cls:
            _wire(mock_cls, make_response(404, body))
            result = await gateway.dispatch("nope")

        assert result.text == "unknown action"

    @pytest.mark.asyncio
    async def test_unexpected_error_still_returns_result(self, gateway: DispatchGateway) -> None:
        with patch(CLIENT) as mock_cls:
            _wire(mock_cls, send_error=RuntimeError("boom"))
            result = await gateway.dispatch("ping")

        assert result.is_ephemeral
        assert result.text == "Error performing action: boom"


class TestHelpers:
    """Tests for response decoding and error folding."""

    def test_decode_response(self) -> None:
        result = DispatchGateway.decode_response(b'{"text": "ok"}')
        assert isinstance(result, CommandResult)
        assert result.text == "ok"

    def test_decode_response_null_strings(self) -> None:
        result = DispatchGateway.decode_response(b'{"text": null, "response_type": null, "props": null}')
        assert result.text == ""
        assert result.response_type == ""
        assert result.props == {}

    def test_decode_response_rejects_non_object(self) -> None:
        with pytest.raises(ResponseDecodeError):
            DispatchGateway.decode_response(b"[1, 2]")

    def test_error_result_prefix(self) -> None:
        result = error_result(ResponseDecodeError("Invalid JSON"))
        assert result.response_type == "ephemeral"
        assert result.text == "Error parsing request response: Invalid JSON"
