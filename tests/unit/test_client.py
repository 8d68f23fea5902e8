r"""Unit tests for ChatAdsClient."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import Mock, call, patch

import httpx
import pytest

from chatads import (
    ChatAdsAPIError,
    ChatAdsClient,
    ChatAdsSDKError,
    ChatAdsTimeoutError,
    ChatAdsValidationError,
    ClientConfig,
    HttpxTransport,
)
from tests.helpers import (
    API_KEY,
    BASE_URL,
    ENDPOINT_URL,
    HangingTransport,
    RaisingTransport,
    make_client,
    make_mock_async_client,
    success_envelope,
)

if TYPE_CHECKING:
    from unittest.mock import AsyncMock


def sent_body(client: Mock, index: int = 0) -> dict:
    return json.loads(client.request.call_args_list[index].kwargs["content"])


###################################
#     Tests for construction      #
###################################


def test_client_from_options() -> None:
    """Test that keyword options build the configuration."""
    client = ChatAdsClient(api_key=API_KEY, base_url=f"{BASE_URL}/", max_retries=2)
    assert client.config.base_url == BASE_URL
    assert client.config.max_retries == 2


def test_client_from_config() -> None:
    """Test that a ClientConfig is used as-is."""
    config = ClientConfig(api_key=API_KEY, base_url=BASE_URL)
    assert ChatAdsClient(config).config is config


def test_client_config_and_options() -> None:
    """Test that a config and keyword options cannot be combined."""
    config = ClientConfig(api_key=API_KEY, base_url=BASE_URL)
    with pytest.raises(ChatAdsValidationError, match=r"not both"):
        ChatAdsClient(config, max_retries=2)


def test_client_missing_api_key() -> None:
    """Test that construction fails without an API key."""
    with pytest.raises(ChatAdsSDKError, match=r"api_key is required"):
        ChatAdsClient(api_key="", base_url=BASE_URL)


def test_client_missing_base_url() -> None:
    """Test that construction fails without a base URL."""
    with pytest.raises(ChatAdsSDKError, match=r"base_url is required"):
        ChatAdsClient(api_key=API_KEY)


def test_client_insecure_base_url() -> None:
    """Test that construction fails with a plain http base URL."""
    with pytest.raises(ChatAdsValidationError, match=r"base_url must start with https://"):
        ChatAdsClient(api_key=API_KEY, base_url="http://api.example.com")


def test_client_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that from_env reads the API key and base URL."""
    monkeypatch.setenv("CHATADS_API_KEY", API_KEY)
    monkeypatch.setenv("CHATADS_BASE_URL", BASE_URL)
    client = ChatAdsClient.from_env(max_retries=1)
    assert client.config.url == ENDPOINT_URL
    assert client.config.max_retries == 1


################################
#     Tests for analyze        #
################################


@pytest.mark.asyncio
async def test_analyze_success(mock_async_client: Mock, mock_asleep: Mock) -> None:
    """Test that a successful call returns the envelope unchanged."""
    client = make_client(mock_async_client)

    result = await client.analyze({"message": "I need a CRM"})

    assert result.raw == success_envelope()
    assert result.data.status == "filled"
    assert len(result.data.offers) == 1
    assert result.data.offers[0].url == "https://example.com/crm"
    assert result.data.offers[0].link_text == "Buy CRM"
    assert result.data.requested == 1
    assert result.data.returned == 1
    assert result.meta.request_id == "req_abc123"

    mock_async_client.request.assert_called_once()
    args = mock_async_client.request.call_args
    assert args.args == ("POST", ENDPOINT_URL)
    assert args.kwargs["headers"]["x-api-key"] == API_KEY
    assert args.kwargs["headers"]["content-type"] == "application/json"
    assert sent_body(mock_async_client) == {"message": "I need a CRM"}
    mock_asleep.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_http_error(mock_asleep: Mock) -> None:
    """Test that a 401 raises ChatAdsAPIError without retrying."""
    error_body = {
        "data": {"status": "internal_error", "offers": [], "requested": 0, "returned": 0},
        "error": {"code": "unauthorized", "message": "Invalid API key"},
        "meta": {"request_id": "req_err"},
    }
    mock_client = make_mock_async_client(httpx.Response(401, json=error_body))
    client = make_client(mock_client, max_retries=3)

    with pytest.raises(ChatAdsAPIError, match=r"unauthorized: Invalid API key") as exc_info:
        await client.analyze({"message": "hello"})

    error = exc_info.value
    assert error.status_code == 401
    assert error.response == error_body
    assert error.error_code == "unauthorized"
    assert error.url == ENDPOINT_URL
    assert error.request_body == {"message": "hello"}
    mock_client.request.assert_called_once()
    mock_asleep.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("message", ["", "   ", None, 42])
async def test_analyze_invalid_message(mock_async_client: Mock, message: object) -> None:
    """Test that invalid messages fail before any network call."""
    client = make_client(mock_async_client)

    with pytest.raises(ChatAdsValidationError, match=r"non-empty string"):
        await client.analyze({"message": message})

    mock_async_client.request.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", ["I need a CRM", ["I need a CRM"], None, 42])
async def test_analyze_payload_not_mapping(mock_async_client: Mock, payload: object) -> None:
    """Test that a payload which is not a mapping fails before any network
    call."""
    client = make_client(mock_async_client)

    with pytest.raises(ChatAdsValidationError, match=r"payload.message must be a non-empty string"):
        await client.analyze(payload)

    mock_async_client.request.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_reserved_extra_fields(mock_async_client: Mock) -> None:
    """Test that reserved keys in extra fields are rejected."""
    client = make_client(mock_async_client)

    with pytest.raises(ChatAdsValidationError, match=r"reserved keys: message, country"):
        await client.analyze(
            {"message": "hello", "extra_fields": {"message": "override", "country": "US"}}
        )

    mock_async_client.request.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_invalid_timeout_override(mock_async_client: Mock) -> None:
    """Test that a non-positive per-call timeout is rejected."""
    client = make_client(mock_async_client)

    with pytest.raises(ChatAdsValidationError, match=r"timeout must be > 0"):
        await client.analyze({"message": "hello"}, timeout=0)

    mock_async_client.request.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_extra_headers(mock_async_client: Mock) -> None:
    """Test that per-call headers are lower-cased and win on collision."""
    client = make_client(mock_async_client, user_agent="chatads-tests/1.0")

    await client.analyze(
        {"message": "hello"},
        headers={"X-Trace-Id": "abc", "Content-Type": "application/json; charset=utf-8"},
    )

    headers = mock_async_client.request.call_args.kwargs["headers"]
    assert headers["x-trace-id"] == "abc"
    assert headers["content-type"] == "application/json; charset=utf-8"
    assert headers["user-agent"] == "chatads-tests/1.0"


@pytest.mark.asyncio
async def test_analyze_is_deterministic(mock_async_client: Mock) -> None:
    """Test that repeating a call sends byte-identical bodies."""
    mock_async_client.request.side_effect = [
        httpx.Response(200, json=success_envelope()),
        httpx.Response(200, json=success_envelope()),
    ]
    client = make_client(mock_async_client)
    payload = {"message": " hello ", "country": "US", "extra_fields": {"campaign": "spring"}}

    await client.analyze(payload)
    await client.analyze(payload)

    first, second = mock_async_client.request.call_args_list
    assert first.kwargs["content"] == second.kwargs["content"]


########################################
#     Tests for analyze_message        #
########################################


@pytest.mark.asyncio
async def test_analyze_message_optional_fields(mock_async_client: Mock) -> None:
    """Test that named options are sent with the message."""
    client = make_client(mock_async_client)

    await client.analyze_message("I need a CRM", quality="fast", country="US")

    assert sent_body(mock_async_client) == {
        "message": "I need a CRM",
        "quality": "fast",
        "country": "US",
    }


@pytest.mark.asyncio
async def test_analyze_message_aliases(mock_async_client: Mock) -> None:
    """Test that aliased option names are rewritten."""
    client = make_client(mock_async_client)

    await client.analyze_message("hello", fillpriority="fast", country_code="US")

    body = sent_body(mock_async_client)
    assert body == {"message": "hello", "quality": "fast", "country": "US"}
    assert "fillpriority" not in body


@pytest.mark.asyncio
async def test_analyze_message_extra_fields(mock_async_client: Mock) -> None:
    """Test that extra fields are merged into the body."""
    client = make_client(mock_async_client)

    await client.analyze_message("hello", extra_fields={"custom_field": "value"})

    assert sent_body(mock_async_client) == {"message": "hello", "custom_field": "value"}


@pytest.mark.asyncio
async def test_analyze_message_strips_none(mock_async_client: Mock) -> None:
    """Test that None options are not sent."""
    client = make_client(mock_async_client)

    await client.analyze_message("hello", country=None, ip=None)

    assert sent_body(mock_async_client) == {"message": "hello"}


#####################################
#     Tests for raise_on_failure    #
#####################################

LOGICAL_ERROR = {
    "data": {"status": "internal_error", "offers": [], "requested": 0, "returned": 0},
    "error": {"code": "rate_limit", "message": "Too many requests"},
    "meta": {"request_id": "req_fail"},
}


@pytest.mark.asyncio
async def test_raise_on_failure_true() -> None:
    """Test that a logical failure raises with status 200 when
    configured."""
    mock_client = make_mock_async_client(httpx.Response(200, json=LOGICAL_ERROR))
    client = make_client(mock_client, raise_on_failure=True)

    with pytest.raises(ChatAdsAPIError) as exc_info:
        await client.analyze({"message": "hello"})

    assert exc_info.value.status_code == 200
    assert exc_info.value.error_code == "rate_limit"


@pytest.mark.asyncio
async def test_raise_on_failure_false() -> None:
    """Test that a logical failure is returned as data by default."""
    mock_client = make_mock_async_client(httpx.Response(200, json=LOGICAL_ERROR))
    client = make_client(mock_client)

    result = await client.analyze({"message": "hello"})

    assert result.error is not None
    assert result.error.code == "rate_limit"
    assert result.data.status == "internal_error"


@pytest.mark.asyncio
async def test_raise_on_failure_custom_detector() -> None:
    """Test that the logical failure signal is configurable."""
    mock_client = make_mock_async_client(
        httpx.Response(200, json=success_envelope(data={"status": "internal_error"}))
    )
    client = make_client(
        mock_client,
        raise_on_failure=True,
        failure_detector=lambda body: body["data"]["status"] == "internal_error",
    )

    with pytest.raises(ChatAdsAPIError, match=r"HTTP 200"):
        await client.analyze({"message": "hello"})


###############################
#     Tests for retries       #
###############################


@pytest.mark.asyncio
async def test_retry_on_429_then_success(mock_asleep: Mock) -> None:
    """Test that a 429 is retried with exponential backoff."""
    mock_client = make_mock_async_client(
        httpx.Response(429, json={"data": {}, "meta": {"request_id": "r"}}),
        httpx.Response(200, json=success_envelope()),
    )
    client = make_client(mock_client, max_retries=2, backoff_factor=0.1)

    result = await client.analyze({"message": "hello"})

    assert result.raw == success_envelope()
    assert mock_client.request.call_count == 2
    mock_asleep.assert_called_once_with(0.1)


@pytest.mark.asyncio
async def test_retry_after_header(mock_asleep: Mock) -> None:
    """Test that a numeric Retry-After header overrides the backoff."""
    mock_client = make_mock_async_client(
        httpx.Response(429, json={"meta": {"request_id": "r"}}, headers={"Retry-After": "2"}),
        httpx.Response(200, json=success_envelope()),
    )
    client = make_client(mock_client, max_retries=1, backoff_factor=0.1)

    result = await client.analyze({"message": "hello"})

    assert result.data.status == "filled"
    assert mock_client.request.call_count == 2
    mock_asleep.assert_called_once_with(2.0)


@pytest.mark.asyncio
async def test_retry_backoff_sequence(mock_asleep: Mock) -> None:
    """Test that delays double between consecutive retries."""
    mock_client = make_mock_async_client(
        httpx.Response(503),
        httpx.Response(503),
        httpx.Response(503),
        httpx.Response(200, json=success_envelope()),
    )
    client = make_client(mock_client, max_retries=3, backoff_factor=0.1)

    await client.analyze({"message": "hello"})

    assert mock_asleep.call_args_list == [call(0.1), call(0.2), call(0.4)]


@pytest.mark.asyncio
@pytest.mark.parametrize("max_retries", [0, 1, 3])
async def test_retry_exhausted(mock_asleep: Mock, max_retries: int) -> None:
    """Test that at most max_retries + 1 attempts are made."""
    mock_client = make_mock_async_client(
        *[httpx.Response(500, json={"meta": {"request_id": "r"}}) for _ in range(max_retries + 1)]
    )
    client = make_client(mock_client, max_retries=max_retries)

    with pytest.raises(ChatAdsAPIError, match=r"HTTP 500") as exc_info:
        await client.analyze({"message": "hello"})

    assert exc_info.value.status_code == 500
    assert exc_info.value.response == {"meta": {"request_id": "r"}}
    assert mock_client.request.call_count == max_retries + 1
    assert mock_asleep.call_count == max_retries


@pytest.mark.asyncio
async def test_retry_transport_error_then_success(mock_asleep: Mock) -> None:
    """Test that transport failures are retried."""
    mock_client = make_mock_async_client(
        httpx.ConnectError("connection refused"),
        httpx.Response(200, json=success_envelope()),
    )
    client = make_client(mock_client, max_retries=1, backoff_factor=0.1)

    result = await client.analyze({"message": "hello"})

    assert result.meta.request_id == "req_abc123"
    mock_asleep.assert_called_once_with(0.1)


@pytest.mark.asyncio
async def test_transport_error_exhausted_is_wrapped(mock_asleep: Mock) -> None:
    """Test that an exhausted transport failure is wrapped as
    ChatAdsSDKError."""
    error = httpx.ConnectError("connection refused")
    transport = RaisingTransport(error)
    client = ChatAdsClient(
        api_key=API_KEY, base_url=BASE_URL, transport=transport, max_retries=2
    )

    with pytest.raises(ChatAdsSDKError, match=r"Unexpected error while calling ChatAds") as exc_info:
        await client.analyze({"message": "hello"})

    assert not isinstance(exc_info.value, ChatAdsAPIError)
    assert exc_info.value.cause is error
    assert exc_info.value.__cause__ is error
    assert transport.calls == 3
    assert mock_asleep.call_count == 2


@pytest.mark.asyncio
async def test_invalid_json_not_retried(mock_asleep: Mock) -> None:
    """Test that an unparsable 2xx body fails without retrying."""
    mock_client = make_mock_async_client(httpx.Response(200, text="not json at all {{{"))
    client = make_client(mock_client, max_retries=3)

    with pytest.raises(ChatAdsSDKError, match=r"Failed to parse ChatAds response as JSON"):
        await client.analyze({"message": "hello"})

    mock_client.request.assert_called_once()
    mock_asleep.assert_not_called()


@pytest.mark.asyncio
async def test_unparsable_error_page_not_retried(mock_asleep: Mock) -> None:
    """Test that an unparsable body fails locally even with a retryable
    status."""
    mock_client = make_mock_async_client(
        *[httpx.Response(503, text="<html>bad gateway</html>") for _ in range(3)]
    )
    client = make_client(mock_client, max_retries=2)

    with pytest.raises(ChatAdsSDKError, match=r"Failed to parse ChatAds response as JSON") as exc_info:
        await client.analyze({"message": "hello"})

    assert not isinstance(exc_info.value, ChatAdsAPIError)
    mock_client.request.assert_called_once()
    mock_asleep.assert_not_called()


###############################
#     Tests for timeouts      #
###############################


@pytest.mark.asyncio
async def test_timeout() -> None:
    """Test that a hanging transport times out and is cancelled once."""
    transport = HangingTransport()
    client = ChatAdsClient(
        api_key=API_KEY, base_url=BASE_URL, transport=transport, timeout=0.05, max_retries=3
    )

    with pytest.raises(ChatAdsTimeoutError, match=r"timed out after 0.05s"):
        await client.analyze({"message": "hello"})

    assert transport.calls == 1
    assert transport.cancellations == 1


@pytest.mark.asyncio
async def test_timeout_per_call_override() -> None:
    """Test that the per-call timeout wins over the client default."""
    transport = HangingTransport()
    client = ChatAdsClient(api_key=API_KEY, base_url=BASE_URL, transport=transport)

    with pytest.raises(ChatAdsTimeoutError, match=r"timed out after 0.05s") as exc_info:
        await client.analyze({"message": "hello"}, timeout=0.05)

    assert exc_info.value.timeout == 0.05
    assert transport.cancellations == 1


##############################################
#     Tests for response normalization       #
##############################################


@pytest.mark.asyncio
async def test_defaults_missing_fields() -> None:
    """Test that missing offers and counters are defaulted."""
    mock_client = make_mock_async_client(
        httpx.Response(200, json={"data": {"status": "no_offers_found"}, "meta": {"request_id": "r"}})
    )
    client = make_client(mock_client)

    result = await client.analyze({"message": "hello"})

    assert result.data.offers == []
    assert result.data.requested == 0
    assert result.data.returned == 0


@pytest.mark.asyncio
async def test_defaults_missing_sections() -> None:
    """Test that missing data and meta sections are defaulted."""
    mock_client = make_mock_async_client(httpx.Response(200, json={}))
    client = make_client(mock_client)

    result = await client.analyze({"message": "hello"})

    assert result.data.offers == []
    assert result.meta.request_id == "unknown"


@pytest.mark.asyncio
async def test_empty_body() -> None:
    """Test that an empty body yields the default envelope."""
    mock_client = make_mock_async_client(httpx.Response(200, content=b""))
    client = make_client(mock_client)

    result = await client.analyze({"message": "hello"})

    assert result.success is False
    assert result.meta.request_id == "unknown"


##################################
#     Tests for logging sink     #
##################################


@pytest.mark.asyncio
async def test_logging_sink_one_record_per_attempt(mock_asleep: Mock, mock_logger: Mock) -> None:
    """Test that the sink receives one redacted record per attempt."""
    mock_client = make_mock_async_client(
        httpx.Response(503), httpx.Response(200, json=success_envelope())
    )
    client = make_client(mock_client, max_retries=1, logger=mock_logger)

    await client.analyze({"message": "I need a CRM"})

    assert mock_logger.log.call_count == 2
    extra = mock_logger.log.call_args.kwargs["extra"]
    assert extra["headers"]["x-api-key"] == "cak_..."
    assert extra["body"] == {"message": {"type": "string", "length": 12}}
    assert API_KEY not in repr(mock_logger.log.call_args_list)
    assert "I need a CRM" not in repr(mock_logger.log.call_args_list)


###################################
#     Tests for context manager   #
###################################


@pytest.mark.asyncio
async def test_context_manager_closes_owned_transport() -> None:
    """Test that the client closes the transport it created."""
    with patch.object(HttpxTransport, "aclose") as mock_aclose:
        async with ChatAdsClient(api_key=API_KEY, base_url=BASE_URL):
            pass
    mock_aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_context_manager_keeps_supplied_transport(mock_async_client: Mock) -> None:
    """Test that a transport from the config is left open."""
    async with make_client(mock_async_client) as client:
        await client.analyze({"message": "hello"})
    aclose: AsyncMock = mock_async_client.aclose
    aclose.assert_not_called()
