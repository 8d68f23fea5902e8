from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from tests.helpers import success_envelope

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def mock_asleep() -> Generator[Mock, None, None]:
    """Patch asyncio.sleep to make tests run faster."""
    with patch("asyncio.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def mock_async_client() -> Mock:
    """Create a mock httpx.AsyncClient answering with a success
    envelope."""
    return Mock(
        spec=httpx.AsyncClient,
        request=AsyncMock(return_value=httpx.Response(200, json=success_envelope())),
        aclose=AsyncMock(),
    )


@pytest.fixture
def mock_logger() -> Mock:
    """Create a mock logger used as structured logging sink."""
    return Mock()
