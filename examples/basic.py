from __future__ import annotations

import asyncio
import json
import logging
import os

from chatads import ChatAdsClient
from chatads.utils import StructuredFormatter


async def main() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    trace = logging.getLogger("chatads.example")
    trace.addHandler(handler)
    trace.setLevel(logging.DEBUG)

    async with ChatAdsClient(
        api_key=os.environ["CHATADS_API_KEY"],
        base_url=os.environ.get("CHATADS_BASE_URL", "https://api.getchatads.com"),
        max_retries=1,
        raise_on_failure=True,
        logger=trace,
    ) as client:
        response = await client.analyze(
            {"message": "A great home gym always includes a yoga mat", "country": "US"}
        )
    print(json.dumps(response.to_dict(), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
