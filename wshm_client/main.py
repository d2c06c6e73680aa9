from __future__ import annotations

import asyncio
import logging
from typing import Optional

from wshm_client.config import ClientConfig, load_config
from wshm_client.core import HypermediaClient
from wshm_client.dom import Document, MemoryDocument


def build_client(config: Optional[ClientConfig] = None, document: Optional[Document] = None) -> HypermediaClient:
    """Construct a client from explicit config, or from WSHM_* environment variables."""
    config = config or load_config()
    return HypermediaClient(config, document if document is not None else MemoryDocument())


async def run_client(config: Optional[ClientConfig] = None) -> None:
    client = build_client(config)
    logging.basicConfig(level=client.config.log_level)
    await client.connect()
    try:
        await client.wait_closed()
    finally:
        await client.disconnect()


def main() -> None:
    asyncio.run(run_client())


if __name__ == "__main__":
    main()
