from __future__ import annotations

from typing import AsyncIterator

from config import TempestConfig, settings
from services.tempest import TempestClient


def get_tempest_config() -> TempestConfig:
    # Raises ConfigurationError before any network access
    return settings.tempest_config()


async def get_tempest_client() -> AsyncIterator[TempestClient]:
    client = TempestClient(get_tempest_config())
    try:
        yield client
    finally:
        await client.close()
