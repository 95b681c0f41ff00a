"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from pricer.chain.memory import InMemoryChainReader
from tests.helpers.constants import BLOCK, DAI, OHM, OHM_DAI_V2_POOL
from tests.helpers.factories import make_reader, units


@pytest.fixture
def reader() -> InMemoryChainReader:
    """Reader with the standard test tokens registered, head at BLOCK."""
    return make_reader(block=BLOCK)


@pytest.fixture
def ohm_dai_reader(reader: InMemoryChainReader) -> InMemoryChainReader:
    """Reader with an OHM/DAI pair: 1,000 OHM against 12,000 DAI."""
    reader.add_v2_pool(
        OHM_DAI_V2_POOL,
        OHM,
        DAI,
        reserve0=units(1000, 9),
        reserve1=units(12000, 18),
        total_supply=units(100, 18),
    )
    return reader


@pytest.fixture
def venues_file(tmp_path: Path):
    """Write a venue configuration to a temporary file and return its path."""

    def _write(data: dict) -> Path:
        path = tmp_path / "venues.json"
        path.write_text(json.dumps(data))
        return path

    return _write
