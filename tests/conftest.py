from __future__ import annotations

import pytest

from step_harvest.config import HarvestConfig


@pytest.fixture()
def config(tmp_path) -> HarvestConfig:
    """Config writing into a per-test temporary directory."""
    return HarvestConfig(
        save_dir=tmp_path / "files",
        links_dir=tmp_path / "links",
        root_urls=["https://example.com/cat/"],
    )
