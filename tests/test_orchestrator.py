from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import pytest

from step_harvest import orchestrator
from step_harvest.link_store import load_links, save_links
from step_harvest.orchestrator import (
    discover_root,
    harvest_root,
    run_all,
    run_discovery,
    run_harvest,
)

from fakes import FakeCatalogPage, FakePage, FakeSession, make_zip

ROOT = "https://example.com/cat/"
WIDGET = "https://example.com/widget-a/"
GADGET = "https://example.com/gadget-b/"
KITS = "https://example.com/kits/"
KIT = "https://example.com/starter-kit/"


def catalog(**extra) -> dict:
    pages = {
        ROOT: FakeCatalogPage(product_links=[WIDGET, GADGET, "#mm3"]),
        WIDGET: FakeCatalogPage(
            breadcrumbs=["Home", "Cat", "Widget A"],
            title="Widget A",
            archive_href="/files/widget-a.zip",
        ),
        GADGET: FakeCatalogPage(
            breadcrumbs=["Home", "Cat", "Gadget B"],
            title="Gadget B",
            archive_href="/files/gadget-b.zip",
        ),
    }
    pages.update(extra)
    return pages


def archives() -> dict:
    return {
        "https://example.com/files/widget-a.zip": make_zip({"8f1e.step": b"widget"}),
        "https://example.com/files/gadget-b.zip": make_zip({"c09d.step": b"gadget"}),
    }


@pytest.mark.asyncio
async def test_discover_then_harvest_builds_breadcrumb_tree(config) -> None:
    page = FakePage(catalog())
    session = FakeSession(archives())

    links = await discover_root(page, ROOT, config)
    stats = await harvest_root(page, ROOT, config, session)

    assert links == {WIDGET, GADGET}
    assert set(load_links(config.links_dir, ROOT)) == links
    assert (config.links_dir / "catLinks.json").exists()
    assert stats.downloaded == 2 and stats.skipped == 0 and stats.failed == 0

    cat_dir = config.save_dir / "Home" / "Cat"
    assert sorted(p.name for p in cat_dir.iterdir()) == ["Gadget_B", "Widget_A"]
    assert [p.name for p in (cat_dir / "Widget_A").iterdir()] == ["Widget A.step"]
    assert (cat_dir / "Widget_A" / "Widget A.step").read_bytes() == b"widget"
    assert (cat_dir / "Gadget_B" / "Gadget B.step").read_bytes() == b"gadget"


@pytest.mark.asyncio
async def test_harvest_is_idempotent(config) -> None:
    save_links({WIDGET}, config.links_dir, ROOT)

    for _ in range(2):
        stats = await harvest_root(FakePage(catalog()), ROOT, config, FakeSession(archives()))
        assert stats.downloaded == 1

    files = [p for p in config.save_dir.rglob("*") if p.is_file()]
    assert files == [config.save_dir / "Home" / "Cat" / "Widget_A" / "Widget A.step"]


@pytest.mark.asyncio
async def test_product_without_archive_is_skipped(config) -> None:
    no_zip = "https://example.com/no-zip/"
    pages = catalog(
        **{no_zip: FakeCatalogPage(breadcrumbs=["Home", "Kit"], title="Kit")}
    )
    save_links([no_zip, WIDGET], config.links_dir, ROOT)
    session = FakeSession(archives())

    stats = await harvest_root(FakePage(pages), ROOT, config, session)

    assert (stats.downloaded, stats.skipped, stats.failed) == (1, 1, 0)
    assert session.requested == ["https://example.com/files/widget-a.zip"]


@pytest.mark.asyncio
async def test_archive_failure_does_not_stop_the_run(config, caplog) -> None:
    save_links([GADGET, WIDGET], config.links_dir, ROOT)
    responses = archives()
    responses["https://example.com/files/gadget-b.zip"] = 500

    with caplog.at_level(logging.ERROR, logger="step_harvest"):
        stats = await harvest_root(FakePage(catalog()), ROOT, config, FakeSession(responses))

    assert (stats.downloaded, stats.skipped, stats.failed) == (1, 0, 1)
    assert GADGET in caplog.text
    assert (config.save_dir / "Home" / "Cat" / "Widget_A" / "Widget A.step").exists()


@pytest.mark.asyncio
async def test_unreadable_page_counts_as_failed(config) -> None:
    save_links([GADGET, WIDGET], config.links_dir, ROOT)

    stats = await harvest_root(
        FakePage(catalog(), failing=[GADGET]), ROOT, config, FakeSession(archives())
    )

    assert (stats.downloaded, stats.skipped, stats.failed) == (1, 0, 1)


@pytest.mark.asyncio
async def test_missing_link_file_yields_empty_stats(config, caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="step_harvest"):
        stats = await harvest_root(FakePage(catalog()), ROOT, config, FakeSession({}))

    assert stats.total == 0
    assert "catLinks.json" in caplog.text


@pytest.mark.asyncio
async def test_discovery_failure_still_writes_link_file(config) -> None:
    page = FakePage({}, failing=[ROOT])

    links = await discover_root(page, ROOT, config)

    assert links == set()
    assert load_links(config.links_dir, ROOT) == []


@pytest.mark.asyncio
async def test_missing_title_counts_as_failed(config) -> None:
    save_links([WIDGET], config.links_dir, ROOT)
    pages = catalog(**{WIDGET: FakeCatalogPage(breadcrumbs=["Home", "Cat"], title=None)})

    stats = await harvest_root(FakePage(pages), ROOT, config, FakeSession(archives()))

    assert (stats.downloaded, stats.skipped, stats.failed) == (0, 0, 1)


@pytest.mark.asyncio
async def test_skipped_product_is_logged_once(config, caplog) -> None:
    no_zip = "https://example.com/no-zip/"
    pages = catalog(**{no_zip: FakeCatalogPage(breadcrumbs=["Home", "Kit"], title="Kit")})
    save_links([no_zip], config.links_dir, ROOT)

    with caplog.at_level(logging.INFO, logger="step_harvest"):
        await harvest_root(FakePage(pages), ROOT, config, FakeSession({}))

    assert len([r for r in caplog.records if no_zip in r.getMessage()]) == 1


@pytest.mark.asyncio
async def test_harvest_with_unkeyable_root_returns_empty_stats(config, caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="step_harvest"):
        stats = await harvest_root(FakePage({}), "///", config, FakeSession({}))

    assert stats.total == 0
    assert "///" in caplog.text


@pytest.mark.asyncio
async def test_unwritable_links_dir_is_logged(config, caplog) -> None:
    config.links_dir.parent.mkdir(parents=True, exist_ok=True)
    config.links_dir.write_text("not a directory", encoding="utf-8")

    with caplog.at_level(logging.ERROR, logger="step_harvest"):
        links = await discover_root(FakePage(catalog()), ROOT, config)

    assert links == {WIDGET, GADGET}
    assert "Cannot save links" in caplog.text


def _serve(monkeypatch, page: FakePage, session: FakeSession) -> None:
    @asynccontextmanager
    async def open_fake_page(config):
        yield page

    monkeypatch.setattr(orchestrator, "open_page", open_fake_page)
    monkeypatch.setattr(orchestrator.requests, "Session", lambda: session)


@pytest.mark.asyncio
async def test_run_discovery_continues_past_a_failing_root(config, monkeypatch) -> None:
    config.root_urls = ["///", ROOT]
    _serve(monkeypatch, FakePage(catalog()), FakeSession({}))

    results = await run_discovery(config)

    assert results == {"///": set(), ROOT: {WIDGET, GADGET}}
    assert set(load_links(config.links_dir, ROOT)) == {WIDGET, GADGET}


@pytest.mark.asyncio
async def test_run_harvest_continues_past_a_root_without_links(config, monkeypatch) -> None:
    config.root_urls = [KITS, ROOT]
    save_links({WIDGET, GADGET}, config.links_dir, ROOT)
    _serve(monkeypatch, FakePage(catalog()), FakeSession(archives()))

    results = await run_harvest(config)

    assert [(s.root_url, s.downloaded, s.failed) for s in results] == [(KITS, 0, 0), (ROOT, 2, 0)]
    assert (config.save_dir / "Home" / "Cat" / "Gadget_B" / "Gadget B.step").exists()


@pytest.mark.asyncio
async def test_run_all_harvests_each_root_before_the_next(config, monkeypatch) -> None:
    config.root_urls = [ROOT, KITS]
    pages = catalog(
        **{
            KITS: FakeCatalogPage(product_links=[KIT]),
            KIT: FakeCatalogPage(
                breadcrumbs=["Home", "Kits", "Starter Kit"],
                title="Starter Kit",
                archive_href="/files/kit.zip",
            ),
        }
    )
    responses = archives()
    responses["https://example.com/files/kit.zip"] = make_zip({"kit/a1.step": b"kit"})
    page = FakePage(pages)
    _serve(monkeypatch, page, FakeSession(responses))

    results = await run_all(config)

    assert [s.downloaded for s in results] == [2, 1]
    assert page.visits == [ROOT, WIDGET, GADGET, GADGET, WIDGET, KITS, KIT, KIT]
    assert (config.links_dir / "kitsLinks.json").exists()
    kit_file = config.save_dir / "Home" / "Kits" / "Starter_Kit" / "kit" / "Starter Kit.step"
    assert kit_file.read_bytes() == b"kit"
