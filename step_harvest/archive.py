"""Archive downloading and extraction into the product's directory."""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterator, List, Optional, Set

import requests
from filetype import guess

from .errors import ArchiveRetrievalFailure
from .models import ArchiveEntry

logger = logging.getLogger("step_harvest")


def fetch_archive(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: float = 30.0,
) -> bytes:
    """Download the archive at url fully into memory."""
    get = session.get if session is not None else requests.get
    try:
        resp = get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise ArchiveRetrievalFailure(url, exc) from exc
    return resp.content


def describe_payload(data: bytes) -> str:
    """Best-effort MIME type of a payload, for error messages."""
    kind = guess(data)
    return kind.mime if kind else "unknown content"


def read_entries(archive: zipfile.ZipFile) -> Iterator[ArchiveEntry]:
    """Yield the file members of archive, skipping directories and unsafe paths."""
    for info in archive.infolist():
        if info.is_dir():
            continue
        name = PurePosixPath(info.filename)
        if name.is_absolute() or ".." in name.parts:
            logger.warning("Skipping unsafe archive member %s", info.filename)
            continue
        yield ArchiveEntry(relative_subpath=name.parent, payload=archive.read(info))


def materialize(
    archive_url: str,
    destination: Path,
    file_name: str,
    session: Optional[requests.Session] = None,
    timeout: float = 30.0,
) -> List[Path]:
    """Download archive_url and write each member as destination/<member dir>/file_name.

    Every member keeps its directory but is renamed to file_name, so members
    sharing a directory overwrite each other; that case is logged.
    """
    destination.mkdir(parents=True, exist_ok=True)
    data = fetch_archive(archive_url, session=session, timeout=timeout)

    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        raise ArchiveRetrievalFailure(
            archive_url, f"not a zip archive ({describe_payload(data)})"
        ) from exc

    written: List[Path] = []
    seen: Set[Path] = set()
    with archive:
        try:
            for entry in read_entries(archive):
                target_dir = destination.joinpath(*entry.relative_subpath.parts)
                target_dir.mkdir(parents=True, exist_ok=True)
                target = target_dir / file_name
                if target in seen:
                    logger.warning(
                        "Archive %s has several entries for %s; keeping the last one",
                        archive_url,
                        target,
                    )
                else:
                    seen.add(target)
                    written.append(target)
                target.write_bytes(entry.payload)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, NotImplementedError, EOFError) as exc:
            raise ArchiveRetrievalFailure(archive_url, exc) from exc

    logger.info("Saved %d file(s) from %s to %s", len(written), archive_url, destination)
    return written
