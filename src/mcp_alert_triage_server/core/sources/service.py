"""Alert loading from the ticket API or a JSON export file.

Fetch helpers raise on failure; :func:`get_alerts` is the degraded-mode
wrapper that swaps in the embedded sample dataset instead.
"""

from __future__ import annotations

import gzip
import json
import logging
import zlib
from collections.abc import Iterable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import aiofiles
import httpx
from aiofiles.threadpool import wrap
from pydantic import ValidationError

from ..config import FetchConfig, resolve_fetch_config
from ..models import RawAlert
from ..time_window import parse_timestamp
from .models import AlertSnapshot, AlertSourceError, TicketEnvelope, TicketRow
from .samples import sample_alerts

logger = logging.getLogger(__name__)

JSON_LINES_SUFFIXES = {".jsonl", ".ndjson"}


def _rows_to_alerts(rows: Iterable[Any]) -> list[RawAlert]:
    """Convert API rows to RawAlerts, skipping rows that are not alerts."""
    alerts: list[RawAlert] = []
    for idx, row in enumerate(rows):
        try:
            parsed = TicketRow.model_validate(row)
        except ValidationError as e:
            logger.warning("Skipping malformed alert row #%s: %s", idx, e.errors()[0]["msg"])
            continue
        alerts.append(
            RawAlert(
                id=parsed.id,
                subject=parsed.subject or "",
                message=parsed.message or "",
                created_at=parse_timestamp(parsed.created_at),
            )
        )
    return alerts


def parse_envelope(payload: str | bytes) -> list[RawAlert]:
    """Parse a ``{success, data, pagination}`` response body."""
    try:
        envelope = TicketEnvelope.model_validate_json(payload)
    except ValidationError as e:
        raise AlertSourceError(f"Invalid ticket API response: {e.errors()[0]['msg']}") from e
    if not envelope.success:
        raise AlertSourceError(envelope.error or "Ticket API reported success=false")
    return _rows_to_alerts(envelope.data)


async def fetch_alerts(
    config: FetchConfig | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> list[RawAlert]:
    """GET ``{base_url}/tickets`` and return its alert rows."""
    cfg = config or resolve_fetch_config()
    params: dict[str, int] = {"limit": cfg.limit}
    if cfg.page is not None:
        params["page"] = cfg.page
    url = f"{cfg.base_url.rstrip('/')}/tickets"

    if client is None:
        async with httpx.AsyncClient(timeout=cfg.timeout) as own_client:
            response = await own_client.get(url, params=params)
    else:
        response = await client.get(url, params=params)

    response.raise_for_status()
    alerts = parse_envelope(response.content)
    logger.debug("Fetched %s alerts from %s", len(alerts), url)
    return alerts


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open an export file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


def effective_suffix(path: Path) -> str:
    """Suffix that decides the format; a trailing .gz is looked through."""
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


async def load_alerts_file(
    path: str | Path,
    *,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
) -> list[RawAlert]:
    """Load alerts from a JSON export (envelope or bare array) or JSON lines.

    Undecodable bytes are replaced, so a damaged file surfaces as invalid JSON.
    A truncated or corrupt gzip stream raises AlertSourceError.
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Alert file not found: {p}")

    try:
        async with _open_text(p, encoding=encoding, decode_errors=decode_errors) as f:
            text = await f.read()
    except (EOFError, gzip.BadGzipFile, zlib.error, UnicodeDecodeError) as e:
        raise AlertSourceError(f"{p} could not be decoded: {e}") from e

    if effective_suffix(p) in JSON_LINES_SUFFIXES:
        rows: list[Any] = []
        for line_no, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                rows.append(json.loads(line))
            except json.JSONDecodeError:
                logger.warning("Skipping invalid JSON on line %s of %s", line_no, p)
        return _rows_to_alerts(rows)

    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise AlertSourceError(f"{p} is not valid JSON: {e}") from e
    if isinstance(doc, list):
        return _rows_to_alerts(doc)
    return parse_envelope(text)


async def get_alerts(
    *,
    config: FetchConfig | None = None,
    path: str | Path | None = None,
    client: httpx.AsyncClient | None = None,
    fallback: bool = True,
) -> AlertSnapshot:
    """Load alerts from ``path`` or the ticket API.

    With ``fallback`` (default) any source failure is logged and answered with
    the embedded sample dataset, flagged ``degraded``.
    """
    try:
        if path is not None:
            alerts = await load_alerts_file(path)
        else:
            alerts = await fetch_alerts(config, client=client)
    except (AlertSourceError, httpx.HTTPError, OSError) as e:
        if not fallback:
            raise
        logger.warning("Alert source unavailable, using sample data: %s", e)
        return AlertSnapshot(alerts=sample_alerts(), degraded=True, error=str(e))
    return AlertSnapshot(alerts=alerts)
