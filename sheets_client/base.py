"""Async spreadsheet values client with short-lived caching, read coalescing and retry."""

import asyncio
import time
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from email.utils import parsedate_to_datetime
from enum import StrEnum
from urllib.parse import quote

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from settings import (
    API_TIMEOUT,
    BACKOFF_MAX,
    BACKOFF_MIN,
    CACHE_TTL,
    RETRY_AFTER_MAX,
    RETRY_ATTEMPTS,
    SHEETS_API_URL,
    SPREADSHEET_ID,
)
from sheets_client.auth import TokenProvider
from sheets_client.exceptions import (
    AuthenticationRequired,
    RateLimited,
    RemoteClientError,
    RemoteServerError,
)
from sheets_client.ranges import DEFAULT_RANGE, HEADER_ROWS, RowRef, a1, normalize_sheet_name, row_range

Cell = str | int | float | bool | None

# (sheet, range, access context)
CacheKey = tuple[str, str, str]


class WriteMode(StrEnum):
    APPEND = "append"
    UPDATE = "update"
    BATCH_UPDATE = "batchUpdate"


@dataclass(frozen=True)
class Row:
    """One data row as returned by a read."""

    ref: RowRef
    values: tuple[str, ...]


def _cell_text(value: Cell) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def _path_range(rng: str) -> str:
    return quote(rng, safe="")


def _error_message(resp: httpx.Response) -> str:
    message = "Spreadsheet API error"
    try:
        body = resp.json()
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            message = body["error"].get("message") or message
    except ValueError:
        if resp.text:
            message = resp.text[:200]
    return f"{message} (HTTP {resp.status_code})"


def _retry_after(resp: httpx.Response) -> float | None:
    raw = resp.headers.get("retry-after")
    if not raw:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        return None
    return max(0.0, when.timestamp() - time.time())


class SheetsClient:
    """Session-scoped client for one spreadsheet.

    Owns the read cache and the in-flight map; create one per signed-in actor
    and discard it at sign-out. Writes are neither coalesced nor locked: the
    store resolves concurrent writers with last-writer-wins.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        spreadsheet_id: str = SPREADSHEET_ID,
        *,
        base_url: str = SHEETS_API_URL,
        timeout: float = API_TIMEOUT,
        cache_ttl: float = CACHE_TTL,
        max_attempts: int = RETRY_ATTEMPTS,
        backoff_min: float = BACKOFF_MIN,
        backoff_max: float = BACKOFF_MAX,
        retry_after_max: float = RETRY_AFTER_MAX,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not spreadsheet_id:
            raise ValueError("Spreadsheet id is not configured (ELECTION_SPREADSHEET_ID)")
        self._tokens = token_provider
        self._spreadsheet_id = spreadsheet_id
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        self._cache_ttl = cache_ttl
        self._cache: dict[CacheKey, tuple[float, list[Row]]] = {}
        self._inflight: dict[CacheKey, asyncio.Task] = {}
        self._generation: dict[str, int] = defaultdict(int)

        self._max_attempts = max_attempts
        self._retry_after_max = retry_after_max
        self._backoff = wait_exponential(multiplier=backoff_min, min=backoff_min, max=backoff_max) + wait_random(
            0, backoff_min
        )
        self._request_count = 0
        logger.info("SheetsClient: spreadsheet={}, cache_ttl={}s", spreadsheet_id, cache_ttl)

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )
        return self

    async def __aexit__(self, *_):
        logger.info("Total store requests: {}", self._request_count)
        self._cache.clear()
        self._inflight.clear()
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def request_count(self) -> int:
        return self._request_count

    # ========== Transport ==========

    def _wait(self, retry_state: RetryCallState) -> float:
        """Server Retry-After hint when present, capped exponential backoff with jitter otherwise."""
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, RateLimited) and exc.retry_after is not None:
            return min(exc.retry_after, self._retry_after_max)
        return self._backoff(retry_state)

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning("Store request failed (attempt {}): {}", retry_state.attempt_number, exc)

    async def _request(self, method: str, path: str, *, params: dict | None = None, payload: dict | None = None) -> dict:
        """Send with retry on 429/5xx/network errors; other failures surface immediately."""
        result: dict = {}
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type((RateLimited, RemoteServerError)),
            before_sleep=self._log_retry,
            reraise=True,
        ):
            with attempt:
                result = await self._send(method, path, params, payload)
        return result

    async def _send(self, method: str, path: str, params: dict | None, payload: dict | None) -> dict:
        if self._client is None:
            raise RuntimeError("SheetsClient must be used inside 'async with'")

        try:
            await self._tokens.refresh_if_needed()
        except Exception as e:
            logger.warning("Token refresh failed: {}", e)

        token = self._tokens.get_access_token()
        if not token:
            raise AuthenticationRequired()

        self._request_count += 1
        url = f"{self._base_url}/{self._spreadsheet_id}{path}"
        try:
            resp = await self._client.request(
                method,
                url,
                params=params,
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.TransportError as e:
            raise RemoteServerError(f"Network error: {e}") from e

        if resp.status_code == 429:
            raise RateLimited(_error_message(resp), retry_after=_retry_after(resp))
        if resp.status_code >= 500:
            raise RemoteServerError(_error_message(resp), status=resp.status_code)
        if resp.status_code >= 400:
            raise RemoteClientError(_error_message(resp), status=resp.status_code)

        logger.debug("{} {} -> {}", method, path, resp.status_code)
        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()

    # ========== Cache ==========

    def invalidate(self, table: str) -> None:
        """Drop cached and in-flight reads of a table; older in-flight reads will not repopulate the cache."""
        sheet = normalize_sheet_name(table)
        self._generation[sheet] += 1
        for key in [k for k in self._cache if k[0] == sheet]:
            del self._cache[key]
        for key in [k for k in self._inflight if k[0] == sheet]:
            del self._inflight[key]
        logger.debug("Cache invalidated: {}", sheet)

    def _cached(self, key: CacheKey) -> list[Row] | None:
        hit = self._cache.get(key)
        if hit is None:
            return None
        stored_at, rows = hit
        if time.monotonic() - stored_at > self._cache_ttl:
            del self._cache[key]
            return None
        return rows

    # ========== Reads ==========

    async def read(self, table: str, cells: str = DEFAULT_RANGE, context: str = "") -> list[Row]:
        """Data rows of a whole-column range (header dropped), each with its RowRef.

        Concurrent calls with the same (table, range, context) share one request.
        """
        key = (normalize_sheet_name(table), cells, context)

        rows = self._cached(key)
        if rows is not None:
            logger.debug("Cache hit: {}", key)
            return list(rows)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key))
            self._inflight[key] = task
        else:
            logger.debug("Joining in-flight read: {}", key)
        return list(await asyncio.shield(task))

    async def _fetch(self, key: CacheKey) -> list[Row]:
        sheet, cells, _ = key
        generation = self._generation[sheet]
        try:
            data = await self._request("GET", "/values:batchGet", params={"ranges": a1(sheet, cells)})
        finally:
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]

        value_ranges = data.get("valueRanges") or [{}]
        values = value_ranges[0].get("values", [])
        rows = [
            Row(RowRef(sheet, offset), tuple(_cell_text(c) for c in raw))
            for offset, raw in enumerate(values[HEADER_ROWS:])
        ]

        if self._generation[sheet] == generation:
            self._cache[key] = (time.monotonic(), rows)
        logger.debug("Cache miss: {} ({} rows)", key, len(rows))
        return rows

    # ========== Writes ==========

    async def append(self, table: str, rows: Sequence[Sequence[Cell]]) -> dict:
        sheet = normalize_sheet_name(table)
        self.invalidate(sheet)
        return await self._request(
            "POST",
            f"/values/{_path_range(a1(sheet))}:append",
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            payload={"values": [[_cell_text(c) for c in row] for row in rows]},
        )

    async def update(self, ref: RowRef, values: Sequence[Cell]) -> dict:
        self.invalidate(ref.table)
        return await self._request(
            "PUT",
            f"/values/{_path_range(row_range(ref, len(values)))}",
            params={"valueInputOption": "USER_ENTERED"},
            payload={"values": [[_cell_text(c) for c in values]]},
        )

    async def update_range(self, table: str, cells: str, values: Sequence[Sequence[Cell]]) -> dict:
        """Overwrite an explicit A1 block (e.g. the header row)."""
        sheet = normalize_sheet_name(table)
        self.invalidate(sheet)
        return await self._request(
            "PUT",
            f"/values/{_path_range(a1(sheet, cells))}",
            params={"valueInputOption": "USER_ENTERED"},
            payload={"values": [[_cell_text(c) for c in row] for row in values]},
        )

    async def batch_update(self, updates: Sequence[tuple[RowRef, Sequence[Cell]]]) -> dict:
        """All row updates in a single call (atomic at the store level)."""
        if not updates:
            return {}
        for table in {ref.table for ref, _ in updates}:
            self.invalidate(table)
        data = [
            {"range": row_range(ref, len(values)), "values": [[_cell_text(c) for c in values]]}
            for ref, values in updates
        ]
        return await self._request(
            "POST",
            "/values:batchUpdate",
            payload={"valueInputOption": "USER_ENTERED", "data": data},
        )

    async def delete(self, ref: RowRef) -> dict:
        """Blank out a row in place; offsets of the other rows do not shift."""
        self.invalidate(ref.table)
        row = ref.sheet_row
        return await self._request("POST", f"/values/{_path_range(a1(ref.table, f'A{row}:Z{row}'))}:clear")

    async def clear_table(self, table: str) -> dict:
        """Blank the whole sheet, header included."""
        sheet = normalize_sheet_name(table)
        self.invalidate(sheet)
        return await self._request("POST", f"/values/{_path_range(a1(sheet))}:clear")

    async def write(self, table: str, rows: Sequence, mode: WriteMode = WriteMode.APPEND) -> dict:
        """Generic write entry point.

        APPEND takes plain rows; UPDATE takes exactly one (RowRef, values) pair;
        BATCH_UPDATE takes any number of pairs. Refs must target `table`.
        """
        if mode == WriteMode.APPEND:
            return await self.append(table, rows)

        sheet = normalize_sheet_name(table)
        for ref, _ in rows:
            if ref.table != sheet:
                raise ValueError(f"Row {ref} does not belong to table {sheet}")

        if mode == WriteMode.UPDATE:
            if len(rows) != 1:
                raise ValueError(f"UPDATE expects exactly one row, got {len(rows)}")
            ref, values = rows[0]
            return await self.update(ref, values)
        return await self.batch_update(rows)
