"""Snapshot reader backed by a PostgREST endpoint over HTTP."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ValidationError

from bulkrecon.adapters.http_resilience import ResilientClient
from bulkrecon.domain.errors import LookupBatchError
from bulkrecon.domain.model import AdGroupRow, CampaignRow, PlacementRow, TargetRow

from .schema import (
    AdGroupRecord,
    CampaignRecord,
    PlacementRecord,
    SnapshotDateRow,
    SnapshotResource,
    TargetRecord,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import date

    from bulkrecon.config.http_resilience import ResilienceConfig
    from bulkrecon.config.snapshot_api import SnapshotApiConfig

log = getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000
BULK_SOURCE_TYPE = "bulk"


def in_filter(values: Sequence[str]) -> str:
    """Render a PostgREST ``in.(...)`` filter with every value double-quoted."""

    escaped = (value.replace("\\", "\\\\").replace('"', '\\"') for value in values)
    return "in.(" + ",".join(f'"{value}"' for value in escaped) + ")"


class PostgrestSnapshotReader:
    """``SnapshotReader`` over the ``bulk_*`` REST resources of one project."""

    def __init__(
        self,
        *,
        config: SnapshotApiConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be > 0")
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._page_size = page_size

    def latest_snapshot_date(self, account_id: str) -> date | None:
        params = {
            "select": "snapshot_date",
            "account_id": f"eq.{account_id}",
            "source_type": f"eq.{BULK_SOURCE_TYPE}",
            "order": "snapshot_date.desc",
            "limit": "1",
        }
        rows = asyncio.run(self._get_once(SnapshotResource.SNAPSHOTS, params, SnapshotDateRow))
        return rows[0].snapshot_date if rows else None

    def has_snapshot(self, account_id: str, snapshot_date: date) -> bool:
        params = {
            "select": "snapshot_date",
            "account_id": f"eq.{account_id}",
            "snapshot_date": f"eq.{snapshot_date.isoformat()}",
            "source_type": f"eq.{BULK_SOURCE_TYPE}",
            "limit": "1",
        }
        rows = asyncio.run(self._get_once(SnapshotResource.SNAPSHOTS, params, SnapshotDateRow))
        return bool(rows)

    def campaigns(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        ids: Sequence[str] | None = None,
    ) -> list[CampaignRow]:
        if ids is not None and not ids:
            return []
        records = asyncio.run(
            self._get_all(
                SnapshotResource.CAMPAIGNS,
                self._filters(account_id, snapshot_date, "campaign_id", ids),
                CampaignRecord,
            )
        )
        return [CampaignRow(**record.model_dump()) for record in records]

    def ad_groups(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        ids: Sequence[str] | None = None,
    ) -> list[AdGroupRow]:
        if ids is not None and not ids:
            return []
        records = asyncio.run(
            self._get_all(
                SnapshotResource.AD_GROUPS,
                self._filters(account_id, snapshot_date, "ad_group_id", ids),
                AdGroupRecord,
            )
        )
        return [AdGroupRow(**record.model_dump()) for record in records]

    def targets(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        ids: Sequence[str] | None = None,
    ) -> list[TargetRow]:
        if ids is not None and not ids:
            return []
        records = asyncio.run(
            self._get_all(
                SnapshotResource.TARGETS,
                self._filters(account_id, snapshot_date, "target_id", ids),
                TargetRecord,
            )
        )
        return [TargetRow(**record.model_dump()) for record in records]

    def placements(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        campaign_ids: Sequence[str] | None = None,
    ) -> list[PlacementRow]:
        if campaign_ids is not None and not campaign_ids:
            return []
        records = asyncio.run(
            self._get_all(
                SnapshotResource.PLACEMENTS,
                self._filters(account_id, snapshot_date, "campaign_id", campaign_ids),
                PlacementRecord,
            )
        )
        return [PlacementRow(**record.model_dump()) for record in records]

    @staticmethod
    def _filters(
        account_id: str,
        snapshot_date: date,
        id_column: str,
        ids: Sequence[str] | None,
    ) -> dict[str, str]:
        params = {
            "account_id": f"eq.{account_id}",
            "snapshot_date": f"eq.{snapshot_date.isoformat()}",
            "order": id_column,
        }
        if ids is not None:
            params[id_column] = in_filter(ids)
        return params

    async def _get_once[M: BaseModel](
        self,
        resource: SnapshotResource,
        params: dict[str, str],
        model: type[M],
    ) -> list[M]:
        async with self._client_factory(self._resilience) as client:
            return await self._fetch_page(client, resource, params, model)

    async def _get_all[M: BaseModel](
        self,
        resource: SnapshotResource,
        params: dict[str, str],
        model: type[M],
    ) -> list[M]:
        rows: list[M] = []
        offset = 0
        async with self._client_factory(self._resilience) as client:
            while True:
                page_params = {
                    **params,
                    "limit": str(self._page_size),
                    "offset": str(offset),
                }
                page = await self._fetch_page(client, resource, page_params, model)
                rows.extend(page)
                if len(page) < self._page_size:
                    break
                offset += len(page)
        log.debug("Fetched %s rows from %s", len(rows), resource)
        return rows

    async def _fetch_page[M: BaseModel](
        self,
        client: ResilientClient,
        resource: SnapshotResource,
        params: dict[str, str],
        model: type[M],
    ) -> list[M]:
        try:
            payload = await client.get_json(str(resource), params=params)
        except httpx.HTTPError as exc:
            raise LookupBatchError(
                f"Snapshot lookup failed for {resource}: {exc}", resource=str(resource)
            ) from exc
        except ValueError as exc:
            raise LookupBatchError(
                f"Snapshot lookup for {resource} returned invalid JSON", resource=str(resource)
            ) from exc
        if not isinstance(payload, list):
            raise LookupBatchError(
                f"Unexpected payload from {resource}: expected a JSON array",
                resource=str(resource),
            )
        try:
            return [model.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise LookupBatchError(
                f"Unexpected row shape from {resource}: {exc}", resource=str(resource)
            ) from exc
