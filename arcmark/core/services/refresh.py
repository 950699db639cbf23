"""Deliver fetched favicons and titles back into the ``AppModel``.

The fetchers know nothing about the model; this module looks a link up,
runs the fetches concurrently and hands results to the ordinary mutation
API.  A link deleted or renamed while its fetch was running simply turns
the delivery into a no-op (``NOT_FOUND`` / ``UNCHANGED``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlsplit
from uuid import UUID

import anyio
from loguru import logger

from arcmark.core import tree
from arcmark.core.models.mutation import MutationResult
from arcmark.core.models.nodes import LinkNode
from arcmark.core.services.favicons import FaviconService
from arcmark.core.services.titles import LinkTitleService

if TYPE_CHECKING:
    import httpx

    from arcmark.core.managers.app_model import AppModel
    from arcmark.core.settings import ArcmarkSettings
    from arcmark.core.store.base import StateStore


class LinkMetadataRefresher:
    def __init__(
        self,
        model: AppModel,
        favicons: FaviconService | None = None,
        titles: LinkTitleService | None = None,
    ) -> None:
        self._model = model
        self._favicons = favicons
        self._titles = titles

    @classmethod
    def create(
        cls,
        model: AppModel,
        store: StateStore,
        client: httpx.AsyncClient,
        settings: ArcmarkSettings,
    ) -> LinkMetadataRefresher:
        favicons = FaviconService(
            client,
            store.icons_directory(),
            timeout=settings.favicon_timeout,
            failure_cooldown=settings.favicon_failure_cooldown,
        )
        titles = LinkTitleService(client, timeout=settings.title_timeout, max_bytes=settings.title_max_bytes)
        return cls(model, favicons, titles)

    async def refresh(self, link_id: UUID) -> list[MutationResult]:
        """Fetch favicon and title for one link of the current workspace."""
        results: list[MutationResult] = []

        pinned = self._model.pinned_link_by_id(link_id)
        node = self._model.node_by_id(link_id)
        if pinned is not None:
            link, is_pinned = pinned, True
        elif isinstance(node, LinkNode):
            link, is_pinned = node.link, False
        else:
            return results

        async def favicon() -> None:
            if self._favicons is None:
                return
            path = await self._favicons.favicon_path(link.url, link.favicon_path)
            if path is None:
                return
            if is_pinned:
                results.append(self._model.update_pinned_link_favicon_path(link_id, path))
            else:
                results.append(self._model.update_link_favicon_path(link_id, path))

        async def title() -> None:
            if self._titles is None or is_pinned or not _is_web_url(link.url):
                return
            fetched = await self._titles.fetch_title(link.url, link_id)
            if fetched is not None:
                results.append(self._model.update_link_title_if_default(link_id, fetched))

        async with anyio.create_task_group() as tg:
            tg.start_soon(favicon)
            tg.start_soon(title)
        return results

    async def refresh_workspace(self) -> int:
        """Refresh every link (pinned ones included) in the current workspace.  Returns applied changes."""
        workspace = self._model.current_workspace
        link_ids = [link.id for link in workspace.pinned_links]
        link_ids += [node.id for node in tree.walk(workspace.items) if isinstance(node, LinkNode)]

        applied = 0
        for link_id in link_ids:
            applied += sum(1 for result in await self.refresh(link_id) if result)
        logger.info("Refreshed {} link(s), {} change(s)", len(link_ids), applied)
        return applied


def _is_web_url(url: str) -> bool:
    try:
        return urlsplit(url).scheme.lower() in ("http", "https")
    except ValueError:
        return False
