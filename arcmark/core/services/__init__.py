"""Network-backed collaborators that feed results into the ``AppModel``."""

from arcmark.core.services.favicons import FaviconService
from arcmark.core.services.refresh import LinkMetadataRefresher
from arcmark.core.services.titles import LinkTitleService, extract_title

__all__ = ["FaviconService", "LinkMetadataRefresher", "LinkTitleService", "extract_title"]
