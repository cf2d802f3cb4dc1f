"""Core modules for tracksync."""

from tracksync.core.manifest import Manifest, ManifestSegment, parse_manifest
from tracksync.core.object_urls import ObjectUrlStore
from tracksync.core.site_resolver import SiteInfoResolver
from tracksync.core.sites import SITE_CATALOG, SiteCatalog

__all__ = [
    "SITE_CATALOG",
    "SiteCatalog",
    "SiteInfoResolver",
    "Manifest",
    "ManifestSegment",
    "parse_manifest",
    "ObjectUrlStore",
]
