"""
Remote KMZ source integration.

Downloads survey map archives from object storage download links.
"""

from lightsurvey.integrations.kmz_source.client import (
    KMZSourceClient,
    KMZSourceConfig,
    resolve_url_candidates,
)

__all__ = [
    "KMZSourceClient",
    "KMZSourceConfig",
    "resolve_url_candidates",
]
