"""
SEO routes - robots.txt and sitemap.xml.

Only mounted when SEO_ENABLED is set. Both responses are cacheable for an hour.
"""

from fastapi import APIRouter, Depends, Response

from boost_billing.api.dependencies import get_account_store
from boost_billing.config import settings
from boost_billing.db.repository import AccountStore
from boost_billing.services.seo import render_robots_txt, render_sitemap_xml

router = APIRouter(tags=["seo"])

CACHE_CONTROL = "public, max-age=3600"


@router.get("/robots.txt")
async def robots_txt() -> Response:
    return Response(
        content=render_robots_txt(settings.sitemap_base_url),
        media_type="text/plain; charset=utf-8",
        headers={"Cache-Control": CACHE_CONTROL},
    )


@router.get("/sitemap.xml")
async def sitemap_xml(store: AccountStore = Depends(get_account_store)) -> Response:
    """XML sitemap listing the home page and every active public profile."""
    entries = await store.list_sitemap_entries()
    return Response(
        content=render_sitemap_xml(settings.sitemap_base_url, entries),
        media_type="application/xml",
        headers={"Cache-Control": CACHE_CONTROL},
    )
