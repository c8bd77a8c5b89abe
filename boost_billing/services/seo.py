"""
SEO Generator - robots.txt and sitemap.xml rendering.

Pure functions of the configured base URL and the current account rows.
"""

from collections.abc import Iterable
from urllib.parse import quote
from xml.etree import ElementTree

from boost_billing.models.domain import SitemapEntry

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"

# API endpoints crawlers have no business fetching
DISALLOWED_PATHS = ("/create-checkout-session", "/create-portal-session", "/webhook")


def profile_url(base_url: str, slug: str) -> str:
    """Public profile URL for an account slug."""
    return f"{base_url.rstrip('/')}/u/{quote(slug, safe='')}"


def render_robots_txt(base_url: str) -> str:
    """Render robots.txt pointing crawlers at the sitemap."""
    lines = ["User-agent: *", "Allow: /"]
    lines.extend(f"Disallow: {path}" for path in DISALLOWED_PATHS)
    lines.append("")
    lines.append(f"Sitemap: {base_url.rstrip('/')}/sitemap.xml")
    return "\n".join(lines) + "\n"


def render_sitemap_xml(base_url: str, entries: Iterable[SitemapEntry]) -> str:
    """
    Render a sitemaps.org urlset.

    The home page comes first, followed by one <url> per public profile.
    """
    urlset = ElementTree.Element("urlset", xmlns=SITEMAP_NAMESPACE)

    home = ElementTree.SubElement(urlset, "url")
    ElementTree.SubElement(home, "loc").text = f"{base_url.rstrip('/')}/"
    ElementTree.SubElement(home, "changefreq").text = "daily"

    for entry in entries:
        url = ElementTree.SubElement(urlset, "url")
        ElementTree.SubElement(url, "loc").text = profile_url(base_url, entry.slug)
        if entry.updated_at is not None:
            ElementTree.SubElement(url, "lastmod").text = entry.updated_at.date().isoformat()
        ElementTree.SubElement(url, "changefreq").text = "weekly"

    body = ElementTree.tostring(urlset, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'
