# dashboard/services/insights.py
"""
Advisory providers.

Both calls are decorations: any transport error, non-2xx answer or malformed payload
is logged and replaced by the configured fallback. Nothing here raises.
"""

import logging

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)


class AdvisoryClient:
    """
    Thin HTTP client for the text-insight and image-generation providers.

    ``transport`` is handed to ``httpx.Client``; tests pass an ``httpx.MockTransport``.
    """

    def __init__(self, config=None, transport=None):
        self.config = {**settings.EXPANSE_INSIGHTS, **(config or {})}
        self.transport = transport

    def _client(self):
        headers = {}
        if self.config.get("API_KEY"):
            headers["Authorization"] = f"Bearer {self.config['API_KEY']}"

        return httpx.Client(
            timeout=self.config["TIMEOUT"],
            headers=headers,
            transport=self.transport,
        )

    def _post(self, url, payload, field):
        with self._client() as client:
            response = client.post(url, json=payload)
            response.raise_for_status()
            value = response.json().get(field)

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Provider answer has no '{field}'")
        return value.strip()

    # =========================
    # TEXT
    # =========================
    def text_insight(self, summary):
        fallback = self.config["FALLBACK_TEXT"]
        url = self.config.get("TEXT_URL")
        if not url:
            return fallback

        try:
            return self._post(url, {"prompt": summary}, "text")
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            logger.warning("Text insight provider unavailable, using fallback: %s", exc)
            return fallback

    # =========================
    # IMAGE
    # =========================
    def station_image(self, prompt):
        placeholder = self.config["PLACEHOLDER_IMAGE"]
        url = self.config.get("IMAGE_URL")
        if not url:
            return placeholder

        try:
            return self._post(url, {"prompt": prompt}, "image")
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            logger.warning("Image provider unavailable, using placeholder: %s", exc)
            return placeholder


def summarize_metrics(kpis, low_stock_count=0, open_alerts=0):
    return (
        f"Total revenue {kpis['total_revenue']:,.2f}, fuel sold {kpis['fuel_sold']:,.0f}L, "
        f"net profit {kpis['net_profit']:,.2f}, {kpis['pending_reviews']} entries pending review, "
        f"{low_stock_count} fuel line(s) below threshold, {open_alerts} open alert(s). "
        "Give one short operational recommendation."
    )


def station_image_prompt(name, location):
    return f"Modern fuel station {name} in {location}, daylight, clean forecourt, photorealistic"
