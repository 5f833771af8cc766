"""Publish webhook delivery over httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

_EMBED_COLOR = 0x3B82F6


def build_publish_payload(skill: dict[str, Any]) -> dict[str, Any]:
    """Discord-compatible message body for a ``skill.publish`` event."""
    title = skill.get("display_name") or skill.get("slug", "")
    if skill.get("version"):
        title = f"{title} v{skill['version']}"
    fields = [{"name": "Slug", "value": skill.get("slug", ""), "inline": True}]
    if skill.get("owner_handle"):
        fields.append({"name": "Owner", "value": f"@{skill['owner_handle']}", "inline": True})
    if skill.get("tags"):
        fields.append({"name": "Tags", "value": ", ".join(skill["tags"]), "inline": False})
    embed: dict[str, Any] = {"title": title, "color": _EMBED_COLOR, "fields": fields}
    if skill.get("summary"):
        embed["description"] = skill["summary"][:300]
    return {"content": "New skill published", "embeds": [embed]}


class WebhookSender:
    def __init__(
        self,
        url: str | None,
        *,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def enabled(self) -> bool:
        return bool(self._url)

    def close(self) -> None:
        self._client.close()

    def send_publish(self, skill: dict[str, Any]) -> bool:
        """POST the publish event. Returns False when no URL is configured."""
        if not self._url:
            logger.debug(f"Webhook skipped for {skill.get('slug')}: no URL configured")
            return False
        resp = self._client.post(self._url, json=build_publish_payload(skill))
        if resp.is_error:
            raise RuntimeError(f"Webhook failed: {resp.status_code} {resp.text[:200]}")
        return True
