"""
testrail_client.py – All TestRail REST interactions.

`TestRailClient` owns the HTTP session (basic auth, JSON bodies, error
decoding); `TestRailAPI` maps the v2 endpoints used by testrail-sync onto
it and decodes the responses into model objects.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from config import Settings
from errors import TransportError
from models import CaseStep, RemoteTestCase, ResultRecord, Section

logger = logging.getLogger("testrail-sync")

API_PREFIX = "index.php?/api/v2/"


# ── Low-level client ────────────────────────────────────────────────────

class TestRailClient:
    """Sends authenticated GET / POST requests to a TestRail instance."""

    __test__ = False

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url.endswith("/"):
            base_url += "/"
        self._base = base_url + API_PREFIX
        self._session = session or requests.Session()
        self._session.auth = (username, password)
        self._session.headers.update({"Content-Type": "application/json"})

    @classmethod
    def from_settings(cls, settings: Settings) -> "TestRailClient":
        return cls(
            str(settings.require("base_url")),
            str(settings.require("username")),
            str(settings.require("password")),
        )

    def send_get(self, uri: str) -> Any:
        return self._send("GET", uri)

    def send_post(self, uri: str, data: Any = None) -> Any:
        return self._send("POST", uri, data)

    def _send(self, method: str, uri: str, data: Any = None) -> Any:
        url = self._base + uri
        logger.debug("%s %s", method, url)
        try:
            if method == "POST":
                resp = self._session.post(url, json=data if data is not None else {})
            else:
                resp = self._session.get(url)
        except requests.RequestException as exc:
            raise TransportError(
                f"Failed to send {method} request due to network issues: {exc}"
            ) from exc

        body = _decode_body(resp)
        if resp.status_code != 200:
            raise TransportError(
                f"TestRail API returned HTTP {resp.status_code} "
                f"({_error_message(body)})",
                status_code=resp.status_code,
            )
        return body


def _decode_body(resp: requests.Response) -> Any:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return {}


def _error_message(body: Any) -> str:
    if isinstance(body, dict) and body.get("error"):
        return f'"{body["error"]}"'
    return "No additional error message received"


# ── Endpoint wrappers ───────────────────────────────────────────────────

def _parse_case(obj: dict[str, Any]) -> RemoteTestCase:
    steps = [
        CaseStep(
            content="No action provided." if s.get("content") is None else s["content"],
            expected=s.get("expected") or "",
        )
        for s in obj.get("custom_steps_separated") or []
    ]
    return RemoteTestCase(
        id=int(obj["id"]),
        title=obj.get("title") or "Untitled",
        section_id=int(obj.get("section_id") or 0),
        structured_steps=steps,
    )


class TestRailAPI:
    """Wraps every TestRail endpoint needed by testrail-sync."""

    __test__ = False

    def __init__(self, client: TestRailClient) -> None:
        self._client = client

    def _get_paginated(self, uri: str, key: str) -> list[dict[str, Any]]:
        """Collect every page of a bulk endpoint.

        TestRail 6.7+ wraps bulk responses as ``{key: [...], "_links":
        {"next": ...}}``; older instances return a bare list.
        """
        items: list[dict[str, Any]] = []
        next_uri: str | None = uri
        while next_uri:
            page = self._client.send_get(next_uri)
            if isinstance(page, list):
                items.extend(page)
                break
            items.extend(page.get(key) or [])
            next_link = (page.get("_links") or {}).get("next")
            next_uri = next_link.split("/api/v2/", 1)[-1] if next_link else None
        return items

    def get_cases(self, project_id: int, suite_id: int) -> list[RemoteTestCase]:
        raw = self._get_paginated(f"get_cases/{project_id}&suite_id={suite_id}", "cases")
        logger.info("Fetched %d cases from suite %s", len(raw), suite_id)
        return [_parse_case(obj) for obj in raw]

    def get_sections(self, project_id: int, suite_id: int) -> list[Section]:
        raw = self._get_paginated(
            f"get_sections/{project_id}&suite_id={suite_id}", "sections"
        )
        return [Section(name=s["name"], id=int(s["id"])) for s in raw]

    def get_run(self, run_id: int) -> dict[str, Any]:
        return self._client.send_get(f"get_run/{run_id}")

    def add_run(self, project_id: int, body: dict[str, Any]) -> dict[str, Any]:
        run = self._client.send_post(f"add_run/{project_id}", body)
        logger.info("Created run #%s  →  '%s'", run.get("id"), body.get("name"))
        return run

    def add_plan_entry(self, plan_id: int, body: dict[str, Any]) -> dict[str, Any]:
        entry = self._client.send_post(f"add_plan_entry/{plan_id}", body)
        logger.info("Added entry '%s' to plan #%s", body.get("name"), plan_id)
        return entry

    def add_plan(self, project_id: int, body: dict[str, Any]) -> dict[str, Any]:
        plan = self._client.send_post(f"add_plan/{project_id}", body)
        logger.info("Created plan #%s  →  '%s'", plan.get("id"), body.get("name"))
        return plan

    def add_results_for_cases(self, run_id: int, records: list[ResultRecord]) -> None:
        payload = {"results": [r.to_payload() for r in records]}
        self._client.send_post(f"add_results_for_cases/{run_id}", payload)
        logger.info("Submitted %d results to run #%s", len(records), run_id)

    def close_plan(self, plan_id: int) -> None:
        self._client.send_post(f"close_plan/{plan_id}")
        logger.info("Closed plan #%s", plan_id)
