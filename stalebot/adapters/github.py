"""GitHub API adapter."""

from datetime import datetime
from typing import Any, Dict, List
from urllib.parse import quote

import requests

from stalebot.adapters.base import RemoteOperationError, RepositoryAdapter
from stalebot.models import Comment, Issue, IssueEvent
from stalebot.utils import parse_iso

LIST_PAGE_SIZE = 100


def _issue_from_api(data: Dict[str, Any]) -> Issue:
    user = data.get("user") or {}
    labels = [lb["name"] for lb in (data.get("labels") or []) if isinstance(lb, dict) and "name" in lb]
    return Issue(
        number=data["number"],
        title=data.get("title") or "",
        state=data.get("state", "open"),
        author=user.get("login", ""),
        labels=labels,
        is_pull_request=bool(data.get("pull_request")),
        created_at=parse_iso(data["created_at"]),
        updated_at=parse_iso(data["updated_at"]),
    )


def _comment_from_api(data: Dict[str, Any]) -> Comment:
    user = data.get("user") or {}
    created = parse_iso(data["created_at"])
    updated = parse_iso(data.get("updated_at") or data["created_at"])
    return Comment(
        id=data["id"],
        body=data.get("body") or "",
        author=user.get("login", ""),
        author_type=user.get("type", "User"),
        created_at=created,
        updated_at=updated,
    )


def _event_from_api(data: Dict[str, Any]) -> IssueEvent:
    actor = data.get("actor") or {}
    label = data.get("label") or {}
    return IssueEvent(
        id=data["id"],
        event=data.get("event", ""),
        label=label.get("name"),
        actor=actor.get("login", ""),
        created_at=parse_iso(data["created_at"]),
    )


class GitHubAdapter(RepositoryAdapter):
    """GitHub API implementation."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        timeout: int = 30,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"token {token}"
        self._session.headers["Accept"] = "application/vnd.github.v3+json"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=self._timeout)
        except requests.RequestException as e:
            raise RemoteOperationError(f"{method} {path} failed: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except Exception:
                pass
            raise RemoteOperationError(f"{resp.status_code}: {msg}")
        return resp

    def list_open_items(self, repo: str, page: int, per_page: int = 100) -> List[Issue]:
        resp = self._request(
            "GET",
            f"/repos/{repo}/issues",
            params={"state": "open", "per_page": per_page, "page": page},
        )
        data = resp.json() or []
        return [_issue_from_api(d) for d in data]

    def _get_all(self, path: str, params: Dict[str, Any] | None = None) -> List[Dict[str, Any]]:
        """GET every page of a list endpoint, stopping at the first short page."""
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            resp = self._request("GET", path, params={**(params or {}), "per_page": LIST_PAGE_SIZE, "page": page})
            data = resp.json() or []
            items.extend(data)
            if len(data) < LIST_PAGE_SIZE:
                return items
            page += 1

    def list_comments(
        self,
        repo: str,
        issue_number: int,
        since: datetime | None = None,
    ) -> List[Comment]:
        params: Dict[str, Any] = {}
        if since is not None:
            params["since"] = since.isoformat()
        data = self._get_all(f"/repos/{repo}/issues/{issue_number}/comments", params)
        return [_comment_from_api(d) for d in data]

    def list_issue_events(self, repo: str, issue_number: int) -> List[IssueEvent]:
        data = self._get_all(f"/repos/{repo}/issues/{issue_number}/events")
        return [_event_from_api(d) for d in data]

    def add_label(self, repo: str, issue_number: int, label: str) -> None:
        self._request("POST", f"/repos/{repo}/issues/{issue_number}/labels", json={"labels": [label]})

    def remove_label(self, repo: str, issue_number: int, label: str) -> None:
        # Label names may contain "?" or "/"
        self._request("DELETE", f"/repos/{repo}/issues/{issue_number}/labels/{quote(label, safe='')}")

    def create_comment(self, repo: str, issue_number: int, body: str) -> Comment:
        resp = self._request("POST", f"/repos/{repo}/issues/{issue_number}/comments", json={"body": body})
        return _comment_from_api(resp.json())

    def close_issue(self, repo: str, issue_number: int) -> None:
        self._request("PATCH", f"/repos/{repo}/issues/{issue_number}", json={"state": "closed"})
