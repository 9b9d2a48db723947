"""
helpline.services.github_service — GitHub client
================================================

Thin async wrapper over the few GitHub endpoints the dashboard and the
admin commands need.
Every call degrades to an empty result on failure; callers never see
``httpx`` exceptions.
"""

from __future__ import annotations

import logging
import os

import httpx

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"

REPOSITORY_QUERY = """
query($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    id
    discussionCategories(first: 25) { nodes { id name } }
  }
}
"""

CREATE_DISCUSSION_MUTATION = """
mutation($repositoryId: ID!, $categoryId: ID!, $title: String!, $body: String!) {
  createDiscussion(input: {
    repositoryId: $repositoryId, categoryId: $categoryId, title: $title, body: $body
  }) {
    discussion { url }
  }
}
"""


class GitHubError(RuntimeError):
    """A GraphQL response that carried errors instead of data."""


class GitHubClient:
    """Async GitHub REST client.

    Parameters
    ----------
    token:
        Personal access token; falls back to ``GITHUB_TOKEN``.
    client:
        Pre-built :class:`httpx.AsyncClient` (tests pass one with a
        ``MockTransport``).
    """

    def __init__(
        self, token: str | None = None, client: httpx.AsyncClient | None = None
    ) -> None:
        token = token if token is not None else os.getenv("GITHUB_TOKEN", "")
        headers = {"Accept": "application/vnd.github+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.AsyncClient(
            base_url=GITHUB_API,
            timeout=10,
            transport=httpx.AsyncHTTPTransport(retries=1),
        )
        self._client.headers.update(headers)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_username(self, github_user_id: int) -> str:
        """Current login for a numeric GitHub account id, or ``""``."""
        try:
            resp = await self._client.get(f"/user/{github_user_id}")
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("GitHub user %s lookup failed: %s", github_user_id, exc)
            return ""
        return resp.json().get("login") or ""

    async def is_org_member(self, org: str, github_user_id: int) -> bool:
        """Whether the account is a member of *org*.

        Checks the single login against ``/orgs/{org}/members/{login}``
        (204 = member), so org size doesn't matter.
        """
        login = await self.fetch_username(github_user_id)
        if not login:
            return False
        try:
            resp = await self._client.get(f"/orgs/{org}/members/{login}")
        except httpx.HTTPError as exc:
            logger.warning("Membership check for %s in %s failed: %s", login, org, exc)
            return False
        if resp.status_code == 204:
            return True
        # 404: not a member; 302: the token can't see private membership
        if resp.status_code not in (302, 404):
            logger.warning(
                "Unexpected %d checking %s membership in %s", resp.status_code, login, org
            )
        return False

    # -------------------------------------------------------------------
    # Discussions (GraphQL)
    # -------------------------------------------------------------------
    async def _graphql(self, query: str, variables: dict) -> dict:
        resp = await self._client.post("/graphql", json={"query": query, "variables": variables})
        resp.raise_for_status()
        payload = resp.json()
        if payload.get("errors"):
            raise GitHubError(payload["errors"][0].get("message", "GraphQL error"))
        return payload.get("data") or {}

    async def create_discussion(
        self, repository: str, title: str, body: str, category: str = "Q&A"
    ) -> str | None:
        """Open a discussion in *repository* (``owner/name``).

        Uses the category named *category*, or the repository's first
        discussion category if there's no such name.  Returns the new
        discussion's URL, or ``None`` on any failure.
        """
        owner, _, name = repository.partition("/")
        try:
            data = await self._graphql(REPOSITORY_QUERY, {"owner": owner, "name": name})
            repo = data.get("repository")
            if not repo:
                raise GitHubError(f"Repository {repository} not found")
            categories = repo["discussionCategories"]["nodes"]
            if not categories:
                raise GitHubError(f"Discussions are not enabled on {repository}")
            chosen = next(
                (c for c in categories if c["name"].lower() == category.lower()), categories[0]
            )
            created = await self._graphql(CREATE_DISCUSSION_MUTATION, {
                "repositoryId": repo["id"],
                "categoryId": chosen["id"],
                "title": title,
                "body": body,
            })
        except (httpx.HTTPError, GitHubError) as exc:
            logger.warning("Could not create discussion in %s: %s", repository, exc)
            return None

        url = created["createDiscussion"]["discussion"]["url"]
        logger.info("Created discussion %s", url)
        return url
