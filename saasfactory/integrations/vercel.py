"""Vercel REST API: project creation for deploys."""

import logging
from dataclasses import dataclass

from saasfactory.core.errors import SaasFactoryError
from saasfactory.core.secrets import get_secret
from saasfactory.integrations.http import request_json

logger = logging.getLogger(__name__)

API_BASE = "https://api.vercel.com"
SERVICE = "Vercel"


@dataclass
class VercelResult:
    success: bool
    project_id: str | None = None
    project_url: str | None = None
    error: str | None = None


class VercelClient:
    def __init__(self, token: str, *, base_url: str = API_BASE) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_credentials(cls) -> "VercelClient | None":
        token = get_secret("VERCEL_TOKEN")
        return cls(token) if token else None

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}", "Content-Type": "application/json"}

    async def get_username(self) -> str | None:
        try:
            _, data = await request_json(SERVICE, "GET", f"{self.base_url}/v2/user", headers=self.headers)
        except SaasFactoryError as e:
            logger.debug("Vercel user lookup failed: %s", e)
            return None
        return (data or {}).get("user", {}).get("username")

    async def create_project(self, name: str, *, github_repo: str | None = None) -> dict:
        body: dict = {"name": name, "framework": "nextjs"}
        if github_repo:
            body["gitRepository"] = {"type": "github", "repo": github_repo}
        _, data = await request_json(
            SERVICE, "POST", f"{self.base_url}/v10/projects", headers=self.headers, json=body, retries=0
        )
        return data or {}

    async def add_env(self, project_id: str, key: str, value: str, targets: list[str]) -> None:
        await request_json(
            SERVICE,
            "POST",
            f"{self.base_url}/v10/projects/{project_id}/env",
            headers=self.headers,
            json={"key": key, "value": value, "target": targets, "type": "encrypted"},
            retries=0,
        )


async def setup_vercel_project(
    name: str,
    *,
    github_repo: str | None = None,
    env: dict[str, str] | None = None,
    production: bool = False,
    client: VercelClient | None = None,
) -> VercelResult:
    """Create a Vercel project, optionally linked to ``owner/repo`` on GitHub."""
    client = client or VercelClient.from_credentials()
    if client is None:
        return VercelResult(success=False, error="Vercel token not configured")
    username = await client.get_username()
    if username is None:
        return VercelResult(success=False, error="Vercel token not configured or invalid")
    try:
        project = await client.create_project(name, github_repo=github_repo)
    except SaasFactoryError as e:
        return VercelResult(success=False, error=e.message)

    project_id = project.get("id")
    targets = ["production"] if production else ["production", "preview", "development"]
    for key, value in (env or {}).items():
        try:
            await client.add_env(project_id, key, value, targets)
        except SaasFactoryError as e:
            logger.warning("Failed to add env %s to Vercel project %s: %s", key, name, e)
    logger.info("Created Vercel project %s", name)
    return VercelResult(
        success=True,
        project_id=project_id,
        project_url=f"https://vercel.com/{username}/{name}",
    )
