"""GitHub REST API: authenticated user and repository creation."""

import logging
from dataclasses import dataclass

from saasfactory.core.errors import SaasFactoryError
from saasfactory.core.secrets import get_secret
from saasfactory.integrations.http import request_json

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"
SERVICE = "GitHub"


@dataclass
class GitHubUser:
    login: str
    name: str
    email: str


@dataclass
class RepoResult:
    success: bool
    repo_url: str | None = None
    clone_url: str | None = None
    ssh_url: str | None = None
    full_name: str | None = None
    error: str | None = None


def _headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }


class GitHubClient:
    def __init__(self, token: str, *, base_url: str = API_BASE) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_credentials(cls) -> "GitHubClient | None":
        token = get_secret("GITHUB_TOKEN")
        return cls(token) if token else None

    async def get_user(self) -> GitHubUser | None:
        try:
            _, data = await request_json(SERVICE, "GET", f"{self.base_url}/user", headers=_headers(self.token))
        except SaasFactoryError as e:
            logger.debug("GitHub user lookup failed: %s", e)
            return None
        login = data["login"]
        return GitHubUser(
            login=login,
            name=data.get("name") or login,
            email=data.get("email") or f"{login}@users.noreply.github.com",
        )

    async def is_repo_name_available(self, owner: str, name: str) -> bool:
        status, _ = await request_json(
            SERVICE,
            "GET",
            f"{self.base_url}/repos/{owner}/{name}",
            headers=_headers(self.token),
            allow_status=(404,),
        )
        return status == 404

    async def create_repo(self, name: str, description: str = "", *, private: bool = False) -> RepoResult:
        try:
            _, repo = await request_json(
                SERVICE,
                "POST",
                f"{self.base_url}/user/repos",
                headers=_headers(self.token),
                json={
                    "name": name,
                    "description": description[:350],
                    "private": private,
                    "auto_init": False,
                    "has_issues": True,
                    "has_projects": False,
                    "has_wiki": False,
                },
                retries=0,
            )
        except SaasFactoryError as e:
            return RepoResult(success=False, error=e.message)
        return RepoResult(
            success=True,
            repo_url=repo["html_url"],
            clone_url=repo["clone_url"],
            ssh_url=repo.get("ssh_url"),
            full_name=repo.get("full_name"),
        )


async def setup_github_repo(
    name: str,
    description: str,
    *,
    private: bool = False,
    client: GitHubClient | None = None,
) -> RepoResult:
    """Create ``name`` under the token's account. Failures come back as RepoResult(success=False)."""
    client = client or GitHubClient.from_credentials()
    if client is None:
        return RepoResult(success=False, error="GitHub token not configured")
    user = await client.get_user()
    if user is None:
        return RepoResult(success=False, error="GitHub token not configured or invalid")
    try:
        available = await client.is_repo_name_available(user.login, name)
    except SaasFactoryError as e:
        return RepoResult(success=False, error=e.message)
    if not available:
        return RepoResult(success=False, error=f'Repository "{name}" already exists')
    result = await client.create_repo(name, description, private=private)
    if result.success:
        logger.info("Created GitHub repository %s", result.full_name or name)
    return result
