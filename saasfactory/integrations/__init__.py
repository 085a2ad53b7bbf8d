"""Post-generation conveniences: git, GitHub, Vercel and domain lookup."""

from saasfactory.integrations.domain import DomainCheck, DomainClient
from saasfactory.integrations.git import GitResult, setup_git
from saasfactory.integrations.github import GitHubClient, RepoResult, setup_github_repo
from saasfactory.integrations.vercel import VercelClient, VercelResult, setup_vercel_project

__all__ = [
    "DomainCheck",
    "DomainClient",
    "GitResult",
    "setup_git",
    "GitHubClient",
    "RepoResult",
    "setup_github_repo",
    "VercelClient",
    "VercelResult",
    "setup_vercel_project",
]
