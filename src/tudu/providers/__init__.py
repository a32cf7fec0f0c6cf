"""Issue providers: the lookup contract, its error taxonomy and concrete trackers."""

from tudu.providers.base import (
    IssueProvider,
    IssueProviderProtocol,
    ProviderAuthError,
    ProviderConfigError,
    ProviderError,
    ProviderNotFoundError,
    ProviderTransportError,
)
from tudu.providers.github import GitHubProvider
from tudu.providers.jira import JiraProvider
from tudu.providers.notion import NotionProvider
from tudu.providers.registry import (
    ProviderRegistry,
    build_providers,
    close_providers,
    default_registry,
)

__all__ = [
    "GitHubProvider",
    "IssueProvider",
    "IssueProviderProtocol",
    "JiraProvider",
    "NotionProvider",
    "ProviderAuthError",
    "ProviderConfigError",
    "ProviderError",
    "ProviderNotFoundError",
    "ProviderRegistry",
    "ProviderTransportError",
    "build_providers",
    "close_providers",
    "default_registry",
]
