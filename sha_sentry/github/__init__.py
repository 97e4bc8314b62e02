from .client import GitHubClient, Tag, Branch, DEFAULT_API_URL
from .resolver import ShaResolver, HostingAPI

__all__ = ["GitHubClient", "Tag", "Branch", "DEFAULT_API_URL", "ShaResolver", "HostingAPI"]
