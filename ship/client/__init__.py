"""Remote provider access: HTTP transport, pagination, GitHub endpoints."""

from .github import GitHubApi
from .http import HttpClient, HttpError, HttpResponse, MockHttpClient, RealHttpClient
from .model import CommitAuthor, Repo
from .pagination import Page, PageIterator, collect, find_first

__all__ = [
    "CommitAuthor",
    "GitHubApi",
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "Page",
    "PageIterator",
    "RealHttpClient",
    "Repo",
    "collect",
    "find_first",
]
