"""URL normalization utilities for project identity and deduplication."""

import re
from urllib.parse import SplitResult, urlsplit

from .exceptions import InvalidURLError

FORGE_HOSTS = frozenset({"github.com", "gitlab.com", "sr.ht"})
GITHUB_PAGES_SUFFIX = ".github.io"

# user@host:org/repo, as written by git for ssh remotes
_SCP_LIKE = re.compile(r"^(?P<user>[\w.-]+)@(?P<host>[\w.-]+):(?!//)(?P<path>\S+)$")
_VCS_PREFIXES = ("scm:git:", "git+")


def clean_repository_url(raw: str) -> str:
    """
    Undo the common decorations registries put around repository URLs.

    Handles:
    - "git+https://github.com/foo/bar.git" -> "https://github.com/foo/bar.git"
    - "scm:git:https://github.com/foo/bar" -> "https://github.com/foo/bar"
    - "git@github.com:foo/bar.git" -> "ssh://git@github.com/foo/bar.git"
    """
    url = raw.strip()
    for prefix in _VCS_PREFIXES:
        if url.lower().startswith(prefix):
            url = url[len(prefix) :]
    if match := _SCP_LIKE.match(url):
        url = f"ssh://{match['user']}@{match['host']}/{match['path']}"
    return url


def parse_url(raw: str) -> SplitResult | None:
    """Split a URL, returning None unless it has both a scheme and a host."""
    try:
        parsed = urlsplit(raw.strip())
        # Accessing the port validates it
        parsed.port
    except ValueError:
        return None
    if not parsed.scheme or not parsed.hostname:
        return None
    return parsed


def is_forge_host(host: str) -> bool:
    """Whether a host serves repositories at predictable /org/repo paths."""
    host = host.lower()
    if host in FORGE_HOSTS or host.endswith(".sr.ht"):
        return True
    # Self-hosted GitLab instances, e.g. gitlab.gnome.org
    return "gitlab" in host.split(".")


def _path_segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def forge_project_url(parsed: SplitResult) -> str | None:
    """
    Truncate a forge URL to at most its organization/repository pair.

    GitHub Pages hosts are rewritten to the github.com repository they are
    built from first. A forge URL naming only an organization keeps that one
    segment. Returns None for non-forge hosts and for a bare forge host.
    """
    host = (parsed.hostname or "").lower()
    segments = _path_segments(parsed.path)

    if host.endswith(GITHUB_PAGES_SUFFIX):
        owner = host[: -len(GITHUB_PAGES_SUFFIX)]
        if not owner or "." in owner:
            return None
        # The user/organization site lives in <owner>/<owner>.github.io
        segments = [owner, *(segments or [host])]
        host = "github.com"
    elif not is_forge_host(host):
        return None

    if not segments:
        return None
    if len(segments) == 1:
        return f"https://{host}/{segments[0]}"
    org, repo = segments[0], segments[1].removesuffix(".git")
    if not repo:
        return f"https://{host}/{org}"
    return f"https://{host}/{org}/{repo}"


def strip_url(parsed: SplitResult) -> str:
    """Keep scheme://host[:port]/path verbatim; drop credentials, query and fragment."""
    host = (parsed.hostname or "").lower()
    port = f":{parsed.port}" if parsed.port is not None else ""
    return f"{parsed.scheme}://{host}{port}{parsed.path}"


def explicit_project_url(raw: str) -> str:
    """
    Normalize a repository URL named directly by a manifest.

    No network access: forge URLs are truncated, everything else is stripped
    syntactically.

    Raises:
        InvalidURLError: If the URL cannot be parsed.
    """
    parsed = parse_url(clean_repository_url(raw))
    if parsed is None:
        raise InvalidURLError(raw)
    return forge_project_url(parsed) or strip_url(parsed)


def dedupe_candidates(candidates: list[str]) -> list[str]:
    """Drop exact-duplicate and blank candidates, keeping first occurrences in order."""
    return list(dict.fromkeys(c.strip() for c in candidates if c and c.strip()))
