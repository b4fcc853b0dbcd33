"""Cache key builders for consistent key formatting."""

from breadscan.core.types import Ecosystem


class CacheKeys:
    """Cache key builders for consistent key formatting.

    Keys are ``<namespace>-<identifier-or-url>``. The namespaces are shared
    with caches written by earlier runs, so they must not change.
    """

    CANONICAL = "canonical"
    ARCH_HTML = "arch-html"
    MAVEN = "maven"

    @classmethod
    def registry(cls, ecosystem: Ecosystem | str, identifier: str) -> str:
        """Key for the raw candidate URLs a registry returned for a package."""
        return f"{ecosystem}-{identifier}"

    @classmethod
    def maven(cls, group: str, artifact: str, version: str) -> str:
        """Key for the scm URL candidates of one Maven artifact version."""
        return f"{cls.MAVEN}-{group}:{artifact}:{version}"

    @classmethod
    def canonical(cls, url: str) -> str:
        """Key for the canonical links discovered on a page."""
        return f"{cls.CANONICAL}-{url}"

    @classmethod
    def arch_html(cls, url: str) -> str:
        """Key for the https anchors found on an Arch package homepage."""
        return f"{cls.ARCH_HTML}-{url}"
