"""Static per-site scraping configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote, urlparse

from cinestream.domain.exceptions import SourceDescriptorError

DEFAULT_SEARCH_PATH = "/?s={query}"
DEFAULT_MAX_RESULTS = 10

_NON_KEY_RE = re.compile(r"[^a-z0-9]+")


def source_key(name: str) -> str:
    """Lowercase alphanumerics of *name* (``"Movies Mod!"`` -> ``"moviesmod"``)."""
    return _NON_KEY_RE.sub("", name.lower())


@dataclass(frozen=True)
class SourceDescriptor:
    """Describes one content site as data.

    Each ``*_selectors`` field is an ordered fallback chain: selectors are
    tried in order and the first one yielding a non-empty value wins. This
    keeps a source working across minor template revisions of its site.
    """

    name: str
    base_url: str
    container_selectors: tuple[str, ...]
    title_selectors: tuple[str, ...]
    link_selectors: tuple[str, ...] = ("a[href]",)
    poster_selectors: tuple[str, ...] = ("img",)
    poster_attrs: tuple[str, ...] = ("src", "data-src")
    search_path: str = DEFAULT_SEARCH_PATH
    max_results: int = DEFAULT_MAX_RESULTS

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise SourceDescriptorError("source name must not be empty")

        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise SourceDescriptorError(
                f"{self.name}: base_url must be an absolute http(s) URL, "
                f"got {self.base_url!r}"
            )
        # Normalise so search_url() never produces a double slash.
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

        if "{query}" not in self.search_path:
            raise SourceDescriptorError(
                f"{self.name}: search_path must contain '{{query}}'"
            )

        for field_name in (
            "container_selectors",
            "title_selectors",
            "link_selectors",
            "poster_selectors",
            "poster_attrs",
        ):
            group = getattr(self, field_name)
            if isinstance(group, str):
                raise SourceDescriptorError(
                    f"{self.name}: {field_name} must be a sequence, not a string"
                )
            group = tuple(group)
            if not group or any(not s.strip() for s in group):
                raise SourceDescriptorError(
                    f"{self.name}: {field_name} must hold at least one "
                    "non-empty entry"
                )
            object.__setattr__(self, field_name, group)

        if self.max_results <= 0:
            raise SourceDescriptorError(f"{self.name}: max_results must be > 0")

    @property
    def key(self) -> str:
        """Identifier and log key, see ``source_key``."""
        return source_key(self.name)

    def search_url(self, query: str) -> str:
        path = self.search_path.format(query=quote(query.strip(), safe=""))
        return f"{self.base_url}{path}"

    def with_base_url(self, base_url: str) -> SourceDescriptor:
        """Return a copy pointing at a different domain (site moved)."""
        return SourceDescriptor(
            name=self.name,
            base_url=base_url,
            container_selectors=self.container_selectors,
            title_selectors=self.title_selectors,
            link_selectors=self.link_selectors,
            poster_selectors=self.poster_selectors,
            poster_attrs=self.poster_attrs,
            search_path=self.search_path,
            max_results=self.max_results,
        )
