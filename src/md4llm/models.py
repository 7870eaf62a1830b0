"""Data models for md4llm."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FALLBACK_SELECTOR = "body (fallback)"


class ConversionConfig(BaseModel):
    """Options for a single HTML to Markdown conversion.

    Field names are snake_case; the camelCase names used in JSON output
    (``alignTables``, ``baseUrl``...) are accepted as aliases.

    Usage:
        config = ConversionConfig(selector="#content", strip_media=True)
        config = ConversionConfig.model_validate({"extractMeta": True})
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    # CSS selector for the conversion root
    selector: str = "body"

    # Base URL for resolving relative href/src attributes
    base_url: str | None = None

    align_tables: bool = True
    clean_noise: bool = True
    strip_media: bool = False
    preserve_links: bool = True
    extract_meta: bool = False


class ConversionStats(BaseModel):
    """Size metrics of the produced markdown."""

    model_config = ConfigDict(frozen=True)

    characters: int = 0
    words: int = 0
    lines: int = 0

    @classmethod
    def from_markdown(cls, markdown: str) -> "ConversionStats":
        """Compute stats for a markdown string."""
        return cls(
            characters=len(markdown),
            words=len(markdown.split()),
            lines=markdown.count("\n") + 1,
        )


class ConversionResult(BaseModel):
    """Result of a conversion."""

    model_config = ConfigDict(frozen=True)

    markdown: str
    metadata: dict[str, str] = Field(default_factory=dict)
    # Actual selector used, "body (fallback)" when the requested one missed
    selector: str
    stats: ConversionStats

    @property
    def used_fallback(self) -> bool:
        """Whether the requested selector matched nothing."""
        return self.selector == FALLBACK_SELECTOR


class FetchResult(BaseModel):
    """Outcome of fetching one URL."""

    url: str
    html: str | None = None
    final_url: str | None = None
    status: int | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        """Whether the fetch produced HTML."""
        return self.error is None and self.html is not None
