"""Typed dataclasses describing the canonical markata-go site configuration."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

FEED_FORMAT_NAMES: tuple[str, ...] = (
    "html",
    "rss",
    "atom",
    "json",
    "markdown",
    "text",
    "sitemap",
)


@dc.dataclass(slots=True)
class NavItem:
    """Navigation link rendered in the site header."""

    label: str = ""
    url: str = ""
    external: bool = False


@dc.dataclass(slots=True)
class FooterConfig:
    """Site footer text."""

    text: str = ""
    show_copyright: bool | None = None


@dc.dataclass(slots=True)
class ThemeConfig:
    """Theme selection and CSS variable overrides."""

    name: str = ""
    palette: str = ""
    variables: dict[str, str] = dc.field(default_factory=dict)
    custom_css: str = ""


@dc.dataclass(slots=True)
class GlobConfig:
    """Source file discovery settings.

    ``use_gitignore`` is a bare boolean: it cannot express "unset", so its
    dataclass default is the documented default.
    """

    patterns: list[str] = dc.field(default_factory=list)
    use_gitignore: bool = True


@dc.dataclass(slots=True)
class MarkdownConfig:
    """Markdown processing extensions."""

    extensions: list[str] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class FeedFormats:
    """Output formats a feed renders into.

    Each flag is tri-state: ``True`` requests the format, ``False`` disables
    it explicitly, and ``None`` inherits from the feed defaults.
    """

    html: bool | None = None
    rss: bool | None = None
    atom: bool | None = None
    json: bool | None = None
    markdown: bool | None = None
    text: bool | None = None
    sitemap: bool | None = None

    def flags(self) -> dict[str, bool | None]:
        """Return the flags keyed by format name."""
        return {name: getattr(self, name) for name in FEED_FORMAT_NAMES}

    def has_any_enabled(self) -> bool:
        """Return ``True`` when at least one format is explicitly requested."""
        return any(value is True for value in self.flags().values())

    def inherit(self, defaults: FeedFormats) -> FeedFormats:
        """Return a copy with unset flags taken from ``defaults``."""
        return FeedFormats(
            **{
                name: getattr(defaults, name) if value is None else value
                for name, value in self.flags().items()
            }
        )


@dc.dataclass(slots=True)
class FeedTemplates:
    """Template file names used to render each feed format."""

    html: str = ""
    rss: str = ""
    atom: str = ""
    json: str = ""
    card: str = ""


@dc.dataclass(slots=True)
class SyndicationConfig:
    """Limits applied to syndicated (RSS/Atom/JSON) feeds."""

    max_items: int = 0
    include_content: bool | None = None


@dc.dataclass(slots=True)
class FeedDefaults:
    """Values inherited by every feed that leaves them unset."""

    items_per_page: int = 0
    orphan_threshold: int = 0
    pagination_type: str = ""
    formats: FeedFormats = dc.field(default_factory=FeedFormats)
    templates: FeedTemplates = dc.field(default_factory=FeedTemplates)
    syndication: SyndicationConfig = dc.field(default_factory=SyndicationConfig)


@dc.dataclass(slots=True)
class FeedConfig:
    """A named, filtered, sorted view over site content.

    An empty ``slug`` denotes the home-page feed.
    """

    slug: str = ""
    title: str = ""
    description: str = ""
    filter: str = ""
    sort: str = ""
    reverse: bool = False
    items_per_page: int = 0
    orphan_threshold: int = 0
    pagination_type: str = ""
    formats: FeedFormats = dc.field(default_factory=FeedFormats)
    templates: FeedTemplates = dc.field(default_factory=FeedTemplates)

    def apply_defaults(self, defaults: FeedDefaults) -> FeedConfig:
        """Return a copy of the feed with unset values inherited from defaults.

        Parameters
        ----------
        defaults : FeedDefaults
            The site-wide feed defaults.

        Returns
        -------
        FeedConfig
            A new feed; the receiver is left unchanged.

        Examples
        --------
        >>> feed = FeedConfig(slug="blog", formats=FeedFormats(rss=False))
        >>> defaults = FeedDefaults(items_per_page=10, formats=FeedFormats(html=True, rss=True))
        >>> resolved = feed.apply_defaults(defaults)
        >>> resolved.items_per_page, resolved.formats.html, resolved.formats.rss
        (10, True, False)
        """
        base = defaults.templates
        templates = FeedTemplates(
            **{
                field.name: getattr(self.templates, field.name)
                or getattr(base, field.name)
                for field in dc.fields(FeedTemplates)
            }
        )
        return dc.replace(
            self,
            items_per_page=self.items_per_page or defaults.items_per_page,
            orphan_threshold=self.orphan_threshold or defaults.orphan_threshold,
            pagination_type=self.pagination_type or defaults.pagination_type,
            formats=self.formats.inherit(defaults.formats),
            templates=templates,
        )


@dc.dataclass(slots=True)
class PostFormatsConfig:
    """Alternate formats each post is published in."""

    html: bool | None = None
    markdown: bool | None = None
    og: bool | None = None


@dc.dataclass(slots=True)
class SEOConfig:
    """Search engine and social card metadata."""

    twitter_handle: str = ""
    default_image: str = ""
    logo_url: str = ""


@dc.dataclass(slots=True)
class IndieAuthConfig:
    """IndieAuth endpoint advertisement."""

    enabled: bool | None = None
    authorization_endpoint: str = ""
    token_endpoint: str = ""
    me_url: str = ""


@dc.dataclass(slots=True)
class WebmentionConfig:
    """Webmention endpoint advertisement."""

    enabled: bool | None = None
    endpoint: str = ""


@dc.dataclass(slots=True)
class NavComponentConfig:
    enabled: bool | None = None
    position: str = ""
    style: str = ""
    items: list[NavItem] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class FooterComponentConfig:
    enabled: bool | None = None
    text: str = ""
    show_copyright: bool | None = None
    links: list[NavItem] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class DocSidebarComponentConfig:
    enabled: bool | None = None
    position: str = ""
    min_depth: int = 0
    max_depth: int = 0


@dc.dataclass(slots=True)
class ComponentsConfig:
    """Layout components toggled per site."""

    nav: NavComponentConfig = dc.field(default_factory=NavComponentConfig)
    footer: FooterComponentConfig = dc.field(default_factory=FooterComponentConfig)
    doc_sidebar: DocSidebarComponentConfig = dc.field(
        default_factory=DocSidebarComponentConfig
    )


@dc.dataclass(slots=True)
class EncryptionConfig:
    """Client-side encryption of private posts."""

    enabled: bool | None = None
    default_key: str = ""
    decryption_hint: str = ""
    private_tags: dict[str, str] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class MentionsConfig:
    """Resolution of ``@handle`` mentions into links."""

    enabled: bool | None = None
    css_class: str = ""
    cache_dir: str = ""


@dc.dataclass(slots=True)
class ExternalFeedConfig:
    """A third-party feed followed by the blogroll."""

    url: str = ""
    title: str = ""
    description: str = ""
    category: str = ""
    tags: list[str] = dc.field(default_factory=list)
    site_url: str = ""


@dc.dataclass(slots=True)
class BlogrollTemplates:
    blogroll: str = ""
    reader: str = ""


@dc.dataclass(slots=True)
class BlogrollConfig:
    """Blogroll and reader page generation."""

    enabled: bool | None = None
    blogroll_slug: str = ""
    reader_slug: str = ""
    cache_dir: str = ""
    cache_duration: str = ""
    timeout: int = 0
    concurrent_requests: int = 0
    max_entries_per_feed: int = 0
    items_per_page: int = 0
    orphan_threshold: int = 0
    feeds: list[ExternalFeedConfig] = dc.field(default_factory=list)
    templates: BlogrollTemplates = dc.field(default_factory=BlogrollTemplates)


@dc.dataclass(slots=True)
class SidebarConfig:
    """Documentation sidebar layout."""

    enabled: bool | None = None
    position: str = ""
    width: str = ""
    collapsible: bool | None = None
    default_open: bool | None = None


@dc.dataclass(slots=True)
class PagefindConfig:
    """Pagefind search index tooling."""

    auto_install: bool | None = None
    version: str = ""
    cache_dir: str = ""
    bundle_dir: str = ""
    verbose: bool | None = None


@dc.dataclass(slots=True)
class SearchConfig:
    """Site search widget and index generation."""

    enabled: bool | None = None
    position: str = ""
    placeholder: str = ""
    show_images: bool | None = None
    pagefind: PagefindConfig = dc.field(default_factory=PagefindConfig)


@dc.dataclass(slots=True)
class SiteConfig:
    """Fully-resolved, format-independent site configuration.

    ``extra`` holds unrecognised sections from the source file verbatim so
    nothing the user wrote is silently dropped.
    """

    output_dir: str = ""
    url: str = ""
    title: str = ""
    description: str = ""
    author: str = ""
    assets_dir: str = ""
    templates_dir: str = ""
    hooks: list[str] = dc.field(default_factory=list)
    disabled_hooks: list[str] = dc.field(default_factory=list)
    concurrency: int = 0
    nav: list[NavItem] = dc.field(default_factory=list)
    footer: FooterConfig = dc.field(default_factory=FooterConfig)
    glob: GlobConfig = dc.field(default_factory=GlobConfig)
    markdown: MarkdownConfig = dc.field(default_factory=MarkdownConfig)
    feeds: list[FeedConfig] = dc.field(default_factory=list)
    feed_defaults: FeedDefaults = dc.field(default_factory=FeedDefaults)
    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)
    post_formats: PostFormatsConfig = dc.field(default_factory=PostFormatsConfig)
    seo: SEOConfig = dc.field(default_factory=SEOConfig)
    indieauth: IndieAuthConfig = dc.field(default_factory=IndieAuthConfig)
    webmention: WebmentionConfig = dc.field(default_factory=WebmentionConfig)
    components: ComponentsConfig = dc.field(default_factory=ComponentsConfig)
    encryption: EncryptionConfig = dc.field(default_factory=EncryptionConfig)
    mentions: MentionsConfig = dc.field(default_factory=MentionsConfig)
    blogroll: BlogrollConfig = dc.field(default_factory=BlogrollConfig)
    sidebar: SidebarConfig = dc.field(default_factory=SidebarConfig)
    search: SearchConfig = dc.field(default_factory=SearchConfig)
    extra: dict[str, typ.Any] = dc.field(default_factory=dict)

    def resolved_feeds(self) -> list[FeedConfig]:
        """Return every feed with the feed defaults applied."""
        return [feed.apply_defaults(self.feed_defaults) for feed in self.feeds]


def default_config() -> SiteConfig:
    """Build the documented default configuration.

    Every call returns a fresh value, so callers may mutate the result or
    share it as the base of repeated merges without interference.

    Returns
    -------
    SiteConfig
        Configuration populated with the defaults applied before any file or
        environment overrides.

    Examples
    --------
    >>> config = default_config()
    >>> config.output_dir, config.glob.patterns
    ('output', ['content/**/*.md', '*.md'])
    """
    return SiteConfig(
        output_dir="output",
        assets_dir="static",
        templates_dir="templates",
        hooks=["default"],
        glob=GlobConfig(patterns=["content/**/*.md", "*.md"], use_gitignore=True),
        feed_defaults=FeedDefaults(
            items_per_page=10,
            orphan_threshold=3,
            pagination_type="manual",
            formats=FeedFormats(html=True, rss=True),
            templates=FeedTemplates(
                html="feed.html",
                rss="feed.xml",
                atom="atom.xml",
                json="feed.json",
                card="card.html",
            ),
            syndication=SyndicationConfig(max_items=20, include_content=True),
        ),
        theme=ThemeConfig(name="default", palette="default-light"),
        mentions=MentionsConfig(enabled=True, css_class="mention"),
        blogroll=BlogrollConfig(
            enabled=False,
            blogroll_slug="blogroll",
            reader_slug="reader",
            cache_dir="cache/blogroll",
            cache_duration="1h",
            timeout=30,
            concurrent_requests=5,
            max_entries_per_feed=50,
            items_per_page=50,
            orphan_threshold=3,
            templates=BlogrollTemplates(blogroll="blogroll.html", reader="reader.html"),
        ),
        search=SearchConfig(
            enabled=True,
            position="navbar",
            placeholder="Search...",
            pagefind=PagefindConfig(auto_install=True, bundle_dir="_pagefind"),
        ),
    )


__all__ = [
    "FEED_FORMAT_NAMES",
    "BlogrollConfig",
    "BlogrollTemplates",
    "ComponentsConfig",
    "DocSidebarComponentConfig",
    "EncryptionConfig",
    "ExternalFeedConfig",
    "FeedConfig",
    "FeedDefaults",
    "FeedFormats",
    "FeedTemplates",
    "FooterComponentConfig",
    "FooterConfig",
    "GlobConfig",
    "IndieAuthConfig",
    "MarkdownConfig",
    "MentionsConfig",
    "NavComponentConfig",
    "NavItem",
    "PagefindConfig",
    "PostFormatsConfig",
    "SEOConfig",
    "SearchConfig",
    "SidebarConfig",
    "SiteConfig",
    "SyndicationConfig",
    "ThemeConfig",
    "WebmentionConfig",
    "default_config",
]
