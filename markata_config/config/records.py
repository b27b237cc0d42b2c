"""Intermediate records decoded from configuration files.

Every format parser decodes its input into the :class:`ConfigDocument` record
tree defined here, whose field names are the literal on-disk keys. Optional
booleans are ``bool | None`` so "unset" stays distinguishable from ``false``.
A single conversion walk, :func:`to_config`, turns any :class:`ConfigSource`
into the canonical :class:`~markata_config.config.models.SiteConfig`.
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import typing as typ

import msgspec

from .._constants import NAMESPACE_KEY
from .models import (
    BlogrollConfig,
    BlogrollTemplates,
    ComponentsConfig,
    DocSidebarComponentConfig,
    EncryptionConfig,
    ExternalFeedConfig,
    FeedConfig,
    FeedDefaults,
    FeedFormats,
    FeedTemplates,
    FooterComponentConfig,
    FooterConfig,
    GlobConfig,
    IndieAuthConfig,
    MarkdownConfig,
    MentionsConfig,
    NavComponentConfig,
    NavItem,
    PagefindConfig,
    PostFormatsConfig,
    SearchConfig,
    SEOConfig,
    SidebarConfig,
    SiteConfig,
    SyndicationConfig,
    ThemeConfig,
    WebmentionConfig,
)


class ConfigSource(typ.Protocol):
    """Extraction operations every decoded configuration exposes."""

    def base_fields(self) -> dict[str, typ.Any]: ...

    def nav_items(self) -> list[NavItem]: ...

    def feeds(self) -> list[FeedConfig]: ...

    def feed_defaults(self) -> FeedDefaults: ...

    def glob(self) -> GlobConfig: ...

    def markdown(self) -> MarkdownConfig: ...

    def theme(self) -> ThemeConfig: ...

    def footer(self) -> FooterConfig: ...

    def post_formats(self) -> PostFormatsConfig: ...

    def seo(self) -> SEOConfig: ...

    def indieauth(self) -> IndieAuthConfig: ...

    def webmention(self) -> WebmentionConfig: ...

    def components(self) -> ComponentsConfig: ...

    def encryption(self) -> EncryptionConfig: ...

    def mentions(self) -> MentionsConfig: ...

    def blogroll(self) -> BlogrollConfig: ...

    def sidebar(self) -> SidebarConfig: ...

    def search(self) -> SearchConfig: ...


class NavItemRecord(msgspec.Struct):
    label: str = ""
    url: str = ""
    external: bool = False

    def to_model(self) -> NavItem:
        return NavItem(label=self.label, url=self.url, external=self.external)


class FooterRecord(msgspec.Struct):
    text: str = ""
    show_copyright: bool | None = None


class ThemeRecord(msgspec.Struct):
    name: str = ""
    palette: str = ""
    variables: dict[str, str] = msgspec.field(default_factory=dict)
    custom_css: str = ""


class GlobRecord(msgspec.Struct):
    patterns: list[str] = msgspec.field(default_factory=list)
    use_gitignore: bool | None = None


class MarkdownRecord(msgspec.Struct):
    extensions: list[str] = msgspec.field(default_factory=list)


class FeedFormatsRecord(msgspec.Struct):
    html: bool | None = None
    rss: bool | None = None
    atom: bool | None = None
    json: bool | None = None
    markdown: bool | None = None
    text: bool | None = None
    sitemap: bool | None = None

    def to_model(self) -> FeedFormats:
        return FeedFormats(
            html=self.html,
            rss=self.rss,
            atom=self.atom,
            json=self.json,
            markdown=self.markdown,
            text=self.text,
            sitemap=self.sitemap,
        )


class FeedTemplatesRecord(msgspec.Struct):
    html: str = ""
    rss: str = ""
    atom: str = ""
    json: str = ""
    card: str = ""

    def to_model(self) -> FeedTemplates:
        return FeedTemplates(
            html=self.html,
            rss=self.rss,
            atom=self.atom,
            json=self.json,
            card=self.card,
        )


class SyndicationRecord(msgspec.Struct):
    max_items: int = 0
    include_content: bool | None = None


class FeedRecord(msgspec.Struct):
    slug: str = ""
    title: str = ""
    description: str = ""
    filter: str = ""
    sort: str = ""
    reverse: bool = False
    items_per_page: int = 0
    orphan_threshold: int = 0
    pagination_type: str = ""
    formats: FeedFormatsRecord = msgspec.field(default_factory=FeedFormatsRecord)
    templates: FeedTemplatesRecord = msgspec.field(
        default_factory=FeedTemplatesRecord
    )

    def to_model(self) -> FeedConfig:
        return FeedConfig(
            slug=self.slug,
            title=self.title,
            description=self.description,
            filter=self.filter,
            sort=self.sort,
            reverse=self.reverse,
            items_per_page=self.items_per_page,
            orphan_threshold=self.orphan_threshold,
            pagination_type=self.pagination_type,
            formats=self.formats.to_model(),
            templates=self.templates.to_model(),
        )


class FeedDefaultsRecord(msgspec.Struct):
    items_per_page: int = 0
    orphan_threshold: int = 0
    pagination_type: str = ""
    formats: FeedFormatsRecord = msgspec.field(default_factory=FeedFormatsRecord)
    templates: FeedTemplatesRecord = msgspec.field(
        default_factory=FeedTemplatesRecord
    )
    syndication: SyndicationRecord = msgspec.field(default_factory=SyndicationRecord)


class PostFormatsRecord(msgspec.Struct):
    html: bool | None = None
    markdown: bool | None = None
    og: bool | None = None


class SEORecord(msgspec.Struct):
    twitter_handle: str = ""
    default_image: str = ""
    logo_url: str = ""


class IndieAuthRecord(msgspec.Struct):
    enabled: bool | None = None
    authorization_endpoint: str = ""
    token_endpoint: str = ""
    me_url: str = ""


class WebmentionRecord(msgspec.Struct):
    enabled: bool | None = None
    endpoint: str = ""


class NavComponentRecord(msgspec.Struct):
    enabled: bool | None = None
    position: str = ""
    style: str = ""
    items: list[NavItemRecord] = msgspec.field(default_factory=list)


class FooterComponentRecord(msgspec.Struct):
    enabled: bool | None = None
    text: str = ""
    show_copyright: bool | None = None
    links: list[NavItemRecord] = msgspec.field(default_factory=list)


class DocSidebarComponentRecord(msgspec.Struct):
    enabled: bool | None = None
    position: str = ""
    min_depth: int = 0
    max_depth: int = 0


class ComponentsRecord(msgspec.Struct):
    nav: NavComponentRecord = msgspec.field(default_factory=NavComponentRecord)
    footer: FooterComponentRecord = msgspec.field(
        default_factory=FooterComponentRecord
    )
    doc_sidebar: DocSidebarComponentRecord = msgspec.field(
        default_factory=DocSidebarComponentRecord
    )


class EncryptionRecord(msgspec.Struct):
    enabled: bool | None = None
    default_key: str = ""
    decryption_hint: str = ""
    private_tags: dict[str, str] = msgspec.field(default_factory=dict)


class MentionsRecord(msgspec.Struct):
    enabled: bool | None = None
    css_class: str = ""
    cache_dir: str = ""


class ExternalFeedRecord(msgspec.Struct):
    url: str = ""
    title: str = ""
    description: str = ""
    category: str = ""
    tags: list[str] = msgspec.field(default_factory=list)
    site_url: str = ""


class BlogrollTemplatesRecord(msgspec.Struct):
    blogroll: str = ""
    reader: str = ""


class BlogrollRecord(msgspec.Struct):
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
    feeds: list[ExternalFeedRecord] = msgspec.field(default_factory=list)
    templates: BlogrollTemplatesRecord = msgspec.field(
        default_factory=BlogrollTemplatesRecord
    )


class SidebarRecord(msgspec.Struct):
    enabled: bool | None = None
    position: str = ""
    width: str = ""
    collapsible: bool | None = None
    default_open: bool | None = None


class PagefindRecord(msgspec.Struct):
    auto_install: bool | None = None
    version: str = ""
    cache_dir: str = ""
    bundle_dir: str = ""
    verbose: bool | None = None


class SearchRecord(msgspec.Struct):
    enabled: bool | None = None
    position: str = ""
    placeholder: str = ""
    show_images: bool | None = None
    pagefind: PagefindRecord = msgspec.field(default_factory=PagefindRecord)


class SiteRecord(msgspec.Struct):
    """Everything found under the ``markata-go`` namespacing key."""

    output_dir: str = ""
    url: str = ""
    title: str = ""
    description: str = ""
    author: str = ""
    assets_dir: str = ""
    templates_dir: str = ""
    hooks: list[str] = msgspec.field(default_factory=list)
    disabled_hooks: list[str] = msgspec.field(default_factory=list)
    concurrency: int = 0
    nav: list[NavItemRecord] = msgspec.field(default_factory=list)
    footer_section: FooterRecord = msgspec.field(
        name="footer", default_factory=FooterRecord
    )
    glob_section: GlobRecord = msgspec.field(name="glob", default_factory=GlobRecord)
    markdown_section: MarkdownRecord = msgspec.field(
        name="markdown", default_factory=MarkdownRecord
    )
    feed_list: list[FeedRecord] = msgspec.field(name="feeds", default_factory=list)
    feed_defaults_section: FeedDefaultsRecord = msgspec.field(
        name="feed_defaults", default_factory=FeedDefaultsRecord
    )
    theme_section: ThemeRecord = msgspec.field(
        name="theme", default_factory=ThemeRecord
    )
    post_formats_section: PostFormatsRecord = msgspec.field(
        name="post_formats", default_factory=PostFormatsRecord
    )
    seo_section: SEORecord = msgspec.field(name="seo", default_factory=SEORecord)
    indieauth_section: IndieAuthRecord = msgspec.field(
        name="indieauth", default_factory=IndieAuthRecord
    )
    webmention_section: WebmentionRecord = msgspec.field(
        name="webmention", default_factory=WebmentionRecord
    )
    components_section: ComponentsRecord = msgspec.field(
        name="components", default_factory=ComponentsRecord
    )
    encryption_section: EncryptionRecord = msgspec.field(
        name="encryption", default_factory=EncryptionRecord
    )
    mentions_section: MentionsRecord = msgspec.field(
        name="mentions", default_factory=MentionsRecord
    )
    blogroll_section: BlogrollRecord = msgspec.field(
        name="blogroll", default_factory=BlogrollRecord
    )
    sidebar_section: SidebarRecord = msgspec.field(
        name="sidebar", default_factory=SidebarRecord
    )
    search_section: SearchRecord = msgspec.field(
        name="search", default_factory=SearchRecord
    )

    def base_fields(self) -> dict[str, typ.Any]:
        """Return the top-level scalar and string-list fields."""
        return {
            "output_dir": self.output_dir,
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "assets_dir": self.assets_dir,
            "templates_dir": self.templates_dir,
            "hooks": list(self.hooks),
            "disabled_hooks": list(self.disabled_hooks),
            "concurrency": self.concurrency,
        }

    def nav_items(self) -> list[NavItem]:
        return [item.to_model() for item in self.nav]

    def feeds(self) -> list[FeedConfig]:
        return [feed.to_model() for feed in self.feed_list]

    def feed_defaults(self) -> FeedDefaults:
        record = self.feed_defaults_section
        return FeedDefaults(
            items_per_page=record.items_per_page,
            orphan_threshold=record.orphan_threshold,
            pagination_type=record.pagination_type,
            formats=record.formats.to_model(),
            templates=record.templates.to_model(),
            syndication=SyndicationConfig(
                max_items=record.syndication.max_items,
                include_content=record.syndication.include_content,
            ),
        )

    def glob(self) -> GlobConfig:
        record = self.glob_section
        glob = GlobConfig(patterns=list(record.patterns))
        if record.use_gitignore is not None:
            glob.use_gitignore = record.use_gitignore
        return glob

    def markdown(self) -> MarkdownConfig:
        return MarkdownConfig(extensions=list(self.markdown_section.extensions))

    def theme(self) -> ThemeConfig:
        record = self.theme_section
        return ThemeConfig(
            name=record.name,
            palette=record.palette,
            variables=dict(record.variables),
            custom_css=record.custom_css,
        )

    def footer(self) -> FooterConfig:
        return FooterConfig(
            text=self.footer_section.text,
            show_copyright=self.footer_section.show_copyright,
        )

    def post_formats(self) -> PostFormatsConfig:
        record = self.post_formats_section
        return PostFormatsConfig(html=record.html, markdown=record.markdown, og=record.og)

    def seo(self) -> SEOConfig:
        record = self.seo_section
        return SEOConfig(
            twitter_handle=record.twitter_handle,
            default_image=record.default_image,
            logo_url=record.logo_url,
        )

    def indieauth(self) -> IndieAuthConfig:
        record = self.indieauth_section
        return IndieAuthConfig(
            enabled=record.enabled,
            authorization_endpoint=record.authorization_endpoint,
            token_endpoint=record.token_endpoint,
            me_url=record.me_url,
        )

    def webmention(self) -> WebmentionConfig:
        record = self.webmention_section
        return WebmentionConfig(enabled=record.enabled, endpoint=record.endpoint)

    def components(self) -> ComponentsConfig:
        record = self.components_section
        return ComponentsConfig(
            nav=NavComponentConfig(
                enabled=record.nav.enabled,
                position=record.nav.position,
                style=record.nav.style,
                items=[item.to_model() for item in record.nav.items],
            ),
            footer=FooterComponentConfig(
                enabled=record.footer.enabled,
                text=record.footer.text,
                show_copyright=record.footer.show_copyright,
                links=[link.to_model() for link in record.footer.links],
            ),
            doc_sidebar=DocSidebarComponentConfig(
                enabled=record.doc_sidebar.enabled,
                position=record.doc_sidebar.position,
                min_depth=record.doc_sidebar.min_depth,
                max_depth=record.doc_sidebar.max_depth,
            ),
        )

    def encryption(self) -> EncryptionConfig:
        record = self.encryption_section
        return EncryptionConfig(
            enabled=record.enabled,
            default_key=record.default_key,
            decryption_hint=record.decryption_hint,
            private_tags=dict(record.private_tags),
        )

    def mentions(self) -> MentionsConfig:
        record = self.mentions_section
        return MentionsConfig(
            enabled=record.enabled,
            css_class=record.css_class,
            cache_dir=record.cache_dir,
        )

    def blogroll(self) -> BlogrollConfig:
        record = self.blogroll_section
        return BlogrollConfig(
            enabled=record.enabled,
            blogroll_slug=record.blogroll_slug,
            reader_slug=record.reader_slug,
            cache_dir=record.cache_dir,
            cache_duration=record.cache_duration,
            timeout=record.timeout,
            concurrent_requests=record.concurrent_requests,
            max_entries_per_feed=record.max_entries_per_feed,
            items_per_page=record.items_per_page,
            orphan_threshold=record.orphan_threshold,
            feeds=[
                ExternalFeedConfig(
                    url=feed.url,
                    title=feed.title,
                    description=feed.description,
                    category=feed.category,
                    tags=list(feed.tags),
                    site_url=feed.site_url,
                )
                for feed in record.feeds
            ],
            templates=BlogrollTemplates(
                blogroll=record.templates.blogroll,
                reader=record.templates.reader,
            ),
        )

    def sidebar(self) -> SidebarConfig:
        record = self.sidebar_section
        return SidebarConfig(
            enabled=record.enabled,
            position=record.position,
            width=record.width,
            collapsible=record.collapsible,
            default_open=record.default_open,
        )

    def search(self) -> SearchConfig:
        record = self.search_section
        pagefind = record.pagefind
        return SearchConfig(
            enabled=record.enabled,
            position=record.position,
            placeholder=record.placeholder,
            show_images=record.show_images,
            pagefind=PagefindConfig(
                auto_install=pagefind.auto_install,
                version=pagefind.version,
                cache_dir=pagefind.cache_dir,
                bundle_dir=pagefind.bundle_dir,
                verbose=pagefind.verbose,
            ),
        )


class ConfigDocument(msgspec.Struct):
    """Top-level document: a single namespacing key wrapping every field."""

    site: SiteRecord = msgspec.field(name=NAMESPACE_KEY, default_factory=SiteRecord)


KNOWN_KEYS: frozenset[str] = frozenset(
    field.encode_name for field in msgspec.structs.fields(SiteRecord)
)


def unknown_sections(section: cabc.Mapping[str, typ.Any]) -> dict[str, typ.Any]:
    """Return a deep copy of the entries whose keys the records do not model."""
    return {
        key: copy.deepcopy(value)
        for key, value in section.items()
        if key not in KNOWN_KEYS
    }


def to_config(
    source: ConfigSource, *, extra: cabc.Mapping[str, typ.Any] | None = None
) -> SiteConfig:
    """Build the canonical model by walking a :class:`ConfigSource` once.

    Parameters
    ----------
    source : ConfigSource
        Any decoded configuration exposing the extraction operations.
    extra : Mapping[str, Any] or None, optional
        Unrecognised sections to carry through verbatim.

    Returns
    -------
    SiteConfig
        A new canonical configuration sharing no mutable state with
        ``source``.
    """
    config = SiteConfig(**source.base_fields())
    config.nav = source.nav_items()
    config.footer = source.footer()
    config.glob = source.glob()
    config.markdown = source.markdown()
    config.feeds = source.feeds()
    config.feed_defaults = source.feed_defaults()
    config.theme = source.theme()
    config.post_formats = source.post_formats()
    config.seo = source.seo()
    config.indieauth = source.indieauth()
    config.webmention = source.webmention()
    config.components = source.components()
    config.encryption = source.encryption()
    config.mentions = source.mentions()
    config.blogroll = source.blogroll()
    config.sidebar = source.sidebar()
    config.search = source.search()
    config.extra = dict(extra or {})
    return config


__all__ = [
    "KNOWN_KEYS",
    "ConfigDocument",
    "ConfigSource",
    "SiteRecord",
    "to_config",
    "unknown_sections",
]
