"""Site configuration loading for Folio.

This module decodes the Hugo-style site configuration (``hugo.toml`` or a
YAML equivalent) into an immutable SiteConfig value. The value is built
once per build and passed explicitly to whatever consumes it.

Key functions:
- load_config: Decode and validate configuration text or a decoded mapping.
- read_config: Locate and load the configuration file of a project.
"""

from __future__ import annotations

import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .errors import ConfigError, InvalidFieldError

CONFIG_FILENAMES = (
    "hugo.toml",
    "config.toml",
    "hugo.yaml",
    "hugo.yml",
    "config.yaml",
    "config.yml",
)

DEFAULT_CONTENT_DIR = "content"
DEFAULT_PUBLISH_DIR = "public"
DEFAULT_LANGUAGE_CODE = "en"

_FEATHER_RE = re.compile(r"""data-feather=["']([^"']+)["']""")
_SCALARS = (bool, int, float, str)


@dataclass(frozen=True)
class MenuEntry:
    """One entry of the main menu.

    Attributes:
        name: Label shown in the menu, falls back to the identifier.
        url: Target URL, site-relative or absolute.
        weight: Sort key, lower first.
        identifier: Optional unique identifier.
        pre: Raw HTML placed before the label, passed through verbatim.
        icon: Icon name, from ``icon`` or the ``data-feather`` attribute of ``pre``.
    """

    name: str
    url: str
    weight: int = 0
    identifier: str | None = None
    pre: str = ""
    icon: str | None = None

    @property
    def is_external(self) -> bool:
        return not self.url.startswith("/")


@dataclass(frozen=True)
class SocialIcon:
    platform: str
    url: str


@dataclass(frozen=True)
class TocSettings:
    """Heading levels included in a table of contents."""

    start_level: int = 2
    end_level: int = 3
    ordered: bool = False


DEFAULT_TOC = TocSettings()


@dataclass(frozen=True)
class SiteConfig:
    """Validated, immutable site configuration.

    Attributes:
        base_url: Absolute base URL of the published site.
        title: Site title.
        language_code: Language of the content.
        theme: Name of the theme the site was written for.
        enable_emoji: Emoji shortcode toggle, carried for the renderer.
        enable_robots_txt: Whether robots.txt is generated.
        menu: Main menu entries sorted by weight.
        social_icons: Social links in source order.
        render_options: Scalar appearance and feature toggles.
        params: The full ``params`` table, values untouched.
        toc: Table of contents heading bounds.
        content_dir: Directory holding content, relative to the project.
        publish_dir: Output directory, relative to the project.
    """

    base_url: str
    title: str
    language_code: str = DEFAULT_LANGUAGE_CODE
    theme: str | None = None
    enable_emoji: bool = False
    enable_robots_txt: bool = False
    menu: tuple[MenuEntry, ...] = ()
    social_icons: tuple[SocialIcon, ...] = ()
    render_options: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    toc: TocSettings = DEFAULT_TOC
    content_dir: str = DEFAULT_CONTENT_DIR
    publish_dir: str = DEFAULT_PUBLISH_DIR

    @property
    def custom_head_html(self) -> str:
        """Raw HTML/script injected into every page head, never interpreted."""
        value = self.params.get("customHeadHTML", "")
        return value if isinstance(value, str) else ""

    @property
    def description(self) -> str:
        value = self.params.get("description", "")
        return value if isinstance(value, str) else ""

    @property
    def meta_keywords(self) -> tuple[str, ...]:
        value = self.params.get("metaKeywords", ())
        return tuple(v for v in value if isinstance(v, str)) if isinstance(value, list) else ()


def load_config(raw: str | Mapping[str, Any], fmt: str = "toml") -> SiteConfig:
    """Decode and validate a site configuration.

    Args:
        raw: Configuration file text, or an already decoded mapping.
        fmt: Format of ``raw`` when it is text, "toml" or "yaml".

    Returns:
        Immutable SiteConfig with the menu sorted by weight.

    Raises:
        ConfigError: If the text cannot be decoded into a mapping.
        InvalidFieldError: If a field is missing or has the wrong shape.
    """
    data = _decode(raw, fmt) if isinstance(raw, str) else raw
    if not isinstance(data, Mapping):
        raise ConfigError("configuration must be a mapping of fields")

    params = _table(data, "params")
    markup = _table(data, "markup")
    return SiteConfig(
        base_url=_required_string(data, "baseURL"),
        title=_required_string(data, "title"),
        language_code=_optional_string(data, "languageCode") or DEFAULT_LANGUAGE_CODE,
        theme=_optional_string(data, "theme"),
        enable_emoji=_optional_bool(data, "enableEmoji"),
        enable_robots_txt=_optional_bool(data, "enableRobotsTXT"),
        menu=_menu(data),
        social_icons=_social_icons(params),
        render_options=MappingProxyType(_render_options(data, params)),
        params=MappingProxyType(dict(params)),
        toc=_toc(markup),
        content_dir=_optional_string(data, "contentDir") or DEFAULT_CONTENT_DIR,
        publish_dir=_optional_string(data, "publishDir") or DEFAULT_PUBLISH_DIR,
    )


def read_config(project_root: Path) -> SiteConfig:
    """Locate and load the site configuration file of a project.

    Args:
        project_root: Root directory of the project.

    Returns:
        Loaded SiteConfig.

    Raises:
        ConfigError: If no configuration file exists or it is invalid.
    """
    for name in CONFIG_FILENAMES:
        path = project_root / name
        if path.is_file():
            fmt = "toml" if path.suffix == ".toml" else "yaml"
            return load_config(path.read_text(encoding="utf-8"), fmt)
    raise ConfigError(
        f"no site configuration found in {project_root} "
        f"(looked for {', '.join(CONFIG_FILENAMES)})"
    )


def _decode(text: str, fmt: str) -> Any:
    try:
        if fmt == "toml":
            return tomllib.loads(text)
        if fmt == "yaml":
            return yaml.safe_load(text) or {}
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot decode {fmt.upper()} configuration: {exc}") from exc
    raise ConfigError(f"unsupported configuration format '{fmt}'")


def _required_string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidFieldError(key, "required non-empty string")
    return value.strip()


def _optional_string(data: Mapping[str, Any], key: str, name: str = "") -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidFieldError(name or key, "must be a string")
    return value.strip() or None


def _optional_bool(data: Mapping[str, Any], key: str, name: str = "") -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise InvalidFieldError(name or key, "must be true or false")
    return value


def _optional_int(data: Mapping[str, Any], key: str, name: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldError(name, "must be an integer")
    return value


def _table(data: Mapping[str, Any], key: str, name: str = "") -> Mapping[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, Mapping):
        raise InvalidFieldError(name or key, "must be a table")
    return value


def _menu(data: Mapping[str, Any]) -> tuple[MenuEntry, ...]:
    menus = _table(data, "menu")
    raw_entries = menus.get("main", [])
    if not isinstance(raw_entries, list):
        raise InvalidFieldError("menu.main", "must be a list of tables")
    entries = []
    for position, raw in enumerate(raw_entries):
        name = f"menu.main[{position}]"
        if not isinstance(raw, Mapping):
            raise InvalidFieldError(name, "must be a table")
        url = raw.get("url")
        if not isinstance(url, str) or not url.strip():
            raise InvalidFieldError(f"{name}.url", "required non-empty string")
        identifier = _optional_string(raw, "identifier", f"{name}.identifier")
        label = _optional_string(raw, "name", f"{name}.name") or identifier
        if not label:
            raise InvalidFieldError(f"{name}.name", "entry needs a name or identifier")
        pre = _optional_string(raw, "pre", f"{name}.pre") or ""
        icon = _optional_string(raw, "icon", f"{name}.icon")
        if icon is None:
            feather = _FEATHER_RE.search(pre)
            icon = feather.group(1) if feather else None
        entries.append(
            MenuEntry(
                name=label,
                url=url.strip(),
                weight=_optional_int(raw, "weight", f"{name}.weight", 0),
                identifier=identifier,
                pre=pre,
                icon=icon,
            )
        )
    # sorted() is stable, equal weights keep source order
    return tuple(sorted(entries, key=lambda entry: entry.weight))


def _social_icons(params: Mapping[str, Any]) -> tuple[SocialIcon, ...]:
    raw_icons = params.get("socialIcons", [])
    if not isinstance(raw_icons, list):
        raise InvalidFieldError("params.socialIcons", "must be a list of tables")
    icons = []
    for position, raw in enumerate(raw_icons):
        name = f"params.socialIcons[{position}]"
        if not isinstance(raw, Mapping):
            raise InvalidFieldError(name, "must be a table")
        platform = raw.get("name")
        url = raw.get("url")
        if not isinstance(platform, str) or not platform.strip():
            raise InvalidFieldError(f"{name}.name", "required non-empty string")
        if not isinstance(url, str) or not url.strip():
            raise InvalidFieldError(f"{name}.url", "required non-empty string")
        icons.append(SocialIcon(platform=platform.strip(), url=url.strip()))
    return tuple(icons)


def _render_options(
    data: Mapping[str, Any], params: Mapping[str, Any]
) -> dict[str, Any]:
    options = {key: value for key, value in params.items() if isinstance(value, _SCALARS)}
    for key in ("pygmentsStyle", "enableEmoji"):
        value = data.get(key)
        if isinstance(value, _SCALARS):
            options[key] = value
    return options


def _toc(markup: Mapping[str, Any]) -> TocSettings:
    name = "markup.tableOfContents"
    raw = _table(markup, "tableOfContents", name)
    start = _optional_int(raw, "startLevel", f"{name}.startLevel", DEFAULT_TOC.start_level)
    end = _optional_int(raw, "endLevel", f"{name}.endLevel", DEFAULT_TOC.end_level)
    if not 1 <= start <= end <= 6:
        raise InvalidFieldError(name, "levels must satisfy 1 <= startLevel <= endLevel <= 6")
    ordered = _optional_bool(raw, "ordered", f"{name}.ordered")
    return TocSettings(start_level=start, end_level=end, ordered=ordered)
