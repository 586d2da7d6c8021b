from pathlib import Path

import pytest

SITE_CONFIG = '''baseURL = "https://niks3089.com"
title = "nikhil acharya"
theme = "gokarna"
languageCode = "en"
enableEmoji = true
enableRobotsTXT = true
pygmentsStyle = "monokai"

[params]
  footer = "The Marauders"
  description = "Code in hand, innovation ahead, and success within"
  avatarURL = "/images/avatar.webp"
  ShowBackToTopButton = true
  customHeadHTML = """
    <script>renderMathInElement(document.body, {delimiters: [{left: '$$', right: '$$', display: true}]});</script>
  """
  socialIcons = [
    {name = "github", url = "https://github.com/niks3089"},
    {name = "email", url = "mailto:niks3089@gmail.com"}
  ]

[menu]
  [[menu.main]]
    name = "Posts"
    pre = "<span data-feather='book'></span>"
    url = "/posts/"
    weight = 2

  [[menu.main]]
    name = "Home"
    pre = "<span data-feather='home'></span>"
    url = "/"
    weight = 1

  [[menu.main]]
    name = "About me"
    url = "/about/"
    weight = 3

  [[menu.main]]
    name = "Tags"
    url = "/tags/"
    weight = 4

[markup]
  [markup.tableOfContents]
    startLevel = 1
    endLevel = 4
    ordered = false
'''


def write_post(content: Path, name: str, title: str, date: str, tags=(), extra: str = "") -> Path:
    path = content / "posts" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    tag_list = ", ".join(f'"{t}"' for t in tags)
    path.write_text(
        f"---\ntitle: {title}\ndate: {date}\ntags: [{tag_list}]\n{extra}---\n\n"
        f"## Overview\n\nNotes about {title}.\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small site: three solana posts, a draft, an about page."""
    (tmp_path / "hugo.toml").write_text(SITE_CONFIG, encoding="utf-8")
    content = tmp_path / "content"
    write_post(content, "2024-08-10-solana-one.md", "Solana One", "2024-08-10T10:00:00+05:30", ["solana"])
    write_post(content, "2024-08-17-solana-two.md", "Solana Two", "2024-08-17T10:00:00+05:30", ["solana", "rust"])
    write_post(
        content,
        "2024-08-23-solana-three.md",
        "Solana Three",
        "2024-08-23T10:00:00+05:30",
        ["solana"],
        extra="showTableOfContents: true\n",
    )
    write_post(content, "unfinished.md", "Unfinished", "2024-09-01T10:00:00Z", ["wip"], extra="draft: true\n")
    (content / "posts" / "_index.md").write_text("---\ntitle: Posts\n---\n", encoding="utf-8")
    (content / "about.md").write_text(
        "+++\ntitle = \"About me\"\ntype = \"page\"\n+++\n\nI write code.\n", encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def site_config_text() -> str:
    return SITE_CONFIG
