import dataclasses
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from folio.content import (
    ContentProcessor,
    DocType,
    FileContentLoader,
    logical_path,
    parse_document,
)
from folio.errors import MalformedMetadataError, MissingRequiredFieldError, ParseError

POST = """---
title: Solana accounts
date: 2024-08-10T09:30:00+05:30
description: How accounts work
tags: [solana, rust, solana]
weight: 25
showTableOfContents: true
---

# Intro

Body text.
"""


def test_parse_yaml_post():
    doc = parse_document(POST, path="posts/solana-accounts")
    assert doc.path == "posts/solana-accounts"
    assert doc.title == "Solana accounts"
    assert doc.doc_type is DocType.POST
    assert doc.date == datetime(2024, 8, 10, 4, 0, tzinfo=timezone.utc)
    assert doc.date.utcoffset() == timedelta(hours=5, minutes=30)
    assert doc.description == "How accounts work"
    assert doc.tags == frozenset({"solana", "rust"})
    assert doc.weight == 25
    assert doc.show_table_of_contents is True
    assert doc.draft is False
    assert doc.body == "\n# Intro\n\nBody text.\n"
    assert doc.summary == "Body text."
    assert doc.url == "/posts/solana-accounts/"
    assert doc.slug == "solana-accounts"
    assert doc.section == "posts"
    assert doc.params["weight"] == 25


def test_parse_toml_page_without_date():
    text = '+++\ntitle = "About me"\ntype = "page"\n+++\nHello\n'
    doc = parse_document(text, path="about")
    assert doc.doc_type is DocType.PAGE
    assert doc.date is None
    assert doc.body == "Hello\n"
    assert doc.section == ""
    assert doc.tags == frozenset()
    assert doc.weight == 0
    assert doc.show_table_of_contents is False


def test_default_type_applies_without_type_key():
    text = "---\ntitle: Now\n---\n"
    assert parse_document(text, "now", default_type=DocType.PAGE).doc_type is DocType.PAGE
    with pytest.raises(MissingRequiredFieldError):
        parse_document(text, "now")


def test_type_values_map_to_doc_types():
    base = "---\ntitle: T\ndate: 2024-01-01\ntype: {}\n---\n"
    assert parse_document(base.format("posts")).doc_type is DocType.POST
    assert parse_document(base.format("Post")).doc_type is DocType.POST
    assert parse_document(base.format("resume")).doc_type is DocType.PAGE


def test_post_missing_date_fails():
    with pytest.raises(MissingRequiredFieldError) as excinfo:
        parse_document("---\ntitle: No date\n---\nbody", path="posts/x")
    assert excinfo.value.field == "date"
    assert isinstance(excinfo.value, ParseError)


def test_missing_or_blank_title_fails():
    for text in ("---\ndate: 2024-01-01\n---\n", "---\ntitle: '  '\ndate: 2024-01-01\n---\n"):
        with pytest.raises(MissingRequiredFieldError) as excinfo:
            parse_document(text)
        assert excinfo.value.field == "title"


def test_empty_front_matter_block_is_missing_title():
    with pytest.raises(MissingRequiredFieldError):
        parse_document("---\n---\nbody")


@pytest.mark.parametrize(
    "text",
    [
        "# Just markdown\n",
        "",
        "---\ntitle: Never closed\n",
        "+++\ntitle = 'closed with yaml'\n---\n",
        "---\ntitle: [unclosed\n---\n",
        "---\n- a\n- b\n---\n",
        "+++\ntitle = \n+++\n",
    ],
)
def test_malformed_metadata(text):
    with pytest.raises(MalformedMetadataError):
        parse_document(text)


def test_unterminated_block_message():
    with pytest.raises(MalformedMetadataError, match="never closed"):
        parse_document("---\ntitle: x\n", source_path=Path("posts/x.md"))


@pytest.mark.parametrize(
    "field_line",
    [
        "tags: 5",
        "tags: [1, 2]",
        "weight: high",
        "weight: true",
        "showTableOfContents: sometimes",
        "date: yesterday",
        "title: [a, b]",
    ],
)
def test_wrong_field_shapes(field_line):
    key = field_line.split(":")[0]
    lines = {"title": "title: T", "date": "date: 2024-01-01"}
    lines[key] = field_line
    text = "---\n" + "\n".join(lines.values()) + "\n---\n"
    with pytest.raises(MalformedMetadataError):
        parse_document(text)


def test_dates_without_offset_are_utc():
    doc = parse_document("---\ntitle: T\ndate: 2024-08-10\n---\n")
    assert doc.date == datetime(2024, 8, 10, tzinfo=timezone.utc)
    doc = parse_document("---\ntitle: T\ndate: '2024-08-10T12:30:00'\n---\n")
    assert doc.date == datetime(2024, 8, 10, 12, 30, tzinfo=timezone.utc)
    doc = parse_document('+++\ntitle = "T"\ndate = 2024-08-10T12:30:00-07:00\n+++\n')
    assert doc.date == datetime(2024, 8, 10, 19, 30, tzinfo=timezone.utc)


def test_single_string_tag_and_blank_tags():
    doc = parse_document("---\ntitle: T\ndate: 2024-01-01\ntags: solana\n---\n")
    assert doc.tags == frozenset({"solana"})
    doc = parse_document("---\ntitle: T\ndate: 2024-01-01\ntags: ['', ' rust ']\n---\n")
    assert doc.tags == frozenset({"rust"})


def test_path_resolution():
    text = "---\ntitle: Hello World\ndate: 2024-01-01\n---\n"
    assert parse_document(text).path == "hello-world"
    assert parse_document(text, path="/posts/hello/").path == "posts/hello"
    slugged = "---\ntitle: Hello\ndate: 2024-01-01\nslug: greetings\n---\n"
    assert parse_document(slugged, path="posts/hello").path == "posts/greetings"
    assert parse_document(slugged, path="hello").path == "greetings"
    assert parse_document(slugged).path == "greetings"


def test_documents_are_immutable():
    doc = parse_document(POST, path="posts/a")
    with pytest.raises(dataclasses.FrozenInstanceError):
        doc.title = "changed"  # type: ignore[misc]
    with pytest.raises(TypeError):
        doc.params["title"] = "changed"  # type: ignore[index]


def test_equality_ignores_source_path():
    first = parse_document(POST, path="posts/a", source_path=Path("one.md"))
    second = parse_document(POST, path="posts/a", source_path=Path("two.md"))
    assert first == second


def test_bom_is_ignored():
    doc = parse_document("\ufeff" + POST, path="posts/a")
    assert doc.title == "Solana accounts"


def test_logical_path():
    assert logical_path(Path("posts/2024-08-10-solana-accounts.md")) == "posts/solana-accounts"
    assert logical_path(Path("about.md")) == "about"
    assert logical_path(Path("projects/My Site/index.md")) == "projects/my-site"
    assert logical_path(Path("index.md")) == "index"


def test_loader_skips_internal_and_non_markdown(project):
    content = project / "content"
    (content / "notes.txt").write_text("ignore", encoding="utf-8")
    (content / ".hidden.md").write_text("ignore", encoding="utf-8")
    (content / "_private").mkdir()
    (content / "_private" / "secret.md").write_text("ignore", encoding="utf-8")
    files = [p.relative_to(content).as_posix() for p in FileContentLoader(content).iter_files()]
    assert files == [
        "about.md",
        "posts/2024-08-10-solana-one.md",
        "posts/2024-08-17-solana-two.md",
        "posts/2024-08-23-solana-three.md",
        "posts/unfinished.md",
    ]


def test_processor_loads_documents(project):
    content = project / "content"
    docs = ContentProcessor(content).load()
    assert [d.path for d in docs] == [
        "about",
        "posts/solana-one",
        "posts/solana-two",
        "posts/solana-three",
    ]
    about = docs[0]
    assert about.doc_type is DocType.PAGE
    assert about.source_path == content / "about.md"
    assert all(d.doc_type is DocType.POST for d in docs[1:])


def test_processor_includes_drafts_on_request(project):
    docs = ContentProcessor(project / "content").load(include_drafts=True)
    draft = next(d for d in docs if d.draft)
    assert draft.path == "posts/unfinished"


def test_top_level_documents_default_to_pages(tmp_path):
    (tmp_path / "resume.md").write_text("---\ntitle: Resume\n---\n", encoding="utf-8")
    (tmp_path / "bundle").mkdir()
    (tmp_path / "bundle" / "index.md").write_text("---\ntitle: Bundle\n---\n", encoding="utf-8")
    docs = ContentProcessor(tmp_path).load()
    assert {d.path: d.doc_type for d in docs} == {
        "bundle": DocType.PAGE,
        "resume": DocType.PAGE,
    }


def test_parse_errors_carry_source_file(tmp_path):
    bad = tmp_path / "posts" / "bad.md"
    bad.parent.mkdir()
    bad.write_text("---\ntitle: Bad\n---\n", encoding="utf-8")
    with pytest.raises(MissingRequiredFieldError) as excinfo:
        ContentProcessor(tmp_path).load()
    assert excinfo.value.source_path == bad
    assert str(bad) in str(excinfo.value)


def test_non_utf8_file_is_a_parse_error(tmp_path):
    (tmp_path / "latin.md").write_bytes(b"---\ntitle: caf\xe9\n---\n")
    with pytest.raises(ParseError):
        ContentProcessor(tmp_path).load()
