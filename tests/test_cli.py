from click.testing import CliRunner

from folio import __version__
from folio.cli import cli
from folio.content import ContentProcessor, DocType


def invoke(*args):
    return CliRunner().invoke(cli, list(args))


def test_build_command(project):
    result = invoke("build", "--source", str(project))
    assert result.exit_code == 0, result.output
    assert "Built" in result.output
    assert (project / "public" / "index.html").exists()


def test_build_command_warns_about_menu_targets(project):
    (project / "content" / "about.md").unlink()
    result = invoke("build", "-s", str(project), "-d", str(project / "out"))
    assert result.exit_code == 0
    assert "Warning: menu entry /about/ has no rendered page" in result.output
    assert (project / "out" / "index.html").exists()


def test_build_failure_reports_field(project):
    config = project / "hugo.toml"
    text = config.read_text(encoding="utf-8").replace('baseURL = "https://niks3089.com"\n', "")
    config.write_text(text, encoding="utf-8")
    result = invoke("build", "-s", str(project))
    assert result.exit_code == 1
    assert "Build failed:" in result.output
    assert "baseURL" in result.output
    assert not (project / "public").exists()


def test_build_failure_names_source_file(project):
    (project / "content" / "posts" / "broken.md").write_text(
        "---\ntitle: Broken\n---\n", encoding="utf-8"
    )
    result = invoke("build", "-s", str(project))
    assert result.exit_code == 1
    assert "File: content/posts/broken.md" in result.output
    assert "missing required field 'date'" in result.output


def test_check_command(project):
    result = invoke("check", "-s", str(project))
    assert result.exit_code == 0
    assert result.output.strip() == "nikhil acharya: 3 posts, 1 pages, 2 tags"
    result = invoke("check", "-s", str(project), "--drafts")
    assert result.output.strip() == "nikhil acharya: 4 posts, 1 pages, 3 tags"


def test_check_reports_duplicates(project):
    (project / "content" / "posts" / "solana-two.md").write_text(
        "---\ntitle: Again\ndate: 2024-09-01\n---\n", encoding="utf-8"
    )
    result = invoke("check", "-s", str(project))
    assert result.exit_code == 1
    assert "duplicate document path 'posts/solana-two'" in result.output


def test_tags_command(project):
    result = invoke("tags", "-s", str(project))
    assert result.exit_code == 0
    assert result.output.splitlines() == ["rust (1)", "solana (3)"]


def test_new_post_with_options(project):
    result = invoke(
        "new", "posts/hello-world", "-s", str(project),
        "--title", "Hello World", "--tag", "solana", "--tag", "rust", "--draft",
    )
    assert result.exit_code == 0, result.output
    target = project / "content" / "posts" / "hello-world.md"
    assert "Created content/posts/hello-world.md" in result.output
    doc = ContentProcessor(project / "content").load_file(target)
    assert doc.title == "Hello World"
    assert doc.doc_type is DocType.POST
    assert doc.date is not None
    assert doc.tags == frozenset({"solana", "rust"})
    assert doc.draft is True
    assert doc.path == "posts/hello-world"


def test_new_page(project):
    result = invoke("new", "resume.md", "-s", str(project), "-t", "Resume", "--page")
    assert result.exit_code == 0, result.output
    doc = ContentProcessor(project / "content").load_file(project / "content" / "resume.md")
    assert doc.doc_type is DocType.PAGE
    assert doc.date is None


def test_new_rejects_collisions(project):
    result = invoke("new", "posts/2024-08-10-solana-one", "-s", str(project), "-t", "X")
    assert result.exit_code != 0
    assert "File already exists" in result.output

    result = invoke("new", "posts/solana-one", "-s", str(project), "-t", "X")
    assert result.exit_code != 0
    assert "A document with path 'posts/solana-one' already exists" in result.output
    assert not (project / "content" / "posts" / "solana-one.md").exists()


def test_new_rejects_paths_outside_content(project):
    result = invoke("new", "../escape", "-s", str(project), "-t", "X")
    assert result.exit_code != 0
    assert "inside the content directory" in result.output


def test_new_prompts_for_title(project, monkeypatch):
    prompts = []

    class FakePrompt:
        def __init__(self, answer):
            self.answer = answer

        def ask(self):
            return self.answer

    def fake_text(message, validate=None):
        prompts.append(message)
        assert validate("   ") == "Title cannot be empty"
        assert validate("ok") is True
        return FakePrompt("Prompted Title")

    monkeypatch.setattr("folio.cli.questionary.text", fake_text)
    result = invoke("new", "notes", "-s", str(project))
    assert result.exit_code == 0, result.output
    assert prompts == ["Title:"]
    text = (project / "content" / "notes.md").read_text(encoding="utf-8")
    assert "title: Prompted Title" in text


def test_new_prompt_cancelled(project, monkeypatch):
    monkeypatch.setattr(
        "folio.cli.questionary.text",
        lambda message, validate=None: type("Cancelled", (), {"ask": lambda self: None})(),
    )
    result = invoke("new", "notes", "-s", str(project))
    assert result.exit_code == 1
    assert not (project / "content" / "notes.md").exists()


def test_version_option():
    result = invoke("--version")
    assert result.exit_code == 0
    assert __version__ in result.output


def test_module_main_entrypoint():
    from folio.__main__ import main

    assert callable(main)


def test_tags_failure_headline(project):
    (project / "hugo.toml").write_text('title = "No base"\n', encoding="utf-8")
    result = invoke("tags", "-s", str(project))
    assert result.exit_code == 1
    assert "Cannot list tags:" in result.output
    assert "baseURL" in result.output
