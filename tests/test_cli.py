import json

import pytest

from conftest import FULL_NODE, FakeFetcher, FakeLLM, recipe_page
from recipe_agent import __main__ as cli
from recipe_agent.extractor import RecipeExtractor

URL = "https://example.com/shakshuka"


@pytest.fixture
def served(monkeypatch):
    """Point the CLI at an extractor serving one prepared page."""
    fetcher = FakeFetcher(html=recipe_page(FULL_NODE), text="Shakshuka")
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

    def factory(settings):
        return RecipeExtractor(settings, fetcher=fetcher, llm=FakeLLM())

    monkeypatch.setattr(cli, "RecipeExtractor", factory)
    return fetcher


def _exit_code(argv) -> int:
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    return exc.value.code


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Chocolate Cake!", "chocolate-cake"),
        ("עוגת שוקולד", "עוגת-שוקולד"),
        ("  Mom's  best (ever) ", "moms-best-ever"),
        ("???", "recipe"),
        ("a" * 150, "a" * 100),
    ],
)
def test_sanitize_filename(title, expected):
    assert cli.sanitize_filename(title) == expected


def test_extract_prints_json(served, capsys):
    assert _exit_code(["extract", URL, "--no-ai"]) == 0
    recipe = json.loads(capsys.readouterr().out)
    assert recipe["title"] == "Shakshuka"
    assert recipe["extraction_method"] == "structured"


def test_extract_summary(served, capsys):
    assert _exit_code(["extract", URL, "--no-ai", "--summary"]) == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "Shakshuka"
    assert "confidence 0.90" in out


def test_extract_to_file(served, tmp_path):
    target = tmp_path / "out.json"
    assert _exit_code(["extract", URL, "--no-ai", "--compact", "-o", str(target)]) == 0
    text = target.read_text(encoding="utf-8")
    assert text.count("\n") == 1
    assert json.loads(text)["source_url"] == URL


def test_extract_failure_goes_to_stderr(served, capsys):
    served.html = recipe_page()
    assert _exit_code(["extract", URL, "--no-ai"]) == 1
    err = capsys.readouterr().err
    assert "Error: No structured data found and AI extraction is disabled" in err


def test_batch_writes_files_and_reports(served, tmp_path, capsys):
    out_dir = tmp_path / "recipes"
    assert _exit_code(["batch", URL, "not a url", "--no-ai", "-o", str(out_dir)]) == 1
    assert capsys.readouterr().out.strip() == "Done! 1 succeeded, 1 failed"
    saved = json.loads((out_dir / "shakshuka.json").read_text(encoding="utf-8"))
    assert saved["title"] == "Shakshuka"


def test_image_missing_file(served, tmp_path, capsys):
    assert _exit_code(["image", str(tmp_path / "nope.png")]) == 1
    assert "no such file" in capsys.readouterr().err


def test_image_needs_api_key(served, tmp_path, capsys):
    photo = tmp_path / "card.png"
    photo.write_bytes(b"\x89PNG fake")
    assert _exit_code(["image", str(photo)]) == 1
    assert "GOOGLE_API_KEY" in capsys.readouterr().err


def test_unknown_command_exits():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["scrape", URL])
