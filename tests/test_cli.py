import json

import pytest

from ascii_view.cli import main


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("ASCII_VIEW_DISPLAY_WIDTH", raising=False)


@pytest.fixture
def page(tmp_path):
    tree = {
        "viewportWidth": 800,
        "root": {
            "tag": "BODY",
            "style": {"display": "block"},
            "children": [
                {
                    "tag": "H1",
                    "style": {"display": "block", "marginBottom": "21px"},
                    "children": [{"text": "Hello"}],
                },
                {
                    "tag": "P",
                    "style": {"display": "block"},
                    "children": [
                        {"text": "Read the "},
                        {
                            "tag": "A",
                            "style": {"display": "inline"},
                            "attrs": {"href": "https://docs.test"},
                            "children": [{"text": "docs"}],
                        },
                    ],
                },
            ],
        },
    }
    path = tmp_path / "page.json"
    path.write_text(json.dumps(tree), encoding="utf-8")
    return path


def test_text_output(page, tmp_path, capsys):
    out = tmp_path / "page.txt"
    assert main([str(page), "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8") == "# Hello\n\nRead the docs\n"
    assert "Saved to" in capsys.readouterr().out


def test_html_output(page, tmp_path):
    out = tmp_path / "page.html"
    assert main([str(page), "-o", str(out), "--html"]) == 0
    assert '<a href="https://docs.test">docs</a>' in out.read_text(encoding="utf-8")


def test_stdout_with_line_numbers(page, capsys):
    assert main([str(page), "-n", "--no-images"]) == 0
    assert capsys.readouterr().out.splitlines() == ["   1 # Hello", "   2 ", "   3 Read the docs"]


def test_missing_file_reports_error(tmp_path, capsys):
    assert main([str(tmp_path / "nope.json")]) == 1
    assert capsys.readouterr().err.startswith("Error:")


def test_invalid_width_reports_error(page, capsys):
    assert main([str(page), "-w", "5"]) == 1
    assert "display_width" in capsys.readouterr().err


def test_page_load_failure_reports_error(monkeypatch, capsys):
    from ascii_view.browser import BrowserRenderer
    from ascii_view.pipeline import RenderError

    def fail(self, url):
        raise RenderError(f"Could not load {url}: Timeout 30000ms exceeded")

    monkeypatch.setattr(BrowserRenderer, "render_url", fail)
    assert main(["https://slow.test/"]) == 1
    assert capsys.readouterr().err.strip() == "Error: Could not load https://slow.test/: Timeout 30000ms exceeded"
