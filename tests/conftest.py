"""Pytest configuration and shared fixtures for the convertflow test suite.

Input files are generated at test time; nothing binary is checked in.
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings
from utils import (
    SAMPLE_RTF,
    SAMPLE_SVG,
    ProgressRecorder,
    create_docx_bytes,
    create_image_bytes,
    create_ods_bytes,
    create_odt_bytes,
    create_pdf_bytes,
    create_xlsx_bytes,
)

from convertflow.catalog import detect_file
from convertflow.config import ConvertFlowConfig
from convertflow.models import SourceFile

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20, deadline=None)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - dispatcher and CLI end-to-end")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep user configuration files and CONVERTFLOW_* variables out of tests."""
    for name in list(os.environ):
        if name.startswith("CONVERTFLOW_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("USERPROFILE", str(tmp_path / "home"))


@pytest.fixture
def progress() -> ProgressRecorder:
    """Provide a progress callback that records every value."""
    return ProgressRecorder()


@pytest.fixture
def config() -> ConvertFlowConfig:
    """Provide the default configuration."""
    return ConvertFlowConfig()


@pytest.fixture
def pdf_bytes() -> bytes:
    """Provide a three-page PDF."""
    return create_pdf_bytes(["Alpha page", "Beta page", "Gamma page"])


@pytest.fixture
def pdf_source(pdf_bytes) -> SourceFile:
    """Provide a three-page PDF as a source file."""
    return SourceFile("report.pdf", pdf_bytes, "application/pdf")


@pytest.fixture
def png_bytes() -> bytes:
    """Provide a small opaque red PNG."""
    return create_image_bytes("PNG", color=(255, 0, 0))


@pytest.fixture
def png_source(png_bytes) -> SourceFile:
    """Provide a small red PNG as a source file."""
    return SourceFile("photo.png", png_bytes, "image/png")


@pytest.fixture
def rgba_png_source() -> SourceFile:
    """Provide a half-transparent PNG."""
    return SourceFile("overlay.png", create_image_bytes("PNG", color=(0, 0, 255, 128), mode="RGBA"))


@pytest.fixture
def docx_source() -> SourceFile:
    """Provide a DOCX with a heading and two paragraphs."""
    return SourceFile("letter.docx", create_docx_bytes(heading="Greeting"))


@pytest.fixture(scope="session")
def sample_sources() -> dict:
    """Provide one valid source file per routed (category, subcategory).

    Returns
    -------
    dict
        ``"category.subcategory"`` -> SourceFile

    """
    junk = b"\x00\x01binary payload\x02"
    sources = [
        SourceFile("report.pdf", create_pdf_bytes(["First page text", "Second page text"])),
        SourceFile("letter.docx", create_docx_bytes(heading="Greeting")),
        SourceFile("notes.txt", b"Line one\nLine two\n"),
        SourceFile("memo.rtf", SAMPLE_RTF),
        SourceFile("essay.odt", create_odt_bytes()),
        SourceFile("page.html", b"<html><body><h1>Title</h1><p>Body text</p></body></html>"),
        SourceFile("readme.md", b"# Heading\n\nSome **bold** text and a [link](http://x.y).\n- item\n"),
        SourceFile("data.json", b'[{"name": "Ann", "age": 31}, {"name": "Bob", "age": 42}]'),
        SourceFile("feed.xml", b"<?xml version='1.0'?><items><item>A</item></items>"),
        SourceFile("settings.yaml", b"name: demo\ncount: 3\nenabled: true\n"),
        SourceFile("project.toml", b'title = "demo"\n[owner]\nname = "Ann"\n'),
        SourceFile("script.py", b"def main():\n    return 42\n"),
        SourceFile("paper.tex", b"\\section{Intro}\nHello \\textbf{world}.\n"),
        SourceFile("book.xlsx", create_xlsx_bytes()),
        SourceFile("table.csv", b"name,age\nAnn,31\nBob,42\n"),
        SourceFile("table.tsv", b"name\tage\nAnn\t31\nBob\t42\n"),
        SourceFile("budget.ods", create_ods_bytes()),
        SourceFile("deck.pptx", junk),
        SourceFile("deck.odp", junk),
        SourceFile("clip.mp4", junk),
        SourceFile("clip.avi", junk),
        SourceFile("clip.mov", junk),
        SourceFile("clip.mkv", junk),
        SourceFile("clip.webm", junk),
        SourceFile("clip.wmv", junk),
        SourceFile("clip.flv", junk),
        SourceFile("clip.3gp", junk),
        SourceFile("clip.mpeg", junk),
        SourceFile("song.mp3", junk),
        SourceFile("song.wav", junk),
        SourceFile("song.aac", junk),
        SourceFile("song.ogg", junk),
        SourceFile("song.flac", junk),
        SourceFile("song.wma", junk),
        SourceFile("song.m4a", junk),
        SourceFile("song.aiff", junk),
        SourceFile("bundle.zip", junk),
        SourceFile("bundle.rar", junk),
        SourceFile("bundle.7z", junk),
        SourceFile("bundle.tar", junk),
        SourceFile("bundle.gz", junk),
        SourceFile("novel.epub", junk),
        SourceFile("novel.mobi", junk),
        SourceFile("photo.jpg", create_image_bytes("JPEG")),
        SourceFile("photo.png", create_image_bytes("PNG")),
        SourceFile("photo.webp", create_image_bytes("WEBP")),
        SourceFile("photo.gif", create_image_bytes("GIF")),
        SourceFile("photo.bmp", create_image_bytes("BMP")),
        SourceFile("photo.tiff", create_image_bytes("TIFF")),
        SourceFile("favicon.ico", create_image_bytes("ICO", size=(16, 16))),
        SourceFile("photo.heic", create_image_bytes("HEIF", size=(64, 64))),
        SourceFile("photo.heif", create_image_bytes("HEIF", size=(64, 64))),
        SourceFile("photo.avif", create_image_bytes("AVIF", size=(64, 64))),
        SourceFile("logo.svg", SAMPLE_SVG),
    ]
    return {detect_file(source).key: source for source in sources}
