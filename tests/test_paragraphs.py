from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from markdown_proofreader.models import Paragraph
from markdown_proofreader.pipeline.paragraphs import split_paragraphs


def test_document_without_headings_is_one_paragraph() -> None:
    text = "最初の文です。\n次の文です。\n\n最後の文です。"

    paragraphs = split_paragraphs(text)

    assert paragraphs == [Paragraph(text=text, start_line=0)]


def test_headings_open_new_paragraphs_at_their_line() -> None:
    text = "intro line\n# First\nbody one\n## Second\nbody two"

    paragraphs = split_paragraphs(text)

    assert paragraphs == [
        Paragraph(text="intro line", start_line=0),
        Paragraph(text="# First\nbody one", start_line=1),
        Paragraph(text="## Second\nbody two", start_line=3),
    ]


def test_leading_heading_does_not_create_empty_paragraph() -> None:
    text = "# Title\nThis is a test.  It has two sentences."

    paragraphs = split_paragraphs(text)

    assert paragraphs == [Paragraph(text=text, start_line=0)]


def test_paragraph_text_is_trimmed() -> None:
    text = "body\n\n\n# Next\ncontent\n\n"

    paragraphs = split_paragraphs(text)

    assert [p.text for p in paragraphs] == ["body", "# Next\ncontent"]
    assert [p.start_line for p in paragraphs] == [0, 3]


def test_blank_lines_before_first_heading_form_an_empty_paragraph() -> None:
    paragraphs = split_paragraphs("\n\n# Heading\ntext")

    assert paragraphs[0] == Paragraph(text="", start_line=0)
    assert paragraphs[1] == Paragraph(text="# Heading\ntext", start_line=2)


def test_empty_document_yields_single_empty_paragraph() -> None:
    assert split_paragraphs("") == [Paragraph(text="", start_line=0)]


def test_indented_hash_is_not_a_heading() -> None:
    text = "code:\n    # not a heading\nend"

    assert len(split_paragraphs(text)) == 1


def test_concatenated_paragraphs_reproduce_document() -> None:
    text = "序文。\n# 見出し1\n本文1。\n# 見出し2\n本文2。"

    paragraphs = split_paragraphs(text)

    assert "\n".join(p.text for p in paragraphs) == text
