"""Split a Markdown document into heading-delimited paragraphs."""

from __future__ import annotations

from markdown_proofreader.models import Paragraph

HEADING_MARKER = "#"


def split_paragraphs(text: str) -> list[Paragraph]:
    """Break ``text`` at lines starting with a heading marker.

    A heading line closes the paragraph accumulated so far (if any) and opens
    a new one starting at the heading's line index. Each paragraph's text is
    stripped of surrounding whitespace. A document without headings yields a
    single paragraph starting at line 0.

    Example:
        >>> split_paragraphs("intro\\n# A\\nbody")
        [Paragraph(text='intro', start_line=0), Paragraph(text='# A\\nbody', start_line=1)]
    """
    paragraphs: list[Paragraph] = []
    buffer: list[str] = []
    start_line = 0

    for line_index, line in enumerate(text.split("\n")):
        if line.startswith(HEADING_MARKER) and buffer:
            paragraphs.append(Paragraph(text="\n".join(buffer).strip(), start_line=start_line))
            buffer = []
            start_line = line_index
        buffer.append(line)

    if buffer:
        paragraphs.append(Paragraph(text="\n".join(buffer).strip(), start_line=start_line))

    return paragraphs
