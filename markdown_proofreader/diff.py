"""Character-level diff used to display a correction against its original.

Alignment is a classic longest-common-subsequence table; ties prefer an
insertion over a deletion while walking back from the end of both strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

DiffType = Literal["equal", "insert", "delete"]


@dataclass
class DiffPart:
    type: DiffType
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "value": self.value}


def compute_diff(original: str, corrected: str) -> list[DiffPart]:
    """Return merged diff runs turning ``original`` into ``corrected``.

    Example:
        >>> compute_diff("cat", "cart")
        [DiffPart(type='equal', value='ca'), DiffPart(type='insert', value='r'), DiffPart(type='equal', value='t')]
    """
    m, n = len(original), len(corrected)
    lcs = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if original[i - 1] == corrected[j - 1]:
                lcs[i][j] = lcs[i - 1][j - 1] + 1
            else:
                lcs[i][j] = max(lcs[i - 1][j], lcs[i][j - 1])

    # Walk back from the end; parts come out reversed
    parts: list[DiffPart] = []
    i, j = m, n
    while i > 0 or j > 0:
        if i > 0 and j > 0 and original[i - 1] == corrected[j - 1]:
            parts.append(DiffPart("equal", original[i - 1]))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or lcs[i][j - 1] >= lcs[i - 1][j]):
            parts.append(DiffPart("insert", corrected[j - 1]))
            j -= 1
        else:
            parts.append(DiffPart("delete", original[i - 1]))
            i -= 1
    parts.reverse()

    return merge_runs(parts)


def merge_runs(parts: list[DiffPart]) -> list[DiffPart]:
    """Collapse adjacent parts of the same type into one."""
    merged: list[DiffPart] = []
    for part in parts:
        if merged and merged[-1].type == part.type:
            merged[-1].value += part.value
        else:
            merged.append(DiffPart(part.type, part.value))
    return merged


def format_diff_markdown(original: str, corrected: str) -> str:
    """Render the diff inline: insertions bold, deletions bold struck-through."""
    rendered: list[str] = []
    for part in compute_diff(original, corrected):
        if part.type == "equal":
            rendered.append(part.value)
        elif part.type == "insert":
            rendered.append(f" **{part.value}** ")
        else:
            rendered.append(f" **~~{part.value}~~** ")
    return "".join(rendered)
