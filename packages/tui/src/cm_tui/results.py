"""
Per-line results consumed by the alignment builder.

A LineResult is the bridge between the document/evaluator (external) and the
layout engine. The evaluator decides values and errors; this module only
defines the snapshot type and a value-less provider for documents that have
no evaluator attached.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Sequence


class PreviewMode(Enum):
    """How the preview pane presents calculation results."""
    FULL = "full"          # variable name + value
    MINIMAL = "minimal"    # arrow + value, narrower pane
    HIDDEN = "hidden"      # no preview pane

    def cycle(self) -> "PreviewMode":
        order = (PreviewMode.FULL, PreviewMode.MINIMAL, PreviewMode.HIDDEN)
        return order[(order.index(self) + 1) % len(order)]


@dataclass(frozen=True)
class LineResult:
    line_num: int
    source: str
    is_calc: bool = False
    var_name: str | None = None
    value: str | None = None
    error: str | None = None
    block_id: str = ""
    was_changed: bool = False


ResultsProvider = Callable[[Sequence[str]], "list[LineResult]"]

_ASSIGNMENT_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=(?!=)")
_EXPRESSION_RE = re.compile(r"^\s*\(?\s*-?\d[\d.,_]*\s*(?:[-+*/^%]|$)")


def looks_like_calculation(line: str) -> bool:
    """Cheap shape test: assignments and bare arithmetic count as calculations."""
    if not line.strip() or line.lstrip().startswith("#"):
        return False
    return bool(_ASSIGNMENT_RE.match(line) or _EXPRESSION_RE.match(line))


def assignment_name(line: str) -> str | None:
    m = _ASSIGNMENT_RE.match(line)
    return m.group(1) if m else None


def line_results_from_lines(
    lines: Sequence[str],
    is_calc: Callable[[str], bool] = looks_like_calculation,
) -> list[LineResult]:
    """
    Build value-less results, grouping consecutive lines into calc/text blocks.

    Blank lines stay with the block they follow so that a calculation block
    keeps its trailing spacing, matching how documents are usually split.
    """
    results: list[LineResult] = []
    block_no = 0
    current: bool | None = None

    for idx, line in enumerate(lines):
        calc = is_calc(line)
        if line.strip() == "" and current is not None:
            calc = current
        if calc != current:
            block_no += 1
            current = calc
        results.append(LineResult(
            line_num=idx,
            source=line,
            is_calc=calc,
            var_name=assignment_name(line) if calc else None,
            block_id=f"{'calc' if calc else 'text'}-{block_no}",
        ))
    return results


def iter_blocks(results: Sequence[LineResult]) -> Iterator[list[LineResult]]:
    """Yield runs of consecutive results sharing a block id."""
    i = 0
    while i < len(results):
        block_id = results[i].block_id
        j = i
        while j < len(results) and results[j].block_id == block_id:
            j += 1
        yield list(results[i:j])
        i = j
