"""
Line classifier for feature files
Recognizes Feature, Scenario, Scenario Outline, Examples and table row lines
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List

from cucumber_runner.models.test_tree import SourceRange

FEATURE_RE = re.compile(r'^\s*Feature:\s*(.+)$')
SCENARIO_RE = re.compile(r'^\s*(Scenario(?: Outline)?):\s*(.+)$')
EXAMPLES_RE = re.compile(r'^\s*Examples:\s*(.*)$')
TABLE_ROW_RE = re.compile(r'^\s*\|(.*)\|\s*$')


class EventKind(Enum):
    FEATURE = "feature"
    SCENARIO = "scenario"
    EXAMPLES = "examples"
    TABLE_ROW = "table_row"


@dataclass(frozen=True)
class ScanEvent:
    kind: EventKind
    line_number: int
    range: SourceRange
    name: str = ""
    is_outline: bool = False
    cells: List[str] = field(default_factory=list)


class FeatureTextScanner:
    """
    Emits one ScanEvent per recognized line, in line order.
    Unrecognized lines are skipped; iterating again restarts the scan.
    """

    def __init__(self, text: str):
        self.text = text

    def __iter__(self) -> Iterator[ScanEvent]:
        return self.scan()

    def scan(self) -> Iterator[ScanEvent]:
        in_examples = False

        for line_number, raw_line in enumerate(self.text.split('\n')):
            line = raw_line.rstrip('\r')
            line_range = SourceRange.for_line(line_number, line)

            match = FEATURE_RE.match(line)
            if match:
                in_examples = False
                yield ScanEvent(EventKind.FEATURE, line_number, line_range, name=match.group(1).strip())
                continue

            match = SCENARIO_RE.match(line)
            if match:
                in_examples = False
                keyword, name = match.groups()
                yield ScanEvent(EventKind.SCENARIO, line_number, line_range,
                                name=name.strip(), is_outline='Outline' in keyword)
                continue

            if EXAMPLES_RE.match(line):
                in_examples = True
                yield ScanEvent(EventKind.EXAMPLES, line_number, line_range)
                continue

            if in_examples:
                match = TABLE_ROW_RE.match(line)
                if match:
                    cells = [cell.strip() for cell in match.group(1).split('|')]
                    yield ScanEvent(EventKind.TABLE_ROW, line_number, line_range, cells=cells)
