"""
Feature file parser
Builds the Feature -> Scenario -> example row tree from feature file text
"""

import itertools
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from cucumber_runner.models.test_tree import CaseNode, SourcePosition, SuiteNode
from cucumber_runner.parser.feature_scanner import EventKind, FeatureTextScanner, ScanEvent
from cucumber_runner.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class _PendingSuite:
    """Suite whose children are still being collected"""
    node: SuiteNode
    children: List[Union['_PendingSuite', CaseNode]] = field(default_factory=list)

    def finalize(self) -> SuiteNode:
        children = [child.finalize() if isinstance(child, _PendingSuite) else child
                    for child in self.children]
        return self.node.with_children(children)


class TestTreeBuilder:
    """Consumes scanner events for one file and builds its node tree"""

    __test__ = False

    def __init__(self, uri: str):
        self.uri = uri
        self._reset()

    def _reset(self):
        self.feature: Optional[_PendingSuite] = None
        self.scenario: Optional[Union[_PendingSuite, CaseNode]] = None
        self.scenario_name: str = ""
        self.scenario_anchor: Optional[SourcePosition] = None
        self.in_examples = False
        self.example_headers: Optional[List[str]] = None
        self.generation = 0
        self._names = Counter()

    def build(self, text: str, generation: int = 0) -> Optional[SuiteNode]:
        """Parse text and return the Feature node, or None without a Feature header"""
        self._reset()
        self.generation = generation

        for event in FeatureTextScanner(text):
            handler = getattr(self, f'_on_{event.kind.value}')
            handler(event)

        if self.feature is None:
            return None
        return self.feature.finalize()

    def _node_id(self, name: str) -> str:
        """Identity is file location + display name, repeats get an occurrence suffix"""
        self._names[name] += 1
        occurrence = self._names[name]
        if occurrence == 1:
            return f"{self.uri}/{name}"
        return f"{self.uri}/{name} [{occurrence}]"

    def _on_feature(self, event: ScanEvent):
        if self.feature is not None:
            logger.debug(f"Ignoring second Feature '{event.name}' in {self.uri}")
            return

        node = SuiteNode(
            id=self._node_id(event.name),
            name=event.name,
            uri=self.uri,
            range=event.range,
            generation=self.generation,
        )
        self.feature = _PendingSuite(node)
        self.scenario = None
        self.in_examples = False
        self.example_headers = None

    def _on_scenario(self, event: ScanEvent):
        self.in_examples = False
        self.example_headers = None

        if self.feature is None:
            self.scenario = None
            return

        if event.is_outline:
            scenario = _PendingSuite(SuiteNode(
                id=self._node_id(event.name),
                name=event.name,
                uri=self.uri,
                range=event.range,
                generation=self.generation,
                is_outline=True,
            ))
        else:
            scenario = CaseNode(
                id=self._node_id(event.name),
                name=event.name,
                uri=self.uri,
                range=event.range,
                anchor=event.range.end,
                generation=self.generation,
                template_name=event.name,
            )

        self.feature.children.append(scenario)
        self.scenario = scenario
        self.scenario_name = event.name
        self.scenario_anchor = event.range.end

    def _on_examples(self, event: ScanEvent):
        self.in_examples = True
        self.example_headers = None

    def _on_table_row(self, event: ScanEvent):
        # Only outlines own example rows
        if not self.in_examples or not isinstance(self.scenario, _PendingSuite):
            return

        if self.example_headers is None:
            self.example_headers = event.cells
            return

        name = substitute_placeholders(self.scenario_name, self.example_headers, event.cells)
        self.scenario.children.append(CaseNode(
            id=self._node_id(name),
            name=name,
            uri=self.uri,
            range=event.range,
            anchor=self.scenario_anchor,
            generation=self.generation,
            template_name=self.scenario_name,
        ))


def substitute_placeholders(template: str, headers: List[str], values: List[str]) -> str:
    """Replace every <header> in template with the value in the same column"""
    name = template
    for header, value in zip(headers, values):
        name = name.replace(f"<{header}>", value)
    return name


@dataclass(frozen=True)
class ParsedFeatureFile:
    uri: str
    root: Optional[SuiteNode]
    generation: int

    @property
    def cases(self) -> List[CaseNode]:
        return list(self.root.cases()) if self.root else []


class FeatureParser:
    """Discover and parse feature files, keeping the latest tree per file"""

    def __init__(self, features: Iterable[str] = ("features/**/*.feature",), base_dir: Union[str, Path] = "."):
        if isinstance(features, str):
            features = [features]
        self.patterns = list(features)
        self.base_dir = Path(base_dir)
        self.files: Dict[str, ParsedFeatureFile] = {}
        self._generations = itertools.count(1)

    def discover(self) -> List[Path]:
        """Find all feature files matching the configured patterns"""
        found = set()
        for pattern in self.patterns:
            if Path(pattern).is_absolute():
                base, relative = Path(pattern).anchor, str(Path(pattern).relative_to(Path(pattern).anchor))
                matches = Path(base).glob(relative)
            else:
                matches = self.base_dir.glob(pattern)
            found.update(path for path in matches if path.is_file())

        logger.debug(f"Discovered {len(found)} feature files for patterns {self.patterns}")
        return sorted(found)

    def parse_features(self, name_filter: Optional[str] = None) -> List[ParsedFeatureFile]:
        """Parse all discovered feature files, optionally keeping only matching scenarios' files"""
        parsed = []

        for feature_file in self.discover():
            result = self.update_from_disk(feature_file)
            if result.root is None:
                continue
            if not result.root.contains_match(name_filter):
                continue
            parsed.append(result)

        return parsed

    def update_from_disk(self, file_path: Union[str, Path]) -> ParsedFeatureFile:
        """Read a feature file and re-parse it"""
        file_path = Path(file_path)
        uri = file_path.resolve().as_uri()
        try:
            content = file_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Error providing tests for {file_path}: {e}")
            content = ''
        return self.update_from_contents(uri, content)

    def update_from_contents(self, uri: str, content: str) -> ParsedFeatureFile:
        """Full re-parse; the previous tree is kept when the text has no Feature header"""
        generation = next(self._generations)
        root = TestTreeBuilder(uri).build(content, generation)

        if root is None:
            previous = self.files.get(uri)
            if previous is not None:
                logger.debug(f"No Feature header in {uri}, keeping previous tree")
                return previous
            result = ParsedFeatureFile(uri, None, generation)
        else:
            result = ParsedFeatureFile(uri, root, generation)
            logger.debug(f"Parsed {uri}: {len(result.cases)} cases (generation {generation})")

        self.files[uri] = result
        return result

    def forget(self, uri: str) -> None:
        self.files.pop(uri, None)

    def is_stale(self, case: CaseNode) -> bool:
        """True once the case's file has been re-parsed after the case was built"""
        current = self.files.get(case.uri)
        return current is None or current.generation != case.generation
