"""
Run transcript interpreter
Classifies the console output of one cucumber-js run as passed, failed, errored or skipped
"""

import re
from enum import Enum
from typing import Dict, Iterable, List, Optional

from cucumber_runner.models.result_status import Outcome, ResultStatus
from cucumber_runner.utils.helpers import strip_terminal_codes
from cucumber_runner.utils.logger import setup_logger

logger = setup_logger(__name__)

SECTION_MARKERS = ('Failures:', 'Warnings:')

# "1 scenario (1 passed)", "0 scenarios", "3 scenarios: 2 passed, 1 failed, 0 skipped"
SCENARIO_COUNT_RE = re.compile(
    r'^(\d+) scenarios?\b(?:\s*\(([^)]*)\)|:\s*((?:\d+ [a-z]+(?:,\s*)?)+))?')
STEP_COUNT_RE = re.compile(
    r'(?:^|\s)(\d+) steps?\b(?:\s*\(([^)]*)\)|:\s*((?:\d+ [a-z]+(?:,\s*)?)+))?', re.MULTILINE)
DURATION_RE = re.compile(r'(\d+)m(\d+(?:\.\d+)?)s \(executing steps: (\d+)m(\d+(?:\.\d+)?)s\)')
COUNT_RE = re.compile(r'(\d+) ([a-z]+)')

FAILED_STEP_RE = re.compile(r'^\s*[✖×?] ')
NEXT_STEP_RE = re.compile(r'^\s*[-✔√?✖×] (?:Given|When|Then|And|But|Before|After)\b')
NUMBERED_FAILURE_RE = re.compile(r'^\s*\d+\) Scenario')
# Only a count with its breakdown ends a failure block; "2 scenarios use this step" does not
SUMMARY_OPENING_RE = re.compile(r'^(?:\d+ scenarios?\s*\([^)]*\)|\d+ scenarios?:\s*\d+ [a-z]+|0 scenarios\s*$)')

UNKNOWN_ERROR = 'Unknown error! Please check logs for more information'


class TranscriptState(Enum):
    IDLE = "idle"
    FAILURE_CAPTURE = "failure_capture"
    SUMMARY = "summary"
    DONE = "done"


def _parse_counts(text: Optional[str]) -> Dict[str, int]:
    counts = {}
    for number, word in COUNT_RE.findall(text or ''):
        counts[word] = counts.get(word, 0) + int(number)
    return counts


class TranscriptInterpreter:
    """
    Single pass state machine over the transcript of one scenario run.

    IDLE waits for a Failures:/Warnings: marker or the start of the summary
    block. FAILURE_CAPTURE collects the first failing step's message.
    SUMMARY collects the scenario, step and duration lines; once the
    duration line arrives the state is DONE and later output is ignored.
    """

    def __init__(self, scenario_name: str, is_outline: bool = False):
        self.scenario_name = scenario_name
        self.is_outline = is_outline
        self.state = TranscriptState.IDLE
        self.failure_message: Optional[str] = None
        self._failure_lines: Optional[List[str]] = None
        self._summary_lines: List[str] = []
        self._summary: Optional[str] = None
        self._partial = ''

    def feed(self, chunk: str) -> None:
        """
        Accept raw output as it arrives.
        A line is only read once its newline arrives; the unterminated
        tail is held back until the next chunk or finish().
        """
        *lines, self._partial = (self._partial + chunk).split('\n')
        for line in lines:
            self._feed_line(line)

    def feed_line(self, text: str) -> None:
        """Accept one or more complete lines; a single trailing newline is ignored"""
        if text.endswith('\n'):
            text = text[:-1]
        for line in text.split('\n'):
            self._feed_line(line)

    def _feed_line(self, line: str) -> None:
        line = strip_terminal_codes(line).rstrip('\r')
        if self.state is TranscriptState.IDLE:
            self._idle(line)
        elif self.state is TranscriptState.FAILURE_CAPTURE:
            self._capture_failure(line)
        elif self.state is TranscriptState.SUMMARY:
            self._collect_summary(line)

    def _idle(self, line: str) -> None:
        stripped = line.strip()

        if stripped in SECTION_MARKERS:
            self._failure_lines = None
            self.state = TranscriptState.FAILURE_CAPTURE
        elif SCENARIO_COUNT_RE.match(stripped):
            self._summary_lines = [stripped]
            self.state = TranscriptState.SUMMARY
            if DURATION_RE.search(stripped):
                self._end_summary()
        elif DURATION_RE.search(stripped):
            # Duration without a scenario count
            self._summary_lines = [stripped]
            self._end_summary()

    def _capture_failure(self, line: str) -> None:
        if SUMMARY_OPENING_RE.match(line.strip()):
            self._end_failure()
            self._idle(line)
            return

        if self._failure_lines is None:
            if FAILED_STEP_RE.match(line):
                self._failure_lines = []
            return

        if NEXT_STEP_RE.match(line) or NUMBERED_FAILURE_RE.match(line):
            self._end_failure()
            return

        self._failure_lines.append(line.strip())

    def _end_failure(self) -> None:
        if self.failure_message is None and self._failure_lines:
            message = '\n'.join(self._failure_lines).strip()
            if message:
                self.failure_message = message
        self._failure_lines = None
        self.state = TranscriptState.IDLE

    def _collect_summary(self, line: str) -> None:
        stripped = line.strip()

        if DURATION_RE.search(stripped):
            self._summary_lines.append(stripped)
            self._end_summary()
        elif STEP_COUNT_RE.match(stripped) and len(self._summary_lines) < 2:
            self._summary_lines.append(stripped)
        else:
            # Not a summary block after all; re-read this line as ordinary output
            logger.debug(f"Discarding incomplete summary candidate: {self._summary_lines}")
            self._summary_lines = []
            self.state = TranscriptState.IDLE
            self._idle(line)

    def _end_summary(self) -> None:
        self._summary = '\n'.join(self._summary_lines)
        self.state = TranscriptState.DONE

    def finish(self) -> ResultStatus:
        """Result for everything fed so far; never raises"""
        if self._partial:
            self._feed_line(self._partial)
            self._partial = ''

        if self.state is TranscriptState.FAILURE_CAPTURE:
            self._end_failure()
        elif self.state is TranscriptState.SUMMARY:
            # Output ended before the duration line
            self._end_summary()

        if self._summary is not None:
            return self._interpret_summary(self._summary)

        if self.failure_message:
            return ResultStatus(Outcome.FAILED, message=self.failure_message)

        return ResultStatus.errored(UNKNOWN_ERROR)

    def _interpret_summary(self, summary: str) -> ResultStatus:
        elapsed = None
        duration = DURATION_RE.search(summary)
        if duration:
            elapsed = int(duration.group(1)) * 60 + float(duration.group(2))

        scenario_match = SCENARIO_COUNT_RE.match(summary)
        if not scenario_match:
            return ResultStatus.errored(
                self.failure_message or f'Unable to read the run summary for "{self.scenario_name}"',
                elapsed_seconds=elapsed)

        scenarios_total = int(scenario_match.group(1))
        scenario_counts = _parse_counts(scenario_match.group(2) or scenario_match.group(3))
        scenarios_passed = scenario_counts.get('passed', 0)

        steps_total = steps_passed = None
        step_match = STEP_COUNT_RE.search(summary, scenario_match.end())
        if step_match:
            steps_total = int(step_match.group(1))
            steps_passed = _parse_counts(step_match.group(2) or step_match.group(3)).get('passed', 0)

        details = dict(
            elapsed_seconds=elapsed,
            steps_passed=steps_passed,
            steps_total=steps_total,
            scenarios_passed=scenarios_passed,
            scenarios_total=scenarios_total,
        )

        if scenarios_total == 0:
            return ResultStatus.errored(
                f'Scenario with name "Scenario: {self.scenario_name}" not found', **details)

        if scenarios_total > 1 and not self.is_outline:
            return ResultStatus.errored(
                f'Found multiple scenarios with name "Scenario: {self.scenario_name}"', **details)

        if scenarios_total > 1:
            return self._outline_result(scenarios_total, scenario_counts, details)

        return self._single_result(scenario_counts, details)

    def _outline_result(self, total: int, counts: Dict[str, int], details: Dict) -> ResultStatus:
        if counts.get('passed', 0) == total:
            return ResultStatus(Outcome.PASSED, **details)
        if counts.get('skipped', 0) == total:
            return ResultStatus(Outcome.SKIPPED, **details)

        message = (f'Scenario outline "{self.scenario_name}" failed: '
                   f'{total - counts.get("passed", 0)} out of {total} examples did not pass')
        if self.failure_message:
            message = f'{message}\n\n{self.failure_message}'
        return ResultStatus(Outcome.FAILED, message=message, **details)

    def _single_result(self, counts: Dict[str, int], details: Dict) -> ResultStatus:
        status = next((word for word, number in counts.items() if number == 1), None)

        if status == 'passed':
            return ResultStatus(Outcome.PASSED, **details)
        if status == 'skipped':
            return ResultStatus(Outcome.SKIPPED, message=self.failure_message, **details)
        if status == 'failed':
            return ResultStatus(Outcome.FAILED, message=self.failure_message or self._steps_failed_message(details),
                                **details)
        if status in ('undefined', 'ambiguous', 'pending'):
            message = self.failure_message or f'Scenario "{self.scenario_name}" has {status} steps'
            return ResultStatus(Outcome.FAILED, message=message, **details)

        return ResultStatus.errored(self.failure_message or UNKNOWN_ERROR, **details)

    @staticmethod
    def _steps_failed_message(details: Dict) -> str:
        total = details['steps_total'] or 0
        passed = details['steps_passed'] or 0
        return f'{total - passed} out of {total} steps failed'


def interpret_transcript(lines: Iterable[str], scenario_name: str, is_outline: bool = False) -> ResultStatus:
    """Interpret a complete transcript in one call"""
    interpreter = TranscriptInterpreter(scenario_name, is_outline)
    for line in lines:
        interpreter.feed_line(line)
    return interpreter.finish()
