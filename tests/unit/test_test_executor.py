"""Unit tests for the scenario run orchestrator"""
from unittest.mock import Mock

import pytest

from cucumber_runner.executor.cucumber_process import CucumberRunner
from cucumber_runner.executor.test_executor import TestExecutor, describe_tree, summarize
from cucumber_runner.models.result_status import Outcome
from cucumber_runner.parser.feature_parser import FeatureParser

URI = "file:///project/features/shop.feature"

SHOP_FEATURE = """Feature: Shop
  Scenario: Browse catalogue
    Given the catalogue
    When I browse
    Then I see products

  Scenario: Checkout
    Given a cart
    When I pay
    Then I get a receipt

  Scenario Outline: Pay with <method>
    Given I pay with <method>
    Examples:
      | method |
      | visa   |
      | cash   |
"""

PASSED = ["1 scenario (1 passed)", "3 steps (3 passed)", "0m00.500s (executing steps: 0m00.100s)"]
FAILED = [
    "Failures:",
    "1) Scenario: Checkout",
    "   ✔ Given a cart",
    "   ✖ When I pay",
    "       Error: card declined",
    "   - Then I get a receipt",
    "1 scenario (1 failed)",
    "3 steps (1 passed, 1 failed, 1 skipped)",
    "0m00.300s (executing steps: 0m00.100s)",
]
NOT_FOUND = ["0 scenarios", "0 steps", "0m00.000s (executing steps: 0m00.000s)"]
OUTLINE_PASSED = ["2 scenarios (2 passed)", "2 steps (2 passed)", "0m00.200s (executing steps: 0m00.100s)"]


@pytest.fixture
def parser():
    feature_parser = FeatureParser()
    feature_parser.update_from_contents(URI, SHOP_FEATURE)
    return feature_parser


@pytest.fixture
def runner():
    transcripts = {
        "Browse catalogue": PASSED,
        "Checkout": FAILED,
        "Pay with visa": PASSED,
        "Pay with <method>": OUTLINE_PASSED,
    }
    mock_runner = Mock(spec=CucumberRunner)
    mock_runner.run.side_effect = lambda name: transcripts.get(name, NOT_FOUND)
    return mock_runner


def test_collect_cases_in_source_order(parser, runner):
    executor = TestExecutor(runner, parser)
    queue = executor.collect_cases(parser.files.values())

    assert [case.name for case in queue] == ["Browse catalogue", "Checkout", "Pay with visa", "Pay with cash"]


def test_collect_cases_with_filter_and_exclude(parser, runner):
    executor = TestExecutor(runner, parser)
    files = list(parser.files.values())

    assert [c.name for c in executor.collect_cases(files, name_filter="Pay")] == ["Pay with visa", "Pay with cash"]
    assert [c.name for c in executor.collect_cases(files, exclude=[f"{URI}/Checkout"])] == [
        "Browse catalogue", "Pay with visa", "Pay with cash"]
    assert executor.collect_cases(files, exclude=[f"{URI}/Shop"]) == []


def test_aggregate_outlines_queue_template(parser, runner):
    executor = TestExecutor(runner, parser, aggregate_outlines=True)
    queue = executor.collect_cases(parser.files.values())

    assert [case.name for case in queue] == ["Browse catalogue", "Checkout", "Pay with <method>"]
    assert queue[-1].is_outline is True


def test_template_filter_matches_in_both_modes(parser, runner):
    files = list(parser.files.values())

    rows = TestExecutor(runner, parser).collect_cases(files, name_filter="<method>")
    aggregate = TestExecutor(runner, parser, aggregate_outlines=True).collect_cases(files, name_filter="<method>")

    assert [case.name for case in rows] == ["Pay with visa", "Pay with cash"]
    assert [case.name for case in aggregate] == ["Pay with <method>"]


def test_outline_without_rows_matches_on_its_name():
    feature_parser = FeatureParser()
    parsed = feature_parser.update_from_contents(URI, "Feature: Shop\n  Scenario Outline: Refund <order>\n")

    assert parsed.root.contains_match("Refund")
    assert not parsed.root.contains_match("Checkout")
    queue = TestExecutor(Mock(spec=CucumberRunner), feature_parser, aggregate_outlines=True).collect_cases(
        [parsed], name_filter="Refund")
    assert [case.name for case in queue] == ["Refund <order>"]


def test_execute_interprets_each_run(parser, runner):
    results = TestExecutor(runner, parser).execute(parser.files.values())
    outcomes = {item.case.name: item.result.outcome for item in results}

    assert outcomes == {
        "Browse catalogue": Outcome.PASSED,
        "Checkout": Outcome.FAILED,
        "Pay with visa": Outcome.PASSED,
        "Pay with cash": Outcome.ERRORED,
    }
    assert [call.args[0] for call in runner.run.call_args_list] == [
        "Browse catalogue", "Checkout", "Pay with visa", "Pay with cash"]


def test_failed_case_points_at_failing_step(parser, runner):
    results = TestExecutor(runner, parser).execute(parser.files.values(), name_filter="Checkout")
    checkout = results[0]

    assert checkout.result.message == "Error: card declined"
    # header on line 6, one step passed, so the failing step is line 8
    assert checkout.location.line == 8
    assert checkout.output == FAILED


def test_errored_case_points_at_header(parser, runner):
    results = TestExecutor(runner, parser).execute(parser.files.values(), name_filter="cash")
    cash = results[0]

    assert cash.result.outcome is Outcome.ERRORED
    assert "not found" in cash.result.message
    assert cash.location == cash.case.anchor


def test_aggregate_outline_run(parser, runner):
    results = TestExecutor(runner, parser, aggregate_outlines=True).execute(
        parser.files.values(), name_filter="method")

    assert len(results) == 1
    assert results[0].result.outcome is Outcome.PASSED
    assert results[0].result.scenarios_total == 2


def test_cancelled_run_skips_remaining_cases(parser, runner):
    executor = TestExecutor(runner, parser)

    def run_then_cancel(name):
        executor.cancel()
        return PASSED

    runner.run.side_effect = run_then_cancel
    results = executor.execute(parser.files.values())

    assert [item.result.outcome for item in results] == [Outcome.SKIPPED] * 4
    assert runner.run.call_count == 1
    runner.kill.assert_called()


def test_stale_cases_are_skipped(parser, runner):
    executor = TestExecutor(runner, parser)
    queue = executor.collect_cases(parser.files.values())
    parser.update_from_contents(URI, SHOP_FEATURE)

    results = executor.execute_cases(queue)

    assert all(item.result.outcome is Outcome.SKIPPED for item in results)
    runner.run.assert_not_called()


def test_on_result_callback(parser, runner):
    seen = []
    TestExecutor(runner, parser, on_result=seen.append).execute(parser.files.values())

    assert len(seen) == 4


def test_summarize_counts_outcomes(parser, runner):
    results = TestExecutor(runner, parser).execute(parser.files.values())

    assert summarize(results) == {"passed": 2, "failed": 1, "errored": 1, "skipped": 0, "total": 4}


def test_result_to_dict(parser, runner):
    item = TestExecutor(runner, parser).execute(parser.files.values(), name_filter="Checkout")[0]
    data = item.to_dict()

    assert data["name"] == "Checkout"
    assert data["outcome"] == "failed"
    assert data["location"] == {"line": 8, "character": item.case.anchor.character}
    assert data["steps_passed"] == 1


def test_describe_tree(parser):
    lines = describe_tree(parser.files[URI].root)

    assert lines[0] == "Feature: Shop (line 1)"
    assert "  Scenario Outline: Pay with <method> (line 12)" in lines
    assert "    Scenario: Pay with cash (line 17)" in lines
