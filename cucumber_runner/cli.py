"""
cucumber-runner - discover Cucumber scenarios and run them one at a time
"""

import logging
import signal
import sys
from pathlib import Path

import click
from colorama import Fore, Style

from cucumber_runner import __version__
from cucumber_runner.core.config_manager import ConfigError, ConfigManager, RunnerConfig
from cucumber_runner.executor.cucumber_process import CucumberRunner
from cucumber_runner.executor.test_executor import CaseResult, TestExecutor, describe_tree, summarize
from cucumber_runner.models.result_status import Outcome
from cucumber_runner.parser.feature_parser import FeatureParser
from cucumber_runner.reports.html_reporter import HTMLReporter
from cucumber_runner.reports.json_reporter import JSONReporter
from cucumber_runner.utils.logger import set_level, setup_logger

logger = setup_logger(__name__)

OUTCOME_COLORS = {
    Outcome.PASSED: Fore.GREEN,
    Outcome.FAILED: Fore.RED,
    Outcome.ERRORED: Fore.YELLOW,
    Outcome.SKIPPED: Fore.CYAN,
}


def _print_result(item: CaseResult):
    result = item.result
    color = OUTCOME_COLORS[result.outcome]
    timing = f" ({result.elapsed_seconds:.3f}s)" if result.elapsed_seconds is not None else ""
    click.echo(f"{color}{result.outcome.value.upper():8}{Style.RESET_ALL} {item.case.name}{timing}")
    if result.message and result.is_problem:
        location = f"line {item.location.line + 1}: " if item.location else ""
        for line in f"{location}{result.message}".splitlines():
            click.echo(f"         {line}")


@click.command()
@click.option('--config', '-c', default='config/config.yaml', help='Path to config file')
@click.option('--env', '-e', default=None, help='Environment overlay to apply (config/environments/<env>.yaml)')
@click.option('--features', '-f', multiple=True, help='Feature file glob pattern (overrides config)')
@click.option('--name', '-n', default=None, help='Only run scenarios whose name contains this text')
@click.option('--list', 'list_only', is_flag=True, help='Print the discovered scenario tree and exit')
@click.option('--aggregate-outlines', is_flag=True, default=None,
              help='Run each Scenario Outline once for all its examples')
@click.option('--report', '-r', default='none', type=click.Choice(['html', 'json', 'both', 'none']),
              help='Report format')
@click.option('--verbose', '-v', is_flag=True, help='Show cucumber output and debug logging')
@click.version_option(__version__)
def main(config, env, features, name, list_only, aggregate_outlines, report, verbose):
    """
    Run Cucumber scenarios one at a time and report each result

    Examples:
        # List every scenario found by the configured patterns
        cucumber-runner --list

        # Run scenarios containing "login", one cucumber-js process each
        cucumber-runner --name login --report html
    """
    if verbose:
        set_level(logging.DEBUG)

    try:
        config_manager = ConfigManager(config, env)
        config_data = config_manager.load_config()
        runner_config = RunnerConfig.from_config(config_data, base_dir=Path.cwd())
    except (ConfigError, OSError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    if features:
        runner_config.features = list(features)
    if aggregate_outlines is not None:
        runner_config.aggregate_outlines = aggregate_outlines

    feature_parser = FeatureParser(runner_config.features, base_dir=runner_config.cwd)
    parsed_files = feature_parser.parse_features(name)

    if not parsed_files:
        logger.warning("No test scenarios found matching the criteria")
        return

    logger.info(f"Found {len(parsed_files)} feature files")

    if list_only:
        for parsed in parsed_files:
            click.echo(parsed.uri)
            for line in describe_tree(parsed.root, indent=1):
                click.echo(line)
        return

    executor = TestExecutor(
        CucumberRunner(runner_config),
        feature_parser=feature_parser,
        aggregate_outlines=runner_config.aggregate_outlines,
        on_result=_print_result,
    )

    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: executor.cancel())
    try:
        results = executor.execute(parsed_files, name_filter=name)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if report in ('html', 'both'):
        HTMLReporter().generate_report(results)
    if report in ('json', 'both'):
        JSONReporter().generate_report(results)

    counts = summarize(results)
    click.echo(
        f"\n{counts['total']} scenarios: {counts['passed']} passed, {counts['failed']} failed, "
        f"{counts['errored']} errored, {counts['skipped']} skipped"
    )

    if counts['failed'] or counts['errored']:
        logger.error(f"Tests completed with {counts['failed'] + counts['errored']} failures")
        sys.exit(1)

    logger.info("All tests passed successfully!")


if __name__ == '__main__':
    main()
