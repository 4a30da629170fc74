"""Unit tests for the cucumber-js process wrapper"""
import io
import re
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from cucumber_runner.core.config_manager import RunnerConfig
from cucumber_runner.executor.cucumber_process import CucumberRunner, scenario_name_pattern


def make_config(**overrides):
    values = dict(
        features=["features/**/*.feature"],
        cli_options=["--format", "progress"],
        cucumber_path="node_modules/@cucumber/cucumber/bin/cucumber.js",
        env_variables={"API_TOKEN": "hunter2"},
        cwd=Path("/project"),
    )
    values.update(overrides)
    return RunnerConfig(**values)


def fake_process(stdout="", stderr=""):
    process = MagicMock()
    process.stdout = io.StringIO(stdout)
    process.stderr = io.StringIO(stderr)
    process.wait.return_value = 0
    process.returncode = 0
    return process


def test_name_pattern_is_anchored():
    assert scenario_name_pattern("Login as admin") == "^Login as admin$"


def test_name_pattern_escapes_regex_characters():
    pattern = scenario_name_pattern("Price is $5 (approx.) [a|b]")

    assert pattern == r"^Price is \$5 \(approx\.\) \[a\|b\]$"
    assert re.match(pattern, "Price is $5 (approx.) [a|b]")


def test_name_pattern_wildcards_placeholders():
    pattern = scenario_name_pattern("Login as <user> with <password>")

    assert pattern == "^Login as .* with .*$"
    assert re.match(pattern, "Login as admin with secret")


def test_build_command():
    runner = CucumberRunner(make_config())

    assert runner.build_command("Login") == [
        "node",
        "node_modules/@cucumber/cucumber/bin/cucumber.js",
        "features/**/*.feature",
        "--name", "^Login$",
        "--format", "progress",
    ]


def test_describe_command_masks_env_values():
    description = CucumberRunner(make_config()).describe_command("Login")

    assert "API_TOKEN=......" in description
    assert "hunter2" not in description
    assert '--name "^Login$"' in description


@patch("cucumber_runner.executor.cucumber_process.subprocess.Popen")
def test_run_collects_stdout_lines(popen):
    popen.return_value = fake_process(stdout="line one\nline two\n", stderr="a warning\n")
    seen = []

    output = CucumberRunner(make_config()).run("Login", on_output=seen.append)

    assert output == ["line one", "line two"]
    assert sorted(seen) == ["a warning", "line one", "line two"]

    _, kwargs = popen.call_args
    assert kwargs["cwd"] == str(Path("/project"))
    assert kwargs["env"]["API_TOKEN"] == "hunter2"
    assert kwargs["stdout"] == subprocess.PIPE


@patch("cucumber_runner.executor.cucumber_process.subprocess.Popen")
def test_run_reports_launch_failure_in_transcript(popen):
    popen.side_effect = FileNotFoundError("node")

    output = CucumberRunner(make_config()).run("Login")

    assert len(output) == 1
    assert "Could not start cucumber" in output[0]


def test_kill_terminates_running_process():
    runner = CucumberRunner(make_config())
    process = MagicMock()
    process.poll.return_value = None
    runner.process = process

    assert runner.kill() is True
    process.terminate.assert_called_once()


def test_kill_without_process():
    assert CucumberRunner(make_config()).kill() is True


def test_kill_while_same_thread_holds_lock():
    runner = CucumberRunner(make_config())
    process = MagicMock()
    process.poll.return_value = None
    runner.process = process

    # SIGINT handlers run on the main thread, which may be inside run()
    with runner._lock:
        assert runner._lock.acquire(timeout=1)
        runner._lock.release()
        assert runner.kill() is True

    process.terminate.assert_called_once()
