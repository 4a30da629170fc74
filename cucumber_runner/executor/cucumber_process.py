"""
cucumber-js process management
Runs one scenario at a time and collects its console output
"""
import os
import re
import subprocess
import threading
from typing import Callable, List, Optional

from cucumber_runner.core.config_manager import RunnerConfig
from cucumber_runner.utils.logger import setup_logger

logger = setup_logger(__name__)

REGEX_SPECIALS_RE = re.compile(r'([.+*?^$()\[\]{}|\\])')
PLACEHOLDER_RE = re.compile(r'<[^>]*>')

OutputCallback = Callable[[str], None]


def scenario_name_pattern(scenario_name: str) -> str:
    """Anchored --name regex for a scenario, outline placeholders match anything"""
    escaped = REGEX_SPECIALS_RE.sub(r'\\\1', scenario_name)
    return PLACEHOLDER_RE.sub('.*', f'^{escaped}$')


class CucumberRunner:
    """Spawns cucumber-js for a single scenario; at most one process at a time"""

    def __init__(self, config: RunnerConfig):
        self.config = config
        self.process: Optional[subprocess.Popen] = None
        self._lock = threading.RLock()

    def build_command(self, scenario_name: str) -> List[str]:
        return [
            self.config.node_path,
            self.config.cucumber_path,
            *self.config.features,
            '--name', scenario_name_pattern(scenario_name),
            *self.config.cli_options,
        ]

    def describe_command(self, scenario_name: str) -> str:
        """Command line for the log, with env values masked"""
        env = ' '.join(f'{key}=......' for key in self.config.env_variables)
        command = self.build_command(scenario_name)
        name_index = command.index('--name') + 1
        command[name_index] = f'"{command[name_index]}"'
        return f"{env + ' ' if env else ''}{' '.join(command)}"

    def run(self, scenario_name: str, on_output: Optional[OutputCallback] = None) -> List[str]:
        """Run the scenario and return its stdout lines once the process exits"""
        self.kill()

        logger.info(f"Executing command: {self.describe_command(scenario_name)}")
        output: List[str] = []

        try:
            process = subprocess.Popen(
                self.build_command(scenario_name),
                cwd=str(self.config.cwd),
                env={**os.environ, **self.config.env_variables},
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding='utf-8',
                errors='replace',
            )
        except OSError as e:
            logger.error(f"Could not start cucumber: {e}")
            return [f"Could not start cucumber: {e}"]

        with self._lock:
            self.process = process

        stderr_reader = threading.Thread(target=self._drain_stderr, args=(process, on_output), daemon=True)
        stderr_reader.start()

        for line in process.stdout:
            line = line.rstrip('\n')
            logger.debug(f"cucumber: {line}")
            output.append(line)
            if on_output:
                on_output(line)

        process.wait()
        stderr_reader.join()
        process.stdout.close()

        with self._lock:
            if self.process is process:
                self.process = None

        logger.debug(f"cucumber exited with code {process.returncode}")
        return output

    @staticmethod
    def _drain_stderr(process: subprocess.Popen, on_output: Optional[OutputCallback]):
        for line in process.stderr:
            line = line.rstrip('\n')
            logger.debug(f"cucumber stderr: {line}")
            if on_output:
                on_output(line)
        process.stderr.close()

    def kill(self) -> bool:
        """Terminate the running process, if any"""
        with self._lock:
            process = self.process
        if process is None or process.poll() is not None:
            return True

        logger.info("Stopping running cucumber process")
        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
        return True
