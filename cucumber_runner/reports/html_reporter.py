"""HTML report for scenario runs"""
from datetime import datetime
from pathlib import Path
from typing import List, Union

from jinja2 import Template

from cucumber_runner.executor.test_executor import CaseResult, summarize
from cucumber_runner.utils.logger import setup_logger

logger = setup_logger(__name__)

REPORT_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <title>Cucumber Run Report</title>
    <style>
        body { font-family: Arial, sans-serif; margin: 20px; background-color: #f5f5f5; }
        .container { max-width: 1400px; margin: 0 auto; }
        .header { background: #2d3e50; color: white; padding: 30px; border-radius: 8px; margin-bottom: 30px; }
        .header h1 { margin: 0; font-size: 2.2em; }
        .summary { display: flex; gap: 20px; margin: 20px 0; }
        .summary-item { flex: 1; background: white; padding: 20px; border-radius: 8px; text-align: center; }
        .summary-item.passed { background: #d4edda; color: #155724; }
        .summary-item.failed { background: #f8d7da; color: #721c24; }
        .summary-item.errored { background: #fff3cd; color: #856404; }
        .summary-item.skipped { background: #e2e3e5; color: #383d41; }
        .summary-item .number { font-size: 2.5em; font-weight: bold; }
        .scenario { background: white; margin: 15px 0; padding: 15px 20px; border-radius: 8px; }
        .scenario.passed { border-left: 5px solid #28a745; }
        .scenario.failed { border-left: 5px solid #dc3545; }
        .scenario.errored { border-left: 5px solid #ffc107; }
        .scenario.skipped { border-left: 5px solid #6c757d; }
        .timing { color: #6c757d; font-size: 0.9em; float: right; }
        pre { white-space: pre-wrap; word-wrap: break-word; background: #f8f9fa; padding: 10px; border-radius: 3px; }
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>Cucumber Run Report</h1>
            <p>Generated: {{ timestamp }}</p>
        </div>

        <div class="summary">
            {% for outcome in ['passed', 'failed', 'errored', 'skipped'] %}
            <div class="summary-item {{ outcome }}">
                <div class="number">{{ summary[outcome] }}</div>
                <div class="label">{{ outcome | capitalize }}</div>
            </div>
            {% endfor %}
        </div>

        {% for result in results %}
        <div class="scenario {{ result.outcome }}">
            {% if result.elapsed_seconds is not none %}
            <span class="timing">{{ "%.3f"|format(result.elapsed_seconds) }}s</span>
            {% endif %}
            <strong>{{ result.name }}</strong>
            <p>{{ result.uri }}:{{ result.line + 1 }} &mdash; {{ result.outcome }}
            {% if result.steps_total is not none %}({{ result.steps_passed }}/{{ result.steps_total }} steps passed){% endif %}
            {% if result.scenarios_total is not none and result.is_outline %}({{ result.scenarios_passed }}/{{ result.scenarios_total }} examples passed){% endif %}
            </p>
            {% if result.message %}
            <pre>{{ result.message }}</pre>
            {% endif %}
        </div>
        {% endfor %}
    </div>
</body>
</html>
"""


class HTMLReporter:
    """Generate an HTML report of scenario results"""

    def __init__(self, output_dir: Union[str, Path] = "reports"):
        self.output_dir = Path(output_dir)

    def render(self, results: List[CaseResult]) -> str:
        return Template(REPORT_TEMPLATE, autoescape=True).render(
            timestamp=datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
            summary=summarize(results),
            results=[item.to_dict() for item in results],
        )

    def generate_report(self, results: List[CaseResult]) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        report_path = self.output_dir / f"cucumber_report_{datetime.now().strftime('%Y%m%d_%H%M%S')}.html"
        report_path.write_text(self.render(results), encoding='utf-8')
        logger.info(f"HTML report generated: {report_path}")
        return report_path
