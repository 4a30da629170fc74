"""JSON report for scenario runs"""
import json
from datetime import datetime
from pathlib import Path
from typing import List, Union

from cucumber_runner.executor.test_executor import CaseResult, summarize
from cucumber_runner.utils.logger import setup_logger

logger = setup_logger(__name__)


class JSONReporter:
    def __init__(self, output_dir: Union[str, Path] = "reports"):
        self.output_dir = Path(output_dir)

    def generate_report(self, results: List[CaseResult]) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        report_path = self.output_dir / f"cucumber_report_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"

        with open(report_path, 'w', encoding='utf-8') as f:
            json.dump({
                'generated': datetime.now().isoformat(),
                'summary': summarize(results),
                'results': [item.to_dict() for item in results],
            }, f, indent=2, ensure_ascii=False)

        logger.info(f"JSON report generated: {report_path}")
        return report_path
