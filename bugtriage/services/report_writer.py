"""
Report Writer
=============
Renders ReportData into the static HTML triage report (jinja2) and,
optionally, a JSON dump of the same data.
"""
import os
import json
import logging
from typing import Optional

import jinja2

from bugtriage.models.result import ReportData

logger = logging.getLogger(__name__)

module_path = os.path.dirname(os.path.realpath(__file__))
TEMPLATES_DIR = os.path.normpath(os.path.join(module_path, os.pardir, "templates"))
REPORT_TEMPLATE = "report.html.j2"
GENERATED_FORMAT = "%Y-%m-%d %H:%M UTC"


def initialize_jinja_env(templates_dir: str = TEMPLATES_DIR) -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(templates_dir),
        autoescape=jinja2.select_autoescape(["html", "j2"]),
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        lstrip_blocks=True,
        trim_blocks=True,
    )


class ReportWriter:

    def __init__(self, jinja_env: Optional[jinja2.Environment] = None) -> None:
        self.jinja_env = jinja_env or initialize_jinja_env()

    def render_html(self, data: ReportData) -> str:
        template = self.jinja_env.get_template(REPORT_TEMPLATE)
        return template.render(
            intermittents=data.intermittents,
            permas=data.permas,
            generated=data.generated.strftime(GENERATED_FORMAT),
        )

    def write_html(self, data: ReportData, output_path: str) -> str:
        """Render and write the report; returns the absolute path written."""
        html = self.render_html(data)
        abs_output = os.path.abspath(output_path)
        logger.info("Writing HTML report to %s", abs_output)
        with open(abs_output, "w", encoding="utf-8") as f:
            f.write(html)
        return abs_output

    @staticmethod
    def write_json(data: ReportData, output_path: str) -> str:
        abs_output = os.path.abspath(output_path)
        logger.info("Writing JSON report to %s", abs_output)
        with open(abs_output, "w", encoding="utf-8") as f:
            json.dump(data.model_dump(mode="json"), f, indent=2)
        return abs_output
