"""
Report Module.

Renders evaluation reports and exports them as JSON or PDF.
"""

from anatomy_guru.report.exporter import (
    export_pdf,
    from_json,
    json_filename,
    print_title,
    save_json,
    to_json,
)
from anatomy_guru.report.renderer import (
    ReportRenderer,
    calculate_total,
    classify_question,
    render_markup,
)

__all__ = [
    "ReportRenderer",
    "calculate_total",
    "classify_question",
    "export_pdf",
    "from_json",
    "json_filename",
    "print_title",
    "render_markup",
    "save_json",
    "to_json",
]
