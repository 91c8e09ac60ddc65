from .printing import format_buffer, format_latex_table, print_buffer, print_histogram, print_latex_table
from .report import describe_image, histogram_report, save_run_report, stamp_report_payload

__all__ = [
    "describe_image",
    "format_buffer",
    "format_latex_table",
    "histogram_report",
    "print_buffer",
    "print_histogram",
    "print_latex_table",
    "save_run_report",
    "stamp_report_payload",
]
