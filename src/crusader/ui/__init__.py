from crusader.ui.report import report_error, report_results
from crusader.ui.status import StatusSink

__all__ = ["StatusSink", "report_error", "report_results"]
