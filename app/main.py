"""
HTTP entry point for the Ledger Service

Run with:
    uvicorn app.main:app --host 0.0.0.0 --port 8000

Startup reports which settings groups are configured, so a missing
secret or spreadsheet id shows up in the log before the first request.
"""

import structlog
import uvicorn

from ledger_service.api import create_app
from ledger_service.audit import configure_logging
from ledger_service.config import get_settings, validate_all_settings


configure_logging(debug=get_settings().app.debug_mode)
logger = structlog.get_logger("ledger_service.main")


def _report_configuration() -> None:
    status = validate_all_settings()
    for name in ("auth", "rate_limit", "redis", "google_sheets", "app"):
        if status.get(name, False):
            logger.info("settings_loaded", group=name)
        else:
            logger.warning(
                "settings_missing",
                group=name,
                error=status.get(f"{name}_error", "Not configured"),
            )


_report_configuration()
app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
