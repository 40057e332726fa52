"""Custom filters for uvicorn access logging."""

import logging

from shopchat.settings import app_settings


class ExcludeMonitoringFilter(logging.Filter):
    """
    Logging filter to exclude monitoring endpoint requests from access logs.

    Health checks and Prometheus scraping would otherwise flood the access
    log. The excluded paths are configurable via the LOG_EXCLUDED_PATHS
    setting.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        return not any(
            path in message for path in app_settings.LOG_EXCLUDED_PATHS
        )
