"""
Entry point for running the gateway under uvicorn.

Monitoring endpoints are filtered out of the access log.
"""

import copy

import uvicorn
from uvicorn.config import LOGGING_CONFIG


def build_log_config() -> dict:
    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config.setdefault("filters", {})["exclude_monitoring"] = {
        "()": "shopchat.uvicorn_filters.ExcludeMonitoringFilter"
    }
    log_config["handlers"]["access"]["filters"] = ["exclude_monitoring"]
    return log_config


if __name__ == "__main__":
    uvicorn.run(
        "shopchat:application",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_config=build_log_config(),
    )
