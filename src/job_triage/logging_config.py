"""Logging configuration with optional Google Cloud Logging integration."""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

# Global configuration cache
_logging_config: Optional[Dict] = None


def _load_logging_config() -> Dict:
    """
    Load display settings from config/logging.yaml.

    Returns:
        Dict with logging configuration, or defaults if the file is missing.
    """
    global _logging_config

    if _logging_config is not None:
        return _logging_config

    config_path = Path(__file__).parent.parent.parent / "config" / "logging.yaml"

    if config_path.exists():
        try:
            with open(config_path, "r") as f:
                _logging_config = yaml.safe_load(f) or {}
        except Exception as e:
            print(f"⚠️  Failed to load logging config from {config_path}: {e}", file=sys.stderr)
            _logging_config = {}
    else:
        _logging_config = {}

    _logging_config.setdefault("console", {})
    _logging_config["console"].setdefault("max_company_name_length", 80)
    _logging_config["console"].setdefault("max_job_title_length", 60)
    _logging_config["console"].setdefault("max_label_length", 60)
    _logging_config["console"].setdefault("max_reason_length", 120)

    return _logging_config


def truncate_for_display(value: str, max_length: int) -> Tuple[str, str]:
    """
    Return (full_value, display_value) where display_value is truncated with "...".

    A max_length of 0 or less disables truncation.

    Example:
        >>> truncate_for_display("Very Long Company Name", 10)
        ('Very Long Company Name', 'Very Lo...')
    """
    if not value:
        return "", ""

    full_value = value.strip()
    if max_length <= 0 or len(full_value) <= max_length:
        return full_value, full_value

    if max_length <= 3:
        return full_value, full_value[:max_length]
    return full_value, full_value[: max_length - 3] + "..."


def _display(value: str, setting: str) -> str:
    max_length = _load_logging_config()["console"][setting]
    return truncate_for_display(value, max_length)[1]


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_cloud_logging: bool = False,
) -> None:
    """
    Configure logging with optional Google Cloud Logging integration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path to log file. If None, uses logs/job_triage.log.
        enable_cloud_logging: Enable Google Cloud Logging integration.

    Environment Variables:
        ENABLE_CLOUD_LOGGING: Set to 'true' to enable Cloud Logging.
        LOG_LEVEL: Override log level.
        LOG_FILE: Override log file path.
        ENVIRONMENT: Environment name (staging, production, development).
    """
    if os.getenv("ENABLE_CLOUD_LOGGING", "").lower() == "true":
        enable_cloud_logging = True

    log_level = os.getenv("LOG_LEVEL", log_level).upper()
    log_file = os.getenv("LOG_FILE", log_file or "logs/job_triage.log")
    environment = os.getenv("ENVIRONMENT", "development")

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    handlers = [
        logging.StreamHandler(sys.stderr),
        logging.FileHandler(log_file),
    ]

    labels = {}
    if enable_cloud_logging:
        try:
            import google.cloud.logging
            from google.cloud.logging.handlers import CloudLoggingHandler

            client = google.cloud.logging.Client()
            labels = {"environment": environment, "service": "job-triage"}

            cloud_handler = CloudLoggingHandler(client, name="job-triage", labels=labels)
            cloud_handler.setLevel(getattr(logging, log_level))
            handlers.append(cloud_handler)

        except ImportError:
            print(
                "⚠️  google-cloud-logging not installed. Install with: pip install job-triage[cloud]",
                file=sys.stderr,
            )
            enable_cloud_logging = False

        except Exception as e:
            print(f"⚠️  Failed to initialize Google Cloud Logging: {e}", file=sys.stderr)
            enable_cloud_logging = False

    log_format = f"[{environment.upper()}] %(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, log_level),
        format=log_format,
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured: environment={environment}, level={log_level}, file={log_file}")
    if enable_cloud_logging:
        logger.info(f"Google Cloud Logging enabled with labels: {labels}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


def _with_details(message: str, details: Optional[Dict]) -> str:
    if details:
        detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
        message += f" | {detail_str}"
    return message


class StructuredLogger:
    """
    Helper for logging engine activity with consistent prefixes.

    Job titles, companies and labels are truncated for console readability.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def filter_activity(
        self, job_title: str, company: str, verdict: str, details: Optional[Dict] = None
    ) -> None:
        """
        Log a filter decision.

        Args:
            job_title: Job title
            company: Company name
            verdict: BLOCKED or ALLOWED
            details: Optional details (filter type, reason)
        """
        message = (
            f"[FILTER] {verdict.upper()} - {_display(job_title, 'max_job_title_length')} "
            f"at {_display(company, 'max_company_name_length')}"
        )
        self.logger.info(_with_details(message, details))

    def learning_activity(self, action: str, details: Optional[Dict] = None) -> None:
        """
        Log a learning state change (weight adjusted, pattern recorded, reset).

        Args:
            action: What happened
            details: Optional details (category, delta, reason)
        """
        if details and "reason" in details:
            details = {**details, "reason": _display(str(details["reason"]), "max_reason_length")}
        self.logger.info(_with_details(f"[LEARNING] {action}", details))

    def mapping_activity(
        self, label: str, key: str, tier: str, confidence: float, details: Optional[Dict] = None
    ) -> None:
        """
        Log a label resolution.

        Args:
            label: Form label
            key: Canonical key it resolved to
            tier: heuristic, cache or fallback
            confidence: Resolution confidence
        """
        message = (
            f"[MAPPING:{tier.upper()}] '{_display(label, 'max_label_length')}' -> {key} "
            f"({confidence:.2f})"
        )
        self.logger.debug(_with_details(message, details))

    def database_activity(
        self, operation: str, collection: str, status: str, details: Optional[Dict] = None
    ) -> None:
        """
        Log database operations.

        Args:
            operation: Database operation (create, update, delete, query)
            collection: Firestore collection name
            status: Operation status
            details: Optional additional details
        """
        message = f"[DB:{operation.upper()}] {collection} - {status}"
        if status.lower() in ["failed", "error"]:
            self.logger.error(_with_details(message, details))
        else:
            self.logger.info(_with_details(message, details))


def get_structured_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(logging.getLogger(name))
