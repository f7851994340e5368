"""Ranking configuration loader with validation."""

import hashlib
import time
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from feedrank.config.schemas import RankingConfig
from feedrank.errors import ConfigValidationError


logger = structlog.get_logger()


class RankingConfigLoader:
    """Loads and validates the ranking configuration file.

    A missing path yields the built-in defaults; a present but invalid
    file raises ConfigValidationError with one entry per failing field.
    """

    def __init__(self) -> None:
        """Initialize the loader."""
        self._file_checksum: str | None = None
        self._validation_errors: list[dict[str, str]] = []
        self._validation_duration_ms: float = 0
        self._log = logger.bind(component="config")

    @property
    def file_checksum(self) -> str | None:
        """Get SHA-256 checksum of the loaded file."""
        return self._file_checksum

    @property
    def validation_errors(self) -> list[dict[str, str]]:
        """Get validation errors if any."""
        return self._validation_errors.copy()

    @property
    def validation_duration_ms(self) -> float:
        """Get validation duration in milliseconds."""
        return self._validation_duration_ms

    def load(self, path: Path | None) -> RankingConfig:
        """Load and validate ranking configuration.

        Args:
            path: Path to ranking.yaml, or None for defaults.

        Returns:
            Validated RankingConfig.

        Raises:
            ConfigValidationError: If the file is missing, unparsable or invalid.
        """
        if path is None:
            self._log.info("config_defaults_used")
            return RankingConfig()

        start_time = time.perf_counter()
        self._validation_errors = []
        self._log.info("loading_config_file", file_path=str(path))

        try:
            content_bytes = path.read_bytes()
        except FileNotFoundError as e:
            self._record_error("file", "File not found", "file_not_found", str(path))
            raise ConfigValidationError(self._validation_errors, str(path)) from e

        self._file_checksum = hashlib.sha256(content_bytes).hexdigest()

        try:
            data = yaml.safe_load(content_bytes.decode("utf-8")) or {}
            config = RankingConfig.model_validate(data)
        except yaml.YAMLError as e:
            self._record_error("yaml", str(e), "yaml_error", str(path))
            raise ConfigValidationError(self._validation_errors, str(path)) from e
        except ValidationError as e:
            for err in e.errors():
                self._validation_errors.append(
                    {
                        "loc": ".".join(str(loc) for loc in err["loc"]),
                        "msg": err["msg"],
                        "type": err["type"],
                    }
                )
            self._log.error(
                "config_validation_failed",
                file_path=str(path),
                validation_error_count=len(self._validation_errors),
                errors=self._validation_errors,
            )
            raise ConfigValidationError(self._validation_errors, str(path)) from e

        self._validation_duration_ms = (time.perf_counter() - start_time) * 1000
        self._log.info(
            "config_file_loaded",
            file_path=str(path),
            file_sha256=self._file_checksum,
            config_validation_duration_ms=self._validation_duration_ms,
        )
        return config

    def _record_error(self, loc: str, msg: str, error_type: str, path: str) -> None:
        """Record a non-schema error and log it."""
        self._validation_errors.append({"loc": loc, "msg": msg, "type": error_type})
        self._log.error(
            "config_load_failed",
            file_path=path,
            error_type=error_type,
            error=msg,
        )


def load_ranking_config(path: Path | None = None) -> RankingConfig:
    """Pure function API for loading ranking configuration.

    Args:
        path: Path to ranking.yaml, or None for defaults.

    Returns:
        Validated RankingConfig.
    """
    return RankingConfigLoader().load(path)
