# pcb_quote/services/config_loader.py

import yaml
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List

from pcb_quote.core.config import settings
from pcb_quote.core.exceptions import ConfigurationError
from pcb_quote.services.price_tables import HOLIDAYS, TABLE_VERSION, WORKING_WEEKENDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """Process-wide engine settings, loaded once at start-up."""
    order_cutoff_hour: int = settings.ORDER_CUTOFF_HOUR
    holidays: FrozenSet[date] = field(default_factory=lambda: HOLIDAYS)
    working_weekends: FrozenSet[date] = field(default_factory=lambda: WORKING_WEEKENDS)
    table_version: str = TABLE_VERSION


DEFAULT_ENGINE_CONFIG = EngineConfig()


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _expand_dates(entries: Iterable[Any]) -> FrozenSet[date]:
    """Accept single dates and inclusive [start, end] ranges."""
    days = set()
    for entry in entries or []:
        if isinstance(entry, (list, tuple)):
            start, end = (_parse_date(v) for v in entry)
            current = start
            while current <= end:
                days.add(current)
                current += timedelta(days=1)
        else:
            days.add(_parse_date(entry))
    return frozenset(days)


class ConfigLoader:
    """Loads the engine configuration from a YAML file."""

    def __init__(self, config_path: str = None):
        self.config_path = Path(config_path or settings.ENGINE_CONFIG_PATH)
        logger.info(f"ConfigLoader initialized with config file: {self.config_path}")

    def read_raw(self) -> Dict[str, Any]:
        """Raw YAML mapping, empty when the file does not exist."""
        if not self.config_path.exists():
            logger.warning(f"Engine config file not found: {self.config_path}")
            return {}
        with open(self.config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data or {}

    def load_engine_config(self, strict: bool = False) -> EngineConfig:
        """
        Load the engine configuration.

        Args:
            strict: Raise ConfigurationError instead of falling back when the file is unusable

        Returns:
            EngineConfig, the built-in defaults when the file is missing or unusable
        """
        try:
            config_data = self.read_raw()
            if not config_data:
                return DEFAULT_ENGINE_CONFIG

            warnings = self.validate_config(config_data)
            if warnings:
                if strict:
                    raise ConfigurationError(
                        "Engine configuration is invalid",
                        source=str(self.config_path),
                        technical_details="; ".join(warnings),
                    )
                logger.error(f"Engine configuration rejected: {warnings}")
                return DEFAULT_ENGINE_CONFIG

            calendar = config_data.get("calendar", {})
            engine_config = EngineConfig(
                order_cutoff_hour=config_data.get("order_cutoff_hour", settings.ORDER_CUTOFF_HOUR),
                holidays=_expand_dates(calendar["holidays"]) if "holidays" in calendar else HOLIDAYS,
                working_weekends=(
                    _expand_dates(calendar["working_weekends"])
                    if "working_weekends" in calendar
                    else WORKING_WEEKENDS
                ),
                table_version=str(config_data.get("table_version", TABLE_VERSION)),
            )

            logger.info(
                f"Engine configuration loaded: cutoff {engine_config.order_cutoff_hour}:00, "
                f"{len(engine_config.holidays)} holidays, tables {engine_config.table_version}"
            )
            return engine_config

        except (yaml.YAMLError, OSError, ValueError, TypeError) as e:
            if strict:
                raise ConfigurationError(
                    "Engine configuration could not be read",
                    source=str(self.config_path),
                    technical_details=str(e),
                ) from e
            logger.error(f"Failed to load engine configuration: {e}")
            return DEFAULT_ENGINE_CONFIG

    def validate_config(self, config_data: Dict[str, Any]) -> List[str]:
        """
        Validate configuration data.

        Args:
            config_data: Configuration data to validate

        Returns:
            List of validation warnings
        """
        warnings = []

        if not isinstance(config_data, dict):
            return ["Configuration root must be a mapping"]

        cutoff = config_data.get("order_cutoff_hour", settings.ORDER_CUTOFF_HOUR)
        if not isinstance(cutoff, int) or not 0 <= cutoff <= 23:
            warnings.append(f"Invalid order_cutoff_hour: {cutoff}")

        calendar = config_data.get("calendar", {})
        if not isinstance(calendar, dict):
            warnings.append("calendar must be a mapping")
            return warnings

        for section in ("holidays", "working_weekends"):
            entries = calendar.get(section, [])
            if not isinstance(entries, list):
                warnings.append(f"calendar.{section} must be a list")
                continue
            for entry in entries:
                try:
                    if isinstance(entry, (list, tuple)):
                        if len(entry) != 2:
                            raise ValueError("range needs a start and an end")
                        start, end = (_parse_date(v) for v in entry)
                        if end < start:
                            raise ValueError("range ends before it starts")
                    else:
                        _parse_date(entry)
                except (ValueError, TypeError) as e:
                    warnings.append(f"Invalid date in calendar.{section}: {entry} ({e})")

        logger.debug(f"Configuration validation completed: {len(warnings)} warnings")
        return warnings


# Global config loader instance
config_loader = ConfigLoader()
