"""
Document serial numbers: configurable format, monotonic counter, periodic auto-reset.

State lives in app_config under serial_number_config. get_next() holds a single
lock across load -> reset check -> format -> persist, so concurrent callers
never receive the same counter value.
"""

import logging
from datetime import datetime
from typing import Any

from truckore.core.time_utils import Clock, utcnow
from truckore.schemas.serial_number import SerialNumberConfig
from truckore.services.config_store import SERIAL_NUMBER_CONFIG_KEY, ConfigStore
from truckore.services.locks import KeyedLocks

logger = logging.getLogger(__name__)

_COUNTER_LOCK = "serial_number"


def format_serial_number(config: SerialNumberConfig, now: datetime) -> str:
    """prefix [sep year] [sep month] sep counter, counter zero-padded. Pure."""
    local = now.astimezone()
    parts = [config.prefix]
    if config.include_year:
        year = str(local.year)
        parts.append(year[-2:] if config.year_format == "YY" else year)
    if config.include_month:
        parts.append(f"{local.month:02d}")
    parts.append(str(config.current_counter).zfill(config.counter_padding))
    return config.separator.join(parts)


def reset_due(config: SerialNumberConfig, now: datetime) -> bool:
    """True when a calendar year/month boundary was crossed since last_reset_date."""
    if config.reset_frequency == "never" or config.last_reset_date is None:
        return False
    current = now.astimezone()
    last = config.last_reset_date.astimezone()
    if config.reset_frequency == "yearly":
        return current.year > last.year
    return (current.year, current.month) > (last.year, last.month)


class SerialNumberGenerator:
    """Issues serial numbers from the persisted SerialNumberConfig."""

    def __init__(self, config_store: ConfigStore, clock: Clock = utcnow) -> None:
        self._config_store = config_store
        self._clock = clock
        self._locks = KeyedLocks()

    async def get_config(self) -> SerialNumberConfig:
        """Persisted config, or the defaults when none has been saved."""
        raw = await self._config_store.get_config(SERIAL_NUMBER_CONFIG_KEY)
        if raw is None:
            return SerialNumberConfig()
        return SerialNumberConfig.model_validate_json(raw)

    async def update_config(
        self, config: SerialNumberConfig, reset_counter_now: bool = False
    ) -> SerialNumberConfig:
        """Replace the config; optionally reset the counter to counter_start."""
        config = SerialNumberConfig.model_validate(config.model_dump())
        async with self._locks.hold(_COUNTER_LOCK):
            if reset_counter_now:
                config.current_counter = config.counter_start
                config.last_reset_date = self._clock()
                logger.info("Serial number counter reset to %s", config.counter_start)
            await self._save(config)
        return config

    async def reset_counter(self) -> SerialNumberConfig:
        """Explicit administrator reset of the counter."""
        async with self._locks.hold(_COUNTER_LOCK):
            config = await self.get_config()
            config.current_counter = config.counter_start
            config.last_reset_date = self._clock()
            await self._save(config)
        logger.info("Serial number counter reset to %s", config.counter_start)
        return config

    async def get_next(self) -> str:
        """
        Format and consume the next serial number.

        The returned string shows the counter value that was persisted as used;
        the stored counter is advanced past it before returning.
        """
        async with self._locks.hold(_COUNTER_LOCK):
            config = await self.get_config()
            now = self._clock()
            if reset_due(config, now):
                logger.info(
                    "Serial number %s reset: counter %s -> %s",
                    config.reset_frequency,
                    config.current_counter,
                    config.counter_start,
                )
                config.current_counter = config.counter_start
                config.last_reset_date = now
            serial_number = format_serial_number(config, now)
            config.current_counter += 1
            if config.last_reset_date is None:
                config.last_reset_date = now
            await self._save(config)
        return serial_number

    def preview(self, partial: SerialNumberConfig | dict[str, Any] | None = None) -> str:
        """Format a config without reading or touching the persisted counter."""
        if isinstance(partial, SerialNumberConfig):
            config = partial
        else:
            values = {k: v for k, v in (partial or {}).items() if v is not None}
            config = SerialNumberConfig.model_validate(values)
        return format_serial_number(config, self._clock())

    async def _save(self, config: SerialNumberConfig) -> None:
        await self._config_store.set_config(SERIAL_NUMBER_CONFIG_KEY, config.to_json())
