"""Tests for serial number formatting, issuing and automatic counter reset."""

import asyncio
import unittest
from datetime import UTC, datetime

from _support import ContainerTestCase
from truckore.schemas.serial_number import SerialNumberConfig
from truckore.services.serial_number import format_serial_number, reset_due

# Mid-month noon UTC falls in the same local year and month in every timezone.
JUNE_2025 = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)
MAY_2025 = datetime(2025, 5, 15, 12, 0, tzinfo=UTC)
DEC_2024 = datetime(2024, 12, 15, 12, 0, tzinfo=UTC)


class TestFormatSerialNumber(unittest.TestCase):
    def test_default_format(self) -> None:
        self.assertEqual(format_serial_number(SerialNumberConfig(), JUNE_2025), "WB-2025-001")

    def test_short_year_and_month(self) -> None:
        config = SerialNumberConfig(
            prefix="TK",
            separator="/",
            year_format="YY",
            include_month=True,
            current_counter=42,
            counter_padding=5,
        )
        self.assertEqual(format_serial_number(config, JUNE_2025), "TK/25/06/00042")

    def test_no_date_parts(self) -> None:
        config = SerialNumberConfig(include_year=False, current_counter=7)
        self.assertEqual(format_serial_number(config, JUNE_2025), "WB-007")

    def test_counter_wider_than_padding(self) -> None:
        config = SerialNumberConfig(current_counter=12345)
        self.assertEqual(format_serial_number(config, JUNE_2025), "WB-2025-12345")

    def test_camel_case_json_round_trip(self) -> None:
        raw = '{"prefix":"WB","includeYear":false,"currentCounter":9,"resetFrequency":"never"}'
        config = SerialNumberConfig.model_validate_json(raw)
        self.assertFalse(config.include_year)
        self.assertEqual(config.current_counter, 9)
        self.assertIn('"currentCounter":9', config.to_json())


class TestResetDue(unittest.TestCase):
    def test_monthly(self) -> None:
        config = SerialNumberConfig(reset_frequency="monthly", last_reset_date=MAY_2025)
        self.assertTrue(reset_due(config, JUNE_2025))
        self.assertFalse(reset_due(config.model_copy(update={"last_reset_date": JUNE_2025}), JUNE_2025))

    def test_yearly(self) -> None:
        config = SerialNumberConfig(reset_frequency="yearly", last_reset_date=MAY_2025)
        self.assertFalse(reset_due(config, JUNE_2025))
        self.assertTrue(reset_due(config.model_copy(update={"last_reset_date": DEC_2024}), JUNE_2025))

    def test_never_and_first_use(self) -> None:
        self.assertFalse(reset_due(SerialNumberConfig(reset_frequency="never", last_reset_date=DEC_2024), JUNE_2025))
        self.assertFalse(reset_due(SerialNumberConfig(last_reset_date=None), JUNE_2025))


class TestSerialNumberGenerator(ContainerTestCase, unittest.TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.clock.now = JUNE_2025
        asyncio.run(self.container.initialize())
        self.generator = self.container.serial_numbers

    def test_sequence_from_defaults(self) -> None:
        self.assertEqual(asyncio.run(self.generator.get_next()), "WB-2025-001")
        self.assertEqual(asyncio.run(self.generator.get_next()), "WB-2025-002")
        config = asyncio.run(self.generator.get_config())
        self.assertEqual(config.current_counter, 3)
        self.assertEqual(config.last_reset_date, JUNE_2025)

    def test_monthly_reset_on_first_call_of_new_month(self) -> None:
        asyncio.run(
            self.generator.update_config(
                SerialNumberConfig(
                    include_month=True,
                    reset_frequency="monthly",
                    current_counter=47,
                    last_reset_date=MAY_2025,
                )
            )
        )
        self.assertEqual(asyncio.run(self.generator.get_next()), "WB-2025-06-001")
        config = asyncio.run(self.generator.get_config())
        self.assertEqual(config.current_counter, 2)
        self.assertEqual(config.last_reset_date, JUNE_2025)

    def test_concurrent_calls_get_distinct_numbers(self) -> None:
        async def burst() -> list[str]:
            return await asyncio.gather(*(self.generator.get_next() for _ in range(20)))

        numbers = asyncio.run(burst())
        self.assertEqual(len(set(numbers)), 20)
        self.assertEqual(sorted(numbers), [f"WB-2025-{i:03d}" for i in range(1, 21)])

    def test_contended_bursts_across_event_loops(self) -> None:
        async def burst() -> list[str]:
            return await asyncio.gather(*(self.generator.get_next() for _ in range(20)))

        numbers = asyncio.run(burst()) + asyncio.run(burst())
        self.assertEqual(len(set(numbers)), 40)
        self.assertEqual(sorted(numbers), [f"WB-2025-{i:03d}" for i in range(1, 41)])

    def test_preview_does_not_consume(self) -> None:
        first = self.generator.preview({"prefix": "TK", "current_counter": 5})
        second = self.generator.preview({"prefix": "TK", "current_counter": 5})
        self.assertEqual(first, "TK-2025-005")
        self.assertEqual(first, second)
        self.assertEqual(asyncio.run(self.generator.get_next()), "WB-2025-001")

    def test_update_config_with_counter_reset(self) -> None:
        asyncio.run(self.generator.get_next())
        config = asyncio.run(
            self.generator.update_config(
                SerialNumberConfig(prefix="TK", counter_start=100, current_counter=9),
                reset_counter_now=True,
            )
        )
        self.assertEqual(config.current_counter, 100)
        self.assertEqual(asyncio.run(self.generator.get_next()), "TK-2025-100")

    def test_reset_counter(self) -> None:
        for _ in range(3):
            asyncio.run(self.generator.get_next())
        config = asyncio.run(self.generator.reset_counter())
        self.assertEqual(config.current_counter, 1)
        self.assertEqual(asyncio.run(self.generator.get_next()), "WB-2025-001")


class TestSerialNumberGeneratorOnFallback(TestSerialNumberGenerator):
    native = False


if __name__ == "__main__":
    unittest.main()
