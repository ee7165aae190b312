"""
Tests for campfire/src/utils and campfire/config/settings.py
"""

import asyncio
import logging
import time

import pytest
from pydantic import ValidationError

from campfire.config.settings import Settings, settings
from campfire.src.core.exceptions import RemoteCallTimeout
from campfire.src.utils.async_utils import run_blocking, run_with_timeout
from campfire.src.utils.logger import get_logger
from campfire.src.utils.text_utils import format_price, normalise_text


class TestTextUtils:

    def test_normalise_collapses_whitespace(self):
        assert normalise_text("  Trail\t\tRunner \n shoes ") == "Trail Runner shoes"

    def test_normalise_strips_zero_width_characters(self):
        assert normalise_text("Tent\u200b\ufeff") == "Tent"

    def test_normalise_handles_none(self):
        assert normalise_text(None) == ""

    def test_format_price_always_two_decimals(self):
        assert format_price(99) == "99.00"
        assert format_price(19.999) == "20.00"


class TestAsyncUtils:

    async def test_run_with_timeout_returns_value(self):
        async def quick():
            return 42

        assert await run_with_timeout(quick(), 1, "quick") == 42

    async def test_run_with_timeout_raises_remote_call_timeout(self):
        with pytest.raises(RemoteCallTimeout, match="slow call timed out"):
            await run_with_timeout(asyncio.sleep(1), 0.01, "slow call")

    async def test_run_blocking_runs_off_loop(self):
        assert await run_blocking(sum, [1, 2, 3], timeout=1, operation="sum") == 6

    async def test_run_blocking_times_out(self):
        with pytest.raises(RemoteCallTimeout):
            await run_blocking(time.sleep, 0.5, timeout=0.01, operation="sleep")


class TestLogger:

    def test_records_are_not_duplicated_through_the_root_logger(self):
        logger = get_logger("campfire.tests.single_handler")

        assert logger.propagate is False
        assert len(logger.handlers) == 1

    def test_handler_is_attached_once(self):
        first = get_logger("campfire.tests.repeat")
        second = get_logger("campfire.tests.repeat", level=logging.ERROR)

        assert first is second
        assert len(second.handlers) == 1


class TestSettings:

    def test_candidate_count_is_limit_times_overfetch(self):
        assert settings.candidate_count == settings.SEARCH_RESULTS_LIMIT * settings.SEARCH_OVERFETCH_FACTOR

    def test_defaults_match_reference_tuning(self):
        assert settings.RELEVANCE_THRESHOLD == 0.3
        assert settings.SEARCH_RESULTS_LIMIT == 1
        assert settings.SEARCH_OVERFETCH_FACTOR == 2

    def test_threshold_out_of_range_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(RELEVANCE_THRESHOLD=1.5)

    def test_worker_count_out_of_range_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(MAX_WORKERS=0)
