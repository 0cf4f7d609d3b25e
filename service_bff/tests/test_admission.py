"""
Unit tests for the shared admission controller.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from service_bff.app.ratelimit.admission import AdmissionController


class TestAdmissionController:
    """Test cases for AdmissionController."""

    def test_admits_up_to_ceiling(self):
        controller = AdmissionController(3, 1.0)

        assert [controller.try_admit() for _ in range(4)] == [True, True, True, False]
        assert controller.remaining == 0

    def test_counter_never_goes_negative(self):
        controller = AdmissionController(1, 1.0)

        for _ in range(10):
            controller.try_admit()

        assert controller.remaining == 0

    def test_zero_ceiling_rejects_everything(self):
        controller = AdmissionController(0, 1.0)

        assert controller.try_admit() is False
        controller.refill()
        assert controller.try_admit() is False

    def test_refill_restores_capacity(self):
        controller = AdmissionController(2, 1.0)
        controller.try_admit()
        controller.try_admit()

        controller.refill()

        assert controller.remaining == 2
        assert controller.try_admit()

    def test_refill_rereads_ceiling(self):
        ceiling = {"value": 2}
        controller = AdmissionController(2, 1.0, ceiling_provider=lambda: ceiling["value"])

        ceiling["value"] = 5
        controller.refill()

        assert controller.ceiling == 5
        assert controller.remaining == 5

    def test_invalid_ceiling_keeps_previous(self):
        controller = AdmissionController(4, 1.0, ceiling_provider=lambda: "lots")
        controller.try_admit()

        controller.refill()

        assert controller.ceiling == 4
        assert controller.remaining == 4

    def test_negative_ceiling_clamped(self):
        controller = AdmissionController(-5, 1.0)
        assert controller.remaining == 0

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            AdmissionController(10, 0)

    def test_concurrent_admissions_are_exact(self):
        controller = AdmissionController(500, 1.0)

        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(lambda _: controller.try_admit(), range(2000)))

        assert results.count(True) == 500
        assert controller.remaining == 0

    @pytest.mark.asyncio
    async def test_background_refill(self):
        controller = AdmissionController(1, 0.05)
        controller.start()
        try:
            assert controller.running
            assert controller.try_admit()
            assert not controller.try_admit()

            await asyncio.sleep(0.2)

            assert controller.try_admit()
        finally:
            await controller.stop()

        assert not controller.running

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self):
        controller = AdmissionController(1, 10.0)
        controller.start()
        task = controller._task
        controller.start()

        assert controller._task is task
        await controller.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        controller = AdmissionController(1, 1.0)
        await controller.stop()
        assert not controller.running
