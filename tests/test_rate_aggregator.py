"""Tests for the concurrent courier fan-out."""

from __future__ import annotations

import asyncio
from typing import Any, Dict

import httpx
import pytest

from modules.serviceability.rate_aggregator import RateAggregator
from modules.serviceability.serviceability_schema import (
    CourierInfoModel,
    PackageDetails,
    ShipmentParams,
)
from modules.serviceability.zone_resolver import MappingZoneResolver
from modules.shipping_plan.shipping_plan_schema import CourierPricing
from shipping_partner.base import CourierSource
from shipping_partner.plan_rate import PlanRateSource
from tests.conftest import make_raw_quote
from utils.exceptions import InvalidWeightError, SourceUnavailableError


class FakeSource(CourierSource):
    name = "fake"

    def __init__(self, courier_id: str, total_price: float = 100, delay: float = 0, error=None):
        self.courier_id = courier_id
        self.total_price = total_price
        self.delay = delay
        self.error = error

    @property
    def source_id(self) -> str:
        return f"{self.name}:{self.courier_id}"

    async def fetch_raw_quote(self, shipment_params: ShipmentParams) -> Dict[str, Any]:
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        raw = make_raw_quote(total_price=self.total_price)
        raw["courier"]["id"] = self.courier_id
        return raw


class MalformedSource(FakeSource):
    async def fetch_raw_quote(self, shipment_params: ShipmentParams) -> Dict[str, Any]:
        raw = make_raw_quote()
        del raw["breakdown"]
        return raw


class TestRateAggregator:
    """Tests for partial results under failures and timeouts."""

    def test_all_sources_answer(self, shipment: ShipmentParams) -> None:
        sources = [FakeSource("1", 120), FakeSource("2", 90), FakeSource("3", 150)]

        quotes = asyncio.run(RateAggregator().get_rate_quotes(sources, shipment))

        assert sorted(quote.courierId for quote in quotes) == ["1", "2", "3"]

    def test_results_arrive_in_completion_order(self, shipment: ShipmentParams) -> None:
        sources = [FakeSource("slow", delay=0.05), FakeSource("fast")]

        quotes = asyncio.run(RateAggregator().get_rate_quotes(sources, shipment))

        assert [quote.courierId for quote in quotes] == ["fast", "slow"]

    def test_timed_out_source_is_dropped(self, shipment: ShipmentParams) -> None:
        sources = [FakeSource("1"), FakeSource("2", delay=1)]

        quotes = asyncio.run(
            RateAggregator(timeout=0.05).get_rate_quotes(sources, shipment)
        )

        assert [quote.courierId for quote in quotes] == ["1"]

    def test_failing_sources_are_dropped(self, shipment: ShipmentParams) -> None:
        request = httpx.Request("GET", "https://courier.test/rates")
        sources = [
            FakeSource("1"),
            FakeSource("2", error=httpx.ConnectError("refused", request=request)),
            FakeSource("3", error=SourceUnavailableError("fake:3", "not serviceable")),
            MalformedSource("4"),
            FakeSource("5"),
        ]

        quotes = asyncio.run(RateAggregator().get_rate_quotes(sources, shipment))

        assert sorted(quote.courierId for quote in quotes) == ["1", "5"]

    def test_no_sources(self, shipment: ShipmentParams) -> None:
        assert asyncio.run(RateAggregator().get_rate_quotes([], shipment)) == []

    def test_plan_rate_source(
        self,
        cod_shipment: ShipmentParams,
        courier: CourierInfoModel,
        rate_card: CourierPricing,
    ) -> None:
        resolver = MappingZoneResolver({("110001", "400001"): "WITHIN_METRO"})
        sources = [
            PlanRateSource(courier, rate_card, resolver),
            FakeSource("9", error=httpx.ReadTimeout("slow")),
        ]

        quotes = asyncio.run(RateAggregator().get_rate_quotes(sources, cod_shipment))

        assert len(quotes) == 1
        assert quotes[0].courierId == "101"
        assert quotes[0].zoneName == "Zone C"
        assert quotes[0].pricing.totalPrice == 140

    def test_unresolved_zone_drops_plan_source(
        self,
        shipment: ShipmentParams,
        courier: CourierInfoModel,
        rate_card: CourierPricing,
    ) -> None:
        resolver = MappingZoneResolver({})
        sources = [PlanRateSource(courier, rate_card, resolver)]

        assert asyncio.run(RateAggregator().get_rate_quotes(sources, shipment)) == []

    def test_invalid_package_is_raised(
        self,
        courier: CourierInfoModel,
        rate_card: CourierPricing,
    ) -> None:
        shipment = ShipmentParams(
            pickup_pincode="110001",
            delivery_pincode="400001",
            package=PackageDetails(length=30, breadth=20, height=15, deadWeight=0),
        )
        resolver = MappingZoneResolver({("110001", "400001"): "z_c"})
        sources = [PlanRateSource(courier, rate_card, resolver), FakeSource("1")]

        with pytest.raises(InvalidWeightError):
            asyncio.run(RateAggregator().get_rate_quotes(sources, shipment))

    def test_invalid_weight_from_source_is_raised(self, shipment: ShipmentParams) -> None:
        sources = [FakeSource("1", error=InvalidWeightError("weight_slab must be greater than 0"))]

        with pytest.raises(InvalidWeightError):
            asyncio.run(RateAggregator().get_rate_quotes(sources, shipment))
