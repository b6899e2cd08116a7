"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import Any, Dict

import pytest

from modules.serviceability.serviceability_schema import (
    CourierInfoModel,
    PackageDetails,
    ShipmentParams,
    ZoneResolution,
)
from modules.shipping_plan.shipping_plan_schema import CourierPricing, Zone


def make_zone_pricing(base_price: float = 40, increment_price: float = 25, **extra):
    """Same pricing for all five zones."""
    return {
        zone.value: {
            "base_price": base_price,
            "increment_price": increment_price,
            **extra,
        }
        for zone in Zone
    }


def make_raw_quote(**overrides) -> Dict[str, Any]:
    """A complete raw quote as a courier adapter returns it."""
    raw = {
        "courier": {
            "id": "101",
            "name": "Delhivery Surface",
            "courier_code": "delhivery_surface",
            "type": "surface",
            "nickname": "DL Surface",
            "rating": 4.2,
            "estimated_delivery_days": "3-4 days",
            "etd": "Mar 12",
        },
        "pricing": {
            "cod_charge_hard": 25,
            "cod_charge_percent": 2,
            "is_cod_applicable": True,
            "is_rto_applicable": True,
            "is_fw_applicable": True,
            "is_cod_reversal_applicable": False,
        },
        "zone": "z_c",
        "final_weight": 2.0,
        "base_price": 40,
        "weight_charges": 75,
        "cod_charges": 25,
        "rto_charges": 115,
        "fw_charges": 115,
        "total_price": 140,
        "breakdown": {
            "actual_weight": 1.0,
            "volumetric_weight": 1.8,
            "chargeable_weight": 1.8,
            "min_weight": 0.5,
            "weight_increment_ratio": 3,
        },
    }
    raw.update(overrides)
    return raw


@pytest.fixture
def rate_card() -> CourierPricing:
    """Rate card with 0.5 kg slab, 0.5 kg increments, 40 base and 25 per increment."""
    return CourierPricing(
        courierId="101",
        weight_slab=0.5,
        increment_weight=0.5,
        cod_charge_hard=25,
        cod_charge_percent=2,
        is_rto_applicable=True,
        zonePricing=make_zone_pricing(),
    )


@pytest.fixture
def courier() -> CourierInfoModel:
    return CourierInfoModel(
        id="101",
        name="Delhivery Surface",
        courier_code="delhivery_surface",
        nickname="DL Surface",
        rating=4.2,
        estimated_delivery_days="3",
        pickup_time="14:00",
    )


@pytest.fixture
def package() -> PackageDetails:
    """30 x 20 x 15 cm box weighing 1 kg (volumetric 1.8 kg)."""
    return PackageDetails(length=30, breadth=20, height=15, deadWeight=1.0)


@pytest.fixture
def shipment(package: PackageDetails) -> ShipmentParams:
    return ShipmentParams(
        pickup_pincode="110001",
        delivery_pincode="400001",
        package=package,
    )


@pytest.fixture
def cod_shipment(package: PackageDetails) -> ShipmentParams:
    return ShipmentParams(
        pickup_pincode="110001",
        delivery_pincode="400001",
        package=package,
        payment_type="cod",
        collectable_amount=500,
    )


@pytest.fixture
def zone_c() -> ZoneResolution:
    return ZoneResolution(zone=Zone.C, zoneName="Zone C")


@pytest.fixture
def raw_quote() -> Dict[str, Any]:
    return make_raw_quote()
