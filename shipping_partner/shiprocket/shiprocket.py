import http
from typing import Any, Dict, Optional

import httpx

from context_manager.context import context_user_data

from logger import logger

# schema
from modules.serviceability.serviceability_schema import ShipmentParams

# utils
from settings import SHIPROCKET_BASE_URL
from utils.exceptions import SourceUnavailableError
from utils.token_cache import TokenCache
from utils.weight_calc import WeightResolver

from shipping_partner.base import CourierSource


class Shiprocket(CourierSource):
    """
    Rate quotes for one courier company through the Shiprocket serviceability
    API. Clients are passed in so the caller owns their lifecycle.
    """

    name = "shiprocket"

    def __init__(
        self,
        credentials: Dict[str, str],
        account_id,
        courier_company_id,
        http_client: httpx.AsyncClient,
        token_cache: TokenCache,
        base_url: str = SHIPROCKET_BASE_URL,
    ):
        self.credentials = credentials
        self.account_id = account_id
        self.courier_company_id = str(courier_company_id)
        self.http_client = http_client
        self.token_cache = token_cache
        self.base_url = base_url.rstrip("/")

    @property
    def source_id(self) -> str:
        return f"{self.name}:{self.courier_company_id}"

    async def generate_token(self) -> Optional[str]:
        api_url = self.base_url + "/auth/login"

        body = {
            "email": self.credentials["email"],
            "password": self.credentials["password"],
        }

        response = await self.http_client.post(api_url, json=body)

        if response.status_code != http.HTTPStatus.OK:
            logger.error(
                extra=context_user_data.get(),
                msg="Shiprocket login failed with status {}".format(
                    response.status_code
                ),
            )
            return None

        return response.json().get("token")

    async def get_token(self) -> Optional[str]:
        return await self.token_cache.get_or_create(
            self.name, self.account_id, self.generate_token
        )

    async def fetch_raw_quote(self, shipment_params: ShipmentParams) -> Dict[str, Any]:

        token = await self.get_token()
        if not token:
            raise SourceUnavailableError(self.source_id, "could not authenticate")

        package = shipment_params.package
        is_cod = shipment_params.payment_type.lower() == "cod"

        params = {
            "pickup_postcode": shipment_params.pickup_pincode,
            "delivery_postcode": shipment_params.delivery_pincode,
            "weight": package.deadWeight,
            "length": package.length,
            "breadth": package.breadth,
            "height": package.height,
            "cod": 1 if is_cod else 0,
            "declared_value": shipment_params.collectable_amount,
            "is_return": 1 if shipment_params.is_reverse else 0,
        }

        response = await self.http_client.get(
            self.base_url + "/courier/serviceability/",
            params=params,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}",
            },
        )

        if response.status_code == http.HTTPStatus.UNAUTHORIZED:
            # token revoked before its TTL ran out
            await self.token_cache.invalidate(self.name, self.account_id)
            raise SourceUnavailableError(self.source_id, "token rejected")

        response.raise_for_status()

        response_data = response.json()
        companies = (response_data.get("data") or {}).get(
            "available_courier_companies"
        ) or []

        for company in companies:
            if str(company.get("courier_company_id")) == self.courier_company_id:
                return self.to_raw_quote(company, shipment_params)

        raise SourceUnavailableError(self.source_id, "not serviceable")

    @staticmethod
    def to_raw_quote(
        company: Dict[str, Any], shipment_params: ShipmentParams
    ) -> Dict[str, Any]:
        package = shipment_params.package
        is_cod = shipment_params.payment_type.lower() == "cod"

        volumetric_weight = WeightResolver().calculate_volumetric_weight(
            package.length, package.breadth, package.height
        )

        return {
            "courier": {
                "id": company.get("courier_company_id"),
                "name": company.get("courier_name"),
                "nickname": company.get("courier_name"),
                "courier_code": "shiprocket_{}".format(
                    company.get("courier_company_id")
                ),
                "type": "surface" if company.get("is_surface") else "air",
                "rating": company.get("rating"),
                "pickup_performance": company.get("pickup_performance"),
                "delivery_performance": company.get("delivery_performance"),
                "rto_performance": company.get("rto_performance"),
                "estimated_delivery_days": company.get("estimated_delivery_days"),
                "etd": company.get("etd"),
            },
            "zone": company.get("zone"),
            "final_weight": company.get("charge_weight"),
            "base_price": company.get("freight_charge"),
            "cod_charges": company.get("cod_charges") if is_cod else 0,
            "rto_charges": company.get("rto_charges"),
            "fw_charges": company.get("freight_charge"),
            "total_price": company.get("rate"),
            "pricing": {
                "cod_charge_hard": company.get("cod_charges"),
                "is_cod_applicable": bool(company.get("cod")),
                "is_rto_applicable": company.get("rto_charges") is not None,
                "is_fw_applicable": True,
                "is_cod_reversal_applicable": False,
            },
            "breakdown": {
                "actual_weight": package.deadWeight,
                "volumetric_weight": volumetric_weight,
                "chargeable_weight": company.get("charge_weight"),
                "min_weight": company.get("min_weight"),
            },
        }
