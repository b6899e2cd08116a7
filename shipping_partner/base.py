from abc import ABC, abstractmethod
from typing import Any, Dict

from modules.serviceability.serviceability_schema import ShipmentParams


class CourierSource(ABC):
    """
    A place raw rate quotes come from: a courier API, an aggregator API or a
    seller's own shipping plan. The rate aggregator only depends on this
    interface.
    """

    # short source name used in logs and token cache keys
    name: str = "courier"

    @property
    def source_id(self) -> str:
        return self.name

    @abstractmethod
    async def fetch_raw_quote(self, shipment_params: ShipmentParams) -> Dict[str, Any]:
        """
        Fetch one raw quote in the courier adapter contract (nested courier,
        pricing and breakdown objects).

        Network and timeout errors propagate; the aggregator drops the source.
        """
