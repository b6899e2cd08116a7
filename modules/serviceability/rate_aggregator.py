import asyncio
from typing import List, Optional, Sequence

import httpx

from context_manager.context import context_user_data

from logger import logger

# schema
from modules.serviceability.serviceability_schema import RateQuote, ShipmentParams

# services
from .rate_normalizer import RateNormalizer, log_dropped_quote

# utils
from settings import COURIER_SOURCE_TIMEOUT_SECONDS
from utils.exceptions import (
    InvalidWeightError,
    MalformedQuoteError,
    RateEngineError,
    SourceUnavailableError,
    UnsupportedZoneError,
)
from utils.weight_calc import WeightResolver


class RateAggregator:
    """
    Fans a shipment out to every courier source at once and collects the
    quotes that come back in time.

    Each source gets its own timeout. A source that times out, errors or
    returns an unusable quote is logged and left out; the others are still
    returned. The result is in completion order, callers sort it.

    An invalid package raises InvalidWeightError instead of being dropped.
    """

    def __init__(self, timeout: float = COURIER_SOURCE_TIMEOUT_SECONDS):
        self.timeout = timeout

    async def get_rate_quotes(
        self,
        sources: Sequence,
        shipment_params: ShipmentParams,
    ) -> List[RateQuote]:

        # a bad package fails every source the same way, reject it once
        WeightResolver().validate_package(shipment_params.package)

        if not sources:
            return []

        tasks = [
            self._fetch_quote(source, shipment_params) for source in sources
        ]

        quotes = []
        for next_quote in asyncio.as_completed(tasks):
            quote = await next_quote
            if quote is not None:
                quotes.append(quote)

        logger.info(
            extra=context_user_data.get(),
            msg="Collected {} of {} courier quotes".format(len(quotes), len(sources)),
        )

        return quotes

    async def _fetch_quote(
        self, source, shipment_params: ShipmentParams
    ) -> Optional[RateQuote]:

        try:
            raw_quote = await asyncio.wait_for(
                source.fetch_raw_quote(shipment_params), timeout=self.timeout
            )

        except asyncio.TimeoutError:
            log_source_unavailable(
                source, "no response within {}s".format(self.timeout)
            )
            return None

        except (httpx.HTTPError, ValueError) as e:
            # transport failures and undecodable response bodies
            log_source_unavailable(source, "{}: {}".format(type(e).__name__, e))
            return None

        except SourceUnavailableError as e:
            log_source_unavailable(source, e.reason)
            return None

        except (MalformedQuoteError, UnsupportedZoneError) as e:
            log_dropped_quote(e)
            return None

        except InvalidWeightError:
            raise

        except RateEngineError as e:
            log_source_unavailable(source, e.message)
            return None

        try:
            return RateNormalizer.normalize(raw_quote)
        except RateEngineError as e:
            log_dropped_quote(e)
            return None


def log_source_unavailable(source, reason: str):
    logger.warning(
        extra=context_user_data.get(),
        msg="Courier source {} unavailable: {}".format(
            getattr(source, "source_id", source), reason
        ),
    )
