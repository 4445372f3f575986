"""
Multi-Carrier Rate Service

- Fans one rate request out to every registered RateProvider concurrently
- All-settled join: every carrier finishes (success or failure) before the
  result is built; one failure never cancels or hides a sibling
- Quotes and errors follow registration order, not completion order
- No retries, no timeouts, no sorting by price

Usage:
    service = RateService({"ups": ups_carrier})
    result = await service.get_rates(request)
"""
import asyncio
import logging
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple, Union

from carrier_rates.core.exceptions import UnknownAdapterError
from carrier_rates.models.rates import (
    AggregationResult,
    CarrierError,
    CarrierQuote,
    RateQuote,
    RateRequest,
)
from carrier_rates.modules.shipping.carriers.base import RateProvider
from carrier_rates.schemas.shipping import validate_rate_request

logger = logging.getLogger(__name__)

# (index, carrier name, quote, error): exactly one of quote/error is set
_Outcome = Tuple[int, str, Optional[RateQuote], Optional[Exception]]


class RateService:
    """
    Aggregates rates from a fixed, named collection of carriers.

    The collection is copied at construction and exposed read-only.
    """

    def __init__(self, providers: Mapping[str, RateProvider]):
        for name, provider in providers.items():
            if not isinstance(provider, RateProvider):
                raise TypeError(
                    f"Carrier {name!r} ({type(provider).__name__}) does not provide rates"
                )
        self._providers = MappingProxyType(dict(providers))

    @property
    def providers(self) -> Mapping[str, RateProvider]:
        return self._providers

    @staticmethod
    def _coerce_request(request: Union[RateRequest, Mapping[str, Any]]) -> RateRequest:
        if isinstance(request, RateRequest):
            return request
        return validate_rate_request(request)

    async def _settle(
        self,
        index: int,
        name: str,
        provider: RateProvider,
        request: RateRequest,
    ) -> _Outcome:
        try:
            quote = await provider.get_rates(request)
        except Exception as e:
            logger.error(f"Error getting rates from {name}: {e!r}")
            return index, name, None, e
        return index, name, quote, None

    async def get_rates(
        self,
        request: Union[RateRequest, Mapping[str, Any]],
    ) -> AggregationResult:
        """
        Get a quote from every registered carrier.

        Args:
            request: RateRequest, or raw input validated before any dispatch

        Returns:
            AggregationResult with one quote per successful carrier and, when
            any carrier failed, one error per failed carrier

        Raises:
            ValidationError: raw input failed validation (no carrier called)
        """
        rate_request = self._coerce_request(request)

        if not self._providers:
            logger.warning("No carriers registered for rate lookup")
            return AggregationResult(quotes=[])

        outcomes: List[_Outcome] = await asyncio.gather(*(
            self._settle(index, name, provider, rate_request)
            for index, (name, provider) in enumerate(self._providers.items())
        ))
        outcomes.sort(key=lambda outcome: outcome[0])

        quotes: List[CarrierQuote] = []
        errors: List[CarrierError] = []
        for _, name, quote, error in outcomes:
            if error is not None:
                errors.append(CarrierError(carrier=name, error=error))
            else:
                quotes.append(CarrierQuote(carrier=name, quote=quote))

        logger.info(
            f"Rate lookup finished: {len(quotes)} quote(s), {len(errors)} error(s) "
            f"from {len(outcomes)} carrier(s)"
        )
        return AggregationResult(quotes=quotes, errors=errors or None)

    async def get_rates_from_one(
        self,
        name: str,
        request: Union[RateRequest, Mapping[str, Any]],
    ) -> RateQuote:
        """
        Get a quote from one named carrier. Failures propagate unchanged.

        Raises:
            UnknownAdapterError: name is not registered
            ValidationError: raw input failed validation
        """
        provider = self._providers.get(name)
        if provider is None:
            raise UnknownAdapterError(name, available=list(self._providers))

        return await provider.get_rates(self._coerce_request(request))
