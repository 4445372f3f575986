from carrier_rates.models.rates import (
    Address,
    AggregationResult,
    CarrierError,
    CarrierQuote,
    DimensionUnit,
    Dimensions,
    PackageInfo,
    RateBreakdown,
    RateQuote,
    RateRequest,
    WeightUnit,
)

__all__ = [
    "Address",
    "AggregationResult",
    "CarrierError",
    "CarrierQuote",
    "DimensionUnit",
    "Dimensions",
    "PackageInfo",
    "RateBreakdown",
    "RateQuote",
    "RateRequest",
    "WeightUnit",
]
