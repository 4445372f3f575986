"""
UPS payload shaping.

Pure transforms between the normalized models and the UPS Rating (v2403)
and Tracking (v1) JSON schemas. No I/O.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from carrier_rates.core.exceptions import CarrierResponseError
from carrier_rates.models.rates import (
    Address,
    DimensionUnit,
    PackageInfo,
    RateBreakdown,
    RateQuote,
    RateRequest,
    WeightUnit,
)
from carrier_rates.modules.shipping.carriers.base import (
    TrackingEvent,
    TrackingInfo,
    TrackingStatus,
)

logger = logging.getLogger(__name__)

LB_PER_KG = 2.20462
CM_PER_IN = 2.54

DEFAULT_SERVICE_CODE = "03"
DEFAULT_PACKAGE_TYPE = "02"  # Customer Supplied Package
DEFAULT_DIMENSION_IN = 5.0
MIN_MEASURE = 0.01  # UPS rejects zero weights and dimensions

FUEL_SURCHARGE_CODES = {"FS", "375", "376"}

UPS_SERVICE_CODES = {
    # Domestic US
    "01": "UPS Next Day Air",
    "02": "UPS 2nd Day Air",
    "03": "UPS Ground",
    "12": "UPS 3 Day Select",
    "13": "UPS Next Day Air Saver",
    "14": "UPS Next Day Air Early",
    "59": "UPS 2nd Day Air A.M.",
    # International
    "07": "UPS Worldwide Express",
    "08": "UPS Worldwide Expedited",
    "11": "UPS Standard",
    "54": "UPS Worldwide Express Plus",
    "65": "UPS Saver",
}

UPS_STATUS_MAP = {
    "D": TrackingStatus.DELIVERED,
    "I": TrackingStatus.IN_TRANSIT,
    "O": TrackingStatus.OUT_FOR_DELIVERY,
    "P": TrackingStatus.PICKED_UP,
    "X": TrackingStatus.EXCEPTION,
    "RS": TrackingStatus.RETURNED,
    "M": TrackingStatus.LABEL_CREATED,
    "MV": TrackingStatus.LABEL_CREATED,
}

SENTINEL_SERVICE_CODE = "ups"
SENTINEL_SERVICE_NAME = "UPS"


# ==================== Units ====================


def format_measure(value: float) -> str:
    """
    At most two decimals, no trailing zeros: 10.0 -> "10", 4.536 -> "4.54".

    Positive values too small to show are raised to 0.01.
    """
    if 0 < value < MIN_MEASURE:
        value = MIN_MEASURE
    return f"{value:.2f}".rstrip("0").rstrip(".")


def unit_system_for(address: Address) -> Tuple[str, str]:
    """UPS expects imperial units from US origins and metric elsewhere."""
    if address.country.upper() == "US":
        return "LBS", "IN"
    return "KGS", "CM"


def convert_weight(weight: float, unit: WeightUnit, target: str) -> float:
    if target == "LBS" and unit == WeightUnit.KG:
        return weight * LB_PER_KG
    if target == "KGS" and unit == WeightUnit.LB:
        return weight / LB_PER_KG
    return weight


def convert_length(length: float, unit: DimensionUnit, target: str) -> float:
    if target == "IN" and unit == DimensionUnit.CM:
        return length / CM_PER_IN
    if target == "CM" and unit == DimensionUnit.IN:
        return length * CM_PER_IN
    return length


# ==================== Request ====================


def to_ups_address(address: Address) -> Dict[str, Any]:
    return {
        "AddressLine": address.address_lines or [address.city or "Address", address.postal_code],
        "City": address.city or "Unknown",
        "StateProvinceCode": address.state or "",
        "PostalCode": address.postal_code,
        "CountryCode": address.country or "US",
    }


def to_ups_package(package: PackageInfo, weight_code: str, dimension_code: str) -> Dict[str, Any]:
    weight = convert_weight(package.weight, package.weight_unit, weight_code)

    if package.dimensions:
        dims = package.dimensions
        length = convert_length(dims.length, dims.unit, dimension_code)
        width = convert_length(dims.width, dims.unit, dimension_code)
        height = convert_length(dims.height, dims.unit, dimension_code)
    else:
        length = width = height = convert_length(
            DEFAULT_DIMENSION_IN, DimensionUnit.IN, dimension_code
        )

    return {
        "PackagingType": {"Code": DEFAULT_PACKAGE_TYPE, "Description": "Packaging"},
        "Dimensions": {
            "UnitOfMeasurement": {
                "Code": dimension_code,
                "Description": "Inches" if dimension_code == "IN" else "Centimeters",
            },
            "Length": format_measure(length),
            "Width": format_measure(width),
            "Height": format_measure(height),
        },
        "PackageWeight": {
            "UnitOfMeasurement": {
                "Code": weight_code,
                "Description": "Pounds" if weight_code == "LBS" else "Kilograms",
            },
            "Weight": format_measure(weight),
        },
    }


def build_rate_request_body(shipper_number: str, request: RateRequest) -> Dict[str, Any]:
    """
    Build a UPS RateRequest for the first package of the request.

    Multi-package requests are not split; extra packages are ignored.
    """
    if len(request.packages) > 1:
        logger.warning(
            f"UPS rate request has {len(request.packages)} packages; only the first is rated"
        )

    weight_code, dimension_code = unit_system_for(request.origin)
    service_code = request.service_level or DEFAULT_SERVICE_CODE
    origin = to_ups_address(request.origin)

    return {
        "RateRequest": {
            "Request": {
                "TransactionReference": {
                    "CustomerContext": "Rating",
                },
            },
            "Shipment": {
                "Shipper": {
                    "Name": "Shipper",
                    "ShipperNumber": shipper_number,
                    "Address": origin,
                },
                "ShipTo": {
                    "Name": "ShipTo",
                    "Address": to_ups_address(request.destination),
                },
                "ShipFrom": {
                    "Name": "ShipFrom",
                    "Address": dict(origin),
                },
                "PaymentDetails": {
                    "ShipmentCharge": {
                        "Type": "01",
                        "BillShipper": {"AccountNumber": shipper_number},
                    },
                },
                "Service": {
                    "Code": service_code,
                    "Description": UPS_SERVICE_CODES.get(service_code, f"UPS Service {service_code}"),
                },
                "NumOfPieces": "1",
                "Package": to_ups_package(request.primary_package, weight_code, dimension_code),
            },
        }
    }


# ==================== Response ====================


def parse_amount(value: Any) -> Decimal:
    """Parse a UPS MonetaryValue (or charges object). Anything unparseable is 0."""
    if isinstance(value, dict):
        value = value.get("MonetaryValue")
    if value is None or value == "":
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return amount


def _as_list(value: Any) -> List[Any]:
    if not value:
        return []
    return value if isinstance(value, list) else [value]


def _is_fuel(charge: Dict[str, Any]) -> bool:
    if charge.get("Code") in FUEL_SURCHARGE_CODES:
        return True
    return "fuel" in str(charge.get("Description") or "").lower()


def sentinel_quote() -> RateQuote:
    """Placeholder quote for responses without a rated shipment."""
    return RateQuote(
        service_code=SENTINEL_SERVICE_CODE,
        service_name=SENTINEL_SERVICE_NAME,
        total_price=Decimal("0"),
        currency="USD",
    )


def map_rate_response_to_quote(response: Any) -> RateQuote:
    """
    Normalize a UPS RateResponse into a RateQuote.

    First rated shipment wins (carrier order, no price sort). The negotiated
    total beats the published one; the published total is kept as base_price.

    Raises:
        CarrierResponseError: response is not a JSON object
    """
    if not response:
        return sentinel_quote()
    if not isinstance(response, dict):
        raise CarrierResponseError(
            "UPS rate response is not a JSON object",
            details={"type": type(response).__name__},
        )

    rate_response = response.get("RateResponse") or {}
    shipments = _as_list(rate_response.get("RatedShipment"))
    if not shipments or not isinstance(shipments[0], dict):
        return sentinel_quote()

    first = shipments[0]
    negotiated = first.get("NegotiatedRateCharges") or {}
    published = first.get("TotalCharges")
    negotiated_total = negotiated.get("TotalCharge")

    total_charges = negotiated_total or published or {}
    total_price = parse_amount(total_charges)
    currency = total_charges.get("CurrencyCode") or "USD"

    negotiated_items = _as_list(negotiated.get("ItemizedCharges"))
    published_items = _as_list(first.get("ItemizedCharges"))
    fuel_item = next(
        (c for c in negotiated_items + published_items if isinstance(c, dict) and _is_fuel(c)),
        None,
    )

    taxes = None
    tax_charges = _as_list(first.get("TaxCharges"))
    if tax_charges:
        taxes = sum((parse_amount(t) for t in tax_charges), Decimal("0"))

    breakdown = None
    if negotiated_items or published_items or published:
        breakdown = RateBreakdown(
            base_price=parse_amount(published),
            fuel_surcharge=parse_amount(fuel_item) if fuel_item else None,
            taxes=taxes,
            other=parse_amount(negotiated_total) if negotiated_total else None,
        )

    estimated_days = None
    business_days = (first.get("GuaranteedDelivery") or {}).get("BusinessDaysInTransit")
    if business_days:
        try:
            estimated_days = int(business_days)
        except (TypeError, ValueError):
            estimated_days = None

    service = first.get("Service") or {}
    return RateQuote(
        service_code=service.get("Code") or SENTINEL_SERVICE_CODE,
        service_name=service.get("Description") or SENTINEL_SERVICE_NAME,
        total_price=total_price,
        currency=currency,
        breakdown=breakdown,
        estimated_days=estimated_days,
    )


# ==================== Tracking ====================


def map_status(carrier_status: str) -> TrackingStatus:
    """Map UPS status type to TrackingStatus."""
    return UPS_STATUS_MAP.get((carrier_status or "").upper().strip(), TrackingStatus.UNKNOWN)


def _parse_event_time(date_str: str, time_str: str) -> Optional[datetime]:
    if not date_str:
        return None
    try:
        return datetime.strptime(
            f"{date_str} {time_str or '000000'}",
            "%Y%m%d %H%M%S"
        ).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def map_tracking_response(tracking_number: str, response: Any) -> TrackingInfo:
    """
    Normalize a UPS trackResponse for the first package of the first shipment.

    Raises:
        CarrierResponseError: no shipment or package in the response
    """
    track_response = response.get("trackResponse", {}) if isinstance(response, dict) else {}
    shipments = _as_list(track_response.get("shipment"))
    if not shipments:
        raise CarrierResponseError("No tracking information found", code="NOT_FOUND")

    packages = _as_list(shipments[0].get("package"))
    if not packages:
        raise CarrierResponseError("No package information found", code="NOT_FOUND")
    package = packages[0]

    events = []
    for activity in _as_list(package.get("activity")):
        status_info = activity.get("status", {})
        location = activity.get("location", {}).get("address", {})
        events.append(TrackingEvent(
            timestamp=_parse_event_time(activity.get("date", ""), activity.get("time", "")),
            status=status_info.get("type", ""),
            description=status_info.get("description", ""),
            city=location.get("city") or None,
            state=location.get("stateProvince") or None,
            country=location.get("country") or None,
        ))

    current = package.get("currentStatus") or {}
    carrier_status = current.get("type") or (events[0].status if events else "")
    status = map_status(carrier_status)
    delivered = status == TrackingStatus.DELIVERED

    delivery_date = None
    if delivered:
        delivery_dates = _as_list(package.get("deliveryDate"))
        if delivery_dates:
            delivery_date = _parse_event_time(delivery_dates[0].get("date", ""), "")
        if delivery_date is None and events:
            delivery_date = events[0].timestamp

    return TrackingInfo(
        tracking_number=package.get("trackingNumber") or tracking_number,
        status=status,
        carrier_status=carrier_status,
        description=current.get("description") or (events[0].description if events else ""),
        delivered=delivered,
        delivery_date=delivery_date,
        events=events,
    )
