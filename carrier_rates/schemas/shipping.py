"""
Shipping Schemas

Pydantic models for rate request input. Checked once, before any carrier
is contacted.
"""
from typing import Any, List, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from carrier_rates.core.exceptions import ValidationError
from carrier_rates.models.rates import (
    Address,
    DimensionUnit,
    Dimensions,
    PackageInfo,
    RateRequest,
    WeightUnit,
)

MAX_PACKAGES = 50


# ==================== Address Schemas ====================


class AddressSchema(BaseModel):
    """Postal address input."""
    address_line1: str = Field(..., min_length=1, description="Address line 1 is required")
    address_line2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=2, description="2-letter state code")
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=2, max_length=2, description="2-letter country code")

    @field_validator("country", "state")
    @classmethod
    def upper_codes(cls, v):
        return v.upper()

    def to_model(self) -> Address:
        return Address(
            address_line1=self.address_line1,
            address_line2=self.address_line2,
            city=self.city,
            state=self.state,
            postal_code=self.postal_code,
            country=self.country,
        )


# ==================== Package Schemas ====================


class DimensionsSchema(BaseModel):
    length: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    unit: Literal["IN", "CM"]


class PackageSchema(BaseModel):
    """Package weight and optional dimensions."""
    weight: float = Field(..., gt=0, description="Weight must be positive")
    weight_unit: Literal["LB", "KG"] = "LB"
    dimensions: Optional[DimensionsSchema] = None

    def to_model(self) -> PackageInfo:
        dims = None
        if self.dimensions:
            dims = Dimensions(
                length=self.dimensions.length,
                width=self.dimensions.width,
                height=self.dimensions.height,
                unit=DimensionUnit(self.dimensions.unit),
            )
        return PackageInfo(
            weight=self.weight,
            weight_unit=WeightUnit(self.weight_unit),
            dimensions=dims,
        )


# ==================== Rate Schemas ====================


class RateRequestSchema(BaseModel):
    """Request shipping rates."""
    origin: AddressSchema
    destination: AddressSchema
    packages: List[PackageSchema] = Field(..., min_length=1, max_length=MAX_PACKAGES)
    service_level: Optional[str] = Field(None, description="Carrier service code (optional)")

    def to_model(self) -> RateRequest:
        return RateRequest(
            origin=self.origin.to_model(),
            destination=self.destination.to_model(),
            packages=tuple(pkg.to_model() for pkg in self.packages),
            service_level=self.service_level,
        )


def validate_rate_request(payload: Mapping[str, Any]) -> RateRequest:
    """
    Validate raw input and build an immutable RateRequest.

    Raises:
        ValidationError: with one {field, message} entry per violated constraint
    """
    try:
        schema = RateRequestSchema.model_validate(payload)
    except PydanticValidationError as e:
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in e.errors()
        ]
        raise ValidationError(
            f"Invalid rate request: {len(errors)} error(s)",
            errors=errors,
        )
    return schema.to_model()
