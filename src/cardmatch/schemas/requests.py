from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from cardmatch.domain.errors import ValidationError
from cardmatch.domain.models import Coordinates


class RecommendRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", str_strip_whitespace=True)

    category: str | None = None
    business_id: str | None = Field(default=None, alias="businessId")
    business_name: str | None = Field(default=None, alias="businessName")
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)

    @field_validator("category", "business_id", "business_name")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None

    @model_validator(mode="after")
    def _lat_lng_together(self) -> "RecommendRequest":
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together.")
        return self

    @property
    def coordinates(self) -> Coordinates | None:
        if self.lat is None or self.lng is None:
            return None
        return Coordinates(lat=self.lat, lng=self.lng)

    def has_target(self) -> bool:
        return bool(self.category or self.business_id or self.business_name)


def parse_recommend_request(data: dict[str, Any]) -> RecommendRequest:
    """Validate raw request fields, raising the service's ValidationError."""
    try:
        return RecommendRequest.model_validate(data)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'request'}: {error['msg']}"
            for error in exc.errors()
        )
        raise ValidationError(f"Invalid recommendation request: {problems}") from exc
