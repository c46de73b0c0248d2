# exactgeo/api/schemas.py

"""
================================================================================
 API data structures (exactgeo/api/schemas.py)
================================================================================

Request and response models of the HTTP surface.

Numbers in requests are exact: either a JSON integer or a string "p/q"
(also "3", "-1/2", "0.25"). JSON floats with a fractional part are rejected,
because a binary float is not the rational the caller meant.

Values in responses follow the kernel's serialization contract:
- a Rational is `{"kind": "rational", "value": "p/q"}`;
- an Oracle is `{"kind": "oracle", "expr": "sqrt(2/1)", "interval": "[lo,hi]"}`.
  The interval is informational only.
"""
from fractions import Fraction
from typing import Annotated, List, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, Field, model_validator


def _check_rational(v):
    if isinstance(v, str):
        try:
            Fraction(v.strip())
        except (ValueError, ZeroDivisionError) as e:
            raise ValueError(f"'{v}' is not a rational number") from e
    return v


ExactNumber = Annotated[Union[int, str], AfterValidator(_check_rational)]

# ==============================================================================
# 1. Request models
# ==============================================================================

class PointSpec(BaseModel):
    """A fixed point."""
    type: Literal["point"] = "point"
    x: ExactNumber = Field(..., description="x coordinate, an integer or a 'p/q' string.")
    y: ExactNumber = Field(..., description="y coordinate, an integer or a 'p/q' string.")


class LineSpec(BaseModel):
    """A line through two points, or a line a*x + b*y + c = 0."""
    type: Literal["line"] = "line"
    through: Optional[List[PointSpec]] = Field(None, min_length=2, max_length=2)
    coeffs: Optional[List[ExactNumber]] = Field(None, min_length=3, max_length=3, description="[a, b, c]")

    @model_validator(mode="after")
    def _one_definition(self):
        if (self.through is None) == (self.coeffs is None):
            raise ValueError("give exactly one of 'through' or 'coeffs'")
        return self


class SegmentSpec(BaseModel):
    type: Literal["segment"] = "segment"
    start: PointSpec
    end: PointSpec


class RaySpec(BaseModel):
    type: Literal["ray"] = "ray"
    origin: PointSpec
    through: PointSpec


class CircleSpec(BaseModel):
    """A circle from its center and exactly one of radius, radius_squared or a point on it."""
    type: Literal["circle"] = "circle"
    center: PointSpec
    radius: Optional[ExactNumber] = None
    radius_squared: Optional[ExactNumber] = None
    point_on_circumference: Optional[PointSpec] = None

    @model_validator(mode="after")
    def _one_size(self):
        given = [self.radius, self.radius_squared, self.point_on_circumference]
        if sum(v is not None for v in given) != 1:
            raise ValueError("give exactly one of 'radius', 'radius_squared' or 'point_on_circumference'")
        return self


ObjectSpec = Annotated[
    Union[PointSpec, LineSpec, SegmentSpec, RaySpec, CircleSpec],
    Field(discriminator="type"),
]


class IntersectRequest(BaseModel):
    first: ObjectSpec
    second: ObjectSpec


class PredicateRequest(BaseModel):
    """
    Operands of a predicate:
    - collinear, concyclic: `points`
    - concurrent, parallel, perpendicular: `lines`
    - on_line: one point and one line; on_circle: one point and one circle
    """
    predicate: Literal[
        "collinear", "concyclic", "concurrent", "on_line", "on_circle", "parallel", "perpendicular"
    ]
    points: List[PointSpec] = Field(default_factory=list)
    lines: List[LineSpec] = Field(default_factory=list)
    circles: List[CircleSpec] = Field(default_factory=list)

# ==============================================================================
# 2. Response models
# ==============================================================================

class ValueOut(BaseModel):
    kind: Literal["rational", "oracle"]
    value: Optional[str] = None
    expr: Optional[str] = None
    interval: Optional[str] = None


class PointOut(BaseModel):
    x: ValueOut
    y: ValueOut
    approx: List[float] = Field(..., description="Float preview [x, y]; not authoritative.")


class IntersectResponse(BaseModel):
    status: Literal["points", "coincident"]
    points: List[PointOut]


class PredicateResponse(BaseModel):
    predicate: str
    result: bool
