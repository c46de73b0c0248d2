# exactgeo/api/main.py

"""
================================================================================
 HTTP entry point (exactgeo/api/main.py)
================================================================================

A thin FastAPI layer over the exact kernel. Interactive docs are served at
/docs while the server runs (`exactgeo-api`, or
`uvicorn exactgeo.api.main:app`).

Endpoints:
- **`POST /intersect`**: intersect two objects (point coordinates, lines,
  segments, rays, circles) and return the exact intersection points.
- **`POST /predicate`**: evaluate one predicate (collinear, concyclic,
  concurrent, on_line, on_circle, parallel, perpendicular).

Error responses:
- **HTTP 422**: malformed request, non-rational number, wrong operand count,
  or a pair of object types that cannot be intersected.
- **HTTP 400**: `DegenerateConstruction`, e.g. a line through two equal points.
- **HTTP 409**: `IndeterminatePredicate`, a sign the kernel could not decide.
  This is not a "false".
"""
import logging

from fastapi import FastAPI, HTTPException

from exactgeo.api.schemas import (
    IntersectRequest,
    IntersectResponse,
    PointOut,
    PredicateRequest,
    PredicateResponse,
    ValueOut,
)
from exactgeo.config import settings
from exactgeo.geometry import kernels, predicates
from exactgeo.geometry.errors import DegenerateConstruction, IndeterminatePredicate
from exactgeo.geometry.primitives import (
    circle,
    circle_r2,
    circle_through,
    line,
    line_from_eq,
    point,
    ray,
    segment,
)

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Exact Geometry Kernel",
    description="Exact line/circle intersections and predicates over rationals and refinable oracles.",
    version="0.1.0",
)

# ==============================================================================
# Marshalling: request specs -> kernel objects
# ==============================================================================

def _point(spec):
    return point(spec.x, spec.y)


def _line(spec):
    if spec.coeffs is not None:
        return line_from_eq(*spec.coeffs)
    return line(*(_point(p) for p in spec.through))


def _circle(spec):
    center = _point(spec.center)
    if spec.radius is not None:
        return circle(center, spec.radius)
    if spec.radius_squared is not None:
        return circle_r2(center, spec.radius_squared)
    return circle_through(center, _point(spec.point_on_circumference))


_BUILDERS = {
    "point": _point,
    "line": _line,
    "segment": lambda s: segment(_point(s.start), _point(s.end)),
    "ray": lambda s: ray(_point(s.origin), _point(s.through)),
    "circle": _circle,
}


def _build(spec):
    return _BUILDERS[spec.type](spec)


def _point_out(p, approx_row):
    return PointOut(x=ValueOut(**p.x.to_dict()), y=ValueOut(**p.y.to_dict()), approx=[float(v) for v in approx_row])


# ==============================================================================
# Endpoints
# ==============================================================================

@app.post("/intersect", response_model=IntersectResponse, tags=["Kernel"])
def intersect_objects(request: IntersectRequest):
    """
    Intersect two objects.

    `status` is "points" with 0-2 exact points, or "coincident" when the
    objects share infinitely many points (then `points` is empty).
    """
    try:
        first, second = _build(request.first), _build(request.second)
        result = kernels.intersect(first, second)
        if isinstance(result, kernels.Coincident):
            return IntersectResponse(status="coincident", points=[])
        preview = kernels.to_array(result)
        points = [_point_out(p, row) for p, row in zip(result, preview)]
    except DegenerateConstruction as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IndeterminatePredicate as e:
        raise HTTPException(status_code=409, detail=str(e))
    except TypeError as e:
        raise HTTPException(status_code=422, detail=str(e))

    logger.info("intersect %s x %s -> %d point(s)", request.first.type, request.second.type, len(points))
    return IntersectResponse(status="points", points=points)


def _operands(request):
    points = [_point(p) for p in request.points]
    lines = [_line(l) for l in request.lines]
    circles = [_circle(c) for c in request.circles]
    name = request.predicate

    if name in ("collinear", "concyclic"):
        return points
    if name == "concurrent":
        return lines
    if name in ("parallel", "perpendicular"):
        if len(lines) != 2:
            raise ValueError(f"{name} needs exactly two lines")
        return lines
    if name == "on_line":
        if len(points) != 1 or len(lines) != 1:
            raise ValueError("on_line needs one point and one line")
        return [points[0], lines[0]]
    if len(points) != 1 or len(circles) != 1:
        raise ValueError("on_circle needs one point and one circle")
    return [points[0], circles[0]]


@app.post("/predicate", response_model=PredicateResponse, tags=["Kernel"])
def evaluate_predicate(request: PredicateRequest):
    """Evaluate one exact predicate."""
    try:
        args = _operands(request)
        result = getattr(predicates, request.predicate)(*args)
    except DegenerateConstruction as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IndeterminatePredicate as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    logger.info("%s over %d operand(s) -> %s", request.predicate, len(args), result)
    return PredicateResponse(predicate=request.predicate, result=result)


@app.get("/", include_in_schema=False)
def root():
    """Health check."""
    return {"message": "Exact geometry kernel is running. See /docs for the API."}


def run():
    import uvicorn

    uvicorn.run("exactgeo.api.main:app", host="127.0.0.1", port=8000)
