"""
FastAPI server for the ETT/SAD fit matcher.

Provides REST endpoints over the catalog views and the matching pipeline.
Catalogs are read on every request; the core keeps no state between calls.

WARNING: Geometric fit only, NOT a clinical recommendation.
"""

from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from airwayfit import __version__
from airwayfit.canonical.normalizer import canonical_manufacturer, canonical_name
from airwayfit.catalog.index import build_catalog_index
from airwayfit.errors import AmbiguousBrandError
from airwayfit.catalog.loader import load_catalogs
from airwayfit.matching.pipeline import run_match
from airwayfit.models.outputs import BrandOption, CanonicalKey, EttNameOption, MatchView, Verdict
from airwayfit.models.policy import MatchPolicy, Selection

# Create FastAPI app
app = FastAPI(
    title="Airway Fit API",
    description="""
    Which endotracheal tubes pass through which supraglottic airway devices.

    **WARNING**: Geometric classification from manufacturer-reported
    diameters only. NOT a clinical recommendation.
    """,
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    sad_count: int
    ett_count: int


class MatchRequest(BaseModel):
    """Request body for the match endpoint."""
    selection: Selection
    policy: MatchPolicy = Field(default_factory=MatchPolicy)


@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check if the API is running and how many records it sees."""
    catalogs = load_catalogs()
    return HealthResponse(
        status="healthy",
        version=__version__,
        sad_count=len(catalogs.sads),
        ett_count=len(catalogs.etts),
    )


@app.get("/brands", response_model=list[BrandOption], tags=["Catalog"])
async def list_brands():
    """SAD brand/model options, one per canonical key."""
    return build_catalog_index(load_catalogs()).brand_options()


@app.get("/sizes", response_model=list[float], tags=["Catalog"])
async def list_sizes(
    name: str = Query(..., description="SAD brand/model, any spelling"),
    manufacturer: Optional[str] = Query(default=None, description="SAD manufacturer"),
):
    """Sizes available for one SAD brand, ascending."""
    key = CanonicalKey(
        name=canonical_name(name),
        manufacturer=canonical_manufacturer(manufacturer),
    )
    if not key.is_groupable:
        raise HTTPException(status_code=400, detail="Device name is empty after normalization")
    index = build_catalog_index(load_catalogs())
    try:
        return index.sizes_for(index.resolve(key))
    except AmbiguousBrandError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@app.get("/ett-names", response_model=list[EttNameOption], tags=["Catalog"])
async def list_ett_names():
    """ETT name options, one per canonical name."""
    return build_catalog_index(load_catalogs()).ett_names


@app.get("/policy/default", response_model=MatchPolicy, tags=["Reference"])
async def default_policy():
    """The default matching policy."""
    return MatchPolicy()


@app.get("/verdicts", tags=["Reference"])
async def list_verdicts():
    """Get list of verdict states."""
    return {
        "verdicts": [v.value for v in Verdict],
        "descriptions": {
            "fit": "Clearance is at least the tolerance",
            "tight": "Tube passes but clearance is below the tolerance",
            "no-fit": "Tube outer diameter exceeds the device lumen",
            "unknown": "A diameter is missing or unreadable",
        },
    }


@app.post("/match", response_model=MatchView, tags=["Matching"])
async def match(request: MatchRequest):
    """
    Classify ETTs against the selected SAD.

    Returns rows ordered by group, inner diameter (largest first) and outer
    diameter (smallest first). An empty result is a normal response with
    empty=true and a message.

    Device and ETT names may use any catalog spelling; a device name alone
    resolves when only one manufacturer lists it.
    """
    catalogs = load_catalogs()
    selection = request.selection
    brand = CanonicalKey(
        name=canonical_name(selection.brand.name),
        manufacturer=canonical_manufacturer(selection.brand.manufacturer),
    )
    try:
        brand = build_catalog_index(catalogs).resolve(brand)
    except AmbiguousBrandError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    selection = Selection(
        brand=brand,
        size=selection.size,
        ett_names=[canonical_name(name) for name in selection.ett_names],
    )
    return run_match(catalogs, selection, request.policy)
