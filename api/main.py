from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
import pandas as pd

from stationclim.config import STATION_KEY
from stationclim.grouping import any_missing_by_group, keys_where
from stationclim.missing import normalize_sentinel

app = FastAPI(
    title="Station Climate Missing-Data API",
    description="API for scanning monthly station records for missing measurements.",
    version="1.0.0",
)

# Pydantic model for the missing-value scan request body
class MissingScanRequest(BaseModel):
    target: str = "precip_mm"
    key: str = STATION_KEY
    # When set, this numeric code is treated as missing before scanning (e.g. -9999).
    sentinel: Optional[float] = None
    rows: List[Dict[str, Any]]

@app.post("/missing", summary="Stations with missing values", response_description="Per-station missing flags")
async def missing(request: MissingScanRequest):
    """
    Accepts station rows and returns, for every distinct station key, whether any
    row of that station has a missing `target` value. `null` values count as
    missing; so does `sentinel` when provided.
    """
    table = pd.DataFrame(request.rows)

    if request.rows:
        absent_cols = [c for c in (request.key, request.target) if c not in table.columns]
        if absent_cols:
            raise HTTPException(
                status_code=400,
                detail=f"Rows must contain columns {absent_cols}.",
            )
    else:
        table = pd.DataFrame({request.key: [], request.target: []})

    if request.sentinel is not None:
        table = normalize_sentinel(table, [request.target], sentinel=request.sentinel)

    result = any_missing_by_group(table, request.target, request.key)
    return {
        "result": {str(k): bool(v) for k, v in result.items()},
        "stations_with_missing": sorted(str(k) for k in keys_where(result, True)),
    }

@app.get("/health", summary="Health check", response_description="API health status")
async def health_check():
    """
    Checks the health of the API.
    """
    return {"status": "ok"}
