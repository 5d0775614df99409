import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from config import ALLOW_ORIGINS, LOG_LEVEL, EngineConfig, load_config
from analysis.engine import DataSource, analyze_location
from analysis.errors import ClimateAnalysisError, EmptySampleSet, InvalidInput, UpstreamUnavailable
from analysis.presets import PRESET_LOCATIONS, get_preset
from utils.download import EarthdataSource

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger("climate.api")

app = FastAPI(title="Climate Probability API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

STATUS_CODES = {
    InvalidInput: 400,
    EmptySampleSet: 422,
    UpstreamUnavailable: 503,
}

_source: Optional[DataSource] = None


def get_source() -> DataSource:
    global _source
    if _source is None:
        _source = EarthdataSource()
    return _source


def get_config() -> EngineConfig:
    return load_config()


def _error(status: int, error_type: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status,
                        content={"success": False, "errorType": error_type, "error": message})


@app.exception_handler(ClimateAnalysisError)
async def analysis_error_handler(request: Request, exc: ClimateAnalysisError):
    status = STATUS_CODES.get(type(exc), 500)
    if status >= 500:
        logger.error("❌ %s %s: %s", request.method, request.url.path, exc)
    return _error(status, exc.error_type, str(exc))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = ", ".join(".".join(str(p) for p in e["loc"][1:]) or "body" for e in exc.errors())
    return _error(400, InvalidInput.error_type, f"Missing or invalid field(s): {fields}")


@app.get("/api/health")
def health():
    return {"status": "ok", "service": "climate-probability"}


@app.get("/api/presets")
def presets():
    return {"success": True, "presets": PRESET_LOCATIONS}


@app.get("/api/presets/{preset_id}")
def preset(preset_id: str):
    p = get_preset(preset_id)
    if p is None:
        raise HTTPException(status_code=404, detail=f"Unknown preset: {preset_id}")
    return {"success": True, "preset": p}


class AnalyzeIn(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    date: str
    locationName: Optional[str] = None


@app.post("/api/analyze-weather")
async def analyze_weather(body: AnalyzeIn,
                          source: DataSource = Depends(get_source),
                          cfg: EngineConfig = Depends(get_config)):
    return await analyze_location(body.lat, body.lon, body.date, source, cfg,
                                  location_name=body.locationName)


@app.get("/api/weather")
async def get_weather(
    latitude: float,
    longitude: float,
    datetime: str,
    locationName: Optional[str] = None,
    source: DataSource = Depends(get_source),
    cfg: EngineConfig = Depends(get_config),
):
    return await analyze_location(latitude, longitude, datetime, source, cfg,
                                  location_name=locationName)

# local test: uvicorn main:app --host 0.0.0.0 --port 8000
