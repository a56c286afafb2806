"""
FastAPI server exposing the concept analysis API.
Endpoints:
- GET /health: basic health check
- POST /analyze: runs the full analysis for one pitch and returns the report

Startup loads the bundled data (or CONCEPTLENS_DATA_DIR when set) once and
builds a single engine shared by every request.
"""

# Import standard libraries for env settings and timing
import os  # env-based settings
import time  # measure startup and request latencies
from typing import Any, Dict, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for request models
from fastapi import FastAPI, HTTPException  # FastAPI primitives
from pydantic import BaseModel, ConfigDict, Field  # request schema definitions

# Import our internal modules
from conceptlens.engine import ConceptEngine  # analysis pipeline
from conceptlens.models import ConceptInput  # engine input record

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Instantiate the FastAPI application with metadata
app = FastAPI(title="ConceptLens API", version="1.0.0")  # web app

# Globals that hold the engine instance and measured startup time
ENGINE: Optional[ConceptEngine] = None  # will point to the initialized engine
STARTUP_TIME_S: float = 0.0  # measures how long startup took


def _env_flag(name: str, default: bool = True) -> bool:
	value = os.getenv(name)
	if value is None:
		return default
	return value.strip().lower() not in ('0', 'false', 'no', 'off')


# Pydantic model for the analysis request (camelCase aliases accepted)
class AnalyzeRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	logline: str  # one or two sentence premise
	genre: str  # primary genre
	format: str  # Feature Film | Series | Limited Series
	secondary_genre: Optional[str] = Field(None, alias='secondaryGenre')
	tone: Optional[str] = None
	target_audience: Optional[str] = Field(None, alias='targetAudience')
	budget_tier: Optional[str] = Field(None, alias='budgetTier')
	synopsis: Optional[str] = None
	user_comparable: Optional[str] = Field(None, alias='userSuppliedComparable')

	def to_concept(self) -> ConceptInput:
		return ConceptInput(**self.model_dump())


# FastAPI startup hook to initialize the engine once
@app.on_event("startup")
async def startup_event():
	"""Initialize the analysis engine and log how long it took."""
	global ENGINE, STARTUP_TIME_S  # refer to module-level globals
	start = time.time()  # start timer for startup latency

	logger.info("[API] Startup: loading data and initializing engine...")  # log intent

	data_dir = os.getenv('CONCEPTLENS_DATA_DIR') or None  # optional override
	deep_pass = _env_flag('CONCEPTLENS_DEEP_PASS')  # deep pass on by default
	ENGINE = ConceptEngine(data_dir=data_dir, deep_pass=deep_pass)  # create engine

	STARTUP_TIME_S = time.time() - start  # elapsed seconds
	logger.info(f"[API] Startup complete in {STARTUP_TIME_S:.2f}s (deep_pass={deep_pass}).")  # summary log


# Simple health endpoint for readiness checks
@app.get("/health")
async def health():
	"""Return minimal health info for liveness/readiness probes."""
	return {
		"status": "ok",  # constant indicator
		"engine_ready": ENGINE is not None,  # True if engine initialized
		"startup_seconds": round(STARTUP_TIME_S, 2),  # startup latency
		"corpus_size": len(ENGINE.corpus) if ENGINE is not None else 0,  # loaded comparables
	}


# Main analysis endpoint
@app.post("/analyze")
def analyze(request: AnalyzeRequest) -> Dict[str, Any]:
	"""Run the analysis pipeline and return the report with timing."""
	if ENGINE is None:  # engine must be ready to serve
		logger.warning("[API] Analysis requested but engine not initialized")  # guard log
		raise HTTPException(status_code=503, detail="Engine not initialized")

	start = time.time()  # start timer
	logger.debug(f"[API] /analyze genre='{request.genre}' format='{request.format}'")  # debug log of input

	report = ENGINE.analyze(request.to_concept())  # run pipeline
	elapsed_ms = (time.time() - start) * 1000  # compute ms
	logger.info(f"[API] /analyze served {len(report.comparables)} comparables in {elapsed_ms:.2f} ms")  # summary

	payload = report.to_dict()
	payload['elapsed_ms'] = round(elapsed_ms, 2)
	return payload
