"""
FastAPI backend: REST API for relationship health and connection paths.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from neo4j import AsyncGraphDatabase
from pydantic import BaseModel, Field

from orbit.application import (
    ConnectionService,
    HealthService,
    Invalid,
    PathFound,
    StoreFailed,
)
from orbit.domain import ContactHealthRecord, TargetPerson
from orbit.domain.graph import DEFAULT_MAX_DEPTH, DEFAULT_MAX_PATHS
from orbit.domain.health import health_color
from orbit.infrastructure import (
    Neo4jHealthStore,
    Neo4jNetworkStore,
    ensure_health_constraints,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

# Optional: multi-user placeholder (REST)
USER_ID_HEADER = "X-User-Id"
DEFAULT_USER_ID = "default"


def _max_path_depth(requested: int | None = None) -> int:
    """Depth from the query when given (0 included), else ORBIT_MAX_PATH_DEPTH."""
    if requested is not None:
        return requested
    raw = os.environ.get("ORBIT_MAX_PATH_DEPTH", "").strip()
    try:
        return int(raw) if raw else DEFAULT_MAX_DEPTH
    except ValueError:
        logger.warning("Ignoring invalid ORBIT_MAX_PATH_DEPTH=%r", raw)
        return DEFAULT_MAX_DEPTH


def _get_driver():
    uri = os.environ.get("NEO4J_URI", "bolt://localhost:7687").strip()
    user = os.environ.get("NEO4J_USER", "neo4j").strip()
    password = os.environ.get("NEO4J_PASSWORD", "password").strip()
    return AsyncGraphDatabase.driver(uri, auth=(user, password))


def _get_cached_driver(app: FastAPI):
    if getattr(app.state, "driver", None) is None:
        app.state.driver = _get_driver()
    return app.state.driver


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.driver = None
    try:
        app.state.driver = _get_driver()
        await ensure_health_constraints(app.state.driver)
        yield
    finally:
        if getattr(app.state, "driver", None) is not None:
            await app.state.driver.close()


app = FastAPI(title="Orbit API", lifespan=lifespan)


def get_user_id(x_user_id: str | None = Header(None, alias=USER_ID_HEADER)) -> str:
    return (x_user_id or "").strip() or DEFAULT_USER_ID


def get_health_service(request: Request) -> HealthService:
    store = Neo4jHealthStore(_get_cached_driver(request.app))
    return HealthService(store, alerts=store)


def get_connection_service(request: Request) -> ConnectionService:
    network = Neo4jNetworkStore(_get_cached_driver(request.app))
    return ConnectionService(network, network)


def _raise_for_failure(result) -> None:
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    if isinstance(result, StoreFailed):
        raise HTTPException(status_code=502, detail=result.message)


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- REST: relationship health ---


class HealthRecordItem(BaseModel):
    contact_id: str
    tier: int | None = None
    health_score: int
    status: str
    color: str
    days_since_contact: int
    last_contact_at: str | None = None
    last_calculated_at: str | None = None


class ScoreBody(BaseModel):
    score: float


class RefreshResult(BaseModel):
    updated: int
    schema_ready: bool


class StatsResult(BaseModel):
    total: int
    healthy: int
    cooling: int
    at_risk: int
    cold: int
    needs_attention: int
    average_health: int | None = None


def _record_item(record: ContactHealthRecord) -> HealthRecordItem:
    return HealthRecordItem(
        contact_id=record.contact_id,
        tier=record.tier,
        health_score=record.health_score,
        status=record.status.value,
        color=health_color(record.status),
        days_since_contact=record.days_since_contact,
        last_contact_at=(
            record.last_contact_at.isoformat() if record.last_contact_at else None
        ),
        last_calculated_at=(
            record.last_calculated_at.isoformat() if record.last_calculated_at else None
        ),
    )


@app.post("/health-scores/refresh")
async def refresh_health_scores(
    user_id: str = Depends(get_user_id),
    service: HealthService = Depends(get_health_service),
) -> RefreshResult:
    result = await service.refresh_health_scores(user_id)
    _raise_for_failure(result)
    return RefreshResult(updated=result.updated, schema_ready=result.schema_ready)


@app.get("/health-scores")
async def list_health_scores(
    user_id: str = Depends(get_user_id),
    service: HealthService = Depends(get_health_service),
) -> list[HealthRecordItem]:
    result = await service.get_health_scores(user_id)
    _raise_for_failure(result)
    return [_record_item(r) for r in result.records]


@app.get("/health-scores/stats")
async def health_stats(
    user_id: str = Depends(get_user_id),
    service: HealthService = Depends(get_health_service),
) -> StatsResult:
    result = await service.get_health_stats(user_id)
    _raise_for_failure(result)
    summary = result.summary
    return StatsResult(
        total=summary.total,
        needs_attention=summary.needs_attention,
        average_health=summary.average_health,
        **summary.counts,
    )


@app.get("/contacts/{contact_id}/health")
async def contact_health(
    contact_id: str,
    user_id: str = Depends(get_user_id),
    service: HealthService = Depends(get_health_service),
) -> HealthRecordItem:
    result = await service.get_contact_health(user_id, contact_id)
    _raise_for_failure(result)
    if result.record is None:
        raise HTTPException(status_code=404, detail="No health record for contact")
    return _record_item(result.record)


@app.post("/contacts/{contact_id}/interactions", status_code=201)
async def log_interaction(
    contact_id: str,
    user_id: str = Depends(get_user_id),
    service: HealthService = Depends(get_health_service),
) -> HealthRecordItem | None:
    result = await service.log_interaction(user_id, contact_id)
    _raise_for_failure(result)
    return _record_item(result.record) if result.record else None


@app.put("/contacts/{contact_id}/health-score")
async def update_health_score(
    contact_id: str,
    body: ScoreBody,
    user_id: str = Depends(get_user_id),
    service: HealthService = Depends(get_health_service),
) -> HealthRecordItem | None:
    result = await service.update_health_score(user_id, contact_id, body.score)
    _raise_for_failure(result)
    return _record_item(result.record) if result.record else None


# --- REST: connection network ---


class TargetBody(BaseModel):
    name: str
    company: str | None = None
    title: str | None = None
    linkedin_url: str | None = None


class ContactItem(BaseModel):
    id: str
    name: str


class PathResult(BaseModel):
    path: list[str] | None = None
    degrees: int | None = None
    target_contact: ContactItem | None = None
    message: str | None = None
    candidates: list[ContactItem] = Field(default_factory=list)


class NetworkStatsResult(BaseModel):
    node_count: int
    edge_count: int
    max_degree: int
    avg_degree: float
    density: float


@app.post("/network/path-to-target")
async def path_to_target(
    body: TargetBody,
    max_depth: int | None = None,
    user_id: str = Depends(get_user_id),
    service: ConnectionService = Depends(get_connection_service),
) -> PathResult:
    target = TargetPerson(
        name=body.name,
        company=body.company,
        title=body.title,
        linkedin_url=body.linkedin_url,
    )
    result = await service.find_path_to_target(
        user_id, target, max_depth=_max_path_depth(max_depth)
    )
    _raise_for_failure(result)
    if isinstance(result, PathFound):
        contact = result.target_contact
        return PathResult(
            path=result.path,
            degrees=result.degrees,
            target_contact=ContactItem(id=contact.id, name=contact.name),
        )
    return PathResult(
        message=result.message,
        candidates=[ContactItem(id=c.id, name=c.name) for c in result.candidates],
    )


@app.get("/network/paths")
async def network_paths(
    start: str,
    end: str,
    max_paths: int = DEFAULT_MAX_PATHS,
    max_depth: int | None = None,
    user_id: str = Depends(get_user_id),
    service: ConnectionService = Depends(get_connection_service),
) -> list[list[str]]:
    return await service.find_paths(
        user_id, start, end, max_paths=max_paths, max_depth=_max_path_depth(max_depth)
    )


@app.get("/network/stats")
async def network_stats(
    user_id: str = Depends(get_user_id),
    service: ConnectionService = Depends(get_connection_service),
) -> NetworkStatsResult:
    stats = await service.network_stats(user_id)
    return NetworkStatsResult(
        node_count=stats.node_count,
        edge_count=stats.edge_count,
        max_degree=stats.max_degree,
        avg_degree=stats.avg_degree,
        density=stats.density,
    )
