# src/sphere_stage/api/v1/endpoints/spheres.py
"""Sphere-related endpoints for the Sphere API."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.orm import Session

from sphere_stage.api.v1.dependencies import CurrentUserDep, GateDep, SessionDep, raise_http_error
from sphere_stage.models import Satellite, Sphere
from sphere_stage.schemas.sphere import (
    SatelliteCreate,
    SatelliteResponse,
    SphereCreate,
    SphereResponse,
)
from sphere_stage.services import content
from sphere_stage.services.errors import RankingError

router = APIRouter(prefix="/spheres", tags=["spheres"])


def _get_sphere_or_404(db: Session, slug: str) -> Sphere:
    sphere = db.query(Sphere).filter(Sphere.slug == slug).first()
    if sphere is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sphere not found")
    return sphere


@router.get("/", response_model=list[SphereResponse])
async def list_spheres(db: SessionDep) -> list[Sphere]:
    """List all spheres."""
    return db.query(Sphere).order_by(Sphere.slug).all()


@router.get("/{slug}", response_model=SphereResponse)
async def get_sphere(slug: str, db: SessionDep) -> Sphere:
    """Get a specific sphere by slug."""
    return _get_sphere_or_404(db, slug)


@router.post("/", response_model=SphereResponse, status_code=status.HTTP_201_CREATED)
async def create_sphere(
    sphere_data: SphereCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Sphere:
    """Create a new sphere; the creator becomes its moderator."""
    try:
        return content.create_sphere(
            db,
            creator=current_user,
            slug=sphere_data.slug,
            display_name=sphere_data.display_name,
            description_md=sphere_data.description_md,
        )
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err


@router.get("/{slug}/satellites", response_model=list[SatelliteResponse])
async def list_satellites(slug: str, db: SessionDep) -> list[Satellite]:
    """List the satellites of a sphere."""
    sphere = _get_sphere_or_404(db, slug)
    return db.query(Satellite).filter(Satellite.sphere_id == sphere.id).order_by(Satellite.id).all()


@router.post(
    "/{slug}/satellites",
    response_model=SatelliteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_satellite(
    slug: str,
    satellite_data: SatelliteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    gate: GateDep,
) -> Satellite:
    """Add a satellite to a sphere (moderators only)."""
    sphere = _get_sphere_or_404(db, slug)
    try:
        return content.create_satellite(
            db,
            gate,
            moderator=current_user,
            sphere_id=sphere.id,
            title=satellite_data.title,
        )
    except RankingError as err:
        raise_http_error(err)
