from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from area_agent.agent.resolution_core import AreaResolutionAgent, get_resolution_agent
from area_agent.models.schemas import (
    Area, CentroidResponse, GeocodeRequest, GeocodeResult, PointRequest, ResolutionResult,
    ResolveRequest, ReverseGeocodeResponse, StructuredResolveRequest,
)
from area_agent.services.area_index import find_all_containing_areas
from area_agent.services.area_store import AreaStore
from area_agent.services.geometry import polygon_centroid

router = APIRouter(prefix="/api/v1", tags=["Area Resolution"])


@lru_cache()
def get_area_store() -> AreaStore:
    return AreaStore()


async def _current_areas(store: AreaStore) -> List[Area]:
    # Areas are edited elsewhere; take a fresh snapshot for every resolution, off the event loop
    return await run_in_threadpool(store.reload)


@router.get("/areas", response_model=List[Area])
async def list_areas(store: AreaStore = Depends(get_area_store)):
    """Lists all known areas, sorted by name."""
    return store.get_all_areas()


@router.get("/areas/{area_id}/centroid", response_model=CentroidResponse)
async def area_centroid(area_id: str, store: AreaStore = Depends(get_area_store)):
    """Returns the label anchor point of an area."""
    area = store.get_area(area_id)
    if not area:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Area '{area_id}' not found.")
    centroid = polygon_centroid(area.outer_ring())
    if centroid is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Area '{area_id}' has no geometry.")
    return CentroidResponse(area_id=area.id, lat=centroid[0], lng=centroid[1])


@router.post("/containing-areas", response_model=List[Area])
async def containing_areas(point: PointRequest, store: AreaStore = Depends(get_area_store)):
    """Lists every area containing the point; more than one means the areas overlap."""
    return find_all_containing_areas((point.lat, point.lng), store.get_all_areas())


@router.post("/resolve", response_model=ResolutionResult)
async def resolve_area(
    request: ResolveRequest,
    store: AreaStore = Depends(get_area_store),
    agent: AreaResolutionAgent = Depends(get_resolution_agent),
):
    """
    Assigns an entity to an area from its coordinate and/or free-text address.
    Always answers 200; `method` and `confidence` say how the assignment was reached.
    """
    areas = await _current_areas(store)
    return await run_in_threadpool(agent.resolve, request.lat, request.lng, request.address, areas)


@router.post("/resolve/structured", response_model=ResolutionResult)
async def resolve_area_structured(
    request: StructuredResolveRequest,
    store: AreaStore = Depends(get_area_store),
    agent: AreaResolutionAgent = Depends(get_resolution_agent),
):
    """Same as /resolve, with the address given as Thai administrative parts."""
    areas = await _current_areas(store)
    return await run_in_threadpool(
        agent.resolve_structured,
        request.lat, request.lng,
        request.address_line, request.subdistrict, request.district, request.province,
        areas,
    )


@router.post("/geocode", response_model=GeocodeResult)
async def geocode_address(
    request: GeocodeRequest,
    agent: AreaResolutionAgent = Depends(get_resolution_agent),
):
    result = await run_in_threadpool(agent.geocoding_client.geocode, request.address)
    if not result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found for the given address.")
    return result


@router.post("/reverse-geocode", response_model=ReverseGeocodeResponse)
async def reverse_geocode(
    point: PointRequest,
    agent: AreaResolutionAgent = Depends(get_resolution_agent),
):
    display_name = await run_in_threadpool(agent.geocoding_client.reverse_geocode, point.lat, point.lng)
    if not display_name:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No address found for the given coordinate.")
    return ReverseGeocodeResponse(display_name=display_name)
