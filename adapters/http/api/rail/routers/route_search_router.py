from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from core.config import settings
from core.rate_limiter import limiter, RateLimits
from adapters.http.api.rail.schemas import (
    ItineraryLegResponse,
    PresenceNodeResponse,
    RouteItineraryResponse,
    RouteSearchResponse,
    StationListResponse,
    StationResponse,
)
from src.rail_bc.routing import (
    ItinerarySummarizer,
    NetworkStore,
    RouteSearchOrchestrator,
    StationNotFoundError,
)

router = APIRouter(prefix="/rail", tags=["rail"])


def get_network_store() -> NetworkStore:
    """Dependency returning the loaded network store."""
    store = NetworkStore.get_instance()
    if not store.is_loaded:
        raise HTTPException(status_code=503, detail="Network data is being loaded")
    return store


@router.get("/stations", response_model=StationListResponse)
@limiter.limit(RateLimits.STATIONS)
def list_stations(
    request: Request,
    name: Optional[str] = Query(None, description="Filter by station name prefix"),
    store: NetworkStore = Depends(get_network_store),
):
    """List stations, optionally filtered by name prefix."""
    stations = store.dataset.stations
    if name:
        stations = [s for s in stations if s.name.startswith(name)]

    return StationListResponse(stations=[
        StationResponse(id=s.id, name=s.name, company=s.company, line=s.line, x=s.x, y=s.y)
        for s in stations
    ])


@router.get("/route-search", response_model=RouteSearchResponse)
@limiter.limit(RateLimits.ROUTE_SEARCH)
def search_route(
    request: Request,
    from_name: str = Query(..., alias="from", min_length=1, description="Origin station name"),
    to_name: str = Query(..., alias="to", min_length=1, description="Destination station name"),
    store: NetworkStore = Depends(get_network_store),
):
    """Search up to three itineraries between two station names.

    Each itinerary comes from a different cost profile:
    - fastest: plain travel time
    - transfer-averse: transfers and walks weigh an extra 3 minutes
    - local-preferring: express rides and transfers are penalized

    Reported times and distances never include those penalties.

    **Example requests:**
    ```
    GET /api/v1/rail/route-search?from=Central&to=Harbor
    ```
    """
    routing = settings.routing
    dataset, graph = store.snapshot(routing.graph_parameters())

    orchestrator = RouteSearchOrchestrator(
        dataset,
        graph,
        profiles=routing.cost_profiles(),
        max_results=routing.MAX_RESULTS,
    )
    try:
        results = orchestrator.search(from_name, to_name)
    except StationNotFoundError as e:
        return RouteSearchResponse(success=False, message=str(e))

    if not results:
        return RouteSearchResponse(success=True, message="No route found", routes=[])

    summarizer = ItinerarySummarizer(dataset)
    routes = []
    for result in results:
        itinerary = summarizer.summarize(result)
        routes.append(RouteItineraryResponse(
            profile=itinerary.profile,
            time_seconds=round(itinerary.time, 1),
            time_minutes=itinerary.time_minutes,
            distance_meters=round(itinerary.distance),
            transfers=itinerary.transfers,
            path=[PresenceNodeResponse(**node.to_dict()) for node in result.path],
            legs=[
                ItineraryLegResponse(
                    type=leg.type,
                    origin=leg.from_name,
                    destination=leg.to_name,
                    origin_id=leg.from_station_id,
                    destination_id=leg.to_station_id,
                    company=leg.company,
                    line=leg.line,
                    service_type=leg.service_type,
                    duration_seconds=round(leg.time, 1),
                    distance_meters=round(leg.distance),
                    hops=leg.hops,
                )
                for leg in itinerary.legs
            ],
        ))

    return RouteSearchResponse(success=True, routes=routes)
