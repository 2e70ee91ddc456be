"""HTTP routes for the hexfog API."""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field, model_validator

from hexfog.api.runtime import ApiState, EntityConflictError, EntityNotFoundError, MapSession
from hexfog.domain.diff import VisibilitySnapshot
from hexfog.domain.enums import (
    Promotion,
    ResourceType,
    TerrainFeature,
    TerrainType,
    UnitType,
    VisibilityState,
)
from hexfog.domain.models import City, CityID, PlayerID, Resource, Tile, Unit, UnitID
from hexfog.domain.selection import CitySelected, SelectionResult, UnitSelected
from hexfog.domain.visibility import VisibilityTransitionError
from hexfog.utils.hex_math import HexCoord

router = APIRouter()

T = TypeVar("T")


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


class CoordModel(BaseModel):
    q: int
    r: int

    def to_coord(self) -> HexCoord:
        return HexCoord(q=self.q, r=self.r)


class TileModel(CoordModel):
    terrain: TerrainType = TerrainType.PLAINS
    features: list[TerrainFeature] = Field(default_factory=list)
    resource: ResourceType | None = None
    resource_quantity: int = Field(default=1, ge=1)
    improvement: str | None = None
    owner: str | None = None
    visibility: VisibilityState = VisibilityState.HIDDEN

    def to_tile(self) -> Tile:
        return Tile(
            coord=self.to_coord(),
            terrain=self.terrain,
            features=frozenset(self.features),
            resource=(
                Resource(kind=self.resource, quantity=self.resource_quantity)
                if self.resource is not None
                else None
            ),
            improvement=self.improvement,
            owner=PlayerID(self.owner) if self.owner is not None else None,
            visibility=self.visibility,
        )


class CreateMapRequest(BaseModel):
    tiles: list[TileModel] = Field(min_length=1)


class MapSummary(BaseModel):
    id: int
    turn: int
    tile_count: int
    unit_count: int
    city_count: int
    players: list[str]


class UnitCreateRequest(CoordModel):
    id: str = Field(min_length=1)
    unit_type: UnitType
    owner: str = Field(min_length=1)
    promotions: list[Promotion] = Field(default_factory=list)


class CityCreateRequest(CoordModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    owner: str = Field(min_length=1)
    is_capital: bool = False


class TurnRequest(BaseModel):
    players: list[str] | None = None


class TileStateModel(CoordModel):
    state: VisibilityState


class ChangedTileModel(CoordModel):
    """A changed coordinate; ``state`` is null when the coordinate left the map."""

    state: VisibilityState | None


class SnapshotResponse(BaseModel):
    player_id: str
    states: list[TileStateModel]
    changed: list[ChangedTileModel]


class SelectRequest(BaseModel):
    """A click given either as an axial coordinate or as a planar point."""

    q: int | None = None
    r: int | None = None
    x: float | None = None
    y: float | None = None

    @model_validator(mode="after")
    def _one_form(self) -> SelectRequest:
        axial = self.q is not None and self.r is not None
        planar = self.x is not None and self.y is not None
        if axial == planar:
            raise ValueError("provide exactly one of (q, r) or (x, y)")
        return self


class SelectionResponse(BaseModel):
    kind: str
    id: str | None
    q: int
    r: int


class PlanarPosition(BaseModel):
    q: int
    r: int
    x: float
    y: float


def _summary(session: MapSession) -> MapSummary:
    return MapSummary(
        id=session.id,
        turn=session.turn,
        tile_count=len(session.tiles),
        unit_count=len(session.units),
        city_count=len(session.cities),
        players=list(session.players),
    )


def _snapshot_payload(snapshot: VisibilitySnapshot) -> SnapshotResponse:
    states = [
        TileStateModel(q=coord.q, r=coord.r, state=state)
        for coord, state in sorted(snapshot.states.items())
    ]
    changed = [
        ChangedTileModel(q=coord.q, r=coord.r, state=state)
        for coord, state in snapshot.changed_states().items()
    ]
    return SnapshotResponse(player_id=snapshot.player_id, states=states, changed=changed)


def _selection_payload(result: SelectionResult, coord: HexCoord) -> SelectionResponse:
    if isinstance(result, UnitSelected):
        entity_id: str | None = result.unit_id
    elif isinstance(result, CitySelected):
        entity_id = result.city_id
    else:
        entity_id = None
    return SelectionResponse(kind=result.kind, id=entity_id, q=coord.q, r=coord.r)


def _session_or_404(state: ApiState, map_id: int) -> MapSession:
    try:
        return state.maps.get(map_id)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


def _run_mutation(action: Callable[[], T]) -> T:
    """Translate domain failures into HTTP errors."""

    try:
        return action()
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (EntityConflictError, VisibilityTransitionError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    return {
        "status": "ok",
        "hex_size": state.settings.hex_size,
        "maps": len(state.maps.list_sessions()),
    }


@router.get("/rules")
async def rules_overview(state: ApiStateDep) -> dict[str, object]:
    """Expose the sight-range constants so clients can preview vision radii."""

    vision = state.rules.visibility
    return {
        "default_unit_sight": vision.default_unit_sight,
        "unit_sight": {str(unit_type): radius for unit_type, radius in vision.unit_sight.items()},
        "city_sight": vision.city_sight,
        "hills_bonus": vision.hills_bonus,
        "sentry_bonus": vision.sentry_bonus,
    }


@router.get("/maps", response_model=list[MapSummary])
async def list_maps(state: ApiStateDep) -> list[MapSummary]:
    return [_summary(session) for session in state.maps.list_sessions()]


@router.post("/maps", response_model=MapSummary, status_code=status.HTTP_201_CREATED)
async def create_map(request: CreateMapRequest, state: ApiStateDep) -> MapSummary:
    tiles = [tile.to_tile() for tile in request.tiles]
    session = _run_mutation(lambda: state.maps.create(tiles))
    return _summary(session)


@router.get("/maps/{map_id}", response_model=MapSummary)
async def get_map(map_id: int, state: ApiStateDep) -> MapSummary:
    return _summary(_session_or_404(state, map_id))


@router.post(
    "/maps/{map_id}/units",
    response_model=SnapshotResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_unit(map_id: int, request: UnitCreateRequest, state: ApiStateDep) -> SnapshotResponse:
    session = _session_or_404(state, map_id)
    unit = Unit(
        id=UnitID(request.id),
        unit_type=request.unit_type,
        owner=PlayerID(request.owner),
        position=request.to_coord(),
        promotions=set(request.promotions),
    )
    return _snapshot_payload(_run_mutation(lambda: session.add_unit(unit)))


@router.put("/maps/{map_id}/units/{unit_id}/position", response_model=SnapshotResponse)
async def move_unit(
    map_id: int, unit_id: str, request: CoordModel, state: ApiStateDep
) -> SnapshotResponse:
    session = _session_or_404(state, map_id)
    snapshot = _run_mutation(lambda: session.move_unit(UnitID(unit_id), request.to_coord()))
    return _snapshot_payload(snapshot)


@router.delete("/maps/{map_id}/units/{unit_id}", response_model=SnapshotResponse)
async def remove_unit(map_id: int, unit_id: str, state: ApiStateDep) -> SnapshotResponse:
    session = _session_or_404(state, map_id)
    return _snapshot_payload(_run_mutation(lambda: session.remove_unit(UnitID(unit_id))))


@router.post(
    "/maps/{map_id}/cities",
    response_model=SnapshotResponse,
    status_code=status.HTTP_201_CREATED,
)
async def found_city(
    map_id: int, request: CityCreateRequest, state: ApiStateDep
) -> SnapshotResponse:
    session = _session_or_404(state, map_id)
    city = City(
        id=CityID(request.id),
        name=request.name,
        owner=PlayerID(request.owner),
        position=request.to_coord(),
        is_capital=request.is_capital,
    )
    return _snapshot_payload(_run_mutation(lambda: session.found_city(city)))


@router.post("/maps/{map_id}/turns", response_model=dict[str, SnapshotResponse])
async def advance_turn(
    map_id: int, request: TurnRequest, state: ApiStateDep
) -> dict[str, SnapshotResponse]:
    session = _session_or_404(state, map_id)
    players = [PlayerID(p) for p in request.players] if request.players is not None else None
    snapshots = _run_mutation(lambda: session.advance_turn(players))
    return {player: _snapshot_payload(snapshot) for player, snapshot in snapshots.items()}


@router.get("/maps/{map_id}/visibility/{player_id}", response_model=SnapshotResponse)
async def get_visibility(map_id: int, player_id: str, state: ApiStateDep) -> SnapshotResponse:
    session = _session_or_404(state, map_id)
    snapshot = _run_mutation(lambda: session.visibility_for(PlayerID(player_id)))
    return _snapshot_payload(snapshot)


@router.post("/maps/{map_id}/select", response_model=SelectionResponse)
async def select(map_id: int, request: SelectRequest, state: ApiStateDep) -> SelectionResponse:
    session = _session_or_404(state, map_id)
    if request.q is not None and request.r is not None:
        coord = HexCoord(q=request.q, r=request.r)
    else:
        coord = state.layout.from_planar(request.x, request.y)
    return _selection_payload(session.select(coord), coord)


@router.get("/maps/{map_id}/layout/{q}/{r}", response_model=PlanarPosition)
async def planar_position(map_id: int, q: int, r: int, state: ApiStateDep) -> PlanarPosition:
    _session_or_404(state, map_id)
    x, y = state.layout.to_planar(HexCoord(q=q, r=r))
    return PlanarPosition(q=q, r=r, x=x, y=y)
