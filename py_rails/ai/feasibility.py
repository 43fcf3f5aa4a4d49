"""
One-shot legality checks for each kind of turn action.

Every check reads a snapshot and returns a FeasibilityResult. Expected
rejections (unreachable city, over budget, short of money) are reported as
``feasible=False`` with a reason and never raised.
"""

from typing import Dict, List, NamedTuple, Optional, Sequence, Set

from ..config import settings
from ..core.models import (
    TRAIN_PROPERTIES,
    GridCoord,
    TerrainType,
    TrackSegment,
    TrainType,
    segment_nodes,
    total_cost,
)
from ..core.reachability import reachable_city_names
from ..core.snapshot import WorldSnapshot
from ..core.track_builder import remaining_turn_budget
from ..core.track_graph import UnionTrackGraph
from .types import FeasibilityResult, TransitionKind


class TrainTransition(NamedTuple):
    target_train_type: TrainType
    kind: TransitionKind
    cost: int


VALID_TRANSITIONS: Dict[TrainType, List[TrainTransition]] = {
    TrainType.FREIGHT: [
        TrainTransition(TrainType.FAST_FREIGHT, TransitionKind.UPGRADE, settings.upgrade_cost),
        TrainTransition(TrainType.HEAVY_FREIGHT, TransitionKind.UPGRADE, settings.upgrade_cost),
    ],
    TrainType.FAST_FREIGHT: [
        TrainTransition(TrainType.SUPERFREIGHT, TransitionKind.UPGRADE, settings.upgrade_cost),
        TrainTransition(TrainType.HEAVY_FREIGHT, TransitionKind.CROSSGRADE, settings.crossgrade_cost),
    ],
    TrainType.HEAVY_FREIGHT: [
        TrainTransition(TrainType.SUPERFREIGHT, TransitionKind.UPGRADE, settings.upgrade_cost),
        TrainTransition(TrainType.FAST_FREIGHT, TransitionKind.CROSSGRADE, settings.crossgrade_cost),
    ],
    TrainType.SUPERFREIGHT: [],
}


def find_transition(current: TrainType, target: TrainType) -> Optional[TrainTransition]:
    for transition in VALID_TRANSITIONS[current]:
        if transition.target_train_type == target:
            return transition
    return None


def snapshot_turn_budget(snapshot: WorldSnapshot) -> int:
    """Remaining build budget of the snapshot's turn."""
    return remaining_turn_budget(snapshot.turn_build_cost_so_far, snapshot.crossgrade_spend_mark)


def _infeasible(reason: str) -> FeasibilityResult:
    return FeasibilityResult(feasible=False, reason=reason)


def validate_delivery_feasibility(
    snapshot: WorldSnapshot,
    demand_card_id: int,
    demand_index: int,
    graph: Optional[UnionTrackGraph] = None,
) -> FeasibilityResult:
    """
    Check that a demand line can be fulfilled this turn.

    Args:
        snapshot: Current world view
        demand_card_id: Card in hand
        demand_index: Line of the card
        graph: Union track graph of the snapshot, built when omitted

    Returns:
        FeasibilityResult
    """
    card = snapshot.find_demand_card(demand_card_id)
    if card is None:
        return _infeasible(f"Demand card {demand_card_id} not in hand")
    if demand_index < 0 or demand_index >= len(card.demands):
        return _infeasible(f"Invalid demand index {demand_index}")

    demand = card.demands[demand_index]
    if demand.resource not in snapshot.carried_cargo:
        return _infeasible(f"Not carrying {demand.resource}")
    if snapshot.position is None:
        return _infeasible("Player has no position on the map")

    reachable = reachable_city_names(snapshot, snapshot.remaining_movement, graph)
    if demand.city not in reachable:
        return _infeasible(
            f"Cannot reach {demand.city} within {snapshot.remaining_movement} movement"
        )
    return FeasibilityResult(feasible=True)


def validate_pickup_feasibility(
    snapshot: WorldSnapshot,
    resource: str,
    city: str,
    graph: Optional[UnionTrackGraph] = None,
) -> FeasibilityResult:
    """Check that a load can be collected at a city this turn."""
    if snapshot.position is None:
        return _infeasible("Player has no position on the map")

    capacity = TRAIN_PROPERTIES[snapshot.train_type].capacity
    if len(snapshot.carried_cargo) >= capacity:
        return _infeasible(f"Train at capacity ({capacity} loads)")

    in_supply = resource in snapshot.city_supply.get(city, [])
    in_dropped = resource in snapshot.dropped_cargo.get(city, [])
    if not (in_supply or in_dropped):
        return _infeasible(f"{resource} not available at {city}")

    reachable = reachable_city_names(snapshot, snapshot.remaining_movement, graph)
    if city not in reachable:
        return _infeasible(f"Cannot reach {city} within {snapshot.remaining_movement} movement")
    return FeasibilityResult(feasible=True)


def _enters_open_ferry(
    snapshot: WorldSnapshot, seg: TrackSegment, touched: Set[GridCoord]
) -> bool:
    """A segment into a ferry port whose route already carries track."""
    for coord in (seg.from_.coord, seg.to.coord):
        point = snapshot.grid.points.get(coord)
        if point is None or point.terrain != TerrainType.FERRY_PORT:
            continue
        ferry = point.ferry_connection
        if ferry is not None and any(GridCoord(*port) in touched for port in ferry.endpoints):
            return True
    return False


def validate_build_track_feasibility(
    snapshot: WorldSnapshot, segments: Sequence[TrackSegment]
) -> FeasibilityResult:
    """
    Check that segments can be paid for this turn.

    Args:
        snapshot: Current world view
        segments: Proposed new track

    Returns:
        FeasibilityResult, rejecting empty builds, zero or negative segment
        costs other than free ferry port connections, totals over the
        remaining turn budget and totals over money
    """
    if not segments:
        return _infeasible("No segments to build")

    touched = segment_nodes(
        seg for track in snapshot.player_tracks().values() for seg in track
    )
    for seg in segments:
        free = seg.cost == 0 and _enters_open_ferry(snapshot, seg, touched)
        touched.update((seg.from_.coord, seg.to.coord))
        if seg.cost <= 0 and not free:
            return _infeasible(f"Invalid segment cost: {seg.cost}")

    cost = total_cost(segments)
    budget = snapshot_turn_budget(snapshot)
    if cost > budget:
        return _infeasible(f"Build cost {cost}M exceeds remaining turn budget {budget}M")
    if cost > snapshot.money:
        return _infeasible(f"Insufficient funds: need {cost}M, have {snapshot.money}M")
    return FeasibilityResult(feasible=True)


def validate_upgrade_feasibility(
    snapshot: WorldSnapshot, target_train_type: TrainType
) -> FeasibilityResult:
    """Check an upgrade or crossgrade of the current train."""
    if target_train_type == snapshot.train_type:
        return _infeasible("Already have this train type")

    transition = find_transition(snapshot.train_type, target_train_type)
    if transition is None:
        return _infeasible(
            f"No valid upgrade path from {snapshot.train_type.value} to {target_train_type.value}"
        )

    budget = snapshot_turn_budget(snapshot)
    if transition.cost > budget:
        return _infeasible(
            f"Upgrade cost {transition.cost}M exceeds remaining turn budget {budget}M"
        )
    if transition.cost > snapshot.money:
        return _infeasible(f"Insufficient funds: need {transition.cost}M, have {snapshot.money}M")
    return FeasibilityResult(feasible=True)
