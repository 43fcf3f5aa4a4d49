"""
Enumeration of every candidate action for a turn.

Candidates that fail their feasibility check are kept with the rejection
reason so the decision layer can audit what was considered.
"""

from typing import List, Optional

import structlog

from ..core.models import GridCoord, GridPoint, TrackSegment, segment_nodes, total_cost
from ..core.pathfinding import compute_build_segments
from ..core.reachability import compute_reachable_cities, union_graph_for
from ..core.snapshot import WorldSnapshot
from .feasibility import (
    VALID_TRANSITIONS,
    snapshot_turn_budget,
    validate_build_track_feasibility,
    validate_delivery_feasibility,
    validate_pickup_feasibility,
    validate_upgrade_feasibility,
)
from .types import (
    ActionParams,
    ActionType,
    BuildTowardMajorCityParams,
    BuildTrackParams,
    DeliverLoadParams,
    FeasibleOption,
    GenerationResult,
    InfeasibleOption,
    PassTurnParams,
    PickupAndDeliverParams,
    TransitionKind,
    UpgradeTrainParams,
)

logger = structlog.get_logger()


def city_representative_point(snapshot: WorldSnapshot, city: str) -> Optional[GridPoint]:
    """Centre of the major city of that name if there is one, else its first milepost."""
    for group in snapshot.major_city_groups:
        if group.city_name == city:
            return snapshot.grid.point(group.center)
    for point in snapshot.map_points:
        if point.city is not None and point.city.name == city:
            return point
    return None


class OptionGenerator:
    """Builds the feasible and infeasible candidate lists for one snapshot."""

    def __init__(self, snapshot: WorldSnapshot):
        self.snapshot = snapshot
        self.result = GenerationResult()
        self.graph = union_graph_for(snapshot)
        self.reachable_cities = compute_reachable_cities(
            snapshot, snapshot.remaining_movement, self.graph
        )
        self.build_budget = min(snapshot_turn_budget(snapshot), snapshot.money)
        self.network_nodes = segment_nodes(snapshot.track_segments)

    @classmethod
    def generate(cls, snapshot: WorldSnapshot) -> GenerationResult:
        """
        Enumerate every candidate action for the snapshot's turn.

        Args:
            snapshot: Current world view

        Returns:
            GenerationResult with feasible options and rejected candidates
        """
        generator = cls(snapshot)
        generator.add_delivery_options()
        generator.add_pickup_and_deliver_options()
        generator.add_build_track_options()
        generator.add_build_toward_major_city_options()
        generator.add_upgrade_options()
        generator.add_pass_turn_option()

        logger.info(
            "Generated turn options",
            player_id=snapshot.player_id,
            feasible=len(generator.result.feasible),
            infeasible=len(generator.result.infeasible),
        )
        return generator.result

    def _feasible(self, action: ActionType, description: str, params: ActionParams) -> None:
        self.result.feasible.append(
            FeasibleOption(type=action, description=description, params=params)
        )

    def _infeasible(self, action: ActionType, description: str, reason: str) -> None:
        self.result.infeasible.append(
            InfeasibleOption(type=action, description=description, reason=reason)
        )

    def _move_path(self, city: str) -> List[GridCoord]:
        if self.snapshot.position is None:
            return []
        path = [GridCoord(*self.snapshot.position)]
        for reachable in self.reachable_cities:
            if reachable.name == city:
                if reachable.coord != path[0]:
                    path.append(reachable.coord)
                break
        return path

    def add_delivery_options(self) -> None:
        snapshot = self.snapshot
        for card in snapshot.demand_cards:
            for index, demand in enumerate(card.demands):
                if demand.resource not in snapshot.carried_cargo:
                    continue
                description = f"Deliver {demand.resource} to {demand.city} for {demand.payment}M"
                check = validate_delivery_feasibility(snapshot, card.id, index, graph=self.graph)
                if not check.feasible:
                    self._infeasible(ActionType.DELIVER_LOAD, description, check.reason)
                    continue
                self._feasible(
                    ActionType.DELIVER_LOAD,
                    description,
                    DeliverLoadParams(
                        move_path=self._move_path(demand.city),
                        demand_card_id=card.id,
                        demand_index=index,
                        resource=demand.resource,
                        city=demand.city,
                    ),
                )

    def add_pickup_and_deliver_options(self) -> None:
        snapshot = self.snapshot
        for card in snapshot.demand_cards:
            for index, demand in enumerate(card.demands):
                if demand.resource in snapshot.carried_cargo:
                    continue

                offering = {
                    city
                    for pool in (snapshot.city_supply, snapshot.dropped_cargo)
                    for city, loads in pool.items()
                    if demand.resource in loads
                }
                for pickup_city in sorted(offering):
                    description = (
                        f"Pick up {demand.resource} at {pickup_city}, "
                        f"deliver to {demand.city} for {demand.payment}M"
                    )
                    check = validate_pickup_feasibility(
                        snapshot, demand.resource, pickup_city, graph=self.graph
                    )
                    if not check.feasible:
                        self._infeasible(ActionType.PICKUP_AND_DELIVER, description, check.reason)
                        continue
                    self._feasible(
                        ActionType.PICKUP_AND_DELIVER,
                        description,
                        PickupAndDeliverParams(
                            pickup_path=self._move_path(pickup_city),
                            pickup_city=pickup_city,
                            resource=demand.resource,
                            deliver_city=demand.city,
                            demand_card_id=card.id,
                            demand_index=index,
                        ),
                    )

    def _build_toward(self, action: ActionType, label: str, target: GridPoint) -> Optional[List[TrackSegment]]:
        """Run the path search and record a rejection when nothing can be built."""
        lookup = self.snapshot.cluster_lookup
        city = lookup.get(target.coord)
        connected = target.coord in self.network_nodes or (
            city is not None and any(lookup.get(node) == city for node in self.network_nodes)
        )
        if connected:
            self._infeasible(action, f"Build track toward {label}", f"{label} already connected")
            return None
        if self.build_budget <= 0:
            self._infeasible(action, f"Build track toward {label}", "No build budget left this turn")
            return None

        segments = compute_build_segments(self.snapshot, target.row, target.col, self.build_budget)
        if not segments:
            self._infeasible(
                action,
                f"Build track toward {label}",
                f"No buildable path toward {label} within {self.build_budget}M",
            )
            return None
        return segments

    def add_build_track_options(self) -> None:
        snapshot = self.snapshot
        reachable_names = {city.name for city in self.reachable_cities}

        destinations: List[str] = []
        for card in snapshot.demand_cards:
            for demand in card.demands:
                if demand.city not in reachable_names and demand.city not in destinations:
                    destinations.append(demand.city)

        for city in destinations:
            target = city_representative_point(snapshot, city)
            if target is None:
                self._infeasible(
                    ActionType.BUILD_TRACK, f"Build track toward {city}", f"{city} is not on the map"
                )
                continue

            segments = self._build_toward(ActionType.BUILD_TRACK, city, target)
            if segments is None:
                continue

            cost = total_cost(segments)
            description = f"Build track toward {city} ({cost}M, {len(segments)} segments)"
            check = validate_build_track_feasibility(snapshot, segments)
            if not check.feasible:
                self._infeasible(ActionType.BUILD_TRACK, description, check.reason)
                continue
            self._feasible(
                ActionType.BUILD_TRACK,
                description,
                BuildTrackParams(segments=segments, total_cost=cost),
            )

    def add_build_toward_major_city_options(self) -> None:
        snapshot = self.snapshot
        # Without track the train's city is the build origin
        origin = set(self.network_nodes)
        if not origin and snapshot.position is not None:
            origin.add(GridCoord(*snapshot.position))

        for group in snapshot.major_city_groups:
            if any(coord in origin for coord in group.mileposts):
                continue

            target = snapshot.grid.point(group.center)
            segments = self._build_toward(ActionType.BUILD_TOWARD_MAJOR_CITY, group.city_name, target)
            if segments is None:
                continue

            cost = total_cost(segments)
            description = f"Build toward {group.city_name} ({cost}M, {len(segments)} segments)"
            check = validate_build_track_feasibility(snapshot, segments)
            if not check.feasible:
                self._infeasible(ActionType.BUILD_TOWARD_MAJOR_CITY, description, check.reason)
                continue
            self._feasible(
                ActionType.BUILD_TOWARD_MAJOR_CITY,
                description,
                BuildTowardMajorCityParams(
                    target_city=group.city_name, segments=segments, total_cost=cost
                ),
            )

    def add_upgrade_options(self) -> None:
        for transition in VALID_TRANSITIONS[self.snapshot.train_type]:
            verb = "Upgrade" if transition.kind == TransitionKind.UPGRADE else "Crossgrade"
            description = f"{verb} to {transition.target_train_type.value} ({transition.cost}M)"
            check = validate_upgrade_feasibility(self.snapshot, transition.target_train_type)
            if not check.feasible:
                self._infeasible(ActionType.UPGRADE_TRAIN, description, check.reason)
                continue
            self._feasible(
                ActionType.UPGRADE_TRAIN,
                description,
                UpgradeTrainParams(
                    target_train_type=transition.target_train_type,
                    kind=transition.kind,
                    cost=transition.cost,
                ),
            )

    def add_pass_turn_option(self) -> None:
        self._feasible(ActionType.PASS_TURN, "Pass turn - no action taken", PassTurnParams())
