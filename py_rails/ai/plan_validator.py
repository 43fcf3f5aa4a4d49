"""
Pre-execution validation of a complete turn plan.

The plan is simulated action by action. Each action is checked against the
state left by the actions before it, errors are collected without stopping,
and the action's effects are applied whether or not it passed so that later
actions see the state the plan intends.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from ..core.models import TrackSegment, TrainType, total_cost
from ..core.snapshot import WorldSnapshot
from .feasibility import (
    validate_build_track_feasibility,
    validate_delivery_feasibility,
    validate_pickup_feasibility,
    validate_upgrade_feasibility,
)
from .types import (
    BuildTowardMajorCityParams,
    BuildTrackParams,
    DeliverLoadParams,
    FeasibilityResult,
    FeasibleOption,
    PickupAndDeliverParams,
    TransitionKind,
    TurnPlan,
    UpgradeTrainParams,
    ValidationResult,
)

logger = structlog.get_logger()


@dataclass
class SimulatedState:
    """Running totals of a plan being simulated."""

    money: int
    carried_cargo: List[str]
    train_type: TrainType
    turn_build_cost_so_far: int
    crossgrade_spend_mark: Optional[int] = None
    accumulated_segments: List[TrackSegment] = field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: WorldSnapshot) -> "SimulatedState":
        return cls(
            money=snapshot.money,
            carried_cargo=list(snapshot.carried_cargo),
            train_type=snapshot.train_type,
            turn_build_cost_so_far=snapshot.turn_build_cost_so_far,
            crossgrade_spend_mark=snapshot.crossgrade_spend_mark,
        )

    def to_snapshot(self, base: WorldSnapshot) -> WorldSnapshot:
        """Snapshot of the simulated state, sharing the base snapshot's map."""
        return base.model_copy(
            update={
                "money": self.money,
                "carried_cargo": list(self.carried_cargo),
                "train_type": self.train_type,
                "turn_build_cost_so_far": self.turn_build_cost_so_far,
                "crossgrade_spend_mark": self.crossgrade_spend_mark,
                "track_segments": base.track_segments + self.accumulated_segments,
            }
        )

    def spend(self, amount: int) -> None:
        self.money -= amount
        self.turn_build_cost_so_far += amount

    def remove_cargo(self, resource: str) -> None:
        if resource in self.carried_cargo:
            self.carried_cargo.remove(resource)


class PlanValidator:
    """Validates a TurnPlan by simulating it against a snapshot."""

    @classmethod
    def validate(cls, plan: TurnPlan, snapshot: WorldSnapshot) -> ValidationResult:
        """
        Validate every action of a plan in order.

        Args:
            plan: Actions to validate
            snapshot: World view at the start of the plan

        Returns:
            ValidationResult listing every error found
        """
        if not plan.actions:
            return ValidationResult(valid=True)

        state = SimulatedState.from_snapshot(snapshot)
        errors: List[str] = []
        for action in plan.actions:
            current = state.to_snapshot(snapshot)
            errors.extend(cls.check_action(action, current))
            cls.apply_action(action, state)

        if state.money < 0:
            errors.append(f"Plan leaves player with negative funds: {state.money}M")

        logger.info(
            "Validated turn plan",
            player_id=snapshot.player_id,
            actions=len(plan.actions),
            errors=len(errors),
        )
        return ValidationResult(valid=not errors, errors=errors)

    @staticmethod
    def check_action(action: FeasibleOption, snapshot: WorldSnapshot) -> List[str]:
        """Errors of one action against the simulated snapshot, prefixed with the action type."""
        params = action.params
        results: List[FeasibilityResult] = []

        if isinstance(params, DeliverLoadParams):
            results.append(
                validate_delivery_feasibility(snapshot, params.demand_card_id, params.demand_index)
            )
        elif isinstance(params, PickupAndDeliverParams):
            card = snapshot.find_demand_card(params.demand_card_id)
            if card is None:
                results.append(
                    FeasibilityResult(
                        feasible=False, reason=f"Demand card {params.demand_card_id} not in hand"
                    )
                )
            elif not 0 <= params.demand_index < len(card.demands):
                results.append(
                    FeasibilityResult(
                        feasible=False, reason=f"Invalid demand index {params.demand_index}"
                    )
                )
            results.append(
                validate_pickup_feasibility(snapshot, params.resource, params.pickup_city)
            )
        elif isinstance(params, (BuildTrackParams, BuildTowardMajorCityParams)):
            results.append(validate_build_track_feasibility(snapshot, params.segments))
        elif isinstance(params, UpgradeTrainParams):
            results.append(validate_upgrade_feasibility(snapshot, params.target_train_type))

        prefix = params.type.value
        return [f"{prefix}: {r.reason}" for r in results if not r.feasible]

    @staticmethod
    def apply_action(action: FeasibleOption, state: SimulatedState) -> None:
        """Apply an action's effects to the simulated state."""
        params = action.params

        if isinstance(params, DeliverLoadParams):
            state.remove_cargo(params.resource)
        elif isinstance(params, PickupAndDeliverParams):
            # Picked up and delivered within the same action
            state.carried_cargo.append(params.resource)
            state.remove_cargo(params.resource)
        elif isinstance(params, (BuildTrackParams, BuildTowardMajorCityParams)):
            state.spend(total_cost(params.segments))
            state.accumulated_segments.extend(params.segments)
        elif isinstance(params, UpgradeTrainParams):
            state.spend(params.cost)
            state.train_type = params.target_train_type
            if params.kind == TransitionKind.CROSSGRADE:
                state.crossgrade_spend_mark = state.turn_build_cost_so_far
