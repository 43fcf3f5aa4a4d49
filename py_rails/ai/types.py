"""
Candidate actions, turn plans and validation results of the planning engine.

Each action kind carries a typed parameter model tagged by its ``type`` so a
plan can be dispatched on the action without inspecting loose dictionaries.
"""

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..core.models import GridCoord, TrackSegment, TrainType
from ..core.snapshot import WorldSnapshot


class ActionType(str, Enum):
    DELIVER_LOAD = "DeliverLoad"
    PICKUP_AND_DELIVER = "PickupAndDeliver"
    BUILD_TRACK = "BuildTrack"
    UPGRADE_TRAIN = "UpgradeTrain"
    BUILD_TOWARD_MAJOR_CITY = "BuildTowardMajorCity"
    PASS_TURN = "PassTurn"


class TransitionKind(str, Enum):
    UPGRADE = "upgrade"
    CROSSGRADE = "crossgrade"


class DeliverLoadParams(BaseModel):
    type: Literal[ActionType.DELIVER_LOAD] = ActionType.DELIVER_LOAD
    move_path: List[GridCoord] = Field(default_factory=list, description="Position then destination")
    demand_card_id: int
    demand_index: int
    resource: str
    city: str


class PickupAndDeliverParams(BaseModel):
    type: Literal[ActionType.PICKUP_AND_DELIVER] = ActionType.PICKUP_AND_DELIVER
    pickup_path: List[GridCoord] = Field(default_factory=list)
    pickup_city: str
    resource: str
    deliver_city: str
    demand_card_id: int
    demand_index: int


class BuildTrackParams(BaseModel):
    type: Literal[ActionType.BUILD_TRACK] = ActionType.BUILD_TRACK
    segments: List[TrackSegment] = Field(default_factory=list)
    total_cost: int = 0


class BuildTowardMajorCityParams(BaseModel):
    type: Literal[ActionType.BUILD_TOWARD_MAJOR_CITY] = ActionType.BUILD_TOWARD_MAJOR_CITY
    target_city: str
    segments: List[TrackSegment] = Field(default_factory=list)
    total_cost: int = 0


class UpgradeTrainParams(BaseModel):
    type: Literal[ActionType.UPGRADE_TRAIN] = ActionType.UPGRADE_TRAIN
    target_train_type: TrainType
    kind: TransitionKind
    cost: int


class PassTurnParams(BaseModel):
    type: Literal[ActionType.PASS_TURN] = ActionType.PASS_TURN


ActionParams = Union[
    DeliverLoadParams,
    PickupAndDeliverParams,
    BuildTrackParams,
    BuildTowardMajorCityParams,
    UpgradeTrainParams,
    PassTurnParams,
]


class FeasibleOption(BaseModel):
    """An action that passed its feasibility check."""

    type: ActionType
    description: str
    feasible: Literal[True] = True
    params: ActionParams = Field(discriminator="type")


class InfeasibleOption(BaseModel):
    """A rejected candidate, kept with its reason for auditing."""

    type: ActionType
    description: str
    feasible: Literal[False] = False
    reason: str


class GenerationResult(BaseModel):
    feasible: List[FeasibleOption] = Field(default_factory=list)
    infeasible: List[InfeasibleOption] = Field(default_factory=list)


class TurnPlan(BaseModel):
    """Actions chosen for this turn, in execution order."""

    actions: List[FeasibleOption] = Field(default_factory=list)


class FeasibilityResult(BaseModel):
    feasible: bool
    reason: Optional[str] = None


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


__all__ = [
    "ActionParams",
    "ActionType",
    "BuildTowardMajorCityParams",
    "BuildTrackParams",
    "DeliverLoadParams",
    "FeasibilityResult",
    "FeasibleOption",
    "GenerationResult",
    "InfeasibleOption",
    "PassTurnParams",
    "PickupAndDeliverParams",
    "TransitionKind",
    "TurnPlan",
    "UpgradeTrainParams",
    "ValidationResult",
    "WorldSnapshot",
]
