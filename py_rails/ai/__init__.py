"""
Turn option enumeration and plan validation.
"""

from .types import (
    ActionType,
    FeasibilityResult,
    FeasibleOption,
    GenerationResult,
    InfeasibleOption,
    TurnPlan,
    ValidationResult,
    WorldSnapshot,
)
from .feasibility import (
    VALID_TRANSITIONS,
    validate_build_track_feasibility,
    validate_delivery_feasibility,
    validate_pickup_feasibility,
    validate_upgrade_feasibility,
)
from .option_generator import OptionGenerator
from .plan_validator import PlanValidator, SimulatedState

__all__ = ['ActionType', 'FeasibilityResult', 'FeasibleOption', 'GenerationResult',
           'InfeasibleOption', 'TurnPlan', 'ValidationResult', 'WorldSnapshot',
           'VALID_TRANSITIONS', 'validate_build_track_feasibility',
           'validate_delivery_feasibility', 'validate_pickup_feasibility',
           'validate_upgrade_feasibility', 'OptionGenerator', 'PlanValidator', 'SimulatedState']
