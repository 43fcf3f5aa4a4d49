"""
Tests for the per-action feasibility checks.
"""

import pytest

from py_rails.ai.feasibility import (
    VALID_TRANSITIONS,
    find_transition,
    validate_build_track_feasibility,
    validate_delivery_feasibility,
    validate_pickup_feasibility,
    validate_upgrade_feasibility,
)
from py_rails.ai.types import TransitionKind
from py_rails.core.models import Demand, DemandCard, TrainType
from py_rails.core.reachability import union_graph_for
from py_rails.core.track_builder import remaining_turn_budget
from py_rails.core.track_graph import UnionTrackGraph

from map_factories import chain, city, ferry, make_points, make_snapshot, seg, water


def build(*costs):
    """Segments along row 0 with the given costs."""
    return [seg((0, i), (0, i + 1), cost) for i, cost in enumerate(costs)]


class TestRemainingTurnBudget:
    """Test the turn build ceiling."""

    @pytest.mark.parametrize(
        "spent,mark,expected",
        [
            (0, None, 20),
            (7, None, 13),
            (25, None, 0),
            (5, 5, 15),
            (10, 5, 10),
            (3, 3, 15),
            (18, 5, 2),
        ],
    )
    def test_remaining(self, spent, mark, expected):
        """The crossgrade ceiling only limits spend after the crossgrade."""
        assert remaining_turn_budget(spent, mark) == expected


class TestBuildTrackFeasibility:
    """Test build affordability."""

    def setup_method(self):
        self.points = make_points(1, 3)

    def test_over_turn_budget(self):
        """A total of 21 exceeds the 20 cap even with ample money."""
        snapshot = make_snapshot(self.points, money=200, turn_build_cost_so_far=0)
        result = validate_build_track_feasibility(snapshot, build(10, 11))
        assert not result.feasible
        assert "exceeds remaining turn budget 20M" in result.reason

    def test_insufficient_money(self):
        """A total of 5 is rejected with only 4 in cash."""
        snapshot = make_snapshot(self.points, money=4)
        result = validate_build_track_feasibility(snapshot, build(5))
        assert not result.feasible
        assert "Insufficient funds" in result.reason

    def test_within_budget_and_money(self):
        """Spend up to the cap is allowed."""
        snapshot = make_snapshot(self.points, money=20)
        assert validate_build_track_feasibility(snapshot, build(10, 10)).feasible

    def test_prior_spend_reduces_budget(self):
        """Spend earlier in the turn counts against the cap."""
        snapshot = make_snapshot(self.points, money=50, turn_build_cost_so_far=15)
        assert validate_build_track_feasibility(snapshot, build(5)).feasible
        assert not validate_build_track_feasibility(snapshot, build(6)).feasible

    def test_after_crossgrade(self):
        """After a crossgrade at most 15 more may be spent."""
        snapshot = make_snapshot(
            self.points, money=50, turn_build_cost_so_far=5, crossgrade_spend_mark=5
        )
        assert validate_build_track_feasibility(snapshot, build(15)).feasible
        result = validate_build_track_feasibility(snapshot, build(16))
        assert "remaining turn budget 15M" in result.reason

    def test_empty_build(self):
        """An empty segment list is rejected."""
        snapshot = make_snapshot(self.points)
        assert validate_build_track_feasibility(snapshot, []).reason == "No segments to build"

    def test_zero_cost_segment(self):
        """Every segment must cost something."""
        snapshot = make_snapshot(self.points)
        result = validate_build_track_feasibility(snapshot, build(1, 0))
        assert result.reason == "Invalid segment cost: 0"

    def test_free_connection_into_used_ferry_port(self):
        """A port whose route already carries track is joined for nothing."""
        overrides = water((0, 3), (0, 4))
        overrides.update(ferry((0, 2), (0, 5), cost=4))
        points = make_points(1, 8, overrides)
        snapshot = make_snapshot(
            points,
            track_segments=chain((0, 0), (0, 1)),
            all_player_tracks={"p2": chain((0, 6), (0, 5))},
        )
        assert validate_build_track_feasibility(snapshot, [seg((0, 1), (0, 2), 0)]).feasible

    def test_zero_cost_into_unused_ferry_port(self):
        """An unused route still charges its toll."""
        overrides = water((0, 3), (0, 4))
        overrides.update(ferry((0, 2), (0, 5), cost=4))
        snapshot = make_snapshot(make_points(1, 8, overrides), track_segments=chain((0, 0), (0, 1)))
        result = validate_build_track_feasibility(snapshot, [seg((0, 1), (0, 2), 0)])
        assert result.reason == "Invalid segment cost: 0"


class TestUpgradeFeasibility:
    """Test train upgrades and crossgrades."""

    def setup_method(self):
        self.points = make_points(1, 1)

    def test_transition_table(self):
        """Freight upgrades two ways, Superfreight not at all."""
        assert {t.target_train_type for t in VALID_TRANSITIONS[TrainType.FREIGHT]} == {
            TrainType.FAST_FREIGHT,
            TrainType.HEAVY_FREIGHT,
        }
        assert VALID_TRANSITIONS[TrainType.SUPERFREIGHT] == []
        crossgrade = find_transition(TrainType.FAST_FREIGHT, TrainType.HEAVY_FREIGHT)
        assert crossgrade.kind == TransitionKind.CROSSGRADE
        assert crossgrade.cost == 5
        upgrade = find_transition(TrainType.HEAVY_FREIGHT, TrainType.SUPERFREIGHT)
        assert upgrade.kind == TransitionKind.UPGRADE
        assert upgrade.cost == 20

    def test_same_type(self):
        snapshot = make_snapshot(self.points)
        result = validate_upgrade_feasibility(snapshot, TrainType.FREIGHT)
        assert result.reason == "Already have this train type"

    def test_no_transition(self):
        """Freight cannot jump straight to Superfreight."""
        snapshot = make_snapshot(self.points)
        result = validate_upgrade_feasibility(snapshot, TrainType.SUPERFREIGHT)
        assert not result.feasible
        assert "No valid upgrade path" in result.reason

    def test_upgrade_feasible(self):
        snapshot = make_snapshot(self.points, money=20)
        assert validate_upgrade_feasibility(snapshot, TrainType.HEAVY_FREIGHT).feasible

    def test_upgrade_over_budget(self):
        """An upgrade needs the full 20 of the turn budget."""
        snapshot = make_snapshot(self.points, money=100, turn_build_cost_so_far=1)
        result = validate_upgrade_feasibility(snapshot, TrainType.FAST_FREIGHT)
        assert "exceeds remaining turn budget 19M" in result.reason

    def test_upgrade_short_of_money(self):
        snapshot = make_snapshot(self.points, money=19)
        result = validate_upgrade_feasibility(snapshot, TrainType.FAST_FREIGHT)
        assert "Insufficient funds" in result.reason

    def test_crossgrade(self):
        """A crossgrade costs 5 and fits in a partly spent turn."""
        snapshot = make_snapshot(
            self.points, money=10, train_type=TrainType.HEAVY_FREIGHT, turn_build_cost_so_far=15
        )
        assert validate_upgrade_feasibility(snapshot, TrainType.FAST_FREIGHT).feasible

        spent = snapshot.model_copy(update={"turn_build_cost_so_far": 18})
        assert not validate_upgrade_feasibility(spent, TrainType.FAST_FREIGHT).feasible


class TestDeliveryFeasibility:
    """Test delivery checks."""

    def setup_method(self):
        """Track from Hamburg at (0,0) to Kiel at (0,3)."""
        overrides = {(0, 0): city("Hamburg"), (0, 3): city("Kiel")}
        self.points = make_points(1, 8, overrides)
        self.card = DemandCard(
            id=7,
            demands=[
                Demand(city="Kiel", resource="Fish", payment=12),
                Demand(city="Hamburg", resource="Coal", payment=8),
            ],
        )

    def snapshot(self, **fields):
        values = {
            "position": (0, 0),
            "carried_cargo": ["Fish"],
            "demand_cards": [self.card],
            "track_segments": chain((0, 0), (0, 1), (0, 2), (0, 3)),
        }
        values.update(fields)
        return make_snapshot(self.points, **values)

    def test_feasible(self):
        assert validate_delivery_feasibility(self.snapshot(), 7, 0).feasible

    def test_card_not_in_hand(self):
        result = validate_delivery_feasibility(self.snapshot(), 99, 0)
        assert result.reason == "Demand card 99 not in hand"

    def test_invalid_index(self):
        result = validate_delivery_feasibility(self.snapshot(), 7, 2)
        assert result.reason == "Invalid demand index 2"

    def test_not_carrying(self):
        result = validate_delivery_feasibility(self.snapshot(), 7, 1)
        assert result.reason == "Not carrying Coal"

    def test_no_position(self):
        result = validate_delivery_feasibility(self.snapshot(position=None), 7, 0)
        assert result.reason == "Player has no position on the map"

    def test_out_of_reach(self):
        """Kiel is three hops away."""
        result = validate_delivery_feasibility(self.snapshot(remaining_movement=2), 7, 0)
        assert result.reason == "Cannot reach Kiel within 2 movement"

    def test_uses_given_graph(self):
        """A supplied graph is searched instead of the snapshot's track."""
        snapshot = self.snapshot()
        assert validate_delivery_feasibility(snapshot, 7, 0, graph=union_graph_for(snapshot)).feasible
        result = validate_delivery_feasibility(snapshot, 7, 0, graph=UnionTrackGraph())
        assert result.reason == "Cannot reach Kiel within 9 movement"


class TestPickupFeasibility:
    """Test pickup checks."""

    def setup_method(self):
        overrides = {(0, 0): city("Hamburg"), (0, 3): city("Kiel")}
        self.points = make_points(1, 8, overrides)

    def snapshot(self, **fields):
        values = {
            "position": (0, 0),
            "track_segments": chain((0, 0), (0, 1), (0, 2), (0, 3)),
            "city_supply": {"Kiel": ["Fish"]},
            "dropped_cargo": {"Hamburg": ["Wine"]},
        }
        values.update(fields)
        return make_snapshot(self.points, **values)

    def test_feasible_from_supply(self):
        assert validate_pickup_feasibility(self.snapshot(), "Fish", "Kiel").feasible

    def test_feasible_from_dropped_pool(self):
        """Loads left at a city can be picked up."""
        assert validate_pickup_feasibility(self.snapshot(), "Wine", "Hamburg").feasible

    def test_at_capacity(self):
        """A Freight carries two loads."""
        result = validate_pickup_feasibility(
            self.snapshot(carried_cargo=["Coal", "Oil"]), "Fish", "Kiel"
        )
        assert result.reason == "Train at capacity (2 loads)"

    def test_heavy_freight_capacity(self):
        """A Heavy Freight has room for a third load."""
        snapshot = self.snapshot(carried_cargo=["Coal", "Oil"], train_type=TrainType.HEAVY_FREIGHT)
        assert validate_pickup_feasibility(snapshot, "Fish", "Kiel").feasible

    def test_not_available(self):
        result = validate_pickup_feasibility(self.snapshot(), "Wine", "Kiel")
        assert result.reason == "Wine not available at Kiel"

    def test_out_of_reach(self):
        result = validate_pickup_feasibility(self.snapshot(remaining_movement=1), "Fish", "Kiel")
        assert result.reason == "Cannot reach Kiel within 1 movement"

    def test_uses_given_graph(self):
        """A supplied graph is searched instead of the snapshot's track."""
        result = validate_pickup_feasibility(self.snapshot(), "Fish", "Kiel", graph=UnionTrackGraph())
        assert result.reason == "Cannot reach Kiel within 9 movement"

    def test_no_position(self):
        result = validate_pickup_feasibility(self.snapshot(position=None), "Fish", "Kiel")
        assert not result.feasible
