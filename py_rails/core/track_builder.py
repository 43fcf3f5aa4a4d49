"""
Committing track construction to a player's network.

The engine plans against snapshots; this service is the narrow commit path
that re-checks a build against the live network before charging for it.
Money moves through an injected ``MoneyLedger`` so the service never needs
the full game-state service.
"""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol, Set

import structlog
from pydantic import BaseModel, Field

from ..config import settings
from .hex_grid import HexGrid
from .major_cities import build_cluster_lookup, get_major_city_groups
from .models import GridCoord, PlayerNetwork, TrackSegment

logger = structlog.get_logger()


def remaining_turn_budget(
    turn_build_cost_so_far: int,
    crossgrade_spend_mark: Optional[int] = None,
) -> int:
    """
    Build money still available this turn.

    The turn cap applies to all spend. After a crossgrade the spend that
    follows it is further capped at the crossgrade ceiling.

    Args:
        turn_build_cost_so_far: Build and train spend this turn
        crossgrade_spend_mark: Turn spend right after the crossgrade, None if
            no crossgrade happened

    Returns:
        Remaining budget, never negative
    """
    remaining = settings.turn_build_budget - turn_build_cost_so_far
    if crossgrade_spend_mark is not None:
        since_crossgrade = turn_build_cost_so_far - crossgrade_spend_mark
        remaining = min(remaining, settings.crossgrade_build_budget - since_crossgrade)
    return max(remaining, 0)


class MoneyLedger(Protocol):
    """Read and debit a player's cash."""

    def balance(self, player_id: str) -> int:
        ...

    def debit(self, player_id: str, amount: int) -> None:
        ...


class TrackBuildError(str, Enum):
    EMPTY_BUILD = "EMPTY_BUILD"
    INVALID_CONNECTION = "INVALID_CONNECTION"
    EXCEEDS_TURN_BUDGET = "EXCEEDS_TURN_BUDGET"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"


class BuildCommitResult(BaseModel):
    """Outcome of a build commit."""

    success: bool
    error: Optional[TrackBuildError] = None
    cost: int = Field(default=0, description="Amount charged")
    added: List[TrackSegment] = Field(default_factory=list, description="Segments appended")


class TrackBuildService:
    """Applies validated builds to player networks and charges the ledger."""

    def __init__(
        self,
        grid: HexGrid,
        ledger: MoneyLedger,
        cluster_lookup: Optional[Dict[GridCoord, str]] = None,
    ):
        self.grid = grid
        self.ledger = ledger
        if cluster_lookup is None:
            cluster_lookup = build_cluster_lookup(get_major_city_groups(grid.points.values()))
        self.cluster_lookup = cluster_lookup

    def _reached(self, coords: Iterable[GridCoord]) -> Set[GridCoord]:
        """Nodes plus the far ports of any ferries they touch."""
        nodes = set(coords)
        for coord in list(nodes):
            partner = self.grid.ferry_partners.get(coord)
            if partner is not None:
                nodes.add(partner)
        return nodes

    def _connects(self, network: PlayerNetwork, segments: List[TrackSegment]) -> bool:
        nodes: Set[GridCoord] = self._reached(network.nodes())
        for seg in segments:
            a, b = seg.from_.coord, seg.to.coord
            if not self.grid.is_adjacent(a, b):
                return False
            city = self.cluster_lookup.get(a)
            if city is not None and city == self.cluster_lookup.get(b):
                return False
            if nodes:
                if a not in nodes and b not in nodes:
                    return False
            elif a not in self.cluster_lookup:
                # First track of the game starts at a major city
                return False
            nodes |= self._reached((a, b))
        return True

    def commit_build(
        self,
        network: PlayerNetwork,
        segments: Iterable[TrackSegment],
        crossgrade_spend_mark: Optional[int] = None,
    ) -> BuildCommitResult:
        """
        Append segments to a network and charge their cost.

        Segments must be given in build order, each touching the network or a
        segment before it. Segments the player already owns are skipped
        without charge.

        Args:
            network: The building player's live network, updated in place
            segments: Segments to build
            crossgrade_spend_mark: Turn spend recorded after a crossgrade this turn

        Returns:
            BuildCommitResult, with the network untouched on failure
        """
        owned = network.edges()
        new_segments = []
        for seg in segments:
            if seg.key not in owned:
                new_segments.append(seg)
                owned.add(seg.key)
        if not new_segments:
            return BuildCommitResult(success=False, error=TrackBuildError.EMPTY_BUILD)

        if not self._connects(network, new_segments):
            logger.info("Rejected build", player_id=network.player_id, error="invalid_connection")
            return BuildCommitResult(success=False, error=TrackBuildError.INVALID_CONNECTION)

        cost = sum(seg.cost for seg in new_segments)
        if cost > remaining_turn_budget(network.turn_build_cost, crossgrade_spend_mark):
            logger.info("Rejected build", player_id=network.player_id, error="turn_budget", cost=cost)
            return BuildCommitResult(success=False, error=TrackBuildError.EXCEEDS_TURN_BUDGET)

        if cost > self.ledger.balance(network.player_id):
            logger.info("Rejected build", player_id=network.player_id, error="funds", cost=cost)
            return BuildCommitResult(success=False, error=TrackBuildError.INSUFFICIENT_FUNDS)

        charged = network.add_segments(new_segments)
        self.ledger.debit(network.player_id, charged)
        logger.info(
            "Committed build",
            player_id=network.player_id,
            segments=len(new_segments),
            cost=charged,
            turn_build_cost=network.turn_build_cost,
        )
        return BuildCommitResult(success=True, cost=charged, added=new_segments)
