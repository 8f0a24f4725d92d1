"""
Bulk Greedy Matcher

Assigns many students to many peers at once using edge-greedy bipartite
matching:

1. Score every student x peer pair into a MatchEdge (O(S*P) scores)
2. Stable-sort all edges by score, highest first
3. Walk the edges and commit each one whose student and peer are both still
   free, then mark both as matched

The result is a maximal matching where each student and each peer appears at
most once per run. It is a heuristic, not a maximum-weight matching: a high
edge committed early can block two slightly lower edges that together would
score more.

Equal scores keep the order the edges were built in (students in input
order, then peers in input order), so the same inputs always produce the same
assignments.
"""
import logging
import time
from typing import Any, Awaitable, Callable, Hashable, List, Optional, Sequence, Set

from pydantic import BaseModel, ConfigDict, Field

from app.errors import MatchDeadlineExceeded, StorageFailureError
from app.services.match_scorer import MatchScorer, ScoreBreakdown, field_value, get_match_scorer

logger = logging.getLogger(__name__)


class MatchEdge(BaseModel):
    """Scored (student, peer) pair, alive only for one bulk run"""
    model_config = ConfigDict(frozen=True)

    student_id: Any
    peer_id: Any
    score: float
    breakdown: ScoreBreakdown


class BulkMatchOutcome(BaseModel):
    """Summary of one bulk run"""
    created: List[Any] = Field(default_factory=list)
    failed: int = 0
    edges_considered: int = 0

    @property
    def total_created(self) -> int:
        return len(self.created)


class GreedyAssignment:
    """Tracks which students and peers are already taken in a run"""

    def __init__(self):
        self.matched_students: Set[Hashable] = set()
        self.matched_peers: Set[Hashable] = set()

    def available(self, edge: MatchEdge) -> bool:
        return edge.student_id not in self.matched_students and edge.peer_id not in self.matched_peers

    def claim(self, edge: MatchEdge) -> None:
        self.matched_students.add(edge.student_id)
        self.matched_peers.add(edge.peer_id)


class BulkMatcher:
    """Build, sort and greedily commit match edges"""

    def __init__(self, scorer: Optional[MatchScorer] = None):
        self.scorer = scorer or get_match_scorer()

    def build_edges(
        self,
        students: Sequence[Any],
        peers: Sequence[Any],
        deadline: Optional[float] = None,
    ) -> List[MatchEdge]:
        """
        Score the complete bipartite edge set.

        Args:
            students: Student rows or dicts, each with an id
            peers: Peer rows or dicts, each with an id
            deadline: Optional time.monotonic() value; checked once per student

        Returns:
            One MatchEdge per (student, peer) pair, in input order

        Raises:
            MatchDeadlineExceeded: If the deadline passes while scoring
        """
        total = len(students) * len(peers)
        edges: List[MatchEdge] = []

        for student in students:
            if deadline is not None and time.monotonic() > deadline:
                raise MatchDeadlineExceeded(edges_built=len(edges), edges_total=total)

            student_id = field_value(student, "id")
            for peer in peers:
                result = self.scorer.score(student, peer)
                edges.append(MatchEdge(
                    student_id=student_id,
                    peer_id=field_value(peer, "id"),
                    score=result.total,
                    breakdown=result.breakdown,
                ))

        return edges

    @staticmethod
    def sort_edges(edges: List[MatchEdge]) -> List[MatchEdge]:
        """Sort by score only, highest first. Ties keep build order."""
        return sorted(edges, key=lambda edge: edge.score, reverse=True)

    def plan(self, students: Sequence[Any], peers: Sequence[Any], deadline: Optional[float] = None) -> List[MatchEdge]:
        """Build and sort edges ready for committing."""
        return self.sort_edges(self.build_edges(students, peers, deadline=deadline))

    @staticmethod
    async def commit_assignments(
        edges: List[MatchEdge],
        commit: Callable[[MatchEdge], Awaitable[Any]],
    ) -> BulkMatchOutcome:
        """
        Greedily commit sorted edges through a storage callback.

        A StorageFailureError from the callback aborts that edge only: its
        student and peer stay free for later edges and the pass continues.

        Args:
            edges: Edges already sorted by sort_edges()
            commit: Async callable persisting one edge and returning the
                created assignment

        Returns:
            BulkMatchOutcome with created assignments and failure count
        """
        assignment = GreedyAssignment()
        outcome = BulkMatchOutcome(edges_considered=len(edges))

        for edge in edges:
            if not assignment.available(edge):
                continue

            try:
                created = await commit(edge)
            except StorageFailureError as e:
                outcome.failed += 1
                logger.error(
                    f"Failed to commit match student={edge.student_id} peer={edge.peer_id} "
                    f"score={edge.score}: {e.__cause__ or e}"
                )
                continue

            assignment.claim(edge)
            outcome.created.append(created)

        return outcome
