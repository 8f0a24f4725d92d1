"""
Unit tests for BulkMatcher

Tests edge construction, score-only sorting, greedy uniqueness, partial
commit failure and the scoring deadline.
"""

import time

import pytest
from pydantic import ValidationError

from app.errors import MatchDeadlineExceeded, StorageFailureError
from app.services.bulk_matcher import BulkMatcher, GreedyAssignment, MatchEdge
from app.services.match_scorer import ScoreBreakdown


def student(student_id, subject="Math", budget=3000, experience=1):
    return {"id": student_id, "subject": subject, "range_budget": budget, "experience": experience}


def peer(peer_id, domain="Math", charges=3000, rating=4, experience=2):
    return {"id": peer_id, "domain": domain, "charges": charges, "rating": rating, "experience": experience}


def edge(student_id, peer_id, score):
    breakdown = ScoreBreakdown(domain_score=0, budget_score=0, rating_score=0, exp_score=0)
    return MatchEdge(student_id=student_id, peer_id=peer_id, score=score, breakdown=breakdown)


@pytest.fixture
def matcher():
    return BulkMatcher()


class TestBuildEdges:
    """Test edge construction"""

    def test_complete_bipartite(self, matcher):
        edges = matcher.build_edges([student("s1"), student("s2")], [peer("p1"), peer("p2"), peer("p3")])

        assert len(edges) == 6
        assert [(e.student_id, e.peer_id) for e in edges[:3]] == [("s1", "p1"), ("s1", "p2"), ("s1", "p3")]

    def test_deadline_exceeded(self, matcher):
        with pytest.raises(MatchDeadlineExceeded) as exc_info:
            matcher.build_edges([student("s1")], [peer("p1")], deadline=time.monotonic() - 1)

        assert exc_info.value.details["edges_total"] == 1
        assert exc_info.value.details["edges_built"] == 0

    def test_future_deadline_ok(self, matcher):
        edges = matcher.build_edges([student("s1")], [peer("p1")], deadline=time.monotonic() + 60)
        assert len(edges) == 1


class TestSortEdges:
    """Test score-only stable sort"""

    def test_descending(self):
        edges = [edge("s1", "p1", 0.2), edge("s1", "p2", 0.9), edge("s2", "p1", 0.5)]

        ordered = BulkMatcher.sort_edges(edges)

        assert [e.score for e in ordered] == [0.9, 0.5, 0.2]

    def test_ties_keep_build_order(self):
        edges = [edge("s1", "p1", 0.5), edge("s2", "p1", 0.5), edge("s1", "p2", 0.5)]

        ordered = BulkMatcher.sort_edges(edges)

        assert ordered == edges


async def record_edge(e):
    return e


def pairs(edges):
    return [(e.student_id, e.peer_id) for e in edges]


@pytest.mark.asyncio
class TestGreedySelection:
    """Test conflict-free greedy selection on the committing pass"""

    async def test_each_entity_at_most_once(self, matcher):
        students = [student(f"s{i}", budget=1000 + i * 500) for i in range(5)]
        peers = [peer(f"p{i}", charges=1000 + i * 700) for i in range(3)]

        outcome = await matcher.commit_assignments(matcher.plan(students, peers), record_edge)

        student_ids = [e.student_id for e in outcome.created]
        peer_ids = [e.peer_id for e in outcome.created]
        assert len(set(student_ids)) == len(student_ids)
        assert len(set(peer_ids)) == len(peer_ids)
        assert outcome.total_created == min(len(students), len(peers))
        assert outcome.edges_considered == 15

    async def test_highest_edge_first(self):
        edges = BulkMatcher.sort_edges([
            edge("s1", "p1", 0.9),
            edge("s1", "p2", 0.8),
            edge("s2", "p1", 0.85),
            edge("s2", "p2", 0.1),
        ])

        outcome = await BulkMatcher.commit_assignments(edges, record_edge)

        # s1-p1 blocks s2-p1, leaving s2 with p2
        assert pairs(outcome.created) == [("s1", "p1"), ("s2", "p2")]

    async def test_two_students_one_peer(self, matcher):
        students = [student("s1"), student("s2")]
        peers = [peer("p1")]

        outcome = await matcher.commit_assignments(matcher.plan(students, peers), record_edge)

        assert outcome.total_created == 1
        assert outcome.created[0].peer_id == "p1"
        assert outcome.failed == 0

    async def test_deterministic(self, matcher):
        students = [student(f"s{i}", subject="Math" if i % 2 else "Physics") for i in range(6)]
        peers = [peer(f"p{i}", domain="Math" if i % 2 else "Physics") for i in range(4)]

        first = await matcher.commit_assignments(matcher.plan(students, peers), record_edge)
        second = await matcher.commit_assignments(matcher.plan(students, peers), record_edge)

        assert pairs(first.created) == pairs(second.created)


class TestGreedyBookkeeping:
    """Test the per-run matched sets and edge values"""

    def test_assignment_tracker(self):
        assignment = GreedyAssignment()
        first = edge("s1", "p1", 1)

        assert assignment.available(first)
        assignment.claim(first)
        assert not assignment.available(edge("s1", "p2", 1))
        assert not assignment.available(edge("s2", "p1", 1))
        assert assignment.available(edge("s2", "p2", 1))

    def test_edges_are_immutable(self):
        with pytest.raises(ValidationError):
            edge("s1", "p1", 0.5).score = 1.0


@pytest.mark.asyncio
class TestCommitAssignments:
    """Test committing through a storage callback"""

    async def test_commits_in_sorted_order(self):
        edges = BulkMatcher.sort_edges([edge("s1", "p1", 0.4), edge("s2", "p2", 0.9)])
        committed = []

        async def commit(e):
            committed.append((e.student_id, e.peer_id))
            return e

        outcome = await BulkMatcher.commit_assignments(edges, commit)

        assert committed == [("s2", "p2"), ("s1", "p1")]
        assert outcome.total_created == 2
        assert outcome.failed == 0
        assert outcome.edges_considered == 2

    async def test_failed_edge_leaves_endpoints_free(self):
        edges = [edge("s1", "p1", 0.9), edge("s1", "p2", 0.8), edge("s2", "p1", 0.7)]

        async def commit(e):
            if (e.student_id, e.peer_id) == ("s1", "p1"):
                raise StorageFailureError("create_session", "session")
            return e

        outcome = await BulkMatcher.commit_assignments(edges, commit)

        assert outcome.failed == 1
        assert [(e.student_id, e.peer_id) for e in outcome.created] == [("s1", "p2"), ("s2", "p1")]

    async def test_other_errors_propagate(self):
        async def commit(e):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await BulkMatcher.commit_assignments([edge("s1", "p1", 0.5)], commit)
