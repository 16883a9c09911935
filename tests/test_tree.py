"""
Tests for the vertex tree-growth state machine.
"""

import threading

import pytest

from pgibbs.algebra.domain import Variable
from pgibbs.graph.records import VertexData
from pgibbs.graph.tree import (
    NULL_VID,
    AtomicCounter,
    Available,
    Boundary,
    Calibrated,
    Candidate,
    InvalidTransitionError,
    TreeNode,
    VertexState,
    tree_state_from_fields,
)


@pytest.fixture
def vertex(rng):
    return VertexData(Variable(2, 2), [0], rng=rng)


class TestAtomicCounter:
    def test_concurrent_increments(self):
        counter = AtomicCounter()

        def work():
            for _ in range(1000):
                counter.increment()

        threads = [threading.Thread(target=work) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter.value == 8000

    def test_decrement_and_reset(self):
        counter = AtomicCounter(3)
        assert counter.decrement() == 2
        counter.reset()
        assert counter.value == 0


class TestTransitions:
    def test_initial_state(self, vertex):
        assert vertex.state == VertexState.AVAILABLE
        assert vertex.parent is None
        assert vertex.parent_vid == NULL_VID
        assert vertex.height == 0

    def test_empty_factor_list_raises(self):
        with pytest.raises(ValueError):
            VertexData(Variable(0), [])

    def test_make_root(self, vertex):
        vertex.make_root()
        assert vertex.tree == Boundary(None, 0)

    def test_single_proposal_accepted(self, vertex):
        assert vertex.propose(1, 4)
        assert vertex.tree == Candidate(1)
        assert vertex.child_candidates.value == 1

        parent, losers = vertex.settle_candidacy()

        assert parent == 1
        assert losers == []
        assert vertex.state == VertexState.BOUNDARY
        assert vertex.height == 5
        assert vertex.child_candidates.value == 0

    def test_two_concurrent_proposers_lowest_id_wins(self, vertex):
        barrier = threading.Barrier(2)

        def bid(proposer, height):
            barrier.wait()
            vertex.propose(proposer, height)

        threads = [
            threading.Thread(target=bid, args=(3, 2)),
            threading.Thread(target=bid, args=(1, 0)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert vertex.child_candidates.value == 2
        assert vertex.tree == Candidate(1)

        parent, losers = vertex.settle_candidacy()

        assert parent == 1
        assert losers == [3]
        assert vertex.height == 1
        assert vertex.child_candidates.value == 0
        assert vertex.suitors == ()

    def test_proposal_to_tree_member_refused(self, vertex):
        vertex.make_root()
        assert vertex.propose(0, 0) is False
        assert vertex.child_candidates.value == 0

    def test_reject_candidacy(self, vertex):
        vertex.propose(1, 0)
        vertex.reject_candidacy()

        assert vertex.state == VertexState.AVAILABLE
        assert vertex.child_candidates.value == 0

    def test_full_lifecycle(self, vertex):
        vertex.propose(0, 0)
        vertex.settle_candidacy()
        vertex.finish_frontier()
        assert vertex.tree == TreeNode(0, 1, 0)

        assert vertex.mark_up() == 1
        assert vertex.mark_up() == 2
        vertex.calibrate(2)

        assert vertex.tree == Calibrated(0, 1)
        assert vertex.marked_up == 0

        vertex.reset_tree()
        assert vertex.tree == Available()

    def test_calibrate_before_children_report_raises(self, vertex):
        vertex.make_root()
        vertex.finish_frontier()
        vertex.mark_up()
        with pytest.raises(InvalidTransitionError):
            vertex.calibrate(2)

    def test_wrong_state_raises(self, vertex):
        with pytest.raises(InvalidTransitionError):
            vertex.finish_frontier()
        with pytest.raises(InvalidTransitionError):
            vertex.settle_candidacy()
        with pytest.raises(InvalidTransitionError):
            vertex.mark_up()
        vertex.make_root()
        with pytest.raises(InvalidTransitionError):
            vertex.make_root()

    def test_restore_suitor_must_match_parent(self, vertex):
        vertex.propose(1, 0)
        with pytest.raises(ValueError):
            vertex.restore_suitor(4, 0)

    def test_record_update(self, vertex):
        assert vertex.record_update() == 1
        assert vertex.updates == 1


class TestFlatEncoding:
    def test_round_trip(self):
        for tree in (Available(), Candidate(4), Boundary(None, 0), Boundary(2, 3), TreeNode(1, 2), Calibrated(5, 1)):
            parent = getattr(tree, "parent", None)
            flat = (int(tree.state), NULL_VID if parent is None else parent, getattr(tree, "height", 0))
            assert tree_state_from_fields(*flat) == tree

    def test_unknown_state_raises(self):
        with pytest.raises(ValueError):
            tree_state_from_fields(9, NULL_VID, 0)

    def test_candidate_without_parent_raises(self):
        with pytest.raises(ValueError):
            tree_state_from_fields(int(VertexState.CANDIDATE), NULL_VID, 0)
