"""
Tests for variables, domains and assignments.
"""

import itertools

import numpy as np
import pytest

from pgibbs.algebra.domain import Assignment, Domain, Variable


class TestVariable:
    def test_ordering_by_id(self):
        assert Variable(0, 5) < Variable(1, 2)
        assert sorted([Variable(2), Variable(0), Variable(1)])[0].id == 0

    def test_invalid_arity_raises(self):
        with pytest.raises(ValueError):
            Variable(0, 0)

    def test_negative_id_raises(self):
        with pytest.raises(ValueError):
            Variable(-1, 2)


class TestDomain:
    def test_canonical_order(self):
        a, b, c = Variable(0, 2), Variable(1, 3), Variable(2, 2)
        d1 = Domain([c, a, b])
        d2 = Domain([b, c, a])

        assert d1 == d2
        assert [v.id for v in d1.variables] == [0, 1, 2]
        assert d1.size() == 12
        assert d1.strides == (1, 2, 6)

    def test_duplicate_raises(self):
        with pytest.raises(ValueError):
            Domain([Variable(0), Variable(0)])

    def test_union(self):
        a, b = Variable(3, 2), Variable(1, 4)
        d = Domain([a]) + Domain([b])

        assert [v.id for v in d.variables] == [1, 3]
        assert d.size() == 8

    def test_union_overlapping(self):
        a, b, c = Variable(0), Variable(1), Variable(2)
        d = Domain([a, b]) + Domain([b, c])
        assert d.num_vars() == 3

    def test_union_arity_conflict_raises(self):
        with pytest.raises(ValueError):
            Domain([Variable(0, 2)]) + Domain([Variable(0, 3)])

    def test_index_of_missing_raises(self):
        d = Domain([Variable(0)])
        with pytest.raises(KeyError):
            d.index_of(5)

    def test_contains(self):
        d = Domain([Variable(4, 2)])
        assert 4 in d
        assert Variable(4, 2) in d
        assert 3 not in d


class TestAssignment:
    @pytest.fixture
    def domain(self):
        return Domain([Variable(2, 2), Variable(0, 3), Variable(5, 4)])

    def test_iteration_covers_index_space(self, domain):
        asgs = list(domain)

        assert len(asgs) == 3 * 2 * 4
        assert [a.linear_index for a in asgs] == list(range(domain.size()))
        assert len({a.values for a in asgs}) == domain.size()

    def test_first_variable_is_least_significant(self, domain):
        asgs = list(domain)
        # Lowest id (variable 0, arity 3) cycles fastest
        assert [a.asg(0) for a in asgs[:4]] == [0, 1, 2, 0]
        assert asgs[3].asg(2) == 1

    def test_decode_recovers_values(self, domain):
        for values in itertools.product(range(3), range(2), range(4)):
            a = Assignment(domain, values)
            b = Assignment.from_linear_index(domain, a.linear_index)
            assert a == b

    def test_value_out_of_range_raises(self, domain):
        with pytest.raises(ValueError):
            Assignment(domain, (3, 0, 0))

    def test_linear_index_out_of_range_raises(self, domain):
        with pytest.raises(ValueError):
            Assignment.from_linear_index(domain, domain.size())

    def test_set_asg(self, domain):
        a = domain.begin().set_asg(5, 3)

        assert a.asg(5) == 3
        assert a.linear_index == 3 * 6

    def test_uniform_sample_in_range(self, domain):
        rng = np.random.default_rng(0)
        for _ in range(20):
            a = Assignment.uniform_sample(domain, rng)
            assert 0 <= a.linear_index < domain.size()
