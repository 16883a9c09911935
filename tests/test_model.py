"""
Tests for the factorized model and the text model loader.
"""

import logging

import numpy as np
import pytest

from pgibbs.algebra.domain import Domain, Variable
from pgibbs.algebra.factor import TableFactor
from pgibbs.model.factorized import FactorizedModel
from pgibbs.model.loader import ModelFormatError, load_alchemy, parse_alchemy


class TestFactorizedModel:
    def test_add_factor_registers_variables(self):
        x, y, z = Variable(0), Variable(1, 3), Variable(2)
        model = FactorizedModel()
        f0 = model.add_factor(TableFactor(Domain([x, y])))
        f1 = model.add_factor(TableFactor(Domain([y, z])))

        assert (f0, f1) == (0, 1)
        assert model.variables() == [x, y, z]
        assert model.factor_ids(x) == [0]
        assert model.factor_ids(y) == [0, 1]
        assert model.factor_ids(2) == [1]

    def test_variable_set_is_union_of_domains(self):
        model = FactorizedModel()
        model.add_factor(TableFactor(Domain([Variable(3), Variable(1)])))
        model.add_factor(TableFactor(Domain([Variable(1)])))
        assert [v.id for v in model.variables()] == [1, 3]

    def test_factor_ids_unknown_raises(self):
        model = FactorizedModel()
        with pytest.raises(KeyError):
            model.factor_ids(Variable(0))

    def test_arity_conflict_raises(self):
        model = FactorizedModel()
        model.add_factor(TableFactor(Domain([Variable(0, 2)])))
        with pytest.raises(ValueError):
            model.add_factor(TableFactor(Domain([Variable(0, 3)])))

    def test_validate_dense_ids(self):
        model = FactorizedModel()
        model.add_factor(TableFactor(Domain([Variable(0), Variable(2)])))
        with pytest.raises(ValueError):
            model.validate()

    def test_var_name(self):
        model = FactorizedModel()
        model.set_var_names(["A", "B"])
        assert model.var_name(1) == "B"
        with pytest.raises(KeyError):
            model.var_name(2)


class TestLoader:
    def test_chain_model(self, chain_model):
        assert chain_model.var_names() == ("A", "B", "C")
        assert chain_model.num_factors == 3
        assert [v.arity for v in chain_model.variables()] == [2, 3, 2]
        assert chain_model.factor_ids(0) == [0, 2]
        assert chain_model.factor_ids(1) == [0, 1]

    def test_file_order_matches_canonical_for_sorted_args(self, chain_model):
        f = chain_model.factors()[0]
        assert np.allclose(f.logp, [0.0, -1.0, -2.0, -0.5, -0.1, -3.0])

    def test_two_variable_uniform_factor(self):
        model = parse_alchemy("variables:\nA\t2\nB\t2\nfactors:\nA/B// 0.0 0.0 0.0 0.0\n")

        assert model.num_factors == 1
        f = model.factors()[0]
        assert f.size() == 4
        assert np.all(f.logp == 0.0)

    def test_reversed_argument_order_stores_same_table(self):
        header = "variables:\nA\t2\nB\t3\nfactors:\n"
        m_ba = parse_alchemy(header + "B/A// 0 1 2 3 4 5\n")
        m_ab = parse_alchemy(header + "A/B// 0 3 1 4 2 5\n")

        assert m_ba.factors()[0] == m_ab.factors()[0]
        assert np.allclose(m_ba.factors()[0].logp, [0, 3, 1, 4, 2, 5])

    def test_weight_is_preserved(self, chain_model):
        assert chain_model.factor_weight(0) is None
        assert chain_model.factor_weight(1) == 1.5

    def test_default_arity(self):
        model = parse_alchemy("variables:\nA\nfactors:\nA// 0 0 0\n", default_arity=3)
        assert model.variables()[0].arity == 3

    def test_blank_factor_lines_skipped(self):
        model = parse_alchemy("variables:\nA\nfactors:\n\nA// 0 0\n\n")
        assert model.num_factors == 1

    def test_trailing_values_ignored_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pgibbs.model.loader"):
            model = parse_alchemy("variables:\nA\nfactors:\nA// 1 2 3\n")
        assert np.allclose(model.factors()[0].logp, [1, 2])
        assert "trailing" in caplog.text

    def test_load_from_file(self, tmp_path, chain_text):
        path = tmp_path / "chain.txt"
        path.write_text(chain_text)
        model = load_alchemy(path)
        assert model.num_factors == 3


class TestLoaderErrors:
    def test_missing_variables_header(self):
        with pytest.raises(ModelFormatError):
            parse_alchemy("vars:\nA\nfactors:\n")

    def test_missing_factors_header(self):
        with pytest.raises(ModelFormatError):
            parse_alchemy("variables:\nA\nB\n")

    def test_empty_file(self):
        with pytest.raises(ModelFormatError):
            parse_alchemy("")

    def test_repeated_variable_in_factor(self):
        with pytest.raises(ModelFormatError) as exc:
            parse_alchemy("variables:\nA\nB\nfactors:\nA/B// 0 0 0 0\nA/A// 0 0 0 0\n")
        assert exc.value.line_number == 6

    def test_unknown_variable(self):
        with pytest.raises(ModelFormatError):
            parse_alchemy("variables:\nA\nfactors:\nA/Q// 0 0 0 0\n")

    def test_too_few_values(self):
        with pytest.raises(ModelFormatError):
            parse_alchemy("variables:\nA\nB\nfactors:\nA/B// 0 0 0\n")

    def test_missing_separator(self):
        with pytest.raises(ModelFormatError):
            parse_alchemy("variables:\nA\nfactors:\nA 0 0\n")

    def test_bad_value(self):
        with pytest.raises(ModelFormatError):
            parse_alchemy("variables:\nA\nfactors:\nA// 0 x\n")

    def test_bad_weight(self):
        with pytest.raises(ModelFormatError):
            parse_alchemy("variables:\nA\nfactors:\nA// 0 0 /// heavy\n")

    def test_bad_arity(self):
        with pytest.raises(ModelFormatError):
            parse_alchemy("variables:\nA\ttwo\nfactors:\n")

    def test_empty_variable_line(self):
        with pytest.raises(ModelFormatError):
            parse_alchemy("variables:\nA\n\nB\nfactors:\n")

    def test_duplicate_declaration(self):
        with pytest.raises(ModelFormatError):
            parse_alchemy("variables:\nA\nA\nfactors:\n")

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_alchemy("")
