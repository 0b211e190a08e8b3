"""Tests for the allowed-amount OLS model."""

import numpy as np
import pytest

from medicare_panel.cohort import filter_cohort
from medicare_panel.panel import filter_balanced_panel
from medicare_panel.regression import (
    RegressionResult,
    Term,
    build_design_matrix,
    coefficient_table,
    fit_allowed_amount_model,
    top_specialty,
)


class TestDesignMatrix:

    def test_reference_levels_sort_first(self, regression_cohort):
        X, y, terms, refs = build_design_matrix(regression_cohort)
        assert refs == {"state": "NH", "specialty": "Cardiology"}
        assert list(X.columns) == [
            "const",
            "state[T.RI]",
            "specialty[T.Dermatology]",
            "specialty[T.Family Practice]",
            "specialty[T.Urology]",
            "year",
        ]
        assert [t.name for t in terms] == list(X.columns)

    def test_terms_tagged_by_kind(self, regression_cohort):
        _, _, terms, _ = build_design_matrix(regression_cohort)
        kinds = [t.kind for t in terms]
        assert kinds == ["intercept", "state", "specialty", "specialty", "specialty", "year"]
        assert terms[4].level == "Urology"

    def test_year_is_numeric(self, regression_cohort):
        X, _, _, _ = build_design_matrix(regression_cohort)
        assert set(X["year"]) == {2022.0, 2023.0}

    def test_rows_missing_outcome_dropped(self, combined):
        cohort = filter_cohort(filter_balanced_panel(combined), ["RI", "NH"])
        X, y, _, _ = build_design_matrix(cohort)
        assert len(X) == len(y) == 13
        assert not y.isna().any()


class TestFitModel:

    def test_coefficient_count(self, regression_cohort):
        result = fit_allowed_amount_model(regression_cohort)
        n_states = regression_cohort["state"].nunique()
        n_specialties = regression_cohort["specialty"].nunique()
        assert result.n_coefficients == 1 + (n_states - 1) + (n_specialties - 1) + 1

    def test_adjusted_r2_not_above_r2(self, regression_cohort):
        result = fit_allowed_amount_model(regression_cohort)
        assert result.adj_r_squared <= result.r_squared
        assert 0.0 <= result.r_squared <= 1.0

    def test_recovers_effects(self, regression_cohort):
        result = fit_allowed_amount_model(regression_cohort)
        by_name = {t.name: t for t in result.terms}
        assert by_name["year"].estimate == pytest.approx(10.0, abs=3.0)
        assert by_name["state[T.RI]"].estimate == pytest.approx(40.0, abs=3.0)
        assert by_name["specialty[T.Urology]"].estimate == pytest.approx(200.0, abs=5.0)
        assert by_name["specialty[T.Urology]"].p_value < 0.001

    def test_top_specialty(self, regression_cohort):
        result = fit_allowed_amount_model(regression_cohort)
        best = top_specialty(result)
        assert best.kind == "specialty"
        assert best.level == "Urology"

    def test_small_cohort(self, combined):
        cohort = filter_cohort(filter_balanced_panel(combined), ["RI", "NH"])
        result = fit_allowed_amount_model(cohort)
        assert result.n_obs == 13
        assert result.n_coefficients == 6
        assert result.adj_r_squared <= result.r_squared

    def test_coefficient_table(self, regression_cohort):
        result = fit_allowed_amount_model(regression_cohort)
        table = coefficient_table(result)
        assert list(table.columns) == [
            "term", "kind", "level", "estimate", "std_error", "t_stat", "p_value",
        ]
        assert len(table) == result.n_coefficients
        assert np.isfinite(table["std_error"]).all()


class TestTopSpecialty:

    def _result(self, terms):
        return RegressionResult(
            terms=terms, r_squared=0.5, adj_r_squared=0.4, n_obs=10,
            reference_levels={"state": "NH", "specialty": "A"},
        )

    def test_ignores_non_specialty_terms(self):
        result = self._result([
            Term("const", "intercept", None, estimate=1000.0),
            Term("state[T.RI]", "state", "RI", estimate=900.0),
            Term("specialty[T.B]", "specialty", "B", estimate=5.0),
            Term("specialty[T.C]", "specialty", "C", estimate=50.0),
            Term("year", "year", None, estimate=800.0),
        ])
        assert top_specialty(result).level == "C"

    def test_tie_keeps_first(self):
        result = self._result([
            Term("specialty[T.B]", "specialty", "B", estimate=50.0),
            Term("specialty[T.C]", "specialty", "C", estimate=50.0),
        ])
        assert top_specialty(result).level == "B"

    def test_no_specialty_terms(self):
        result = self._result([Term("const", "intercept", None, estimate=1.0)])
        assert top_specialty(result) is None
