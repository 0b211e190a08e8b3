"""
OLS model of Medicare-allowed amount on state, specialty and year.

The design matrix is built explicitly so every coefficient carries a
(kind, level) tag from construction. Categorical predictors use
reference-level dummy coding with the lexicographically first level as
the reference; year enters as a continuous regressor (a single linear
trend, not a year fixed effect).
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np
import pandas as pd
import statsmodels.api as sm

OUTCOME = "allowed_amount"
CATEGORICAL_PREDICTORS = ["state", "specialty"]
TERM_KINDS = ("intercept", "state", "specialty", "year")


@dataclass
class Term:
    """One fitted coefficient."""

    name: str
    kind: str
    level: Optional[str]
    estimate: float = np.nan
    std_error: float = np.nan
    t_stat: float = np.nan
    p_value: float = np.nan


@dataclass
class RegressionResult:
    """Fitted model with its structured coefficient table."""

    terms: list[Term]
    r_squared: float
    adj_r_squared: float
    n_obs: int
    reference_levels: dict[str, str]
    model: Any = field(default=None, repr=False)

    def terms_of_kind(self, kind: str) -> list[Term]:
        return [t for t in self.terms if t.kind == kind]

    @property
    def n_coefficients(self) -> int:
        return len(self.terms)


def build_design_matrix(
    df: pd.DataFrame,
) -> tuple[pd.DataFrame, pd.Series, list[Term], dict[str, str]]:
    """
    Build the regression design matrix.

    Rows missing the outcome or any predictor are dropped.

    Args:
        df: Cohort-filtered table

    Returns:
        Tuple of (X, y, term templates aligned with X's columns,
        reference level per categorical predictor)
    """
    data = df.dropna(subset=[OUTCOME, "state", "specialty", "year"])

    columns = {"const": np.ones(len(data))}
    terms = [Term(name="const", kind="intercept", level=None)]
    reference_levels = {}

    for predictor in CATEGORICAL_PREDICTORS:
        levels = sorted(data[predictor].astype(str).unique())
        if not levels:
            continue
        reference_levels[predictor] = levels[0]
        values = data[predictor].astype(str).to_numpy()
        for level in levels[1:]:
            name = f"{predictor}[T.{level}]"
            columns[name] = (values == level).astype(float)
            terms.append(Term(name=name, kind=predictor, level=level))

    columns["year"] = data["year"].astype(float).to_numpy()
    terms.append(Term(name="year", kind="year", level=None))

    X = pd.DataFrame(columns, index=data.index)
    y = data[OUTCOME].astype(float)

    return X, y, terms, reference_levels


def fit_allowed_amount_model(cohort: pd.DataFrame) -> RegressionResult:
    """
    Fit OLS of allowed amount on state, specialty and year.

    A singular design (for example, a single data year) is left to the
    numerical library to report.

    Args:
        cohort: Cohort-filtered table

    Returns:
        RegressionResult with one Term per design column
    """
    X, y, templates, reference_levels = build_design_matrix(cohort)

    model = sm.OLS(y, X).fit()

    terms = []
    for template in templates:
        terms.append(Term(
            name=template.name,
            kind=template.kind,
            level=template.level,
            estimate=float(model.params[template.name]),
            std_error=float(model.bse[template.name]),
            t_stat=float(model.tvalues[template.name]),
            p_value=float(model.pvalues[template.name]),
        ))

    print(f"  OLS: n={int(model.nobs):,}, R2={model.rsquared:.4f}, {len(terms)} coefficients")

    return RegressionResult(
        terms=terms,
        r_squared=float(model.rsquared),
        adj_r_squared=float(model.rsquared_adj),
        n_obs=int(model.nobs),
        reference_levels=reference_levels,
        model=model,
    )


def coefficient_table(result: RegressionResult) -> pd.DataFrame:
    """Return the coefficient table as a DataFrame."""
    return pd.DataFrame([
        {
            "term": t.name,
            "kind": t.kind,
            "level": t.level,
            "estimate": t.estimate,
            "std_error": t.std_error,
            "t_stat": t.t_stat,
            "p_value": t.p_value,
        }
        for t in result.terms
    ])


def rank_specialty_terms(result: RegressionResult) -> list[Term]:
    """Specialty terms sorted by estimate, highest first (stable on ties)."""
    return sorted(result.terms_of_kind("specialty"), key=lambda t: t.estimate, reverse=True)


def top_specialty(result: RegressionResult) -> Optional[Term]:
    """
    Return the specialty term with the highest estimated allowed amount.

    Only specialty dummies are considered; the intercept, state and year
    terms are ignored. Returns None when the model has no specialty terms.
    """
    ranked = rank_specialty_terms(result)
    return ranked[0] if ranked else None
