"""
Unit tests for the stem cell model.

Tests cover:
- DivisionModes and StemCellParameters validation
- Closed-form solution, balanced limit and apoptosis
- Agreement between closed form and the division recurrence
- Recovering pp - dd and T from sampled data
"""

import pytest
import numpy as np

from mbcs.stemcells import (
    DivisionModes,
    StemCellParameters,
    STEM_CELL_SCENARIOS,
    ESTIMATION_CASES,
    get_scenario_params,
    growth_factor,
    progenitors,
    differentiated,
    apoptotic,
    simulate,
    iterate_divisions,
    estimate_parameters,
)


class TestParameters:
    """Tests for parameter validation."""

    def test_default_parameters(self):
        """Test default parameter creation."""
        params = StemCellParameters()
        assert params.modes.pp == 0.6
        assert params.modes.dd == 0.2
        assert params.P0 == 100.0
        assert params.cycle_length == 24.0

    def test_pd_complement(self):
        """Test pd = 1 - pp - dd - ø."""
        modes = DivisionModes(pp=0.3, dd=0.2, apoptosis=0.1)
        np.testing.assert_allclose(modes.pd, 0.4)

    def test_probability_out_of_range(self):
        """Test probabilities outside [0, 1] raise error."""
        with pytest.raises(ValueError, match=r"pp must be in \[0, 1\]"):
            DivisionModes(pp=-0.1, dd=0.1)

    def test_probabilities_sum(self):
        """Test pp + dd + ø > 1 raises error."""
        with pytest.raises(ValueError, match="must be <= 1"):
            DivisionModes(pp=0.6, dd=0.5)

    def test_invalid_cycle_length(self):
        """Test T <= 0 raises error."""
        with pytest.raises(ValueError, match="cycle_length must be > 0"):
            StemCellParameters(cycle_length=0.0)

    def test_invalid_P0(self):
        """Test P0 <= 0 raises error."""
        with pytest.raises(ValueError, match="P0 must be > 0"):
            StemCellParameters(P0=0.0)

    def test_scenarios(self):
        """Test scenario lookup keeps the base parameters."""
        base = StemCellParameters(P0=10.0, cycle_length=12.0)
        for name in STEM_CELL_SCENARIOS:
            params = get_scenario_params(name, base)
            assert params.modes.pp == STEM_CELL_SCENARIOS[name]["pp"]
            assert params.P0 == 10.0
            assert params.cycle_length == 12.0

    def test_unknown_scenario(self):
        """Test invalid scenario raises error."""
        with pytest.raises(ValueError, match="Unknown scenario"):
            get_scenario_params("quiescent")


class TestClosedForm:
    """Tests for the closed-form solution."""

    def test_growth_factor(self):
        """Test r = 1 + pp - dd - ø."""
        np.testing.assert_allclose(growth_factor(DivisionModes(0.6, 0.2, 0.1)), 1.3)

    def test_initial_values(self):
        """Test P(0) = P0, D(0) = D0, A(0) = 0."""
        modes = DivisionModes(0.6, 0.2, 0.1)
        assert progenitors(0.0, 100.0, modes, 24.0) == 100.0
        assert differentiated(0.0, 100.0, 50.0, modes, 24.0) == 50.0
        assert apoptotic(0.0, 100.0, modes, 24.0) == 0.0

    def test_progenitors_per_cycle(self):
        """Test P multiplies by r every cycle."""
        modes = DivisionModes(0.6, 0.2)
        P = progenitors([0.0, 24.0, 48.0], 100.0, modes, 24.0)
        np.testing.assert_allclose(P, [100.0, 140.0, 196.0])

    def test_expanding_pool(self):
        """Test pp > dd grows both populations."""
        traj = simulate(get_scenario_params("expanding"))
        assert np.all(np.diff(traj.P) > 0)
        assert np.all(np.diff(traj.D) > 0)

    def test_differentiating_pool(self):
        """Test dd > pp depletes progenitors while D grows."""
        traj = simulate(get_scenario_params("differentiating"))
        assert np.all(np.diff(traj.P) < 0)
        assert np.all(np.diff(traj.D) > 0)

    def test_balanced_limit(self):
        """Test pp = dd keeps P constant and D grows linearly."""
        modes = DivisionModes(pp=0.2, dd=0.2)
        t = np.array([0.0, 10.0, 20.0])
        np.testing.assert_allclose(progenitors(t, 100.0, modes, 10.0), 100.0)
        # D0 + P0 (1 - pp + dd) t / T
        np.testing.assert_allclose(differentiated(t, 100.0, 5.0, modes, 10.0), [5.0, 105.0, 205.0])

    def test_balanced_limit_continuous(self):
        """Test the near-balanced solution approaches the balanced limit."""
        t = np.linspace(0, 50, 11)
        near = differentiated(t, 100.0, 0.0, DivisionModes(pp=0.2 + 1e-7, dd=0.2), 10.0)
        exact = differentiated(t, 100.0, 0.0, DivisionModes(pp=0.2, dd=0.2), 10.0)
        np.testing.assert_allclose(near, exact, rtol=1e-4)

    def test_cell_balance_with_apoptosis(self):
        """Test A and D - D0 grow in the ratio ø : (1 - pp + dd - ø)."""
        modes = DivisionModes(pp=0.5, dd=0.1, apoptosis=0.1)
        t = np.linspace(0, 100, 101)
        P = progenitors(t, 100.0, modes, 10.0)
        D = differentiated(t, 100.0, 0.0, modes, 10.0)
        A = apoptotic(t, 100.0, modes, 10.0)
        # A / (D - D0) = ø / (1 - pp + dd - ø)
        np.testing.assert_allclose(A[1:] / D[1:], 0.1 / 0.5)
        assert np.all(P > 0)

    def test_no_apoptosis_is_zero(self):
        """Test A = 0 without apoptosis."""
        traj = simulate(StemCellParameters())
        assert np.all(traj.A == 0.0)

    def test_simulate_grid(self):
        """Test the time grid of a run."""
        traj = simulate(StemCellParameters(t_max=10.0, dt=0.5))
        assert len(traj.t) == 21
        np.testing.assert_allclose(traj.t[-1], 10.0)
        np.testing.assert_allclose(traj.total, traj.P + traj.D)


class TestRecurrence:
    """Tests for the discrete division recurrence."""

    @pytest.mark.parametrize("pp,dd,apoptosis", [(0.6, 0.2, 0.0), (0.1, 0.4, 0.0), (0.5, 0.1, 0.2)])
    def test_matches_closed_form(self, pp, dd, apoptosis):
        """Test the recurrence equals the closed form at whole cycles."""
        modes = DivisionModes(pp, dd, apoptosis)
        rec = iterate_divisions(100.0, 50.0, modes, n_cycles=8)
        t = rec.t * 24.0
        np.testing.assert_allclose(rec.P, progenitors(t, 100.0, modes, 24.0), rtol=1e-10)
        np.testing.assert_allclose(rec.D, differentiated(t, 100.0, 50.0, modes, 24.0), rtol=1e-10)
        np.testing.assert_allclose(rec.A, apoptotic(t, 100.0, modes, 24.0), rtol=1e-10, atol=1e-10)

    def test_invalid_cycles(self):
        """Test n_cycles < 1 raises error."""
        with pytest.raises(ValueError, match="n_cycles must be >= 1"):
            iterate_divisions(1.0, 0.0, DivisionModes(0.5, 0.1), 0)


class TestEstimation:
    """Tests for recovering pp - dd and T."""

    def test_expanding_recovered_exactly(self):
        """Test the estimator is exact for pp - dd > 0."""
        case = ESTIMATION_CASES["expanding"]
        params = StemCellParameters(modes=DivisionModes(case["pp"], case["dd"]),
                                    cycle_length=case["cycle_length"])
        traj = simulate(params)
        est = estimate_parameters(traj.t, traj.P, traj.D)
        np.testing.assert_allclose(est.pp_minus_dd, 0.4, rtol=1e-6)
        np.testing.assert_allclose(est.cycle_length, 24.0, rtol=1e-6)
        ppdd, T = est.median()
        np.testing.assert_allclose([ppdd, T], [0.4, 24.0], rtol=1e-6)

    def test_shrinking_sign_recovered(self):
        """Test pp - dd < 0 is recovered but T drifts."""
        params = StemCellParameters(modes=DivisionModes(0.0, 0.1), cycle_length=20.0)
        traj = simulate(params)
        est = estimate_parameters(traj.t, traj.P, traj.D)
        np.testing.assert_allclose(est.pp_minus_dd, -0.1, rtol=1e-6)
        # ln(1.1) / |ln(0.9)| != 1
        np.testing.assert_allclose(est.cycle_length, 20.0 * np.log(1.1) / abs(np.log(0.9)), rtol=1e-6)

    def test_no_change_is_nan(self):
        """Test intervals without change give nan."""
        est = estimate_parameters([0.0, 1.0], [10.0, 10.0], [5.0, 5.0])
        assert np.isnan(est.pp_minus_dd[0])
        assert np.isnan(est.cycle_length[0])

    def test_validation(self):
        """Test shape, length, ordering and positivity checks."""
        with pytest.raises(ValueError, match="equal length"):
            estimate_parameters([0, 1], [1, 2, 3], [1, 2])
        with pytest.raises(ValueError, match="at least 2 samples"):
            estimate_parameters([0.0], [1.0], [1.0])
        with pytest.raises(ValueError, match="strictly increasing"):
            estimate_parameters([1.0, 0.0], [1.0, 2.0], [1.0, 2.0])
        with pytest.raises(ValueError, match="P must be > 0"):
            estimate_parameters([0.0, 1.0], [0.0, 2.0], [1.0, 2.0])
