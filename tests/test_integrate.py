"""
Unit tests for time grids and the ODE solver wrapper.

Tests cover:
- Grid endpoints and step validation
- Solver results and error handling
"""

import pytest
import numpy as np

from mbcs.integrate import make_time_grid, solve_ode


class TestTimeGrid:
    """Tests for make_time_grid."""

    def test_endpoints(self):
        """Test both endpoints are on the grid."""
        t = make_time_grid(0.0, 100.0, 0.1)
        assert len(t) == 1001
        assert t[0] == 0.0
        np.testing.assert_allclose(t[-1], 100.0)

    def test_offset_start(self):
        """Test a grid that does not start at zero."""
        t = make_time_grid(5.0, 15.0, 0.5)
        np.testing.assert_allclose(t, np.linspace(5.0, 15.0, 21))

    def test_step_must_divide_interval(self):
        """Test a step that would miss t_max raises error."""
        with pytest.raises(ValueError, match="must divide"):
            make_time_grid(0.0, 1.0, 0.3)
        with pytest.raises(ValueError, match="must divide"):
            make_time_grid(0.0, 1.0, 0.6)

    def test_invalid_inputs(self):
        """Test non-positive step and empty interval raise errors."""
        with pytest.raises(ValueError, match="dt must be > 0"):
            make_time_grid(0.0, 1.0, 0.0)
        with pytest.raises(ValueError, match="must be > t_min"):
            make_time_grid(1.0, 1.0, 0.1)


class TestSolveOde:
    """Tests for solve_ode."""

    def test_exponential_decay(self):
        """Test dy/dt = -y gives e^{-t}."""
        t = make_time_grid(0.0, 5.0, 0.5)
        result = solve_ode(lambda _, y: -y, [1.0], (0.0, 5.0), t_eval=t)
        assert result.success
        np.testing.assert_allclose(result.y[0], np.exp(-t), rtol=1e-6)

    def test_empty_span(self):
        """Test an empty time span raises error."""
        with pytest.raises(ValueError, match="must be > start"):
            solve_ode(lambda _, y: -y, [1.0], (1.0, 1.0))
