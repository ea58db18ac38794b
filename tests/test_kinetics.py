"""
Unit tests for the chemical kinetics module.

Tests cover:
- Reaction definitions and validation
- Mass-action rates and ODE integration
- Equilibrium constants, quotients and units
- Arrhenius law
"""

import pytest
import numpy as np

from mbcs.kinetics import (
    Reaction,
    REACTIONS,
    KINETICS_DEMOS,
    get_reaction,
    rate,
    derivatives,
    simulate,
    run_demo,
    reaction_quotient,
    equilibrium_constant,
    equilibrium_constant_from_concentrations,
    equilibrium_units,
    equilibrium_reactant,
    arrhenius,
    log_arrhenius,
    reversible_arrhenius,
)


class TestReactions:
    """Tests for reaction definitions."""

    def test_registry(self):
        """Test all reactions are defined and valid."""
        for name in ("isomerization", "association", "double_displacement", "dimerization",
                     "nitrogen_dioxide", "sodium_carbonate", "hydrogen_iodide"):
            assert get_reaction(name).name == name
        assert set(KINETICS_DEMOS) <= set(REACTIONS)

    def test_unknown_reaction(self):
        """Test invalid name raises error."""
        with pytest.raises(ValueError, match="Unknown reaction"):
            get_reaction("combustion")

    def test_species_order_and_stoichiometry(self):
        """Test the state vector layout."""
        reaction = get_reaction("double_displacement")
        assert reaction.species == ["a", "b", "c", "d"]
        np.testing.assert_array_equal(reaction.stoichiometry, [-1, -1, 1, 2])
        assert reaction.order_change == 1

    def test_invalid_coefficient(self):
        """Test non-positive coefficients are rejected."""
        with pytest.raises(ValueError, match="coefficient of a must be > 0"):
            Reaction("bad", {"a": 0}, {"b": 1})

    def test_species_on_both_sides(self):
        """Test a species cannot be reactant and product."""
        with pytest.raises(ValueError, match="both sides"):
            Reaction("bad", {"a": 1}, {"a": 1})


class TestMassAction:
    """Tests for the mass-action dynamics."""

    def test_rate(self):
        """Test v = k1 [a][b] - k2 [c]."""
        reaction = get_reaction("association")
        v = rate(reaction, [0.5, 2.0, 0.1], k1=0.3, k2=0.4)
        np.testing.assert_allclose(v, 0.3 * 0.5 * 2.0 - 0.4 * 0.1)

    def test_derivatives_conserve_mass(self):
        """Test 2[b] + [a] is conserved by the dimerization."""
        reaction = get_reaction("dimerization")
        dy = derivatives(reaction, 0.3, 0.5)(0.0, np.array([0.4, 0.1]))
        np.testing.assert_allclose(dy[0] + 2 * dy[1], 0.0, atol=1e-15)

    def test_isomerization_equilibrium(self):
        """Test a <-> c settles at [c]/[a] = k1/k2."""
        result = simulate(get_reaction("isomerization"), {"a": 0.05}, (0.0, 100.0), k1=0.23, k2=0.25)
        np.testing.assert_allclose(result["c"][-1] / result["a"][-1], 0.23 / 0.25, rtol=1e-5)
        np.testing.assert_allclose(result["a"] + result["c"], 0.05, rtol=1e-6)

    def test_time_span(self):
        """Test the output grid covers t_span with the initial state at its start."""
        result = simulate(get_reaction("isomerization"), {"a": 0.05}, (5.0, 15.0), k1=0.23, k2=0.25, dt=0.5)
        assert result.t[0] == 5.0
        np.testing.assert_allclose(result.t[-1], 15.0)
        assert len(result.t) == 21
        np.testing.assert_allclose(result["a"][0], 0.05)

    def test_quotient_approaches_keq(self):
        """Test Q -> k1/k2 for the double displacement."""
        result = run_demo("double_displacement")
        np.testing.assert_allclose(result.quotient[-1], 1.3 / 2.5, rtol=1e-2)

    def test_dimerization_conservation(self):
        """Test [a] + 2[b] stays constant along the trajectory."""
        result = run_demo("dimerization", k1=0.5, k2=0.3)
        np.testing.assert_allclose(result["a"] + 2 * result["b"], 0.5, rtol=1e-6)
        assert result.k_forward == 0.5

    def test_demo_overrides(self):
        """Test initial concentration overrides."""
        result = run_demo("association", initial={"b": 0.0})
        # No b, so nothing can react
        np.testing.assert_allclose(result["a"], 0.05)
        np.testing.assert_allclose(result["c"], 0.0)

    def test_unknown_demo(self):
        """Test invalid demo raises error."""
        with pytest.raises(ValueError, match="Unknown demo"):
            run_demo("nitrogen_dioxide")

    def test_invalid_rates(self):
        """Test k <= 0 raises error."""
        with pytest.raises(ValueError, match="k1 must be > 0"):
            simulate(get_reaction("isomerization"), {"a": 1.0}, (0.0, 10.0), k1=0.0, k2=1.0)

    def test_invalid_initial(self):
        """Test negative and unknown initial concentrations raise errors."""
        reaction = get_reaction("isomerization")
        with pytest.raises(ValueError, match="must be >= 0"):
            simulate(reaction, {"a": -1.0}, (0.0, 10.0), k1=1.0, k2=1.0)
        with pytest.raises(ValueError, match="Unknown species"):
            simulate(reaction, {"z": 1.0}, (0.0, 10.0), k1=1.0, k2=1.0)

    def test_unknown_species_lookup(self):
        """Test indexing a result by an unknown species."""
        result = run_demo("isomerization")
        with pytest.raises(ValueError, match="Unknown species"):
            result["b"]


class TestEquilibrium:
    """Tests for equilibrium constants."""

    def test_keq_from_rates(self):
        """Test K_eq = k1 / k2."""
        np.testing.assert_allclose(equilibrium_constant(0.23, 0.25), 0.92)
        with pytest.raises(ValueError, match="k2 must be > 0"):
            equilibrium_constant(1.0, 0.0)

    def test_nitrogen_dioxide(self):
        """Test K_eq = [N2O4] / [NO2]^2."""
        K = equilibrium_constant_from_concentrations(get_reaction("nitrogen_dioxide"),
                                                     {"NO2": 2.0, "N2O4": 3.0})
        np.testing.assert_allclose(K, 3.0 / 4.0)

    def test_sodium_carbonate(self):
        """Test K_eq = [CaCO3][NaCl]^2 / ([Na2CO3][CaCl2])."""
        K = equilibrium_constant_from_concentrations(
            get_reaction("sodium_carbonate"),
            {"Na2CO3": 2.0, "CaCl2": 0.5, "CaCO3": 2.0, "NaCl": 1.2},
        )
        np.testing.assert_allclose(K, 2.0 * 1.44 / (2.0 * 0.5))

    def test_missing_concentration(self):
        """Test all species are required."""
        with pytest.raises(ValueError, match="missing concentrations"):
            equilibrium_constant_from_concentrations(get_reaction("nitrogen_dioxide"), {"NO2": 1.0})

    def test_units(self):
        """Test units of K_eq follow the change in reaction order."""
        assert equilibrium_units(get_reaction("isomerization")) == "dimensionless"
        assert equilibrium_units(get_reaction("association")) == "M^-1"
        assert equilibrium_units(get_reaction("sodium_carbonate")) == "M"
        assert equilibrium_units(get_reaction("hydrogen_iodide")) == "dimensionless"

    def test_iodine(self):
        """Test [I2] = [HI]^2 / ([H2] K_eq)."""
        K = np.array([0.1, 0.5, 1.0])
        I2 = equilibrium_reactant(get_reaction("hydrogen_iodide"), "I2", {"HI": 0.75, "H2": 0.2}, K)
        np.testing.assert_allclose(I2, 0.75 ** 2 / (0.2 * K))
        # Consistent with the quotient
        Q = reaction_quotient(get_reaction("hydrogen_iodide"), [0.2, I2[1], 0.75])
        np.testing.assert_allclose(Q, 0.5)

    def test_iodine_not_reactant(self):
        """Test solving for a product raises error."""
        with pytest.raises(ValueError, match="not a reactant"):
            equilibrium_reactant(get_reaction("hydrogen_iodide"), "HI", {"H2": 0.2, "I2": 0.1}, 1.0)

    def test_iodine_missing_concentration(self):
        """Test a missing co-species raises ValueError, not KeyError."""
        with pytest.raises(ValueError, match="missing concentrations for: H2"):
            equilibrium_reactant(get_reaction("hydrogen_iodide"), "I2", {"HI": 0.75}, 0.5)

    def test_quotient_shape_check(self):
        """Test the quotient needs one row per species."""
        with pytest.raises(ValueError, match="expected 2 species"):
            reaction_quotient(get_reaction("isomerization"), [1.0, 2.0, 3.0])


class TestArrhenius:
    """Tests for the temperature dependence of rate constants."""

    def test_arrhenius_values(self):
        """Test k = A exp(-Ea / (R T))."""
        T = np.array([100.0, 200.0])
        np.testing.assert_allclose(arrhenius(T, A=1.0, Ea=10.0),
                                   np.exp(-10.0 / (0.082 * T)))

    def test_increases_with_temperature(self):
        """Test k grows with T and shrinks with Ea."""
        T = np.linspace(100, 300, 100)
        k = arrhenius(T, A=1.0, Ea=5.0)
        assert np.all(np.diff(k) > 0)
        assert np.all(arrhenius(T, A=1.0, Ea=10.0) < k)

    def test_log_linear_in_inverse_T(self):
        """Test ln k is linear in 1/T with slope -Ea/R."""
        T = np.linspace(100, 300, 50)
        slope = np.polyfit(1.0 / T, log_arrhenius(T, A=2.0, Ea=8.0), 1)[0]
        np.testing.assert_allclose(slope, -8.0 / 0.082, rtol=1e-6)

    def test_reversible(self):
        """Test the exothermic direction is faster and K_eq falls with T."""
        rev = reversible_arrhenius(np.linspace(100, 300, 20), A=1.0, Ea=10.0)
        assert np.all(rev.log_k_exothermic > rev.log_k_endothermic)
        assert np.all(np.diff(rev.log_K_eq) < 0)

    def test_invalid_temperature(self):
        """Test T <= 0 raises error."""
        with pytest.raises(ValueError, match="temperature must be > 0"):
            arrhenius([0.0, 100.0], A=1.0, Ea=1.0)
