import numpy as np
import pytest

from gzt_recovery.core.calibration import (
    estimate_parameters,
    estimate_parameters_inverse,
    normal_condition,
)
from gzt_recovery.core.design_matrix import build_design_matrix
from gzt_recovery.core.reconstruction import reconstruct_signal
from gzt_recovery.core.types import ParameterVector
from gzt_recovery.exceptions import DimensionMismatchError, SingularMatrixError


def lagged_pulse_train(n=600, period=40, width=13, amplitude=2.0, alpha=0.3):
    """Injected pulse train and the first-order-lag response of a washout chamber."""
    k = np.arange(n)
    u = np.where((k % period) < width, amplitude, 0.0)
    y = np.zeros(n)
    for i in range(1, n):
        y[i] = (1.0 - alpha) * y[i - 1] + alpha * u[i - 1]
    return u, y


def test_two_parameter_scenario():
    design = build_design_matrix([1, 2, 3, 4, 5], 2)
    u = np.array([1.5, 2.5, 3.5, 4.5])
    params, diag = estimate_parameters(design, u)
    assert np.allclose(params.coefficients, [0.5, 0.5], atol=1e-10)
    assert diag['rank'] == 2
    assert diag['residual_rms'] < 1e-10


def test_noiseless_recovery_law():
    rng = np.random.default_rng(42)
    s = rng.normal(size=300)
    N = 12
    a_true = rng.normal(size=N)
    design = build_design_matrix(s, N)
    u = design.matrix @ a_true

    params, _ = estimate_parameters(design, u)
    rel_err = np.linalg.norm(params.coefficients - a_true) / np.linalg.norm(a_true)
    assert rel_err < 1e-6, f"Parameter relative error too high: {rel_err}"

    u_hat = reconstruct_signal(design, ParameterVector(a_true))
    assert np.allclose(u_hat, u, rtol=1e-12, atol=1e-12)


def test_periodic_injection_is_reconstructed():
    u, y = lagged_pulse_train()
    design = build_design_matrix(y, 6)
    params, diag = estimate_parameters(design, u)
    fitted = reconstruct_signal(design, params)
    rms = float(np.sqrt(np.mean((fitted - u[:design.rows]) ** 2)))
    assert rms < 1e-8, f"Residual RMS too high: {rms}"
    assert np.isfinite(diag['condition'])


def test_only_leading_reference_samples_used():
    design = build_design_matrix([1, 2, 3, 4, 5], 2)
    u = np.array([1.5, 2.5, 3.5, 4.5, 1000.0])
    params, _ = estimate_parameters(design, u)
    assert np.allclose(params.coefficients, [0.5, 0.5], atol=1e-10)


def test_short_reference_rejected():
    design = build_design_matrix([1, 2, 3, 4, 5], 2)
    with pytest.raises(DimensionMismatchError):
        estimate_parameters(design, [1.0, 2.0])


def test_rank_deficient_matrix_raises():
    design = build_design_matrix(np.ones(20), 3)
    with pytest.raises(SingularMatrixError) as excinfo:
        estimate_parameters(design, np.arange(20.0))
    assert excinfo.value.rank < 3
    assert excinfo.value.window_length == 3


def test_condition_limit_raises():
    design = build_design_matrix([1, 2, 3, 4, 5], 2)
    with pytest.raises(SingularMatrixError) as excinfo:
        estimate_parameters(design, [1.5, 2.5, 3.5, 4.5], max_condition=1.0)
    assert excinfo.value.condition > 1.0


def test_inverse_reference_agrees_on_well_conditioned_case():
    rng = np.random.default_rng(7)
    s = rng.normal(size=80)
    design = build_design_matrix(s, 4)
    u = rng.normal(size=design.rows)
    a_svd, _ = estimate_parameters(design, u)
    a_inv = estimate_parameters_inverse(design, u)
    assert np.allclose(a_svd.coefficients, a_inv.coefficients, rtol=1e-8, atol=1e-10)


def test_normal_condition_from_singular_values():
    assert normal_condition(np.array([10.0, 1.0])) == pytest.approx(100.0)
    assert normal_condition(np.array([3.0, 0.0])) == float('inf')


def test_inverse_reference_keeps_lapack_cause():
    design = build_design_matrix(np.ones(20), 3)
    with pytest.raises(SingularMatrixError) as excinfo:
        estimate_parameters_inverse(design, np.arange(20.0))
    assert isinstance(excinfo.value.__cause__, np.linalg.LinAlgError)
