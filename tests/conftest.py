"""
Pytest configuration and shared fixtures for the physiological simulator tests.
"""
import pytest
import numpy as np
from physio_simulator.api_models import (
    CardiacParams, PPGParams, VentilatorParams, FlowShape, resolve_cardiac_params
)
from physio_simulator.constants import RhythmPreset

@pytest.fixture
def seeded_rng():
    """Factory for deterministic random sources."""
    def _make(seed: int = 1234):
        return np.random.default_rng(seed)
    return _make

@pytest.fixture
def clean_sinus_params():
    """Normal sinus preset at 75 bpm with noise and jitter removed."""
    return resolve_cardiac_params(RhythmPreset.NORMAL).model_copy(
        update={"bpm": 75, "noise": 0.0, "irregularity": 0.0}
    )

@pytest.fixture
def flatline_params():
    """Beat model with no rate and no noise."""
    return CardiacParams(bpm=0, noise=0.0, irregularity=0.0)

@pytest.fixture
def square_vc_params():
    """Volume control, square flow, 500 mL target."""
    return VentilatorParams(
        rr=15,
        peep=5,
        tidal_volume=500,
        resistance=10,
        compliance=50,
        ie_ratio=2,
        flow_shape=FlowShape.SQUARE,
    )

@pytest.fixture
def default_ventilator_params():
    return VentilatorParams()

@pytest.fixture
def noiseless_ppg_params():
    """PPG with no respiratory modulation or noise so amplitudes are pure AC."""
    return PPGParams(bpm=70, spo2=98, resp_amp=0.0, noise=0.0)

@pytest.fixture
def tolerance_config():
    """Standard tolerance values for numerical comparisons."""
    return {
        'r_peak_tolerance_mv': 0.15,  # Neighbouring Q/S pulses pull the R sample down slightly
        'tidal_volume_tolerance_ml': 15.0,  # About two integration steps of square flow
        'timing_tolerance_sec': 0.01,  # One sample at 100 Hz
    }
