# physio_simulator/waveform_primitives.py
import numpy as np
from typing import Optional, Union

from .constants import (
    VFIB_SINE_TERMS, AFIB_BASELINE_FREQ_RAD, AFIB_BASELINE_AMPLITUDE
)

ArrayLike = Union[float, np.ndarray]

# --- Waveform Primitive ---
def gaussian_wave(t_points: ArrayLike, center: float, amplitude: float, width_std_dev: float) -> ArrayLike:
    """
    Bell-shaped pulse used for every P/Q/R/S/T/U deflection and for the PPG
    systolic and diastolic peaks.

    A zero width means "this wave is absent" (e.g. no P wave in AFib) and
    returns zero instead of dividing by zero.

    Args:
        t_points: Time (scalar or numpy array)
        center: Pulse center, same time base as t_points
        amplitude: Peak value (may be negative)
        width_std_dev: Standard deviation of the pulse in seconds

    Returns:
        Pulse value(s) with the shape of t_points
    """
    if width_std_dev == 0:
        return np.zeros_like(t_points, dtype=float) if isinstance(t_points, np.ndarray) else 0.0
    return amplitude * np.exp(-((t_points - center)**2) / (2 * width_std_dev**2))


def uniform_noise(num_samples: int, noise_level: float, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Independent uniform noise in [-noise_level/2, noise_level/2) per sample."""
    if rng is None:
        rng = np.random.default_rng()
    return (rng.random(num_samples) - 0.5) * noise_level


# --- Fibrillation Components ---
def ventricular_fibrillation_wave(t_points: np.ndarray) -> np.ndarray:
    """Chaotic-looking VFib baseline built from a few fixed-frequency sines."""
    vfib_signal = np.zeros_like(t_points, dtype=float)
    for freq_rad, amplitude in VFIB_SINE_TERMS:
        vfib_signal += amplitude * np.sin(freq_rad * t_points)
    return vfib_signal


def atrial_fibrillatory_baseline(t_points: np.ndarray) -> np.ndarray:
    return AFIB_BASELINE_AMPLITUDE * np.sin(AFIB_BASELINE_FREQ_RAD * t_points)
