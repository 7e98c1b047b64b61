# physio_simulator/ppg_waveform.py
import logging
import numpy as np
from typing import Optional, Tuple

from .api_models import PPGParams
from .constants import (
    PPG_FS, PPG_DURATION_SEC,
    SYSTOLIC_PEAK_CENTER, SYSTOLIC_PEAK_AMPLITUDE, PPG_PEAK_WIDTH,
    DIASTOLIC_BASE_CENTER, DIASTOLIC_STIFFNESS_SHIFT, DIASTOLIC_BASE_AMPLITUDE, DIASTOLIC_STIFFNESS_GAIN,
    IR_AMPLITUDE_BASE, RATIO_AT_FULL_SATURATION, RATIO_SLOPE_PER_PERCENT,
)
from .waveform_primitives import gaussian_wave, uniform_noise

logger = logging.getLogger(__name__)


def ratio_of_ratios(spo2: float) -> float:
    """
    Red/IR pulsatile amplitude ratio for a saturation.

    Lower SpO2 means more deoxygenated haemoglobin, more red absorption and a
    larger R value.
    """
    return RATIO_AT_FULL_SATURATION + (100.0 - spo2) * RATIO_SLOPE_PER_PERCENT


def respiratory_baseline(time_axis: np.ndarray, resp_rate: float, resp_amp: float) -> np.ndarray:
    """DC component modulated by breathing."""
    return np.sin(2 * np.pi * (resp_rate / 60.0) * time_axis) * resp_amp


def pulsatile_component(time_axis: np.ndarray, bpm: float, stiffness: float, perfusion: float) -> np.ndarray:
    """
    AC component: systolic peak plus the reflected diastolic wave.

    Stiffer arteries return the reflected wave earlier and larger. The two
    peaks are summed without renormalisation so that at high stiffness they
    fuse and the dicrotic notch disappears.
    """
    if bpm <= 0:
        return np.zeros_like(time_axis, dtype=float)
    beat_interval = 60.0 / bpm
    beat_time = np.mod(time_axis, beat_interval)

    ac_wave = gaussian_wave(beat_time, SYSTOLIC_PEAK_CENTER, SYSTOLIC_PEAK_AMPLITUDE, PPG_PEAK_WIDTH)
    diastolic_center = DIASTOLIC_BASE_CENTER - stiffness * DIASTOLIC_STIFFNESS_SHIFT
    diastolic_amplitude = DIASTOLIC_BASE_AMPLITUDE + stiffness * DIASTOLIC_STIFFNESS_GAIN
    ac_wave = ac_wave + gaussian_wave(beat_time, diastolic_center, diastolic_amplitude, PPG_PEAK_WIDTH)
    return ac_wave * perfusion


def generate_ppg_waveform(
    params: PPGParams,
    fs: int = PPG_FS,
    duration_sec: float = PPG_DURATION_SEC,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Two-wavelength PPG strip.

    The same noise draw is added to both channels at each sample (common-mode
    sensor noise). show_red / show_ir are display toggles and are ignored here.

    Returns:
        (time_axis, infrared, red)
    """
    if rng is None:
        rng = np.random.default_rng()

    num_samples = int(duration_sec * fs)
    time_axis = np.arange(num_samples) / fs

    dc_component = respiratory_baseline(time_axis, params.resp_rate, params.resp_amp)
    ac_wave = pulsatile_component(time_axis, params.bpm, params.stiffness, params.perfusion)
    noise = uniform_noise(num_samples, params.noise, rng)

    red_amplitude = IR_AMPLITUDE_BASE * ratio_of_ratios(params.spo2)
    logger.debug("PPG %d samples, SpO2 %.0f%% -> R=%.3f", num_samples, params.spo2, red_amplitude)

    infrared = dc_component + ac_wave * IR_AMPLITUDE_BASE + noise
    red = dc_component + ac_wave * red_amplitude + noise
    return time_axis, infrared, red
