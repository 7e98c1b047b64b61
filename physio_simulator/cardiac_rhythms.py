# physio_simulator/cardiac_rhythms.py
import logging
import numpy as np
from typing import Callable, Dict, Optional, Tuple

from .api_models import CardiacParams
from .constants import (
    CARDIAC_FS, CARDIAC_DURATION_SEC, FIRST_BEAT_ONSET_SEC, MIN_BEAT_INTERVAL_SEC,
    SCHEDULE_LOOKAHEAD_SEC, IRREGULARITY_SPREAD, BEAT_WINDOW_SEC,
    P_WAVE_CENTER, Q_WAVE_CENTER, Q_WAVE_WIDTH, R_WAVE_WIDTH, S_WAVE_CENTER, S_WAVE_WIDTH,
    T_WAVE_CENTER, U_WAVE_CENTER, U_WAVE_WIDTH,
    ST_SEGMENT_WINDOW, ST_SEGMENT_CENTER, ST_SEGMENT_WIDTH,
    RhythmCategory, RhythmPreset, RHYTHM_PRESETS,
)
from .waveform_primitives import (
    gaussian_wave, uniform_noise, ventricular_fibrillation_wave, atrial_fibrillatory_baseline
)

logger = logging.getLogger(__name__)


# --- Beat Scheduling ---
def generate_beat_schedule(
    bpm: float,
    irregularity: float,
    duration_sec: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Beat onset times starting at 0.2 s and running one second past the end of
    the strip so that tail beats still contribute.

    Each interval is jittered by up to +/- irregularity * interval * 0.5 and
    floored at 0.2 s. A rate of 0 bpm gives an infinite interval: no beats.
    """
    base_rr_interval_sec = 60.0 / bpm if bpm > 0 else float('inf')
    if base_rr_interval_sec == float('inf'):
        return np.array([])

    beat_times = []
    current_time = FIRST_BEAT_ONSET_SEC
    while current_time < duration_sec + SCHEDULE_LOOKAHEAD_SEC:
        beat_times.append(current_time)
        next_interval = base_rr_interval_sec
        if irregularity > 0:
            next_interval += (rng.random() - 0.5) * 2 * irregularity * base_rr_interval_sec * IRREGULARITY_SPREAD
        current_time += max(MIN_BEAT_INTERVAL_SEC, next_interval)
    return np.array(beat_times)


def single_beat_waveform(dt: np.ndarray, params: CardiacParams) -> np.ndarray:
    """P-QRS-ST-T-U complex evaluated at offsets dt from the R peak."""
    qrs_scale = params.qrs_width_scale or 1.0

    waveform = gaussian_wave(dt, P_WAVE_CENTER, params.p_amp, params.p_width)
    waveform = waveform + gaussian_wave(dt, Q_WAVE_CENTER * qrs_scale, params.q_amp, Q_WAVE_WIDTH * qrs_scale)
    waveform = waveform + gaussian_wave(dt, 0.0, params.r_amp, R_WAVE_WIDTH * qrs_scale)
    waveform = waveform + gaussian_wave(dt, S_WAVE_CENTER * qrs_scale, params.s_amp, S_WAVE_WIDTH * qrs_scale)

    if params.st_elevation != 0:
        st_start, st_end = ST_SEGMENT_WINDOW
        st_mask = (dt > st_start) & (dt < st_end)
        st_shape = np.exp(-((dt - ST_SEGMENT_CENTER)**2) / (2 * ST_SEGMENT_WIDTH**2))
        waveform = waveform + np.where(st_mask, params.st_elevation * st_shape, 0.0)

    waveform = waveform + gaussian_wave(dt, T_WAVE_CENTER, params.t_amp, params.t_width)

    if params.u_amp != 0:
        waveform = waveform + gaussian_wave(dt, U_WAVE_CENTER, params.u_amp, U_WAVE_WIDTH)
    return waveform


# --- Category Synthesizers ---
def _synthesize_beats(time_axis: np.ndarray, duration_sec: float, params: CardiacParams, rng: np.random.Generator) -> np.ndarray:
    beat_times = generate_beat_schedule(params.bpm, params.irregularity, duration_sec, rng)
    logger.debug("Scheduled %d beats over %.2fs at %.1f bpm", len(beat_times), duration_sec, params.bpm)

    window_start, window_end = BEAT_WINDOW_SEC
    signal = np.zeros_like(time_axis, dtype=float)
    for beat_time in beat_times:
        dt = time_axis - beat_time
        in_window = (dt > window_start) & (dt < window_end)
        if np.any(in_window):
            signal[in_window] += single_beat_waveform(dt[in_window], params)

    signal += uniform_noise(len(time_axis), params.noise, rng)
    return signal


def _synthesize_atrial_fibrillation(time_axis: np.ndarray, duration_sec: float, params: CardiacParams, rng: np.random.Generator) -> np.ndarray:
    return _synthesize_beats(time_axis, duration_sec, params, rng) + atrial_fibrillatory_baseline(time_axis)


def _synthesize_ventricular_fibrillation(time_axis: np.ndarray, duration_sec: float, params: CardiacParams, rng: np.random.Generator) -> np.ndarray:
    return ventricular_fibrillation_wave(time_axis) + uniform_noise(len(time_axis), params.noise, rng)


def _synthesize_asystole(time_axis: np.ndarray, duration_sec: float, params: CardiacParams, rng: np.random.Generator) -> np.ndarray:
    return uniform_noise(len(time_axis), params.noise, rng)


RHYTHM_SYNTHESIZERS: Dict[RhythmCategory, Callable[[np.ndarray, float, CardiacParams, np.random.Generator], np.ndarray]] = {
    RhythmCategory.PERIODIC: _synthesize_beats,
    RhythmCategory.ATRIAL_FIBRILLATION: _synthesize_atrial_fibrillation,
    RhythmCategory.VENTRICULAR_FIBRILLATION: _synthesize_ventricular_fibrillation,
    RhythmCategory.ASYSTOLE: _synthesize_asystole,
}


def describe_rhythm(preset: RhythmPreset, params: CardiacParams) -> str:
    preset_info = RHYTHM_PRESETS[preset]
    category = preset_info["category"]
    if category in (RhythmCategory.VENTRICULAR_FIBRILLATION, RhythmCategory.ASYSTOLE) or params.bpm <= 0:
        return f"{preset_info['label']} (no organised beats)"
    description = f"{preset_info['label']} at {params.bpm:.0f} bpm"
    if params.irregularity > 0:
        description += f", irregularity {params.irregularity:.2f}"
    return description


def generate_cardiac_waveform(
    preset: RhythmPreset,
    params: Optional[CardiacParams] = None,
    fs: int = CARDIAC_FS,
    duration_sec: float = CARDIAC_DURATION_SEC,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[np.ndarray, np.ndarray, str]:
    """
    Generate a single-lead ECG strip for a rhythm preset.

    Args:
        preset: Rhythm preset; its category selects the synthesis branch
        params: Effective parameters (preset record with any overrides applied).
            Defaults to the preset's own record.
        fs: Sampling frequency in Hz
        duration_sec: Strip length in seconds
        rng: Random source for noise and RR jitter

    Returns:
        (time_axis, voltage, rhythm_description)
    """
    preset = RhythmPreset(preset)
    if params is None:
        params = CardiacParams(**RHYTHM_PRESETS[preset]["params"])
    if rng is None:
        rng = np.random.default_rng()

    num_total_samples = int(duration_sec * fs)
    time_axis = np.arange(num_total_samples) / fs

    category = RHYTHM_PRESETS[preset]["category"]
    logger.debug("Generating %s strip via %s branch", preset.value, category.value)
    voltage = RHYTHM_SYNTHESIZERS[category](time_axis, duration_sec, params, rng)

    return time_axis, voltage, describe_rhythm(preset, params)
