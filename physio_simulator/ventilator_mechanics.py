# physio_simulator/ventilator_mechanics.py
"""
Single-compartment lung model driving ventilator scalar waveforms
(pressure, flow, volume over time) and loop coordinates.

Units inside the integration loop are litres, L/s and cmH2O; compliance is
given in mL/cmH2O, so the time constant is R * C / 1000. Samples are emitted
with flow in L/min and volume in mL.
"""
import logging
import math
import numpy as np
from typing import Dict, NamedTuple

from .api_models import FlowShape, VentilationMode, VentilatorParams
from .constants import (
    VENT_TIME_STEP_SEC, VENT_SIMULATED_CYCLES, AUTO_PEEP_TRAPPED_VOLUME_L,
    TRIGGER_LEAD_SEC, TRIGGER_TAIL_SEC, TRIGGER_PULSE_SEC,
    OVERDISTENSION_THRESHOLD_L, OVERDISTENSION_SLOPE_PER_L, MIN_EFFECTIVE_COMPLIANCE,
    SECONDS_PER_MINUTE, ML_PER_L,
)

logger = logging.getLogger(__name__)


class BreathTiming(NamedTuple):
    cycle_time: float
    inspiration_time: float
    expiration_time: float


def compute_breath_timing(rr: float, ie_ratio: float) -> BreathTiming:
    """Phase boundaries of one breath for a rate (breaths/min) and an I:E of 1:ie_ratio."""
    cycle_time = 60.0 / rr
    inspiration_time = cycle_time / (1 + ie_ratio)
    return BreathTiming(cycle_time, inspiration_time, cycle_time - inspiration_time)


def muscle_pressure(time_in_cycle: float, elapsed: float, cycle_time: float, trigger_effort: float) -> float:
    """
    Negative sine pulse of patient effort straddling the start of inspiration.

    Active for the last 0.15 s of a cycle and the first 0.1 s of the next one
    (never at t = 0).
    """
    if trigger_effort <= 0:
        return 0.0
    in_lead = time_in_cycle > cycle_time - TRIGGER_LEAD_SEC
    in_tail = time_in_cycle < TRIGGER_TAIL_SEC and elapsed > 0
    if not (in_lead or in_tail):
        return 0.0
    if time_in_cycle < TRIGGER_TAIL_SEC:
        phase = time_in_cycle + TRIGGER_LEAD_SEC
    else:
        phase = time_in_cycle - (cycle_time - TRIGGER_LEAD_SEC)
    return -trigger_effort * math.sin(math.pi * phase / TRIGGER_PULSE_SEC)


def effective_compliance(compliance: float, volume_l: float, overdistension: bool) -> float:
    """Compliance after overdistension stiffening above 0.45 L, floored at 5 mL/cmH2O."""
    if not overdistension or volume_l <= OVERDISTENSION_THRESHOLD_L:
        return compliance
    stiffened = compliance * (1 - (volume_l - OVERDISTENSION_THRESHOLD_L) * OVERDISTENSION_SLOPE_PER_L)
    return max(MIN_EFFECTIVE_COMPLIANCE, stiffened)


def _passive_expiratory_flow(volume_l: float, trapped_volume_l: float, time_constant: float, expiration_elapsed: float) -> float:
    peak_expiratory_flow = -(volume_l + trapped_volume_l) / time_constant
    return peak_expiratory_flow * math.exp(-expiration_elapsed / time_constant)


def _inspiratory_flow(mode: VentilationMode, params: VentilatorParams, time_in_cycle: float,
                      inspiration_time: float, time_constant: float) -> float:
    if mode == VentilationMode.PRESSURE_CONTROL:
        return (params.pressure_control / params.resistance) * math.exp(-time_in_cycle / time_constant)

    target_volume_l = params.tidal_volume / ML_PER_L
    if params.flow_shape == FlowShape.SQUARE:
        return target_volume_l / inspiration_time
    # Decelerating ramp starts at twice the square flow so the delivered volume matches
    start_flow = (2 * target_volume_l) / inspiration_time
    return start_flow * (1 - time_in_cycle / inspiration_time)


def generate_ventilator_breath(
    mode: VentilationMode,
    params: VentilatorParams,
    dt: float = VENT_TIME_STEP_SEC,
) -> Dict[str, Dict[str, np.ndarray]]:
    """
    Simulate two breath cycles under volume or pressure control.

    Args:
        mode: VC or PC
        params: Ventilator settings and lung mechanics. rr must be > 0.
        dt: Integration step in seconds

    Returns:
        {"scalars": {"time", "pressure", "flow", "volume"},
         "loops": {"pressure", "flow", "volume"}} as parallel arrays
    """
    mode = VentilationMode(mode)
    timing = compute_breath_timing(params.rr, params.ie_ratio)
    time_constant = params.resistance * (params.compliance / ML_PER_L)
    total_time = timing.cycle_time * VENT_SIMULATED_CYCLES
    num_steps = int(math.ceil(total_time / dt - 1e-9))
    logger.debug("Breath timing %s, tau=%.3fs, %d steps", timing, time_constant, num_steps)

    current_volume = 0.0
    current_flow = 0.0
    current_pressure = params.peep
    trapped_volume = AUTO_PEEP_TRAPPED_VOLUME_L if params.auto_peep else 0.0
    was_inspiration = False

    times = np.zeros(num_steps)
    pressures = np.zeros(num_steps)
    flows = np.zeros(num_steps)
    volumes = np.zeros(num_steps)

    for step in range(num_steps):
        t = step * dt
        time_in_cycle = t % timing.cycle_time
        is_inspiration = time_in_cycle < timing.inspiration_time
        p_muscle = muscle_pressure(time_in_cycle, t, timing.cycle_time, params.trigger_effort)

        if is_inspiration:
            current_flow = _inspiratory_flow(mode, params, time_in_cycle, timing.inspiration_time, time_constant)
        else:
            current_flow = _passive_expiratory_flow(
                current_volume, trapped_volume, time_constant, time_in_cycle - timing.inspiration_time
            )

        # A breath never starts below the volume left over from the last exhalation
        if is_inspiration and not was_inspiration:
            current_volume = trapped_volume
        was_inspiration = is_inspiration
        current_volume += current_flow * dt
        current_volume = max(0.0, current_volume)

        compliance = effective_compliance(params.compliance, current_volume, params.overdistension)
        if mode == VentilationMode.PRESSURE_CONTROL and is_inspiration:
            current_pressure = params.peep + params.pressure_control
        else:
            resistive_pressure = current_flow * params.resistance
            elastic_pressure = (current_volume * ML_PER_L) / compliance
            current_pressure = resistive_pressure + elastic_pressure + params.peep + p_muscle

        times[step] = round(t, 2)
        pressures[step] = current_pressure
        flows[step] = current_flow * SECONDS_PER_MINUTE
        volumes[step] = current_volume * ML_PER_L

    return {
        "scalars": {"time": times, "pressure": pressures, "flow": flows, "volume": volumes},
        "loops": {"pressure": pressures.copy(), "flow": flows.copy(), "volume": volumes.copy()},
    }
