# --- Physiological Simulator Constants ---
import os
from enum import Enum

# --- Server Configuration ---
DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",  # For local development
    "http://127.0.0.1:3000",
]
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("PHYSIO_SIM_ALLOWED_ORIGINS", ",".join(DEFAULT_ALLOWED_ORIGINS)).split(",")
    if origin.strip()
]
LOG_LEVEL = os.environ.get("PHYSIO_SIM_LOG_LEVEL", "INFO").upper()

# --- Cardiac Generation Constants ---
CARDIAC_FS = 100
CARDIAC_DURATION_SEC = 4.0
FIRST_BEAT_ONSET_SEC = 0.2
MIN_BEAT_INTERVAL_SEC = 0.2
SCHEDULE_LOOKAHEAD_SEC = 1.0
IRREGULARITY_SPREAD = 0.5
# Beat contributions outside (-0.5, 1.0) s of an onset are negligible
BEAT_WINDOW_SEC = (-0.5, 1.0)

# Wave offsets relative to the R peak (seconds). QRS entries scale with qrs_width_scale.
P_WAVE_CENTER = -0.16
Q_WAVE_CENTER = -0.04
Q_WAVE_WIDTH = 0.02
R_WAVE_WIDTH = 0.03
S_WAVE_CENTER = 0.04
S_WAVE_WIDTH = 0.03
T_WAVE_CENTER = 0.25
U_WAVE_CENTER = 0.45
U_WAVE_WIDTH = 0.06
ST_SEGMENT_WINDOW = (0.08, 0.25)
ST_SEGMENT_CENTER = 0.15
ST_SEGMENT_WIDTH = 0.1

# (angular frequency rad/s, amplitude mV)
VFIB_SINE_TERMS = ((30.0, 0.2), (45.0, 0.15))
AFIB_BASELINE_FREQ_RAD = 50.0
AFIB_BASELINE_AMPLITUDE = 0.05


class RhythmCategory(str, Enum):
    PERIODIC = "periodic"
    ATRIAL_FIBRILLATION = "atrial_fibrillation"
    VENTRICULAR_FIBRILLATION = "ventricular_fibrillation"
    ASYSTOLE = "asystole"


class RhythmPreset(str, Enum):
    NORMAL = "NORMAL"
    TACHYCARDIA = "TACHYCARDIA"
    BRADYCARDIA = "BRADYCARDIA"
    AFIB = "AFIB"
    PVC = "PVC"
    VTACH = "VTACH"
    VFIB = "VFIB"
    HYPERKALEMIA = "HYPERKALEMIA"
    HYPOKALEMIA = "HYPOKALEMIA"
    STEMI = "STEMI"
    ASYSTOLE = "ASYSTOLE"


# --- Rhythm Preset Definitions ---
NORMAL_SINUS_PARAMS = {
    "bpm": 75, "p_amp": 0.15, "p_width": 0.04, "q_amp": -0.15, "r_amp": 1.2,
    "s_amp": -0.25, "t_amp": 0.3, "t_width": 0.08, "u_amp": 0.0,
    "noise": 0.02, "irregularity": 0.0, "st_elevation": 0.0,
}
TACHYCARDIA_PARAMS = NORMAL_SINUS_PARAMS.copy()
TACHYCARDIA_PARAMS.update({"bpm": 130, "p_width": 0.03, "t_width": 0.06})

BRADYCARDIA_PARAMS = NORMAL_SINUS_PARAMS.copy()
BRADYCARDIA_PARAMS.update({"bpm": 45})

AFIB_PARAMS = {
    "bpm": 90, "p_amp": 0.0, "p_width": 0.0, "q_amp": -0.1, "r_amp": 1.0,
    "s_amp": -0.2, "t_amp": 0.2, "t_width": 0.08, "u_amp": 0.0,
    "noise": 0.15, "irregularity": 0.8, "st_elevation": 0.0,
}
PVC_PARAMS = {
    "bpm": 80, "p_amp": 0.1, "p_width": 0.04, "q_amp": -0.2, "r_amp": 1.3,
    "s_amp": -0.4, "t_amp": 0.4, "t_width": 0.1, "u_amp": 0.0,
    "noise": 0.05, "irregularity": 0.4, "st_elevation": 0.0,
}
VTACH_PARAMS = {
    "bpm": 180, "p_amp": 0.0, "p_width": 0.0, "q_amp": 0.0, "r_amp": 1.5,
    "s_amp": -0.5, "t_amp": 0.0, "t_width": 0.0, "u_amp": 0.0,
    "noise": 0.05, "irregularity": 0.05, "st_elevation": 0.0,
    "qrs_width_scale": 3.0,  # Wide complex
}
VFIB_PARAMS = {
    "bpm": 0, "p_amp": 0.0, "p_width": 0.0, "q_amp": 0.0, "r_amp": 0.0,
    "s_amp": 0.0, "t_amp": 0.0, "t_width": 0.0, "u_amp": 0.0,
    "noise": 0.4, "irregularity": 1.0, "st_elevation": 0.0,
}
HYPERKALEMIA_PARAMS = NORMAL_SINUS_PARAMS.copy()
HYPERKALEMIA_PARAMS.update({"bpm": 70, "p_amp": 0.05, "r_amp": 1.0, "t_amp": 0.9, "t_width": 0.06})

HYPOKALEMIA_PARAMS = NORMAL_SINUS_PARAMS.copy()
HYPOKALEMIA_PARAMS.update({"bpm": 70, "t_amp": 0.1, "u_amp": 0.15})

STEMI_PARAMS = NORMAL_SINUS_PARAMS.copy()
STEMI_PARAMS.update({"bpm": 80, "q_amp": -0.3, "r_amp": 1.0, "s_amp": -0.1, "t_amp": 0.4, "st_elevation": 0.3})

ASYSTOLE_PARAMS = VFIB_PARAMS.copy()
ASYSTOLE_PARAMS.update({"noise": 0.03, "irregularity": 0.0})

RHYTHM_PRESETS = {
    RhythmPreset.NORMAL: {
        "label": "Normal Sinus Rhythm",
        "description": "Regular P-QRS-T complexes at 60-100 bpm.",
        "category": RhythmCategory.PERIODIC,
        "params": NORMAL_SINUS_PARAMS,
    },
    RhythmPreset.TACHYCARDIA: {
        "label": "Sinus Tachycardia",
        "description": "Normal morphology with a rate above 100 bpm.",
        "category": RhythmCategory.PERIODIC,
        "params": TACHYCARDIA_PARAMS,
    },
    RhythmPreset.BRADYCARDIA: {
        "label": "Sinus Bradycardia",
        "description": "Normal morphology with a rate below 60 bpm.",
        "category": RhythmCategory.PERIODIC,
        "params": BRADYCARDIA_PARAMS,
    },
    RhythmPreset.AFIB: {
        "label": "Atrial Fibrillation",
        "description": "No P waves, fibrillatory baseline and irregularly irregular RR intervals.",
        "category": RhythmCategory.ATRIAL_FIBRILLATION,
        "params": AFIB_PARAMS,
    },
    RhythmPreset.PVC: {
        "label": "Premature Ventricular Contractions",
        "description": "Early beats shown as RR irregularity with larger QRS deflections.",
        "category": RhythmCategory.PERIODIC,
        "params": PVC_PARAMS,
    },
    RhythmPreset.VTACH: {
        "label": "Ventricular Tachycardia",
        "description": "Very fast, wide QRS complexes without distinct P or T waves.",
        "category": RhythmCategory.PERIODIC,
        "params": VTACH_PARAMS,
    },
    RhythmPreset.VFIB: {
        "label": "Ventricular Fibrillation",
        "description": "Chaotic irregular waveform with no organised complexes.",
        "category": RhythmCategory.VENTRICULAR_FIBRILLATION,
        "params": VFIB_PARAMS,
    },
    RhythmPreset.HYPERKALEMIA: {
        "label": "Hyperkalemia",
        "description": "Tall peaked T waves with flattened P waves.",
        "category": RhythmCategory.PERIODIC,
        "params": HYPERKALEMIA_PARAMS,
    },
    RhythmPreset.HYPOKALEMIA: {
        "label": "Hypokalemia",
        "description": "Flattened T waves and a prominent U wave.",
        "category": RhythmCategory.PERIODIC,
        "params": HYPOKALEMIA_PARAMS,
    },
    RhythmPreset.STEMI: {
        "label": "ST Elevation Myocardial Infarction",
        "description": "Elevated ST segment (J-point elevation).",
        "category": RhythmCategory.PERIODIC,
        "params": STEMI_PARAMS,
    },
    RhythmPreset.ASYSTOLE: {
        "label": "Asystole",
        "description": "Near-flat line with slight noise.",
        "category": RhythmCategory.ASYSTOLE,
        "params": ASYSTOLE_PARAMS,
    },
}

# --- Ventilator Constants ---
VENT_TIME_STEP_SEC = 0.02
VENT_SIMULATED_CYCLES = 2
AUTO_PEEP_TRAPPED_VOLUME_L = 0.1
TRIGGER_LEAD_SEC = 0.15       # Effort starts this long before the cycle boundary
TRIGGER_TAIL_SEC = 0.1        # ...and lasts this long into the next cycle
TRIGGER_PULSE_SEC = 0.25
OVERDISTENSION_THRESHOLD_L = 0.45
OVERDISTENSION_SLOPE_PER_L = 2.0
MIN_EFFECTIVE_COMPLIANCE = 5.0
SECONDS_PER_MINUTE = 60.0
ML_PER_L = 1000.0

# --- PPG Constants ---
PPG_FS = 60
PPG_DURATION_SEC = 4.0
SYSTOLIC_PEAK_CENTER = 0.15
SYSTOLIC_PEAK_AMPLITUDE = 1.0
PPG_PEAK_WIDTH = 0.06
DIASTOLIC_BASE_CENTER = 0.35
DIASTOLIC_STIFFNESS_SHIFT = 0.1
DIASTOLIC_BASE_AMPLITUDE = 0.3
DIASTOLIC_STIFFNESS_GAIN = 0.4
IR_AMPLITUDE_BASE = 1.0
# Simplified Beer-Lambert ratio: R = 0.4 + (100 - SpO2) * 0.03
RATIO_AT_FULL_SATURATION = 0.4
RATIO_SLOPE_PER_PERCENT = 0.03
