# physio_simulator/api_models.py
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from .constants import RhythmPreset, RHYTHM_PRESETS


class CardiacParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    bpm: float = Field(75.0, ge=0, le=250, description="Heart rate. 0 means no organised beats.")
    p_amp: float = Field(0.15, ge=-2.0, le=3.0)
    p_width: float = Field(0.04, ge=0, le=0.5, description="P-wave width (std dev, s). 0 suppresses the P wave.")
    q_amp: float = Field(-0.15, ge=-2.0, le=3.0)
    r_amp: float = Field(1.2, ge=-2.0, le=3.0)
    s_amp: float = Field(-0.25, ge=-2.0, le=3.0)
    t_amp: float = Field(0.3, ge=-2.0, le=3.0)
    t_width: float = Field(0.08, ge=0, le=0.5)
    u_amp: float = Field(0.0, ge=-2.0, le=3.0, description="U-wave amplitude (hypokalemia).")
    noise: float = Field(0.02, ge=0, le=1.0)
    irregularity: float = Field(0.0, ge=0, le=1.0, description="RR interval jitter factor.")
    st_elevation: float = Field(0.0, ge=-1.0, le=1.0)
    qrs_width_scale: Optional[float] = Field(None, ge=0.5, le=5.0, description="Uniform QRS widening for wide-complex rhythms.")


class CardiacParamOverrides(BaseModel):
    """Slider edits layered on top of a preset; unset fields keep the preset value."""
    model_config = ConfigDict(frozen=True)

    bpm: Optional[float] = Field(None, ge=0, le=250)
    p_amp: Optional[float] = Field(None, ge=-2.0, le=3.0)
    p_width: Optional[float] = Field(None, ge=0, le=0.5)
    q_amp: Optional[float] = Field(None, ge=-2.0, le=3.0)
    r_amp: Optional[float] = Field(None, ge=-2.0, le=3.0)
    s_amp: Optional[float] = Field(None, ge=-2.0, le=3.0)
    t_amp: Optional[float] = Field(None, ge=-2.0, le=3.0)
    t_width: Optional[float] = Field(None, ge=0, le=0.5)
    u_amp: Optional[float] = Field(None, ge=-2.0, le=3.0)
    noise: Optional[float] = Field(None, ge=0, le=1.0)
    irregularity: Optional[float] = Field(None, ge=0, le=1.0)
    st_elevation: Optional[float] = Field(None, ge=-1.0, le=1.0)
    qrs_width_scale: Optional[float] = Field(None, ge=0.5, le=5.0)


def resolve_cardiac_params(preset: RhythmPreset, overrides: Optional[CardiacParamOverrides] = None) -> CardiacParams:
    params = dict(RHYTHM_PRESETS[preset]["params"])
    if overrides is not None:
        params.update(overrides.model_dump(exclude_none=True))
    return CardiacParams(**params)


class CardiacRequest(BaseModel):
    preset: RhythmPreset = Field(RhythmPreset.NORMAL)
    overrides: Optional[CardiacParamOverrides] = None
    seed: Optional[int] = Field(None, ge=0, description="Seed for a reproducible noise/irregularity draw.")


class VentilationMode(str, Enum):
    VOLUME_CONTROL = "VC"
    PRESSURE_CONTROL = "PC"


class FlowShape(str, Enum):
    SQUARE = "Square"
    DECELERATING = "Decelerating"


class VentilatorParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    rr: float = Field(15.0, ge=10, le=40, description="Respiratory rate (breaths/min).")
    peep: float = Field(5.0, ge=0, le=20, description="PEEP (cmH2O).")
    tidal_volume: float = Field(500.0, ge=300, le=800, description="Target volume for VC (mL).")
    pressure_control: float = Field(15.0, ge=5, le=30, description="Inspiratory pressure above PEEP for PC (cmH2O).")
    resistance: float = Field(10.0, ge=5, le=50, description="Airway resistance (cmH2O/L/s).")
    compliance: float = Field(50.0, ge=10, le=100, description="Lung compliance (mL/cmH2O).")
    ie_ratio: float = Field(2.0, ge=1, le=4, description="X in an I:E ratio of 1:X.")
    flow_shape: FlowShape = Field(FlowShape.DECELERATING, description="VC inspiratory flow pattern.")
    trigger_effort: float = Field(0.0, ge=0, le=10, description="Patient inspiratory effort (cmH2O). 0 disables triggering.")
    overdistension: bool = Field(False, description="Stiffen the lung above 450 mL (beaking).")
    auto_peep: bool = Field(False, description="Start each breath with trapped volume.")


class VentilatorRequest(BaseModel):
    mode: VentilationMode = Field(VentilationMode.VOLUME_CONTROL)
    params: VentilatorParams = Field(default_factory=VentilatorParams)


class PPGParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    bpm: float = Field(70.0, ge=40, le=180)
    spo2: float = Field(98.0, ge=80, le=100, description="Oxygen saturation (%).")
    stiffness: float = Field(0.3, ge=0, le=1.0, description="Arterial stiffness; moves the reflected wave earlier and higher.")
    perfusion: float = Field(1.0, ge=0.2, le=2.0, description="Perfusion index scaling the pulsatile component.")
    resp_rate: float = Field(15.0, ge=5, le=30, description="Respiratory rate driving baseline modulation (/min).")
    resp_amp: float = Field(0.2, ge=0, le=1.0)
    noise: float = Field(0.02, ge=0, le=1.0)
    show_red: bool = Field(True, description="Display toggle only; not read by the generator.")
    show_ir: bool = Field(True, description="Display toggle only; not read by the generator.")


class PPGRequest(PPGParams):
    seed: Optional[int] = Field(None, ge=0)
