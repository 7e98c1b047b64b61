# physio_simulator/api.py
import logging
import numpy as np
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional

from .api_models import CardiacRequest, PPGRequest, VentilatorRequest, resolve_cardiac_params
from .cardiac_rhythms import generate_cardiac_waveform
from .constants import ALLOWED_ORIGINS, CARDIAC_FS, PPG_FS, RHYTHM_PRESETS
from .ppg_waveform import generate_ppg_waveform, ratio_of_ratios
from .ventilator_mechanics import compute_breath_timing, generate_ventilator_breath

logger = logging.getLogger(__name__)

app = FastAPI(title="Physiological Waveform Simulator")

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def _rng_from_seed(seed: Optional[int]) -> np.random.Generator:
    return np.random.default_rng(seed)


@app.get("/cardiac_presets")
def list_cardiac_presets():
    return {
        "presets": [
            {
                "id": preset.value,
                "label": info["label"],
                "description": info["description"],
                "category": info["category"].value,
                "params": info["params"],
            }
            for preset, info in RHYTHM_PRESETS.items()
        ]
    }


@app.post("/generate_cardiac")
def get_cardiac_waveform(request: CardiacRequest):
    params = resolve_cardiac_params(request.preset, request.overrides)
    time_axis, voltage, rhythm_description = generate_cardiac_waveform(
        request.preset,
        params,
        fs=CARDIAC_FS,
        rng=_rng_from_seed(request.seed),
    )
    logger.info("Generated cardiac strip: %s", rhythm_description)
    return {
        "preset": request.preset.value,
        "params": params.model_dump(),
        "rhythm_generated": rhythm_description,
        "sample_rate": CARDIAC_FS,
        "samples": [{"time": t, "voltage": v} for t, v in zip(time_axis.tolist(), voltage.tolist())],
    }


@app.post("/generate_ventilator")
def get_ventilator_breath(request: VentilatorRequest):
    breath = generate_ventilator_breath(request.mode, request.params)
    timing = compute_breath_timing(request.params.rr, request.params.ie_ratio)
    scalars = breath["scalars"]
    loops = breath["loops"]
    logger.info("Generated %s breath: %d steps", request.mode.value, len(scalars["time"]))
    return {
        "mode": request.mode.value,
        "timing": timing._asdict(),
        "scalars": [
            {"time": t, "pressure": p, "flow": f, "volume": v}
            for t, p, f, v in zip(
                scalars["time"].tolist(), scalars["pressure"].tolist(),
                scalars["flow"].tolist(), scalars["volume"].tolist(),
            )
        ],
        "loops": [
            {"pressure": p, "flow": f, "volume": v}
            for p, f, v in zip(loops["pressure"].tolist(), loops["flow"].tolist(), loops["volume"].tolist())
        ],
    }


@app.post("/generate_ppg")
def get_ppg_waveform(request: PPGRequest):
    time_axis, infrared, red = generate_ppg_waveform(request, fs=PPG_FS, rng=_rng_from_seed(request.seed))
    samples = []
    for t, ir_value, red_value in zip(time_axis.tolist(), infrared.tolist(), red.tolist()):
        sample = {"time": round(t, 2)}
        if request.show_ir:
            sample["infrared"] = ir_value
        if request.show_red:
            sample["red"] = red_value
        samples.append(sample)
    return {
        "sample_rate": PPG_FS,
        "ratio": ratio_of_ratios(request.spo2),
        "samples": samples,
    }
