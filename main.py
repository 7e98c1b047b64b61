# main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from physio_simulator.api import app as simulator_app
from physio_simulator.constants import ALLOWED_ORIGINS, LOG_LEVEL

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Physiological Waveform Simulator API", version="1.0.0")

# CORS middleware - origins come from PHYSIO_SIM_ALLOWED_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

@app.get("/")
def read_root():
    return {"message": "Physiological waveform simulator API is running", "status": "ok"}

@app.get("/health")
def health_check():
    return {"status": "healthy"}

# Simulator routes (cardiac, ventilator, PPG) live under /api
app.mount("/api", simulator_app)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
