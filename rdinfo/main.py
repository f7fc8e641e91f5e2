# main.py

import logging
import threading
import time
import uuid
from dataclasses import asdict
from datetime import datetime
from typing import Callable, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr

# Import Data Models & Logic
from . import __version__, MEDICAL_DISCLAIMER
from .constants import DosageStatus, Gender, QuickProfile, SESSION_LIMITS
from .models import Vitals, DosageResult, DataTypeError
from .calculator import PatientCalculator
from .dosing import DosingCalculator
from .profile import ProfileStore

# --- 1. CONFIGURATION & LOGGING ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("rdinfo-api")

app = FastAPI(
    title="RDInfo API",
    version=__version__,
    description="Patient parameters, reference values and emergency drug doses for EMS crews. \n\n"
                f"**WARNING**: {MEDICAL_DISCLAIMER.strip()}",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(DataTypeError)
async def data_type_error_handler(request: Request, exc: DataTypeError):
    logger.warning(f"Input Type Error on {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": f"Input Type Error: {exc}"})

@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.warning(f"Input Value Error on {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": f"Input Value Error: {exc}"})

# --- 2. SESSIONS (one profile store per crew session) ---

class _Session:
    def __init__(self, now: float):
        self.store = ProfileStore()
        self.lock = threading.Lock()   # At most one mutation in flight per session
        self.last_access = now

class SessionRegistry:
    """
    Keeps patient data in memory only; ending a session discards it.
    Sessions idle for longer than idle_timeout seconds are purged on the next
    create, get or count and then answer 404 like an ended session.
    """

    def __init__(self, idle_timeout: float = SESSION_LIMITS.IDLE_TIMEOUT_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self._sessions: Dict[str, _Session] = {}
        self._lock = threading.Lock()
        self._idle_timeout = idle_timeout
        self._clock = clock

    def _purge_expired(self, now: float) -> None:
        # Caller holds self._lock
        expired = [sid for sid, s in self._sessions.items() if now - s.last_access > self._idle_timeout]
        for sid in expired:
            del self._sessions[sid]
            logger.info(f"Session expired, patient data discarded: {sid}")

    def create(self) -> str:
        session_id = uuid.uuid4().hex
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._sessions[session_id] = _Session(now)
        return session_id

    def get(self, session_id: str) -> _Session:
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            session = self._sessions.get(session_id)
            if session is not None:
                session.last_access = now
        if session is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        return session

    def drop(self, session_id: str) -> None:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._sessions)

sessions = SessionRegistry()

# --- 3. INPUT SCHEMAS (type checks only; the store clamps ranges) ---

class AgeRequest(BaseModel):
    years: int = Field(..., description="Age in years (clamped to 0-120)")
    months: int = Field(0, description="Additional months (clamped to 0-11)")

    model_config = ConfigDict(json_schema_extra={"example": {"years": 5, "months": 3}})

class WeightRequest(BaseModel):
    weight_kg: Optional[float] = Field(None, description="Measured weight; null = estimate from age")
    is_manual: bool = True

class GenderRequest(BaseModel):
    gender: Gender

class VitalsRequest(BaseModel):
    systolic_bp: Optional[int] = None
    diastolic_bp: Optional[int] = None
    heart_rate: Optional[int] = None
    respiratory_rate: Optional[int] = None
    oxygen_saturation: Optional[int] = None
    temperature: Optional[float] = None
    blood_glucose: Optional[float] = None
    consciousness: Optional[str] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {"systolic_bp": 85, "heart_rate": 130, "oxygen_saturation": 91}
    })

class MedicalDataRequest(BaseModel):
    allergies: Optional[List[str]] = None
    medications: Optional[List[str]] = None
    medical_history: Optional[List[str]] = None

class PregnancyRequest(BaseModel):
    is_pregnant: Optional[bool]
    week: Optional[int] = Field(None, description="Week of pregnancy (clamped to 1-42)")

SettingValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr, List[StrictStr]]

# --- 4. RESPONSE SCHEMAS ---

class DosageResponse(BaseModel):
    medication_id: str
    name: str
    dose_amount: float
    unit: str
    volume_ml: Optional[float]
    concentration_description: str
    formula_description: str
    max_dose_description: str
    route: str
    at_cap: bool
    indication: str
    preparation: str
    warnings: List[str]
    generated_at: datetime = Field(default_factory=datetime.now)

def _profile_payload(store: ProfileStore) -> dict:
    return {
        "profile": asdict(store.get_current_profile()),
        "derived": asdict(store.get_derived_values()),
        "summary": store.patient_summary(),
    }

def _dosage_payload(result: DosageResult) -> dict:
    if result.status == DosageStatus.UNKNOWN_MEDICATION:
        raise HTTPException(status_code=404, detail=f"Unknown medication: {result.medication_id}")
    if result.status == DosageStatus.UNKNOWN_INDICATION:
        raise HTTPException(status_code=404, detail=result.warnings[0])
    if result.status == DosageStatus.NO_RULE_FOR_AGE:
        raise HTTPException(status_code=422, detail=result.warnings[0])
    payload = asdict(result)
    payload.pop("status")
    return payload

# --- 5. ENDPOINTS ---

@app.get("/")
def read_root():
    return {"status": "active", "message": "RDInfo API is running successfully!"}

@app.get("/health")
def health_check():
    return {"status": "active", "version": __version__, "sessions": len(sessions)}

@app.post("/sessions", status_code=201)
def create_session():
    session_id = sessions.create()
    logger.info(f"Session opened: {session_id}")
    return {"session_id": session_id, **_profile_payload(sessions.get(session_id).store)}

@app.delete("/sessions/{session_id}", status_code=204)
def end_session(session_id: str):
    sessions.drop(session_id)
    logger.info(f"Session closed, patient data discarded: {session_id}")

@app.get("/sessions/{session_id}")
def get_session(session_id: str):
    session = sessions.get(session_id)
    with session.lock:
        return _profile_payload(session.store)

@app.put("/sessions/{session_id}/age")
def update_age(session_id: str, body: AgeRequest):
    session = sessions.get(session_id)
    with session.lock:
        session.store.update_age(body.years, body.months)
        return _profile_payload(session.store)

@app.put("/sessions/{session_id}/weight")
def update_weight(session_id: str, body: WeightRequest):
    session = sessions.get(session_id)
    with session.lock:
        session.store.update_weight(body.weight_kg, body.is_manual)
        return _profile_payload(session.store)

@app.put("/sessions/{session_id}/gender")
def update_gender(session_id: str, body: GenderRequest):
    session = sessions.get(session_id)
    with session.lock:
        session.store.update_gender(body.gender)
        return _profile_payload(session.store)

@app.put("/sessions/{session_id}/vitals")
def update_vitals(session_id: str, body: VitalsRequest):
    session = sessions.get(session_id)
    with session.lock:
        session.store.update_vitals(Vitals(**body.model_dump()))
        return _profile_payload(session.store)

@app.put("/sessions/{session_id}/medical-data")
def update_medical_data(session_id: str, body: MedicalDataRequest):
    session = sessions.get(session_id)
    with session.lock:
        session.store.update_medical_data(body.allergies, body.medications, body.medical_history)
        return _profile_payload(session.store)

@app.put("/sessions/{session_id}/pregnancy")
def update_pregnancy(session_id: str, body: PregnancyRequest):
    session = sessions.get(session_id)
    with session.lock:
        session.store.update_pregnancy(body.is_pregnant, body.week)
        return _profile_payload(session.store)

@app.post("/sessions/{session_id}/quick-profile/{kind}")
def set_quick_profile(session_id: str, kind: QuickProfile):
    session = sessions.get(session_id)
    with session.lock:
        session.store.set_quick_profile(kind)
        return _profile_payload(session.store)

@app.post("/sessions/{session_id}/reset")
def reset_session(session_id: str):
    session = sessions.get(session_id)
    with session.lock:
        session.store.reset_to_defaults()
        return _profile_payload(session.store)

@app.get("/sessions/{session_id}/settings")
def export_settings(session_id: str):
    session = sessions.get(session_id)
    with session.lock:
        return session.store.export_settings()

@app.put("/sessions/{session_id}/settings")
def import_settings(session_id: str, settings: Dict[str, SettingValue]):
    session = sessions.get(session_id)
    with session.lock:
        session.store.import_settings(settings)
        return session.store.export_settings()

@app.get("/sessions/{session_id}/dosage/{medication_id}", response_model=DosageResponse)
def session_dosage(session_id: str, medication_id: str, indication: Optional[str] = None):
    """Dose for the session patient, using the effective weight."""
    session = sessions.get(session_id)
    with session.lock:
        result = DosingCalculator.calculate_for_profile(
            medication_id,
            session.store.get_current_profile(),
            session.store.get_derived_values(),
            indication
        )
    return _dosage_payload(result)

@app.get("/medications")
def list_medications():
    return DosingCalculator.available_medications()

@app.get("/medications/{medication_id}/indications")
def list_indications(medication_id: str):
    indications = DosingCalculator.indications_for(medication_id)
    if not indications:
        raise HTTPException(status_code=404, detail=f"Unknown medication: {medication_id}")
    return {"medication_id": medication_id, "indications": indications}

@app.get("/dosage/{medication_id}", response_model=DosageResponse)
def dosage(medication_id: str,
           weight_kg: float = Query(..., gt=0.0, le=300.0),
           age_years: int = Query(..., ge=0, le=120),
           age_months: int = Query(0, ge=0, le=11),
           indication: Optional[str] = None):
    try:
        result = DosingCalculator.calculate_dosage(
            medication_id, weight_kg, age_years, indication=indication, age_months=age_months
        )
    except (DataTypeError, ValueError):
        raise
    except Exception as e:
        logger.error(f"Dosage Calculation Failure: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Dosage Engine Error")
    return _dosage_payload(result)

@app.get("/estimate-weight")
def estimate_weight(age_years: int = Query(..., ge=0, le=120),
                    age_months: int = Query(0, ge=0, le=11),
                    gender: Gender = Gender.UNKNOWN,
                    is_pregnant: bool = False,
                    week: Optional[int] = Query(None, ge=1, le=42)):
    weight = PatientCalculator.estimate_weight(age_years, age_months, gender, is_pregnant, week)
    return {"age_years": age_years, "age_months": age_months, "estimated_weight_kg": weight}

@app.get("/vital-ranges")
def vital_ranges(age_years: int = Query(..., ge=0, le=120),
                 age_months: int = Query(0, ge=0, le=11),
                 weight_kg: Optional[float] = Query(None, gt=0.0, le=300.0)):
    if weight_kg is None:
        weight_kg = PatientCalculator.estimate_weight(age_years, age_months)
    ranges = PatientCalculator.vital_ranges(age_years, age_months, weight_kg)
    return {
        **asdict(ranges),
        "tidal_volume_ml": ranges.tidal_volume_ml,
        "blood_volume_ml": ranges.blood_volume_ml,
        "daily_fluid_ml": ranges.daily_fluid_ml,
        "daily_calories_kcal": ranges.daily_calories_kcal,
        "age_category": PatientCalculator.age_category(age_years, age_months),
    }
