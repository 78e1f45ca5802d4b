import logging

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, field_validator
from sqlalchemy.orm import Session

import admin
import reporting
from config import settings
from db import Base, engine, get_db
from errors import AuthError, InputError, SantaError
from matching import request_match
from qr import build_scan_url, next_qr_id, parse_scan_payload
from security import check_password, create_session_token, require_admin

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Secret Santa")

# Allow the frontend to call this API in the browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)


@app.exception_handler(SantaError)
async def santa_error_handler(request: Request, exc: SantaError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "server_error", "message": "Something went wrong"},
    )


class ScanRequest(BaseModel):
    email: str | None = None
    qrData: str | None = None  # raw ?data= value from the scan link
    qrId: int | None = None


class LoginRequest(BaseModel):
    password: str | None = None


class EmailCreate(BaseModel):
    email: EmailStr


class SantaCreate(BaseModel):
    name: str
    email: EmailStr | None = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


@app.get("/")
def home():
    return {"status": "ok", "message": "Secret Santa is running"}


@app.post("/scan")
def scan(payload: ScanRequest, db: Session = Depends(get_db)):
    if not (payload.email or "").strip():
        raise InputError("missing_fields", "Please enter your email")

    qr_id = payload.qrId
    if payload.qrData is not None:
        qr_id = parse_scan_payload(payload.qrData)

    santa_match = request_match(db, payload.email, qr_id=qr_id)
    return {"success": True, "santaMatch": santa_match}


@app.get("/progress")
def public_progress(db: Session = Depends(get_db)):
    return reporting.progress(db, include_matches=settings.PUBLIC_MATCHES)


@app.get("/qr")
def new_qr(db: Session = Depends(get_db)):
    qr_id = next_qr_id(db)
    return {"qrId": qr_id, "url": build_scan_url(settings.PUBLIC_BASE_URL, qr_id)}


# ---- Admin ----

@app.post("/admin/login")
def login(payload: LoginRequest):
    if not check_password(payload.password):
        logger.warning("Failed admin login")
        raise AuthError("invalid_password", "Invalid password")

    token, expires = create_session_token()
    return {"success": True, "token": token, "expiresAt": expires.isoformat()}


@app.get("/admin/participants", dependencies=[Depends(require_admin)])
def participants(db: Session = Depends(get_db)):
    return admin.list_participants(db)


@app.get("/admin/progress", dependencies=[Depends(require_admin)])
def admin_progress(db: Session = Depends(get_db)):
    return reporting.progress(db, include_matches=True)


@app.post("/admin/emails", dependencies=[Depends(require_admin)])
def add_email(entry: EmailCreate, db: Session = Depends(get_db)):
    registrant = admin.add_registrant(db, entry.email)
    return {"success": True, "id": registrant.id, "email": registrant.email}


@app.post("/admin/santas", dependencies=[Depends(require_admin)])
def add_santa(entry: SantaCreate, db: Session = Depends(get_db)):
    santa = admin.add_santa(db, entry.name, entry.email)
    return {"success": True, "id": santa.id, "name": santa.name}


@app.delete("/admin/{scope}", dependencies=[Depends(require_admin)])
def clear_scope(scope: str, db: Session = Depends(get_db)):
    message = admin.clear(db, scope)
    return {"success": True, "message": message}
