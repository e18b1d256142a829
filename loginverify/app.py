from __future__ import annotations
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from .config import Settings, get_settings, settings
from .db import engine, get_db
from .db_models import Base
from .errors import CallableError
from .logger import log_middleware, logger
from .mailer import MailClient, send_verification_email
from .schemas import VerificationStatus, callable_data
from .store import DECISIONS, decision_state, record_decision

app = FastAPI(title="loginverify")

# DB init (SQLite)
Base.metadata.create_all(bind=engine)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)

# Logging
app.middleware("http")(log_middleware)

@app.exception_handler(CallableError)
async def callable_error_handler(request: Request, exc: CallableError):
    return JSONResponse(exc.to_body(), status_code=exc.http_status)

def get_mailer(settings: Settings = Depends(get_settings)) -> MailClient:
    return MailClient(settings.sendgrid_api_key, settings.sendgrid_api_url, settings.mail_timeout_s)

@app.get("/healthz")
def healthz():
    return {"ok": True}

@app.post("/sendVerificationEmail")
async def send_verification(
    request: Request,
    settings: Settings = Depends(get_settings),
    mailer: MailClient = Depends(get_mailer),
):
    try:
        body = await request.json()
    except ValueError:
        body = None
    result = await send_verification_email(callable_data(body), settings, mailer)
    return {"result": result.model_dump()}

DECISION_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]

@app.api_route("/handleVerificationDecision", methods=DECISION_METHODS, response_class=PlainTextResponse)
def handle_verification_decision(
    action: str = Query(""),
    verification_id: str = Query("", alias="id"),
    db=Depends(get_db),
):
    if not verification_id or action not in DECISIONS:
        return PlainTextResponse("Invalid request", status_code=400)
    try:
        record_decision(db, verification_id, DECISIONS[action])
    except Exception:
        db.rollback()
        logger.exception("handleVerificationDecision error")
        return PlainTextResponse("Internal error", status_code=500)
    return PlainTextResponse("Thank you. You can close this page.", status_code=200)

@app.get("/verifications/{verification_id}", response_model=VerificationStatus)
def verification_status(verification_id: str, db=Depends(get_db)):
    try:
        state = decision_state(db, verification_id)
        # status column is shared; unknown values fail validation here
        return VerificationStatus(id=state.id, status=state.status, decided_at=state.decided_at)
    except Exception:
        logger.exception("verification_status error")
        raise HTTPException(status_code=500, detail="Internal error")
