from fastapi import Body, Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from typing import List, Optional
import os
import sys

import assignments
import auth
import catalog
import dashboard
import intake
import storage
from auth import ActingIdentity
from database import Base, SessionLocal, engine, get_db
from errors import NotFound, ServiceError, ValidationFailed
from models import AppRole, JobType
from schemas import (
    AssignmentResponse, AssignmentStatusUpdate, AssignRequest, AvailabilityUpdate,
    ChatInquiryForm, ChatInquiryResponse, CreatedResponse, Credentials,
    DeveloperOnboardingForm, DeveloperResponse, DeveloperStats,
    DeveloperStatusUpdate, JobApplicationForm, JobApplicationResponse,
    JobOpeningsResponse, ProjectIntakeForm, ProjectSubmissionResponse,
    SessionResponse, StepCheckResponse, TokenResponse, UploadBatchResponse,
    UploadResult,
)
from stepper import stepper_for

app = FastAPI(
    title="Agency Portal API",
    description="Project intake, job applications, live chat and the admin/developer portal",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded screenshots and resumes
os.makedirs(storage.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=storage.UPLOAD_DIR), name="uploads")

security = HTTPBearer(auto_error=False)

FORM_MODELS = {
    "project-intake": ProjectIntakeForm,
    "developer-onboarding": DeveloperOnboardingForm,
    "job-application": JobApplicationForm,
    "chat-inquiry": ChatInquiryForm,
}


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    content = {"detail": exc.message}
    redirect = getattr(exc, "redirect", None)
    if redirect:
        content["redirect"] = redirect
    step = getattr(exc, "step", None)
    if step is not None:
        content["step"] = step
    return JSONResponse(status_code=exc.status_code, content=content)


# Dependencies
def get_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> ActingIdentity:
    if credentials is None:
        return ActingIdentity.anonymous()
    actor = auth.current_session(db, credentials.credentials)
    if actor is None:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials")
    return actor


def get_blob_store() -> storage.BlobStore:
    return storage.get_blob_store()


@app.on_event("startup")
async def startup_event():
    """Create tables and provision the admin; the app still starts if the DB is down."""
    print("🚀 Starting application...", file=sys.stdout, flush=True)
    try:
        Base.metadata.create_all(bind=engine)
        print("✅ Database tables created/verified", file=sys.stdout, flush=True)
    except Exception as db_error:
        print(f"⚠️ Database initialization error: {db_error}", file=sys.stderr, flush=True)
        return

    try:
        db = SessionLocal()
        try:
            auth.init_admin_user(db, os.getenv("ADMIN_EMAIL"), os.getenv("ADMIN_PASSWORD"))
        finally:
            db.close()
    except Exception as user_error:
        print(f"⚠️ Admin user initialization error: {user_error}", file=sys.stderr, flush=True)

    print("✅ Application started", file=sys.stdout, flush=True)


@app.get("/api/status")
async def api_status():
    return {
        "message": "Agency Portal API",
        "docs": "/docs",
        "status": "running",
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "agency-portal-api"}


# -------- Public catalog & forms --------

@app.get("/api/catalog")
async def get_catalog():
    return catalog.options()


@app.get("/api/jobs", response_model=JobOpeningsResponse)
async def get_jobs(type: Optional[JobType] = None):
    return {"jobs": catalog.list_jobs(type), "job_type": type}


@app.post("/api/forms/{workflow}/steps/{step}", response_model=StepCheckResponse)
async def check_step(workflow: str, step: int, state: dict = Body(default_factory=dict)):
    form_model = FORM_MODELS.get(workflow)
    if form_model is None:
        raise NotFound(f"Unknown form: {workflow}")
    try:
        form_state = form_model.model_validate(state)
    except PydanticValidationError:
        raise ValidationFailed("Some of the entered values are invalid")
    stepper = stepper_for(workflow, form_state)
    if step < 1 or step > stepper.step_count:
        raise NotFound(f"Step {step} does not exist")
    return {
        "workflow": workflow,
        "step": step,
        "step_count": stepper.step_count,
        "title": stepper.step(step).title,
        "can_advance": stepper.can_advance(step),
    }


@app.post("/api/project-submissions", response_model=CreatedResponse, status_code=201)
async def create_project_submission(state: ProjectIntakeForm, db: Session = Depends(get_db)):
    return {"id": intake.submit_project_intake(db, state)}


@app.post("/api/jobs/{job_id}/applications", response_model=CreatedResponse, status_code=201)
async def apply_for_job(job_id: str, state: JobApplicationForm, db: Session = Depends(get_db)):
    job = catalog.get_job(job_id)
    if job is None:
        raise NotFound("Job not found")
    return {"id": intake.submit_job_application(db, job, state)}


@app.post("/api/uploads/resumes", response_model=UploadResult, status_code=201)
async def upload_resume(
    file: UploadFile = File(...),
    store: storage.BlobStore = Depends(get_blob_store)
):
    stored = storage.upload_resume(store, file.filename, await file.read())
    return {"name": stored.name, "url": stored.url}


@app.post("/api/chat-inquiries", response_model=CreatedResponse, status_code=201)
async def create_chat_inquiry(state: ChatInquiryForm, db: Session = Depends(get_db)):
    return {"id": intake.submit_chat_inquiry(db, state)}


# -------- Auth --------

@app.post("/api/auth/signup", response_model=TokenResponse, status_code=201)
async def signup(credentials: Credentials, db: Session = Depends(get_db)):
    return {"access_token": auth.sign_up(db, credentials.email, credentials.password)}


@app.post("/api/auth/login", response_model=TokenResponse)
async def login(credentials: Credentials, db: Session = Depends(get_db)):
    return {"access_token": auth.sign_in(db, credentials.email, credentials.password)}


@app.post("/api/auth/logout")
async def logout(actor: ActingIdentity = Depends(get_actor), db: Session = Depends(get_db)):
    auth.sign_out(db, actor)
    return {"message": "Signed out"}


@app.get("/api/auth/session", response_model=SessionResponse)
async def get_session(actor: ActingIdentity = Depends(get_actor), db: Session = Depends(get_db)):
    return {
        "authenticated": actor.is_authenticated,
        "user_id": actor.user_id,
        "email": actor.email,
        "role": actor.role.value if actor.role else None,
        "redirect": auth.landing_path(actor, auth.has_developer_profile(db, actor)),
    }


# -------- Developer area --------

@app.post("/api/developer/screenshots", response_model=UploadBatchResponse)
async def upload_screenshots(
    files: List[UploadFile] = File(...),
    actor: ActingIdentity = Depends(get_actor),
    store: storage.BlobStore = Depends(get_blob_store)
):
    auth.require_authenticated(actor)
    payload = [(f.filename, await f.read()) for f in files]
    uploaded, failed = storage.upload_screenshots(store, actor.user_id, payload)
    return {
        "uploaded": [{"name": s.name, "url": s.url} for s in uploaded],
        "failed": [{"name": name, "error": message} for name, message in failed],
    }


@app.post("/api/developer/onboarding", response_model=CreatedResponse, status_code=201)
async def onboard_developer(
    state: DeveloperOnboardingForm,
    actor: ActingIdentity = Depends(get_actor),
    db: Session = Depends(get_db),
    store: storage.BlobStore = Depends(get_blob_store)
):
    return {"id": intake.submit_developer_onboarding(db, actor, state, store)}


@app.get("/api/developer/profile", response_model=DeveloperResponse)
async def get_developer_profile(actor: ActingIdentity = Depends(get_actor), db: Session = Depends(get_db)):
    return dashboard.get_own_profile(db, actor)


@app.get("/api/developer/assignments", response_model=List[AssignmentResponse])
async def get_developer_assignments(actor: ActingIdentity = Depends(get_actor), db: Session = Depends(get_db)):
    auth.require_role(actor, AppRole.DEVELOPER)
    profile = dashboard.get_own_profile(db, actor)
    return dashboard.list_assignments_for_developer(db, actor, profile.id)


@app.get("/api/project-submissions", response_model=List[ProjectSubmissionResponse])
async def get_project_submissions(actor: ActingIdentity = Depends(get_actor), db: Session = Depends(get_db)):
    return dashboard.list_project_submissions(db, actor)


@app.patch("/api/assignments/{assignment_id}", response_model=AssignmentResponse)
async def update_assignment(
    assignment_id: str,
    update: AssignmentStatusUpdate,
    actor: ActingIdentity = Depends(get_actor),
    db: Session = Depends(get_db)
):
    assignment = assignments.set_assignment_status(db, actor, assignment_id, update.status)
    return dashboard.assignment_response(assignment)


# -------- Admin area --------

@app.get("/api/admin/developers", response_model=List[DeveloperResponse])
async def get_developers(actor: ActingIdentity = Depends(get_actor), db: Session = Depends(get_db)):
    return dashboard.list_developers(db, actor)


@app.get("/api/admin/developers/assignable", response_model=List[DeveloperResponse])
async def get_assignable_developers(actor: ActingIdentity = Depends(get_actor), db: Session = Depends(get_db)):
    return assignments.list_assignable_developers(db, actor)


@app.get("/api/admin/stats", response_model=DeveloperStats)
async def get_developer_stats(actor: ActingIdentity = Depends(get_actor), db: Session = Depends(get_db)):
    return dashboard.developer_stats(db, actor)


@app.patch("/api/admin/developers/{developer_id}/status", response_model=DeveloperResponse)
async def update_developer_status(
    developer_id: str,
    update: DeveloperStatusUpdate,
    actor: ActingIdentity = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return assignments.set_developer_status(db, actor, developer_id, update.status)


@app.patch("/api/admin/developers/{developer_id}/availability", response_model=DeveloperResponse)
async def update_developer_availability(
    developer_id: str,
    update: AvailabilityUpdate,
    actor: ActingIdentity = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return assignments.set_developer_availability(db, actor, developer_id, update.is_available)


@app.get("/api/admin/developers/{developer_id}/assignments", response_model=List[AssignmentResponse])
async def get_assignments_for_developer(
    developer_id: str,
    actor: ActingIdentity = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return dashboard.list_assignments_for_developer(db, actor, developer_id)


@app.post("/api/admin/assignments", response_model=CreatedResponse, status_code=201)
async def create_assignment(
    request: AssignRequest,
    actor: ActingIdentity = Depends(get_actor),
    db: Session = Depends(get_db)
):
    assignment_id = assignments.assign(
        db, actor, request.developer_id, request.project_submission_id, request.notes
    )
    return {"id": assignment_id}


@app.get("/api/admin/assignments", response_model=List[AssignmentResponse])
async def get_all_assignments(actor: ActingIdentity = Depends(get_actor), db: Session = Depends(get_db)):
    return dashboard.list_all_assignments(db, actor)


@app.get("/api/admin/job-applications", response_model=List[JobApplicationResponse])
async def get_job_applications(actor: ActingIdentity = Depends(get_actor), db: Session = Depends(get_db)):
    return dashboard.list_job_applications(db, actor)


@app.get("/api/admin/chat-inquiries", response_model=List[ChatInquiryResponse])
async def get_chat_inquiries(actor: ActingIdentity = Depends(get_actor), db: Session = Depends(get_db)):
    return dashboard.list_chat_inquiries(db, actor)


@app.patch("/api/admin/chat-inquiries/{inquiry_id}/read", response_model=ChatInquiryResponse)
async def mark_chat_inquiry_read(
    inquiry_id: str,
    actor: ActingIdentity = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return dashboard.mark_inquiry_read(db, actor, inquiry_id)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
