"""FastAPI main application for the Grade Tracker."""

import logging
import traceback
from contextlib import asynccontextmanager
from io import BytesIO
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from grade_tracker import auth, roster
from grade_tracker.config import ALLOW_ORIGINS, DATA_FILE, DEBUG, LOG_LEVEL, SUBJECTS, EXAMS
from grade_tracker.exports import marks_to_excel, report_to_csv
from grade_tracker.insights import InsightUnavailable, fetch_insight
from grade_tracker.models import (
    InsightResponse,
    LoginRequest,
    MarkRecord,
    MarkRow,
    MarksRequest,
    RegisterRequest,
    Session,
    Student,
    StudentDashboard,
    StudentReport,
    StudentRequest,
    TeacherDashboard,
)
from grade_tracker.reports import student_dashboard, student_report, teacher_dashboard
from grade_tracker.storage import JsonFileStore, KeyValueStore, load_marks, load_students

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    auth.seed_users(app.state.store)
    yield


def create_app(store: Optional[KeyValueStore] = None) -> FastAPI:
    app = FastAPI(title="Grade Tracker", version="1.0.0", lifespan=lifespan)
    app.state.store = store if store is not None else JsonFileStore(DATA_FILE)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Specific handlers first, the catch-all last
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler_json(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler_json(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=422, content={"detail": exc.errors()})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(LookupError)
    async def lookup_error_handler(request: Request, exc: LookupError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions and return JSON."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error_detail = str(exc)
        if DEBUG:
            error_detail = f"{str(exc)}\n\n{traceback.format_exc()}"
        return JSONResponse(
            status_code=500,
            content={
                "detail": f"Internal server error: {error_detail}",
                "type": type(exc).__name__
            }
        )

    register_routes(app)
    return app


def get_store(request: Request) -> KeyValueStore:
    return request.app.state.store


def require_session(store: KeyValueStore) -> Session:
    session = auth.current_session(store)
    if session is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return session


def register_routes(app: FastAPI) -> None:

    @app.get("/health")
    async def health_check():
        """Health check endpoint to test server connectivity."""
        return {"status": "ok", "message": "Server is running"}

    @app.get("/vocabulary")
    async def vocabulary():
        return {"subjects": SUBJECTS, "exams": EXAMS}

    # Auth

    @app.post("/auth/login", response_model=Session)
    async def login(body: LoginRequest, request: Request):
        return auth.login(get_store(request), body.email, body.password, body.role)

    @app.post("/auth/logout")
    async def logout(request: Request):
        auth.logout(get_store(request))
        return {"success": True}

    @app.post("/auth/register", response_model=Session)
    async def register(body: RegisterRequest, request: Request):
        return auth.register_student(
            get_store(request), body.name, body.student_code, body.email, body.password
        )

    @app.get("/auth/session", response_model=Session)
    async def session(request: Request):
        return require_session(get_store(request))

    # Students

    @app.get("/students", response_model=List[Student])
    async def list_students(request: Request):
        return load_students(get_store(request))

    @app.post("/students", response_model=Student, status_code=201)
    async def add_student(body: StudentRequest, request: Request):
        return roster.create_student(
            get_store(request), body.name, body.student_code, body.class_name, body.email
        )

    @app.put("/students/{student_id}", response_model=Student)
    async def edit_student(student_id: str, body: StudentRequest, request: Request):
        return roster.update_student(
            get_store(request), student_id, body.name, body.student_code, body.class_name, body.email
        )

    @app.delete("/students/{student_id}")
    async def remove_student(student_id: str, request: Request):
        roster.delete_student(get_store(request), student_id)
        return {"success": True}

    # Marks

    @app.get("/marks", response_model=List[MarkRow])
    async def list_marks(request: Request):
        store = get_store(request)
        return roster.marks_with_student_names(load_students(store), load_marks(store))

    @app.post("/marks", response_model=MarkRecord, status_code=201)
    async def add_marks(body: MarksRequest, request: Request):
        return roster.create_marks(get_store(request), body.student_id, body.exam, body.marks)

    @app.put("/marks/{record_id}", response_model=MarkRecord)
    async def edit_marks(record_id: str, body: MarksRequest, request: Request):
        return roster.update_marks(get_store(request), record_id, body.student_id, body.exam, body.marks)

    @app.delete("/marks/{record_id}")
    async def remove_marks(record_id: str, request: Request):
        roster.delete_marks(get_store(request), record_id)
        return {"success": True}

    @app.get("/marks/export.xlsx")
    async def export_marks(request: Request):
        """Download the marks register as an Excel workbook."""
        store = get_store(request)
        content = marks_to_excel(load_students(store), load_marks(store))
        return StreamingResponse(
            BytesIO(content),
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": "attachment; filename=marks_register.xlsx"}
        )

    # Dashboards and reports

    @app.get("/dashboard/teacher", response_model=TeacherDashboard)
    async def get_teacher_dashboard(request: Request, top: int = Query(3, ge=0)):
        store = get_store(request)
        return teacher_dashboard(load_students(store), load_marks(store), top_n=top)

    @app.get("/dashboard/student", response_model=StudentDashboard)
    async def get_student_dashboard(request: Request):
        store = get_store(request)
        user = require_session(store)
        return student_dashboard(load_students(store), load_marks(store), user.email)

    def _current_report(request: Request) -> StudentReport:
        store = get_store(request)
        user = require_session(store)
        report = student_report(load_students(store), load_marks(store), user.email)
        if report is None:
            raise HTTPException(status_code=404, detail="No student record is linked to this account")
        return report

    @app.get("/reports/student", response_model=StudentReport)
    async def get_student_report(request: Request):
        return _current_report(request)

    @app.get("/reports/student.csv")
    async def download_student_report(request: Request):
        """Download the exam-wise report as CSV."""
        report = _current_report(request)
        return StreamingResponse(
            iter([report_to_csv(report)]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename=report_{report.student.student_code}.csv"
            }
        )

    @app.get("/insight", response_model=InsightResponse)
    def get_insight():
        try:
            quote = fetch_insight()
        except InsightUnavailable as e:
            return InsightResponse(available=False, message=str(e))
        return InsightResponse(available=True, text=quote['text'], author=quote.get('author'))


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
