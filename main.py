from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.exceptions import RequestValidationError
from examcore.core.config import settings
from examcore.core.exceptions import ExamEngineError
from examcore.core.logging import configure_logging
from examcore.core.scheduler import start_scheduler, stop_scheduler
from examcore.endpoints import admin, attempt, course, exam, student
from examcore.middleware.exceptions import exam_engine_exception_handler, global_exception_handler, validation_exception_handler
from examcore.middleware.logging import RequestLoggingMiddleware

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(ExamEngineError, exam_engine_exception_handler)
app.add_exception_handler(HTTPException, global_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.include_router(course.router, prefix="/courses", tags=["Courses"])
app.include_router(exam.router, prefix="/exams", tags=["Exams"])
app.include_router(attempt.router, prefix="/exams", tags=["Attempts"])
app.include_router(student.router, prefix="/students", tags=["Students"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])

@app.on_event("startup")
async def startup_event():
    configure_logging()
    start_scheduler()

@app.on_event("shutdown")
async def shutdown_event():
    stop_scheduler()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
