import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings
from errors import EmptySelection, MathTestError, RequestCancelled

# Routers
from routers.admin import router as admin_router
from routers.exams import router as exams_router
from routers.generations import router as generations_router
from routers.health import router as health_router
from routers.questions import router as questions_router
from routers.topics import router as topics_router

logger = logging.getLogger("mathtest")
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Math Test Generator API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=Settings.from_env().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-api-key", "x-admin-token"],
    expose_headers=["Content-Disposition"],
)


@app.exception_handler(MathTestError)
def handle_mathtest_error(request: Request, exc: MathTestError):
    if exc.status_code >= 500 and not isinstance(exc, RequestCancelled):
        logger.error("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(p) for p in first.get("loc", ()) if p != "body"]
    if loc and loc[0] == "topics":
        message = EmptySelection().message
    else:
        message = f"Invalid request: {'.'.join(loc) or 'body'}: {first.get('msg', 'malformed')}"
    return JSONResponse(status_code=400, content={"error": message})


@app.get("/")
def health_root():
    return {"ok": True}


# Register routers
app.include_router(exams_router)  # /generate-test
app.include_router(topics_router)  # /topics
app.include_router(questions_router)  # /questions/...
app.include_router(generations_router)  # /generations/...
app.include_router(admin_router)  # /admin/...
app.include_router(health_router)  # /health/...
