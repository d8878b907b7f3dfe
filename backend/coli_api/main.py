import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .cache import ResponseCache
from .cors import LessonCORSMiddleware
from .errors import CoachError
from .settings import settings
from .routers import health
from .routers import coach
from .routers import tts

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	# Caches belong to this process instance only; nothing survives a cold start
	app.state.coach_cache = ResponseCache(settings.coach_cache_max)
	app.state.tts_cache = ResponseCache(settings.tts_cache_max)
	logger.info(
		"Coach API ready (coach cache %d, tts cache %d, origins %s)",
		settings.coach_cache_max,
		settings.tts_cache_max,
		", ".join(settings.allowed_origins),
	)
	yield


app = FastAPI(title="Dr. Coli Coach API", lifespan=lifespan)
app.include_router(health.router)
app.include_router(coach.router)
app.include_router(tts.router)

app.add_middleware(
	LessonCORSMiddleware,
	allow_origins=settings.allowed_origins,
	allow_credentials=False,
	allow_methods=["POST", "OPTIONS"],
	allow_headers=["Content-Type", "Authorization"],
)


@app.get("/info")
def root():
	return {"status": "ok", "openai_configured": bool(settings.openai_api_key)}


@app.exception_handler(CoachError)
async def coach_error_handler(request: Request, exc: CoachError):
	if exc.status_code >= 500:
		logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
	return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
	if any(err.get("type") == "json_invalid" for err in exc.errors()):
		return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})
	fields = [".".join(str(part) for part in err.get("loc", ())[1:]) for err in exc.errors()]
	return JSONResponse(status_code=400, content={"error": "Invalid request body", "fields": [f for f in fields if f]})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
	message = "Use POST" if exc.status_code == 405 else exc.detail
	return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
	logger.exception("Unhandled error on %s %s", request.method, request.url.path)
	return JSONResponse(status_code=500, content={"error": "Server crashed"})
