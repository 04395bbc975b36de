from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Optional

import socketio
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .dispatcher import Dispatcher
from .errors import INTERNAL_ERROR_RESPONSE
from .managers.collection import CollectionManager
from .observability import setup_logging
from .routers import words
from .schemas import ClassifierHealth, HealthStatus
from .storage import Storage, build_storage
from .validation import ContentClassifier, PurgoMalumClassifier, ValidationPipeline

SERVICE_NAME = 'word-dictionary-server'
VERSION = '0.2.0'

logger = logging.getLogger(__name__)
settings = get_settings()

# Socket.IO server (ASGI)
sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins='*' if '*' in settings.cors_origins else settings.cors_origins,
)


def configure(app: FastAPI, settings: Settings, storage: Optional[Storage] = None,
              classifier: Optional[ContentClassifier] = None) -> Dispatcher:
    """Wire storage, validation and the collection registry onto `app.state`."""
    if storage is None:
        storage = build_storage(settings.storage_backend, settings.storage_path)
    if classifier is None and settings.classifier_enabled:
        classifier = PurgoMalumClassifier(settings.classifier_url, settings.classifier_timeout_seconds)
    pipeline = ValidationPipeline(classifier, timeout=settings.classifier_timeout_seconds)
    collections = CollectionManager(storage, pipeline, sio)
    app.state.settings = settings
    app.state.pipeline = pipeline
    app.state.collections = collections
    app.state.dispatcher = Dispatcher(collections, settings.collection_name)
    return app.state.dispatcher


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.log_format)
    configure(app, settings)
    await app.state.collections.open(settings.collection_name)
    logger.info('Word dictionary started', extra={'collection': settings.collection_name})
    yield
    if app.state.pipeline.classifier is not None:
        await app.state.pipeline.classifier.aclose()
    logger.info('Word dictionary shutting down')


app = FastAPI(title='Word Dictionary Server', version=VERSION, lifespan=lifespan)

# Mount Socket.IO ASGI application
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)

# CORS for REST
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.include_router(words.router)


@app.exception_handler(Exception)
async def generic_error_handler(request: Request, exc: Exception):
    logger.error(f'Unhandled exception on {request.url.path}: {exc}', exc_info=True)
    return JSONResponse(status_code=500, content=INTERNAL_ERROR_RESPONSE)


@app.get('/health')
async def health(request: Request) -> HealthStatus:
    pipeline: ValidationPipeline = request.app.state.pipeline
    return HealthStatus(
        service=SERVICE_NAME,
        version=VERSION,
        classifier=ClassifierHealth(
            enabled=pipeline.classifier_enabled,
            unavailable_count=pipeline.unavailable_count,
        ),
    )


# Socket.IO Events
async def _snapshot() -> list:
    collection = await app.state.collections.open(app.state.settings.collection_name)
    return await collection.list()

@sio.event
async def connect(sid, environ, auth=None):
    await sio.emit('words:list', await _snapshot(), to=sid)

@sio.on('words:list')
async def words_list(sid):
    await sio.emit('words:list', await _snapshot(), to=sid)

# Export ASGI app for uvicorn
application = asgi_app

# For local running: uvicorn wordbank.main:application --reload --host 0.0.0.0 --port 8000
