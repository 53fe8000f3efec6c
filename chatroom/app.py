import asyncio
from contextlib import asynccontextmanager, suppress
from datetime import datetime
from typing import Optional

from fastapi import Body, Depends, FastAPI, Header, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from .config import Settings
from .errors import ChatError
from .log import get_logger
from .messages import MessageLog
from .registry import ParticipantRegistry
from .store import ChatStore
from .sweeper import PresenceSweeper

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    store: ChatStore = app.state.store
    owns_store = store is None
    if owns_store:
        store = ChatStore.connect(settings.mongo_url, settings.mongo_db)
        app.state.store = store
    clock = app.state.clock
    registry = ParticipantRegistry(store.participants, store.messages, clock=clock)
    app.state.registry = registry
    app.state.message_log = MessageLog(store.messages, registry, clock=clock)
    app.state.sweeper = PresenceSweeper(store.participants, store.messages,
                                        refresh_time=settings.refresh_time,
                                        cutoff_time=settings.cutoff_time, clock=clock)
    sweep_task = asyncio.create_task(app.state.sweeper.run())
    log.info('chat backend ready (sweep every %d ms, cutoff %d ms)',
             settings.refresh_time, settings.cutoff_time)
    try:
        yield
    finally:
        sweep_task.cancel()
        with suppress(asyncio.CancelledError):
            await sweep_task
        if owns_store:
            store.close()
            app.state.store = None


def get_registry(request: Request) -> ParticipantRegistry:
    return request.app.state.registry


def get_message_log(request: Request) -> MessageLog:
    return request.app.state.message_log


def create_app(settings: Settings = None, store: ChatStore = None, clock=datetime.now) -> FastAPI:
    """Build the API. ``store`` defaults to a Motor connection opened at startup."""
    settings = settings or Settings.from_env()
    app = FastAPI(title='chatroom', lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.clock = clock

    # added before CORSMiddleware so it sits inside it
    @app.middleware('http')
    async def unexpected_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            log.exception('unhandled error on %s %s', request.method, request.url.path)
            return JSONResponse({'error': 'internal error'}, status_code=500)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.exception_handler(ChatError)
    async def chat_error(request: Request, exc: ChatError):
        return JSONResponse({'error': exc.why}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_invalid(request: Request, exc: RequestValidationError):
        first = exc.errors()[0]
        where = '.'.join(str(p) for p in first['loc'])
        return JSONResponse({'error': f"{where}: {first['msg']}"}, status_code=422)

    @app.get('/')
    async def index():
        return HTMLResponse('<h3>Chat backend running. Poll /messages and heartbeat on /status</h3>')

    @app.post('/participants')
    async def create_participant(payload: dict = Body(...),
                                 registry: ParticipantRegistry = Depends(get_registry)):
        await registry.register(payload.get('name'))
        return Response(status_code=201)

    @app.get('/participants')
    async def list_participants(registry: ParticipantRegistry = Depends(get_registry)):
        return await registry.list()

    @app.post('/messages')
    async def post_message(payload: dict = Body(...), user: Optional[str] = Header(None),
                           message_log: MessageLog = Depends(get_message_log)):
        await message_log.append(user, payload.get('to'), payload.get('text'), payload.get('type'))
        return Response(status_code=201)

    @app.get('/messages')
    async def list_messages(limit: Optional[int] = Query(None, ge=0),
                            user: Optional[str] = Header(None),
                            message_log: MessageLog = Depends(get_message_log)):
        return await message_log.list(user, limit)

    @app.delete('/messages/{message_id}')
    async def delete_message(message_id: str, user: Optional[str] = Header(None),
                             message_log: MessageLog = Depends(get_message_log)):
        await message_log.delete(user, message_id)
        return Response(status_code=200)

    @app.post('/status')
    async def heartbeat(user: Optional[str] = Header(None),
                        registry: ParticipantRegistry = Depends(get_registry)):
        await registry.heartbeat(user)
        return Response(status_code=200)

    return app
