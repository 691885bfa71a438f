from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field, field_validator

from localchat.adapters.storage_fs import FileSystemArtifactLocator, JsonUserStore, public_user
from localchat.engine.probe import AdapterProber
from localchat.internal.config import RuntimeConfig
from localchat.internal.constants import SESSION_COOKIE
from localchat.internal.logging import get_logger
from localchat.internal.security import SessionRegistry
from localchat.kernel.errors import (
    InferenceInvocationFailed,
    ModelUnavailable,
    NoInferenceMethod,
    UserExists,
)
from localchat.kernel.execution import ChatService
from localchat.kernel.lifecycle import ModelLifecycleManager
from localchat.kernel.state import ModelState

logger = get_logger(__name__)

# ---------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------

class SignupInput(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    email: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _check_email(cls, value):
        if value and "@" not in value:
            raise ValueError("invalid email format")
        return value or None


class LoginInput(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ChatInput(BaseModel):
    message: str = Field(min_length=1)

    @field_validator("message")
    @classmethod
    def _check_message(cls, value):
        if not value.strip():
            raise ValueError("Message is required")
        return value


# ---------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------

async def current_user(request: Request) -> dict:
    user = await _lookup_user(request)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="authentication required",
        )
    return user


async def _lookup_user(request: Request) -> Optional[dict]:
    user_id = request.app.state.sessions.resolve(request.cookies.get(SESSION_COOKIE))
    if user_id is None:
        return None
    return await request.app.state.users.get_user(user_id)


async def require_ready_model(request: Request) -> None:
    if not request.app.state.model_state.is_ready:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Model not loaded yet",
        )


def _start_session(request: Request, response: Response, user: dict) -> None:
    token = request.app.state.sessions.issue(user["id"])
    response.set_cookie(SESSION_COOKIE, token, httponly=True, samesite="lax")


# ---------------------------------------------------------------------
# App
# ---------------------------------------------------------------------

def create_app(
    config: RuntimeConfig,
    *,
    model_state: Optional[ModelState] = None,
    prober: Optional[AdapterProber] = None,
    users: Optional[JsonUserStore] = None,
) -> FastAPI:
    """
    Build the HTTP service. The model lifecycle starts with the app and is
    cancelled on shutdown; requests are served while it is still searching.
    """
    model_state = model_state or ModelState()
    users = users or JsonUserStore(config.users_file, history_limit=config.history_limit)
    manager = ModelLifecycleManager(
        state=model_state,
        locator=FileSystemArtifactLocator(config.recognized_extensions),
        prober=prober or AdapterProber(binding_name=config.binding),
        models_dir=config.models_dir,
        poll_interval=config.poll_interval,
        retry_failed_probe=config.retry_failed_probe,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting localchat runtime", **config.summary())
        manager.start()
        yield
        logger.info("Shutting down localchat runtime")
        await manager.stop()
        logger.info("Runtime shutdown complete")

    app = FastAPI(title="localchat", lifespan=lifespan)
    app.state.config = config
    app.state.model_state = model_state
    app.state.manager = manager
    app.state.users = users
    app.state.sessions = SessionRegistry()
    app.state.chat = ChatService(model_state, users, serialize_inference=config.serialize_inference)

    # -----------------------------------------------------------------
    # Auth endpoints
    # -----------------------------------------------------------------

    @app.post("/signup")
    async def signup(payload: SignupInput, request: Request, response: Response):
        try:
            user = await request.app.state.users.create_user(payload.username, payload.password, payload.email)
        except UserExists as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
        _start_session(request, response, user)
        return {"ok": True, "user": public_user(user)}

    @app.post("/login")
    async def login(payload: LoginInput, request: Request, response: Response):
        user = await request.app.state.users.authenticate(payload.username, payload.password)
        if user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid credentials")
        _start_session(request, response, user)
        return {"ok": True, "user": {"id": user["id"], "username": user["username"]}}

    @app.post("/logout")
    async def logout(request: Request, response: Response):
        request.app.state.sessions.revoke(request.cookies.get(SESSION_COOKIE))
        response.delete_cookie(SESSION_COOKIE)
        return {"ok": True}

    @app.get("/me")
    async def me(request: Request):
        user = await _lookup_user(request)
        return {"user": public_user(user) if user else None}

    # -----------------------------------------------------------------
    # Model endpoints
    # -----------------------------------------------------------------

    @app.get("/health")
    async def health(request: Request):
        return {"ok": True, **request.app.state.model_state.snapshot()}

    @app.post("/chat")
    async def chat(
        payload: ChatInput,
        request: Request,
        user: dict = Depends(current_user),
        _ready: None = Depends(require_ready_model),
    ):
        try:
            reply = await request.app.state.chat.reply(user["id"], payload.message)
        except ModelUnavailable:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Model not loaded yet")
        except (NoInferenceMethod, InferenceInvocationFailed):
            logger.exception("Error generating reply", user_id=user["id"])
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate reply")
        return {"reply": reply}

    @app.get("/history")
    async def history(request: Request, user: dict = Depends(current_user)):
        return {"history": await request.app.state.users.get_history(user["id"])}

    if config.public_dir and config.public_dir.is_dir():
        app.mount("/", StaticFiles(directory=config.public_dir, html=True), name="public")

    return app


def serve(config: RuntimeConfig) -> None:
    app = create_app(config)
    logger.info("Starting API server", host=config.host, port=config.port)
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        workers=1,
        reload=False,
        log_config=None,
    )
