"""
FastAPI Application - Account Service Bridge

Exposes the account service to consumers that do not speak its protocol:
classified messages and connection events are streamed over WebSockets, and
a manual refresh can be triggered over HTTP.

Features:
    - Live stream of classified account messages (subscribe, history, price, work)
    - Connection lifecycle stream (opened, closed, failed)
    - Manual refresh (re-sends the four startup requests)

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings, validate_configuration
from core.logging import logger
from core.schemas import MESSAGE_TYPES
from services.account_service import AccountService, ConnectionState
from services.publisher import Publisher, Subscription
from storage.stores import SettingsAccountStore, SettingsPreferences


def build_service() -> AccountService:
    """Build the account service from settings."""
    return AccountService(
        Publisher(max_queue_size=settings.publisher_max_queue_size),
        SettingsAccountStore(),
        SettingsPreferences(),
        default_block_count=settings.default_block_count,
    )


def create_app(service_factory: Optional[Callable[[], AccountService]] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service_factory: Builds the AccountService on startup (defaults to build_service)

    Returns:
        FastAPI: The configured application
    """
    factory = service_factory or build_service

    # ============================================
    # Lifespan Management
    # ============================================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=== Application Starting ===")
        validate_configuration()
        service = factory()
        app.state.service = service
        await service.open()
        logger.info("=== Started Successfully ===")

        yield

        logger.info("=== Shutting Down ===")
        try:
            await service.close()
            logger.info("=== Shutdown Complete ===")
        except Exception as e:
            logger.error(f"Shutdown error: {e}")

    app = FastAPI(
        title="Raicast Account Service Bridge",
        description=(
            "REST and WebSocket access to a tracked account on the account service.\n\n"
            "## REST Endpoints\n"
            "- `GET /health` - Connection state and session info\n"
            "- `GET /currency` - Local currency\n"
            "- `POST /refresh` - Re-send subscribe, price and history requests\n\n"
            "## WebSocket Streams\n"
            "- `ws://{host}/ws/messages?kinds=price,history` - Classified messages\n"
            "- `ws://{host}/ws/lifecycle` - Connection events\n"
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    # ============================================
    # System Endpoints
    # ============================================

    @app.get("/", tags=["System"])
    async def root():
        """API information."""
        return {
            "name": "Raicast Account Service Bridge",
            "version": "1.0.0",
            "docs": "/docs",
            "message_kinds": list(MESSAGE_TYPES),
        }

    @app.get("/health", tags=["System"])
    async def health_check(request: Request):
        """Connection state and session info."""
        service: AccountService = request.app.state.service
        return {
            "status": "healthy" if service.state == ConnectionState.OPEN else "degraded",
            "connection": service.state.value,
            "account_configured": service.address is not None,
            "block_count": service.session.current_block_count(),
        }

    # ============================================
    # Account Endpoints
    # ============================================

    @app.get("/currency", tags=["Account"])
    async def local_currency(request: Request):
        """Local currency used for price requests."""
        service: AccountService = request.app.state.service
        return {"currency": service.get_local_currency()}

    @app.post("/refresh", tags=["Account"])
    async def refresh(request: Request):
        """Re-send the subscribe, price and history requests."""
        service: AccountService = request.app.state.service
        failures = await service.request_update()
        return {
            "connection": service.state.value,
            "failed": [str(f.request.action) for f in failures],
        }

    # ============================================
    # WebSocket Streams
    # ============================================

    async def stream_subscription(websocket: WebSocket, subscription: Subscription, name: str, to_json) -> None:
        """
        Forward a subscription to a WebSocket until the client disconnects.

        A forwarding task sends items while this coroutine reads from the
        client, which is how a disconnect is noticed even when nothing is
        being published.
        """
        async def forward():
            async for item in subscription:
                await websocket.send_json(to_json(item))

        forward_task = asyncio.create_task(forward(), name=f"ws_{name}")
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info(f"WS disconnected: {name}")
        except Exception as e:
            logger.error(f"WS error {name}: {e}")
        finally:
            forward_task.cancel()
            await asyncio.gather(forward_task, return_exceptions=True)
            await subscription.close()
            logger.info(f"WS ended: {name}")

    @app.websocket("/ws/messages")
    async def websocket_messages(
        websocket: WebSocket,
        kinds: str = Query(default="", description="Comma-separated message kinds (empty = all)")
    ):
        """
        Stream classified account messages.

        Example:
            ws://localhost:8000/ws/messages?kinds=price,subscribe
        """
        requested = [k.strip().lower() for k in kinds.split(",") if k.strip()]
        unknown = [k for k in requested if k not in MESSAGE_TYPES]
        await websocket.accept()
        if unknown:
            await websocket.close(code=1008, reason=f"Unknown message kind(s): {', '.join(unknown)}")
            return

        service: AccountService = websocket.app.state.service
        kind_filter = tuple(MESSAGE_TYPES[k] for k in requested) or None
        logger.info(f"WS connected: messages ({', '.join(requested) or 'all'})")

        subscription = await service.publisher.subscribe(kind_filter)
        await stream_subscription(websocket, subscription, "messages", lambda m: m.to_event())

    @app.websocket("/ws/lifecycle")
    async def websocket_lifecycle(websocket: WebSocket):
        """Stream connection events (opened, closed, failed)."""
        await websocket.accept()
        service: AccountService = websocket.app.state.service
        logger.info("WS connected: lifecycle")

        subscription = await service.lifecycle.subscribe()
        await stream_subscription(
            websocket,
            subscription,
            "lifecycle",
            lambda event: {"type": type(event).__name__, **event.model_dump()},
        )

    return app


app = create_app()
