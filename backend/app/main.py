"""ASGI entrypoint: the REST app, Socket.IO namespaces and the chat dispatcher."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import chat, discovery, ops, profile, social
from app.api.errors import install_error_handlers
from app.domain.chat import sockets as chat_sockets
from app.domain.chat.dispatcher import MessageEventDispatcher
from app.domain.chat.service import get_chat_service
from app.domain.social import sockets as social_sockets
from app.infra import postgres
from app.infra.redis import close_redis
from app.obs import init as obs_init
from app.settings import settings

DEV_ORIGINS = [
	"http://localhost:3000",
	"http://127.0.0.1:3000",
	"http://localhost:5173",
	"http://127.0.0.1:5173",
]


def _allowed_origins() -> list[str]:
	origins = [o for o in settings.cors_allow_origins if o != "*"]
	# Credentials are allowed, so a bare wildcard is never echoed back.
	if not origins and settings.is_dev():
		return list(DEV_ORIGINS)
	return origins


async def _stop_dispatcher(dispatcher: MessageEventDispatcher, task: asyncio.Task) -> None:
	dispatcher.stop()
	task.cancel()
	await asyncio.gather(task, return_exceptions=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	app.state.chat_dispatcher = None
	task = None
	if settings.chat_dispatcher_enabled:
		app.state.chat_dispatcher = MessageEventDispatcher(get_chat_service())
		task = asyncio.create_task(app.state.chat_dispatcher.run_forever(), name="chat-message-dispatcher")
	try:
		yield
	finally:
		if task is not None:
			await _stop_dispatcher(app.state.chat_dispatcher, task)
		await postgres.close_pool()
		await close_redis()


def create_app() -> FastAPI:
	application = FastAPI(title="Campus Connect API", lifespan=lifespan)
	install_error_handlers(application)
	application.add_middleware(
		CORSMiddleware,
		allow_origins=_allowed_origins(),
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	obs_init(application)
	for module in (profile, discovery, social, chat, ops):
		application.include_router(module.router)
	return application


def create_socket_server() -> socketio.AsyncServer:
	server = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=_allowed_origins())
	social_namespace = social_sockets.SocialNamespace()
	chat_namespace = chat_sockets.ChatNamespace(membership=get_chat_service().is_member)
	server.register_namespace(social_namespace)
	server.register_namespace(chat_namespace)
	social_sockets.set_namespace(social_namespace)
	chat_sockets.set_namespace(chat_namespace)
	return server


app = create_app()
sio = create_socket_server()
socket_app = socketio.ASGIApp(sio, other_asgi_app=app)
