from fastapi import APIRouter

from tierboard.errors import ErrorResponse
from tierboard.routes import admin, chat, leaderboard, players

api_router = APIRouter(
    prefix="/api",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
api_router.include_router(leaderboard.router)
api_router.include_router(players.router)
api_router.include_router(admin.router, responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}})
api_router.include_router(chat.router)
