from fastapi import FastAPI
from controller.health_controller import health_router
from controller.question_controller import question_router
from controller.slack_controller import slack_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(health_router)
    app.include_router(question_router)
    app.include_router(slack_router)
