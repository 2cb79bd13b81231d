from fastapi import Request

from sprig.config import Settings
from sprig.core.alerts import Alerts
from sprig.core.session import SessionManager
from sprig.database import Database


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session(request: Request) -> SessionManager:
    return request.state.session


def get_alerts(request: Request) -> Alerts:
    return request.state.alerts
