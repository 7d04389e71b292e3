"""
Service registry shared by the API blueprints.

The app factory builds every service once and stores the registry under
``app.extensions["bistro"]``; views fetch it with :func:`get_services`.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from bistro_shared.config import AppConfig
from bistro_shared.db import Database
from bistro_shared.realtime import Notifier
from bistro_shared.services.auth_service import AuthService
from bistro_shared.services.image_service import ImageStore
from bistro_shared.services.menu_service import MenuService
from bistro_shared.services.order_service import OrderService
from bistro_shared.services.report_service import ReportService
from bistro_shared.services.table_service import TableService
from bistro_shared.services.user_service import UserService

EXTENSION_KEY = "bistro"


@dataclass
class Services:
    config: AppConfig
    db: Database
    notifier: Notifier
    images: ImageStore
    auth: AuthService
    menu: MenuService
    orders: OrderService
    tables: TableService
    users: UserService
    reports: ReportService


def init_services(app: Flask, services: Services) -> None:
    app.extensions[EXTENSION_KEY] = services


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
