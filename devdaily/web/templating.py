"""Jinja2 template environment shared by the storefront, admin and HTMX views."""

from pathlib import Path

from fastapi.templating import Jinja2Templates

from devdaily.domain.entities import format_rupiah
from devdaily.infrastructure.config import settings

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["rupiah"] = format_rupiah
templates.env.globals["app_name"] = settings.app_name
