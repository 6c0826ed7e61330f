from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from src.app.auth import auth_banner_message
from src.app.routes.expense_types import router as expense_types_router
from src.app.routes.expenses import router as expenses_router
from src.db.init_db import init_db
from src.db.session import get_database_url
from src.tracker.expenses.config import load_tracker_config
from src.tracker.expenses.errors import NotFoundError
from src.utils.money import format_money


load_dotenv()

log = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.filters["money"] = format_money
templates.env.globals["currency_symbol"] = "$"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    cfg, cfg_path = load_tracker_config()
    configure_logging(cfg.log_level)
    templates.env.globals["currency_symbol"] = cfg.currency_symbol

    app = FastAPI(title="Expense Tracker", version="0.1.0")

    static_dir = BASE_DIR / "static"
    static_dir.mkdir(parents=True, exist_ok=True)
    css_path = static_dir / "app.css"
    try:
        templates.env.globals["static_version"] = str(int(css_path.stat().st_mtime))
    except OSError:
        templates.env.globals["static_version"] = "0"
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    @app.on_event("startup")
    def _startup() -> None:
        if get_database_url().startswith("sqlite:///./data/"):
            Path("data").mkdir(parents=True, exist_ok=True)
        init_db(cfg)
        log.info("Expense tracker ready (config: %s)", cfg_path or "built-in defaults")

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        log.info("Not found: %s", exc)
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {
                "auth_banner": auth_banner_message(),
                "entity": exc.entity,
                "entity_id": exc.entity_id,
            },
            status_code=404,
        )

    app.include_router(expenses_router)
    app.include_router(expense_types_router)
    return app


app = create_app()
