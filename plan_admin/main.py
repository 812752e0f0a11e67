# plan_admin/main.py
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import LOG_LEVEL
from .database import DocumentStore, create_store
from .routers import auth, editor, global_workout, migration, plan, user

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def create_app(store: Optional[DocumentStore] = None) -> FastAPI:
    app = FastAPI(title="Workout Plan Admin")
    app.state.store = store or create_store()

    # Dashboard frontend is served from another origin during development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup():
        await app.state.store.connect()

    @app.on_event("shutdown")
    async def shutdown():
        await app.state.store.disconnect()

    app.include_router(auth.router)
    app.include_router(user.router)
    # Editor routes live under /plans/editor and must win over /plans/{plan_id}
    app.include_router(editor.router)
    app.include_router(plan.router)
    app.include_router(global_workout.router)
    app.include_router(migration.router)
    return app


app = create_app()
