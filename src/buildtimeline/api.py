from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from .errors import AuthorizationError, TriggerError, TriggerNotFoundError, UnresolvedJobError
from .view import TimelineView

# -------------------- Schemas --------------------

class ManualTriggerRequest(BaseModel):
    project: str
    upstream: str
    build_id: str
    user: str | None = None

class RebuildRequest(BaseModel):
    project: str
    build_id: str
    user: str | None = None

class PipelinesResponse(BaseModel):
    name: str
    error: str | None
    last_updated: datetime | None
    update_interval: int
    allow_manual_triggers: bool
    allow_rebuild: bool
    allow_pipeline_start: bool
    show_total_build_time: bool
    components: list[dict[str, Any]] = Field(default_factory=list)


def component_to_dict(component) -> dict[str, Any]:
    data = asdict(component)
    # derived values the frontend needs but that are not fields
    for p_data, pipeline in zip(data["pipelines"], component.pipelines):
        p_data["total_build_time"] = pipeline.total_build_time
    return jsonable_encoder(data)


# -------------------- App --------------------

def create_app(view: TimelineView) -> FastAPI:
    app = FastAPI(title=f"Build timeline: {view.name}")

    @app.get("/api/pipelines", response_model=PipelinesResponse)
    def get_pipelines(page: int = 1, fullscreen: bool = False):
        components = view.pipelines(page=page, full_screen=fullscreen)
        s = view.settings
        return PipelinesResponse(
            name=view.name,
            error=view.error,
            last_updated=view.last_updated,
            update_interval=s.update_interval,
            allow_manual_triggers=s.allow_manual_triggers,
            allow_rebuild=s.allow_rebuild,
            allow_pipeline_start=s.allow_pipeline_start,
            show_total_build_time=s.show_total_build_time,
            components=[component_to_dict(c) for c in components],
        )

    @app.get("/api/items")
    def get_items():
        return {"items": sorted(view.items())}

    @app.post("/api/trigger/manual")
    def post_manual(req: ManualTriggerRequest):
        try:
            view.trigger_manual(req.project, req.upstream, req.build_id, user=req.user)
        except AuthorizationError as e:
            raise HTTPException(status_code=403, detail=str(e))
        except (UnresolvedJobError, TriggerNotFoundError) as e:
            raise HTTPException(status_code=404, detail=str(e))
        except TriggerError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return {"ok": True}

    @app.post("/api/trigger/rebuild")
    def post_rebuild(req: RebuildRequest):
        if not view.settings.allow_rebuild:
            raise HTTPException(status_code=403, detail="Rebuild is not allowed in this view")
        try:
            view.trigger_rebuild(req.project, req.build_id, user=req.user)
        except AuthorizationError as e:
            raise HTTPException(status_code=403, detail=str(e))
        except UnresolvedJobError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except TriggerError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return {"ok": True}

    return app
