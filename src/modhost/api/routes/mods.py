"""Mod list / reload / edit routes + read-only catalogue views."""
from __future__ import annotations

import threading
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from modcore.config import get_config
from modcore.modules import (
    LoadedPackage,
    ModLoader,
    build_content_types,
    build_mod_loader,
)

router = APIRouter()
_build_lock = threading.Lock()


class EnableRequest(BaseModel):
    enabled: bool
    reload: Optional[bool] = None


class MoveRequest(BaseModel):
    index: int
    reload: Optional[bool] = None


def get_loader(request: Request) -> ModLoader:
    """Return the app's loader, building + priming it from config once."""
    state = request.app.state
    loader = state.loader
    if loader is not None:
        return loader
    with _build_lock:
        if state.loader is None:
            cfg = get_config()
            if state.content_types is None:
                state.content_types = build_content_types(cfg)
            loader = build_mod_loader(
                cfg,
                catalogue=state.catalogue,
                content_types=state.content_types,
            )
            loader.reload()
            state.loader = loader
    return state.loader


def _package_payload(loader: ModLoader, pkg: LoadedPackage) -> dict:
    m = pkg.manifest
    return {
        "id": m.id,
        "name": m.display_name,
        "version": m.version,
        "author": m.author,
        "description": m.description,
        "order": pkg.order,
        "enabled": loader.is_enabled(m.id),
        "requires": list(m.requires),
        "load_before": list(m.load_before),
        "load_after": list(m.load_after),
    }


def _mods_payload(loader: ModLoader) -> dict:
    saved = loader.state.ordered_ids()
    return {
        "mods": [_package_payload(loader, p) for p in loader.active_packages],
        "saved_order": saved,
        "violations": [f"{a}->{b}" for a, b in loader.check_order()],
    }


@router.get("/mods")
def list_mods(request: Request):  # noqa: D401
    return _mods_payload(get_loader(request))


@router.get("/mods/errors")
def last_errors(request: Request):  # noqa: D401
    loader = get_loader(request)
    return {"errors": [e.to_dict() for e in loader.last_errors]}


@router.post("/mods/reload")
def reload_mods(request: Request, hot: bool = False):  # noqa: D401
    loader = get_loader(request)
    result = loader.hot_reload() if hot else loader.reload()
    return {
        "ok": result.ok,
        "errors": [e.to_dict() for e in result.errors],
        "imported": list(result.imported),
        **_mods_payload(loader),
    }


@router.post("/mods/{mod_id}/enable")
def enable_mod(mod_id: str, body: EnableRequest, request: Request):
    loader = get_loader(request)
    if not loader.enable(mod_id, body.enabled, reload=body.reload):
        raise HTTPException(status_code=404, detail=f"unknown mod {mod_id}")
    return {"ok": True, "id": mod_id, "enabled": loader.is_enabled(mod_id)}


@router.post("/mods/{mod_id}/move")
def move_mod(mod_id: str, body: MoveRequest, request: Request):
    loader = get_loader(request)
    if not loader.move(mod_id, body.index, reload=body.reload):
        raise HTTPException(
            status_code=404,
            detail=f"unknown mod {mod_id} or index {body.index} out of range",
        )
    return {"ok": True, **_mods_payload(loader)}


@router.get("/catalogue")
def catalogue_summary(request: Request):  # noqa: D401
    get_loader(request)
    catalogue = request.app.state.catalogue
    types = request.app.state.content_types
    return {
        "types": [
            {
                "folder": folder,
                "type": def_type.__name__,
                "count": catalogue.count(def_type),
            }
            for folder, def_type in types.items()
        ],
        "total": catalogue.count(),
    }


@router.get("/catalogue/{folder}")
def catalogue_folder(folder: str, request: Request):  # noqa: D401
    get_loader(request)
    def_type = request.app.state.content_types.get(folder)
    if def_type is None:
        raise HTTPException(
            status_code=404, detail=f"unknown content folder {folder}"
        )
    entries = request.app.state.catalogue.entries(def_type)
    return {
        "folder": folder,
        "entries": [
            {
                "id": e.definition.id,
                "mod_id": e.mod_id,
                "source_file": e.source_file,
                "data": e.definition.model_dump(exclude={"source_file"}),
            }
            for e in sorted(entries, key=lambda e: e.definition.id.casefold())
        ],
    }
