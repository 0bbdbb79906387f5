"""Preset listing endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from swarmgrid.api.schemas import PresetInfo
from swarmgrid.experiment.presets import PRESETS, get_preset

router = APIRouter()


@router.get("/presets", response_model=list[PresetInfo])
def list_presets():
    return [
        {"name": name, "settings": factory().to_dict()}
        for name, factory in PRESETS.items()
    ]


@router.get("/presets/{name}", response_model=PresetInfo)
def get_preset_detail(name: str):
    try:
        settings = get_preset(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Preset '{name}' not found")
    return {"name": name, "settings": settings.to_dict()}
