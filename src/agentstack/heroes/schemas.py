# agentstack/heroes/schemas.py
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class Hero(BaseModel):
    name: str
    alias: str  # e.g. "Clark Kent"
    powers: list[str]
    active: bool
    rescues: int | None = Field(default=None, ge=0)


class Rescue(BaseModel):
    hero: str
    location: str
    date: str | None = None  # ISO date, e.g. "2023-10-01"
    description: str | None = None
    details: str | None = None


class AddHeroRequest(BaseModel):
    name: str
    alias: str
    powers: list[str]
    active: bool


class AddHeroResponse(BaseModel):
    hero: Hero
    success: bool | None = None
    message: str | None = None
    error: str | None = None


AddRescueRequest = Rescue


class AddRescueResponse(BaseModel):
    rescue: Rescue
    hero: Hero | None = None
    success: bool | None = None
    message: str | None = None
    error: str | None = None


class ListHeroRescuesResponse(BaseModel):
    rescues: list[Rescue]


class SearchHeroesRequest(BaseModel):
    city: str | None = None
    status: Literal["active", "retired"] | None = None


class SearchHeroesResponse(BaseModel):
    heroes: list[Hero]
