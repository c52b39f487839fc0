# agentstack/heroes/endpoints.py
"""
Hero service catalog, shared by :mod:`agentstack.heroes.client` and
:mod:`agentstack.heroes.routes`.
"""
from __future__ import annotations

from agentstack.contracts.endpoint import define_endpoint
from agentstack.core.endpoints.registry import EndpointRegistry
from agentstack.heroes.schemas import (
    AddHeroRequest,
    AddHeroResponse,
    AddRescueRequest,
    AddRescueResponse,
    ListHeroRescuesResponse,
    SearchHeroesRequest,
    SearchHeroesResponse,
)

endpoints = EndpointRegistry(
    {
        "list_hero_rescues": define_endpoint(
            "/heroes/{hero}/rescues",
            "GET",
            response=ListHeroRescuesResponse,
            description=(
                "Get a list of rescues performed by a specific hero. "
                "The hero is specified in the path parameter."
            ),
        ),
        "add_hero": define_endpoint(
            "/heroes",
            "POST",
            request=AddHeroRequest,
            response=AddHeroResponse,
            description=(
                "Add a new hero to the system. "
                "The hero details are provided in the request body."
            ),
        ),
        "add_rescue": define_endpoint(
            "/heroes/{hero}/rescues",
            "POST",
            request=AddRescueRequest,
            response=AddRescueResponse,
            description=(
                "Add a rescue performed by a specific hero. The hero is specified "
                "in the path parameter, and the rescue details are provided in the "
                "request body."
            ),
        ),
        "search_heroes": define_endpoint(
            "/heroes/search",
            "POST",
            request=SearchHeroesRequest,
            response=SearchHeroesResponse,
            description=(
                "Search for heroes based on various criteria. "
                "The search parameters are provided in the request body."
            ),
        ),
    }
)
