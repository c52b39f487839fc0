# agentstack/heroes/routes.py
from __future__ import annotations

from agentstack.core.context import ServiceContext
from agentstack.core.routing import Access, ResourceGrant, Route, RouteTable
from agentstack.heroes.handlers import hero_handlers

# Capability each handler needs on the hero table, exposed as TABLE_NAME.
TABLE_ACCESS: dict[str, Access] = {
    "add_hero": Access.READ_WRITE,
    "add_rescue": Access.READ_WRITE,
    "list_hero_rescues": Access.READ,
    "search_heroes": Access.READ,
}


def hero_routes(context: ServiceContext) -> RouteTable:
    table = RouteTable()
    for name, bound in hero_handlers(context).items():
        table.add(
            Route.from_handler(
                bound,
                resources={
                    "TABLE_NAME": ResourceGrant(
                        resource=context.table_name or "", access=TABLE_ACCESS[name]
                    )
                },
            )
        )
    return table
