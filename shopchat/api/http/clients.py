"""Roster of registered WebSocket connections."""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from shopchat.dependencies import require_authenticated

router = APIRouter()


class ClientsResponse(BaseModel):
    clients: list[str]


@router.get(
    "/ws/messages/clients",
    response_model=ClientsResponse,
    summary="Connection ids currently registered on the messages channel",
    tags=["messages-ws"],
    dependencies=[Depends(require_authenticated)],
)
async def connected_clients(request: Request) -> ClientsResponse:
    registry = request.app.state.connection_registry
    return ClientsResponse(clients=registry.list_connection_ids())
