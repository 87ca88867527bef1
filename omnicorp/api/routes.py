from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from omnicorp.actions import dispatch_action
from omnicorp.api.deps import get_runtime, get_session, get_ws_runtime
from omnicorp.api.models import (
    ActionRequest,
    ActionResponse,
    GameView,
    NextEventResponse,
    SaveMetadata,
    SaveResponse,
)
from omnicorp.core.game_view import narrative_event_view
from omnicorp.game_session import GameSession
from omnicorp.runtime import GameRuntime

router = APIRouter()


@router.websocket("/ws/game")
async def game_updates_ws(websocket: WebSocket) -> None:
    runtime = get_ws_runtime(websocket)
    hub = runtime.hub
    await hub.connect(websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(websocket)
    except Exception:
        await hub.disconnect(websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/game", response_model=GameView)
async def get_game_route(session: GameSession = Depends(get_session)) -> GameView:
    return session.view()


@router.post("/game/click", response_model=ActionResponse)
async def click_route(session: GameSession = Depends(get_session)) -> ActionResponse:
    ok = session.click()
    return ActionResponse(ok=ok, state=session.view())


@router.post("/game/generators/{generator_id}/purchase", response_model=ActionResponse)
async def purchase_generator_route(generator_id: str, session: GameSession = Depends(get_session)) -> ActionResponse:
    ok = session.purchase_generator(generator_id)
    return ActionResponse(ok=ok, state=session.view())


@router.post("/game/upgrades/{upgrade_id}/purchase", response_model=ActionResponse)
async def purchase_upgrade_route(upgrade_id: str, session: GameSession = Depends(get_session)) -> ActionResponse:
    ok = session.purchase_upgrade(upgrade_id)
    return ActionResponse(ok=ok, state=session.view())


@router.post("/game/prestige", response_model=ActionResponse)
async def prestige_route(session: GameSession = Depends(get_session)) -> ActionResponse:
    ok = session.perform_prestige()
    return ActionResponse(ok=ok, state=session.view())


@router.post("/game/task/complete", response_model=ActionResponse)
async def complete_task_route(session: GameSession = Depends(get_session)) -> ActionResponse:
    ok = session.complete_task()
    return ActionResponse(ok=ok, state=session.view())


@router.post("/game/actions", response_model=ActionResponse)
async def game_action_route(payload: ActionRequest, session: GameSession = Depends(get_session)) -> ActionResponse:
    try:
        result = dispatch_action(session=session, action=payload.action, target_id=payload.target_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return ActionResponse(ok=result.ok, state=result.state)


@router.get("/game/narrative/next", response_model=NextEventResponse)
async def next_narrative_event_route(session: GameSession = Depends(get_session)) -> NextEventResponse:
    event = session.next_pending_event()
    if event is None:
        return NextEventResponse(event=None)
    return NextEventResponse(event=narrative_event_view(event))


@router.post("/game/start", response_model=GameView)
async def start_route(runtime: GameRuntime = Depends(get_runtime)) -> GameView:
    runtime.clock.start()
    return runtime.session.view()


@router.post("/game/stop", response_model=GameView)
async def stop_route(runtime: GameRuntime = Depends(get_runtime)) -> GameView:
    runtime.clock.stop()
    return runtime.session.view()


@router.post("/game/save", response_model=SaveResponse)
async def save_route(runtime: GameRuntime = Depends(get_runtime)) -> SaveResponse:
    return SaveResponse(ok=runtime.clock.save_now())


@router.delete("/game/save", response_model=SaveResponse)
async def clear_save_route(runtime: GameRuntime = Depends(get_runtime)) -> SaveResponse:
    return SaveResponse(ok=runtime.store.clear())


@router.get("/game/save/metadata", response_model=SaveMetadata)
async def save_metadata_route(runtime: GameRuntime = Depends(get_runtime)) -> SaveMetadata:
    meta = runtime.store.metadata()
    if meta is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No saved game")
    return meta
