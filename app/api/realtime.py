from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter()


@router.websocket("/ws")
async def inventory_updates(websocket: WebSocket):
    """Push channel: clients receive INVENTORY_UPDATED hints and re-fetch."""
    manager = websocket.app.state.publisher
    await manager.connect(websocket)
    try:
        while True:
            # Clients do not send anything meaningful; reading detects disconnects
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)
