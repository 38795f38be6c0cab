# stop_board/board_engine/interface_layer/api_server.py
import uvicorn
import logging
from dataclasses import asdict
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, ConfigDict, ValidationError
from typing import Any, Dict, Optional

from stop_board.board_engine.core import BoardEngine, BoardSetupError
from stop_board.board_engine.events import Actor
from stop_board.board_engine.interface_layer.services import SeedData, SeedDataService
from stop_board.command import UnknownCommandError, build_command
from stop_board.config import configure_logging, load_config
from stop_board.view_model import project_board

config = load_config()
configure_logging(config)
logger = logging.getLogger(__name__)

# --- FastAPI App and in-process board registry ---
app = FastAPI(title="Stop Board API")
board_store: Dict[str, BoardEngine] = {}

# --- API Models ---
class CreateBoardRequest(BaseModel):
    seed: Optional[Dict[str, Any]] = None

class DragStartRequest(BaseModel):
    entity: Any

class DragEndRequest(BaseModel):
    source: Any
    target: Any = None

class CommandRequest(BaseModel):
    """Defines the structure for an incoming command request."""
    command_type: str = Field(..., alias="commandType", description="The type of the command to execute.")
    payload: Dict[str, Any] = Field(default_factory=dict, description="The data required to execute the command.")

    model_config = ConfigDict(populate_by_name=True)


def _get_board_or_404(board_id: str) -> BoardEngine:
    engine = board_store.get(board_id)
    if engine is None:
        raise HTTPException(status_code=404, detail="BOARD_NOT_FOUND")
    return engine


def _drag_response(engine: BoardEngine) -> dict:
    outcome = engine.last_outcome
    return {
        "outcome": outcome.model_dump(mode="json") if outcome else None,
        "snapshot": engine.build_snapshot(),
    }

# --- Endpoints ---

@app.post("/board/create", tags=["Board"])
def create_board(request: Optional[CreateBoardRequest] = None):
    engine = BoardEngine.create(config=config)
    try:
        if request and request.seed is not None:
            seed = SeedData.from_dict(request.seed)
        else:
            seed = SeedDataService(config.seed_path).fetch()
        engine.initialize(seed.stops, seed.groups)
    except (ValidationError, BoardSetupError) as e:
        logger.error(f"Board setup failed: {e}")
        raise HTTPException(status_code=400, detail="INVALID_SEED")
    board_store[engine.board_id] = engine
    logger.info(f"Board created: {engine.board_id}")
    return {"board_id": engine.board_id, "snapshot": engine.build_snapshot()}

@app.get("/board/{board_id}", tags=["Board"])
def get_board(board_id: str):
    return {"snapshot": _get_board_or_404(board_id).build_snapshot()}

@app.get("/board/{board_id}/view", tags=["ViewModel"])
def get_board_view(board_id: str):
    """Retrieves the rendered projection of the board."""
    engine = _get_board_or_404(board_id)
    return asdict(project_board(engine.state, engine.active_drag))

@app.post("/board/{board_id}/drag/start", tags=["Drag"])
def drag_start(board_id: str, request: DragStartRequest):
    engine = _get_board_or_404(board_id)
    engine.on_drag_start(request.entity, actor=Actor.POINTER)
    return {"active": engine.session.is_active, "snapshot": engine.build_snapshot()}

@app.post("/board/{board_id}/drag/end", tags=["Drag"])
def drag_end(board_id: str, request: DragEndRequest):
    engine = _get_board_or_404(board_id)
    engine.on_drag_end(request.source, request.target, actor=Actor.POINTER)
    return _drag_response(engine)

@app.post("/board/{board_id}/drag/cancel", tags=["Drag"])
def drag_cancel(board_id: str):
    engine = _get_board_or_404(board_id)
    engine.cancel_drag(actor=Actor.POINTER)
    return _drag_response(engine)

@app.post("/board/{board_id}/command", tags=["Command"])
def execute_command_endpoint(board_id: str, request: CommandRequest):
    """The endpoint for presentation commands (expand, collapse, remove, filter, setup)."""
    engine = _get_board_or_404(board_id)
    logger.info(f"Received command: {request.command_type} with payload {request.payload}")

    try:
        command = build_command(request.command_type, request.payload)
    except UnknownCommandError:
        raise HTTPException(status_code=400, detail=f"Unknown command type: '{request.command_type}'")
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid payload for '{request.command_type}': {e}")

    try:
        engine.execute_command(command)
    except (ValidationError, BoardSetupError, TypeError) as e:
        logger.error(f"Command execution failed due to bad request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "snapshot": engine.build_snapshot()}

if __name__ == "__main__":
    logger.info("Starting Stop Board API Server...")
    # Run from the project root: `python -m stop_board.board_engine.interface_layer.api_server`
    uvicorn.run("stop_board.board_engine.interface_layer.api_server:app", host="0.0.0.0", port=8000, reload=True)
