from fastapi import APIRouter, Request, HTTPException, Form
from fastapi.responses import JSONResponse
from typing import List, Dict
from diagtree.models.tree import SAFETY_LABELS, Step, StepKind
from diagtree.services.traversal import InvalidTransition, TreeWalker, UnknownCurrentStep

router = APIRouter()

SESSION_KEY = "diagnose_session_id"

def _choices(step: Step) -> List[Dict[str, str]]:
    if step.kind == StepKind.QUESTION:
        return [{"label": option.label, "target_id": option.target_id} for option in step.options or []]
    if step.kind == StepKind.CHECK and step.target_id:
        return [{"label": "Continue", "target_id": step.target_id}]
    return []

def _step_view(request: Request, session_id: str, walker: TreeWalker) -> Dict:
    session = request.app.state.walk_service.get_session(session_id)
    step = walker.current()
    return {
        "session_id": session_id,
        "tree_id": session.tree_id,
        "step": step.to_wire(),
        "safety_label": SAFETY_LABELS.get(step.safety_level),
        "step_number": walker.step_number,
        "can_go_back": walker.can_go_back,
        "is_complete": walker.is_complete,
        "choices": _choices(step),
    }

def _restart_required(e: UnknownCurrentStep) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(e), "restart_required": True})

def _respond(request: Request, session_id: str, walker: TreeWalker):
    try:
        return _step_view(request, session_id, walker)
    except UnknownCurrentStep as e:
        return _restart_required(e)

def _active_session_id(request: Request) -> str:
    session_id = request.session.get(SESSION_KEY)
    if not session_id:
        raise HTTPException(400, "No active session")
    return session_id

@router.get("/trees")
async def list_trees(request: Request):
    tree_store = request.app.state.tree_store
    return {"trees": [summary.model_dump() for summary in tree_store.list_trees()]}

@router.get("/trees/{tree_id}")
async def get_tree(tree_id: str, request: Request):
    tree_store = request.app.state.tree_store
    document = tree_store.get_tree(tree_id)
    if document is None:
        raise HTTPException(404, "Tree not found")

    return {
        "tree": {
            "id": tree_id,
            "title": document.title,
            "description": document.description,
            "category": document.category,
            "difficulty": document.difficulty,
            "motorcycle": document.motorcycle_name,
            "node_count": document.node_count,
        }
    }

@router.post("/start")
async def start_session(request: Request, tree_id: str = Form(...)):
    walk_service = request.app.state.walk_service
    try:
        session_id = walk_service.create_session(tree_id)
    except ValueError as e:
        raise HTTPException(404, str(e))

    # Replace any walk already in progress for this browser session
    previous = request.session.get(SESSION_KEY)
    if previous:
        walk_service.end_session(previous)
    request.session[SESSION_KEY] = session_id

    return _respond(request, session_id, walk_service.get_walker(session_id))

@router.get("/session")
async def get_session(request: Request):
    walk_service = request.app.state.walk_service
    session_id = request.session.get(SESSION_KEY)
    if not session_id or walk_service.get_session(session_id) is None:
        return {"session": None}

    try:
        walker = walk_service.get_walker(session_id)
    except ValueError as e:
        raise HTTPException(404, str(e))
    return _respond(request, session_id, walker)

@router.delete("/session")
async def end_session(request: Request):
    walk_service = request.app.state.walk_service
    session_id = request.session.pop(SESSION_KEY, None)
    if session_id:
        walk_service.end_session(session_id)
    return {"success": True}

@router.post("/choose")
async def choose(request: Request, target_id: str = Form(...)):
    walk_service = request.app.state.walk_service
    session_id = _active_session_id(request)

    try:
        walker = walk_service.choose(session_id, target_id)
    except InvalidTransition as e:
        # State is unchanged; offer the same step again
        response = _respond(request, session_id, walk_service.get_walker(session_id))
        if isinstance(response, JSONResponse):
            return response
        return JSONResponse(status_code=409, content={"detail": str(e), **response})
    except UnknownCurrentStep as e:
        return _restart_required(e)
    except ValueError as e:
        raise HTTPException(404, str(e))

    return _respond(request, session_id, walker)

@router.post("/back")
async def go_back(request: Request):
    walk_service = request.app.state.walk_service
    session_id = _active_session_id(request)
    try:
        walker = walk_service.back(session_id)
    except UnknownCurrentStep as e:
        return _restart_required(e)
    except ValueError as e:
        raise HTTPException(404, str(e))
    return _respond(request, session_id, walker)

@router.post("/restart")
async def restart(request: Request):
    walk_service = request.app.state.walk_service
    session_id = _active_session_id(request)
    try:
        walker = walk_service.restart(session_id)
    except ValueError as e:
        raise HTTPException(404, str(e))
    return _respond(request, session_id, walker)
