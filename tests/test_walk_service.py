import json
import pytest
from diagtree.core import config
from diagtree.services.traversal import InvalidTransition, UnknownCurrentStep
from diagtree.services.tree_store import TreeStore
from diagtree.services.walk_service import WalkSessionService

@pytest.fixture
def store(trees_dir):
    return TreeStore(str(trees_dir), validate_on_load=True)

@pytest.fixture
def service(store):
    return WalkSessionService(store)

def test_create_session(service):
    session_id = service.create_session("engine")

    session = service.get_session(session_id)
    assert session.tree_id == "engine"
    assert session.history == ["start"]
    assert service.current_step(session_id).id == "start"

def test_create_session_unknown_tree(service):
    with pytest.raises(ValueError, match="Tree not found"):
        service.create_session("nope")

def test_choose_back_restart(service):
    session_id = service.create_session("engine")

    walker = service.choose(session_id, "B")
    assert walker.current().id == "B"
    service.choose(session_id, "C")
    assert service.get_session(session_id).history == ["start", "B", "C"]

    service.back(session_id)
    assert service.current_step(session_id).id == "B"

    service.restart(session_id)
    assert service.get_session(session_id).history == ["start"]

def test_invalid_choice_is_logged_and_rejected(service, caplog):
    session_id = service.create_session("engine")
    service.choose(session_id, "B")

    with pytest.raises(InvalidTransition):
        service.choose(session_id, "X")

    assert service.get_session(session_id).history == ["start", "B"]
    assert "Cannot move from step 'B' to 'X'" in caplog.text

def test_sessions_are_independent(service):
    first = service.create_session("engine")
    second = service.create_session("engine")

    service.choose(first, "A")
    assert service.current_step(second).id == "start"

def test_session_not_found(service):
    with pytest.raises(ValueError, match="Session not found"):
        service.get_walker("invalid")
    with pytest.raises(ValueError, match="Session not found"):
        service.choose("invalid", "A")
    with pytest.raises(ValueError, match="Session not found"):
        service.back("invalid")
    with pytest.raises(ValueError, match="Session not found"):
        service.restart("invalid")

def test_end_session(service):
    session_id = service.create_session("engine")
    assert service.end_session(session_id)
    assert service.get_session(session_id) is None
    assert not service.end_session(session_id)

def test_oldest_session_evicted(store):
    service = WalkSessionService(store, max_sessions=2)
    first = service.create_session("engine")
    second = service.create_session("engine")
    third = service.create_session("engine")

    assert service.get_session(first) is None
    assert service.get_session(second) is not None
    assert service.get_session(third) is not None

def test_tree_swapped_mid_session(service, store, trees_dir, make_document):
    session_id = service.create_session("engine")
    service.choose(session_id, "B")

    replacement = [{"id": "start", "type": "solution", "text": "Rewritten", "safety": "green", "action": "None"}]
    (trees_dir / "engine.json").write_text(json.dumps(make_document(replacement)), encoding="utf-8")
    store.reload()

    with pytest.raises(UnknownCurrentStep):
        service.current_step(session_id)

    service.restart(session_id)
    assert service.current_step(session_id).text == "Rewritten"

def test_back_on_swapped_tree_requires_restart(service, store, trees_dir, make_document):
    session_id = service.create_session("engine")
    service.choose(session_id, "B")

    replacement = [{"id": "start", "type": "solution", "text": "Rewritten", "safety": "green", "action": "None"}]
    (trees_dir / "engine.json").write_text(json.dumps(make_document(replacement)), encoding="utf-8")
    store.reload()

    with pytest.raises(UnknownCurrentStep):
        service.back(session_id)
    assert service.get_session(session_id).history == ["start", "B"]

def test_removed_tree_ends_session(service, store, trees_dir, caplog):
    session_id = service.create_session("engine")
    (trees_dir / "engine.json").unlink()
    store.reload()

    with pytest.raises(ValueError, match="Tree not found"):
        service.restart(session_id)
    assert service.get_session(session_id) is None
    assert "tree engine is gone" in caplog.text

def test_max_sessions_defaults_to_config(store, monkeypatch):
    monkeypatch.setattr(config, "MAX_SESSIONS", 5)
    assert WalkSessionService(store).max_sessions == 5
    assert WalkSessionService(store, max_sessions=0).max_sessions == 0
