from collections import deque
from typing import Dict, List, Optional, Set
from diagtree.models.defects import (
    DanglingReference,
    Defect,
    DuplicateId,
    InvalidFieldValue,
    MissingRequiredField,
    MissingStartNode,
)
from diagtree.models.tree import (
    START_STEP_ID,
    DecisionTree,
    Difficulty,
    SafetyLevel,
    Step,
    StepKind,
    TreeDocument,
)

STEP_KINDS = {kind.value for kind in StepKind}
SAFETY_LEVELS = {level.value for level in SafetyLevel}
DIFFICULTIES = {difficulty.value for difficulty in Difficulty}

DOCUMENT_REQUIRED_FIELDS = ("title", "category", "difficulty")

def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()

def validate_tree(tree: DecisionTree) -> List[Defect]:
    """Returns every structural defect in the tree. An empty list means valid."""
    defects: List[Defect] = []

    counts: Dict[str, int] = {}
    for step in tree.nodes:
        if _blank(step.id):
            continue
        counts[step.id] = counts.get(step.id, 0) + 1
        if counts[step.id] == 2:
            defects.append(DuplicateId(step_id=step.id))

    if not tree.has_step(START_STEP_ID):
        defects.append(MissingStartNode())

    for position, step in enumerate(tree.nodes):
        defects.extend(_check_step_fields(step, position))

    for step in tree.nodes:
        if _blank(step.id):
            continue
        for target_id in step.successors():
            if not tree.has_step(target_id):
                defects.append(DanglingReference(step_id=step.id, target_id=target_id))

    return defects

def _check_step_fields(step: Step, position: int) -> List[Defect]:
    defects: List[Defect] = []
    step_id = None if _blank(step.id) else step.id
    where = {"step_id": step_id, "position": None if step_id else position}

    def missing(field: str):
        defects.append(MissingRequiredField(field=field, **where))

    if step_id is None:
        missing("id")

    if _blank(step.kind):
        missing("type")
    elif step.kind not in STEP_KINDS:
        defects.append(InvalidFieldValue(step_id=step_id, field="type", value=step.kind))

    if _blank(step.text):
        missing("text")

    if _blank(step.safety_level):
        missing("safety")
    elif step.safety_level not in SAFETY_LEVELS:
        defects.append(InvalidFieldValue(step_id=step_id, field="safety", value=step.safety_level))

    if step.kind == StepKind.QUESTION:
        if not step.options:
            missing("options")
        for index, option in enumerate(step.options or []):
            if _blank(option.label):
                missing(f"options[{index}].text")
            if _blank(option.target_id):
                missing(f"options[{index}].next")
    elif step.kind == StepKind.SOLUTION:
        if _blank(step.action):
            missing("action")

    return defects

def validate_document(document: TreeDocument) -> List[Defect]:
    """Checks a tree file's metadata, then the tree it carries."""
    defects: List[Defect] = []
    for field in DOCUMENT_REQUIRED_FIELDS:
        if _blank(getattr(document, field)):
            defects.append(MissingRequiredField(field=field))

    if not _blank(document.difficulty) and document.difficulty not in DIFFICULTIES:
        defects.append(InvalidFieldValue(field="difficulty", value=document.difficulty))

    if "tree_data" not in document.model_fields_set:
        defects.append(MissingRequiredField(field="tree_data"))
    if "nodes" not in document.tree_data.model_fields_set:
        defects.append(MissingRequiredField(field="tree_data.nodes"))

    defects.extend(validate_tree(document.tree_data))
    return defects

def is_valid(tree: DecisionTree) -> bool:
    return not validate_tree(tree)

def find_unreachable_steps(tree: DecisionTree) -> List[str]:
    """Step ids that no sequence of legal transitions from ``start`` reaches.

    Unreachable steps are an authoring warning, not a defect.
    """
    reached: Set[str] = set()
    if tree.has_step(START_STEP_ID):
        queue = deque([START_STEP_ID])
        reached.add(START_STEP_ID)
        while queue:
            step = tree.get_step(queue.popleft())
            for target_id in step.successors():
                if target_id not in reached and tree.has_step(target_id):
                    reached.add(target_id)
                    queue.append(target_id)

    return [step_id for step_id in tree.step_ids() if step_id not in reached]
