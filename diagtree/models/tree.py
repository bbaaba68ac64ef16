from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

START_STEP_ID = "start"

class StepKind(str, Enum):
    QUESTION = "question"
    CHECK = "check"
    SOLUTION = "solution"

class SafetyLevel(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"

class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

SAFETY_LABELS = {
    SafetyLevel.GREEN.value: "Beginner Safe",
    SafetyLevel.YELLOW.value: "Use Caution",
    SafetyLevel.RED.value: "Professional Recommended",
}

class StepOption(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    label: Optional[str] = Field(default=None, alias="text")
    target_id: Optional[str] = Field(default=None, alias="next")

class Step(BaseModel):
    """A single diagnostic step.

    Every field is optional so that malformed steps still parse; the
    validator reports what is missing.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: Optional[str] = None
    kind: Optional[str] = Field(default=None, alias="type")
    text: Optional[str] = None
    safety_level: Optional[str] = Field(default=None, alias="safety")
    warning: Optional[str] = None
    # question
    options: Optional[List[StepOption]] = None
    # check
    instructions: Optional[str] = None
    target_id: Optional[str] = Field(default=None, alias="next")
    # solution
    action: Optional[str] = None
    details: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.kind == StepKind.SOLUTION

    def successors(self) -> List[str]:
        """Target ids this step declares, in order. Solutions never have any."""
        if self.kind == StepKind.QUESTION:
            return [option.target_id for option in self.options or [] if option.target_id]
        if self.kind == StepKind.CHECK and self.target_id:
            return [self.target_id]
        return []

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

class DecisionTree(BaseModel):
    """Flat collection of steps addressed by id, entered at ``start``."""

    nodes: List[Step] = []

    _index: Dict[str, Step] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        index: Dict[str, Step] = {}
        for step in self.nodes:
            # First occurrence wins; duplicates are a validation defect
            if step.id and step.id not in index:
                index[step.id] = step
        self._index = index

    @classmethod
    def from_json(cls, content: str) -> "DecisionTree":
        return cls.model_validate_json(content)

    @property
    def start_step(self) -> Optional[Step]:
        return self._index.get(START_STEP_ID)

    def get_step(self, step_id: str) -> Optional[Step]:
        return self._index.get(step_id)

    def has_step(self, step_id: str) -> bool:
        return step_id in self._index

    def step_ids(self) -> List[str]:
        return list(self._index)

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._index

    def __len__(self) -> int:
        return len(self.nodes)

class TreeDocument(BaseModel):
    """A tree description file: metadata plus the tree itself."""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    motorcycle_make: Optional[str] = None
    motorcycle_model: Optional[str] = None
    tree_data: DecisionTree = Field(default_factory=DecisionTree)

    @classmethod
    def from_json(cls, content: str) -> "TreeDocument":
        return cls.model_validate_json(content)

    @property
    def node_count(self) -> int:
        return len(self.tree_data)

    @property
    def motorcycle_name(self) -> Optional[str]:
        if self.motorcycle_make and self.motorcycle_model:
            return f"{self.motorcycle_make} {self.motorcycle_model}"
        return None

class TreeSummary(BaseModel):
    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    motorcycle: Optional[str] = None
    node_count: int = 0
