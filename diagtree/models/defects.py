"""Structural defects reported by the tree validator.

Defects are values, not exceptions: the validator collects all of them in
one pass so an author can fix a tree file in a single round.
"""
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict

class Defect(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str

    @property
    def message(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.message

class MissingStartNode(Defect):
    code: Literal["missing_start_node"] = "missing_start_node"

    @property
    def message(self) -> str:
        return 'missing "start" node'

class DuplicateId(Defect):
    code: Literal["duplicate_id"] = "duplicate_id"
    step_id: str

    @property
    def message(self) -> str:
        return f'duplicate node id "{self.step_id}"'

class MissingRequiredField(Defect):
    """A required field is absent or empty.

    ``step_id`` is None for tree-level fields (title, category...) and for
    steps that have no id, in which case ``position`` is the step's index.
    """
    code: Literal["missing_required_field"] = "missing_required_field"
    step_id: Optional[str] = None
    field: str
    position: Optional[int] = None

    @property
    def message(self) -> str:
        if self.step_id is not None:
            return f"node {self.step_id}: missing {self.field}"
        if self.position is not None:
            return f"node #{self.position}: missing {self.field}"
        return f"missing {self.field}"

class DanglingReference(Defect):
    code: Literal["dangling_reference"] = "dangling_reference"
    step_id: str
    target_id: str

    @property
    def message(self) -> str:
        return f'node {self.step_id}: references missing node "{self.target_id}"'

class InvalidFieldValue(Defect):
    code: Literal["invalid_field_value"] = "invalid_field_value"
    step_id: Optional[str] = None
    field: str
    value: str

    @property
    def message(self) -> str:
        prefix = f"node {self.step_id}: " if self.step_id is not None else ""
        return f'{prefix}invalid {self.field} "{self.value}"'
