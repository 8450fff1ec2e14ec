from dataclasses import dataclass
from enum import Enum

class GenerationStage(str, Enum):
    REQUEST = "REQUEST"
    NORMALIZE = "NORMALIZE"
    VALIDATE = "VALIDATE"
    REPAIR = "REPAIR"
    SYNTHESIZE_DATA = "SYNTHESIZE_DATA"
    DERIVE_DASHBOARD = "DERIVE_DASHBOARD"
    DERIVE_RESOURCES = "DERIVE_RESOURCES"
    DONE = "DONE"
    FAILED = "FAILED"

class ProjectStatus(str, Enum):
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    DONE = "DONE"
    FAILED = "FAILED"

@dataclass(frozen=True)
class AttemptRecord:
    stage: GenerationStage
    ok: bool
    error_count: int
