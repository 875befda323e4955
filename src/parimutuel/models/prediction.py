"""
Prediction data model
"""

from dataclasses import dataclass, field, replace

from .enums import PredictionStatus


@dataclass
class Prediction:
    """
    A proposition with a fixed set of mutually exclusive options

    Attributes:
        prediction_id: Sequential identifier assigned at creation
        title: Short human-readable title
        description: Free-form description of the proposition
        options: Ordered, distinct option labels (fixed at creation)
        deadline: Staking deadline (clock seconds); staking closes at this instant
        created_by: Identity of the operator that created it
        created_at: Clock reading at creation
        status: Lifecycle status (open/resolved)
        winning_option: Declared winner (None until resolved)
        resolved_at: Clock reading at resolution (None until resolved)
    """

    prediction_id: int
    title: str
    description: str
    options: tuple[str, ...]
    deadline: int
    created_by: str
    created_at: int
    status: PredictionStatus = field(default=PredictionStatus.OPEN)
    winning_option: str | None = None
    resolved_at: int | None = None

    def __post_init__(self):
        self.options = tuple(self.options)
        if self.prediction_id < 0:
            raise ValueError(f"prediction_id cannot be negative, got {self.prediction_id}")
        if len(set(self.options)) != len(self.options):
            raise ValueError(f"options must be distinct, got {self.options}")

    @property
    def is_active(self) -> bool:
        """True while the prediction accepts stakes and awaits resolution"""
        return self.status == PredictionStatus.OPEN

    def has_option(self, option: str) -> bool:
        return option in self.options

    def copy(self) -> "Prediction":
        """Detached copy for callers outside the ledger lock"""
        return replace(self)

    def to_dict(self) -> dict:
        return {
            "prediction_id": self.prediction_id,
            "title": self.title,
            "description": self.description,
            "options": list(self.options),
            "deadline": self.deadline,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "status": self.status.value,
            "is_active": self.is_active,
            "winning_option": self.winning_option,
            "resolved_at": self.resolved_at,
        }
