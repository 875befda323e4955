"""
Input validation functions

Each validator returns `(is_valid, error_message)`; the calling component
decides which typed error to raise.
"""

from parimutuel.config import config
from parimutuel.models import Prediction


def validate_options(options) -> tuple[bool, str | None]:
    """
    Validate the option labels of a new prediction

    Args:
        options: Sequence of option labels

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(options, (str, bytes)) or options is None:
        return False, "Options must be a sequence of labels"

    options = list(options)
    min_options = config.get("market", "min_options", 2)
    if len(options) < min_options:
        return False, f"At least {min_options} options required, got {len(options)}"

    for label in options:
        if not isinstance(label, str):
            return False, f"Option labels must be strings, got {type(label).__name__}"
        if not label.strip():
            return False, "Option labels cannot be empty"

    if len(set(options)) != len(options):
        duplicates = sorted({o for o in options if options.count(o) > 1})
        return False, f"Duplicate option labels: {duplicates}"

    return True, None


def validate_title(title) -> tuple[bool, str | None]:
    """Title must be a non-empty string"""
    if not isinstance(title, str) or not title.strip():
        return False, "Title cannot be empty"
    return True, None


def validate_deadline(deadline, now: int) -> tuple[bool, str | None]:
    """
    Deadline must be an integer timestamp strictly in the future

    Args:
        deadline: Proposed staking deadline
        now: Current logical clock reading
    """
    if isinstance(deadline, bool) or not isinstance(deadline, int):
        return False, f"Deadline must be an integer timestamp, got {deadline!r}"
    if deadline <= now:
        return False, f"Deadline {deadline} must be after current time {now}"
    return True, None


def validate_stake_amount(amount) -> tuple[bool, str | None]:
    """
    Stake must be a positive integer amount of base units

    Args:
        amount: Base units to stake
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        return False, f"Stake amount must be an integer of base units, got {amount!r}"
    if amount <= 0:
        return False, f"Stake amount {amount} must be positive"
    return True, None


def validate_staking_open(prediction: Prediction, now: int) -> tuple[bool, str | None]:
    """Staking requires an active prediction and a clock strictly before the deadline"""
    if not prediction.is_active:
        return False, f"Prediction {prediction.prediction_id} is already resolved"
    if now >= prediction.deadline:
        return False, (
            f"Cannot place bet after bidding time has ended "
            f"(deadline {prediction.deadline}, now {now})"
        )
    return True, None


def validate_option_declared(prediction: Prediction, option) -> tuple[bool, str | None]:
    """Option must be one of the labels declared at creation"""
    if not isinstance(option, str) or not prediction.has_option(option):
        return False, (
            f"Option {option!r} is not valid for prediction {prediction.prediction_id}; "
            f"expected one of {list(prediction.options)}"
        )
    return True, None


def validate_resolution_time(prediction: Prediction, now: int) -> tuple[bool, str | None]:
    """Resolution is allowed at or after the deadline"""
    if now < prediction.deadline:
        return False, (
            f"Prediction has not ended yet "
            f"(deadline {prediction.deadline}, now {now})"
        )
    return True, None
