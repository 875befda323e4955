"""
Ledger error hierarchy

Every error carries a stable `code` so callers and event payloads can
identify the failure without matching on message text.
"""


class LedgerError(Exception):
    """Base class for all ledger failures"""

    code = "LEDGER_ERROR"

    def __init__(self, message: str, prediction_id: int | None = None):
        super().__init__(message)
        self.message = message
        self.prediction_id = prediction_id

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "prediction_id": self.prediction_id,
        }


class Unauthorized(LedgerError):
    """Caller lacks the required privilege"""

    code = "UNAUTHORIZED"


class InvalidParameters(LedgerError):
    """Malformed prediction creation input"""

    code = "INVALID_PARAMETERS"


class PredictionNotFound(LedgerError):
    """No prediction with the given id"""

    code = "PREDICTION_NOT_FOUND"


class InvalidOption(LedgerError):
    """Option label not declared by the prediction"""

    code = "INVALID_OPTION"


class InvalidAmount(LedgerError):
    """Stake amount is not a positive integer"""

    code = "INVALID_AMOUNT"


class StakingClosed(LedgerError):
    """Deadline passed or prediction no longer active"""

    code = "STAKING_CLOSED"


class TooEarly(LedgerError):
    """Resolution attempted before the staking deadline"""

    code = "TOO_EARLY"


class AlreadyResolved(LedgerError):
    """Prediction was already resolved"""

    code = "ALREADY_RESOLVED"


class TransferError(LedgerError):
    """Funds movement failed for a specific account"""

    code = "TRANSFER_ERROR"

    def __init__(self, message: str, account: str | None = None, amount: int | None = None):
        super().__init__(message)
        self.account = account
        self.amount = amount
