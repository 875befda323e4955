"""
Staking Engine

Validates a stake against an open prediction, pulls the funds in, then
records it. Funds are pulled before any ledger write, so a failed transfer
leaves the ledger untouched.
"""

import logging

from .clock import Clock
from .errors import InvalidAmount, InvalidOption, StakingClosed
from .funds import FundsGateway
from .ledger_store import LedgerStore
from .validators import validate_option_declared, validate_stake_amount, validate_staking_open

logger = logging.getLogger(__name__)


class StakingEngine:
    """Records stakes on open predictions"""

    def __init__(self, store: LedgerStore, funds: FundsGateway, clock: Clock):
        self.store = store
        self.funds = funds
        self.clock = clock

    def place_stake(self, caller: str, prediction_id: int, option: str, amount: int) -> dict:
        """
        Stake `amount` base units on `option`

        Args:
            caller: Participant placing the stake
            prediction_id: Target prediction
            option: Declared option label
            amount: Positive integer base units

        Returns:
            Stake record dict from the store (new participant stake and option pool)

        Raises:
            PredictionNotFound: Unknown prediction
            StakingClosed: Prediction resolved or deadline reached
            InvalidAmount: Amount not a positive integer
            InvalidOption: Option not declared
            TransferError: Funds could not be pulled from the caller
        """
        now = self.clock.now()
        prediction = self.store.get_prediction(prediction_id)

        is_valid, error = validate_staking_open(prediction, now)
        if not is_valid:
            raise StakingClosed(error, prediction_id)

        is_valid, error = validate_stake_amount(amount)
        if not is_valid:
            raise InvalidAmount(error, prediction_id)

        is_valid, error = validate_option_declared(prediction, option)
        if not is_valid:
            raise InvalidOption(error, prediction_id)

        self.funds.transfer_in(caller, amount)
        record = self.store.record_stake(prediction_id, option, caller, amount)

        logger.info(
            f"STAKE: {caller} {amount} on {option!r} (prediction {prediction_id}, "
            f"pool {record['option_pool']})"
        )
        return record
