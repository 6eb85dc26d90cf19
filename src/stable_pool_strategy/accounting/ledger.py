"""Two-tier share balance: shares held locally and shares in the staking sink."""

from __future__ import annotations

import logging

from ..core.errors import InsufficientShares
from ..core.models import LedgerState
from ..venues.base import StakingSink, TokenLedger

logger = logging.getLogger(__name__)


class ShareLedger:
    """Reads and reconciles the strategy's local and staked pool shares.

    All balances are read from the collaborators on demand; nothing is
    cached, so the two tiers can never drift from what the token ledger and
    the sink report.
    """

    def __init__(
        self,
        tokens: TokenLedger,
        sink: StakingSink,
        *,
        share_token: str,
        account: str,
    ) -> None:
        self._tokens = tokens
        self._sink = sink
        self.share_token = share_token
        self.account = account

    def local_shares(self) -> int:
        return int(self._tokens.balance_of(self.share_token, self.account))

    def staked_shares(self) -> int:
        return int(self._sink.staked_balance_of(self.account))

    def totals(self) -> LedgerState:
        return LedgerState(local_shares=self.local_shares(), staked_shares=self.staked_shares())

    def ensure_available(self, required_shares: int) -> int:
        """Make ``required_shares`` locally available, unstaking the shortfall.

        Returns the number of shares released from the sink. Raises
        :class:`InsufficientShares` before touching the sink when the
        strategy does not own enough shares in total, and after the release
        if the sink delivered less than requested.
        """

        state = self.totals()
        if state.total < required_shares:
            raise InsufficientShares(required_shares, state.total)
        if state.local_shares >= required_shares:
            return 0

        shortfall = required_shares - state.local_shares
        logger.debug("Releasing %s shares from staking sink", shortfall)
        self._sink.withdraw(shortfall)

        local = self.local_shares()
        if local < required_shares:
            raise InsufficientShares(required_shares, local)
        return shortfall

    def stake_all_local(self) -> int:
        """Move every locally held share into the staking sink."""

        local = self.local_shares()
        if local == 0:
            return 0
        self._sink.deposit_all_local_shares()
        logger.debug("Staked %s local shares", local)
        return local


__all__ = ["ShareLedger"]
