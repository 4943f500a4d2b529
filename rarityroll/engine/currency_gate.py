"""Currency debits gating paid rolls."""

import logging
import math
from typing import MutableMapping, Optional

from rarityroll.models.results import DebitResult, DebitStatus

logger = logging.getLogger(__name__)


class CurrencyGate:
    """Debits a caller-owned balance mapping before rolls."""

    @staticmethod
    def _check_cost(cost: float) -> None:
        if not math.isfinite(cost) or cost < 0:
            raise ValueError(f"Roll cost must be a finite non-negative number, got {cost}")

    @staticmethod
    def debit_single(
        balances: Optional[MutableMapping[str, float]], pool: Optional[str], cost: float = 0
    ) -> DebitResult:
        """
        Charge one roll if the pool can cover it.

        Args:
            balances: Mutable balance mapping, modified in place
            pool: Balance key to charge
            cost: Price of one roll

        Returns:
            DebitResult, SKIPPED when there is no balance to charge
        """
        CurrencyGate._check_cost(cost)
        if balances is None or pool is None or pool not in balances:
            return DebitResult(status=DebitStatus.SKIPPED, pool=pool, cost=cost)

        balance = balances[pool]
        if balance >= cost:
            balances[pool] = balance - cost
            return DebitResult(status=DebitStatus.DEBITED, pool=pool, cost=cost, balance=balances[pool])

        logger.warning(f"Not enough currency to roll for {pool}: balance={balance}, cost={cost}")
        return DebitResult(status=DebitStatus.DECLINED, pool=pool, cost=cost, balance=balance)

    @staticmethod
    def debit_bulk(
        balances: Optional[MutableMapping[str, float]],
        pool: Optional[str],
        cost: float,
        count: int,
    ) -> DebitResult:
        """
        Charge ``cost * count`` upfront, all or nothing.

        A pool missing from ``balances`` is treated as an empty balance.
        """
        CurrencyGate._check_cost(cost)
        total = cost * count
        if balances is None or pool is None:
            return DebitResult(status=DebitStatus.SKIPPED, pool=pool, cost=total)

        balance = balances.get(pool, 0)
        if balance < total:
            logger.warning(f"Currency is not enough to bulk roll {count}x for {pool}: balance={balance}, cost={total}")
            return DebitResult(status=DebitStatus.DECLINED, pool=pool, cost=total, balance=balance)

        balances[pool] = balance - total
        return DebitResult(status=DebitStatus.DEBITED, pool=pool, cost=total, balance=balances[pool])
