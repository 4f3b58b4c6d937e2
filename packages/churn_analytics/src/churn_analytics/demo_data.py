"""Seeded synthetic customer generator for demos and test fixtures.

Churn outcomes are drawn from a fixed probability model so that the usual
drivers (month-to-month contracts, fiber, short tenure, high charges) show up
in the analytics.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

import pandas as pd
from loguru import logger

from churn_analytics.models import CUSTOMER_COLUMNS, Contract, InternetService

_MODULUS = 2147483647
_MULTIPLIER = 16807

DEFAULT_SEED = 71313
DEFAULT_ROWS = 1200

CONTRACT_WEIGHTS = [0.56, 0.24, 0.20]
INTERNET_WEIGHTS = [0.48, 0.38, 0.14]


def seeded_random(seed: int) -> Callable[[], float]:
    """Park-Miller linear congruential generator returning floats in (0, 1)."""
    state = seed % _MODULUS
    if state <= 0:
        state += _MODULUS - 1

    def _next() -> float:
        nonlocal state
        state = state * _MULTIPLIER % _MODULUS
        return state / _MODULUS

    return _next


def _pick(rand: Callable[[], float], options: Sequence, weights: Sequence[float]):
    r = rand() * sum(weights)
    for option, w in zip(options, weights):
        r -= w
        if r <= 0:
            return option
    return options[-1]


def _churn_probability(contract: Contract, internet: InternetService, tenure: int,
                       monthly: float, senior: bool) -> float:
    p = 0.10
    if contract is Contract.MONTH_TO_MONTH:
        p += 0.18
    elif contract is Contract.ONE_YEAR:
        p += 0.06
    else:
        p += 0.02
    if internet is InternetService.FIBER:
        p += 0.08
    elif internet is InternetService.DSL:
        p += 0.03
    if tenure <= 3:
        p += 0.16
    elif tenure <= 6:
        p += 0.10
    elif tenure <= 12:
        p += 0.06
    if monthly >= 90:
        p += 0.06
    if senior:
        p += 0.03
    return max(0.02, min(0.65, p))


def make_demo_data(n: int = DEFAULT_ROWS, seed: int = DEFAULT_SEED) -> pd.DataFrame:
    """Generate *n* reproducible synthetic customers as a canonical frame."""
    rand = seeded_random(seed)
    rows: list[dict] = []

    for i in range(n):
        contract = _pick(rand, list(Contract), CONTRACT_WEIGHTS)
        internet = _pick(rand, list(InternetService), INTERNET_WEIGHTS)
        senior = rand() < 0.16

        # Skewed toward short tenure
        tenure = max(1, min(72, math.floor(rand() ** 1.8 * 72 + 0.5)))

        if internet is InternetService.FIBER:
            base = 92.0
        elif internet is InternetService.DSL:
            base = 62.0
        else:
            base = 28.0
        if contract is Contract.MONTH_TO_MONTH:
            base += 6
        elif contract is Contract.TWO_YEAR:
            base -= 4
        if senior:
            base += 2
        monthly = max(18.0, min(120.0, base + (rand() * 18 - 9)))

        churn = rand() < _churn_probability(contract, internet, tenure, monthly, senior)
        suffix = math.floor(rand() * 9000 + 1000)

        rows.append(
            {
                "customer_id": f"{i + 1:04d}-{suffix}",
                "contract": contract.value,
                "internet_service": internet.value,
                "senior": senior,
                "tenure": tenure,
                "monthly": round(monthly, 2),
                "churn": churn,
            }
        )

    logger.debug("Generated {n} demo customers (seed={seed})", n=n, seed=seed)
    return pd.DataFrame(rows, columns=CUSTOMER_COLUMNS)
