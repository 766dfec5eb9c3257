"""Retail order flow with Poisson arrivals."""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class RetailOrder:
    """A retail trade against the pool.

    `size` is in whole token1 terms. A buy pays token1 for token0, a sell
    pays token0 for token1. Exact-output orders name the amount received
    instead of the amount paid.
    """
    side: str  # "buy" or "sell" token0
    size: float
    exact_output: bool = False

    @property
    def zero_for_one(self) -> bool:
        return self.side == "sell"


class RetailTrader:
    """Uninformed traders arriving as a Poisson process with lognormal sizes."""

    def __init__(
        self,
        arrival_rate: float = 1.0,
        mean_size: float = 1.0,
        size_sigma: float = 1.2,
        buy_prob: float = 0.5,
        exact_output_prob: float = 0.5,
        seed: Optional[int] = None,
    ):
        """
        Args:
            arrival_rate: Expected number of orders per step (lambda)
            mean_size: Mean order size in whole token1
            size_sigma: Lognormal sigma (log-space)
            buy_prob: Probability an order buys token0
            exact_output_prob: Probability an order is exact-output
            seed: Random seed for reproducibility
        """
        self.arrival_rate = arrival_rate
        self.mean_size = mean_size
        self.size_sigma = size_sigma
        self.buy_prob = buy_prob
        self.exact_output_prob = exact_output_prob
        self._rng = np.random.default_rng(seed)

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self._rng = np.random.default_rng(seed)

    def generate_orders(self) -> list[RetailOrder]:
        """Orders arriving during one step (possibly none)."""
        n_arrivals = self._rng.poisson(self.arrival_rate)
        orders = []
        sigma = max(self.size_sigma, 0.01)
        mean = max(self.mean_size, 0.01)
        mu = float(np.log(mean) - 0.5 * sigma * sigma)
        for _ in range(n_arrivals):
            size = float(self._rng.lognormal(mu, sigma))
            side = "buy" if self._rng.random() < self.buy_prob else "sell"
            exact_output = bool(self._rng.random() < self.exact_output_prob)
            orders.append(RetailOrder(side=side, size=size, exact_output=exact_output))
        return orders
