"""Geometric Brownian Motion fair-price path."""

from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np


@dataclass
class GBMPriceProcess:
    """Generates the fair price of token0 in token1 using Geometric Brownian Motion.

    dS = mu * S * dt + sigma * S * dW
    """
    initial_price: float
    mu: float = 0.0           # Drift
    sigma: float = 0.001      # Per-step volatility
    dt: float = 1.0
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.initial_price <= 0:
            raise ValueError(f"initial_price must be > 0, got {self.initial_price}")
        if self.sigma < 0:
            raise ValueError(f"sigma must be >= 0, got {self.sigma}")
        self._rng = np.random.default_rng(self.seed)
        self._current_price = self.initial_price

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self._rng = np.random.default_rng(seed)
        self._current_price = self.initial_price

    @property
    def current_price(self) -> float:
        return self._current_price

    def step(self) -> float:
        """Advance one step and return the new fair price."""
        # S(t+dt) = S(t) * exp((mu - 0.5*sigma^2)*dt + sigma*sqrt(dt)*Z)
        z = self._rng.standard_normal()
        drift = (self.mu - 0.5 * self.sigma ** 2) * self.dt
        diffusion = self.sigma * np.sqrt(self.dt) * z
        self._current_price = float(self._current_price * np.exp(drift + diffusion))
        return self._current_price

    def generate(self, n_steps: int) -> Iterator[float]:
        """Yield `n_steps` prices starting with the initial price."""
        yield self.current_price
        for _ in range(n_steps - 1):
            yield self.step()
