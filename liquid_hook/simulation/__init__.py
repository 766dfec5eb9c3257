"""Market simulation around a hooked pool."""

from liquid_hook.simulation.price_process import GBMPriceProcess
from liquid_hook.simulation.arbitrageur import Arbitrageur
from liquid_hook.simulation.retail import RetailOrder, RetailTrader
from liquid_hook.simulation.runner import SimulationResult, SimulationRunner, StepSnapshot

__all__ = [
    "GBMPriceProcess",
    "Arbitrageur",
    "RetailOrder",
    "RetailTrader",
    "SimulationResult",
    "SimulationRunner",
    "StepSnapshot",
]
