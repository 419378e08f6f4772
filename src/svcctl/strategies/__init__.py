"""Lifecycle strategies: one class per service-management mechanism."""

from svcctl.strategies.auto import AutoStrategy
from svcctl.strategies.base import ServiceStrategy
from svcctl.strategies.brew import BrewServicesStrategy
from svcctl.strategies.direct import DirectCommandStrategy
from svcctl.strategies.factory import (
    StrategyFactory,
    default_commands_for_service,
    default_strategy_for_service,
    validate_strategy,
)
from svcctl.strategies.launchd import LaunchdStrategy
from svcctl.strategies.process import ProcessOnlyStrategy
from svcctl.strategies.systemd import SystemdStrategy
from svcctl.strategies.windows import WindowsServiceStrategy

__all__ = [
    "AutoStrategy",
    "BrewServicesStrategy",
    "DirectCommandStrategy",
    "LaunchdStrategy",
    "ProcessOnlyStrategy",
    "ServiceStrategy",
    "StrategyFactory",
    "SystemdStrategy",
    "WindowsServiceStrategy",
    "default_commands_for_service",
    "default_strategy_for_service",
    "validate_strategy",
]
