"""irswap.infra — collaborator protocols, adapters, and configuration."""

from irswap.infra.config import DEFAULT_MONITOR_CONFIG as DEFAULT_MONITOR_CONFIG
from irswap.infra.config import DEFAULT_TEMPORAL_CONFIG as DEFAULT_TEMPORAL_CONFIG
from irswap.infra.config import LiquidationMonitorConfig as LiquidationMonitorConfig
from irswap.infra.config import TemporalConfig as TemporalConfig
from irswap.infra.memory_adapter import InMemoryCustody as InMemoryCustody
from irswap.infra.memory_adapter import InMemoryToken as InMemoryToken
from irswap.infra.memory_adapter import StaticRateSource as StaticRateSource
from irswap.infra.protocols import Custody as Custody
from irswap.infra.protocols import RateSource as RateSource
from irswap.infra.rate_feed import PeriodicFixingRateSource as PeriodicFixingRateSource
from irswap.infra.rate_feed import RateFixing as RateFixing
from irswap.infra.rate_feed import generate_fixing_periods as generate_fixing_periods
