"""irswap.core — value types, results, errors and WAD arithmetic."""

from irswap.core.errors import AlreadyInitializedError as AlreadyInitializedError
from irswap.core.errors import AlreadySettledError as AlreadySettledError
from irswap.core.errors import ArithmeticOverflowError as ArithmeticOverflowError
from irswap.core.errors import ConservationViolationError as ConservationViolationError
from irswap.core.errors import CustodyTransferFailedError as CustodyTransferFailedError
from irswap.core.errors import DivisionByZeroError as DivisionByZeroError
from irswap.core.errors import IllegalTransitionError as IllegalTransitionError
from irswap.core.errors import InsufficientMarginError as InsufficientMarginError
from irswap.core.errors import InvalidPartyError as InvalidPartyError
from irswap.core.errors import InvalidTermsError as InvalidTermsError
from irswap.core.errors import MarginShortfallError as MarginShortfallError
from irswap.core.errors import NotAPartyError as NotAPartyError
from irswap.core.errors import NotEligibleError as NotEligibleError
from irswap.core.errors import NotMaturedError as NotMaturedError
from irswap.core.errors import RateUnavailableError as RateUnavailableError
from irswap.core.errors import SwapError as SwapError
from irswap.core.result import Err as Err
from irswap.core.result import Ok as Ok
from irswap.core.result import map_result as map_result
from irswap.core.result import unwrap as unwrap
from irswap.core.types import Address as Address
from irswap.core.types import UtcDatetime as UtcDatetime
from irswap.core.wad import UINT256_MAX as UINT256_MAX
from irswap.core.wad import WAD as WAD
from irswap.core.wad import FixedPoint as FixedPoint
from irswap.core.wad import checked_add as checked_add
from irswap.core.wad import checked_sub as checked_sub
from irswap.core.wad import from_wad as from_wad
from irswap.core.wad import to_wad as to_wad
from irswap.core.wad import wad_div as wad_div
from irswap.core.wad import wad_mul as wad_mul
