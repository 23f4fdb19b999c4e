"""irswap.swap — terms, lifecycle, settlement, liquidation and the contract."""

from irswap.swap.contract import SwapContract as SwapContract
from irswap.swap.lifecycle import SWAP_TRANSITIONS as SWAP_TRANSITIONS
from irswap.swap.lifecycle import SwapStatus as SwapStatus
from irswap.swap.lifecycle import check_transition as check_transition
from irswap.swap.liquidation import LiquidationOutcome as LiquidationOutcome
from irswap.swap.liquidation import breaching_parties as breaching_parties
from irswap.swap.liquidation import maturity_shortfall as maturity_shortfall
from irswap.swap.settlement import MarkToMarket as MarkToMarket
from irswap.swap.settlement import PayDirection as PayDirection
from irswap.swap.settlement import SettlementQuote as SettlementQuote
from irswap.swap.settlement import SettlementResult as SettlementResult
from irswap.swap.settlement import compute_mark_to_market as compute_mark_to_market
from irswap.swap.settlement import quote as quote
from irswap.swap.terms import DEFAULT_PARAMETERS as DEFAULT_PARAMETERS
from irswap.swap.terms import Counterparties as Counterparties
from irswap.swap.terms import PartyPosition as PartyPosition
from irswap.swap.terms import PartyRole as PartyRole
from irswap.swap.terms import SwapParameters as SwapParameters
from irswap.swap.terms import SwapTerms as SwapTerms
