"""irswap.ledger — the margin ledger."""

from irswap.ledger.margin import POOL as POOL
from irswap.ledger.margin import LedgerSnapshot as LedgerSnapshot
from irswap.ledger.margin import MarginLedger as MarginLedger
