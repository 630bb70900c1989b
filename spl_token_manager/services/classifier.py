"""
Classification of historical transactions.

Instructions of a fetched transaction are decoded once into a small tagged
union (``InitializeMint``, ``MintTo``, ``Transfer``, ``OtherInstruction``) and
the transaction is then classified from those values alone.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from spl_token_manager.constants import TOKEN_PROGRAM_ID, UNKNOWN_MINT
from spl_token_manager.models.token import TransactionKind, TransactionRecord


@dataclass(frozen=True)
class InitializeMint:
    mint: Optional[str]
    decimals: Optional[int] = None


@dataclass(frozen=True)
class MintTo:
    mint: Optional[str]
    account: Optional[str] = None
    amount: Optional[int] = None


@dataclass(frozen=True)
class Transfer:
    # Plain transfers do not name their mint, transferChecked does
    mint: Optional[str]
    source: Optional[str] = None
    destination: Optional[str] = None
    amount: Optional[int] = None


@dataclass(frozen=True)
class OtherInstruction:
    program_id: Optional[str]


DecodedInstruction = Union[InitializeMint, MintTo, Transfer, OtherInstruction]

# jsonParsed instruction types of the token program, grouped by meaning
_INITIALIZE_MINT_TYPES = {"initializeMint", "initializeMint2"}
_MINT_TO_TYPES = {"mintTo", "mintToChecked"}
_TRANSFER_TYPES = {"transfer", "transferChecked"}

# Checked first to last; the first kind present anywhere in the list wins
_PRIORITY: Tuple[Tuple[type, TransactionKind], ...] = (
    (MintTo, TransactionKind.MINT),
    (Transfer, TransactionKind.TRANSFER),
    (InitializeMint, TransactionKind.CREATE),
)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _raw_amount(info: Dict[str, Any]) -> Optional[int]:
    amount = info.get("amount")
    if amount is None and isinstance(info.get("tokenAmount"), dict):
        amount = info["tokenAmount"].get("amount")
    try:
        return int(amount) if amount is not None else None
    except (TypeError, ValueError):
        return None


def decode_instruction(raw: Dict[str, Any]) -> DecodedInstruction:
    """Decode one jsonParsed instruction.

    Anything that is not a parsed token program instruction of a known type
    becomes ``OtherInstruction``.
    """
    program_id = raw.get("programId")
    parsed = raw.get("parsed")
    if program_id != TOKEN_PROGRAM_ID or not isinstance(parsed, dict):
        return OtherInstruction(program_id=program_id)

    ix_type = parsed.get("type")
    info = parsed.get("info")
    if not isinstance(info, dict):
        info = {}

    if ix_type in _MINT_TO_TYPES:
        return MintTo(mint=info.get("mint"), account=info.get("account"),
                      amount=_raw_amount(info))
    if ix_type in _TRANSFER_TYPES:
        return Transfer(mint=info.get("mint"), source=info.get("source"),
                        destination=info.get("destination"), amount=_raw_amount(info))
    if ix_type in _INITIALIZE_MINT_TYPES:
        return InitializeMint(mint=info.get("mint"), decimals=info.get("decimals"))
    return OtherInstruction(program_id=program_id)


def classify(instructions: Sequence[DecodedInstruction],
             program_ids: Iterable[Optional[str]]) -> Tuple[TransactionKind, str]:
    """Assign a transaction kind and the mint it concerns.

    Args:
        instructions: Decoded instructions in transaction order
        program_ids: Programs the transaction invoked

    Returns:
        ``(kind, mint)``; mint is ``"unknown"`` when not determinable
    """
    if TOKEN_PROGRAM_ID not in set(program_ids):
        return TransactionKind.UNKNOWN, UNKNOWN_MINT

    for instruction_type, kind in _PRIORITY:
        match = next((ix for ix in instructions if isinstance(ix, instruction_type)), None)
        if match is not None:
            return kind, match.mint or UNKNOWN_MINT

    return TransactionKind.UNKNOWN, UNKNOWN_MINT


def classify_transaction(signature: str, block_time: Optional[int],
                         transaction: Optional[Dict[str, Any]],
                         fallback_time: int) -> Optional[TransactionRecord]:
    """Build a history record from a ``getTransaction`` result.

    Args:
        signature: The transaction signature
        block_time: Block time reported with the signature, if any
        transaction: The jsonParsed transaction, or None if unavailable
        fallback_time: Timestamp to use when no block time is known

    Returns:
        The record, or None for missing or malformed transactions and
        ones whose execution failed
    """
    if not isinstance(transaction, dict):
        return None
    meta = transaction.get("meta")
    if not isinstance(meta, dict) or meta.get("err") is not None:
        return None

    # A body without a message cannot be classified
    message = _as_dict(transaction.get("transaction")).get("message")
    if not isinstance(message, dict):
        return None
    instructions = message.get("instructions")
    if not isinstance(instructions, list):
        instructions = []
    raw_instructions: List[Dict[str, Any]] = [ix for ix in instructions if isinstance(ix, dict)]
    decoded = [decode_instruction(ix) for ix in raw_instructions]
    program_ids = [ix.get("programId") for ix in raw_instructions]

    kind, mint = classify(decoded, program_ids)
    timestamp = block_time if block_time is not None else transaction.get("blockTime")
    return TransactionRecord(
        signature=signature,
        timestamp=timestamp if timestamp is not None else fallback_time,
        kind=kind,
        mint=mint,
    )
