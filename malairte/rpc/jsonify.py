"""JSON-ready views of transactions and block headers for RPC replies."""

from __future__ import annotations

import math
from typing import Any

from malairte.primitives.block import BlockHeader
from malairte.primitives.transaction import Transaction

ATOMS_PER_COIN = 100_000_000
GENESIS_BITS = 0x207FFFFF


def _compact_to_target(bits: int) -> int:
    """Expand a compact difficulty encoding into the full target."""
    exponent = bits >> 24
    mantissa = bits & 0x007FFFFF
    if exponent <= 3:
        target = mantissa >> (8 * (3 - exponent))
    else:
        target = mantissa << (8 * (exponent - 3))
    if bits & 0x00800000 and target != 0:
        return -target
    return target


def _to_float(value: int) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.copysign(math.inf, value)


def _bits_to_difficulty(bits: int) -> float:
    """Difficulty relative to the genesis target."""
    current = _compact_to_target(bits)
    if current == 0:
        return 0.0
    current_float = _to_float(current)
    if current_float == 0:
        return 0.0
    return _to_float(_compact_to_target(GENESIS_BITS)) / current_float


def tx_to_json(tx: Transaction) -> dict[str, Any]:
    """Describe a transaction as a JSON-serializable dictionary."""
    coinbase = tx.is_coinbase()
    inputs = []
    for position, tx_in in enumerate(tx.inputs):
        entry: dict[str, Any] = {
            "txid": tx_in.previous_output.txid.hex(),
            "vout": tx_in.previous_output.index,
        }
        script_hex = bytes(tx_in.script_sig).hex()
        if coinbase and position == 0:
            entry["coinbase"] = script_hex
        else:
            entry["scriptsig"] = script_hex
        entry["sequence"] = tx_in.sequence
        inputs.append(entry)

    outputs = [
        {
            "value": tx_out.value / ATOMS_PER_COIN,
            "n": n,
            "scriptpubkey": bytes(tx_out.script_pubkey).hex(),
        }
        for n, tx_out in enumerate(tx.outputs)
    ]

    return {
        "txid": tx.txid().hex(),
        "version": tx.version,
        "vin": inputs,
        "vout": outputs,
        "locktime": tx.lock_time,
        "size": tx.total_size(),
    }


def header_to_json(header: BlockHeader) -> dict[str, Any]:
    """Describe a block header as a JSON-serializable dictionary."""
    return {
        "hash": header.hash().hex(),
        "height": header.height,
        "version": header.version,
        "previousblockhash": header.previous_hash.hex(),
        "merkleroot": header.merkle_root.hex(),
        "time": header.timestamp,
        "bits": f"{header.bits:08x}",
        "nonce": header.nonce,
        "difficulty": _bits_to_difficulty(header.bits),
    }