"""Block headers, blocks, merkle roots and the witness commitment."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Iterable

from malairte.primitives.errors import TooShortError
from malairte.primitives.transaction import (
    COINBASE_INDEX,
    WITNESS_SCALE_FACTOR,
    ZERO_HASH,
    OutPoint,
    Transaction,
    TxInput,
    TxOutput,
    deserialize_transactions,
    double_sha3_256,
    encode_varint,
    serialize_transactions,
)

HEADER_SIZE = 96
_HEADER_FORMAT = struct.Struct("<I32s32sqIQQ")

WITNESS_COMMITMENT_MAGIC = bytes((0xAA, 0x21, 0xA9, 0xED))
WITNESS_RESERVED_VALUE = ZERO_HASH

OP_RETURN = 0x6A
_PUSH_36 = 0x24
_COMMITMENT_SCRIPT_SIZE = 38

GENESIS_COINBASE_MESSAGE = b"MLRT Genesis - The Malairt coin begins."


def _hash32(value: bytes, what: str) -> bytes:
    value = bytes(value)
    if len(value) != 32:
        raise ValueError(f"{what} must be 32 bytes, got {len(value)}")
    return value


@dataclass
class BlockHeader:
    """The 96-byte structure hashed for proof of work."""

    version: int = 1
    previous_hash: bytes = ZERO_HASH
    merkle_root: bytes = ZERO_HASH
    timestamp: int = 0
    bits: int = 0
    nonce: int = 0
    height: int = 0

    def __post_init__(self) -> None:
        self.previous_hash = _hash32(self.previous_hash, "previous hash")
        self.merkle_root = _hash32(self.merkle_root, "merkle root")

    def serialize(self) -> bytes:
        """Encode the header as exactly 96 little-endian bytes."""
        return _HEADER_FORMAT.pack(
            self.version,
            self.previous_hash,
            self.merkle_root,
            self.timestamp,
            self.bits,
            self.nonce,
            self.height,
        )

    def hash(self) -> bytes:
        """Double SHA3-256 of the serialized header."""
        return double_sha3_256(self.serialize())


def deserialize_block_header(data: bytes) -> BlockHeader:
    """Decode a header from the first 96 bytes of data."""
    if len(data) < HEADER_SIZE:
        raise TooShortError()
    fields = _HEADER_FORMAT.unpack(bytes(data[:HEADER_SIZE]))
    return BlockHeader(*fields)


@dataclass
class Block:
    """A header followed by its transactions."""

    header: BlockHeader = field(default_factory=BlockHeader)
    txs: list[Transaction] = field(default_factory=list)

    def serialize(self) -> bytes:
        """Header bytes, then varint(count) and each SegWit-format transaction."""
        return self.header.serialize() + serialize_transactions(self.txs)

    def base_size(self) -> int:
        """Serialized length with every witness stripped."""
        return (
            HEADER_SIZE
            + len(encode_varint(len(self.txs)))
            + sum(tx.base_size() for tx in self.txs)
        )

    def total_size(self) -> int:
        return len(self.serialize())

    def weight(self) -> int:
        """Weight units: base bytes count four times, witness bytes once."""
        base = self.base_size()
        return base * WITNESS_SCALE_FACTOR + (self.total_size() - base)


def deserialize_block(data: bytes) -> Block:
    """Decode a block: a 96-byte header and a counted transaction list."""
    if len(data) < HEADER_SIZE:
        raise TooShortError()
    header = deserialize_block_header(data[:HEADER_SIZE])
    txs = deserialize_transactions(bytes(data[HEADER_SIZE:]))
    return Block(header, txs)


def _merkle(leaves: Iterable[bytes]) -> bytes:
    level = list(leaves)
    if not level:
        return ZERO_HASH
    while len(level) > 1:
        if len(level) % 2:
            level.append(level[-1])
        level = [
            double_sha3_256(left + right)
            for left, right in zip(level[::2], level[1::2])
        ]
    return level[0]


def calc_merkle_root(txs: Iterable[Transaction]) -> bytes:
    """Merkle root over the txids; all zeros for no transactions."""
    return _merkle(tx.txid() for tx in txs)


def calc_witness_merkle_root(txs: Iterable[Transaction]) -> bytes:
    """Merkle root over the wtxids, where the coinbase counts as all zeros."""
    return _merkle(tx.wtxid() for tx in txs)


def compute_witness_commitment(txs: Iterable[Transaction]) -> bytes:
    """Hash of the witness merkle root followed by the reserved value."""
    root = calc_witness_merkle_root(txs)
    return double_sha3_256(root + WITNESS_RESERVED_VALUE)


def build_witness_commitment_script(commitment: bytes) -> bytes:
    """Build OP_RETURN <push 36> <magic> <32-byte commitment>."""
    commitment = _hash32(commitment, "witness commitment")
    return bytes((OP_RETURN, _PUSH_36)) + WITNESS_COMMITMENT_MAGIC + commitment


def extract_witness_commitment(coinbase: Transaction | None) -> bytes | None:
    """Return the last witness commitment in the coinbase outputs, or None."""
    if coinbase is None:
        return None
    found = None
    for tx_out in coinbase.outputs:
        script = tx_out.script_pubkey
        if (
            len(script) >= _COMMITMENT_SCRIPT_SIZE
            and script[0] == OP_RETURN
            and script[1] == _PUSH_36
            and bytes(script[2:6]) == WITNESS_COMMITMENT_MAGIC
        ):
            found = bytes(script[6:_COMMITMENT_SCRIPT_SIZE])
    return found


def _encode_script_height(height: int) -> bytes:
    if height == 0:
        return b"\x01\x00"
    raw = height.to_bytes((height.bit_length() + 7) // 8, "little")
    if raw[-1] & 0x80:
        raw += b"\x00"
    return bytes((len(raw),)) + raw


def new_coinbase_tx(
    height: int, reward: int, script_pubkey: bytes, extra_nonce: int
) -> Transaction:
    """Build a coinbase paying reward to script_pubkey at the given height."""
    message = GENESIS_COINBASE_MESSAGE if height == 0 else b""
    script_sig = _encode_script_height(height) + struct.pack("<Q", extra_nonce) + message
    return Transaction(
        version=1,
        inputs=[
            TxInput(
                previous_output=OutPoint(ZERO_HASH, COINBASE_INDEX),
                script_sig=script_sig,
                sequence=0xFFFFFFFF,
            )
        ],
        outputs=[TxOutput(value=reward, script_pubkey=bytes(script_pubkey))],
        lock_time=0,
    )