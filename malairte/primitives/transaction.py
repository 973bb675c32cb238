"""Transactions and their SegWit wire format."""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field
from typing import Iterable

from malairte.primitives.errors import InvalidVarIntError, TooShortError

WITNESS_SCALE_FACTOR = 4
COINBASE_INDEX = 0xFFFFFFFF
ZERO_HASH = bytes(32)


def double_sha3_256(data: bytes) -> bytes:
    """Return SHA3-256 applied twice to data."""
    return hashlib.sha3_256(hashlib.sha3_256(data).digest()).digest()


@dataclass(frozen=True)
class OutPoint:
    """Reference to one output of one transaction."""

    txid: bytes = ZERO_HASH
    index: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "txid", bytes(self.txid))
        if len(self.txid) != 32:
            raise ValueError(f"outpoint txid must be 32 bytes, got {len(self.txid)}")


@dataclass
class TxInput:
    """An input spending a previous output, with its witness stack."""

    previous_output: OutPoint = field(default_factory=OutPoint)
    script_sig: bytes = b""
    sequence: int = 0
    witness: list[bytes] = field(default_factory=list)


@dataclass
class TxOutput:
    """A newly created output: value in atoms and its locking script."""

    value: int = 0
    script_pubkey: bytes = b""


@dataclass
class Transaction:
    """A transaction: version, inputs, outputs and lock time."""

    version: int = 1
    inputs: list[TxInput] = field(default_factory=list)
    outputs: list[TxOutput] = field(default_factory=list)
    lock_time: int = 0

    def txid(self) -> bytes:
        """Hash of the witness-free serialization."""
        return double_sha3_256(self.serialize_base())

    def wtxid(self) -> bytes:
        """Hash of the full serialization; all zeros for a coinbase."""
        if self.is_coinbase():
            return ZERO_HASH
        return double_sha3_256(self.serialize())

    def is_coinbase(self) -> bool:
        """True if the first input spends the null outpoint."""
        if not self.inputs:
            return False
        prev = self.inputs[0].previous_output
        return prev.index == COINBASE_INDEX and prev.txid == ZERO_HASH

    def base_size(self) -> int:
        return len(self.serialize_base())

    def total_size(self) -> int:
        return len(self.serialize())

    def weight(self) -> int:
        """Weight units: base bytes count four times, witness bytes once."""
        base = self.base_size()
        return base * WITNESS_SCALE_FACTOR + (self.total_size() - base)

    def serialize_base(self) -> bytes:
        """Encode without marker, flag or witness data."""
        return b"".join(
            (
                struct.pack("<I", self.version),
                self._inputs_outputs(),
                struct.pack("<I", self.lock_time),
            )
        )

    def serialize(self) -> bytes:
        """Encode in SegWit format: marker, flag and one witness per input."""
        parts = [struct.pack("<I", self.version), b"\x00\x01", self._inputs_outputs()]
        for tx_in in self.inputs:
            parts.append(encode_varint(len(tx_in.witness)))
            for item in tx_in.witness:
                parts.append(encode_varint(len(item)))
                parts.append(bytes(item))
        parts.append(struct.pack("<I", self.lock_time))
        return b"".join(parts)

    def _inputs_outputs(self) -> bytes:
        parts = [encode_varint(len(self.inputs))]
        for tx_in in self.inputs:
            parts.append(tx_in.previous_output.txid)
            parts.append(struct.pack("<I", tx_in.previous_output.index))
            parts.append(encode_varint(len(tx_in.script_sig)))
            parts.append(bytes(tx_in.script_sig))
            parts.append(struct.pack("<I", tx_in.sequence))
        parts.append(encode_varint(len(self.outputs)))
        for tx_out in self.outputs:
            parts.append(struct.pack("<q", tx_out.value))
            parts.append(encode_varint(len(tx_out.script_pubkey)))
            parts.append(bytes(tx_out.script_pubkey))
        return b"".join(parts)


def encode_varint(value: int) -> bytes:
    """Encode an unsigned integer as a compact-size varint."""
    if value < 0 or value > 0xFFFFFFFFFFFFFFFF:
        raise ValueError(f"varint out of range: {value}")
    if value < 0xFD:
        return bytes((value,))
    if value <= 0xFFFF:
        return b"\xfd" + struct.pack("<H", value)
    if value <= 0xFFFFFFFF:
        return b"\xfe" + struct.pack("<I", value)
    return b"\xff" + struct.pack("<Q", value)


def decode_varint(data: bytes) -> tuple[int, int]:
    """Decode a varint; return the value and the number of bytes consumed."""
    if len(data) == 0:
        raise InvalidVarIntError()
    prefix = data[0]
    width = {0xFD: 2, 0xFE: 4, 0xFF: 8}.get(prefix)
    if width is None:
        return prefix, 1
    if len(data) < 1 + width:
        raise InvalidVarIntError()
    return int.from_bytes(bytes(data[1 : 1 + width]), "little"), 1 + width


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._view = memoryview(bytes(data))
        self.pos = 0

    def take(self, n: int) -> bytes:
        if self.pos + n > len(self._view):
            raise TooShortError()
        chunk = bytes(self._view[self.pos : self.pos + n])
        self.pos += n
        return chunk

    def uint32(self) -> int:
        return struct.unpack("<I", self.take(4))[0]

    def varint(self) -> int:
        value, used = decode_varint(self._view[self.pos :])
        self.pos += used
        return value


def deserialize_tx(data: bytes) -> tuple[Transaction, int]:
    """Decode a SegWit-format transaction; return it and the bytes consumed."""
    reader = _Reader(data)
    version = reader.uint32()
    marker_flag = reader.take(2)
    if marker_flag != b"\x00\x01":
        raise InvalidVarIntError("segwit marker/flag mismatch")

    inputs = []
    for _ in range(reader.varint()):
        txid = reader.take(32)
        index = reader.uint32()
        script_sig = reader.take(reader.varint())
        sequence = reader.uint32()
        inputs.append(TxInput(OutPoint(txid, index), script_sig, sequence))

    outputs = []
    for _ in range(reader.varint()):
        value = struct.unpack("<q", reader.take(8))[0]
        outputs.append(TxOutput(value, reader.take(reader.varint())))

    for tx_in in inputs:
        tx_in.witness = [reader.take(reader.varint()) for _ in range(reader.varint())]

    lock_time = reader.uint32()
    return Transaction(version, inputs, outputs, lock_time), reader.pos


def serialize_transactions(txs: Iterable[Transaction]) -> bytes:
    """Encode varint(count) followed by each serialized transaction."""
    txs = list(txs)
    return encode_varint(len(txs)) + b"".join(tx.serialize() for tx in txs)


def deserialize_transactions(data: bytes) -> list[Transaction]:
    """Decode a counted list of transactions; empty input gives []."""
    if len(data) == 0:
        return []
    view = memoryview(bytes(data))
    count, pos = decode_varint(view)
    txs = []
    for _ in range(count):
        tx, consumed = deserialize_tx(view[pos:])
        txs.append(tx)
        pos += consumed
    return txs