import pytest

from malairte.primitives.errors import (
    DeserializationError,
    InvalidVarIntError,
    TooShortError,
)
from malairte.primitives.transaction import (
    WITNESS_SCALE_FACTOR,
    OutPoint,
    Transaction,
    TxInput,
    TxOutput,
    decode_varint,
    deserialize_transactions,
    deserialize_tx,
    double_sha3_256,
    encode_varint,
    serialize_transactions,
)

P2PKH_SPK = bytes.fromhex("76a914" + "0102030405060708090a0b0c0d0e0f1011121314" + "88ac")


def _txid_prefix(*prefix: int) -> bytes:
    return bytes(prefix) + bytes(32 - len(prefix))


def _simple_tx(witness=None) -> Transaction:
    return Transaction(
        version=1,
        inputs=[
            TxInput(
                OutPoint(_txid_prefix(1), 0),
                script_sig=b"\x51" if witness is None else b"",
                sequence=0xFFFFFFFF,
                witness=witness or [],
            )
        ],
        outputs=[TxOutput(100, b"\x51")],
    )


def test_serialize_deserialize():
    tx = Transaction(
        version=1,
        inputs=[TxInput(OutPoint(_txid_prefix(1, 2, 3), 0), b"\x01\x02\x03", 0xFFFFFFFF)],
        outputs=[TxOutput(5_000_000_000, P2PKH_SPK)],
    )
    data = tx.serialize()
    assert len(data) > 0
    decoded, consumed = deserialize_tx(data)
    assert consumed == len(data)
    assert decoded.version == 1
    assert len(decoded.inputs) == 1
    assert len(decoded.outputs) == 1
    assert decoded.outputs[0].value == 5_000_000_000
    assert decoded == tx


def test_coinbase_is_coinbase():
    tx = Transaction(
        inputs=[TxInput(OutPoint(bytes(32), 0xFFFFFFFF), b"genesis", 0xFFFFFFFF)],
        outputs=[TxOutput(5_000_000_000, b"\xac")],
    )
    assert tx.is_coinbase() is True
    assert tx.wtxid() == bytes(32)


def test_non_coinbase_is_not_coinbase():
    tx = Transaction(
        inputs=[TxInput(OutPoint(_txid_prefix(1, 2, 3), 0), b"\x01", 0xFFFFFFFF)],
        outputs=[TxOutput(1000, b"\xac")],
    )
    assert tx.is_coinbase() is False
    assert Transaction().is_coinbase() is False


def test_txid_deterministic():
    tx = Transaction(
        inputs=[TxInput(OutPoint(bytes(32), 0), b"\xab", 0xFFFFFFFF)],
        outputs=[TxOutput(1000, b"\x01")],
    )
    assert tx.txid() == tx.txid()
    assert len(tx.txid()) == 32
    assert tx.txid() == double_sha3_256(tx.serialize_base())


@pytest.mark.parametrize(
    "value", [0, 1, 0xFC, 0xFD, 0xFFFF, 0x10000, 0xFFFFFFFF, 0x100000000]
)
def test_varint_round_trip(value):
    encoded = encode_varint(value)
    decoded, consumed = decode_varint(encoded)
    assert decoded == value
    assert consumed == len(encoded)


@pytest.mark.parametrize(
    "value,expected",
    [
        (0xFC, b"\xfc"),
        (0xFD, b"\xfd\xfd\x00"),
        (0xFFFF, b"\xfd\xff\xff"),
        (0x10000, b"\xfe\x00\x00\x01\x00"),
        (0x100000000, b"\xff\x00\x00\x00\x00\x01\x00\x00\x00"),
    ],
)
def test_varint_encoding_bytes(value, expected):
    assert encode_varint(value) == expected


@pytest.mark.parametrize("data", [b"", b"\xfd\x01", b"\xfe\x01\x02", b"\xff" + bytes(7)])
def test_varint_truncated(data):
    with pytest.raises(InvalidVarIntError):
        decode_varint(data)


def test_varint_out_of_range():
    with pytest.raises(ValueError):
        encode_varint(-1)


def test_serialize_transactions_round_trip():
    txs = [
        Transaction(
            inputs=[TxInput(OutPoint(bytes(32), 0xFFFFFFFF), b"cb", 0xFFFFFFFF)],
            outputs=[TxOutput(100, b"\x51")],
        ),
        Transaction(
            inputs=[TxInput(OutPoint(_txid_prefix(5), 1), b"\x02", 0)],
            outputs=[TxOutput(50, b"\x52")],
        ),
    ]
    decoded = deserialize_transactions(serialize_transactions(txs))
    assert len(decoded) == len(txs)
    assert [tx.serialize() for tx in decoded] == [tx.serialize() for tx in txs]


def test_deserialize_transactions_empty():
    assert deserialize_transactions(b"") == []


def test_weight_empty_witness():
    tx = _simple_tx()
    assert tx.base_size() == 62
    assert tx.total_size() == 65
    assert tx.total_size() - tx.base_size() == 3
    assert tx.weight() == 251
    assert WITNESS_SCALE_FACTOR == 4


def test_witness_round_trip_and_malleability():
    tx = _simple_tx(witness=[b"\xaa\xbb\xcc", b"\xdd"])
    assert tx.weight() == tx.base_size() * 4 + (tx.total_size() - tx.base_size())
    decoded, _ = deserialize_tx(tx.serialize())
    assert decoded.inputs[0].witness == [b"\xaa\xbb\xcc", b"\xdd"]

    other = _simple_tx(witness=[b"\xff"])
    assert other.txid() == tx.txid()
    assert other.wtxid() != tx.wtxid()


def test_negative_value_round_trip():
    tx = Transaction(inputs=[], outputs=[TxOutput(-5, b"")])
    decoded, _ = deserialize_tx(tx.serialize())
    assert decoded.outputs[0].value == -5


def test_deserialize_too_short():
    with pytest.raises(TooShortError):
        deserialize_tx(b"\x01\x00")
    data = _simple_tx().serialize()
    with pytest.raises(DeserializationError):
        deserialize_tx(data[:-1])


def test_deserialize_missing_marker():
    data = _simple_tx().serialize_base()
    with pytest.raises(InvalidVarIntError):
        deserialize_tx(data)


def test_outpoint_rejects_bad_txid_length():
    with pytest.raises(ValueError):
        OutPoint(b"\x00" * 31, 0)