import pytest

from malairte.primitives.address import (
    OP_1,
    OP_CHECKSIG,
    OP_DATA_20,
    OP_DATA_32,
    OP_DUP,
    OP_EQUALVERIFY,
    OP_HASH160,
    extract_p2pkh_hash,
    extract_p2tr_key,
    extract_p2wpkh_hash,
    is_p2pkh_script,
    is_p2tr_script,
    is_p2wpkh_script,
    p2pkh_script,
    p2tr_script,
    p2wpkh_script,
)


def test_p2pkh_script_layout():
    pkh = bytes(i + 1 for i in range(20))
    script = p2pkh_script(pkh)
    assert len(script) == 25
    assert script[0] == OP_DUP == 0x76
    assert script[1] == OP_HASH160 == 0xA9
    assert script[2] == OP_DATA_20 == 0x14
    assert script[3:23] == pkh
    assert script[23] == OP_EQUALVERIFY == 0x88
    assert script[24] == OP_CHECKSIG == 0xAC


def test_is_p2pkh_script():
    script = p2pkh_script(bytes(20))
    assert is_p2pkh_script(script)
    assert not is_p2pkh_script(script[:24])
    bad = bytearray(script)
    bad[0] = 0x00
    assert not is_p2pkh_script(bytes(bad))
    bad2 = bytearray(script)
    bad2[24] = 0x00
    assert not is_p2pkh_script(bytes(bad2))


def test_extract_p2pkh_hash():
    pkh = bytes((i * 5) % 256 for i in range(20))
    assert extract_p2pkh_hash(p2pkh_script(pkh)) == pkh


def test_extract_p2pkh_hash_invalid():
    assert extract_p2pkh_hash(b"\x00\x01\x02") is None


def test_p2tr_script():
    xonly = bytes(i + 1 for i in range(32))
    script = p2tr_script(xonly)
    assert len(script) == 34
    assert script[0] == OP_1 and script[1] == OP_DATA_32
    assert script[:2] == bytes.fromhex("5120")
    assert is_p2tr_script(script)
    assert extract_p2tr_key(script) == xonly
    assert not is_p2tr_script(script[:33])
    bad = bytearray(script)
    bad[0] = 0x52
    assert not is_p2tr_script(bytes(bad))
    assert extract_p2tr_key(bytes(bad)) is None


def test_p2wpkh_script():
    pkh = bytes(0xA0 | i for i in range(20))
    script = p2wpkh_script(pkh)
    assert len(script) == 22
    assert script[0] == 0x00 and script[1] == OP_DATA_20
    assert is_p2wpkh_script(script)
    assert extract_p2wpkh_hash(script) == pkh
    assert extract_p2wpkh_hash(p2pkh_script(pkh)) is None


def test_p2pkh_round_trip():
    pkh = bytearray(20)
    pkh[0] = 0xAB
    pkh[19] = 0xCD
    assert extract_p2pkh_hash(p2pkh_script(bytes(pkh))) == bytes(pkh)


@pytest.mark.parametrize(
    "builder,size",
    [(p2pkh_script, 19), (p2wpkh_script, 21), (p2tr_script, 31)],
)
def test_wrong_length_rejected(builder, size):
    with pytest.raises(ValueError):
        builder(bytes(size))