"""Standard output script templates: P2PKH, P2WPKH and P2TR."""

OP_DUP = 0x76
OP_HASH160 = 0xA9
OP_EQUALVERIFY = 0x88
OP_CHECKSIG = 0xAC
OP_DATA_20 = 0x14
OP_DATA_32 = 0x20
OP_0 = 0x00
OP_1 = 0x51


def _check_length(value: bytes, size: int, what: str) -> bytes:
    value = bytes(value)
    if len(value) != size:
        raise ValueError(f"{what} must be {size} bytes, got {len(value)}")
    return value


def p2pkh_script(pub_key_hash: bytes) -> bytes:
    """Build OP_DUP OP_HASH160 <hash20> OP_EQUALVERIFY OP_CHECKSIG."""
    pub_key_hash = _check_length(pub_key_hash, 20, "pubkey hash")
    return (
        bytes((OP_DUP, OP_HASH160, OP_DATA_20))
        + pub_key_hash
        + bytes((OP_EQUALVERIFY, OP_CHECKSIG))
    )


def is_p2pkh_script(script: bytes) -> bool:
    """Return True if script is exactly a 25-byte P2PKH template."""
    return (
        len(script) == 25
        and script[0] == OP_DUP
        and script[1] == OP_HASH160
        and script[2] == OP_DATA_20
        and script[23] == OP_EQUALVERIFY
        and script[24] == OP_CHECKSIG
    )


def extract_p2pkh_hash(script: bytes) -> bytes | None:
    """Return the 20-byte pubkey hash of a P2PKH script, or None."""
    if not is_p2pkh_script(script):
        return None
    return bytes(script[3:23])


def p2wpkh_script(pub_key_hash: bytes) -> bytes:
    """Build the 22-byte SegWit v0 script OP_0 <push 20> <hash20>."""
    pub_key_hash = _check_length(pub_key_hash, 20, "pubkey hash")
    return bytes((OP_0, OP_DATA_20)) + pub_key_hash


def is_p2wpkh_script(script: bytes) -> bool:
    """Return True if script is a 22-byte witness-v0 pubkey-hash program."""
    return len(script) == 22 and script[0] == OP_0 and script[1] == OP_DATA_20


def extract_p2wpkh_hash(script: bytes) -> bytes | None:
    """Return the 20-byte pubkey hash of a P2WPKH script, or None."""
    if not is_p2wpkh_script(script):
        return None
    return bytes(script[2:22])


def p2tr_script(xonly: bytes) -> bytes:
    """Build the 34-byte taproot script OP_1 <push 32> <x-only key>."""
    xonly = _check_length(xonly, 32, "x-only key")
    return bytes((OP_1, OP_DATA_32)) + xonly


def is_p2tr_script(script: bytes) -> bool:
    """Return True if script is a 34-byte P2TR output."""
    return len(script) == 34 and script[0] == OP_1 and script[1] == OP_DATA_32


def extract_p2tr_key(script: bytes) -> bytes | None:
    """Return the 32-byte x-only output key of a P2TR script, or None."""
    if not is_p2tr_script(script):
        return None
    return bytes(script[2:34])