# malairte

Building blocks for a Malairt blockchain node: transaction and block
primitives with their wire formats, a key-value storage layer, and helpers
for answering Bitcoin-style JSON-RPC requests.

The package needs nothing beyond the Python standard library and supports
Python 3.10 and later.

## What is inside

### `malairte.primitives`

- **Output scripts** (`malairte.primitives.address`): build, recognise and
  unpack the standard locking scripts. The `extract_*` functions return
  `None` when the script does not match the template. The builders raise
  `ValueError` when given a hash or key of the wrong length.
  - `p2pkh_script`, `is_p2pkh_script`, `extract_p2pkh_hash`: the 25-byte
    Pay-to-Public-Key-Hash script.
  - `p2wpkh_script`, `is_p2wpkh_script`, `extract_p2wpkh_hash`: the 22-byte
    native SegWit v0 script.
  - `p2tr_script`, `is_p2tr_script`, `extract_p2tr_key`: the 34-byte
    taproot (SegWit v1) script.
- **Transactions** (`malairte.primitives.transaction`):
  - The dataclasses `OutPoint`, `TxInput`, `TxOutput` and `Transaction`.
  - `Transaction.serialize()` writes the SegWit format, with marker, flag
    and one witness stack per input. `serialize_base()` writes the same
    transaction without any witness data.
  - `txid()` hashes the base form. `wtxid()` hashes the full form and is
    all zeros for a coinbase.
  - `base_size()`, `total_size()` and `weight()` give the sizes and the
    weight. Base bytes count four weight units each, witness bytes one.
  - `is_coinbase()` tells a coinbase from an ordinary transaction.
  - `encode_varint` and `decode_varint` handle compact-size integers.
  - `deserialize_tx` returns a transaction and the number of bytes it
    consumed. `serialize_transactions` and `deserialize_transactions`
    handle counted lists.
  - Every hash is `double_sha3_256`.
- **Blocks** (`malairte.primitives.block`):
  - `BlockHeader` serializes to exactly 96 little-endian bytes, and
    `hash()` hashes that serialization. `deserialize_block_header` reads a
    header back.
  - `Block` has `serialize()`, `base_size()`, `total_size()` and
    `weight()`, and `deserialize_block` reads a block back.
  - `calc_merkle_root` builds the root over txids, and
    `calc_witness_merkle_root` builds it over wtxids. Both duplicate the
    last hash on odd levels and return all zeros for an empty list.
  - `compute_witness_commitment`, `build_witness_commitment_script` and
    `extract_witness_commitment` handle the 38-byte OP_RETURN commitment.
    When a coinbase carries several commitments, the last one wins.
  - `new_coinbase_tx(height, reward, script_pubkey, extra_nonce)` builds a
    coinbase whose scriptSig holds the height and the extra nonce. At
    height 0 it also holds the genesis message.
- **Errors** (`malairte.primitives.errors`): malformed input raises
  `DeserializationError`, which is a `ValueError`. It has two subclasses:
  - `TooShortError` when the data ends early.
  - `InvalidVarIntError` for a bad varint or a bad SegWit marker and flag.

### `malairte.storage`

- `malairte.storage.base` defines the `Database` interface and `Batch`.
  - A batch queues `put` and `delete` calls and applies them all at once
    on `write()`.
  - Used as a context manager, a batch is written on a clean exit and
    discarded if an exception escapes.
  - `items_with_prefix(prefix)` yields `(key, value)` pairs in key order.
  - `get` raises `NotFoundError` for a missing key.
  - Databases are context managers that close on exit. Using a closed
    database raises `RuntimeError`.
- `MemoryDatabase` is a dictionary-backed implementation, suited to tests
  and short-lived tools.
- `malairte.storage.sqlite.open_sqlite(path)` creates the directory at
  `path` if needed and opens `chain.sqlite` inside it. It returns a
  thread-safe `SqliteDatabase`.
- The module also defines the key-prefix constants used for chain data,
  such as `PREFIX_BLOCK`, `PREFIX_UTXO` and `KEY_BEST_TIP`.

### `malairte.rpc`

- `malairte.rpc.params` coerces loosely typed JSON parameters.
  - `parse_hash` decodes a 32-byte hash from a hex string.
  - `to_uint64` accepts numbers and leading decimal digits in strings.
  - `to_int` is the signed 64-bit reading of `to_uint64`.
  - `to_bool` accepts booleans and numbers.
  - All of them raise `ValueError` on bad input.
- `malairte.rpc.jsonify` builds reply objects.
  - `tx_to_json` reports values in coins (atoms / 100,000,000). It marks
    the first input of a coinbase with `coinbase` instead of `scriptsig`.
  - `header_to_json` includes hex hashes, the compact bits as eight hex
    digits, and the difficulty relative to the genesis target
    `0x207fffff`.

## What this package does not do

There is no JSON-RPC server here: nothing listens on a socket, parses
requests, dispatches methods or checks HTTP authentication. There is also
no chain state, block validation, mempool, miner or peer-to-peer
networking. The package provides the data structures, storage and JSON
views that such components would be built from.

## Examples

Build a pay-to-public-key-hash output script and read the hash back:

```python
from malairte.primitives.address import p2pkh_script, extract_p2pkh_hash

pub_key_hash = bytes(range(1, 21))
script = p2pkh_script(pub_key_hash)
assert len(script) == 25
assert extract_p2pkh_hash(script) == pub_key_hash
```

Encode and decode a variable-length integer:

```python
from malairte.primitives.transaction import encode_varint, decode_varint

encoded = encode_varint(300)          # b"\xfd\x2c\x01"
value, consumed = decode_varint(encoded)
assert (value, consumed) == (300, 3)
```

Round-trip a coinbase transaction:

```python
from malairte.primitives.block import new_coinbase_tx
from malairte.primitives.transaction import deserialize_tx

tx = new_coinbase_tx(100, 5_000_000_000, b"\x51", 0)
decoded, consumed = deserialize_tx(tx.serialize())
assert decoded.txid() == tx.txid()
assert decoded.is_coinbase()
```

Store keys atomically with a batch:

```python
from malairte.storage.base import MemoryDatabase, NotFoundError

with MemoryDatabase() as db:
    with db.new_batch() as batch:
        batch.put(b"u/a", b"1")
        batch.put(b"u/b", b"2")

    print(dict(db.items_with_prefix(b"u/")))

    db.delete(b"u/a")
    try:
        db.get(b"u/a")
    except NotFoundError:
        print("gone")
```

## Running the tests

Install the package with its `test` extra, then run `pytest` from the
project root.