"""Shared fixtures: temporary chain databases and a chain builder."""

import pytest

from blockchain_core import Block, BlockStore

#Reloj fijo para que las revisiones de timestamp sean reproducibles
NOW = 1_700_000_000


def build_chain(n, start=NOW - 1000, step=10, genesis_prev="0"):
    blocks = []
    prev_hash = genesis_prev
    for i in range(n):
        block = Block(i, prev_hash, f"Transaction data for block {i}", start + i * step)
        blocks.append(block)
        prev_hash = block.hash
    return blocks


def relink(blocks):
    """Recompute hashes and prev links after blocks were edited."""
    out = []
    prev_hash = blocks[0].prev_hash
    for b in blocks:
        block = Block(b.height, prev_hash, b.data, b.timestamp)
        out.append(block)
        prev_hash = block.hash
    return out


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "chain.db")


@pytest.fixture
def write_blocks():
    """Write blocks into a database, each under the key of its position."""

    def _write(path, blocks, positions=None):
        with BlockStore(path, read_only=False) as store:
            for pos, block in zip(positions or range(len(blocks)), blocks):
                store.put_raw(pos, block.to_json().encode("utf-8"))
        return path

    return _write


@pytest.fixture
def open_store():
    stores = []

    def _open(path):
        store = BlockStore(path)
        stores.append(store)
        return store

    yield _open
    for store in stores:
        store.close()
