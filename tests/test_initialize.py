"""Sample data loading, fault injection and the demo node network."""

import os

import pytest

from blockchain_core import BlockDecodeError, BlockStore
from compare_nodes import compare_nodes
from conftest import NOW
from initialize import corrupt_block, load_sample_data, remove_block, tamper_block_data
from setup_network import list_nodes, node_db_path, setup_environment
from verify_integrity import STATUS_HEALTHY, FindingKind, scan_errors


def test_load_sample_data_writes_a_healthy_chain(db_path, capsys):
    blocks = load_sample_data(db_path, 5, start_time=NOW - 100)
    assert "Block 4 stored" in capsys.readouterr().out
    assert [b.timestamp for b in blocks] == [NOW - 100 + 10 * i for i in range(5)]

    with BlockStore(db_path) as store:
        assert store.max_height() == 4
        assert store.get(3).data == "Transaction data for block 3"
        result = scan_errors(store, db_path, now=NOW)
    assert result.status == STATUS_HEALTHY


def test_fault_injection(db_path):
    load_sample_data(db_path, 6, start_time=NOW - 100, verbose=False)
    with BlockStore(db_path, read_only=False) as store:
        corrupt_block(store, 1)
        tamper_block_data(store, 3)
        remove_block(store, 5)

        with pytest.raises(BlockDecodeError):
            store.get(1)
        assert store.get(3).data == "tampered"
        assert store.get(5) is None

        with pytest.raises(KeyError):
            tamper_block_data(store, 42)

        result = scan_errors(store, db_path, now=NOW)
    assert result.corrupted_json and result.corrupted_json[0].startswith("Block 1:")
    assert result.bad_hash == ["Block 3: Bad hash"]


def test_setup_environment(tmp_path, capsys):
    nodes_dir = str(tmp_path / "nodes")
    os.makedirs(os.path.join(nodes_dir, "stale"))

    nodes = setup_environment(nodes_dir, num_blocks=10, start_time=NOW - 500)
    assert nodes == ["node1", "node2", "node3"]
    assert not os.path.exists(os.path.join(nodes_dir, "stale"))
    assert "Network setup complete." in capsys.readouterr().out

    p1, p2, p3 = (node_db_path(nodes_dir, n) for n in nodes)
    with BlockStore(p1) as s1, BlockStore(p2) as s2:
        result = compare_nodes(s1, s2, p1, p2, now=NOW)
    assert result.node1_only_blocks == [7, 8, 9]
    assert result.divergence_point == 7

    with BlockStore(p3) as s3:
        scan = scan_errors(s3, p3, now=NOW)
    assert [f.height for f in scan.of_kind(FindingKind.BAD_HASH)] == [5]


def test_list_nodes_ignores_dirs_without_database(tmp_path):
    nodes_dir = tmp_path / "nodes"
    (nodes_dir / "empty_dir").mkdir(parents=True)
    assert list_nodes(str(nodes_dir)) == []
    assert list_nodes(str(tmp_path / "missing")) == []
