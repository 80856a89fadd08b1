"""Node comparator: divergence, tallies, sync percentage and recommendations."""

import pytest

from blockchain_core import Block, BlockStore
from compare_nodes import ComparisonResult, compare_nodes, generate_recommendations
from conftest import NOW, build_chain, relink


@pytest.fixture
def paths(tmp_path):
    return str(tmp_path / "node1.db"), str(tmp_path / "node2.db")


def compare(path1, path2):
    with BlockStore(path1) as s1, BlockStore(path2) as s2:
        return compare_nodes(s1, s2, path1, path2, now=NOW)


def test_identical_chains_are_synchronized(paths, write_blocks):
    chain = build_chain(10)
    write_blocks(paths[0], chain)
    write_blocks(paths[1], chain)

    result = compare(*paths)
    assert result.matching_blocks == 10
    assert result.divergence_point == -1
    assert result.sync_percentage == 100.0
    assert result.mismatched_blocks == []
    assert result.recommendations == ["Nodes are perfectly synchronized - no action needed"]
    assert result.synchronized


def test_truncated_second_node(paths, write_blocks):
    chain = build_chain(10)
    write_blocks(paths[0], chain)
    write_blocks(paths[1], chain[:7])

    result = compare(*paths)
    assert result.node1_height == 9
    assert result.node2_height == 6
    assert result.matching_blocks == 7
    assert result.node1_only_blocks == [7, 8, 9]
    assert result.node2_only_blocks == []
    assert result.divergence_point == 7
    assert result.sync_percentage == 70.0
    assert "Node2 is 3 blocks behind - sync from Node1" in result.recommendations
    assert "Node2 missing 3 blocks - sync required" in result.recommendations
    assert not result.synchronized


def test_first_node_behind(paths, write_blocks):
    chain = build_chain(6)
    write_blocks(paths[0], chain[:4])
    write_blocks(paths[1], chain)

    result = compare(*paths)
    assert result.node2_only_blocks == [4, 5]
    assert result.recommendations[0] == "Node1 is 2 blocks behind - sync from Node2"


def test_divergence_is_earliest_disagreement(paths, write_blocks):
    chain = build_chain(10)
    other = list(chain)
    other[7] = Block(7, chain[6].hash, "forked", chain[7].timestamp)
    write_blocks(paths[0], chain)
    #node2 no tiene la altura 4 y guarda otro contenido en la 7
    write_blocks(paths[1], other[:4] + other[5:], positions=[0, 1, 2, 3, 5, 6, 7, 8, 9])

    result = compare(*paths)
    assert result.node1_only_blocks == [4]
    assert result.mismatched_blocks == [7]
    assert result.divergence_point == 4
    assert result.hash_mismatches == ["Block 7: Hash mismatch"]
    assert result.data_mismatches == ["Block 7: Data differs"]


def test_data_difference_does_not_affect_match_tally(paths, write_blocks):
    chain = build_chain(5)
    tampered = list(chain)
    b = chain[3]
    tampered[3] = Block(b.height, b.prev_hash, "other payload", b.timestamp, b.hash)
    write_blocks(paths[0], chain)
    write_blocks(paths[1], tampered)

    result = compare(*paths)
    assert result.matching_blocks == 5
    assert result.divergence_point == -1
    assert result.data_mismatches == ["Block 3: Data differs"]
    assert result.recommendations == ["Nodes are perfectly synchronized - no action needed"]
    assert not result.synchronized


def test_timestamp_difference_reports_signed_seconds(paths, write_blocks):
    chain = build_chain(5)
    shifted = list(chain)
    shifted[2] = Block(2, chain[1].hash, chain[2].data, chain[2].timestamp + 5)
    shifted = relink(shifted)
    write_blocks(paths[0], chain)
    write_blocks(paths[1], shifted)

    result = compare(*paths)
    assert result.timestamp_mismatches == ["Block 2: Timestamp differs by +5s"]
    assert result.mismatched_blocks == [2, 3, 4]
    assert result.divergence_point == 2
    assert result.matching_blocks == 2
    assert result.sync_percentage == 40.0
    assert "Found 3 hash mismatches - possible data corruption or fork" in result.recommendations


def test_undecodable_record_counts_as_absent(paths, write_blocks):
    chain = build_chain(8)
    write_blocks(paths[0], chain)
    write_blocks(paths[1], chain)
    with BlockStore(paths[0], read_only=False) as store:
        store.put_raw(5, b"{broken")

    result = compare(*paths)
    assert result.node1_height == 4
    assert result.node2_only_blocks == [5]
    assert result.matching_blocks == 7
    assert result.divergence_point == 5


def test_both_empty(paths):
    for p in paths:
        BlockStore(p, read_only=False).close()
    result = compare(*paths)
    assert result.node1_height == -1
    assert result.node2_height == -1
    assert result.sync_percentage == 0.0
    assert result.divergence_point == -1
    assert result.recommendations == ["Nodes are perfectly synchronized - no action needed"]


def test_recommendation_order_and_extras():
    result = ComparisonResult("t", "a", "b")
    result.node1_height = 20
    result.node2_height = 18
    result.divergence_point = 3
    result.hash_mismatches = ["Block 3: Hash mismatch"]
    result.node1_only_blocks = [19, 20]
    result.node2_only_blocks = [1]
    result.timestamp_mismatches = ["x"] * 4

    assert generate_recommendations(result) == [
        "Node2 is 2 blocks behind - sync from Node1",
        "Chains diverge at block 3 - investigate fork cause",
        "Early divergence detected - possible genesis block issue",
        "Found 1 hash mismatches - possible data corruption or fork",
        "Node2 missing 2 blocks - sync required",
        "Node1 missing 1 blocks - sync required",
        "Multiple timestamp mismatches - check node time synchronization",
    ]


def test_late_divergence_has_no_genesis_hint():
    result = ComparisonResult("t", "a", "b")
    result.node1_height = result.node2_height = 30
    result.divergence_point = 25
    assert generate_recommendations(result) == [
        "Chains diverge at block 25 - investigate fork cause",
    ]


def test_to_dict_is_plain_data(paths, write_blocks):
    chain = build_chain(3)
    write_blocks(paths[0], chain)
    write_blocks(paths[1], chain[:2])
    d = compare(*paths).to_dict()
    assert d["node1_only_blocks"] == [2]
    assert d["node1_path"] == paths[0]
    assert isinstance(d["sync_percentage"], float)
    assert set(d) == {
        "scan_time", "node1_path", "node2_path", "node1_height", "node2_height",
        "matching_blocks", "mismatched_blocks", "node1_only_blocks", "node2_only_blocks",
        "divergence_point", "hash_mismatches", "data_mismatches", "timestamp_mismatches",
        "sync_percentage", "recommendations",
    }
