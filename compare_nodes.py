import logging
import time
from typing import List, Optional

from blockchain_core import Block, BlockDecodeError, BlockStore

logger = logging.getLogger(__name__)

EARLY_DIVERGENCE_HEIGHT = 10
TIMESTAMP_DRIFT_LIMIT = 3


class ComparisonResult:
    def __init__(self, scan_time: str, node1_path: str, node2_path: str):
        self.scan_time = scan_time
        self.node1_path = node1_path
        self.node2_path = node2_path
        self.node1_height = -1
        self.node2_height = -1
        self.matching_blocks = 0
        self.mismatched_blocks: List[int] = []
        #Alturas que solo tiene un lado; al otro le faltan
        self.node1_only_blocks: List[int] = []
        self.node2_only_blocks: List[int] = []
        self.divergence_point = -1
        self.hash_mismatches: List[str] = []
        self.data_mismatches: List[str] = []
        self.timestamp_mismatches: List[str] = []
        self.sync_percentage = 0.0
        self.recommendations: List[str] = []

    def mark_divergence(self, height: int):
        if self.divergence_point == -1:
            self.divergence_point = height

    @property
    def synchronized(self):
        return (
            self.divergence_point == -1
            and self.node1_height == self.node2_height
            and not self.data_mismatches
            and not self.timestamp_mismatches
        )

    def to_dict(self):
        return {
            "scan_time": self.scan_time,
            "node1_path": self.node1_path,
            "node2_path": self.node2_path,
            "node1_height": self.node1_height,
            "node2_height": self.node2_height,
            "matching_blocks": self.matching_blocks,
            "mismatched_blocks": list(self.mismatched_blocks),
            "node1_only_blocks": list(self.node1_only_blocks),
            "node2_only_blocks": list(self.node2_only_blocks),
            "divergence_point": self.divergence_point,
            "hash_mismatches": list(self.hash_mismatches),
            "data_mismatches": list(self.data_mismatches),
            "timestamp_mismatches": list(self.timestamp_mismatches),
            "sync_percentage": self.sync_percentage,
            "recommendations": list(self.recommendations),
        }


def _load(store: BlockStore, height: int) -> Optional[Block]:
    #Un registro ilegible no sirve para comparar, igual que uno ausente
    try:
        return store.get(height)
    except BlockDecodeError as e:
        logger.debug("Block %d in %s does not decode: %s", height, store.db_file, e)
        return None


def compare_nodes(
    store1: BlockStore,
    store2: BlockStore,
    node1_path: str,
    node2_path: str,
    now: int = None,
) -> ComparisonResult:
    """Walk two chains side by side and report where and how they differ."""
    if now is None:
        now = int(time.time())
    result = ComparisonResult(
        time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(now)), node1_path, node2_path
    )

    result.node1_height = store1.max_height()
    result.node2_height = store2.max_height()
    scan_limit = max(result.node1_height, result.node2_height)

    for i in range(scan_limit + 1):
        block1 = _load(store1, i)
        block2 = _load(store2, i)

        if block1 is None and block2 is None:
            continue

        if block1 is None:
            result.node2_only_blocks.append(i)
            result.mark_divergence(i)
            continue

        if block2 is None:
            result.node1_only_blocks.append(i)
            result.mark_divergence(i)
            continue

        if block1.hash != block2.hash:
            result.mismatched_blocks.append(i)
            result.mark_divergence(i)
            result.hash_mismatches.append(f"Block {i}: Hash mismatch")
        else:
            result.matching_blocks += 1

        if block1.data != block2.data:
            result.data_mismatches.append(f"Block {i}: Data differs")

        if block1.timestamp != block2.timestamp:
            diff = block2.timestamp - block1.timestamp
            result.timestamp_mismatches.append(f"Block {i}: Timestamp differs by {diff:+d}s")

    if scan_limit >= 0:
        result.sync_percentage = result.matching_blocks * 100 / (scan_limit + 1)

    result.recommendations = generate_recommendations(result)
    logger.info(
        "Compared %s and %s: %d matching, divergence at %d",
        node1_path, node2_path, result.matching_blocks, result.divergence_point,
    )
    return result


def generate_recommendations(result: ComparisonResult) -> List[str]:
    recs = []

    height_diff = result.node1_height - result.node2_height
    if height_diff > 0:
        recs.append(f"Node2 is {height_diff} blocks behind - sync from Node1")
    elif height_diff < 0:
        recs.append(f"Node1 is {-height_diff} blocks behind - sync from Node2")

    if result.divergence_point >= 0:
        recs.append(f"Chains diverge at block {result.divergence_point} - investigate fork cause")
        if result.divergence_point < EARLY_DIVERGENCE_HEIGHT:
            recs.append("Early divergence detected - possible genesis block issue")

    if result.hash_mismatches:
        recs.append(
            f"Found {len(result.hash_mismatches)} hash mismatches - possible data corruption or fork"
        )

    if result.node1_only_blocks:
        recs.append(f"Node2 missing {len(result.node1_only_blocks)} blocks - sync required")
    if result.node2_only_blocks:
        recs.append(f"Node1 missing {len(result.node2_only_blocks)} blocks - sync required")

    if len(result.timestamp_mismatches) > TIMESTAMP_DRIFT_LIMIT:
        recs.append("Multiple timestamp mismatches - check node time synchronization")

    if not recs:
        recs.append("Nodes are perfectly synchronized - no action needed")

    return recs
