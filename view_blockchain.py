import time
from typing import Any, Dict

from blockchain_core import BlockDecodeError, BlockStore
from config import SCAN_OVERSCAN


def view_block(store: BlockStore, height: int) -> str:
    #Muestra un solo bloque con todos sus campos
    try:
        block = store.get(height)
    except BlockDecodeError as e:
        return f"Error loading block {height}: {e}"
    if block is None:
        return f"Error loading block {height}: not found"

    stamp = time.strftime("%Y-%m-%d %H:%M:%S UTC", time.gmtime(block.timestamp))
    return "\n".join([
        "",
        f"=== Block {block.height} ===",
        f"Hash:      {block.hash}",
        f"PrevHash:  {block.prev_hash}",
        f"Timestamp: {stamp} (Unix: {block.timestamp})",
        f"Data:      {block.data}",
        "",
    ])


def chain_stats(store: BlockStore, overscan: int = SCAN_OVERSCAN) -> Dict[str, Any]:
    """Count blocks, average block time, gaps and duplicate hashes.

    Walks up from genesis; a hole is only treated as a gap when more blocks
    turn up within ``overscan`` heights of the last one read.
    """
    height = 0
    block_count = 0
    seen_hashes = {}
    duplicates = []
    pending = []
    gaps = []
    total_time_diff = 0
    prev_timestamp = None
    latest_height = -1

    while True:
        try:
            block = store.get(height)
        except BlockDecodeError:
            block = None

        if block is None:
            if block_count > 0 and height < latest_height + overscan:
                pending.append(height)
                height += 1
                continue
            break

        gaps.extend(pending)
        pending = []

        if block.hash in seen_hashes:
            duplicates.append(
                f"Block {block.height} duplicates hash from Block {seen_hashes[block.hash]}"
            )
        else:
            seen_hashes[block.hash] = block.height

        if prev_timestamp is not None:
            total_time_diff += block.timestamp - prev_timestamp
        prev_timestamp = block.timestamp
        latest_height = height
        block_count += 1
        height += 1

    avg_block_time = total_time_diff / (block_count - 1) if block_count > 1 else 0.0

    return {
        "height": latest_height,
        "total_blocks": block_count,
        "average_block_time": avg_block_time,
        "gaps": gaps,
        "duplicates": duplicates,
    }


def format_stats(stats: Dict[str, Any]) -> str:
    lines = [
        "",
        "=== Blockchain Stats ===",
        "",
        f"Height: {stats['height']}",
        f"Total Blocks: {stats['total_blocks']}",
        f"Average Block Time: {stats['average_block_time']:.2f} seconds",
        "",
        "--- Gap Detection ---",
    ]
    if stats["gaps"]:
        lines.append(f"Gaps detected at heights: {stats['gaps']}")
    else:
        lines.append("No gaps detected")

    lines.append("")
    lines.append("--- Duplicate Hash Detection ---")
    if stats["duplicates"]:
        lines.extend(stats["duplicates"])
    else:
        lines.append("No duplicate hashes detected")
    lines.append("")
    return "\n".join(lines)
