import logging
import math
import time
from enum import Enum
from typing import Any, Dict, List, Optional

from blockchain_core import Block, BlockDecodeError, BlockStore
from config import (
    FUTURE_TOLERANCE_SECONDS,
    GENESIS_PREV_HASH,
    MAX_AGE_SECONDS,
    SCAN_OVERSCAN,
)

logger = logging.getLogger(__name__)

STATUS_EMPTY = "EMPTY"
STATUS_HEALTHY = "HEALTHY"
STATUS_ERRORS_FOUND = "ERRORS_FOUND"


class FindingKind(Enum):
    CORRUPTED_RECORD = "corrupted_json"
    BAD_HASH = "bad_hash"
    TIMESTAMP_FUTURE = "timestamp_future"
    TIMESTAMP_PAST = "timestamp_past"
    TIMESTAMP_NOT_INCREASING = "timestamp_not_increasing"
    DUPLICATE_HASH = "duplicate_hashes"
    EMPTY_BLOCK = "empty_blocks"
    PREVHASH_ERROR = "prevhash_errors"
    HEIGHT_ERROR = "height_errors"
    MISSING_BLOCK = "missing_blocks"
    OUT_OF_ORDER = "out_of_order_blocks"


class Finding:
    def __init__(self, kind: FindingKind, height: int, message: str, detail: Dict[str, Any] = None):
        self.kind = kind
        self.height = height
        self.message = message
        self.detail = detail if detail else {}

    def to_dict(self):
        return {
            "kind": self.kind.value,
            "height": self.height,
            "message": self.message,
            "detail": self.detail,
        }

    def __repr__(self):
        return f"Finding({self.kind.name}, {self.height}, {self.message!r})"


class ErrorScanResult:
    """Everything one integrity scan found, grouped by category."""

    def __init__(self, scan_time: str, database_path: str):
        self.scan_time = scan_time
        self.database_path = database_path
        self.total_blocks = 0
        self.blocks_scanned = 0
        self.total_errors = 0
        self.findings: List[Finding] = []
        self.health_score = 0
        self.status = STATUS_EMPTY

    def record(self, finding: Finding):
        self.findings.append(finding)
        self.total_errors += 1

    def of_kind(self, kind: FindingKind) -> List[Finding]:
        return [f for f in self.findings if f.kind is kind]

    def messages(self, kind: FindingKind) -> List[str]:
        return [f.message for f in self.of_kind(kind)]

    @property
    def corrupted_json(self):
        return self.messages(FindingKind.CORRUPTED_RECORD)

    @property
    def bad_hash(self):
        return self.messages(FindingKind.BAD_HASH)

    @property
    def timestamp_future(self):
        return self.messages(FindingKind.TIMESTAMP_FUTURE)

    @property
    def timestamp_past(self):
        return self.messages(FindingKind.TIMESTAMP_PAST)

    @property
    def timestamp_not_increasing(self):
        return self.messages(FindingKind.TIMESTAMP_NOT_INCREASING)

    @property
    def duplicate_hashes(self):
        return self.messages(FindingKind.DUPLICATE_HASH)

    @property
    def empty_blocks(self):
        return self.messages(FindingKind.EMPTY_BLOCK)

    @property
    def prevhash_errors(self):
        return self.messages(FindingKind.PREVHASH_ERROR)

    @property
    def height_errors(self):
        return self.messages(FindingKind.HEIGHT_ERROR)

    @property
    def missing_blocks(self) -> List[int]:
        return [f.height for f in self.of_kind(FindingKind.MISSING_BLOCK)]

    @property
    def out_of_order_blocks(self):
        return self.messages(FindingKind.OUT_OF_ORDER)

    def category_counts(self) -> Dict[str, int]:
        return {kind.value: len(self.of_kind(kind)) for kind in FindingKind}

    def to_dict(self):
        d = {
            "scan_time": self.scan_time,
            "database_path": self.database_path,
            "total_blocks": self.total_blocks,
            "blocks_scanned": self.blocks_scanned,
            "total_errors": self.total_errors,
        }
        for kind in FindingKind:
            d[kind.value] = getattr(self, kind.value)
        d["health_score"] = self.health_score
        d["status"] = self.status
        d["findings"] = [f.to_dict() for f in self.findings]
        return d


class _ScanState:
    """Per-scan carry: duplicate map, previous decoded block, expected height."""

    def __init__(self, now: int):
        self.now = now
        self.seen_hashes: Dict[str, int] = {}
        self.prev_block: Optional[Block] = None
        self.expected_height = 0


def health_score(blocks_scanned: int, total_errors: int) -> int:
    if blocks_scanned <= 0:
        return 0
    score = math.floor(100 * (blocks_scanned - total_errors) / blocks_scanned + 0.5)
    return max(0, min(100, score))


def scan_errors(
    store: BlockStore,
    db_path: str,
    now: int = None,
    overscan: int = SCAN_OVERSCAN,
) -> ErrorScanResult:
    """Walk the chain in ``store`` and classify every anomaly found.

    Never writes to the store and never raises for bad data: each problem
    becomes a Finding on the returned result.
    """
    if now is None:
        now = int(time.time())
    result = ErrorScanResult(
        time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(now)), db_path
    )

    height = store.max_height()
    if height < 0:
        logger.info("No blocks found in %s", db_path)
        result.status = STATUS_EMPTY
        result.health_score = 0
        return result

    result.total_blocks = height + 1
    state = _ScanState(now)
    pending_gaps: List[int] = []
    window_end = height + overscan

    i = 0
    while i <= window_end:
        raw = store.get_raw(i)
        if raw is None:
            if i <= height:
                result.record(Finding(FindingKind.MISSING_BLOCK, i, f"Block {i}: Missing"))
            else:
                #Solo es hueco si aparece un bloque real mas adelante
                pending_gaps.append(i)
            i += 1
            continue

        for gap in pending_gaps:
            result.record(Finding(FindingKind.MISSING_BLOCK, gap, f"Block {gap}: Missing"))
        pending_gaps = []

        try:
            block = Block.from_json(raw)
        except BlockDecodeError as e:
            logger.debug("Block %d does not decode: %s", i, e)
            result.record(Finding(
                FindingKind.CORRUPTED_RECORD, i,
                f"Block {i}: Corrupted JSON - {e}",
                {"error": str(e)},
            ))
            i += 1
            continue

        result.blocks_scanned += 1
        for finding in check_block(i, block, state):
            result.record(finding)

        state.prev_block = block
        state.expected_height += 1
        i += 1

    result.health_score = health_score(result.blocks_scanned, result.total_errors)
    result.status = STATUS_HEALTHY if result.total_errors == 0 else STATUS_ERRORS_FOUND
    logger.info(
        "Scanned %d blocks in %s: %d errors, health %d%%",
        result.blocks_scanned, db_path, result.total_errors, result.health_score,
    )
    return result


def check_block(i: int, block: Block, state: _ScanState) -> List[Finding]:
    """Run every per-block check; none of them stops the others."""
    findings = []
    prev = state.prev_block

    computed = block.calculate_hash()
    if block.hash != computed:
        findings.append(Finding(
            FindingKind.BAD_HASH, i, f"Block {i}: Bad hash",
            {"stored": block.hash, "computed": computed},
        ))

    if block.hash in state.seen_hashes:
        first = state.seen_hashes[block.hash]
        findings.append(Finding(
            FindingKind.DUPLICATE_HASH, i,
            f"Block {i} duplicates hash from Block {first}",
            {"first_height": first},
        ))
    else:
        state.seen_hashes[block.hash] = i

    if block.timestamp > state.now + FUTURE_TOLERANCE_SECONDS:
        findings.append(Finding(
            FindingKind.TIMESTAMP_FUTURE, i, f"Block {i}: Timestamp in future",
            {"timestamp": block.timestamp, "ahead_by": block.timestamp - state.now},
        ))

    if block.timestamp < state.now - MAX_AGE_SECONDS:
        findings.append(Finding(
            FindingKind.TIMESTAMP_PAST, i, f"Block {i}: Timestamp too old",
            {"timestamp": block.timestamp},
        ))

    if prev is not None and block.timestamp <= prev.timestamp:
        findings.append(Finding(
            FindingKind.TIMESTAMP_NOT_INCREASING, i, f"Block {i}: Timestamp not increasing",
            {"timestamp": block.timestamp, "previous": prev.timestamp},
        ))

    if not block.data.strip():
        findings.append(Finding(FindingKind.EMPTY_BLOCK, i, f"Block {i}: Empty block"))

    if i == 0:
        if block.prev_hash != GENESIS_PREV_HASH:
            findings.append(Finding(
                FindingKind.PREVHASH_ERROR, i, "Block 0: Invalid genesis prevHash",
                {"prev_hash": block.prev_hash},
            ))
    elif prev is not None and block.prev_hash != prev.hash:
        findings.append(Finding(
            FindingKind.PREVHASH_ERROR, i, f"Block {i}: PrevHash linkage broken",
            {"prev_hash": block.prev_hash, "expected": prev.hash},
        ))

    expected = state.expected_height
    if block.height != expected:
        findings.append(Finding(
            FindingKind.HEIGHT_ERROR, i,
            f"Block {i}: Height mismatch (expected {expected}, got {block.height})",
            {"expected": expected, "stored": block.height},
        ))

    if block.height < expected:
        findings.append(Finding(
            FindingKind.OUT_OF_ORDER, i,
            f"Block {i}: Out of order (stored height {block.height} before {expected})",
            {"expected": expected, "stored": block.height},
        ))

    return findings
