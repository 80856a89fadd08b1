import hashlib
import json
import logging
import os
import pathlib
import sqlite3
from typing import Any, Dict, Optional

from config import GENESIS_PREV_HASH

logger = logging.getLogger(__name__)


#Errores


class StoreError(Exception):
    """Base class for block store access faults."""


class StoreOpenError(StoreError):
    pass


class BlockWriteError(StoreError):
    pass


class BlockDecodeError(ValueError):
    """A stored record could not be turned back into a Block."""


#Modelos de Datos


def compute_hash(height: int, prev_hash: str, data: str, timestamp: int) -> str:
    #El orden es height, prev_hash, data y timestamp concatenados como texto
    #Si cambia, ninguna cadena guardada se puede verificar
    record = str(height) + prev_hash + data + str(timestamp)
    return hashlib.sha256(record.encode("utf-8")).hexdigest()


class Block:
    def __init__(
        self,
        height: int,
        prev_hash: str,
        data: str,
        timestamp: int,
        hash: str = None,
    ):
        self.height = height
        self.prev_hash = prev_hash
        self.data = data
        self.timestamp = timestamp
        self.hash = hash if hash is not None else self.calculate_hash()

    def calculate_hash(self):
        return compute_hash(self.height, self.prev_hash, self.data, self.timestamp)

    def to_dict(self):
        return {
            "height": self.height,
            "hash": self.hash,
            "prev_hash": self.prev_hash,
            "data": self.data,
            "timestamp": self.timestamp,
        }

    def to_json(self):
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @staticmethod
    def from_json(raw):
        """Rebuild a block from its stored JSON record.

        Fields that are absent fall back to zero values; fields that are
        present with the wrong type make the record undecodable.
        """
        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = bytes(raw).decode("utf-8")
            except UnicodeDecodeError as e:
                raise BlockDecodeError(f"invalid utf-8: {e}") from e
        try:
            d = json.loads(raw)
        except json.JSONDecodeError as e:
            raise BlockDecodeError(str(e)) from e
        if not isinstance(d, dict):
            raise BlockDecodeError(f"expected a JSON object, got {type(d).__name__}")

        return Block(
            _field(d, "height", int, 0),
            _field(d, "prev_hash", str, ""),
            _field(d, "data", str, ""),
            _field(d, "timestamp", int, 0),
            _field(d, "hash", str, ""),
        )

    def __eq__(self, other):
        if not isinstance(other, Block):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Block(height={self.height}, hash={self.hash[:12]}...)"


def _field(d: Dict[str, Any], name: str, kind: type, default):
    value = d.get(name)
    if value is None:
        return default
    #bool es subclase de int, pero un true de JSON no es una altura
    if isinstance(value, bool) or not isinstance(value, kind):
        raise BlockDecodeError(
            f"field {name!r}: expected {kind.__name__}, got {type(value).__name__}"
        )
    return value


def block_key(height: int) -> str:
    return f"block-{height}"


def make_genesis(data: str, timestamp: int) -> Block:
    return Block(0, GENESIS_PREV_HASH, data, timestamp)


#Almacen de Bloques


class BlockStore:
    """Height-indexed key-value view over a node's sqlite database.

    Each block is one row of the ``blocks`` table, keyed ``block-<height>``
    and holding the block's JSON record.
    """

    def __init__(self, db_path: str, read_only: bool = True):
        self.db_file = db_path
        self.read_only = read_only
        self.conn = self._open()

    def _open(self):
        if self.read_only:
            if not os.path.isfile(self.db_file):
                raise StoreOpenError(f"failed to open database: {self.db_file} does not exist")
            uri = pathlib.Path(os.path.abspath(self.db_file)).as_uri() + "?mode=ro"
            try:
                conn = sqlite3.connect(uri, uri=True)
                table = conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='table' AND name='blocks'"
                ).fetchone()
            except sqlite3.Error as e:
                raise StoreOpenError(f"failed to open database {self.db_file}: {e}") from e
            if not table:
                conn.close()
                raise StoreOpenError(f"failed to open database {self.db_file}: no blocks table")
            logger.debug("Opened %s read-only", self.db_file)
            return conn

        parent = os.path.dirname(os.path.abspath(self.db_file))
        try:
            os.makedirs(parent, exist_ok=True)
            conn = sqlite3.connect(self.db_file)
            conn.execute(
                "CREATE TABLE IF NOT EXISTS blocks (key TEXT PRIMARY KEY, value BLOB)"
            )
            conn.commit()
        except (OSError, sqlite3.Error) as e:
            raise StoreOpenError(f"failed to open database {self.db_file}: {e}") from e
        logger.debug("Opened %s for writing", self.db_file)
        return conn

    def close(self):
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def get_raw(self, height: int) -> Optional[bytes]:
        row = self.conn.execute(
            "SELECT value FROM blocks WHERE key = ?", (block_key(height),)
        ).fetchone()
        if row is None:
            return None
        value = row[0]
        return value.encode("utf-8") if isinstance(value, str) else bytes(value)

    def get(self, height: int) -> Optional[Block]:
        raw = self.get_raw(height)
        if raw is None:
            return None
        return Block.from_json(raw)

    def put(self, block: Block):
        self.put_raw(block.height, block.to_json().encode("utf-8"))

    def put_raw(self, height: int, raw: bytes):
        if self.read_only:
            raise BlockWriteError(f"{self.db_file} is opened read-only")
        try:
            self.conn.execute(
                "INSERT OR REPLACE INTO blocks (key, value) VALUES (?, ?)",
                (block_key(height), sqlite3.Binary(raw)),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise BlockWriteError(f"failed to write block {height}: {e}") from e

    def delete(self, height: int):
        if self.read_only:
            raise BlockWriteError(f"{self.db_file} is opened read-only")
        try:
            self.conn.execute("DELETE FROM blocks WHERE key = ?", (block_key(height),))
            self.conn.commit()
        except sqlite3.Error as e:
            raise BlockWriteError(f"failed to delete block {height}: {e}") from e

    def max_height(self) -> int:
        #Altura maxima alcanzable desde genesis con todos los registros legibles
        height = 0
        while True:
            try:
                block = self.get(height)
            except BlockDecodeError:
                block = None
            if block is None:
                return height - 1
            height += 1
