import logging
import time

from blockchain_core import Block, BlockStore
from config import GENESIS_PREV_HASH, SAMPLE_BLOCK_INTERVAL

logger = logging.getLogger(__name__)


def load_sample_data(db_path: str, num_blocks: int, start_time: int = None, verbose: bool = True):
    """Write a valid chain of ``num_blocks`` blocks into ``db_path``.

    Returns the list of blocks written.
    """
    if start_time is None:
        start_time = int(time.time())

    written = []
    with BlockStore(db_path, read_only=False) as store:
        if verbose:
            print(f"Loading {num_blocks} sample blocks into {db_path}...")

        prev_hash = GENESIS_PREV_HASH
        for i in range(num_blocks):
            block = Block(
                i,
                prev_hash,
                f"Transaction data for block {i}",
                start_time + i * SAMPLE_BLOCK_INTERVAL,
            )
            store.put(block)
            written.append(block)
            if verbose:
                print(f"  + Block {i} stored")
            prev_hash = block.hash

    logger.info("Loaded %d blocks into %s", num_blocks, db_path)
    if verbose:
        print("\nData loading complete!")
    return written


#Inyeccion de fallos para demos


def corrupt_block(store: BlockStore, height: int):
    #Reemplazamos el registro con bytes que no son JSON valido
    logger.warning("Corrupting block %d in %s", height, store.db_file)
    store.put_raw(height, b'{"height": ' + str(height).encode() + b', "hash": ')


def tamper_block_data(store: BlockStore, height: int, data: str = "tampered"):
    #Cambiamos los datos pero mantenemos el hash guardado, asi ya no coincide
    block = store.get(height)
    if block is None:
        raise KeyError(f"block {height} not found")
    logger.warning("Tampering with data of block %d in %s", height, store.db_file)
    store.put(Block(block.height, block.prev_hash, data, block.timestamp, block.hash))


def remove_block(store: BlockStore, height: int):
    logger.warning("Removing block %d from %s", height, store.db_file)
    store.delete(height)
