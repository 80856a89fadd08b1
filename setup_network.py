import logging
import os
import shutil
import sys
import time

from blockchain_core import BlockStore
from config import NODE_DB_FILE, NODES_DIR, SAMPLE_BLOCKS
from initialize import load_sample_data, remove_block, tamper_block_data

logger = logging.getLogger(__name__)


def node_db_path(nodes_dir: str, name: str) -> str:
    return os.path.join(nodes_dir, name, NODE_DB_FILE)


def list_nodes(nodes_dir: str = NODES_DIR):
    #Lista los nodos que tienen base de datos
    if not os.path.isdir(nodes_dir):
        return []
    return sorted(
        d
        for d in os.listdir(nodes_dir)
        if os.path.isfile(node_db_path(nodes_dir, d))
    )


def setup_environment(nodes_dir: str = NODES_DIR, num_blocks: int = SAMPLE_BLOCKS, start_time: int = None):
    """Create a small set of node databases that disagree in known ways.

    node1 holds the full chain, node2 stops short of it and node3 carries
    one block whose data was altered after hashing.
    """
    #1. Limpieza del entorno
    if os.path.exists(nodes_dir):
        print(f"[*] Cleaning '{nodes_dir}/'...")
        shutil.rmtree(nodes_dir)
    os.makedirs(nodes_dir)

    if start_time is None:
        start_time = int(time.time())

    #2. Todos los nodos parten de la misma cadena
    print(f"--- INSTALLING NODES IN '{nodes_dir}/' ---")
    for name in ("node1", "node2", "node3"):
        load_sample_data(node_db_path(nodes_dir, name), num_blocks, start_time, verbose=False)
        print(f"   > Node '{name}' installed with {num_blocks} blocks.")

    #3. node2 se queda atras
    behind = min(3, num_blocks)
    with BlockStore(node_db_path(nodes_dir, "node2"), read_only=False) as store:
        for height in range(num_blocks - behind, num_blocks):
            remove_block(store, height)
    print(f"   > node2 truncated by {behind} blocks.")

    #4. node3 tiene un bloque alterado
    if num_blocks > 2:
        tampered = num_blocks // 2
        with BlockStore(node_db_path(nodes_dir, "node3"), read_only=False) as store:
            tamper_block_data(store, tampered)
        print(f"   > node3 block {tampered} tampered.")

    print("\nNetwork setup complete.")
    return list_nodes(nodes_dir)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    target = sys.argv[1] if len(sys.argv) > 1 else NODES_DIR
    setup_environment(target)
