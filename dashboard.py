import os
import sys

import streamlit as st

#Agregamos directorio actual
sys.path.append(os.getcwd())
from blockchain_core import BlockStore, StoreError
from compare_nodes import compare_nodes
from config import NODES_DIR
from report import category_counts_frame, comparison_frame, scan_findings_frame
from setup_network import list_nodes, node_db_path
from verify_integrity import STATUS_HEALTHY, scan_errors
from view_blockchain import chain_stats

st.set_page_config(
    page_title="Chain Inspector",
    page_icon="🔍",
    layout="wide",
    initial_sidebar_state="expanded"
)


#BARRA LATERAL
with st.sidebar:
    st.title("Chain Inspector")
    st.markdown("---")
    nodes_dir = st.text_input("Nodes directory", NODES_DIR)
    nodes = list_nodes(nodes_dir)
    if not nodes:
        st.error(f"No node databases found under '{nodes_dir}/'. Run setup_network.py first.")
        st.stop()
    st.caption(f"{len(nodes)} nodes found")


st.title("🔍 Blockchain Integrity Inspector")

tab1, tab2 = st.tabs(["🩺 Integrity Scan", "🔀 Node Comparison"])

#PESTAÑA 1: ESCANEO
with tab1:
    selected = st.selectbox("Node", nodes)
    db_path = node_db_path(nodes_dir, selected)

    try:
        with BlockStore(db_path) as store:
            result = scan_errors(store, db_path)
            stats = chain_stats(store)
    except StoreError as e:
        st.error(f"❌ {e}")
        st.stop()

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Blocks Scanned", result.blocks_scanned)
    m2.metric("Total Errors", result.total_errors)
    m3.metric("Health Score", f"{result.health_score}%")
    m4.metric("Avg Block Time", f"{stats['average_block_time']:.1f}s")

    if result.status == STATUS_HEALTHY:
        st.success("No errors found. Blockchain is healthy.")
    else:
        st.warning(f"Status: {result.status}")

    c1, c2 = st.columns([1, 2])
    with c1:
        st.subheader("Error Classification")
        st.dataframe(category_counts_frame(result), hide_index=True, use_container_width=True)
    with c2:
        st.subheader("Findings")
        findings_df = scan_findings_frame(result)
        if findings_df.empty:
            st.caption("No findings.")
        else:
            st.dataframe(findings_df, hide_index=True, use_container_width=True)

#PESTAÑA 2: COMPARACION
with tab2:
    col_a, col_b = st.columns(2)
    node_a = col_a.selectbox("Node 1", nodes, index=0)
    node_b = col_b.selectbox("Node 2", nodes, index=min(1, len(nodes) - 1))
    path_a = node_db_path(nodes_dir, node_a)
    path_b = node_db_path(nodes_dir, node_b)

    try:
        with BlockStore(path_a) as store1, BlockStore(path_b) as store2:
            comparison = compare_nodes(store1, store2, path_a, path_b)
    except StoreError as e:
        st.error(f"❌ {e}")
        st.stop()

    m1, m2, m3 = st.columns(3)
    m1.metric("Matching Blocks", comparison.matching_blocks)
    m2.metric("Sync", f"{comparison.sync_percentage:.1f}%")
    m3.metric(
        "Divergence Point",
        comparison.divergence_point if comparison.divergence_point >= 0 else "-",
    )

    diff_df = comparison_frame(comparison)
    if not diff_df.empty:
        st.subheader("Differences")
        st.dataframe(diff_df, hide_index=True, use_container_width=True)

    st.subheader("Recommendations")
    for rec in comparison.recommendations:
        st.write(f"- {rec}")
