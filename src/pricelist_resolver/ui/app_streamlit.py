"""
Streamlit UI for barcode rule lookups.

Features:
- Barcode lookup against the configured backend
- Rules grouped by scope (global, category, template, variant)
- Resolution trace
- Export to Excel/CSV
"""
import streamlit as st
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from pricelist_resolver.backend import BlockingResolver, open_backend
from pricelist_resolver.config import configure_logging, get_settings
from pricelist_resolver.data.export import frame_to_excel_bytes, rules_to_frame, scope_summary
from pricelist_resolver.errors import BackendError


st.set_page_config(
    page_title="Pricelist Rule Lookup",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_settings_cached():
    """Get cached settings."""
    settings = get_settings()
    configure_logging(settings.log_level)
    return settings


@st.cache_resource
def get_lookup_service():
    """One backend (and one login) shared by every rerun of the app."""
    return BlockingResolver(open_backend(get_settings_cached()))


try:
    settings = get_settings_cached()
    service = get_lookup_service()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


# ============================================================================
# SIDEBAR: Backend
# ============================================================================
with st.sidebar:
    st.header("🔌 Backend")
    with st.container(border=True):
        st.markdown(f"**Source:** `{settings.backend}`")
        if settings.backend == 'odoo':
            st.caption(settings.odoo_url or "ODOO_URL not set")
            st.caption(f"Database: {settings.odoo_db or '-'}")
        else:
            st.caption(str(settings.snapshot_path or "SNAPSHOT_PATH not set"))
        st.caption(f"Active flag: `{settings.pricelist_active_field}`")
        if settings.backend == 'odoo':
            status = "logged in" if service.describe().get("authenticated") else "not logged in yet"
            st.caption(f"Session: {status}")


# ============================================================================
# MAIN CONTENT
# ============================================================================
st.title("Pricelist Rule Lookup")
st.caption(f"Scan or type a barcode | {datetime.now().strftime('%Y-%m-%d')}")

with st.form("lookup_form"):
    c1, c2 = st.columns([4, 1])
    with c1:
        barcode = st.text_input("Barcode", key="barcode_input", label_visibility="collapsed", placeholder="Scan or type a barcode...")
    with c2:
        submitted = st.form_submit_button("🔍 Look up", type="primary", use_container_width=True)

if submitted and barcode.strip():
    try:
        st.session_state.result = service.resolve(barcode.strip())
        st.session_state.looked_up = barcode.strip()
    except BackendError:
        st.session_state.result = None
        st.session_state.looked_up = None
        st.error("Error looking up product and rules. Check the backend connection.")

result = st.session_state.get('result')
looked_up = st.session_state.get('looked_up')

if looked_up and result is None:
    st.warning(f"No product found for barcode `{looked_up}`")

if result is not None:
    st.subheader(result.product_name)

    m1, m2, m3 = st.columns(3)
    m1.metric("List Price", f"${result.list_price:,.2f}")
    m2.metric("Candidate Rules", result.candidate_rule_count)
    m3.metric("Applicable Rules", result.buckets.count())

    rules_df = rules_to_frame(result)

    tab1, tab2, tab3 = st.tabs(["📋 Rules by Scope", "🔍 Resolution Details", "📥 Export"])

    with tab1:
        st.dataframe(scope_summary(result), use_container_width=True, hide_index=True)
        for scope, rules in result.buckets.items():
            with st.expander(f"{scope} ({len(rules)})", expanded=bool(rules)):
                scope_df = rules_df[rules_df['Scope'] == scope]
                if scope_df.empty:
                    st.caption("No rules")
                else:
                    st.dataframe(scope_df.drop(columns=['Scope']), use_container_width=True, hide_index=True)

    with tab2:
        for t in result.trace:
            if t.value:
                st.caption(f"**{t.step}**: {t.description} = `{t.value}`")
            else:
                st.caption(f"**{t.step}**: {t.description}")

    with tab3:
        col1, col2 = st.columns(2)
        with col1:
            st.download_button(
                "📥 CSV",
                data=rules_df.to_csv(index=False),
                file_name=f"rules_{result.barcode}.csv",
                mime="text/csv",
                use_container_width=True
            )
        with col2:
            st.download_button(
                "📥 Excel",
                data=frame_to_excel_bytes(rules_df),
                file_name=f"rules_{result.barcode}.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                use_container_width=True
            )
        st.dataframe(rules_df, use_container_width=True, hide_index=True)
