"""
Streamlit UI for the store directory.

Stores are fetched once per session; every search or filter change re-runs
filtering and grouping in memory.
"""

import streamlit as st
from typing import List

from junapedia.config import Settings
from junapedia.directory import DirectoryLoad, StoreDirectory
from junapedia.models.store import CanonicalStore
from junapedia.pipeline.grouping import ALL, TAB_RESTAURANTS, TAB_SUPERMARKETS, StoreFilter
from junapedia.reports import extract_comunas
from junapedia.ui.components.cards import render_grid
from junapedia.ui.components.insights import render_overview
from junapedia.utils.logging_config import logger, setup_logging

# Initialize logging for the UI
setup_logging("junapedia_ui")


@st.cache_resource
def get_directory() -> StoreDirectory:
    """Get or create the cached StoreDirectory instance."""
    return StoreDirectory.from_settings(Settings.from_env())


@st.cache_data(ttl=600, show_spinner="Cargando locales...")
def load_directory() -> DirectoryLoad:
    return get_directory().load()


def setup_page_config():
    """Setup Streamlit page configuration."""
    st.set_page_config(
        page_title="Junapedia",
        page_icon="🍽️",
        layout="wide",
        initial_sidebar_state="expanded"
    )
    st.markdown("""
        <style>
            h1, h2, h3 {
                background: linear-gradient(to right, #6366f1, #a855f7);
                -webkit-background-clip: text;
                -webkit-text-fill-color: transparent;
                font-weight: 800 !important;
            }
            #MainMenu {visibility: hidden;}
            footer {visibility: hidden;}
        </style>
    """, unsafe_allow_html=True)


def category_options(stores: List[CanonicalStore]) -> List[str]:
    return [ALL] + sorted({s.category for s in stores if s.category})


def comuna_options(stores: List[CanonicalStore]) -> List[str]:
    return [ALL] + extract_comunas(s.to_record() for s in stores)['names']


def render_sidebar(stores: List[CanonicalStore]) -> StoreFilter:
    """Renders the filter controls and returns the selected filter."""
    with st.sidebar:
        st.header("Filtros")
        search = st.text_input("Buscar", placeholder="Nombre o dirección")
        category = st.selectbox(
            "Categoría",
            category_options(stores),
            format_func=lambda c: "Todas las categorías" if c == ALL else c,
        )
        comuna = st.selectbox(
            "Comuna",
            comuna_options(stores),
            format_func=lambda c: "Todas las comunas" if c == ALL else c,
        )
        if st.button("Recargar datos"):
            load_directory.clear()
            st.rerun()
    return StoreFilter(search=search, category=category, comuna=comuna)


def render_tab(directory: StoreDirectory, stores: List[CanonicalStore], store_filter: StoreFilter, tab: str):
    groups = directory.view(stores, store_filter.model_copy(update={'tab': tab}))
    st.caption(f"{len(groups)} resultados")
    render_grid(groups, directory.website_for)


def main():
    """Main application entry point."""
    setup_page_config()
    st.title("Junapedia")
    st.markdown("Directorio de locales que aceptan la tarjeta de alimentación.")

    directory = get_directory()
    result = load_directory()
    if result.message:
        logger.warning(f"Directory load message: {result.message}")
        st.error(result.message)

    store_filter = render_sidebar(result.stores)

    tab1, tab2, tab3 = st.tabs(["🍔 Restaurantes", "🛒 Supermercados", "📊 Resumen"])

    with tab1:
        render_tab(directory, result.stores, store_filter, TAB_RESTAURANTS)

    with tab2:
        render_tab(directory, result.stores, store_filter, TAB_SUPERMARKETS)

    with tab3:
        render_overview(result.stores, directory.view(result.stores, None))


if __name__ == "__main__":
    main()
