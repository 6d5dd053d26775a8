"""
Directory overview component: headline metrics and category breakdown.
"""

import streamlit as st
import pandas as pd
import plotly.express as px
from typing import List

from junapedia.models.store import CanonicalStore, DisplayGroup


def stores_frame(stores: List[CanonicalStore]) -> pd.DataFrame:
    """One row per canonical store, for charts and the export table."""
    return pd.DataFrame([
        {
            'Nombre': s.name,
            'Categoría': s.category,
            'Direcciones': len(s.addresses),
            'Dirección': s.address,
            'Fusionado': s.merged,
        }
        for s in stores
    ])


def render_directory_metrics(stores: List[CanonicalStore], groups: List[DisplayGroup]):
    """Renders the top-level metrics bar."""
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Locales", f"{len(stores):,}")
    m2.metric("Tarjetas", f"{len(groups):,}")
    m3.metric("Franquicias", sum(1 for g in groups if g.kind == 'group'))
    m4.metric("Direcciones", f"{sum(len(s.addresses) for s in stores):,}")


def render_category_breakdown(stores: List[CanonicalStore]):
    """Renders the store count per category."""
    if not stores:
        return

    df = stores_frame(stores)
    counts = df.groupby('Categoría').size().reset_index(name='Locales')

    fig = px.pie(
        counts,
        values='Locales',
        names='Categoría',
        title='Locales por categoría',
        hole=0.4,
        template="plotly_dark"
    )
    fig.update_layout(plot_bgcolor='rgba(0,0,0,0)', paper_bgcolor='rgba(0,0,0,0)')
    st.plotly_chart(fig, key="directory_pie")


def render_top_groups(groups: List[DisplayGroup], limit: int = 8):
    """Renders the largest franchise groups."""
    top = sorted((g for g in groups if g.kind == 'group'), key=lambda g: g.count, reverse=True)[:limit]
    if not top:
        return

    fig = px.bar(
        x=[g.name for g in top], y=[g.count for g in top],
        title='Franquicias con más locales',
        labels={'x': 'Franquicia', 'y': 'Locales'},
        template="plotly_dark",
        color_discrete_sequence=['#6366f1']
    )
    fig.update_layout(plot_bgcolor='rgba(0,0,0,0)', paper_bgcolor='rgba(0,0,0,0)')
    st.plotly_chart(fig, key="directory_bar")


def render_overview(stores: List[CanonicalStore], groups: List[DisplayGroup]):
    """Orchestrates the overview rendering."""
    if not stores:
        st.info("No hay locales cargados.")
        return

    render_directory_metrics(stores, groups)
    st.markdown("---")

    c1, c2 = st.columns(2)
    with c1:
        render_category_breakdown(stores)
    with c2:
        render_top_groups(groups)

    with st.expander("Tabla de locales", expanded=False):
        st.dataframe(stores_frame(stores), hide_index=True)
