"""
Store and franchise cards for the directory grid.
"""

import streamlit as st
from typing import Callable, List

from junapedia.models.reference import maps_url
from junapedia.models.store import DisplayGroup

MAX_ADDRESSES_SHOWN = 5


def address_link(address: str) -> str:
    return f"[{address}]({maps_url(address)})"


def render_addresses(addresses: List[str]):
    for address in addresses[:MAX_ADDRESSES_SHOWN]:
        st.markdown(f"- {address_link(address)}")
    hidden = len(addresses) - MAX_ADDRESSES_SHOWN
    if hidden > 0:
        with st.expander(f"Ver {hidden} direcciones más"):
            for address in addresses[MAX_ADDRESSES_SHOWN:]:
                st.markdown(f"- {address_link(address)}")


def render_card(group: DisplayGroup, website_for: Callable[[str], str]):
    """Renders a single card; groups list their member locations."""
    with st.container(border=True):
        st.markdown(f"#### {group.name}")
        st.caption(f"{group.dominant_category} · {group.description}")

        if group.kind == 'single':
            store = group.store
            if store.merged:
                st.caption(f"Nombres: {', '.join(store.source_names)}")
            render_addresses(group.addresses)
        else:
            with st.expander(f"{group.count} locales", expanded=False):
                for member in group.members:
                    location = address_link(member.address) if member.address else "Sin dirección"
                    st.markdown(f"**{member.name}** · {location}")

        st.link_button("Sitio web", website_for(group.name))


def render_grid(groups: List[DisplayGroup], website_for: Callable[[str], str], columns: int = 3):
    """Lays cards out in rows of ``columns``."""
    if not groups:
        st.info("No se encontraron locales con esos filtros.")
        return

    for start in range(0, len(groups), columns):
        cols = st.columns(columns)
        for col, group in zip(cols, groups[start:start + columns]):
            with col:
                render_card(group, website_for)
