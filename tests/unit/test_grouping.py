import pytest

from junapedia.models.store import CanonicalStore
from junapedia.pipeline.descriptions import LOCAL_MENU_MESSAGE
from junapedia.pipeline.grouping import (
    TAB_SUPERMARKETS,
    DisplayAssembler,
    StoreFilter,
    dominant_category,
)


@pytest.fixture
def assembler(key_builder):
    return DisplayAssembler(key_builder)


@pytest.fixture
def stores():
    return [
        CanonicalStore(id="1", name="McDonalds Plaza", category="Comida Rápida",
                       addresses=["Av. Apoquindo 3000, Las Condes"]),
        CanonicalStore(id="2", name="Mcdonald's Vitacura", category="Comida Rápida",
                       addresses=["Av. Vitacura 5000, Vitacura", "Av. Apoquindo 3000, Las Condes"]),
        CanonicalStore(id="3", name="Panadería La Espiga", category="Restaurante",
                       addresses=["Av. Providencia 1234, Providencia"]),
        CanonicalStore(id="4", name="Líder Express", category="Supermercados",
                       addresses=["Av. Grecia 100, Ñuñoa"]),
    ]


def test_single_and_group_units(assembler, stores):
    groups = assembler.assemble(stores[:3])
    assert [g.kind for g in groups] == ["group", "single"]

    group = groups[0]
    assert group.key == "mcdonalds"
    assert group.name == "McDonald's"
    assert group.count == 2
    assert group.count == len(group.members)
    assert group.description == "2 locales"
    assert group.addresses == [
        "Av. Apoquindo 3000, Las Condes",
        "Av. Vitacura 5000, Vitacura",
    ]
    assert group.dominant_category == "Comida Rápida"

    single = groups[1]
    assert single.name == "Panadería La Espiga"
    assert single.store.id == "3"
    assert single.description == LOCAL_MENU_MESSAGE


def test_filter_search_matches_name_and_address(stores):
    assert [s.id for s in StoreFilter(search="espiga").apply(stores)] == ["3"]
    assert [s.id for s in StoreFilter(search="VITACURA").apply(stores)] == ["2"]
    assert [s.id for s in StoreFilter(search="panaderia").apply(stores)] == ["3"]


def test_filter_category(stores):
    result = StoreFilter(category="comida rapida").apply(stores)
    assert [s.id for s in result] == ["1", "2"]


def test_filter_comuna(stores):
    result = StoreFilter(comuna="Las Condes").apply(stores)
    assert [s.id for s in result] == ["1", "2"]


def test_supermarket_tab(stores):
    assert [s.id for s in StoreFilter(tab=TAB_SUPERMARKETS).apply(stores)] == ["4"]
    assert "4" not in [s.id for s in StoreFilter().apply(stores)]


def test_assemble_applies_filter(assembler, stores):
    groups = assembler.assemble(stores, StoreFilter(search="plaza"))
    assert len(groups) == 1
    assert groups[0].kind == "single"
    assert groups[0].name == "McDonald's"


def test_dominant_category_ties_keep_first_seen():
    members = [
        CanonicalStore(id="1", category="Cafetería"),
        CanonicalStore(id="2", category="Restaurante"),
    ]
    assert dominant_category(members) == "Cafetería"

    members.append(CanonicalStore(id="3", category="Restaurante"))
    assert dominant_category(members) == "Restaurante"
