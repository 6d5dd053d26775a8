import pytest
from unittest.mock import MagicMock

from junapedia.directory import MSG_FETCH_FAILED, MSG_NOT_CONFIGURED, StoreDirectory
from junapedia.models.reference import WebsiteTable, maps_url
from junapedia.pipeline.grouping import DisplayAssembler, StoreFilter
from junapedia.storage.store_repository import StoreFetchError, StoreRepository


@pytest.fixture
def assembler(key_builder):
    return DisplayAssembler(key_builder)


def test_unconfigured_repository_message(assembler):
    result = StoreDirectory(StoreRepository(client=None), assembler).load()
    assert result.stores == []
    assert result.message == MSG_NOT_CONFIGURED
    assert not result.ok


def test_fetch_failure_message(assembler):
    repository = MagicMock()
    repository.fetch_rows.side_effect = StoreFetchError("payload was not a list")

    result = StoreDirectory(repository, assembler).load()

    assert result.stores == []
    assert result.message == MSG_FETCH_FAILED


def test_rows_become_canonical_stores(assembler):
    repository = MagicMock()
    repository.fetch_rows.return_value = [
        {"id": "1", "canonical_name": "KFC Mall", "addresses": ["Av. B 2", "Av. C 3"], "category": None},
        "not a row",
        {"id": "2", "source_names": ["Café Central"], "addresses": []},
    ]

    result = StoreDirectory(repository, assembler).load()

    assert result.ok
    assert [s.id for s in result.stores] == ["1", "2"]
    kfc, cafe = result.stores
    assert kfc.name == "KFC Mall"
    assert kfc.category == "Restaurante"
    assert kfc.merged is True
    assert cafe.name == "Café Central"
    assert cafe.address == ""


def test_view_filters_and_groups(assembler):
    repository = MagicMock()
    repository.fetch_rows.return_value = [
        {"id": "1", "canonical_name": "KFC Mall", "addresses": ["Av. B 2, Providencia"]},
        {"id": "2", "canonical_name": "Kentucky Fried Chicken", "addresses": ["Av. C 3, Providencia"]},
        {"id": "3", "canonical_name": "Café Central", "addresses": ["Av. D 4, Ñuñoa"]},
    ]
    directory = StoreDirectory(repository, assembler)
    stores = directory.load().stores

    groups = directory.view(stores, StoreFilter(comuna="Providencia"))
    assert len(groups) == 1
    assert groups[0].kind == "group"
    assert groups[0].name == "KFC"
    assert groups[0].count == 2

    assert len(directory.view(stores)) == 2


def test_website_for(assembler):
    directory = StoreDirectory(MagicMock(), assembler, WebsiteTable({"kfc": "https://www.kfc.cl"}))
    assert directory.website_for("KFC Mall") == "https://www.kfc.cl"
    assert directory.website_for("Café Central").startswith("https://www.google.com/search?q=")


def test_maps_url_encodes_address():
    url = maps_url("Av. Providencia 100, Ñuñoa")
    assert url == "https://www.google.com/maps/search/?api=1&query=Av.+Providencia+100%2C+%C3%91u%C3%B1oa"
