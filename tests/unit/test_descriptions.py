import pytest
from unittest.mock import MagicMock

from junapedia.models.store import CanonicalStore
from junapedia.pipeline.descriptions import (
    LOCAL_MENU_MESSAGE,
    LOW_SEAL_MESSAGE,
    SPECIAL_MENU_MESSAGE,
    DescriptionGenerator,
    describe,
    describe_store,
)


@pytest.mark.parametrize("is_franchise", [True, False])
def test_supermarket_ignores_franchise_status(is_franchise):
    assert describe("Supermercado", is_franchise) == LOW_SEAL_MESSAGE


@pytest.mark.parametrize("category", ["Minimarket", "Puntos Verdes", "SUPERMERCADOS"])
def test_supermarket_like_categories(category):
    assert describe(category, False) == LOW_SEAL_MESSAGE


def test_restaurant_without_franchise():
    assert describe("Restaurante", False) == LOCAL_MENU_MESSAGE
    assert describe("Casinos", False) == LOCAL_MENU_MESSAGE


def test_restaurant_franchise_or_food_court():
    assert describe("Restaurante", True) == SPECIAL_MENU_MESSAGE
    assert describe("Patio de comida restaurante", False) == SPECIAL_MENU_MESSAGE


def test_fallback_is_verbatim():
    assert describe("Ferretería", False, has_menu_items=False) == "menú especial especifico"
    assert describe(None, False) == SPECIAL_MENU_MESSAGE


def test_describe_store_uses_matcher(matcher):
    store = CanonicalStore(id="1", name="KFC Mall", category="Restaurante")
    assert describe_store(store, matcher) == SPECIAL_MENU_MESSAGE


class TestDescriptionGenerator:

    def _completion(self, content):
        choice = MagicMock()
        choice.message.content = content
        response = MagicMock()
        response.choices = [choice]
        return response

    def test_menu_items_are_summarized(self, matcher):
        store = CanonicalStore(id="1", name="Fuente Alemana", menu_items=["Completo", "Churrasco"])
        text = DescriptionGenerator(matcher).heuristic(store)
        assert text == (
            "Ofrece 2 productos; destaca: Completo, Churrasco. "
            "Ideal para comprar opciones rápidas y del menú local."
        )

    def test_franchise_message(self, matcher):
        store = CanonicalStore(id="1", name="KFC Mall", category="Comida Rápida")
        text = DescriptionGenerator(matcher).heuristic(store)
        assert text == "Parte de la franquicia (KFC): menú y productos típicos de la cadena."

    def test_rules_apply_without_menu(self, matcher):
        store = CanonicalStore(id="1", name="Unimarc Centro", category="Supermercado")
        assert DescriptionGenerator(matcher).heuristic(store) == LOW_SEAL_MESSAGE

    def test_llm_rewrite_respects_call_limit(self, matcher):
        client = MagicMock()
        client.chat.completions.create.return_value = self._completion("  Local con sándwiches.  ")
        generator = DescriptionGenerator(matcher, openai_client=client, call_limit=1)

        first = generator.generate(CanonicalStore(id="1", name="Café Central", category="Restaurante"))
        second = generator.generate(CanonicalStore(id="2", name="Café Norte", category="Restaurante"))

        assert first == "Local con sándwiches."
        assert second == LOCAL_MENU_MESSAGE
        assert client.chat.completions.create.call_count == 1
        assert generator.calls_made == 1

    def test_llm_failure_keeps_heuristic(self, matcher):
        client = MagicMock()
        client.chat.completions.create.side_effect = Exception("rate limited")
        generator = DescriptionGenerator(matcher, openai_client=client)

        text = generator.generate(CanonicalStore(id="1", name="Café Central", category="Restaurante"))

        assert text == LOCAL_MENU_MESSAGE
        assert generator.calls_made == 0

    def test_generate_all_shape(self, matcher):
        stores = [
            CanonicalStore(id="1", name="Café Central", category="Restaurante"),
            CanonicalStore(id="2", name="Unimarc", category="Supermercado"),
        ]
        result = DescriptionGenerator(matcher).generate_all(stores)
        assert result == [
            {"id": "1", "name": "Café Central", "description": LOCAL_MENU_MESSAGE},
            {"id": "2", "name": "Unimarc", "description": LOW_SEAL_MESSAGE},
        ]
