"""
Purchase-hint descriptions for stores.

``describe`` is the ordered rule set used by the directory cards. The batch
DescriptionGenerator adds a menu-item summary ahead of those rules and can
optionally have an LLM reword the heuristic text.
"""

import re
from typing import Any, Dict, List, Optional

from junapedia.config import DEFAULT_OPENAI_CALL_LIMIT, DEFAULT_OPENAI_MODEL
from junapedia.matching.franchise_matcher import FranchiseMatcher
from junapedia.models.store import CanonicalStore
from junapedia.utils.logging_config import logger
from junapedia.utils.normalization import normalize_text

LOW_SEAL_MESSAGE = "Productos de 2 o menos Sellos"
LOCAL_MENU_MESSAGE = "Diversos productos del Menú del Local"
SPECIAL_MENU_MESSAGE = "menú especial especifico"

SUPERMARKET_PATTERN = re.compile(r'supermercad|minimarket|puntos verdes')
RESTAURANT_PATTERN = re.compile(r'restaurante|restaurantes|casino|casinos')
PATIO_PATTERN = re.compile(r'patio')

MAX_LISTED_ITEMS = 4


def describe(category: Optional[str], is_franchise_match: bool, has_menu_items: bool = False) -> str:
    """
    Rule-based purchase hint; the first matching rule wins.

    1. Supermarket-like category -> low-seal products
    2. Restaurant/casino category, not a franchise, not a food court -> local menu
    3. Anything else -> special menu

    ``has_menu_items`` does not change the card text; the batch generator
    handles menus before falling back to these rules.
    """
    cat = normalize_text(category)
    if SUPERMARKET_PATTERN.search(cat):
        return LOW_SEAL_MESSAGE
    if RESTAURANT_PATTERN.search(cat) and not is_franchise_match and not PATIO_PATTERN.search(cat):
        return LOCAL_MENU_MESSAGE
    return SPECIAL_MENU_MESSAGE


def describe_store(store: CanonicalStore, matcher: FranchiseMatcher) -> str:
    return describe(store.category, matcher.is_franchise(store.name), bool(store.menu_items))


class DescriptionGenerator:
    """
    Batch description generator.

    Strategy hierarchy:
    1. Heuristic text (menu summary, category rules, franchise note)
    2. Optional LLM rewording of that text when an OpenAI client is given,
       capped at ``call_limit`` calls per run; any API failure keeps the heuristic.
    """

    SYSTEM_PROMPT = (
        "Eres un asistente que genera descripciones cortas (1-2 frases) "
        "y amigables de locales, en español."
    )

    def __init__(
        self,
        matcher: FranchiseMatcher,
        openai_client=None,
        model: str = DEFAULT_OPENAI_MODEL,
        call_limit: int = DEFAULT_OPENAI_CALL_LIMIT,
    ):
        self.matcher = matcher
        self.openai_client = openai_client
        self.model = model
        self.call_limit = call_limit
        self.calls_made = 0

    def heuristic(self, store: CanonicalStore) -> str:
        if store.menu_items:
            names = [item.name for item in store.menu_items[:MAX_LISTED_ITEMS] if item.name]
            return (
                f"Ofrece {len(store.menu_items)} productos; destaca: {', '.join(names)}. "
                "Ideal para comprar opciones rápidas y del menú local."
            )

        token = self.matcher.find_franchise_key(store.name)
        text = describe(store.category, token is not None)
        if text == SPECIAL_MENU_MESSAGE and token:
            display = self.matcher.table.display_name(token) or token
            return f"Parte de la franquicia ({display}): menú y productos típicos de la cadena."
        return text

    def _build_prompt(self, store: CanonicalStore) -> str:
        menu = [item.model_dump(exclude_none=True) for item in store.menu_items[:6]]
        return (
            f'Genera una descripción en español, 1-2 frases, para este local. '
            f'Nombre: "{store.name}"; Categoría: "{store.category}"; '
            f'Direcciones: "{" / ".join(store.addresses[:2])}"; '
            f'Informacion adicional: {menu if menu else "sin menu"}; '
            f'Reglas: si la categoría es supermercado/minimarket/puntos verdes, prioriza '
            f'"{LOW_SEAL_MESSAGE}"; si restaurante/casino (no franquicia y no patio), usar '
            f'"{LOCAL_MENU_MESSAGE}"; si no aplicar "{SPECIAL_MENU_MESSAGE}". '
            f'Responde solo la descripción.'
        )

    def _rewrite_via_llm(self, store: CanonicalStore) -> Optional[str]:
        try:
            response = self.openai_client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.SYSTEM_PROMPT},
                    {"role": "user", "content": self._build_prompt(store)},
                ],
                temperature=0.6,
                max_tokens=120,
            )
            content = response.choices[0].message.content
            return content.strip() if content else None
        except Exception as e:
            logger.warning(f"LLM description failed for '{store.name}', keeping heuristic: {e}")
            return None

    def generate(self, store: CanonicalStore) -> str:
        text = self.heuristic(store)
        if self.openai_client is None or self.calls_made >= self.call_limit:
            return text
        rewritten = self._rewrite_via_llm(store)
        if rewritten:
            self.calls_made += 1
            return rewritten
        return text

    def generate_all(self, stores: List[CanonicalStore]) -> List[Dict[str, Any]]:
        mode = "OpenAI" if self.openai_client is not None else "heuristics only"
        logger.info(f"Generating descriptions for {len(stores)} stores ({mode})")
        return [
            {'id': store.id, 'name': store.name, 'description': self.generate(store)}
            for store in stores
        ]
