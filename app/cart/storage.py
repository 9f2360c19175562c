# app/cart/storage.py
import json
import logging
from pathlib import Path
from typing import MutableMapping, Protocol, Sequence

from pydantic import TypeAdapter, ValidationError

from app.schemas.cart import CartLineItem

logger = logging.getLogger(__name__)

CART_KEY = "cart"

_items_adapter = TypeAdapter(list[CartLineItem])


class CartStorage(Protocol):
    """
    Persistence port for the cart store.

    load() never raises: anything it cannot read is an empty cart.
    save() may raise; the store catches and logs.
    """

    def load(self) -> list[CartLineItem]: ...

    def save(self, items: Sequence[CartLineItem]) -> None: ...


def encode_items(items: Sequence[CartLineItem]) -> str:
    """
    Serialize lines to the JSON array stored under the "cart" key.
    """
    return json.dumps(
        [item.model_dump(mode="json", by_alias=True) for item in items]
    )


def decode_items(raw: str | None) -> list[CartLineItem]:
    """
    Parse a stored cart. Missing, unparsable, non-array or invalid
    payloads are treated as an empty cart.
    """
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Stored cart is not valid JSON; starting empty")
        return []

    if not isinstance(data, list):
        logger.warning("Stored cart is not an array; starting empty")
        return []

    try:
        return _items_adapter.validate_python(data)
    except ValidationError as e:
        logger.warning("Stored cart has invalid items; starting empty (%s)", e.error_count())
        return []


class KeyValueCartStorage:
    """
    Stores the cart in any string->string mapping (a dict in tests,
    a `shelve` or similar key/value slot elsewhere).
    """

    def __init__(self, slot: MutableMapping[str, str] | None = None, key: str = CART_KEY):
        self.slot = slot if slot is not None else {}
        self.key = key

    def load(self) -> list[CartLineItem]:
        return decode_items(self.slot.get(self.key))

    def save(self, items: Sequence[CartLineItem]) -> None:
        self.slot[self.key] = encode_items(items)


class JsonFileCartStorage:
    """
    Stores the cart as the "cart" entry of a small JSON key/value file.
    Other keys in the file are preserved.
    """

    def __init__(self, path: str | Path, key: str = CART_KEY):
        self.path = Path(path)
        self.key = key

    def _read_slots(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Cart file %s is unreadable; starting empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> list[CartLineItem]:
        return decode_items(self._read_slots().get(self.key))

    def save(self, items: Sequence[CartLineItem]) -> None:
        slots = self._read_slots()
        slots[self.key] = encode_items(items)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(slots), encoding="utf-8")
