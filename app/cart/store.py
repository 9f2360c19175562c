# app/cart/store.py
import logging
from typing import Callable, Sequence

from app.cart import commands
from app.cart.commands import CartCommand, CartState
from app.cart.customization import customization_summary
from app.cart.pricing import cart_totals
from app.cart.storage import CartStorage
from app.schemas.cart import CartLineItem, CartTotals, Customization, ProductSnapshot

logger = logging.getLogger(__name__)


def _log_notification(message: str) -> None:
    logger.info(message)


class CartStore:
    """
    In-process cart owned by the caller.

    Responsibilities:
      - rehydrate from storage on construction
      - apply commands through the pure transition function
      - persist after every change; storage errors are logged, never raised
      - report user-facing confirmations through `notify`
    """

    def __init__(
        self,
        storage: CartStorage,
        notify: Callable[[str], None] | None = None,
    ):
        self.storage = storage
        self.notify = notify or _log_notification
        self._state: CartState = ()
        self._state = commands.apply(self._state, commands.LoadCart(storage.load()))

    # ---- internal helpers ----

    def _persist(self) -> None:
        try:
            self.storage.save(self._state)
        except Exception:
            logger.exception("Failed to save cart; keeping in-memory state")

    def dispatch(self, command: CartCommand) -> CartState:
        self._state = commands.apply(self._state, command)
        self._persist()
        return self._state

    # ---- reads ----

    @property
    def items(self) -> CartState:
        return self._state

    def get_item(self, line_id: str) -> CartLineItem | None:
        for item in self._state:
            if item.id == line_id:
                return item
        return None

    def is_empty(self) -> bool:
        return len(self._state) == 0

    def get_cart_totals(self) -> CartTotals:
        return cart_totals(self._state)

    @staticmethod
    def customization_summary(customizations: Sequence[Customization]) -> str:
        return customization_summary(customizations)

    # ---- mutations ----

    def add_item(
        self,
        product: ProductSnapshot,
        quantity: int = 1,
        customizations: Sequence[Customization] = (),
        special_instructions: str = "",
    ) -> None:
        """
        Add a product; merges into an existing line with the same identity.
        A quantity below 1 changes nothing and sends no confirmation.
        """
        before = self._state
        after = self.dispatch(
            commands.AddItem(
                product=product,
                quantity=quantity,
                customizations=tuple(customizations),
                special_instructions=special_instructions,
            )
        )
        if after is not before:
            self.notify("Item added to cart!")

    def update_item(
        self,
        line_id: str,
        quantity: int,
        customizations: Sequence[Customization] | None = None,
        special_instructions: str | None = None,
    ) -> None:
        if quantity <= 0:
            self.remove_item(line_id)
            return

        self.dispatch(
            commands.UpdateItem(
                line_id=line_id,
                quantity=quantity,
                customizations=tuple(customizations) if customizations is not None else None,
                special_instructions=special_instructions,
            )
        )

    def remove_item(self, line_id: str) -> None:
        self.dispatch(commands.RemoveItem(line_id))
        self.notify("Item removed from cart")

    def update_item_customization(
        self,
        line_id: str,
        customizations: Sequence[Customization],
    ) -> None:
        """
        Re-key a line for new customizations, merging into another line
        that already has that identity.
        """
        self.dispatch(commands.Recustomize(line_id, tuple(customizations)))
        self.notify("Item customization updated!")

    def clear_cart(self) -> None:
        self.dispatch(commands.ClearCart())
        self.notify("Cart cleared")
