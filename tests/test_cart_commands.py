"""Tests for the pure cart transition function."""

import pytest

from app.cart import commands
from app.cart.commands import (
    AddItem,
    ClearCart,
    LoadCart,
    Recustomize,
    RemoveItem,
    UpdateItem,
    apply,
    identity_key,
)

from conftest import size, toppings


def _run(*cmds, state=()):
    for cmd in cmds:
        state = apply(state, cmd)
    return state


class TestIdentity:
    def test_same_selection_in_different_order_has_same_key(self):
        a = [size("Large", 50), toppings(("Cheese", 30), ("Olives", 20))]
        b = [toppings(("Olives", 20), ("Cheese", 30)), size("Large", 50)]
        assert identity_key("p1", a) == identity_key("p1", b)

    def test_different_selection_has_different_key(self):
        assert identity_key("p1", [size("Large", 50)]) != identity_key("p1", [size("Small", 0)])

    def test_key_includes_product(self):
        assert identity_key("p1", []) != identity_key("p2", [])


class TestAddItem:
    def test_same_product_and_selection_merges(self, pizza):
        custom = (size("Large", 50),)
        state = _run(*[AddItem(pizza, 1, custom) for _ in range(4)])

        assert len(state) == 1
        assert state[0].quantity == 4

    def test_different_selection_stays_distinct(self, pizza):
        state = _run(
            AddItem(pizza, 1, (size("Large", 50),)),
            AddItem(pizza, 1, (size("Small", 0),)),
        )
        assert len(state) == 2
        assert state[0].id != state[1].id

    def test_reordered_selection_merges(self, pizza):
        state = _run(
            AddItem(pizza, 1, (size("Large", 50), toppings(("Cheese", 30)))),
            AddItem(pizza, 2, (toppings(("Cheese", 30)), size("Large", 50))),
        )
        assert len(state) == 1
        assert state[0].quantity == 3

    def test_merge_adds_requested_quantity(self, fries):
        state = _run(AddItem(fries, 2), AddItem(fries, 3))
        assert state[0].quantity == 5

    def test_new_line_keeps_instructions(self, fries):
        state = _run(AddItem(fries, 1, special_instructions="extra salt"))
        assert state[0].special_instructions == "extra salt"

    def test_input_state_is_not_mutated(self, fries):
        before = _run(AddItem(fries, 1))
        after = apply(before, AddItem(fries, 1))
        assert before[0].quantity == 1
        assert after[0].quantity == 2


class TestUpdateItem:
    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_removes_line(self, fries, quantity):
        state = _run(AddItem(fries, 2))
        state = apply(state, UpdateItem(state[0].id, quantity))
        assert state == ()

    def test_updates_quantity_in_place(self, fries, pizza):
        state = _run(AddItem(fries, 1), AddItem(pizza, 1))
        state = apply(state, UpdateItem(state[0].id, 7))
        assert [i.quantity for i in state] == [7, 1]

    def test_instructions_only_when_given(self, fries):
        state = _run(AddItem(fries, 1, special_instructions="crispy"))
        state = apply(state, UpdateItem(state[0].id, 2))
        assert state[0].special_instructions == "crispy"

        state = apply(state, UpdateItem(state[0].id, 2, special_instructions=""))
        assert state[0].special_instructions == ""

    def test_new_customizations_rekey_the_line(self, pizza):
        state = _run(AddItem(pizza, 1, (size("Small", 0),)))
        state = apply(state, UpdateItem(state[0].id, 3, customizations=(size("Large", 50),)))

        assert len(state) == 1
        assert state[0].id == identity_key(pizza.id, [size("Large", 50)])
        assert state[0].quantity == 3

    def test_unknown_line_is_noop(self, fries):
        state = _run(AddItem(fries, 1))
        assert apply(state, UpdateItem("missing", 5)) == state


class TestRemoveAndClear:
    def test_remove(self, fries, pizza):
        state = _run(AddItem(fries, 1), AddItem(pizza, 1))
        state = apply(state, RemoveItem(state[0].id))
        assert [i.product.id for i in state] == [pizza.id]

    def test_remove_unknown_is_noop(self, fries):
        state = _run(AddItem(fries, 1))
        assert apply(state, RemoveItem("missing")) == state

    def test_clear(self, fries, pizza):
        state = _run(AddItem(fries, 1), AddItem(pizza, 1), ClearCart())
        assert state == ()

    def test_load_replaces_state(self, fries):
        loaded = _run(AddItem(fries, 2))
        assert apply((), LoadCart(list(loaded))) == loaded


class TestRecustomize:
    def test_merges_into_existing_line(self, pizza):
        state = _run(
            AddItem(pizza, 2, (size("Small", 0),)),
            AddItem(pizza, 3, (size("Large", 50),)),
        )
        small_id, large_id = state[0].id, state[1].id
        count_before = sum(i.quantity for i in state)

        state = apply(state, Recustomize(small_id, (size("Large", 50),)))

        assert len(state) == 1
        assert state[0].id == large_id
        assert state[0].quantity == 5
        assert sum(i.quantity for i in state) == count_before

    def test_rewrites_in_place_without_match(self, pizza, fries):
        state = _run(AddItem(pizza, 2, (size("Small", 0),)), AddItem(fries, 1))
        state = apply(state, Recustomize(state[0].id, (size("Medium", 25),)))

        assert len(state) == 2
        assert state[0].id == identity_key(pizza.id, [size("Medium", 25)])
        assert state[0].customizations[0].selected_values[0].name == "Medium"
        assert state[0].quantity == 2

    def test_same_identity_keeps_line(self, pizza):
        state = _run(AddItem(pizza, 2, (size("Large", 50),)))
        after = apply(state, Recustomize(state[0].id, (size("Large", 50),)))
        assert len(after) == 1
        assert after[0].quantity == 2

    def test_unknown_line_is_noop(self, pizza):
        state = _run(AddItem(pizza, 1))
        assert apply(state, Recustomize("missing", (size("Large", 50),))) == state


def test_unknown_command_is_rejected():
    with pytest.raises(TypeError):
        commands.apply((), object())
