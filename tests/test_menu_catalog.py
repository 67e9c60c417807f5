import json
import tempfile
import unittest
from pathlib import Path

from menu_catalog import DEFAULT_MENU, MENU_CATEGORIES, load_menu_catalog


def _entry(**overrides):
    entry = {
        "display_name": "Flat White",
        "category": "coffee",
        "price": 4.0,
        "prep_time": 3.0,
        "beans": 1,
        "milk": 1,
        "unlocked": True,
        "unlock_cost": 0,
    }
    entry.update(overrides)
    return entry


class MenuCatalogTests(unittest.TestCase):
    def test_loads_defaults_when_file_missing(self):
        catalog = load_menu_catalog(Path("does_not_exist.json"))
        self.assertEqual(set(catalog), set(DEFAULT_MENU))
        self.assertTrue(catalog["espresso"]["unlocked"])
        self.assertFalse(catalog["mocha"]["unlocked"])

    def test_defaults_cover_both_categories_and_start_orderable(self):
        catalog = load_menu_catalog(Path("does_not_exist.json"))
        self.assertEqual({item["category"] for item in catalog.values()}, set(MENU_CATEGORIES))
        unlocked = {item["category"] for item in catalog.values() if item["unlocked"]}
        self.assertEqual(unlocked, set(MENU_CATEGORIES))

    def test_catalog_is_ordered_by_category_then_key(self):
        keys = list(load_menu_catalog(Path("does_not_exist.json")))
        cakes = [k for k in keys if DEFAULT_MENU[k].category == "cake"]
        coffees = [k for k in keys if DEFAULT_MENU[k].category == "coffee"]
        self.assertEqual(keys, sorted(cakes) + sorted(coffees))

    def test_filters_invalid_entries(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "menu.json"
            path.write_text(
                json.dumps(
                    {
                        "flat_white": _entry(),
                        "bad_price": _entry(price=-1),
                        "bad_category": _entry(category="sandwich"),
                        "bad_stock": _entry(beans=1.5),
                        "Bad-Key": _entry(),
                        "not_a_dict": ["x"],
                    }
                )
            )
            catalog = load_menu_catalog(path)

        self.assertEqual(list(catalog), ["flat_white"])
        self.assertEqual(catalog["flat_white"]["price"], 4.0)

    def test_normalises_category_and_name(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "menu.json"
            path.write_text(json.dumps({"scone": _entry(display_name="  Scone ", category="CAKE", beans=0, milk=0)}))
            catalog = load_menu_catalog(path)

        self.assertEqual(catalog["scone"]["category"], "cake")
        self.assertEqual(catalog["scone"]["display_name"], "Scone")

    def test_falls_back_when_nothing_is_unlocked(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "menu.json"
            path.write_text(json.dumps({"flat_white": _entry(unlocked=False, unlock_cost=50)}))
            catalog = load_menu_catalog(path)

        self.assertEqual(set(catalog), set(DEFAULT_MENU))


def test_invalid_json_returns_defaults(tmp_path):
    path = tmp_path / "menu.json"
    path.write_text("{not json")

    assert set(load_menu_catalog(path)) == set(DEFAULT_MENU)


def test_non_object_payload_returns_defaults(tmp_path):
    path = tmp_path / "menu.json"
    path.write_text(json.dumps([_entry()]))

    assert set(load_menu_catalog(path)) == set(DEFAULT_MENU)


def test_wholesale_cost_is_read_and_validated(tmp_path):
    path = tmp_path / "menu.json"
    path.write_text(
        json.dumps(
            {
                "scone": _entry(display_name="Scone", category="cake", beans=0, milk=0, wholesale_cost=1.255),
                "bad_wholesale": _entry(category="cake", wholesale_cost=-2),
                "flat_white": _entry(),
            }
        )
    )
    catalog = load_menu_catalog(path)

    assert set(catalog) == {"scone", "flat_white"}
    assert catalog["scone"]["wholesale_cost"] == round(1.255, 2)
    assert catalog["flat_white"]["wholesale_cost"] == 0.0


def test_default_cakes_carry_a_wholesale_cost():
    for item in DEFAULT_MENU.values():
        if item.category == "cake":
            assert item.wholesale_cost > 0
