"""
Category filter tests.
"""
from poimap.geo.poi import Category
from poimap.store.filters import ALL_CATEGORIES, toggle_category, visible_pois
from tests.conftest import make_poi


class TestVisiblePois:

    def test_scenario_park_and_restaurant(self):
        pois = [
            make_poi(1, Category.PARK),
            make_poi(2, Category.RESTAURANT),
            make_poi(3, Category.SHOPPING),
        ]
        shown = visible_pois(pois, {Category.PARK, Category.RESTAURANT})
        assert [p.id for p in shown] == [1, 2]

    def test_preserves_source_order(self, sample_pois):
        shown = visible_pois(list(reversed(sample_pois)), ALL_CATEGORIES)
        assert [p.id for p in shown] == [5, 4, 3, 2, 1]


class TestToggleCategory:

    def test_adds_and_removes(self):
        cats = toggle_category(frozenset(), Category.PARK)
        assert cats == {Category.PARK}
        assert toggle_category(cats, Category.PARK) == frozenset()

    def test_does_not_mutate_input(self):
        original = {Category.PARK}
        toggle_category(original, Category.PARK)
        assert original == {Category.PARK}

    def test_all_off_then_all_on(self, sample_pois):
        cats = ALL_CATEGORIES
        for c in Category:
            cats = toggle_category(cats, c)
        assert visible_pois(sample_pois, cats) == []
        for c in reversed(list(Category)):
            cats = toggle_category(cats, c)
        assert cats == ALL_CATEGORIES
        assert visible_pois(sample_pois, cats) == sample_pois
