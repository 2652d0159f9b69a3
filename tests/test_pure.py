import unittest
from collections import Counter
from decimal import Decimal

from catalog_fixtures import make_product
from db.models import FilterCriteria, SortOption
from utils.pure import (
    distinct_brands,
    filter_and_sort,
    filter_products,
    format_price,
    generate_markdown_table,
    parse_price,
    sort_products,
)


def ids(products):
    return [p.id for p in products]


class PriceTestCase(unittest.TestCase):
    def test_parse_price(self):
        self.assertEqual(parse_price("100"), Decimal("100"))
        self.assertEqual(parse_price(" 29999.99 "), Decimal("29999.99"))
        self.assertEqual(parse_price("bad"), 0)
        self.assertEqual(parse_price(""), 0)
        self.assertEqual(parse_price(None), 0)
        # non-finite values count as unparsable
        self.assertEqual(parse_price("NaN"), 0)
        self.assertEqual(parse_price("Infinity"), 0)

    def test_format_price(self):
        self.assertEqual(format_price(Decimal("29999.9")), "29.999,9 ₺")
        self.assertEqual(format_price(Decimal("200")), "200 ₺")
        self.assertEqual(format_price(Decimal("1234.567")), "1.234,57 ₺")
        self.assertEqual(format_price(Decimal("0")), "0 ₺")
        self.assertEqual(format_price(Decimal("1000000.50")), "1.000.000,5 ₺")


class FilterTestCase(unittest.TestCase):
    def setUp(self):
        self.products = [
            make_product(1, name="iPhone 15", brand="Apple", model="A3092"),
            make_product(2, name="Galaxy S24", brand="Samsung", model="SM-S921"),
            make_product(3, name="Pixel 8", brand="Google", model="GZPF0"),
            make_product(4, name="MacBook Air", brand="Apple", model="M2"),
        ]

    def test_search_is_case_insensitive_contains(self):
        self.assertEqual(ids(filter_products(self.products, "iphone", None)), ["1"])
        self.assertEqual(ids(filter_products(self.products, "IPHONE 1", None)), ["1"])

    def test_search_matches_brand_and_model(self):
        self.assertEqual(ids(filter_products(self.products, "apple", None)), ["1", "4"])
        self.assertEqual(ids(filter_products(self.products, "sm-s9", None)), ["2"])

    def test_empty_search_keeps_everything(self):
        self.assertEqual(len(filter_products(self.products, "", None)), 4)

    def test_brand_is_exact_match(self):
        self.assertEqual(ids(filter_products(self.products, "", "Apple")), ["1", "4"])
        self.assertEqual(filter_products(self.products, "", "apple"), [])

    def test_search_and_brand_combine(self):
        self.assertEqual(ids(filter_products(self.products, "mac", "Apple")), ["4"])
        self.assertEqual(filter_products(self.products, "pixel", "Apple"), [])

    def test_distinct_brands(self):
        self.assertEqual(distinct_brands(self.products), ["Apple", "Google", "Samsung"])


class SortTestCase(unittest.TestCase):
    def setUp(self):
        self.products = [
            make_product(10, name="Banana", price="30"),
            make_product(2, name="apple", price="bad"),
            make_product(1, name="Cherry", price="5.5"),
            make_product(3, name="Apple", price="100"),
        ]

    def test_default_sort_is_by_id_string(self):
        self.assertEqual(ids(sort_products(self.products, SortOption.NONE)), ["1", "10", "2", "3"])

    def test_price_sorts_treat_unparsable_as_zero(self):
        self.assertEqual(
            ids(sort_products(self.products, SortOption.PRICE_ASC)), ["2", "1", "10", "3"]
        )
        self.assertEqual(
            ids(sort_products(self.products, SortOption.PRICE_DESC)), ["3", "10", "1", "2"]
        )

    def test_name_sorts_are_lexicographic(self):
        self.assertEqual(
            [p.name for p in sort_products(self.products, SortOption.NAME_ASC)],
            ["Apple", "Banana", "Cherry", "apple"],
        )
        self.assertEqual(
            [p.name for p in sort_products(self.products, SortOption.NAME_DESC)],
            ["apple", "Cherry", "Banana", "Apple"],
        )

    def test_every_sort_is_a_permutation_of_the_filtered_subset(self):
        products = self.products + [make_product(7, name="Apple Pie", brand="Bakery")]
        criteria_base = dict(search_term="a", brand="Apple")
        subset = filter_products(products, "a", "Apple")
        for option in SortOption:
            with self.subTest(option=option):
                result = filter_and_sort(
                    products, FilterCriteria(sort_option=option, **criteria_base)
                )
                self.assertEqual(Counter(result), Counter(subset))

    def test_filter_and_sort_defaults(self):
        self.assertEqual(
            ids(filter_and_sort(self.products, FilterCriteria())), ["1", "10", "2", "3"]
        )


class MarkdownTableTestCase(unittest.TestCase):
    def test_table_with_headers(self):
        table = generate_markdown_table(["Attribute", "Value"], [["Brand", "Apple"]], ["l", "l"])
        self.assertEqual(
            table, "| Attribute | Value |\n| :--- | :--- |\n| Brand | Apple |"
        )

    def test_pipes_in_cells_are_escaped(self):
        table = generate_markdown_table(["A"], [["x|y"]])
        self.assertIn("x\\|y", table)

    def test_empty_rows_and_bad_aligns(self):
        self.assertEqual(generate_markdown_table(["A"], []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [["1", "2"]], ["l"])


if __name__ == "__main__":
    unittest.main()
