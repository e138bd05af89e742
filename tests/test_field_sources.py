"""Tests for loading target and supplier field lists."""

import pytest

from fieldmapper.exceptions import SchemaError, SourceError
from fieldmapper.utils.data import (
    load_hints,
    load_supplier_fields,
    load_target_fields,
    load_target_schema,
    supplier_label,
    supplier_labels,
)


def test_target_fields_from_mapping(tmp_path):
    path = tmp_path / "zoro.yaml"
    path.write_text("target_fields:\n  - product_id\n  - price\nhints:\n  - price includes tax\n")

    assert load_target_fields(path) == ("product_id", "price")
    assert load_hints(path) == ("price includes tax",)


def test_target_fields_from_plain_list(tmp_path):
    path = tmp_path / "zoro.yaml"
    path.write_text("- product_id\n- price\n")

    assert load_target_fields(path) == ("product_id", "price")
    assert load_target_schema(path) == (("product_id", "price"), ())


def test_target_file_without_hints_has_none(tmp_path):
    path = tmp_path / "zoro.yaml"
    path.write_text("target_fields: [product_id]\n")

    assert load_hints(path) == ()


def test_empty_target_list_is_schema_error(tmp_path):
    path = tmp_path / "zoro.yaml"
    path.write_text("target_fields: []\n")

    with pytest.raises(SchemaError):
        load_target_fields(path)


def test_missing_target_file(tmp_path):
    with pytest.raises(SourceError):
        load_target_fields(tmp_path / "missing.yaml")


def test_supplier_fields_from_csv_header(tmp_path):
    path = tmp_path / "acme_stock.csv"
    path.write_text("PRODUCTCODE,STOCK,EXPECTEDDATE,stock no,isStocked\nA1,3,2024-01-01,7,YES\n")

    assert load_supplier_fields(path) == ("PRODUCTCODE", "STOCK", "EXPECTEDDATE", "stock no", "isStocked")
    assert supplier_label(path) == "acme_stock"


def test_supplier_fields_from_tsv_header(tmp_path):
    path = tmp_path / "globex.tsv"
    path.write_text("SKU\tQTY\n")

    assert load_supplier_fields(path) == ("SKU", "QTY")


def test_supplier_fields_from_text_lines(tmp_path):
    path = tmp_path / "fields.txt"
    path.write_text("primary\n\nsecondary\ntertiary\n")

    assert load_supplier_fields(path) == ("primary", "secondary", "tertiary")


def test_empty_csv_is_source_error(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")

    with pytest.raises(SourceError):
        load_supplier_fields(path)


def test_duplicate_supplier_fields_in_yaml(tmp_path):
    path = tmp_path / "fields.yaml"
    path.write_text("supplier_fields: [STOCK, STOCK]\n")

    with pytest.raises(SchemaError):
        load_supplier_fields(path)


def test_supplier_labels_are_stems_when_unique(tmp_path):
    assert supplier_labels([tmp_path / "acme.csv", tmp_path / "globex.tsv"]) == ["acme", "globex"]


def test_supplier_labels_qualify_shared_names(tmp_path):
    paths = [tmp_path / "a" / "feed.csv", tmp_path / "b" / "feed.csv", tmp_path / "acme.csv"]

    assert supplier_labels(paths) == ["a/feed", "b/feed", "acme"]


def test_same_supplier_file_twice_is_source_error(tmp_path):
    with pytest.raises(SourceError, match="feed"):
        supplier_labels([tmp_path / "a" / "feed.csv", tmp_path / "a" / "feed.csv"])
