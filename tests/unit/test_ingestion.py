"""
Unit Tests - Data Ingestion
"""
from datetime import date

import polars as pl
import pytest
from polars.testing import assert_frame_equal

from retail_reports.database import close_database, get_engine, init_database
from retail_reports.ingestion import (
    SCHEMAS,
    DatasetLoadError,
    RetailDataset,
    load_csv_directory,
    load_from_database,
    read_relation,
    seed_database,
    write_csv_directory,
)


class TestRetailDataset:
    """Tests for RetailDataset"""

    def test_conforms_to_schema(self, sample_dataset):
        for relation, df in sample_dataset.frames():
            assert dict(df.schema) == SCHEMAS[relation]

    def test_adds_missing_and_drops_extra_columns(self):
        dataset = RetailDataset.from_frames({
            "stores": pl.DataFrame({"store_id": ["ST-1"], "extra": [1]}),
        })

        assert dataset.stores.columns == ["store_id", "store_name", "city", "country"]
        assert dataset.stores["country"].to_list() == [None]

    def test_casts_identifiers_to_text(self):
        dataset = RetailDataset.from_frames({
            "sales": pl.DataFrame({
                "sale_id": [1],
                "sale_date": [date(2023, 1, 1)],
                "store_id": [7],
                "product_id": [3],
                "quantity": [2],
            }),
        })

        assert dataset.sales["store_id"].to_list() == ["7"]

    def test_bad_values_raise(self):
        with pytest.raises(DatasetLoadError, match="sales"):
            RetailDataset.from_frames({
                "sales": pl.DataFrame({"sale_id": ["S-1"], "quantity": ["many"]}),
            })

    def test_empty(self):
        dataset = RetailDataset.empty()

        assert set(dataset.row_counts().values()) == {0}

    def test_is_immutable(self, sample_dataset):
        with pytest.raises(AttributeError):
            sample_dataset.sales = pl.DataFrame()


class TestCsvLoader:
    """Tests for the CSV loader"""

    def test_round_trip(self, sample_dataset, tmp_path):
        write_csv_directory(sample_dataset, tmp_path)

        loaded = load_csv_directory(tmp_path)

        for relation, df in sample_dataset.frames():
            assert_frame_equal(getattr(loaded, relation), df)

    def test_custom_date_format_and_headers(self, tmp_path):
        path = tmp_path / "sales.csv"
        path.write_text(
            "Sale_ID,Sale_Date,Store_ID,Product_ID,Quantity\n"
            " S-1 ,16-06-2023,ST-1,P-1,3\n"
            "S-2,2023-06-17,ST-1,P-1,4\n"
        )

        df = read_relation(path, "sales", date_format="%d-%m-%Y")

        assert df["sale_id"].to_list() == ["S-1", "S-2"]
        assert df["sale_date"].to_list() == [date(2023, 6, 16), date(2023, 6, 17)]
        assert df["quantity"].to_list() == [3, 4]

    def test_keeps_leading_zeros(self, tmp_path):
        path = tmp_path / "category.csv"
        path.write_text("category_id,category_name\n007,Audio\n")

        df = read_relation(path, "category")

        assert df["category_id"].to_list() == ["007"]

    def test_null_sale_id(self, tmp_path):
        path = tmp_path / "warranty.csv"
        path.write_text(
            "claim_id,claim_date,sale_id,repair_status\n"
            "CL-1,2024-01-02,,Pending\n"
        )

        df = read_relation(path, "warranty")

        assert df["sale_id"].to_list() == [None]

    def test_unparsable_date(self, tmp_path):
        path = tmp_path / "warranty.csv"
        path.write_text(
            "claim_id,claim_date,sale_id,repair_status\n"
            "CL-1,yesterday,S-1,Pending\n"
        )

        with pytest.raises(DatasetLoadError, match="claim_date"):
            read_relation(path, "warranty")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_csv_directory(tmp_path)

    def test_unknown_relation(self, tmp_path):
        with pytest.raises(ValueError):
            read_relation(tmp_path / "x.csv", "customers")


class TestDatabaseLoader:
    """Tests for database seeding and loading"""

    def test_round_trip(self, sample_dataset, sqlite_engine):
        inserted = seed_database(sqlite_engine, sample_dataset)

        loaded = load_from_database(sqlite_engine)

        assert inserted == sample_dataset.row_counts()
        for relation, df in sample_dataset.frames():
            key = df.columns[0]
            assert_frame_equal(getattr(loaded, relation), df.sort(key))

    def test_empty_tables(self, sqlite_engine):
        seed_database(sqlite_engine, RetailDataset.empty())

        loaded = load_from_database(sqlite_engine)

        assert set(loaded.row_counts().values()) == {0}

    def test_uses_initialized_engine(self, sample_dataset, tmp_path):
        engine = init_database(f"sqlite:///{tmp_path / 'retail.db'}")
        try:
            seed_database(engine, sample_dataset)

            loaded = load_from_database()
        finally:
            close_database()

        assert loaded.row_counts() == sample_dataset.row_counts()

    def test_uninitialized_engine(self):
        close_database()

        with pytest.raises(RuntimeError, match="not initialized"):
            get_engine()

        with pytest.raises(RuntimeError):
            load_from_database()
