"""Unit tests for catalog ingestion"""
import polars as pl
import pytest

from retail_insights.common.models import AuditAction, AuditLog, Product, Upload, UploadStatus
from retail_insights.ingestion.catalog import canonical_header, map_catalog_columns
from retail_insights.ingestion.exceptions import MissingColumnError, UnsupportedFileTypeError
from retail_insights.ingestion.service import IngestionService


class TestCatalogMapping:
    """Tests for column mapping"""

    def test_canonical_header(self):
        assert canonical_header(" Product Name ") == "product_name"
        assert canonical_header("Pack-Size") == "packsize"
        assert canonical_header("MRP") == "original_price"
        assert canonical_header("price") == "price"

    def test_map_columns_and_types(self):
        df = pl.DataFrame({
            "Name": ["Onion"],
            "Selling Price": ["₹40"],
            "Pack Size": ["1 kg"],
            "MRP": ["1,050.00"],
            "Rating": ["4.5"],
        })
        mapped = map_catalog_columns(df)

        assert mapped.columns == ["category", "product_name", "price", "packsize", "rating", "original_price"]
        assert mapped["price"][0] == 40.0
        assert mapped["original_price"][0] == 1050.0
        assert mapped["rating"][0] == 4.5
        assert mapped["category"][0] is None
        assert mapped["price"].dtype == pl.Float64

    def test_blank_pack_size_becomes_null(self):
        df = pl.DataFrame({"name": ["A"], "price": ["10"], "packsize": ["  "]})
        assert map_catalog_columns(df)["packsize"][0] is None

    def test_unparseable_price_becomes_null(self):
        df = pl.DataFrame({"name": ["A"], "price": ["free"], "packsize": ["1 kg"]})
        assert map_catalog_columns(df)["price"][0] is None

    @pytest.mark.parametrize("raw, expected", [
        ("Rs. 50", 50.0),
        ("Rs.50", 50.0),
        ("₹1,299.00", 1299.0),
        ("INR 12.5", 12.5),
    ])
    def test_currency_prefixes(self, raw, expected):
        df = pl.DataFrame({"name": ["A"], "price": [raw], "packsize": ["100 g"]})
        assert map_catalog_columns(df)["price"][0] == expected

    def test_first_matching_header_wins(self):
        df = pl.DataFrame({
            "price": ["10"],
            "selling_price": ["12"],
            "name": ["A"],
            "packsize": ["1 kg"],
        })
        assert map_catalog_columns(df)["price"][0] == 10.0

    def test_missing_required_column(self):
        df = pl.DataFrame({"name": ["A"], "price": ["10"]})
        with pytest.raises(MissingColumnError, match="packsize"):
            map_catalog_columns(df)


class TestIngestionService:
    """Tests for IngestionService"""

    def test_ingest_catalog(self, test_db, sample_catalog_csv):
        service = IngestionService(test_db)
        result = service.ingest_file(sample_catalog_csv)

        assert result.row_count == 12
        assert "packsize" in result.headers
        assert result.preview["product_name"][0] == "Onion"

        upload = test_db.query(Upload).filter(Upload.id == result.upload_id).one()
        assert upload.status == UploadStatus.INGESTED
        assert upload.file_metadata["delimiter"] == ","

        products = (
            test_db.query(Product)
            .filter(Product.upload_id == result.upload_id)
            .order_by(Product.row_index)
            .all()
        )
        assert len(products) == 12
        assert products[0].packsize == "600-800 g"
        assert products[0].price == 40.0
        assert products[0].original_price == 50.0
        assert products[0].quantity is None
        assert products[11].packsize is None

    def test_ingest_writes_audit_log(self, test_db, sample_catalog_csv):
        result = IngestionService(test_db).ingest_file(sample_catalog_csv)
        audit = test_db.query(AuditLog).filter(AuditLog.entity_id == result.upload_id).one()
        assert audit.action == AuditAction.CREATED
        assert audit.changes["rows"] == 12

    def test_unsupported_file_type(self, test_db):
        service = IngestionService(test_db)
        with pytest.raises(UnsupportedFileTypeError):
            service.get_parser("xlsx")

    def test_failed_ingestion_records_upload(self, test_db, temp_csv_file):
        with open(temp_csv_file, 'w') as f:
            f.write("name,price\n")
            f.write("Onion,40\n")

        with pytest.raises(MissingColumnError):
            IngestionService(test_db).ingest_file(temp_csv_file)

        upload = test_db.query(Upload).one()
        assert upload.status == UploadStatus.FAILED
        assert "packsize" in upload.file_metadata["error"]
        assert test_db.query(Product).count() == 0
