"""
Tests for tabular exports of a resolution.
"""
import asyncio
import io

import pandas as pd
import pytest

from pricelist_resolver.backend.snapshot import SnapshotBackend
from pricelist_resolver.data.export import RULE_COLUMNS, frame_to_excel_bytes, rules_to_frame, scope_summary
from pricelist_resolver.engine import ProductResolver


@pytest.fixture(scope="module")
def result(sample_snapshot_path):
    resolver = ProductResolver(SnapshotBackend.from_file(sample_snapshot_path))
    return asyncio.run(resolver.resolve("7501000000010"))


def test_rules_frame(result):
    df = rules_to_frame(result)

    assert list(df.columns) == RULE_COLUMNS
    assert len(df) == result.buckets.count()
    assert df['Scope'].tolist() == ['global', 'category', 'product_template', 'product_variant']
    assert df['Rule ID'].tolist() == [1, 2, 5, 4]
    assert set(df['Product']) == {"Classic Tee Red XL"}

    variant_row = df[df['Scope'] == 'product_variant'].iloc[0]
    assert variant_row['Target ID'] == 10
    assert variant_row['Price List'] == "Retail"


def test_scope_summary_lists_every_scope(result):
    summary = scope_summary(result)
    assert summary['Scope'].tolist() == ['global', 'category', 'product_template', 'product_variant']
    assert summary['Rules'].sum() == result.buckets.count()


def test_excel_export_round_trips(result):
    df = rules_to_frame(result)
    data = frame_to_excel_bytes(df)

    assert data[:2] == b'PK', "xlsx files are zip archives"
    loaded = pd.read_excel(io.BytesIO(data), sheet_name='Rules')
    assert loaded['Rule ID'].tolist() == [1, 2, 5, 4]
