"""
Rule export - Tabular views of a resolution for display and download.
"""
import io

import pandas as pd

from ..engine.models import SCOPES, ResolutionResult

RULE_COLUMNS = [
    'Scope',
    'Rule ID',
    'Price List',
    'Min Qty',
    'Compute',
    'Fixed Price',
    'Percent',
    'Target ID',
    'Product',
]


def _target_id(rule):
    # The identifier the rule was matched on; global rules have none
    return {
        'category': rule.category_id,
        'product_template': rule.template_id,
        'product_variant': rule.variant_id,
    }.get(rule.scope)


def rules_to_frame(result: ResolutionResult) -> pd.DataFrame:
    """One row per classified rule, in bucket order."""
    rows = []
    for scope, rules in result.buckets.items():
        for rule in rules:
            rows.append({
                'Scope': scope,
                'Rule ID': rule.id,
                'Price List': rule.pricelist_name or rule.pricelist_id,
                'Min Qty': rule.min_quantity,
                'Compute': rule.compute_price,
                'Fixed Price': rule.fixed_price,
                'Percent': rule.percent_price,
                'Target ID': _target_id(rule),
                'Product': rule.product_name,
            })
    return pd.DataFrame(rows, columns=RULE_COLUMNS)


def scope_summary(result: ResolutionResult) -> pd.DataFrame:
    """Rule count per scope, including empty scopes."""
    return pd.DataFrame(
        [{'Scope': scope, 'Rules': len(result.buckets.get(scope))} for scope in SCOPES],
        columns=['Scope', 'Rules'],
    )


def frame_to_excel_bytes(frame: pd.DataFrame, sheet_name: str = 'Rules') -> bytes:
    """Serialize a frame to an .xlsx workbook."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        frame.to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()
