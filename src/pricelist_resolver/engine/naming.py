"""Display name composition for product variants."""
from typing import Iterable


def compose_display_name(base_name: str, variant_names: Iterable[str]) -> str:
    """
    Append variant attribute names to the base product name.

    Example: ("T-Shirt", ["Red", "XL"]) -> "T-Shirt Red XL"
    """
    suffix = " ".join(str(name).strip() for name in variant_names if name and str(name).strip())
    if suffix:
        return f"{base_name} {suffix}"
    return base_name
