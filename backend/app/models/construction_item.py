"""
construction_item.py — Construction Item Catalog & Order Line Records

ConstructionItem is a catalog ("master") entry describing a billable unit of
work. OrderItem links an order to one catalog entry by `item_id`.
"""

from typing import List, Optional

from app.models.base import CamelModel


class PriceOption(CamelModel):
    """Area-dependent price, e.g. {"label": "30㎡未満", "price": 8800}."""
    label: str
    price: int


class ConstructionItem(CamelModel):
    id: str
    name: str = ""
    price: int = 0
    active: bool = False
    created_at: str = ""
    has_quantity: bool = False
    has_area_selection: bool = False
    price_options: Optional[List[PriceOption]] = None

    def price_for(self, area_option: Optional[str]) -> int:
        """Unit price, using the matching area option when the item has one."""
        if self.has_area_selection and self.price_options and area_option:
            for option in self.price_options:
                if option.label == area_option:
                    return option.price
        return self.price


class OrderItem(CamelModel):
    id: str = ""
    order_id: str = ""
    item_id: str = ""
    quantity: int = 1
    price: float = 0
    selected_area_option: Optional[str] = None
    created_at: str = ""


class EnrichedOrderItem(OrderItem):
    # None when the catalog has no entry for item_id; dropped from the JSON
    construction_item: Optional[ConstructionItem] = None
