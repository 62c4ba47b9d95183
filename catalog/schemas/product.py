"""
catalog/schemas/product.py

Output contract for one product record in the catalog snapshot.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from catalog.domain.catalog import Product


class ProductRecord(BaseModel):
    """
    Serialized product with the stable camelCase field names of the JSON file.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )

    name: str
    price: float = Field(ge=0.0)
    list_price: float = Field(ge=0.0, alias="listPrice")
    on_sale: bool = Field(alias="onSale")
    stock_state: Literal["Available", "OutOfStock", "Unknown"] = Field(alias="stockState")
    image: str
    thumbnail: str
    link: str = Field(min_length=1)
    category: str = Field(min_length=1)
    subcategories: list[str] = Field(default_factory=list)

    @classmethod
    def from_product(cls, product: Product) -> "ProductRecord":
        return cls(
            name=product.name,
            price=product.price,
            list_price=product.list_price,
            on_sale=product.on_sale,
            stock_state=product.stock_state.value,
            image=product.image,
            thumbnail=product.thumbnail,
            link=product.link,
            category=product.category,
            subcategories=list(product.subcategories),
        )

    def to_json_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)
