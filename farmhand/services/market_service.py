"""
Marketplace: individual listings, group wholesale (unit sales), orders and
the farmer's harvest inventory.
"""

import logging
from typing import List, Optional

from farmhand.core.errors import DocumentNotFoundError
from farmhand.models.market import InventoryItem, Listing, Order, UnitSale, UnitSaleContributor

logger = logging.getLogger(__name__)


def unit_sale_status(current_quantity: float, target_quantity: float) -> str:
    """A group sale opens for buyers once pooled stock reaches the target."""
    return "active" if current_quantity >= target_quantity else "open"


class MarketService:
    # ── Individual listings ───────────────────────────────────────────

    async def create_listing(self, farmer_id: str, farmer_name: str, crop_type: str, quantity: float,
                             price_per_unit: float, unit: str = "kg", currency: str = "USD",
                             description: str = "", inventory_id: Optional[str] = None) -> Listing:
        listing = Listing(
            farmer_id=farmer_id,
            farmer_name=farmer_name,
            crop_type=crop_type,
            quantity=quantity,
            unit=unit,
            price_per_unit=price_per_unit,
            currency=currency,
            description=description,
            inventory_id=inventory_id,
        )
        await listing.insert()
        return listing

    async def get_active_listings(self) -> List[Listing]:
        return await Listing.find(Listing.status == "active").sort(-Listing.created_at).to_list()

    async def get_my_listings(self, farmer_id: str) -> List[Listing]:
        return await Listing.find(Listing.farmer_id == farmer_id).sort(-Listing.created_at).to_list()

    async def cancel_listing(self, listing_id) -> Listing:
        listing = await self._get(Listing, "listings", listing_id)
        listing.status = "cancelled"
        await listing.save()
        return listing

    async def buy_listing(self, listing_id, buyer_id: str, buyer_name: str, quantity: float,
                          total_price: float) -> Order:
        listing = await self._get(Listing, "listings", listing_id)
        listing.status = "sold"
        await listing.save()
        order = Order(
            buyer_id=buyer_id,
            buyer_name=buyer_name,
            listing_id=str(listing.id),
            quantity=quantity,
            total_price=total_price,
            type="individual",
        )
        await order.insert()
        logger.info("Order %s placed on listing %s", order.id, listing.id)
        return order

    # ── Unit sales (group wholesale) ──────────────────────────────────

    async def create_unit_sale(self, farmer_id: str, farmer_name: str, crop_type: str,
                               target_quantity: float, price_per_unit: float, initial_quantity: float,
                               inventory_id: Optional[str] = None, description: str = "") -> UnitSale:
        sale = UnitSale(
            crop_type=crop_type,
            target_quantity=target_quantity,
            price_per_unit=price_per_unit,
            description=description,
            current_quantity=initial_quantity,
            contributors=[UnitSaleContributor(
                farmer_id=farmer_id,
                farmer_name=farmer_name,
                quantity=initial_quantity,
                inventory_id=inventory_id,
            )],
        )
        await sale.insert()
        return sale

    async def get_open_unit_sales(self) -> List[UnitSale]:
        return await UnitSale.find(UnitSale.status == "open").sort(-UnitSale.created_at).to_list()

    async def get_all_unit_sales(self) -> List[UnitSale]:
        return await UnitSale.find_all().sort(-UnitSale.created_at).to_list()

    async def join_unit_sale(self, sale_id, farmer_id: str, farmer_name: str, quantity: float,
                             inventory_id: Optional[str] = None) -> UnitSale:
        sale = await UnitSale.get(sale_id)
        if sale is None:
            raise DocumentNotFoundError("unit_sales", str(sale_id))
        sale.contributors.append(UnitSaleContributor(
            farmer_id=farmer_id,
            farmer_name=farmer_name,
            quantity=quantity,
            inventory_id=inventory_id,
        ))
        sale.current_quantity += quantity
        sale.status = unit_sale_status(sale.current_quantity, sale.target_quantity)
        await sale.save()
        return sale

    async def buy_unit_sale(self, sale_id, buyer_id: str, buyer_name: str, quantity: float,
                            price_per_unit: float) -> Order:
        sale = await self._get(UnitSale, "unit_sales", sale_id)
        sale.status = "completed"
        await sale.save()
        order = Order(
            buyer_id=buyer_id,
            buyer_name=buyer_name,
            unit_sale_id=str(sale.id),
            quantity=quantity,
            total_price=quantity * price_per_unit,
            type="wholesale",
        )
        await order.insert()
        return order

    # ── Orders ────────────────────────────────────────────────────────

    async def get_my_orders(self, buyer_id: str) -> List[Order]:
        return await Order.find(Order.buyer_id == buyer_id).sort(-Order.created_at).to_list()

    # ── Inventory ─────────────────────────────────────────────────────

    async def add_to_inventory(self, farmer_id: str, crop_type: str, quantity: float, unit: str = "kg",
                               planting_plan_id: Optional[str] = None) -> InventoryItem:
        item = InventoryItem(
            farmer_id=farmer_id,
            crop_type=crop_type,
            quantity=quantity,
            unit=unit,
            planting_plan_id=planting_plan_id,
        )
        await item.insert()
        return item

    async def get_my_inventory(self, farmer_id: str) -> List[InventoryItem]:
        return await InventoryItem.find(InventoryItem.farmer_id == farmer_id).sort(-InventoryItem.created_at).to_list()

    async def mark_inventory_listed(self, inventory_id) -> InventoryItem:
        item = await self._get(InventoryItem, "inventory", inventory_id)
        item.status = "listed"
        await item.save()
        return item

    @staticmethod
    async def _get(model, collection: str, document_id):
        document = await model.get(document_id)
        if document is None:
            raise DocumentNotFoundError(collection, str(document_id))
        return document


def get_market_service():
    return MarketService()
