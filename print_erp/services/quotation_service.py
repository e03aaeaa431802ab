"""
Quotation Service - requests for quotation (RFQ) and their conversion into
purchase orders.
"""
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from print_erp.core.config import settings
from print_erp.core.database import transaction
from print_erp.core.exceptions import BusinessRuleError, ConflictError, NotFoundError
from print_erp.core.logging_config import get_logger
from print_erp.models.inventory import InventoryItem
from print_erp.models.procurement import QuotationItem, QuotationRequest, QuotationStatus, SupplierOrder
from print_erp.schemas.procurement import OrderItemIn, QuotationCreate, QuotationItemIn, QuotationUpdate
from print_erp.services import order_status
from print_erp.services.inventory_service import InventoryService
from print_erp.services.numbering import next_document_number
from print_erp.services.supplier_order_service import SupplierOrderService, check_supplier

logger = get_logger(__name__)


def _ensure_editable(quotation: QuotationRequest) -> None:
    if quotation.status == QuotationStatus.CONVERTED.value:
        logger.warning(f"Rejected edit of converted quotation {quotation.request_id}")
        raise ConflictError(
            f"Quotation {quotation.request_id} has been converted to a purchase order and can no longer be edited"
        )


def _new_item(db: Session, line: QuotationItemIn) -> QuotationItem:
    inventory_item = InventoryService.get_by_id(db, line.inventory_id)
    return QuotationItem(
        inventory_id=line.inventory_id,
        inventory_name=line.inventory_name or inventory_item.name,
        quantity=line.quantity,
        expected_price=line.expected_price,
        notes=line.notes,
    )


class QuotationService:

    @staticmethod
    def get_quotation(db: Session, quotation_id: int, lock: bool = False) -> QuotationRequest:
        query = db.query(QuotationRequest).filter(QuotationRequest.id == quotation_id)
        if lock:
            query = query.with_for_update().populate_existing()
        quotation = query.first()
        if not quotation:
            raise NotFoundError(f"Quotation request {quotation_id} not found")
        return quotation

    @staticmethod
    def list_quotations(
        db: Session,
        status: Optional[str] = None,
        supplier_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[QuotationRequest]:
        query = db.query(QuotationRequest)
        if status:
            query = query.filter(QuotationRequest.status == order_status.parse_quotation_status(status).value)
        if supplier_id:
            query = query.filter(QuotationRequest.supplier_id == supplier_id)
        return query.order_by(
            QuotationRequest.date.desc(), QuotationRequest.id.desc()
        ).offset(skip).limit(limit).all()

    @staticmethod
    def create_quotation(db: Session, data: QuotationCreate) -> QuotationRequest:
        with transaction(db):
            check_supplier(db, data.supplier_id)

            request_id = data.request_id
            if request_id:
                if db.query(QuotationRequest.id).filter(QuotationRequest.request_id == request_id).first():
                    raise ConflictError(f"Quotation number {request_id} already exists")
            else:
                request_id = next_document_number(db, QuotationRequest.request_id, settings.RFQ_PREFIX)

            quotation = QuotationRequest(
                request_id=request_id,
                supplier_id=data.supplier_id,
                date=data.date or date.today(),
                status=QuotationStatus.DRAFT.value,
                notes=data.notes,
                items=[_new_item(db, line) for line in data.items],
            )
            db.add(quotation)
        logger.info(f"Created quotation request {quotation.request_id}")
        return quotation

    @staticmethod
    def _apply_item_edits(db: Session, quotation: QuotationRequest, lines: List[QuotationItemIn]) -> None:
        """Diff by item id: drop missing items, update known ones, add new ones"""
        if not lines:
            raise BusinessRuleError("A quotation request needs at least one item")

        existing = {item.id: item for item in quotation.items}
        kept_ids = {line.id for line in lines if line.id is not None}
        unknown = kept_ids - set(existing)
        if unknown:
            raise BusinessRuleError(
                f"Items {sorted(unknown)} do not belong to quotation {quotation.request_id}"
            )

        for item_id, item in existing.items():
            if item_id not in kept_ids:
                quotation.items.remove(item)

        for line in lines:
            if line.id is None:
                quotation.items.append(_new_item(db, line))
                continue
            item = existing[line.id]
            inventory_item = InventoryService.get_by_id(db, line.inventory_id)
            item.inventory_id = line.inventory_id
            item.inventory_name = line.inventory_name or inventory_item.name
            item.quantity = line.quantity
            item.expected_price = line.expected_price
            item.notes = line.notes

        db.flush()

    @staticmethod
    def update_quotation(db: Session, quotation_id: int, data: QuotationUpdate) -> QuotationRequest:
        with transaction(db):
            quotation = QuotationService.get_quotation(db, quotation_id, lock=True)
            _ensure_editable(quotation)

            if data.supplier_id is not None:
                check_supplier(db, data.supplier_id)
                quotation.supplier_id = data.supplier_id
            if data.date is not None:
                quotation.date = data.date
            if "notes" in data.dict(exclude_unset=True):
                quotation.notes = data.notes
            if data.items is not None:
                QuotationService._apply_item_edits(db, quotation, data.items)
        return quotation

    @staticmethod
    def _convert(db: Session, quotation: QuotationRequest) -> SupplierOrder:
        if quotation.status == QuotationStatus.CONVERTED.value:
            raise ConflictError(
                f"Quotation {quotation.request_id} has already been converted to a purchase order"
            )
        if quotation.status == QuotationStatus.REJECTED.value:
            raise BusinessRuleError(f"Rejected quotation {quotation.request_id} cannot be converted")
        if not quotation.items:
            raise BusinessRuleError(f"Quotation {quotation.request_id} has no items")

        lines = []
        for item in quotation.items:
            inventory_item = db.get(InventoryItem, item.inventory_id)
            lines.append(OrderItemIn(
                inventory_id=item.inventory_id,
                inventory_name=item.inventory_name,
                quantity=item.quantity,
                unit_price=item.expected_price or 0,
                item_type=(inventory_item.item_type if inventory_item else None) or "piece",
            ))

        order = SupplierOrderService.build_order(
            db,
            quotation.supplier_id,
            lines,
            notes=f"Created from RFQ: {quotation.request_id}",
            quotation_id=quotation.id,
        )
        quotation.status = QuotationStatus.CONVERTED.value
        db.flush()
        logger.info(f"Converted quotation {quotation.request_id} into order {order.order_id}")
        return order

    @staticmethod
    def create_order_from_quotation(db: Session, quotation_id: int) -> Tuple[QuotationRequest, SupplierOrder]:
        with transaction(db):
            quotation = QuotationService.get_quotation(db, quotation_id, lock=True)
            order = QuotationService._convert(db, quotation)
        return quotation, order

    @staticmethod
    def change_status(
        db: Session,
        quotation_id: int,
        status: str,
    ) -> Tuple[QuotationRequest, Optional[SupplierOrder]]:
        """Plain status edit; approving a quotation converts it into a purchase order"""
        requested = order_status.parse_quotation_status(status)
        order = None
        with transaction(db):
            quotation = QuotationService.get_quotation(db, quotation_id, lock=True)
            _ensure_editable(quotation)
            order_status.check_quotation_transition(quotation.status, requested)

            if requested.value != quotation.status:
                previous = quotation.status
                quotation.status = requested.value
                logger.info(f"Quotation {quotation.request_id} status {previous} -> {requested.value}")
                if requested == QuotationStatus.APPROVED:
                    order = QuotationService._convert(db, quotation)
        return quotation, order

    @staticmethod
    def delete_quotation(db: Session, quotation_id: int) -> None:
        with transaction(db):
            quotation = QuotationService.get_quotation(db, quotation_id, lock=True)
            _ensure_editable(quotation)
            request_id = quotation.request_id
            db.delete(quotation)
        logger.info(f"Deleted quotation request {request_id}")
