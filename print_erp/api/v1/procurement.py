from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from print_erp.core.database import get_db
from print_erp.models.procurement import OrderPayment, QuotationRequest, SupplierOrder
from print_erp.schemas.procurement import (
    OrderCreate, OrderUpdate, OrderResponse, OrderItemResponse, StatusUpdate,
    PaymentCreate, PaymentResponse, PaymentRecordResponse,
    QuotationCreate, QuotationUpdate, QuotationResponse, QuotationItemResponse, QuotationStatusResponse,
)
from print_erp.services.order_status import allowed_order_statuses
from print_erp.services.payment_service import PaymentService, decode_payment_notes
from print_erp.services.quotation_service import QuotationService
from print_erp.services.supplier_order_service import SupplierOrderService
from print_erp.api.v1.dependencies import get_current_user, require_permission_dependency
from print_erp.models.user import User

router = APIRouter()

def _payment_response(payment: OrderPayment) -> PaymentResponse:
    notes, payment_code = decode_payment_notes(payment.notes)
    return PaymentResponse(
        id=payment.id,
        order_id=payment.order_id,
        amount=payment.amount,
        payment_date=payment.payment_date,
        payment_method=payment.payment_method,
        payment_code=payment_code,
        notes=notes,
        created_at=payment.created_at,
    )

def _order_response(order: SupplierOrder) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        order_id=order.order_id,
        supplier_id=order.supplier_id,
        supplier_name=order.supplier.name if order.supplier else None,
        quotation_id=order.quotation_id,
        date=order.date,
        status=order.status,
        total_amount=order.total_amount,
        paid_amount=order.paid_amount,
        remaining_amount=order.remaining_amount,
        payment_plan=order.payment_plan,
        notes=order.notes,
        version=order.version,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[OrderItemResponse.from_orm(item) for item in order.items],
        payments=[_payment_response(payment) for payment in order.payments],
        allowed_statuses=allowed_order_statuses(order.status),
    )

def _quotation_response(quotation: QuotationRequest) -> QuotationResponse:
    return QuotationResponse(
        id=quotation.id,
        request_id=quotation.request_id,
        supplier_id=quotation.supplier_id,
        supplier_name=quotation.supplier.name if quotation.supplier else None,
        date=quotation.date,
        status=quotation.status,
        notes=quotation.notes,
        version=quotation.version,
        created_at=quotation.created_at,
        updated_at=quotation.updated_at,
        items=[QuotationItemResponse.from_orm(item) for item in quotation.items],
    )

# Purchase orders
@router.get("/orders", response_model=List[OrderResponse])
def get_orders(
    skip: int = 0,
    limit: int = 100,
    status: Optional[str] = None,
    supplier_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    orders = SupplierOrderService.list_orders(db, status, supplier_id, skip, limit)
    return [_order_response(order) for order in orders]

@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _order_response(SupplierOrderService.get_order(db, order_id))

@router.post("/orders", response_model=OrderResponse, status_code=201)
def create_order(
    order_data: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("procurement", "create"))
):
    order = SupplierOrderService.create_order(db, order_data)
    return _order_response(order)

@router.put("/orders/{order_id}", response_model=OrderResponse)
def update_order(
    order_id: int,
    order_data: OrderUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("procurement", "edit"))
):
    """Edit header fields and/or lines; lines are matched by id"""
    order = SupplierOrderService.update_order(db, order_id, order_data)
    return _order_response(order)

@router.put("/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    status_update: StatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("procurement", "edit"))
):
    order, _ = SupplierOrderService.change_status(
        db, order_id, status_update.status, status_update.payment_plan
    )
    return _order_response(order)

@router.post("/orders/{order_id}/receive", response_model=OrderResponse)
def receive_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("procurement", "edit"))
):
    """Stock in a shipped order and mark it Received"""
    order, _ = SupplierOrderService.receive_order(db, order_id)
    return _order_response(order)

@router.delete("/orders/{order_id}")
def delete_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("procurement", "delete"))
):
    SupplierOrderService.delete_order(db, order_id)
    return {"message": "Supplier order deleted successfully", "order_id": order_id}

# Payments
@router.get("/orders/{order_id}/payments", response_model=List[PaymentResponse])
def get_order_payments(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return [_payment_response(payment) for payment in PaymentService.list_payments(db, order_id)]

@router.post("/orders/{order_id}/payments", response_model=PaymentRecordResponse, status_code=201)
def record_payment(
    order_id: int,
    payment: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("procurement", "pay"))
):
    db_payment, order, released = PaymentService.record_payment(db, order_id, payment)
    return PaymentRecordResponse(
        payment=_payment_response(db_payment),
        order=_order_response(order),
        stock_released=released,
    )

# Quotation requests
@router.get("/quotations", response_model=List[QuotationResponse])
def get_quotations(
    skip: int = 0,
    limit: int = 100,
    status: Optional[str] = None,
    supplier_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    quotations = QuotationService.list_quotations(db, status, supplier_id, skip, limit)
    return [_quotation_response(quotation) for quotation in quotations]

@router.get("/quotations/{quotation_id}", response_model=QuotationResponse)
def get_quotation(
    quotation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _quotation_response(QuotationService.get_quotation(db, quotation_id))

@router.post("/quotations", response_model=QuotationResponse, status_code=201)
def create_quotation(
    quotation_data: QuotationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("procurement", "create"))
):
    return _quotation_response(QuotationService.create_quotation(db, quotation_data))

@router.put("/quotations/{quotation_id}", response_model=QuotationResponse)
def update_quotation(
    quotation_id: int,
    quotation_data: QuotationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("procurement", "edit"))
):
    return _quotation_response(QuotationService.update_quotation(db, quotation_id, quotation_data))

@router.put("/quotations/{quotation_id}/status", response_model=QuotationStatusResponse)
def update_quotation_status(
    quotation_id: int,
    status_update: StatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("procurement", "edit"))
):
    """Approving a quotation also creates its purchase order"""
    quotation, order = QuotationService.change_status(db, quotation_id, status_update.status)
    return QuotationStatusResponse(
        quotation=_quotation_response(quotation),
        order=_order_response(order) if order else None,
    )

@router.post("/quotations/{quotation_id}/convert", response_model=QuotationStatusResponse, status_code=201)
def convert_quotation(
    quotation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("procurement", "create"))
):
    quotation, order = QuotationService.create_order_from_quotation(db, quotation_id)
    return QuotationStatusResponse(
        quotation=_quotation_response(quotation),
        order=_order_response(order),
    )

@router.delete("/quotations/{quotation_id}")
def delete_quotation(
    quotation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("procurement", "delete"))
):
    QuotationService.delete_quotation(db, quotation_id)
    return {"message": "Quotation request deleted successfully", "quotation_id": quotation_id}
