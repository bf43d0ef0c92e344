"""Application service: Create Order use case.

Orchestrates the payment gateway (confirm the charge) and the order
repository (persist).  Payment confirmation always comes first; if
persistence then fails, money has moved without an order record and the
caller gets a ReconciliationError instead of a plain upstream failure.
"""

from __future__ import annotations

import logging

from orderdesk.application.dto import CreateOrderRequest, CreateOrderResult
from orderdesk.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    ReconciliationError,
    UpstreamError,
    ValidationError,
)
from orderdesk.domain.model.order import (
    Customer,
    Order,
    OrderAmounts,
    OrderLineItem,
    PaymentReference,
    ShippingAddress,
)
from orderdesk.domain.model.value_objects import Money, OrderId, Quantity
from orderdesk.domain.repository.order_repository import OrderRepository
from orderdesk.domain.repository.payment_gateway import (
    CONFIRMED_PAYMENT_STATES,
    PaymentGateway,
)

logger = logging.getLogger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        payment_gateway: PaymentGateway,
        order_id_prefix: str = "NG",
    ) -> None:
        self._order_repo = order_repo
        self._payment_gateway = payment_gateway
        self._order_id_prefix = order_id_prefix

    def handle(self, request: CreateOrderRequest) -> CreateOrderResult:
        """Record a paid order.

        Steps:
        1. Build and validate the Order aggregate (no collaborator calls).
        2. Confirm with the gateway that the payment went through.
        3. Persist and return the order and record identifiers.
        """
        order = self._build_order(request)
        self._confirm_payment(order.payment.payment_id)

        try:
            record_id = self._order_repo.add(order)
        except DomainException as exc:
            detail = f" ({exc.detail})" if isinstance(exc, UpstreamError) and exc.detail else ""
            logger.error(
                f"Reconciliation needed: payment {order.payment.payment_id} succeeded "
                f"but order {order.order_id} was not recorded: {exc}{detail}"
            )
            raise ReconciliationError(
                order_id=order.order_id,
                payment_id=order.payment.payment_id,
                cause=str(exc),
            ) from exc

        logger.info(
            f"Order {order.order_id} recorded as {record_id} "
            f"(total {order.total}, status {order.status.value})"
        )
        return CreateOrderResult(
            order_id=order.order_id,
            record_id=record_id,
            status=order.status.value,
        )

    # --- Steps ----------------------------------------------------------------

    def _build_order(self, request: CreateOrderRequest) -> Order:
        customer = Customer.create(
            first_name=request.customer.first_name,
            last_name=request.customer.last_name,
            email=request.customer.email,
            phone=request.customer.phone,
        )
        shipping = ShippingAddress(
            address=request.shipping.address,
            city=request.shipping.city,
            state=request.shipping.state,
            zip_code=request.shipping.zip_code,
            country=request.shipping.country,
        )

        line_items: list[OrderLineItem] = []
        for spec in request.items:
            if not spec.name or not str(spec.name).strip():
                raise ValidationError("Every order item needs a name")
            line_items.append(
                OrderLineItem(
                    name=str(spec.name).strip(),
                    quantity=Quantity(spec.quantity),
                    unit_price=Money.of(spec.price),  # <-- price snapshot
                    size=spec.size,
                )
            )

        totals = request.totals
        amounts = OrderAmounts.create(
            subtotal=Money.of(totals.subtotal),
            shipping=Money.of(totals.shipping),
            tax=Money.of(totals.tax),
            service_fee=Money.of(totals.service_fee),
            total=Money.of(totals.total),
        )

        return Order.create(
            order_id=str(OrderId.generate(self._order_id_prefix)),
            customer=customer,
            shipping=shipping,
            items=line_items,
            amounts=amounts,
            payment=PaymentReference(
                payment_id=(request.payment.payment_id or "").strip(),
                method=request.payment.method or "card",
            ),
            delivery_notes=request.shipping.notes,
            order_notes=request.notes,
        )

    def _confirm_payment(self, payment_id: str) -> None:
        try:
            state = self._payment_gateway.retrieve_payment_status(payment_id)
        except EntityNotFoundError as exc:
            raise ValidationError(f"Unknown payment reference '{payment_id}'") from exc

        if state not in CONFIRMED_PAYMENT_STATES:
            raise ValidationError(
                f"Payment {payment_id} has not been confirmed (status: {state})"
            )
