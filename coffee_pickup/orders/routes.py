
import logging
from flask import Blueprint, request, jsonify, g
from .. import db
from ..errors import CapacityExceeded, NotFound
from ..identity import require_auth, require_barista
from ..models import Order, OrderStatus, as_utc
from ..schemas import OrderIn, StatusUpdate, parse_payload
from ..slots import CategoryLookup, Rejected, SlotAdmissionController, parse_pickup_time

logger = logging.getLogger(__name__)

orders_bp = Blueprint('orders', __name__)

LIST_LIMIT = 50


def parse_ids(raw):
    if not raw or not raw.strip():
        return []
    return [part.strip() for part in raw.split(',') if part.strip()]


@orders_bp.get('/slot-availability')
def slot_availability():
    pickup_time = parse_pickup_time(request.args.get('pickup_time', ''))
    controller = SlotAdmissionController(CategoryLookup.from_catalog())
    return jsonify(controller.remaining_capacity(pickup_time).to_dict())


@orders_bp.post('')
@require_auth
def create_order():
    payload = parse_payload(OrderIn, request.get_json(force=True, silent=True) or {})
    pickup_time = parse_pickup_time(payload.pickup_time)
    order_items = [item.model_dump() for item in payload.order_items]

    controller = SlotAdmissionController(CategoryLookup.from_catalog())
    coffee_items = controller.count_coffee_items(order_items, payload.total_items)
    decision = controller.try_admit(pickup_time, coffee_items)
    if isinstance(decision, Rejected):
        raise CapacityExceeded(decision.reason)

    order = Order(
        customer_name=payload.customer_name,
        customer_avatar=payload.customer_avatar,
        pickup_time=as_utc(pickup_time),
        total_items=payload.total_items,
        order_items=order_items,
        status=OrderStatus.NEW.value,
        user_id=g.auth.user_id,
    )
    db.session.add(order)
    db.session.commit()
    logger.info("Created order %s for %s", order.id, order.to_dict()['pickup_time'])
    return jsonify(order.to_dict()), 201


@orders_bp.get('')
@require_auth
def list_orders():
    query = Order.query
    if not g.auth.is_barista:
        query = query.filter(Order.user_id == g.auth.user_id)
    ids = parse_ids(request.args.get('ids'))
    if ids:
        query = query.filter(Order.id.in_(ids)).order_by(Order.created_at.desc())
    else:
        query = query.order_by(Order.pickup_time.asc()).limit(LIST_LIMIT)
    return jsonify([o.to_dict() for o in query.all()])


@orders_bp.patch('/<order_id>')
@require_barista
def update_order(order_id):
    payload = parse_payload(StatusUpdate, request.get_json(force=True, silent=True) or {})
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")
    order.status = payload.status
    db.session.commit()
    logger.info("Order %s moved to %s", order.id, order.status)
    return jsonify(order.to_dict())
