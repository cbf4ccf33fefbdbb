
from flask import Blueprint, request, jsonify, g
from .. import db
from ..errors import NotFound, ValidationError
from ..identity import optional_auth, require_barista
from ..models import Product, ProductCategory, SIZES, STANDARD_SIZE
from ..schemas import ProductIn, ProductUpdate, parse_payload

products_bp = Blueprint('products', __name__)


def caller_is_barista():
    return g.auth is not None and g.auth.is_barista


@products_bp.get('')
@optional_auth
def list_products():
    query = Product.query
    if not caller_is_barista():
        query = query.filter(Product.is_active.is_(True))
    category = request.args.get('category')
    if category in {c.value for c in ProductCategory}:
        query = query.filter(Product.category == category)
    products = [p.to_dict() for p in query.order_by(Product.created_at.desc()).all()]
    return jsonify(products)


@products_bp.get('/<product_id>/price')
@optional_auth
def product_price(product_id):
    product = db.session.get(Product, product_id)
    if product is None or (not product.is_active and not caller_is_barista()):
        raise NotFound("Product not found")
    size = request.args.get('size', STANDARD_SIZE)
    if size not in SIZES and size != STANDARD_SIZE:
        raise ValidationError(f"Unknown size {size!r}")
    return jsonify({
        "product_id": product.id,
        "size": size,
        "price": product.price_for_size(size),
    })


@products_bp.post('')
@require_barista
def create_product():
    payload = parse_payload(ProductIn, request.get_json(force=True, silent=True) or {})
    product = Product(**payload.to_record())
    db.session.add(product)
    db.session.commit()
    return jsonify(product.to_dict()), 201


@products_bp.patch('/<product_id>')
@require_barista
def update_product(product_id):
    payload = parse_payload(ProductUpdate, request.get_json(force=True, silent=True) or {})
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found")
    for field, value in payload.to_changes().items():
        setattr(product, field, value)
    db.session.commit()
    return jsonify(product.to_dict())


@products_bp.delete('/<product_id>')
@require_barista
def delete_product(product_id):
    Product.query.filter(Product.id == product_id).delete()
    db.session.commit()
    return jsonify({"ok": True})
