
from coffee_pickup import create_app, db
from coffee_pickup.models import Product

PLACEHOLDER_IMAGE = "https://images.unsplash.com/photo-1509042239860-f550ce710b93?w=400&q=80"

products = [
    dict(name="Latte", price=4.5, category="coffee", is_popular=True,
         description="Espresso with steamed milk",
         size_price_modifiers={"Small": -10, "Large": 15}),
    dict(name="Espresso", price=3.0, category="coffee",
         size_price_modifiers={"Large": 20}),
    dict(name="Mocha", price=5.0, category="coffee", rating=4.6),
    dict(name="Croissant", price=3.5, category="dessert"),
    dict(name="Cheesecake", price=5.5, category="dessert", is_popular=True),
]

if __name__ == '__main__':
    app = create_app()
    with app.app_context():
        existing = {name.lower() for (name,) in db.session.query(Product.name)}
        added = 0
        for p in products:
            if p["name"].lower() in existing:
                continue
            db.session.add(Product(image=PLACEHOLDER_IMAGE, **p))
            added += 1
        db.session.commit()
        print(f"Seeded {added} products.")
