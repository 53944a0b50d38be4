DEFAULT_PRODUCTS = (
    # product_id, name, price, category, barcode, quick_add
    ("P-COFFEE", "Coffee (Medium)", "2.50", "Beverages", "0001", 1),
    ("P-WATER", "Spring Water 500ml", "1.25", "Beverages", "0002", 1),
    ("P-CHIPS", "Potato Chips", "3.49", "Snacks", "0003", 1),
    ("P-MILK", "Milk 2L", "4.99", "Dairy", "0004", 0),
    ("P-BREAD", "Whole Wheat Bread", "3.79", "Bakery", "0005", 0),
    ("P-BATT", "AA Batteries (4)", "10.00", "Electronics", "0006", 0),
)


def seed(conn):
    # if the catalog is empty, load a small starter catalog
    row = conn.execute("SELECT COUNT(*) AS n FROM products").fetchone()
    if row and row["n"] == 0:
        conn.executemany("""
            INSERT INTO products(product_id, name, price, category, barcode, quick_add)
            VALUES (?, ?, ?, ?, ?, ?)
        """, DEFAULT_PRODUCTS)
        conn.commit()
