"""Generate a synthetic product catalog CSV"""
import random
from pathlib import Path

import polars as pl

CATEGORIES = {
    "Fruits & Vegetables": ["Onion", "Tomato", "Banana", "Apple", "Potato"],
    "Dairy, Bread & Batter": ["Paneer", "Curd", "Butter", "Milk", "Brown Bread"],
    "Munchies": ["Potato Chips", "Nachos", "Roasted Peanuts", "Bhujia"],
    "Cooking Essentials": ["Basmati Rice", "Toor Dal", "Sunflower Oil", "Iodised Salt"],
    "Cold Drinks & Juices": ["Orange Juice", "Cola", "Coconut Water"],
    "Health & Hygiene": ["Multivitamin Tablets", "Hand Wash", "Face Wipes"],
}

PACK_SIZES = [
    "100 g", "200 g", "250 g", "500 g", "600-800 g", "450-500 gm",
    "1 kg", "1.5 kg", "5 kg",
    "200 ml", "500 ml", "200-300 ml",
    "1 l", "2 l",
    "500 mg", "60 mg",
    "4 pcs", "1 pc", "6 pieces", "1 pack",
    "12345", "Combo", None,
]


def generate_product(category: str, name: str) -> dict:
    """One catalog row with a random pack size and discount"""
    original_price = round(random.uniform(20, 900), 0)
    discount_percent = random.choice([0, 0, 5, 10, 15, 20, 30])
    price = round(original_price * (100 - discount_percent) / 100, 0)
    return {
        "Category": category,
        "Product Name": name,
        "Price": price,
        "Pack Size": random.choice(PACK_SIZES),
        "Rating": round(random.uniform(3.0, 5.0), 1),
        "MRP": original_price,
    }


def generate_catalog(rows: int = 300, seed: int = 7) -> pl.DataFrame:
    """Build a catalog frame with roughly even category coverage"""
    random.seed(seed)
    data = []
    for _ in range(rows):
        category = random.choice(list(CATEGORIES))
        name = random.choice(CATEGORIES[category])
        data.append(generate_product(category, name))
    return pl.DataFrame(data)


if __name__ == "__main__":
    output_path = Path("data/sample-inputs/catalog.csv")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df = generate_catalog()
    df.write_csv(output_path)
    print(f"Created: {output_path} ({df.height} rows)")
