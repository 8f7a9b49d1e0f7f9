"""
Check catalog and cart connectivity
Usage: python scripts/check_catalog.py [--search TEXT]
"""
import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from chronos.config import Settings
from chronos.services.money import round_money
from chronos.services.storefront import Storefront


async def check_catalog(search: str | None) -> bool:
    """Print facets, an optional search and the cart totals"""
    settings = Settings.from_env(Path(__file__).parent.parent / ".env")
    try:
        storefront = await Storefront.create(settings)
    except ValueError as e:
        print(f"❌ Error: {e}")
        print("   Set it in the environment or .env file")
        return False

    brands = await storefront.catalog.get_brands()
    categories = await storefront.catalog.get_categories()
    print(f"📋 Brands ({len(brands)}): {', '.join(brands) or 'none'}")
    print(f"📋 Categories ({len(categories)}): {', '.join(categories) or 'none'}")

    if search:
        products = await storefront.catalog.search(search)
        print(f"\n🔎 '{search}': {len(products)} products")
        for p in products[:10]:
            print(f"   #{p.id:<5} {p.display_name:30s} {round_money(p.price):>10}")

    cart = await storefront.cart.get_cart()
    print(f"\n🛒 Cart: {cart.item_count} items")
    print(f"   Subtotal: {round_money(cart.subtotal)}")
    print(f"   Tax:      {round_money(cart.tax)}")
    print(f"   Total:    {round_money(cart.total)}")

    await storefront.close()
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--search", help="Run a catalog search as well")
    args = parser.parse_args()
    ok = asyncio.run(check_catalog(args.search))
    sys.exit(0 if ok else 1)
