#!/usr/bin/env python3
"""
Smoke check for the Compagnon reference data.

Loads the equipment and rules references and prints a short summary of what
the catalogue and the competence rules will see.
"""

from compagnon.catalog import ReferenceCatalog, load_game_rules
from compagnon.config import get_settings
from compagnon.rules.inventory import apply_rupture_modifier, weight_of


def main():
    """Main check function."""
    settings = get_settings()

    print("=" * 70)
    print("Compagnon - Reference Data Check")
    print("=" * 70)

    print(f"\n📦 Loading {settings.equipment_file}...")
    catalog = ReferenceCatalog.from_file(settings.equipment_file)
    print(f"✅ {len(catalog)} items loaded")

    categories = {}
    for item in catalog:
        categories[item.category] = categories.get(item.category, 0) + 1

    print("\n📊 Items per category:")
    for category, count in sorted(categories.items()):
        print(f"     - {category}: {count}")

    print("\n🔨 Rupture with a +1 modifier:")
    for item in catalog:
        if item.rupture:
            print(f"     - {item.name}: {item.rupture} -> {apply_rupture_modifier(item.rupture, 1)}")

    print("\n⚖️  Unit weights:")
    for item in catalog.purchasable():
        print(f"     - {item.name}: {weight_of(item):g} g")

    print(f"\n📜 Loading {settings.game_rules_file}...")
    rules = load_game_rules(settings.game_rules_file)
    print(
        f"✅ {len(rules.origines)} origins, {len(rules.metiers)} jobs, "
        f"{len(rules.competences)} competences"
    )

    print("\n" + "=" * 70)


if __name__ == "__main__":
    main()
