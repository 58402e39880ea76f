# app/scripts/seed_data.py
import asyncio
import logging
from app.core.db import init_db, close_db
from app.models.catalog import Component
from app.models.facility import InventoryLocation
from app.services.catalog_service import initialize_default_data
from app.services.transaction_service import add_stock

log = logging.getLogger("seed_data")

DEMO_COMPONENTS = [
    ("217520", "351X119MM 2OZ BRIGADE 6MCA 0SE", 40),
    ("217543", "423X517MM 4OZ BRIG W/FELT 23MC", 25),
    ("217544", "281X516MM 4OZ BRIG 16MCA 60RSC", 8),
]


async def seed():
    facility = await initialize_default_data()
    main = await InventoryLocation.get(facility=facility, name="Main Inventory")
    log.info(f"Facility {facility.code}, main location {main.id}")

    for number, description, quantity in DEMO_COMPONENTS:
        component, created = await Component.get_or_create(
            component_number=number, defaults={"description": description}
        )
        # Opening stock goes through the ledger like any other arrival
        if created:
            await add_stock(component.id, main.id, quantity, notes="Opening balance")
        log.info(f"Component {number}: {'seeded' if created else 'already present'}")


async def main():
    await init_db()
    try:
        await seed()
    finally:
        await close_db()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    asyncio.run(main())
