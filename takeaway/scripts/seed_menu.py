#!/usr/bin/env python3
"""Seed the default seasonal menu catalog.

Existing items are matched by name and refreshed in place; new ones are
inserted. Order lines keep referencing the same menu item ids.

Run:
    python -m takeaway.scripts.seed_menu
"""
from __future__ import annotations

import asyncio

from takeaway.core.logger import configure, get_logger
from takeaway.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from takeaway.services.menu_service import MenuService

logger = get_logger(__name__)


def _per_people(small: int, large: int):
    return [
        {"serving_size": "For 4 people", "price": small},
        {"serving_size": "For 8 people", "price": large},
    ]


def _small_large(small: int, large: int):
    return [
        {"serving_size": "Small", "price": small},
        {"serving_size": "Large", "price": large},
    ]


MENU_ITEMS = [
    # ── Roasts ────────────────────────────────────────────────────────────────
    {
        "name": "Whole Roasted Turkey",
        "description": "Served with traditional sage, apple stuffing and cranberry sauce",
        "category": "roasts",
        "pricing": [
            {"serving_size": "6kgs For 8 people", "price": 550},
            {"serving_size": "8kgs For 10 people", "price": 695},
        ],
        "allergens": ["D", "G"],
    },
    {
        "name": "Whole Roasted Turkey with Sides",
        "description": "Includes 2 side dishes and 1 small sauce. Served with sage, apple stuffing and cranberry sauce",
        "category": "roasts",
        "pricing": [
            {"serving_size": "6kgs For 8 people", "price": 650},
            {"serving_size": "8kgs For 10 people", "price": 850},
        ],
        "allergens": ["D", "G"],
    },
    {
        "name": "Honey Smoked Ham",
        "description": "Served with pineapple relish",
        "category": "roasts",
        "pricing": [
            {"serving_size": "2kgs For 6 people", "price": 490},
            {"serving_size": "4kgs For 12 people", "price": 790},
        ],
        "allergens": ["D", "P"],
    },
    {
        "name": "Wild Mushroom and Chickpea Wellington",
        "description": "Roasted parsnips, carrots, fresh herbs, walnuts, puff pastry",
        "category": "roasts",
        "pricing": [{"serving_size": "For 1 person", "price": 95}],
        "allergens": ["G", "N", "PB"],
    },
    # ── Smoked salmon ─────────────────────────────────────────────────────────
    {
        "name": "House Cured Smoked Salmon",
        "description": "Horseradish sauce, capers, dill pickle, lemon, red onion and rye bread",
        "category": "smoked_salmon",
        "pricing": [{"serving_size": "350g", "price": 150}],
        "allergens": ["G", "S"],
    },
    # ── Potatoes ──────────────────────────────────────────────────────────────
    {"name": "Creamed Potatoes", "category": "potatoes", "pricing": _per_people(65, 105), "allergens": ["D", "V"]},
    {"name": "Roasted Potatoes", "category": "potatoes", "pricing": _per_people(65, 105), "allergens": ["D", "V"]},
    # ── Vegetables ────────────────────────────────────────────────────────────
    {"name": "Brussel Sprouts", "category": "vegetables", "pricing": _per_people(70, 105), "allergens": ["D", "V"]},
    {"name": "Maple Glazed Carrots", "category": "vegetables", "pricing": _per_people(70, 105), "allergens": ["D", "V"]},
    {"name": "Cauliflower and Cheese", "category": "vegetables", "pricing": _per_people(70, 105), "allergens": ["D", "V"]},
    {"name": "Roasted Parsnips", "category": "vegetables", "pricing": _per_people(70, 105), "allergens": ["D", "V"]},
    # ── Sauces ────────────────────────────────────────────────────────────────
    {"name": "Bread Sauce", "category": "sauces", "pricing": _small_large(40, 55), "allergens": ["D", "G"]},
    {"name": "Turkey Gravy", "category": "sauces", "pricing": _small_large(45, 60), "allergens": ["D", "G"]},
    {"name": "Red Wine Jus", "category": "sauces", "pricing": _small_large(55, 70), "allergens": ["A", "D"]},
    # ── Desserts ──────────────────────────────────────────────────────────────
    {
        "name": "Homemade Mince Pie",
        "category": "desserts",
        "pricing": [{"serving_size": "Individual", "price": 10}],
        "allergens": ["D", "E", "G", "N"],
    },
    {
        "name": "Traditional German Stollen 350g",
        "category": "desserts",
        "pricing": [{"serving_size": "350g", "price": 65}],
        "allergens": ["D", "E", "G", "N"],
    },
    {
        "name": "Pecan Pie",
        "category": "desserts",
        "pricing": [{"serving_size": "For 8 people", "price": 150}],
        "allergens": ["D", "E", "G", "N"],
    },
    {
        "name": "Classic Christmas Pudding with Brandy Sauce 450g",
        "category": "desserts",
        "pricing": [{"serving_size": "450g For 6 people", "price": 120}],
        "allergens": ["A", "D", "E", "G"],
    },
    {
        "name": "Chocolate Praline Rocher Buche 1kg",
        "category": "desserts",
        "pricing": [{"serving_size": "1kg For 6 people", "price": 180}],
        "allergens": ["D", "E", "G", "N"],
    },
    {
        "name": "Homemade Candied Orange and Cranberry Panettone 500g",
        "category": "desserts",
        "pricing": [{"serving_size": "500g", "price": 80}],
        "allergens": ["D", "E", "G", "N"],
    },
]


async def seed() -> None:
    configure()
    await ensure_database_exists()
    engine = build_engine(use_null_pool=True)
    session_factory = build_session_factory(engine)
    await init_db()

    async with session_factory() as session:
        created, updated = await MenuService(session).load_catalog(MENU_ITEMS)
        await session.commit()

    await close_engine()
    logger.info("Menu seed complete: %d created, %d updated.", created, updated)


if __name__ == "__main__":
    asyncio.run(seed())
