"""Seed sample blog posts and projects into Azure Blob Storage.

Usage:
    python -m scripts.seed_content

Creates the containers if needed. Every record goes through the normal
create path, so it is validated exactly like an admin submission.
"""

import asyncio
import logging

from api.services.blogs import create_blog
from api.services.projects import create_project
from api.services.record_store import get_blog_store, get_project_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

SEED_POSTS = [
    {
        "title": "Why Wetland Buffers Matter for Urban Watersheds",
        "excerpt": "Vegetated buffers filter runoff before it reaches rivers.",
        "content": (
            "<p>Riparian and wetland buffers slow stormwater, trap sediment and "
            "take up nutrients that would otherwise feed algal blooms.</p>"
        ),
        "author": "Oikos Team",
        "tags": ["wetlands", "water quality"],
        "status": "published",
        "publishedAt": "2025-03-04T09:00:00Z",
    },
    {
        "title": "Five Lessons from a Decade of Sustainability Audits",
        "excerpt": "Patterns we keep seeing across industrial sites.",
        "content": (
            "<p>Metering comes first, quick wins fund the long ones, and "
            "nobody reads a 200-page report.</p>"
        ),
        "author": "Oikos Team",
        "tags": ["audits", "energy"],
        "status": "published",
        "publishedAt": "2025-06-18T09:00:00Z",
    },
    {
        "title": "Camera Traps, Corridors & Coexistence",
        "excerpt": "Early notes from our wildlife corridor monitoring.",
        "content": "<p>Draft: results pending the monsoon season survey.</p>",
        "author": "Oikos Team",
        "tags": ["wildlife", "monitoring"],
        "status": "draft",
    },
]

SEED_PROJECTS = [
    {
        "title": "Mangrove Restoration Pilot",
        "client": "Coastal Zone Authority",
        "sector": "Ecological Restoration",
        "description": "Replanting and hydrological repair of degraded mangroves.",
        "status": "completed",
        "coordinates": [19.0330, 72.8397],
        "startYear": "2019",
        "endYear": "2022",
        "impact": ["42 ha replanted", "Tidal flow restored to 3 creeks"],
    },
    {
        "title": "Industrial Park Sustainability Audit",
        "client": "Regional Industrial Development Corp.",
        "sector": "Sustainability Audits",
        "description": "Energy, water and waste audit across 30 facilities.",
        "status": "ongoing",
        "coordinates": [18.5204, 73.8567],
        "startYear": "2024",
    },
    {
        "title": "Leopard Corridor Study",
        "client": "State Forest Department",
        "sector": "Wildlife Conservation",
        "description": "Camera-trap survey of movement between forest patches.",
        "status": "ongoing",
        "coordinates": [19.2147, 73.1569],
        "startYear": "2023",
    },
]


async def main() -> None:
    for store in (get_blog_store(), get_project_store()):
        if store.ensure_container():
            print(f"Created {store.kind} container.")

    for post in SEED_POSTS:
        created = await create_blog(post)
        print(f"  + blog {created.id}: {created.slug}")

    for project in SEED_PROJECTS:
        created = await create_project(project)
        print(f"  + project {created.id}: {created.title}")

    print(f"Seeded {len(SEED_POSTS)} posts and {len(SEED_PROJECTS)} projects.")


if __name__ == "__main__":
    asyncio.run(main())
