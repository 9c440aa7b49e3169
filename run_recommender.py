"""
Main Execution Script for the Activity Recommender.
Loads (or generates) a demo catalog, then runs single-user and group
recommendations plus a booking check and prints a report.
"""

import logging
import os
import sys
from datetime import datetime, timezone

# Add current directory to path so imports work
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from generators.data_factory import CatalogGenerator, load_catalog, save_catalog
from recommender.errors import BookingRejected, RecommenderError
from recommender.group import group_availability_stats
from recommender.pagination import PaginationOptions
from recommender.service import (
    BookingService,
    RecommendationService,
    build_candidates,
    resolve_preferences,
)
from recommender.settings import get_settings
from models import UserProfile

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("Main")


def acquire_catalog():
    """Cache first, then the LLM generator."""
    catalog = load_catalog(settings.cache_file) if settings.use_cache else None
    if catalog:
        return catalog

    if not settings.google_api_key:
        logger.error("❌ GOOGLE_API_KEY not found. Please set it via 'export GOOGLE_API_KEY=...'")
        return None

    logger.info("--- Phase 1: Generative AI Catalog Fetch ---")
    generator = CatalogGenerator(api_key=settings.google_api_key.get_secret_value())
    catalog, cost = generator.generate_catalog(start_date=datetime.now(timezone.utc).date())
    logger.info(f"💸 Total Estimated LLM Cost: ${cost:.4f}")
    save_catalog(catalog, settings.cache_file)
    return catalog


def main():
    logger.info("🚀 Starting Activity Recommender demo...")

    catalog = acquire_catalog()
    if not catalog or not catalog.users:
        logger.error("❌ No data available. Exiting.")
        return

    recommendations = RecommendationService(catalog, settings)
    user_ids = sorted(catalog.users)

    # --- PHASE 2: SINGLE USER ---
    logger.info("\n--- Phase 2: Single-User Recommendations ---")
    page = recommendations.user_recommendations(user_ids[0], pagination=PaginationOptions(limit=5))

    print("\n" + "=" * 50)
    print(f"📊 TOP PICKS FOR USER {user_ids[0]}")
    print("=" * 50)
    for item in page.data:
        print(f"  [{item['score']:.2f}] #{item['id']} {item['name']}")
    print(page.pagination.model_dump())

    # --- PHASE 3: GROUP ---
    if len(user_ids) >= 2:
        logger.info("\n--- Phase 3: Group Recommendations ---")
        group_ids = user_ids[:3]
        try:
            group_page = recommendations.group_recommendations(group_ids)
        except RecommenderError as e:
            logger.error(f"❌ Group recommendations failed: {e}")
        else:
            print("\n" + "=" * 50)
            print(f"👥 GROUP PICKS FOR USERS {group_ids}")
            print("=" * 50)
            for item in group_page.data:
                score = item["group_score"]
                print(
                    f"  [{score['availability_count']}/{len(group_ids)} | "
                    f"{score['aggregated_category_score']:.2f}] #{item['id']} {item['name']}"
                )

            profiles = [
                UserProfile(
                    user_id=u.id,
                    category_preferences=resolve_preferences(catalog, u),
                    calendar=u.calendar,
                )
                for u in catalog.get_users(group_ids)
            ]
            print(group_availability_stats(build_candidates(catalog), profiles))

    # --- PHASE 4: BOOKING CHECK ---
    # Try to book the top single-user pick at the start of its first window
    if page.data:
        top = catalog.get_activity(page.data[0]["id"])
        bookings = BookingService(catalog)
        start = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
        try:
            bookings.validate(user_ids[0], top.id, start, start.replace(minute=30))
            print(f"\n✅ Slot {start.isoformat()} is bookable for activity #{top.id}")
        except BookingRejected as e:
            print(f"\n❌ Slot {start.isoformat()} rejected: {e.violation.reason}")

    print("\n✅ Demo Complete.")


if __name__ == "__main__":
    main()
