"""
LLM-powered demo catalog generator for the Activity Recommender.
STRATEGY: One request per entity kind (categories, activities, users), each
reply parsed robustly and validated item by item against the pydantic models.
"""

import json
import logging
import os
import re
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple, Type

import google.generativeai as genai
from pydantic import BaseModel, ValidationError

from models import parse_availability
from recommender.catalog import ActivityRecord, Category, InMemoryCatalog, UserRecord
from recommender.errors import MalformedAvailability

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


class CatalogGenerator:
    def __init__(self, api_key: Optional[str] = None, model_name: str = DEFAULT_MODEL):
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        if not self.api_key:
            raise ValueError("GOOGLE_API_KEY not found. Please set it in environment.")

        genai.configure(api_key=self.api_key)
        self.model = genai.GenerativeModel(model_name)
        self.total_cost = 0.0

    def _estimate_cost(self, prompt_tokens: int, response_tokens: int) -> float:
        return (prompt_tokens * 0.075 + response_tokens * 0.30) / 1_000_000

    def _robust_parse_json(self, raw_text: str) -> List[Any]:
        """
        Handles Markdown stripping and shape normalization.
        """
        if not raw_text:
            return []

        # 1. Clean Markdown Code Blocks
        clean_text = re.sub(r"```json\s*|\s*```", "", raw_text).strip()

        try:
            data = json.loads(clean_text)
        except json.JSONDecodeError:
            # Fallback: Try to regex extract the main list
            match = re.search(r'(\[.*\])', clean_text, re.DOTALL)
            if not match:
                return []
            try:
                data = json.loads(match.group(1))
            except json.JSONDecodeError:
                return []

        # 2. Normalize Data Shape
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in ['categories', 'activities', 'users', 'result']:
                if key in data and isinstance(data[key], list):
                    return data[key]
            return [data]
        return []

    def _fetch_batch(self, prompt: str, model_class: Type[BaseModel]) -> Tuple[List[Any], float]:
        """
        Executes a generation request and validates every returned item.
        """
        generation_config = genai.GenerationConfig(
            response_mime_type="application/json",
            max_output_tokens=16000,
            temperature=0.7
        )
        response = self.model.generate_content(prompt, generation_config=generation_config)

        cost = 0.0
        if hasattr(response, 'usage_metadata'):
            cost = self._estimate_cost(
                response.usage_metadata.prompt_token_count,
                response.usage_metadata.candidates_token_count,
            )
        self.total_cost += cost

        valid_items = []
        for i, item in enumerate(self._robust_parse_json(response.text)):
            try:
                valid_items.append(model_class(**item))
            except (TypeError, ValidationError) as e:
                logger.warning(f"Skipping invalid {model_class.__name__} {i} in batch: {e}")
        return valid_items, cost

    def generate_categories(self, count: int = 12) -> Tuple[List[Category], float]:
        prompt = f"""
        Generate a two-level category tree for a leisure activity marketplace with {count} entries.
        OUTPUT: JSON Array.
        RULES:
        - "id": unique INTEGER starting at 1.
        - Top-level categories (e.g. "Sports", "Arts", "Food") have "parent_id": null.
        - Every other entry is a subcategory whose "parent_id" is the id of a top-level category.
        FIELDS: id, name, parent_id.
        """
        return self._fetch_batch(prompt, Category)

    def generate_activities(
        self, categories: List[Category], count: int = 30, start_date: Optional[date] = None
    ) -> Tuple[List[ActivityRecord], float]:
        if start_date is None:
            start_date = date.today()
        end_date = start_date + timedelta(days=60)
        subcategory_ids = json.dumps([c.id for c in categories if c.parent_id is not None])

        prompt = f"""
        Generate {count} bookable leisure activities starting {start_date}.
        OUTPUT: A single valid JSON Array.

        STRICT SCHEMA RULES:
        1. FIELDS: id (unique INTEGER from 1), name, description, location,
           price (INTEGER cents), capacity (INTEGER >= 1), category_id, availability.
        2. "category_id" MUST be one of: {subcategory_ids}
        3. "availability" is an object with "type" in ["dates", "range", "weekly", "monthly"]
           and a payload under the key named by the type:
           - dates:   {{"type": "dates", "dates": [{{"date": "YYYY-MM-DDT00:00:00Z", "time": {{"start": "HH:MM", "end": "HH:MM"}}}}]}}
           - range:   {{"type": "range", "range": {{"date": {{"start": ISO, "end": ISO}}, "time": {{...}}}}}}
           - weekly:  {{"type": "weekly", "weekly": {{"days": [0-6, 0=Sunday], "date": {{...}}, "time": {{...}}}}}}
           - monthly: {{"type": "monthly", "monthly": {{"days": [1-31], "date": {{...}}, "time": {{...}}}}}}
           Dates use ISO 8601 UTC and fall between {start_date} and {end_date}.
           "time.end" MUST be later than "time.start" on the same day.
        4. Optional "exclusions": list of ISO instants.
        5. Use a mix of all four availability types.
        """
        activities, cost = self._fetch_batch(prompt, ActivityRecord)

        valid = []
        for activity in activities:
            try:
                parse_availability(activity.availability)
            except MalformedAvailability as e:
                logger.warning(f"Skipping activity {activity.id}: {e.reason}")
                continue
            valid.append(activity)
        return valid, cost

    def generate_users(
        self, categories: List[Category], count: int = 5, start_date: Optional[date] = None
    ) -> Tuple[List[UserRecord], float]:
        if start_date is None:
            start_date = date.today()
        subcategory_ids = json.dumps([c.id for c in categories if c.parent_id is not None])

        prompt = f"""
        Generate {count} marketplace users.
        OUTPUT: JSON Array.
        RULES:
        - "id": unique INTEGER from 1.
        - "preferences": 1-4 ids taken from {subcategory_ids}.
        - "calendar": 0-5 existing bookings within 14 days of {start_date}, each
          {{"user_id": <same as id>, "start": ISO UTC, "end": ISO UTC}} with end after start.
        FIELDS: id, name, preferences, calendar.
        """
        return self._fetch_batch(prompt, UserRecord)

    def generate_catalog(
        self,
        category_count: int = 12,
        activity_count: int = 30,
        user_count: int = 5,
        start_date: Optional[date] = None,
    ) -> Tuple[InMemoryCatalog, float]:
        logger.info("Generating catalog (3 API Calls)...")

        categories, c1 = self.generate_categories(category_count)
        activities, c2 = self.generate_activities(categories, activity_count, start_date)
        users, c3 = self.generate_users(categories, user_count, start_date)

        logger.info(
            f"✅ Generated {len(categories)} categories, {len(activities)} activities, {len(users)} users."
        )
        return InMemoryCatalog(categories, activities, users), c1 + c2 + c3


def save_catalog(catalog: InMemoryCatalog, filename: str) -> None:
    """Save a generated catalog so we don't re-query the LLM every time."""
    with open(filename, 'w') as f:
        json.dump(catalog.to_dict(), f, indent=2)
    logger.info(f"💾 Saved catalog to {filename}")


def load_catalog(filename: str) -> Optional[InMemoryCatalog]:
    """Load a cached JSON catalog, or None if it is missing or unreadable."""
    try:
        with open(filename, 'r') as f:
            data: Dict[str, Any] = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        logger.warning(f"⚠️ Cache file {filename} not found or invalid.")
        return None

    try:
        catalog = InMemoryCatalog.from_dict(data)
    except ValidationError as e:
        logger.error(f"❌ Failed to load cache: {e}")
        return None

    logger.info(
        f"📂 Cache Loaded: {len(catalog.activities)} activities, {len(catalog.users)} users."
    )
    return catalog
