"""
Cached cost reads.

Each read has a cache key, a set of tags known up front, and a compute
function that loads slices from the store and aggregates them. The compute
function also returns the tags of every row it actually read, so the entry
goes stale when any of them changes.
"""

import logging
from typing import Optional

from gangrate.core.cost import store
from gangrate.core.cost.aggregator import (
    CAMPAIGN_EXCLUSIONS,
    GANG_SHEET_EXCLUSIONS,
    ExclusionPolicy,
    compute_gang_rating,
    count_active_fighters,
    fighter_slice_cost,
    vehicle_slice_cost,
)
from gangrate.core.cost.cache import Tagged
from gangrate.core.cost.errors import ComputationInputError
from gangrate.core.cost.tags import (
    CacheTags,
    campaign_overview_tags,
    fighter_cost_tags,
    gang_campaigns_tags,
    gang_fighter_count_tags,
    gang_rating_tags,
    make_cache_key,
    vehicle_cost_tags,
)
from gangrate.core.models import Gang
from gangrate.core.models.facts import FighterSlice, GangFacts
from gangrate.tracing import traced
from gangrate.tracker import track

logger = logging.getLogger(__name__)

DEFAULT_BATTLES_LIMIT = 50


def fighter_slice_tags(fighter_slice: FighterSlice):
    return fighter_cost_tags(
        fighter_slice.fighter.id,
        vehicle_ids=[v.vehicle.id for v in fighter_slice.vehicles],
        beast_ids=[b.fighter.id for b in fighter_slice.beasts],
    )


def _empty_overview() -> dict:
    return {
        "campaign": None,
        "members": [],
        "gangs": [],
        "territories": [],
        "battles": [],
        "ratings": {},
    }


class CostReader:
    """
    Read gang ratings, fighter costs and campaign overviews through the cache.

    Args:
        cache: A TaggedCache (or NullTaggedCache)
        write_back: Refresh Gang.rating whenever the gang-sheet rating is computed
        battles_limit: Default number of battles in a campaign overview
    """

    def __init__(
        self,
        cache,
        write_back: bool = True,
        battles_limit: int = DEFAULT_BATTLES_LIMIT,
    ):
        self.cache = cache
        self.write_back = write_back
        self.battles_limit = battles_limit

    def _input_missing(self, error: ComputationInputError) -> None:
        logger.warning(f"Cost input missing: {error}")
        track("cost_input_missing", kind=error.kind, entity_id=str(error.entity_id))

    def check_rating_sync(self, gang: GangFacts, rating: int) -> None:
        """
        Compare the stored Gang.rating snapshot with the computed rating.

        The computed value wins. With write-back on, the column is refreshed.
        """
        if gang.rating == rating:
            return

        track(
            "gang_rating_out_of_sync",
            gang_id=str(gang.id),
            stored=gang.rating,
            computed=rating,
            write_back=self.write_back,
        )
        if self.write_back:
            # update() skips history and signals: this is a derived column
            Gang.objects.filter(pk=gang.id).update(rating=rating)

    # Gang

    def _gang_rating(self, gang_id, exclusions: ExclusionPolicy, check_sync: bool):
        gang, fighters, stored_vehicles = store.load_gang_slices(gang_id)
        rating = compute_gang_rating(gang, fighters, stored_vehicles, exclusions)
        if check_sync and exclusions == GANG_SHEET_EXCLUSIONS:
            self.check_rating_sync(gang, rating)

        tags = set(gang_rating_tags(gang_id))
        for fighter_slice in fighters:
            tags |= fighter_slice_tags(fighter_slice)
        for vehicle_slice in stored_vehicles:
            tags |= vehicle_cost_tags(vehicle_slice.vehicle.id)
        return rating, frozenset(tags)

    @traced("get_gang_rating")
    def get_gang_rating(
        self, gang_id, exclusions: ExclusionPolicy = GANG_SHEET_EXCLUSIONS
    ) -> int:
        """Rating of a gang under the given exclusion policy."""

        def compute():
            try:
                rating, tags = self._gang_rating(gang_id, exclusions, check_sync=True)
            except ComputationInputError as e:
                self._input_missing(e)
                return 0
            return Tagged(rating, tags)

        return self.cache.get_or_compute(
            make_cache_key("gang-rating", gang_id, exclusions=exclusions.name),
            gang_rating_tags(gang_id),
            compute,
        )

    def compute_gang_rating_direct(
        self, gang_id, exclusions: ExclusionPolicy = GANG_SHEET_EXCLUSIONS
    ) -> int:
        """Uncached gang rating. Raises ComputationInputError for a missing gang."""
        rating, _ = self._gang_rating(gang_id, exclusions, check_sync=False)
        return rating

    @traced("get_gang_fighter_count")
    def get_gang_fighter_count(
        self, gang_id, exclusions: ExclusionPolicy = GANG_SHEET_EXCLUSIONS
    ) -> int:
        def compute():
            try:
                _, fighters = store.load_gang_fighters(gang_id)
            except ComputationInputError as e:
                self._input_missing(e)
                return 0
            return count_active_fighters(fighters, exclusions)

        return self.cache.get_or_compute(
            make_cache_key("gang-fighter-count", gang_id, exclusions=exclusions.name),
            gang_fighter_count_tags(gang_id),
            compute,
        )

    @traced("get_gang_campaigns")
    def get_gang_campaigns(self, gang_id) -> list:
        def compute():
            try:
                campaigns = store.load_gang_campaigns(gang_id)
            except ComputationInputError as e:
                self._input_missing(e)
                return []
            return Tagged(
                campaigns,
                frozenset(
                    CacheTags.campaign_basic(c["campaign_id"]) for c in campaigns
                ),
            )

        return self.cache.get_or_compute(
            make_cache_key("gang-campaigns", gang_id),
            gang_campaigns_tags(gang_id),
            compute,
        )

    # Fighter

    @traced("get_fighter_total_cost")
    def get_fighter_total_cost(self, fighter_id) -> int:
        """Total cost of a fighter, including crewed vehicles and owned beasts."""

        def compute():
            try:
                fighter_slice = store.load_fighter_slice(fighter_id)
            except ComputationInputError as e:
                self._input_missing(e)
                return 0
            return Tagged(
                fighter_slice_cost(fighter_slice), fighter_slice_tags(fighter_slice)
            )

        return self.cache.get_or_compute(
            make_cache_key("fighter-cost", fighter_id),
            fighter_cost_tags(fighter_id),
            compute,
        )

    def compute_fighter_cost_direct(self, fighter_id) -> int:
        return fighter_slice_cost(store.load_fighter_slice(fighter_id))

    # Vehicle

    @traced("get_vehicle_cost")
    def get_vehicle_cost(self, vehicle_id) -> int:
        def compute():
            try:
                return vehicle_slice_cost(store.load_vehicle_slice(vehicle_id))
            except ComputationInputError as e:
                self._input_missing(e)
                return 0

        return self.cache.get_or_compute(
            make_cache_key("vehicle-cost", vehicle_id),
            vehicle_cost_tags(vehicle_id),
            compute,
        )

    def compute_vehicle_cost_direct(self, vehicle_id) -> int:
        return vehicle_slice_cost(store.load_vehicle_slice(vehicle_id))

    # Campaign

    @traced("get_campaign_overview")
    def get_campaign_overview(
        self, campaign_id, battles_limit: Optional[int] = None
    ) -> dict:
        """
        Members, territories, recent battles and gang ratings of a campaign.

        Ratings use the campaign exclusion policy and are read through the
        cache, so the overview goes stale whenever any member gang's rating does.
        """
        limit = self.battles_limit if battles_limit is None else battles_limit

        def compute():
            try:
                overview = store.load_campaign_overview(campaign_id, limit)
            except ComputationInputError as e:
                self._input_missing(e)
                return _empty_overview()

            gang_ids = [g["gang_id"] for g in overview["gangs"]]
            overview["ratings"] = {
                gang_id: self.get_gang_rating(gang_id, CAMPAIGN_EXCLUSIONS)
                for gang_id in gang_ids
            }
            return Tagged(overview, campaign_overview_tags(campaign_id, gang_ids))

        return self.cache.get_or_compute(
            make_cache_key("campaign-overview", campaign_id, battles=limit),
            campaign_overview_tags(campaign_id),
            compute,
        )
