"""Selection of restaurants from the normalized candidates.

Each stage is a pure function over a list of restaurants, chained as
dedup -> filter -> distribute -> sort by ``select_restaurants``.
"""

import logging

from route_eats.models import Restaurant, SearchOptions

logger = logging.getLogger(__name__)

# Without a stop cap, spread results only when there are more than this many
DISTRIBUTION_THRESHOLD = 30
DEFAULT_SECTION_COUNT = 6
PICKS_PER_SECTION_UNCAPPED = 5
UNCAPPED_RESULT_LIMIT = 30

NO_RESULTS_MESSAGE = "No restaurants found along your route matching your filters."


def deduplicate(restaurants: list[Restaurant]) -> list[Restaurant]:
    """One restaurant per id; a later record replaces an earlier one."""
    by_id: dict[str, Restaurant] = {}
    for restaurant in restaurants:
        by_id[restaurant.id] = restaurant
    return list(by_id.values())


def passes_filters(restaurant: Restaurant, options: SearchOptions) -> bool:
    if restaurant.rating < options.min_rating:
        return False
    # inf never passes, so failed detour lookups are excluded
    if options.consider_detour and not restaurant.detour_minutes <= options.max_detour_minutes:
        return False
    return True


def apply_filters(restaurants: list[Restaurant], options: SearchOptions) -> list[Restaurant]:
    return [r for r in restaurants if passes_filters(r, options)]


def _rank_key(restaurant: Restaurant) -> tuple[float, int]:
    return (-restaurant.rating, -restaurant.user_rating_count)


def section_index(distance: float, section_length: float, section_count: int) -> int:
    """Bucket for a distance along the route; the route end lands in the last bucket."""
    if section_length <= 0:
        return 0
    return min(section_count - 1, max(0, int(distance // section_length)))


def select_distributed(
    restaurants: list[Restaurant],
    total_distance: float,
    options: SearchOptions,
) -> list[Restaurant]:
    """Spread picks evenly along the route.

    With a stop cap ``k`` the route is cut into ``k`` equal buckets and the
    best restaurant of each is taken. Buckets with nothing in them are
    backfilled from the best remaining restaurants so ``k`` are returned
    whenever ``k`` qualify. Without a cap, only large result sets are spread:
    the best few per bucket over a fixed number of buckets.

    "Best" is highest rating, then most ratings.
    """
    cap = options.stop_cap
    if cap is None and len(restaurants) <= DISTRIBUTION_THRESHOLD:
        return list(restaurants)

    section_count = cap or DEFAULT_SECTION_COUNT
    picks_per_section = 1 if cap else PICKS_PER_SECTION_UNCAPPED
    limit = cap or UNCAPPED_RESULT_LIMIT
    section_length = total_distance / section_count

    sections: list[list[Restaurant]] = [[] for _ in range(section_count)]
    for restaurant in restaurants:
        if passes_filters(restaurant, options):
            index = section_index(restaurant.distance_from_start, section_length, section_count)
            sections[index].append(restaurant)

    selected: list[Restaurant] = []
    for index, section in enumerate(sections):
        section.sort(key=_rank_key)
        picks = section[:picks_per_section]
        selected.extend(picks)
        logger.debug(
            f"[SEARCH] Section {index + 1}: {len(section)} candidates, picked {len(picks)}"
        )

    if cap and len(selected) < cap:
        chosen = {r.id for r in selected}
        leftovers = sorted(
            (r for r in restaurants if r.id not in chosen and passes_filters(r, options)),
            key=_rank_key,
        )
        selected.extend(leftovers[:cap - len(selected)])

    logger.info(
        f"[SEARCH] Distributed {len(selected[:limit])} restaurants over {section_count} sections"
    )
    return selected[:limit]


def sort_by_route_position(restaurants: list[Restaurant]) -> list[Restaurant]:
    """Order in which a driver passes them."""
    return sorted(restaurants, key=lambda r: r.distance_from_start)


def select_restaurants(
    candidates: list[Restaurant],
    total_distance: float,
    options: SearchOptions,
) -> list[Restaurant]:
    unique = deduplicate(candidates)
    filtered = apply_filters(unique, options)
    selected = select_distributed(filtered, total_distance, options)
    return sort_by_route_position(selected)


def build_result_message(count: int, options: SearchOptions) -> str:
    """Summary of what was found, naming only the filters that applied."""
    if count == 0:
        return NO_RESULTS_MESSAGE

    noun = "restaurant" if count == 1 else "restaurants"
    message = f"Found {count} {noun}"
    if options.min_rating > 0:
        message += f" rated {options.min_rating:g}+ stars"
    if options.consider_detour:
        message += f" within {options.max_detour_minutes:g} minutes of your route"
    else:
        message += " along your route"
    if options.stop_cap:
        message += f", limited to {options.stop_cap} stops"
    return message + "."
