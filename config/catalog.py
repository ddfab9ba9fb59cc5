"""
Default cleaning & safety task catalog.

Seeded into a venue by TaskDefinitionRepository.seed_defaults(). Bump
DEFAULT_CATALOG_VERSION whenever the list changes so seeded rows stay
traceable to the catalog they came from.

Structure (matches task_definitions columns):
- name / area / method: what to do and where
- frequency: daily | weekly | monthly (weekly tasks name their weekly_day)
- shift + scheduled_time: when it shows up on the checklist
- requires_quantitative_reading: sanitiser concentration (ppm) must be logged
- auto_tick_source: activity key that proves the task was done
"""

from typing import Dict, Any, List, Optional

DEFAULT_CATALOG_VERSION = "2026.1"

# Activity keys understood by the auto-tick correlator
AUTO_TICK_TEMP_CHECK = "temp_check"
AUTO_TICK_RECEIVING_LOG = "receiving_log"


def _task(
    name: str,
    area: str,
    method: str,
    shift: str,
    scheduled_time: Optional[str],
    sort_order: int,
    reading: bool = False,
    role: str = "any",
    frequency: str = "daily",
    weekly_day: Optional[str] = None,
    auto_tick_source: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "name": name,
        "area": area,
        "frequency": frequency,
        "weekly_day": weekly_day,
        "shift": shift,
        "scheduled_time": scheduled_time,
        "method": method,
        "requires_quantitative_reading": reading,
        "responsible_role": role,
        "auto_tick_source": auto_tick_source,
        "sort_order": sort_order,
    }


DEFAULT_TASKS: List[Dict[str, Any]] = [
    # Opening
    _task("Clean back area", "Kitchen", "Sweep, mop with sanitiser", "opening", "08:30", 1, reading=True),
    _task("Dispose used cooking oil", "Kitchen", "Drain into waste oil container", "opening", "08:30", 2),
    _task("Mop kitchen", "Floors", "Sweep then mop with floor cleaner", "opening", "08:30", 3),
    _task("Clean down dishwashing area", "Dish Pit", "Scrub benches, rinse machine", "opening", "08:30", 4, reading=True),
    _task("Mop cold room", "Cool Room", "Sweep, mop with sanitiser", "opening", "08:30", 5, reading=True),
    _task("Restaurant dining room cleaning", "FOH", "Vacuum, wipe tables, clean windows", "opening", "08:00", 6, role="foh"),

    # Midday
    _task("Wash/sanitise bench tops", "Kitchen", "Spray and wipe with sanitiser", "midday", "11:30", 10, reading=True),
    _task("Sweep/mop kitchen", "Floors", "Sweep then mop", "midday", "11:30", 11),
    _task("Clean down dishwashing area (PM)", "Dish Pit", "Scrub benches, clear filters", "midday", "15:30", 12, reading=True),
    _task("Clean back area (PM)", "Kitchen", "Sweep and mop", "midday", "15:30", 13),
    _task("Sweep/mop cold room (PM)", "Cool Room", "Sweep and mop with sanitiser", "midday", "15:30", 14, reading=True),
    _task("Dispose garbage/change bin liners", "Bins", "Empty bins, replace liners, clean bin if needed", "midday", "15:30", 15),

    # Closing
    _task("Sweep/mop kitchen (close)", "Floors", "Sweep, scrub, mop", "closing", "21:30", 20),
    _task("Clean down dishwashing area (close)", "Dish Pit", "Deep clean machine, scrub benches", "closing", "21:30", 21, reading=True),
    _task("Wash/sanitise bench tops (close)", "Kitchen", "Spray, wipe, sanitise all surfaces", "closing", "21:30", 22, reading=True),
    _task("Clean down fridges/benchtops/sanitise", "Cool Room", "Wipe shelves, check spillages, sanitise handles", "closing", "21:30", 23,
          reading=True, auto_tick_source=AUTO_TICK_TEMP_CHECK),
    _task("Clean grills", "Equipment", "Scrub grill plates, degrease", "closing", "21:30", 24, role="chef"),
    _task("Wash walls/tiles", "Kitchen", "Spray and wipe down all wall tiles", "closing", "21:30", 25),
    _task("Sweep/scrub/mop kitchen floor (close)", "Floors", "Full floor scrub", "closing", "21:30", 26),
    _task("Sweep/scrub/mop receiving/back area", "Kitchen", "Sweep and scrub receiving dock", "closing", "21:30", 27,
          auto_tick_source=AUTO_TICK_RECEIVING_LOG),
    _task("Sweep/scrub/mop cold room (close)", "Cool Room", "Full cold room floor clean", "closing", "21:30", 28, reading=True),
    _task("Dispose garbage/wash bins/change liners", "Bins", "Empty all bins, wash inside, new liners", "closing", "21:30", 29),
    _task("Clean down equipment and sanitise", "Equipment", "Wipe all equipment surfaces, sanitise", "closing", "21:30", 30, reading=True),
    _task("Grills degreasing", "Equipment", "Apply degreaser, scrub, rinse", "closing", "21:30", 31, role="chef"),
    _task("Restaurant/bar equipment cleaning", "FOH", "Clean all bar and restaurant equipment", "closing", "21:30", 32, role="foh"),

    # Weekly
    _task("Kitchen hoods cleaning", "Equipment", "Degrease and wash hood filters and canopy", "closing", None, 40,
          frequency="weekly", weekly_day="thursday"),
    _task("Dishwasher descaling", "Dish Pit", "Run descaling cycle, clean filters", "closing", None, 41,
          frequency="weekly", weekly_day="sunday"),
    _task("Cold room shelves cleaning/sanitising", "Cool Room", "Remove items, clean all shelves, sanitise", "closing", None, 42,
          reading=True, frequency="weekly", weekly_day="sunday"),
    _task("Garbage bins cleaning/sanitising", "Bins", "Deep clean all bins, sanitise", "closing", None, 43,
          reading=True, frequency="weekly", weekly_day="sunday"),
]
