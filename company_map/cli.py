"""Warm the geocode cache before serving the map."""

import argparse

from company_map.config import get_settings
from company_map.errors import CompanyMapError
from company_map.geocoding import GeocodeCache, Geocoder
from company_map.logging_config import setup_logging
from company_map.pipeline import load_and_geocode


def main(argv=None):
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Geocode every company row into the local cache.")
    parser.add_argument("--source", default=settings.excel_url, help="spreadsheet path or URL")
    parser.add_argument("--sheet", default=settings.sheet_name, help="sheet name (default: first sheet)")
    parser.add_argument("--cache", default=settings.cache_path, help="geocode cache file")
    parser.add_argument("--retry-failed", action="store_true", help="ask again for cached misses")
    parser.add_argument("--clear", action="store_true", help="empty the cache before geocoding")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    settings = settings.model_copy(
        update={"excel_url": args.source, "sheet_name": args.sheet, "cache_path": args.cache}
    )
    log = setup_logging("DEBUG" if args.verbose else settings.log_level)

    cache = GeocodeCache(settings.cache_path)
    if args.clear:
        cache.clear()
    geocoder = Geocoder(cache, settings)

    try:
        _, summary = load_and_geocode(settings, geocoder, retry_failed=args.retry_failed)
    except CompanyMapError as exc:
        log.error("%s", exc)
        return 1

    print(summary.message())
    print(f"Cache written to {settings.cache_path} ({len(cache)} location(s)).")
    return 0
