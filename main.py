"""
RetailVoice - Fuel Station Review Analytics

CLI entry point for loading the review sheet, printing the dashboard and
watching the sheet for new reviews.
"""

import argparse
import logging
import sys

from retailvoice.agents import aggregation
from retailvoice.agents.aggregation import ReviewSortOrder
from retailvoice.errors import DataLoadError
from retailvoice.models.analytics import DashboardView, StationDetail
from retailvoice.orchestrator import DashboardOrchestrator
from retailvoice.utils.storage import StorageManager
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def _format_average(average) -> str:
    return f"{average:.2f}" if average is not None else "N/A"


def print_dashboard(view: DashboardView):
    stats = view.stats
    print("=" * 60)
    print("RetailVoice - Dashboard")
    print("=" * 60)
    print(f"Stations: {stats.total_stations}")
    print(f"Reviews: {stats.total_reviews}")
    print(f"Average rating: {_format_average(stats.overall_average)}")
    for stars, count in stats.distribution.items():
        print(f"  {stars} star{'s' if stars > 1 else ''}: {count}")
    
    for title, highlight in (("Highest rated", view.highest), ("Lowest rated", view.lowest)):
        if highlight is None:
            continue
        print()
        print(f"{title}: {highlight.rating.station.name} "
              f"({_format_average(highlight.rating.average_rating)})")
        for point in highlight.summary or []:
            print(f"  - {point}")
    
    if view.summary_error:
        print(f"\n⚠️  Failed to load station summaries: {view.summary_error}")
    
    print()
    print("Map:")
    for marker in view.markers:
        print(f"  [{marker.band:>7}] {marker.station.name}: {marker.label}")
    print("=" * 60)


def print_station_detail(detail: StationDetail):
    print("=" * 60)
    print(f"{detail.station.name} - {detail.station.address}")
    print("=" * 60)
    print(f"Average rating: {_format_average(detail.average_rating)}")
    print(f"Sentiment: {detail.sentiment.positive} positive, "
          f"{detail.sentiment.neutral} neutral, {detail.sentiment.negative} negative")
    
    if aggregation.has_trend(detail.history):
        print("Rating trend:")
        for point in detail.history:
            print(f"  {point.date}: {point.rating:.2f}")
    else:
        print("Not enough reviews to show a rating trend.")
    
    if detail.analysis:
        print(f"\nGood: {detail.analysis.summary_good}")
        print(f"Bad: {detail.analysis.summary_bad}")
        for category, rating in detail.analysis.category_ratings.items():
            print(f"  {category}: {rating.sentiment} ({rating.count})")
    elif detail.error:
        print(f"\n⚠️  {detail.error}")
    
    print(f"\nReviews ({len(detail.reviews)}):")
    for review in detail.reviews:
        stars = "★" * review.rating if review.is_rated else "unrated"
        print(f"  {stars:<7} {review.review_text}")
    print("=" * 60)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="RetailVoice - Fuel Station Review Analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the dashboard with AI highlights
  python main.py
  
  # Show one station, lowest ratings first
  python main.py --station gs_03 --sort rating-asc
  
  # Keep polling the sheet for new reviews
  python main.py --watch --interval 10 --no-ai

Note: Set GOOGLE_API_KEY environment variable to enable AI summaries.
        """
    )
    
    parser.add_argument(
        "--station",
        help="Show the detail view of one station (e.g., gs_01)"
    )
    
    parser.add_argument(
        "--sort",
        default=ReviewSortOrder.NEWEST_FIRST.value,
        choices=[order.value for order in ReviewSortOrder],
        help="Review order for --station (default: date-desc)"
    )
    
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep polling the reviews sheet and reprint stats on every update"
    )
    
    parser.add_argument(
        "--interval",
        type=float,
        default=settings.POLL_INTERVAL_SECONDS,
        help=f"Poll interval in seconds (default: {settings.POLL_INTERVAL_SECONDS})"
    )
    
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Skip Gemini summaries"
    )
    
    parser.add_argument(
        "--output-dir",
        default=str(settings.OUTPUT_ROOT),
        help=f"Report directory (default: {settings.OUTPUT_ROOT})"
    )
    
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )
    
    args = parser.parse_args()
    
    # Setup logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)
    
    if not args.no_ai and not settings.GOOGLE_API_KEY:
        logger.warning("GOOGLE_API_KEY not set; AI summaries will report a configuration error")
    
    orchestrator = DashboardOrchestrator.from_settings(
        enable_summaries=not args.no_ai,
        poll_interval_seconds=args.interval
    )
    
    try:
        orchestrator.initialize()
    except DataLoadError as e:
        logger.error(f"Startup failed: {e}")
        print(f"\n❌ {e}")
        orchestrator.close()
        sys.exit(1)
    
    storage = StorageManager(args.output_dir)
    snapshot = orchestrator.store.snapshot
    
    try:
        if args.station:
            detail = orchestrator.station_detail(args.station, ReviewSortOrder(args.sort))
            if detail is None:
                print(f"\n❌ Gas station not found: {args.station}")
                sys.exit(1)
            print_station_detail(detail)
            storage.save_station_detail(detail)
        else:
            view = orchestrator.build_dashboard()
            print_dashboard(view)
            storage.save_dashboard(view)
            storage.save_station_table(
                aggregation.build_station_table(snapshot.stations, snapshot.reviews)
            )
        
        if args.watch:
            def reprint(new_snapshot):
                stats = aggregation.dashboard_stats(new_snapshot.stations, new_snapshot.reviews)
                print(f"\n🔄 Version {new_snapshot.version}: {stats.total_reviews} reviews, "
                      f"average {_format_average(stats.overall_average)}")
            
            orchestrator.on_update(reprint)
            print(f"\nWatching for new reviews every {args.interval}s (Ctrl-C to stop)...")
            orchestrator.run_polling()
        
        logger.info("RetailVoice completed successfully")
    
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        print("\n⚠️  Interrupted")
        sys.exit(1)
    
    finally:
        orchestrator.close()


if __name__ == "__main__":
    main()
