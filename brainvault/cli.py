import argparse
import time

from brainvault.app import SecondBrain, build_brain
from brainvault.config import load_config
from brainvault.core.models import Category
from brainvault.logging_setup import configure_logging


def _load_brain(args) -> SecondBrain:
    config = load_config(args.config)
    configure_logging(config.log_level, config.log_file)
    return build_brain(config)


def cmd_capture(args) -> None:
    brain = _load_brain(args)
    result = brain.capture(args.text, args.user)
    review = " (needs review)" if result.needs_review else ""
    print(f"Captured as {result.category.value} ({result.confidence * 100:.0f}% confidence){review}")
    print(f"File: {result.filename}")


def cmd_stats(args) -> None:
    stats = _load_brain(args).get_stats()
    print("Capture Statistics")
    print(f"Total: {stats.total}  This week: {stats.week}  Today: {stats.today}")
    for category, count in sorted(stats.by_category.items()):
        print(f"  {category}: {count}")
    print(f"Avg confidence: {stats.avg_confidence * 100:.0f}%")
    print(f"Needs review: {stats.needs_review}  Actionable: {stats.actionable}")


def cmd_review(args) -> None:
    documents = _load_brain(args).get_needs_review()
    if not documents:
        print("Nothing needs review.")
        return
    for doc in documents:
        print(f"- {doc.filename} ({doc.confidence * 100:.0f}%) - {doc.title}")
    print("Use `fix CATEGORY --file NAME` to reclassify.")


def cmd_digest(args) -> None:
    brain = _load_brain(args)
    if args.kind == "weekly":
        text = brain.generate_weekly_review()
    else:
        text = brain.generate_daily_digest()
    if args.send:
        brain.scheduler.notifier.deliver(brain.scheduler.destination_id, text)
    else:
        print(text)


def cmd_fix(args) -> None:
    result = _load_brain(args).fix_capture(args.category, args.file, args.user)
    print(result.message)
    if not result.success:
        raise SystemExit(1)


def cmd_next_runs(args) -> None:
    scheduler = _load_brain(args).scheduler
    for job_id in scheduler.enabled_jobs:
        print(f"{job_id}: {scheduler.next_run(job_id).isoformat()}")


def cmd_schedule(args) -> None:
    scheduler = _load_brain(args).scheduler
    scheduler.start()
    try:
        while True:
            time.sleep(60)
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Second brain capture and digest core")
    parser.add_argument("--config", help="Path to config.json")
    sub = parser.add_subparsers(dest="command", required=True)

    capture_cmd = sub.add_parser("capture", help="Classify and store a thought")
    capture_cmd.add_argument("text", help="Thought text")
    capture_cmd.add_argument("--user", help="User id recorded in the inbox log")
    capture_cmd.set_defaults(func=cmd_capture)

    stats_cmd = sub.add_parser("stats", help="Show capture statistics")
    stats_cmd.set_defaults(func=cmd_stats)

    review_cmd = sub.add_parser("review", help="List captures that need review")
    review_cmd.set_defaults(func=cmd_review)

    digest_cmd = sub.add_parser("digest", help="Generate a digest")
    digest_cmd.add_argument("kind", nargs="?", choices=["daily", "weekly"], default="daily")
    digest_cmd.add_argument("--send", action="store_true", help="Deliver through the notifier")
    digest_cmd.set_defaults(func=cmd_digest)

    fix_cmd = sub.add_parser("fix", help="Move a capture to another category")
    fix_cmd.add_argument("category", help=f"One of: {', '.join(Category.values())}")
    fix_cmd.add_argument("--file", help="Capture filename (default: last capture of --user)")
    fix_cmd.add_argument("--user", help="User id used to find the last capture")
    fix_cmd.set_defaults(func=cmd_fix)

    next_cmd = sub.add_parser("next-runs", help="Show when scheduled digests will fire")
    next_cmd.set_defaults(func=cmd_next_runs)

    schedule_cmd = sub.add_parser("schedule", help="Run the digest scheduler in the foreground")
    schedule_cmd.set_defaults(func=cmd_schedule)

    return parser


def main(argv=None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
